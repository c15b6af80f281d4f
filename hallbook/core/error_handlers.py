"""
Exception handlers translating application exceptions into JSON responses.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from hallbook.core.exceptions import BaseAppException
from hallbook.core.logging import get_logger

logger = get_logger(__name__)


async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")
    else:
        logger.info(
            f"{exc.__class__.__name__} on {request.url.path}",
            extra={"error_code": exc.error_code.value, "status_code": exc.status_code},
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BaseAppException, app_exception_handler)
