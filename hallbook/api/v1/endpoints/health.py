"""
Liveness endpoint.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.orm import Session

from hallbook.api import deps

router = APIRouter()


@router.get("/health")
def health(request: Request, db: Session = Depends(deps.get_db)):
    db.execute(text("SELECT 1"))
    scheduler = getattr(request.app.state, "scheduler", None)
    return {
        "status": "ok",
        "version": request.app.version,
        "scheduler_running": bool(scheduler and scheduler.running),
    }
