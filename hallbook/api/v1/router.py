"""
API v1 Router - Main Entry Point
Aggregates all v1 API endpoints of the hall booking service
"""
from fastapi import APIRouter

from hallbook.api.v1.endpoints import (
    analytics,
    bookings,
    chatbot,
    cron,
    departments,
    halls,
    health,
    maintenance,
    notifications,
)
from hallbook.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(
    responses={
        400: {"description": "Bad Request"},
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Not Found"},
        409: {"description": "Conflict"},
        422: {"description": "Validation Error"},
        500: {"description": "Internal Server Error"}
    }
)

router.include_router(halls.router, tags=["Hall Management"])
router.include_router(bookings.router, tags=["Booking Management"])
router.include_router(maintenance.router, tags=["Maintenance Management"])
router.include_router(departments.router, tags=["Departments"])
router.include_router(notifications.router, tags=["Notifications"])
router.include_router(chatbot.router, tags=["Chatbot"])
router.include_router(analytics.router, tags=["Analytics & Reporting"])
router.include_router(cron.router, tags=["Scheduled Jobs"])
router.include_router(health.router, tags=["Health"])

logger.debug(f"API v1 router assembled with {len(router.routes)} routes")
