"""
FastAPI dependencies: database session, shared application objects, the
calling profile and service factories.

Usage in a router:

    @router.get("/bookings")
    def list_bookings(service: BookingService = Depends(deps.get_booking_service)):
        ...
"""

import hmac
from typing import Callable, Generator, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from hallbook.config.settings import Settings
from hallbook.core.exceptions import AuthenticationError, AuthorizationError
from hallbook.core.logging import get_logger
from hallbook.models.department import Profile
from hallbook.models.enums import UserRole
from hallbook.repositories.department_repository import ProfileRepository
from hallbook.services.audit.audit_log_sink import AuditLogSink
from hallbook.services.booking.booking_lifecycle_service import BookingLifecycleService
from hallbook.services.booking.booking_service import BookingService
from hallbook.services.chatbot.chatbot_service import ChatbotService
from hallbook.services.department.hod_guard_service import HodGuardService
from hallbook.services.hall.hall_service import HallService
from hallbook.services.maintenance.maintenance_service import MaintenanceService
from hallbook.services.notification.email_notifier import EmailNotifier
from hallbook.services.notification.notification_service import NotificationService
from hallbook.services.report.report_service import ReportService

logger = get_logger(__name__)

PROFILE_HEADER = "X-Profile-Id"


# ------------------------------------------------------------------ #
# DB / application state
# ------------------------------------------------------------------ #
def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Yield a session from the application's session factory.

    The session is rolled back if the endpoint raises and always closed.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_sink(request: Request) -> AuditLogSink:
    return request.app.state.sink


def get_notifier(request: Request) -> Optional[EmailNotifier]:
    return request.app.state.notifier


# ------------------------------------------------------------------ #
# Caller identity
# ------------------------------------------------------------------ #
def get_current_profile(
    x_profile_id: Optional[str] = Header(None, alias=PROFILE_HEADER),
    db: Session = Depends(get_db),
) -> Profile:
    """
    Resolve the calling profile from the X-Profile-Id header.

    Raises 401 when the header is missing or names no known profile.
    """
    if not x_profile_id:
        raise AuthenticationError(f"Missing {PROFILE_HEADER} header")
    profile = ProfileRepository(db).find_with_roles(x_profile_id)
    if profile is None:
        raise AuthenticationError("Unknown profile")
    return profile


def require_role(*roles: UserRole) -> Callable[..., Profile]:
    """
    Dependency factory: the caller must hold at least one of `roles`.

        hod: Profile = Depends(deps.require_role(UserRole.HOD))
    """

    def _checker(profile: Profile = Depends(get_current_profile)) -> Profile:
        if not any(profile.has_role(role) for role in roles):
            raise AuthorizationError(
                "Insufficient permissions",
                required_roles=[role.value for role in roles],
            )
        return profile

    return _checker


def verify_cron_secret(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Cron triggers must send `Authorization: Bearer <CRON_SECRET>`."""
    expected = settings.CRON_SECRET
    if not expected:
        logger.warning("Cron trigger refused: CRON_SECRET is not configured")
        raise AuthenticationError("Unauthorized")
    if not authorization or not hmac.compare_digest(authorization, f"Bearer {expected}"):
        raise AuthenticationError("Unauthorized")


# ------------------------------------------------------------------ #
# Service factories
# ------------------------------------------------------------------ #
def get_booking_service(
    db: Session = Depends(get_db),
    sink: AuditLogSink = Depends(get_sink),
    notifier: Optional[EmailNotifier] = Depends(get_notifier),
) -> BookingService:
    return BookingService(db, sink, notifier)


def get_lifecycle_service(
    db: Session = Depends(get_db),
    sink: AuditLogSink = Depends(get_sink),
    notifier: Optional[EmailNotifier] = Depends(get_notifier),
    settings: Settings = Depends(get_settings),
) -> BookingLifecycleService:
    return BookingLifecycleService(db, sink, notifier, grace_minutes=settings.AUTO_REJECT_GRACE_MINUTES)


def get_maintenance_service(
    db: Session = Depends(get_db),
    sink: AuditLogSink = Depends(get_sink),
    notifier: Optional[EmailNotifier] = Depends(get_notifier),
) -> MaintenanceService:
    return MaintenanceService(db, sink, notifier)


def get_hall_service(
    db: Session = Depends(get_db),
    sink: AuditLogSink = Depends(get_sink),
) -> HallService:
    return HallService(db, sink)


def get_hod_guard_service(
    db: Session = Depends(get_db),
    sink: AuditLogSink = Depends(get_sink),
) -> HodGuardService:
    return HodGuardService(db, sink)


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


def get_report_service(db: Session = Depends(get_db)) -> ReportService:
    return ReportService(db)


def get_chatbot_service(
    db: Session = Depends(get_db),
    sink: AuditLogSink = Depends(get_sink),
    notifier: Optional[EmailNotifier] = Depends(get_notifier),
) -> ChatbotService:
    return ChatbotService(db, sink, notifier)


__all__ = [
    "get_db",
    "get_settings",
    "get_sink",
    "get_notifier",
    "get_current_profile",
    "require_role",
    "verify_cron_secret",
    "get_booking_service",
    "get_lifecycle_service",
    "get_maintenance_service",
    "get_hall_service",
    "get_hod_guard_service",
    "get_notification_service",
    "get_report_service",
    "get_chatbot_service",
]
