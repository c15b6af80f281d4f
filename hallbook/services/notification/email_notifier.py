"""
Email notifications rendered from jinja2 templates.

Each send attempt records exactly one NotificationLog (sent or failed).
Delivery problems are reported in that log and in the application log;
they never propagate to the workflow that triggered the email.
"""

from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

import jinja2
from jinja2 import Environment, FileSystemLoader, select_autoescape

from hallbook.config.settings import Settings
from hallbook.core.logging import get_logger
from hallbook.services.audit.audit_log_sink import AuditLogSink
from hallbook.utils.email import EmailConfig, EmailError, EmailMessage, build_email, send_email

logger = get_logger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent.parent / "templates" / "email"

EMAIL_SUBJECTS: Dict[str, str] = {
    "booking_pending": "New Seminar Hall Booking Request",
    "booking_approved": "Your booking has been approved",
    "booking_rejected": "Your booking was rejected",
    "booking_auto_rejected": "Your booking was automatically rejected",
    "maintenance_request_approved": "Maintenance request approved",
    "maintenance_request_rejected": "Maintenance request rejected",
}

Sender = Callable[[EmailMessage, EmailConfig], None]


class TemplateEngine:
    """Renders the per-event email templates"""

    def __init__(self, template_dir: Path = TEMPLATE_DIR):
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(['html', 'xml']),
            undefined=jinja2.StrictUndefined,
        )

    def render(self, event: str, context: Dict[str, Any]) -> Tuple[str, str]:
        """Return (subject, html) for an event."""
        if event not in EMAIL_SUBJECTS:
            raise EmailError(f"Unknown email event '{event}'")
        template = self.env.get_template(f"{event}.html")
        return EMAIL_SUBJECTS[event], template.render(**context)


class EmailNotifier:

    def __init__(
        self,
        settings: Settings,
        sink: AuditLogSink,
        sender: Sender = send_email,
        engine: Optional[TemplateEngine] = None,
    ):
        self.settings = settings
        self.sink = sink
        self._sender = sender
        self._engine = engine or TemplateEngine()

    def send(
        self,
        event: str,
        to: str,
        context: Dict[str, Any],
        booking_id: Optional[str] = None,
        maintenance_id: Optional[str] = None,
    ) -> bool:
        """
        Render and send one notification email.

        Returns:
            True when the message was handed to the SMTP server
        """
        subject = EMAIL_SUBJECTS.get(event)
        full_context = {
            "app_name": self.settings.APP_NAME,
            "dashboard_url": f"{self.settings.APP_BASE_URL.rstrip('/')}/dashboard",
            "booking_id": booking_id,
            **context,
        }
        try:
            subject, html = self._engine.render(event, full_context)
            message = build_email(
                subject=subject,
                to=[to],
                body_html=html,
                from_email=self.settings.EMAIL_FROM_ADDRESS,
            )
            self._sender(message, EmailConfig.from_settings(self.settings))
        except (EmailError, jinja2.TemplateError) as e:
            logger.warning(f"Email '{event}' to {to} not delivered: {e}")
            self.sink.log_notification(
                event=event,
                to=to,
                status="failed",
                subject=subject,
                error=str(e),
                booking_id=booking_id,
                maintenance_id=maintenance_id,
            )
            return False

        self.sink.log_notification(
            event=event,
            to=to,
            status="sent",
            subject=subject,
            booking_id=booking_id,
            maintenance_id=maintenance_id,
        )
        return True
