"""
In-app and email notifications.
"""

from hallbook.services.notification.email_notifier import EmailNotifier, TemplateEngine
from hallbook.services.notification.notification_service import NotificationService

__all__ = ["EmailNotifier", "NotificationService", "TemplateEngine"]
