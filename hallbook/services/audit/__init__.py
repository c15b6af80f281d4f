"""
Audit log store and sink.
"""

from hallbook.services.audit.audit_log_sink import (
    NOTIFICATIONS_COLLECTION,
    SYSTEM_ACTOR,
    SYSTEM_COLLECTION,
    USER_ACTIONS_COLLECTION,
    AuditLogSink,
)
from hallbook.services.audit.log_store import MongoLogStore

__all__ = [
    "AuditLogSink",
    "MongoLogStore",
    "NOTIFICATIONS_COLLECTION",
    "SYSTEM_ACTOR",
    "SYSTEM_COLLECTION",
    "USER_ACTIONS_COLLECTION",
]
