"""
Fire-and-forget writer for the audit collections.

Three append-only collections are written:

* ``logs_notifications`` - one entry per notification delivery attempt
* ``logs_user_actions`` - who did what to which entity
* ``logs_system`` - failures of background work and other internal errors

Every document is stamped with ``createdAt`` at write time. A failed write is
retried a bounded number of times and then reported through the application
logger; it never reaches the caller.
"""

import traceback
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any, Dict, Optional

from hallbook.core.exceptions import LoggingFailure
from hallbook.core.logging import get_logger
from hallbook.services.audit.log_store import MongoLogStore
from hallbook.utils.datetime_utils import utcnow

logger = get_logger(__name__)

NOTIFICATIONS_COLLECTION = "logs_notifications"
USER_ACTIONS_COLLECTION = "logs_user_actions"
SYSTEM_COLLECTION = "logs_system"

SYSTEM_ACTOR = "system"


class AuditLogSink:
    """
    Writes audit documents to the log store.

    Args:
        store: Document store
        max_retries: Retries after the first failed attempt
        executor: When given, writes are submitted to it; otherwise they run inline
    """

    def __init__(
        self,
        store: MongoLogStore,
        max_retries: int = 2,
        executor: Optional[Executor] = None,
    ):
        self.store = store
        self.max_retries = max(0, max_retries)
        self._executor = executor

    @classmethod
    def with_thread_pool(cls, store: MongoLogStore, max_retries: int, workers: int) -> "AuditLogSink":
        pool = ThreadPoolExecutor(max_workers=max(1, workers), thread_name_prefix="audit-log")
        return cls(store, max_retries=max_retries, executor=pool)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def log_notification(
        self,
        event: str,
        to: str,
        status: str,
        channel: str = "email",
        subject: Optional[str] = None,
        error: Optional[str] = None,
        booking_id: Optional[str] = None,
        maintenance_id: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        document: Dict[str, Any] = {
            "category": "notification",
            "channel": channel,
            "event": event,
            "to": to,
            "status": status,
        }
        reference = {}
        if booking_id:
            reference["bookingId"] = booking_id
        if maintenance_id:
            reference["maintenanceId"] = maintenance_id
        if reference:
            document["reference"] = reference
        if subject:
            document["subject"] = subject
        if error:
            document["error"] = {"message": error}
        if payload:
            document["payload"] = payload
        self._submit(NOTIFICATIONS_COLLECTION, document)

    def log_user_action(
        self,
        actor_id: str,
        role: str,
        action: str,
        entity_type: str,
        entity_id: str,
        meta: Optional[Dict[str, Any]] = None,
    ) -> None:
        document: Dict[str, Any] = {
            "actorId": actor_id,
            "role": role,
            "action": action,
            "entity": {"type": entity_type, "id": entity_id},
        }
        if meta:
            document["meta"] = meta
        self._submit(USER_ACTIONS_COLLECTION, document)

    def log_system(
        self,
        source: str,
        message: str,
        severity: str = "error",
        exc: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        document: Dict[str, Any] = {
            "source": source,
            "severity": severity,
            "message": message,
        }
        if exc is not None:
            document["stack"] = "".join(
                traceback.format_exception(type(exc), exc, exc.__traceback__)
            )
        if context:
            document["context"] = context
        self._submit(SYSTEM_COLLECTION, document)

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _submit(self, collection: str, document: Dict[str, Any]) -> None:
        if self._executor is None:
            self._write(collection, document)
            return
        try:
            self._executor.submit(self._write, collection, document)
        except RuntimeError:
            # Executor already shut down
            self._write(collection, document)

    def _write(self, collection: str, document: Dict[str, Any]) -> bool:
        try:
            self._insert(collection, document)
            return True
        except LoggingFailure as failure:
            logger.error(
                failure.message,
                extra={
                    **failure.details,
                    "error": str(failure.__cause__),
                    "document_keys": sorted(document.keys()),
                },
            )
            return False

    def _insert(self, collection: str, document: Dict[str, Any]) -> None:
        """
        Insert with bounded retries.

        Raises:
            LoggingFailure: When every attempt failed
        """
        attempts = self.max_retries + 1
        last_error: Optional[Exception] = None
        for attempt in range(1, attempts + 1):
            try:
                self.store.collection(collection).insert_one({**document, "createdAt": utcnow()})
                return
            except Exception as e:  # any store failure counts as a failed attempt
                last_error = e
                logger.debug(f"Audit write to {collection} failed (attempt {attempt}/{attempts}): {e}")
        raise LoggingFailure(collection, attempts) from last_error
