"""
In-process scheduler for the booking lifecycle jobs.

Each job runs on its own fixed interval in an asyncio task. A run executes in
a worker thread with its own database session. A failing run is recorded in
``logs_system`` and the next run proceeds normally.
"""

import asyncio
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Set

from sqlalchemy.orm import Session

from hallbook.config.settings import Settings
from hallbook.core.exceptions import SchedulerRunFailure
from hallbook.core.logging import get_logger, get_struct_logger
from hallbook.services.audit.audit_log_sink import AuditLogSink
from hallbook.services.booking.booking_lifecycle_service import (
    AUTO_COMPLETE_JOB,
    AUTO_REJECT_JOB,
    BookingLifecycleService,
    LifecycleRunReport,
)
from hallbook.services.notification.email_notifier import EmailNotifier

logger = get_logger(__name__).add_context(component="lifecycle_scheduler")
events = get_struct_logger(__name__)

SessionFactory = Callable[[], Session]


@dataclass
class SchedulerConfig:
    """Configuration for the lifecycle scheduler."""
    auto_reject_interval_seconds: float = 300
    auto_complete_interval_seconds: float = 300
    auto_reject_grace_minutes: int = 0

    @classmethod
    def from_settings(cls, settings: Settings) -> "SchedulerConfig":
        return cls(
            auto_reject_interval_seconds=settings.AUTO_REJECT_INTERVAL_SECONDS,
            auto_complete_interval_seconds=settings.AUTO_COMPLETE_INTERVAL_SECONDS,
            auto_reject_grace_minutes=settings.AUTO_REJECT_GRACE_MINUTES,
        )


class LifecycleScheduler:
    """
    Owns the periodic auto-reject and auto-complete jobs.

    `start()` and `stop()` are called from the application's startup and
    shutdown hooks. `start()` is idempotent.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        sink: AuditLogSink,
        notifier: Optional[EmailNotifier] = None,
        config: Optional[SchedulerConfig] = None,
    ):
        self.session_factory = session_factory
        self.sink = sink
        self.notifier = notifier
        self.config = config or SchedulerConfig()
        self._tasks: List[asyncio.Task] = []
        # job runs still executing in worker threads
        self._runs: Set[asyncio.Future] = set()
        self._intervals: Dict[str, float] = {
            AUTO_REJECT_JOB: self.config.auto_reject_interval_seconds,
            AUTO_COMPLETE_JOB: self.config.auto_complete_interval_seconds,
        }

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    async def start(self) -> None:
        if self._tasks:
            logger.info("Lifecycle scheduler already running")
            return
        for job_name, interval in self._intervals.items():
            self._tasks.append(asyncio.create_task(self._loop(job_name, interval), name=job_name))
        logger.info(f"Lifecycle scheduler started ({', '.join(self._intervals)})")

    async def stop(self) -> None:
        if not self._tasks:
            return
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        # cancelling a loop does not stop its worker thread
        if self._runs:
            await asyncio.gather(*self._runs, return_exceptions=True)
        logger.info("Lifecycle scheduler stopped")

    async def _loop(self, job_name: str, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            run = asyncio.ensure_future(asyncio.to_thread(self.run_job, job_name))
            self._runs.add(run)
            run.add_done_callback(self._runs.discard)
            try:
                await asyncio.shield(run)
            except Exception as e:
                logger.error(f"Lifecycle job {job_name} crashed: {e}", exc_info=True, extra={"job": job_name})

    def run_job(self, job_name: str) -> Optional[LifecycleRunReport]:
        """
        Run one job once with a fresh session.

        Returns:
            The run report, or None when the run failed
        """
        session: Optional[Session] = None
        try:
            session = self.session_factory()
            service = BookingLifecycleService(
                session,
                self.sink,
                self.notifier,
                grace_minutes=self.config.auto_reject_grace_minutes,
            )
            if job_name == AUTO_REJECT_JOB:
                report = service.auto_reject_stale_pending()
            elif job_name == AUTO_COMPLETE_JOB:
                report = service.auto_complete_past_approved()
            else:
                raise ValueError(f"Unknown lifecycle job '{job_name}'")
            events.info("lifecycle_job_finished", job=job_name, transitioned=report.count)
            return report
        except Exception as e:
            failure = SchedulerRunFailure(job_name, e)
            logger.error(failure.message, exc_info=True, extra={"job": job_name})
            self.sink.log_system(
                source=job_name,
                message=failure.message,
                severity="error",
                exc=e,
                context=failure.details,
            )
            return None
        finally:
            if session is not None:
                session.close()
