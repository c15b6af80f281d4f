"""Auto-reject / auto-complete transitions and the scheduler around them."""

import asyncio
import threading
import time
from datetime import timedelta

from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker

from hallbook.models.booking import Booking, BookingLog
from hallbook.models.enums import BookingStatus, NotificationType
from hallbook.models.notification import Notification
from hallbook.services.booking.booking_lifecycle_service import (
    AUTO_COMPLETE_JOB,
    AUTO_REJECT_JOB,
    AUTO_REJECT_REASON,
    BookingLifecycleService,
)
from hallbook.services.scheduler.lifecycle_scheduler import LifecycleScheduler, SchedulerConfig
from hallbook.utils.email import EmailError


def _status(db, booking_id):
    db.expire_all()
    return db.get(Booking, booking_id).status


def test_stale_pending_is_auto_rejected_once(db, sink, notifier, log_db, make_booking, teacher, now):
    stale = make_booking(now - timedelta(hours=1))
    future = make_booking(now + timedelta(days=1))

    report = BookingLifecycleService(db, sink, notifier).auto_reject_stale_pending(now)

    assert report.booking_ids == [stale.id]
    assert _status(db, stale.id) == BookingStatus.AUTO_REJECTED
    assert db.get(Booking, stale.id).rejection_reason == AUTO_REJECT_REASON
    assert _status(db, future.id) == BookingStatus.PENDING

    logs = db.execute(select(BookingLog).where(BookingLog.booking_id == stale.id)).scalars().all()
    assert [(log.action, log.performed_by) for log in logs] == [("Auto Rejected", teacher.id)]

    notes = db.execute(select(Notification).where(Notification.user_id == teacher.id)).scalars().all()
    assert [n.type for n in notes] == [NotificationType.BOOKING_AUTO_REJECTED]

    sent = list(log_db["logs_notifications"].find({"reference.bookingId": stale.id}))
    assert len(sent) == 1
    assert sent[0]["event"] == "booking_auto_rejected"
    assert sent[0]["status"] == "sent"

    action = log_db["logs_user_actions"].find_one({"entity.id": stale.id})
    assert action["actorId"] == "system"
    assert action["role"] == "system"
    assert action["action"] == "booking_auto_rejected"


def test_second_run_changes_nothing(db, sink, notifier, log_db, make_booking, now):
    stale = make_booking(now - timedelta(hours=1))
    service = BookingLifecycleService(db, sink, notifier)

    assert service.auto_reject_stale_pending(now).count == 1
    assert service.auto_reject_stale_pending(now).count == 0
    assert log_db["logs_notifications"].count_documents({"reference.bookingId": stale.id}) == 1


def test_failed_email_still_logs_exactly_once(db, sink, notifier, email_sender, log_db, make_booking, now):
    email_sender.fail_with = EmailError("SMTP unavailable")
    stale = make_booking(now - timedelta(minutes=5))

    report = BookingLifecycleService(db, sink, notifier).auto_reject_stale_pending(now)

    assert report.count == 1
    entries = list(log_db["logs_notifications"].find({"reference.bookingId": stale.id}))
    assert len(entries) == 1
    assert entries[0]["status"] == "failed"
    assert entries[0]["error"]["message"] == "SMTP unavailable"


def test_without_mail_channel_in_app_delivery_is_logged(db, sink, log_db, make_booking, now):
    stale = make_booking(now - timedelta(minutes=5))

    BookingLifecycleService(db, sink).auto_reject_stale_pending(now)

    entries = list(log_db["logs_notifications"].find({"reference.bookingId": stale.id}))
    assert [(e["channel"], e["status"]) for e in entries] == [("in_app", "sent")]


def test_grace_period_delays_auto_reject(db, sink, make_booking, now):
    booking = make_booking(now - timedelta(minutes=10))

    service = BookingLifecycleService(db, sink, grace_minutes=30)
    assert service.auto_reject_stale_pending(now).count == 0
    assert _status(db, booking.id) == BookingStatus.PENDING

    assert service.auto_reject_stale_pending(now + timedelta(minutes=25)).count == 1


def test_ended_approved_booking_is_auto_completed(db, sink, log_db, make_booking, now):
    ended = make_booking(now - timedelta(hours=3), hours=2, status=BookingStatus.APPROVED)
    running = make_booking(now - timedelta(minutes=30), hours=2, status=BookingStatus.APPROVED)

    report = BookingLifecycleService(db, sink).auto_complete_past_approved(now)

    assert report.booking_ids == [ended.id]
    assert _status(db, ended.id) == BookingStatus.AUTO_COMPLETED
    assert _status(db, running.id) == BookingStatus.APPROVED
    logs = db.execute(select(BookingLog).where(BookingLog.booking_id == ended.id)).scalars().all()
    assert [log.action for log in logs] == ["Auto Completed"]
    action = log_db["logs_user_actions"].find_one({"entity.id": ended.id})
    assert action["action"] == "booking_auto_completed"
    assert action["actorId"] == "system"


def test_terminal_bookings_are_never_touched(db, sink, log_db, make_booking, now):
    past = now - timedelta(days=2)
    terminal = [
        make_booking(past, status=status)
        for status in (
            BookingStatus.REJECTED,
            BookingStatus.AUTO_REJECTED,
            BookingStatus.CANCELLED,
            BookingStatus.COMPLETED,
            BookingStatus.AUTO_COMPLETED,
        )
    ]
    service = BookingLifecycleService(db, sink)

    assert service.auto_reject_stale_pending(now).count == 0
    assert service.auto_complete_past_approved(now).count == 0
    assert [_status(db, b.id) for b in terminal] == [
        BookingStatus.REJECTED,
        BookingStatus.AUTO_REJECTED,
        BookingStatus.CANCELLED,
        BookingStatus.COMPLETED,
        BookingStatus.AUTO_COMPLETED,
    ]
    assert log_db["logs_user_actions"].count_documents({}) == 0


def test_booking_moved_concurrently_is_skipped(db, session_factory, sink, log_db, make_booking, now):
    booking = make_booking(now - timedelta(hours=1))
    service = BookingLifecycleService(db, sink)
    stale = service.repository.stale_pending(now)

    # another writer approves it after the scan
    other = session_factory()
    try:
        other.get(Booking, booking.id).status = BookingStatus.APPROVED
        other.commit()
    finally:
        other.close()

    service.repository.stale_pending = lambda cutoff: stale
    report = service.auto_reject_stale_pending(now)

    assert report.count == 0
    assert _status(db, booking.id) == BookingStatus.APPROVED
    assert log_db["logs_notifications"].count_documents({}) == 0


# ---------------------------------------------------------------------------
# Scheduler
# ---------------------------------------------------------------------------

def test_scheduler_run_job_uses_fresh_session(session_factory, sink, make_booking, db, now):
    booking = make_booking(now - timedelta(days=1))
    scheduler = LifecycleScheduler(session_factory, sink)

    report = scheduler.run_job(AUTO_REJECT_JOB)

    assert report.booking_ids == [booking.id]
    assert _status(db, booking.id) == BookingStatus.AUTO_REJECTED


def test_scheduler_failure_is_recorded_and_swallowed(sink, log_db):
    # an engine without tables makes every query fail
    broken = sessionmaker(bind=create_engine("sqlite://"))
    scheduler = LifecycleScheduler(broken, sink)

    assert scheduler.run_job(AUTO_COMPLETE_JOB) is None

    entry = log_db["logs_system"].find_one({"source": AUTO_COMPLETE_JOB})
    assert entry["severity"] == "error"
    assert "Traceback" in entry["stack"]
    assert entry["context"]["job"] == AUTO_COMPLETE_JOB

    # the next run proceeds normally
    assert scheduler.run_job(AUTO_COMPLETE_JOB) is None
    assert log_db["logs_system"].count_documents({"source": AUTO_COMPLETE_JOB}) == 2


def test_scheduler_start_is_idempotent_and_stop_cancels(session_factory, sink):
    scheduler = LifecycleScheduler(
        session_factory, sink, config=SchedulerConfig(3600, 3600)
    )

    async def scenario():
        await scheduler.start()
        await scheduler.start()
        assert scheduler.running
        assert len(scheduler._tasks) == 2
        await scheduler.stop()
        assert not scheduler.running

    asyncio.run(scenario())


def test_scheduler_loop_runs_jobs(session_factory, sink):
    scheduler = LifecycleScheduler(
        session_factory, sink, config=SchedulerConfig(0.01, 3600)
    )
    calls = []
    scheduler.run_job = calls.append

    async def scenario():
        await scheduler.start()
        await asyncio.sleep(0.1)
        await scheduler.stop()

    asyncio.run(scenario())
    assert AUTO_REJECT_JOB in calls
    assert AUTO_COMPLETE_JOB not in calls


def test_scheduler_loop_survives_session_failure(sink, log_db):
    opened = []

    def failing_factory():
        opened.append(True)
        raise RuntimeError("connection pool exhausted")

    scheduler = LifecycleScheduler(failing_factory, sink, config=SchedulerConfig(0.01, 3600))

    async def scenario():
        await scheduler.start()
        await asyncio.sleep(0.3)
        assert all(not task.done() for task in scheduler._tasks)
        await scheduler.stop()

    asyncio.run(scenario())
    assert len(opened) >= 2
    entries = list(log_db["logs_system"].find({"source": AUTO_REJECT_JOB}))
    assert len(entries) == len(opened)
    assert "connection pool exhausted" in entries[0]["message"]


def test_scheduler_stop_waits_for_running_job(session_factory, sink, log_db):
    scheduler = LifecycleScheduler(session_factory, sink, config=SchedulerConfig(0.01, 3600))
    started = threading.Event()

    def slow_job(job_name):
        started.set()
        time.sleep(0.3)
        sink.log_system(job_name, "finished late", severity="info")

    scheduler.run_job = slow_job

    async def scenario():
        await scheduler.start()
        while not started.is_set():
            await asyncio.sleep(0.01)
        await scheduler.stop()

    asyncio.run(scenario())
    assert log_db["logs_system"].count_documents({"message": "finished late"}) == 1
    assert not scheduler._runs
