"""
Booking lifecycle scheduler.
"""

from hallbook.services.scheduler.lifecycle_scheduler import LifecycleScheduler, SchedulerConfig

__all__ = ["LifecycleScheduler", "SchedulerConfig"]
