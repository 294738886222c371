"""Periodic upkeep: reminder delivery, overdue marking and hold expiry.

``run_maintenance_cycle`` performs one pass against an open session and is what
the cron-style script calls. ``MaintenanceScheduler`` repeats the same pass on an
APScheduler interval, opening a fresh session for every run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, EVENT_JOB_MISSED
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session

from ..config import SessionLocal, settings
from ..services.bookings import release_expired_holds
from ..services.payments import mark_overdue_payments, tick
from ..utils.date_utils import resolve_now

logger = logging.getLogger(__name__)

JOB_ID = "estatecrm-maintenance"


@dataclass
class MaintenanceResult:
    run_at: datetime
    reminders_sent: int = 0
    overdue_payment_ids: List[int] = field(default_factory=list)
    released_booking_ids: List[int] = field(default_factory=list)


def run_maintenance_cycle(session: Session, now: Optional[datetime] = None) -> MaintenanceResult:
    timestamp = resolve_now(now)
    result = MaintenanceResult(run_at=timestamp)
    result.reminders_sent = tick(session, now=timestamp)
    result.overdue_payment_ids = mark_overdue_payments(session, as_of=timestamp.date(), now=timestamp)
    if settings.auto_release_expired_holds:
        released = release_expired_holds(session, now=timestamp)
        result.released_booking_ids = [booking.id for booking in released]
    logger.info(
        "Maintenance cycle at %s: reminders=%d overdue=%d released=%d",
        timestamp.isoformat(),
        result.reminders_sent,
        len(result.overdue_payment_ids),
        len(result.released_booking_ids),
    )
    return result


class MaintenanceScheduler:
    """Run ``run_maintenance_cycle`` on a fixed interval in a background thread."""

    def __init__(
        self,
        interval_seconds: Optional[int] = None,
        session_factory: Callable[[], Session] = SessionLocal,
    ):
        self.interval_seconds = interval_seconds or settings.scheduler_interval_seconds
        self.session_factory = session_factory
        self.last_result: Optional[MaintenanceResult] = None
        self._scheduler: Optional[BackgroundScheduler] = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def run_once(self) -> MaintenanceResult:
        with self.session_factory() as session:
            self.last_result = run_maintenance_cycle(session)
        return self.last_result

    def _on_job_event(self, event) -> None:
        if event.exception:
            logger.error("Maintenance job failed: %s", event.exception)
        elif event.code == EVENT_JOB_MISSED:
            logger.warning("Maintenance run missed at %s", event.scheduled_run_time)

    def start(self) -> None:
        if self.running:
            logger.warning("Maintenance scheduler is already running")
            return
        self._scheduler = BackgroundScheduler(
            job_defaults={"coalesce": True, "max_instances": 1},
            timezone="UTC",
        )
        self._scheduler.add_listener(self._on_job_event, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR | EVENT_JOB_MISSED)
        self._scheduler.add_job(
            self.run_once,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id=JOB_ID,
            name="Payment reminders and booking upkeep",
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info("Maintenance scheduler started (every %ss)", self.interval_seconds)

    def shutdown(self, wait: bool = True) -> None:
        if not self.running:
            logger.warning("Maintenance scheduler is not running")
            return
        self._scheduler.shutdown(wait=wait)
        self._scheduler = None
        logger.info("Maintenance scheduler stopped")
