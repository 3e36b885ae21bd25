from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler

from ..core.constants import BACKFILL_HOUR, BACKFILL_MINUTE
from .service import AttendanceService

logger = logging.getLogger(__name__)

JOB_ID = "mark-absent-previous-day"


class AbsenceBackfillScheduler:
    """Runs the absence backfill for the previous calendar day once a day.

    The target is always "yesterday"; the service ignores non-working days.
    """

    def __init__(
        self,
        attendance_service: AttendanceService,
        *,
        scheduler: Optional[BackgroundScheduler] = None,
        today: Callable[[], date] = date.today,
        hour: int = BACKFILL_HOUR,
        minute: int = BACKFILL_MINUTE,
    ):
        self._service = attendance_service
        self._scheduler = scheduler or BackgroundScheduler()
        self._today = today
        self._hour = hour
        self._minute = minute

    def run_once(self) -> int:
        target = self._today() - timedelta(days=1)
        try:
            return self._service.mark_absent_for_date(target)
        except Exception:
            logger.exception("Absence backfill for %s failed", target)
            raise

    def start(self) -> None:
        self._scheduler.add_job(
            self.run_once,
            "cron",
            hour=self._hour,
            minute=self._minute,
            id=JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()
        logger.info("Absence backfill scheduled daily at %02d:%02d", self._hour, self._minute)

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
