from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

_SCHEDULED_JOB_EXCEPTIONS = (OSError, RuntimeError, ValueError, SQLAlchemyError)


def parse_run_time(value: str) -> time:
    parts = value.strip().split(":")
    if len(parts) < 2:
        raise ValueError("run time must be in HH:MM format")
    hour = int(parts[0])
    minute = int(parts[1])
    second = int(parts[2]) if len(parts) > 2 else 0
    return time(hour=hour, minute=minute, second=second)


def next_daily_run(run_time: time, *, now: datetime) -> datetime:
    candidate = now.replace(
        hour=run_time.hour,
        minute=run_time.minute,
        second=run_time.second,
        microsecond=0,
    )
    if candidate <= now:
        candidate = candidate + timedelta(days=1)
    return candidate


@dataclass
class DailyJob:
    name: str
    run_time: time
    func: Callable[[], object]
    run_in_thread: bool = True
    next_run: Optional[datetime] = None
    last_result: object = None
    last_error: Optional[str] = None


class Scheduler:
    """Polls registered daily jobs from a daemon thread."""

    def __init__(self, *, timezone_mode: str = "local", poll_seconds: int = 1):
        self._jobs: dict[str, DailyJob] = {}
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._poll_seconds = max(1, int(poll_seconds))
        self._tz = timezone.utc if timezone_mode.lower() == "utc" else None

    def _now(self) -> datetime:
        return datetime.now(tz=self._tz)

    def add_daily_job(
        self,
        name: str,
        run_time: str,
        func: Callable[[], object],
        *,
        run_in_thread: bool = True,
    ) -> DailyJob:
        job = DailyJob(
            name=name,
            run_time=parse_run_time(run_time),
            func=func,
            run_in_thread=run_in_thread,
        )
        job.next_run = next_daily_run(job.run_time, now=self._now())
        with self._lock:
            if name in self._jobs:
                raise ValueError("Job already registered: {}".format(name))
            self._jobs[name] = job
        return job

    def get_job(self, name: str) -> DailyJob:
        with self._lock:
            job = self._jobs.get(name)
        if job is None:
            raise LookupError("Unknown job: {}".format(name))
        return job

    @property
    def running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name="scheduler",
            daemon=True,
        )
        self._thread.start()
        logger.info("Scheduler started with %d job(s).", len(self._jobs))

    def stop(self) -> None:
        if not self._thread:
            return
        self._stop_event.set()
        self._thread.join(timeout=self._poll_seconds + 1)
        self._thread = None
        logger.info("Scheduler stopped.")

    def wait(self, timeout: float) -> bool:
        return self._stop_event.wait(timeout)

    def run_pending(self) -> None:
        now = self._now()
        with self._lock:
            jobs = list(self._jobs.values())
        for job in jobs:
            if job.next_run and now >= job.next_run:
                job.next_run = next_daily_run(job.run_time, now=now)
                self._dispatch(job)

    def run_now(self, name: str) -> object:
        job = self.get_job(name)
        self._safe_run(job)
        return job.last_result

    def _dispatch(self, job: DailyJob) -> None:
        logger.info("Running scheduled job: %s", job.name)
        if job.run_in_thread:
            threading.Thread(
                target=self._safe_run,
                args=(job,),
                name=f"job-{job.name}",
                daemon=True,
            ).start()
        else:
            self._safe_run(job)

    @staticmethod
    def _safe_run(job: DailyJob) -> None:
        try:
            job.last_result = job.func()
            job.last_error = None
        except _SCHEDULED_JOB_EXCEPTIONS as exc:
            job.last_error = str(exc)
            logger.exception("Scheduled job failed: %s", job.name, extra={"job": job.name})

    def _run(self) -> None:
        while not self._stop_event.is_set():
            self.run_pending()
            self._stop_event.wait(self._poll_seconds)


def build_scheduler(settings, auto_reorder_job: Callable[[], object]) -> Scheduler:
    scheduler = Scheduler(
        timezone_mode=settings.SCHEDULER_TZ,
        poll_seconds=settings.SCHEDULER_POLL_SECONDS,
    )
    scheduler.add_daily_job("auto-reorder", settings.AUTO_REORDER_RUN_TIME, auto_reorder_job)
    return scheduler
