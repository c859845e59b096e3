"""Scheduler service for periodic feed imports."""

from datetime import datetime, timezone
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from jobboard.logging import get_logger

from .exceptions import FeedError

logger = get_logger(__name__, component="scheduler")

JOB_ID = "feed-import"


class FeedScheduler:
    """
    Wraps APScheduler to run the feed importer at a fixed interval.

    Runs in a BackgroundScheduler worker thread next to the web server's
    event loop; broadcasts from the import are marshalled back onto that
    loop by the Broadcaster.
    """

    def __init__(self, import_callable: Callable[[], object], interval_seconds: int):
        """
        Args:
            import_callable: Function to call on each run (e.g. FeedImporter.run_once)
            interval_seconds: Interval between runs in seconds
        """
        self.import_callable = import_callable
        self.interval_seconds = interval_seconds

        self.scheduler = BackgroundScheduler(
            job_defaults={
                "max_instances": 1,  # Never overlap imports
                "coalesce": True,
                "misfire_grace_time": interval_seconds,
            },
            timezone=timezone.utc,
        )

    def start(self, run_immediately: bool = True) -> None:
        """Register the import job and start the scheduler thread."""
        next_run = datetime.now(timezone.utc) if run_immediately else None
        job_kwargs = {"next_run_time": next_run} if next_run else {}

        self.scheduler.add_job(
            func=self.run_import,
            trigger=IntervalTrigger(seconds=self.interval_seconds, timezone=timezone.utc),
            id=JOB_ID,
            name="Job Feed Import",
            replace_existing=True,
            **job_kwargs,
        )
        self.scheduler.start()

        logger.info(
            f"Feed scheduler started with interval: {self.interval_seconds} seconds",
            extra={
                "event": "scheduler.started",
                "interval_seconds": self.interval_seconds,
                "run_immediately": run_immediately,
            },
        )

    def run_import(self) -> None:
        """One scheduled run. Feed failures are logged and retried next interval."""
        try:
            self.import_callable()
        except FeedError as e:
            logger.warning(
                f"Feed import failed: {e}",
                extra={"event": "scheduler.run.failed", "error_type": type(e).__name__},
            )
        except Exception as e:
            logger.error(
                f"Unexpected error during feed import: {e}",
                extra={"event": "scheduler.run.failed", "error_type": type(e).__name__},
                exc_info=True,
            )

    def shutdown(self, wait: bool = False) -> None:
        logger.info(
            "Shutting down feed scheduler",
            extra={"event": "scheduler.stopping", "wait_for_jobs": wait},
        )
        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)
        logger.info("Feed scheduler shutdown complete", extra={"event": "scheduler.stopped"})

    def is_running(self) -> bool:
        return self.scheduler.running

    def get_next_run_time(self) -> Optional[datetime]:
        job = self.scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None
