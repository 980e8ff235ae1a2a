"""Periodic trigger for publish batches"""

import logging
from datetime import datetime

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.interval import IntervalTrigger

from blogpub.models.batch import BatchReport
from blogpub.services.pipeline import PublishPipeline

logger = logging.getLogger(__name__)

JOB_ID = "blog_publish"


class PublishScheduler:
    """Runs the publish pipeline on an interval, one batch at a time"""

    def __init__(self, pipeline: PublishPipeline):
        self.pipeline = pipeline
        self.scheduler: BaseScheduler | None = None

    def configure(self, scheduler: BaseScheduler, interval_minutes: int) -> None:
        """
        Register the publish job on a scheduler

        Args:
            scheduler: Initialized (not yet started) APScheduler scheduler
            interval_minutes: Minutes between publish cycles
        """
        self.scheduler = scheduler

        trigger = IntervalTrigger(minutes=interval_minutes, start_date=datetime.now())

        # The pipeline has no locking of its own; never let two batches overlap
        self.scheduler.add_job(
            self.run_cycle,
            trigger=trigger,
            id=JOB_ID,
            name="Blog publish",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
            next_run_time=datetime.now(),
        )

        logger.info(f"Scheduled publish every {interval_minutes} minute(s)")

    def run_cycle(self) -> BatchReport | None:
        """Run one batch; failures are logged so the next cycle still runs"""
        try:
            return self.pipeline.run()
        except Exception as e:
            logger.error(f"Publish cycle failed: {e}", exc_info=True)
            return None

    def stop(self) -> None:
        """Remove the publish job"""
        if self.scheduler:
            try:
                self.scheduler.remove_job(JOB_ID)
                logger.info("Stopped publish scheduler")
            except JobLookupError:
                logger.warning("Publish job not found during shutdown")
