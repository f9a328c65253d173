import atexit

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.schedulers.background import BackgroundScheduler

from talentflow.jobs.backfill import backfill_business_days_elapsed
from talentflow.logging_config import get_logger

logger = get_logger(__name__)


def init_scheduler(app):
    """Start the background scheduler running the business-days backfill."""

    # Only one process should run the scheduler
    if not app.config.get("SCHEDULER_ENABLED"):
        logger.info("Skipping scheduler startup on this worker")
        return None

    def run_backfill():
        with app.app_context():
            try:
                backfill_business_days_elapsed()
            except Exception as exc:
                logger.error("Business days backfill failed", error=str(exc), exc_info=True)

    executors = {"default": ThreadPoolExecutor(1)}
    scheduler = BackgroundScheduler(executors=executors)

    scheduler.add_job(
        func=run_backfill,
        trigger="interval",
        minutes=app.config.get("BACKFILL_INTERVAL_MINUTES", 5),
        id="backfill_business_days_elapsed",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

    scheduler.start()
    atexit.register(lambda: scheduler.shutdown(wait=False))

    logger.info("Scheduler started", interval_minutes=app.config.get("BACKFILL_INTERVAL_MINUTES", 5))
    return scheduler
