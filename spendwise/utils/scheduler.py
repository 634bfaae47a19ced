"""
Scheduler Service
Runs the expired-insight reaper as an APScheduler interval job
"""
import logging
from typing import Any, Dict

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from spendwise.core.config import settings

logger = logging.getLogger(__name__)

REAPER_JOB_ID = "purge_expired_insights"

scheduler: BackgroundScheduler = None


def purge_expired_insights_job():
    """Job function: delete cached insights whose expiry has passed"""
    from spendwise.routers.deps import get_insight_cache

    try:
        removed = get_insight_cache().purge_expired()
        logger.info(f"Insight reaper removed {removed} expired entries")
        return removed
    except Exception as e:
        logger.error(f"Insight reaper failed: {str(e)}")
        return 0


def start_scheduler(interval_minutes: int = None):
    """Start the background scheduler with the reaper job"""
    global scheduler

    if scheduler is not None:
        logger.warning("Scheduler is already running")
        return

    interval_minutes = interval_minutes or settings.INSIGHT_REAPER_INTERVAL_MINUTES
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        purge_expired_insights_job,
        trigger=IntervalTrigger(minutes=interval_minutes),
        id=REAPER_JOB_ID,
        name="Purge expired AI insights",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(f"Scheduler started, purging expired insights every {interval_minutes} minutes")


def stop_scheduler():
    """Stop the background scheduler"""
    global scheduler

    if scheduler is not None:
        scheduler.shutdown()
        scheduler = None
        logger.info("Scheduler stopped")


def get_scheduler_status() -> Dict[str, Any]:
    """Get current scheduler status"""
    if scheduler is None:
        return {"running": False}

    jobs = []
    for job in scheduler.get_jobs():
        jobs.append({
            "id": job.id,
            "name": job.name,
            "next_run": str(job.next_run_time) if job.next_run_time else None
        })

    return {
        "running": scheduler.running,
        "jobs": jobs
    }
