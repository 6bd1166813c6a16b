"""
Background scheduler for the ledger's periodic jobs
Handles:
- Streak decay just after midnight
- Monthly leaderboard rollover on the first day of each month
"""

import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from questify.database import SessionLocal
from questify.services.gamification_service import GamificationService
from questify.services.text_generation import StaticTextProvider, TextGenerator

logger = logging.getLogger("questify.scheduler")

# Create scheduler instance
scheduler = AsyncIOScheduler()


def _job_service(db) -> GamificationService:
    # Jobs never generate text
    return GamificationService(db, text_generator=TextGenerator(StaticTextProvider()))


async def run_streak_decay():
    """Job: reset streaks of users who missed yesterday"""
    db = SessionLocal()
    try:
        reset_count = _job_service(db).run_daily_streak_decay()
        logger.info(f"Streak decay finished: {reset_count} streaks reset")
    except Exception as e:
        logger.error(f"Scheduler Error (Streak Decay): {e}")
    finally:
        db.close()


async def run_monthly_rollover():
    """Job: archive last month's leaderboard and reset monthly points"""
    db = SessionLocal()
    try:
        result = _job_service(db).run_monthly_rollover()
        logger.info(
            f"Monthly rollover finished: {result['archived_count']} archived for "
            f"{result['year']}-{result['month']:02d}"
        )
    except Exception as e:
        logger.error(f"Scheduler Error (Monthly Rollover): {e}")
    finally:
        db.close()


def start_scheduler():
    """Start the scheduler"""
    if not scheduler.running:
        scheduler.add_job(
            run_streak_decay,
            CronTrigger(hour=0, minute=0),
            id='streak_decay',
            replace_existing=True
        )

        scheduler.add_job(
            run_monthly_rollover,
            CronTrigger(day=1, hour=0, minute=1),
            id='monthly_rollover',
            replace_existing=True
        )

        scheduler.start()
        logger.info(">>> APScheduler STARTED <<<")
        logger.info(f"Scheduled jobs: {[job.id for job in scheduler.get_jobs()]}")


def stop_scheduler():
    """Stop the scheduler"""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("APScheduler stopped")
