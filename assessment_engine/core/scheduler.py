import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from assessment_engine.core.config import settings
from assessment_engine.core.database import SessionLocal
from assessment_engine.services.expiry import expiry_service

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


def sweep_expired_sessions():
    db = SessionLocal()
    try:
        expired_count = expiry_service.sweep_all_orgs(db)
        if expired_count:
            logger.info(f"Expiry sweep finished: {expired_count} session(s) timed out")
    except Exception as e:
        logger.error(f"Error sweeping expired sessions: {e}")
    finally:
        db.close()


def start_scheduler():
    if settings.TESTING:
        logger.info("Scheduler disabled in test environment")
        return

    if not scheduler.running:
        scheduler.add_job(
            sweep_expired_sessions,
            'interval',
            minutes=settings.EXPIRY_SWEEP_INTERVAL_MINUTES,
            id='expire_stale_sessions',
            name='Expire Stale Assessment Sessions',
            replace_existing=True,
            max_instances=1,
            coalesce=True
        )
        scheduler.start()
        logger.info(f"Scheduler started with expiry sweep every {settings.EXPIRY_SWEEP_INTERVAL_MINUTES} minute(s)")


def stop_scheduler():
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler stopped")
