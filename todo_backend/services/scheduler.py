import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from todo_backend.services.otp import purge_expired

logger = logging.getLogger(__name__)


async def purge_expired_otps(sessionmaker: async_sessionmaker[AsyncSession]) -> int:
    logger.info("[SCHEDULER] Purging expired verification codes...")
    async with sessionmaker() as db:
        try:
            removed = await purge_expired(db)
        except SQLAlchemyError:
            await db.rollback()
            logger.exception("[SCHEDULER] Error during OTP purge")
            return 0
    logger.info("[SCHEDULER] Removed %d expired codes", removed)
    return removed


def setup_scheduler(sessionmaker: async_sessionmaker[AsyncSession], interval_minutes: int) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler()

    scheduler.add_job(
        purge_expired_otps,
        IntervalTrigger(minutes=interval_minutes),
        args=[sessionmaker],
        id="purge_expired_otps",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

    scheduler.start()
    logger.info("[SCHEDULER] Started (OTP purge every %d min)", interval_minutes)
    return scheduler
