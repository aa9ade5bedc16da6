from datetime import datetime, timedelta, timezone

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from todo_backend.models.otp import OtpCode
from todo_backend.utils.security import generate_otp, hash_in_threadpool, verify_in_threadpool

PURPOSE_REGISTER = "register"
PURPOSE_RESET = "reset"


def _now() -> datetime:
    return datetime.now(timezone.utc)


async def issue_otp(db: AsyncSession, email: str, purpose: str, ttl_minutes: int) -> int:
    """
    Generate a code for (email, purpose), replacing any earlier one.
    Only the hash is stored. The caller commits.
    """
    otp = generate_otp()
    await db.execute(
        delete(OtpCode).where(OtpCode.email == email, OtpCode.purpose == purpose)
    )
    db.add(OtpCode(
        email=email,
        purpose=purpose,
        code_hash=await hash_in_threadpool(str(otp)),
        expires_at=_now() + timedelta(minutes=ttl_minutes),
    ))
    await db.flush()
    return otp


async def verify_otp(db: AsyncSession, email: str, purpose: str, code: str) -> bool:
    """Check a code against the live record and consume it on success."""
    result = await db.execute(
        select(OtpCode).filter(
            OtpCode.email == email,
            OtpCode.purpose == purpose,
            OtpCode.expires_at > _now(),
        )
    )
    record = result.scalars().first()
    if record is None or not await verify_in_threadpool(str(code).strip(), record.code_hash):
        return False

    await db.delete(record)
    await db.flush()
    return True


async def purge_expired(db: AsyncSession) -> int:
    result = await db.execute(delete(OtpCode).where(OtpCode.expires_at <= _now()))
    await db.commit()
    return result.rowcount or 0
