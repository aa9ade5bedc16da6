"""Password and one-time-code hashing."""
import secrets

from fastapi.concurrency import run_in_threadpool
from passlib.context import CryptContext


# Password hashing context; rounds are set from Settings by configure_hashing()
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=10,
)

OTP_MIN = 100000
OTP_MAX = 999999


def configure_hashing(rounds: int) -> None:
    pwd_context.update(bcrypt__rounds=rounds)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password."""
    return pwd_context.verify(_truncate_for_bcrypt(plain_password), hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password with a fresh random salt."""
    return pwd_context.hash(_truncate_for_bcrypt(password))


async def hash_in_threadpool(secret: str) -> str:
    # bcrypt is CPU-bound; keep it off the event loop
    return await run_in_threadpool(get_password_hash, secret)


async def verify_in_threadpool(secret: str, hashed: str) -> bool:
    return await run_in_threadpool(verify_password, secret, hashed)


def _truncate_for_bcrypt(password: str) -> str:
    """Truncate password to bcrypt's 72-byte limit.

    Truncation happens on the UTF-8 encoded bytes and decodes with 'ignore'
    so a multi-byte sequence is never split.
    """
    if not isinstance(password, str):
        return password
    b = password.encode("utf-8")[:72]
    return b.decode("utf-8", "ignore")


def generate_otp() -> int:
    """Random 6-digit code in [100000, 999999]."""
    return OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1)
