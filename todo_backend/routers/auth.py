import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.future import select

from todo_backend.config import Settings
from todo_backend.dependencies import get_db, get_mailer, get_settings
from todo_backend.models.user import User as UserModel
from todo_backend.schemas.user import (
    EmailRequest, LoginRequest, LoginResponse, MessageResponse, OtpResponse, PasswordReset, UserCreate,
)
from todo_backend.services import otp as otp_service
from todo_backend.utils.email import Mailer, MailDeliveryError
from todo_backend.utils.security import hash_in_threadpool, verify_in_threadpool

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


async def get_user_by_email(db: AsyncSession, email: str) -> UserModel | None:
    result = await db.execute(select(UserModel).filter(UserModel.email == email))
    return result.scalars().first()


@router.post("/send-otp", response_model=OtpResponse, response_model_exclude_none=True)
async def send_otp(
    payload: EmailRequest,
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
):
    otp = await otp_service.issue_otp(db, payload.email, otp_service.PURPOSE_REGISTER, settings.OTP_TTL_MINUTES)
    try:
        await mailer.send_verification_code(payload.email, otp)
    except MailDeliveryError:
        await db.rollback()
        raise HTTPException(status_code=500, detail="Mail failed")
    await db.commit()

    if settings.OTP_ECHO:
        return {"otp": otp}
    return {"message": "Verification code sent to your email"}


@router.post("/register-final", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def register_final(payload: UserCreate, db: AsyncSession = Depends(get_db)):
    # A code is optional; when sent it must be the one mailed by send-otp
    if payload.otp is not None and not await otp_service.verify_otp(
        db, payload.email, otp_service.PURPOSE_REGISTER, payload.otp
    ):
        await db.rollback()
        raise HTTPException(status_code=400, detail="Invalid or expired code")

    password_hash = await hash_in_threadpool(payload.password)
    try:
        new_user = UserModel(
            first_name=payload.first_name,
            last_name=payload.last_name,
            email=payload.email,
            password=password_hash,
        )
        db.add(new_user)
        await db.commit()
    except IntegrityError:
        # Duplicate email lands here; clients only see the generic error
        await db.rollback()
        logger.info("Registration rejected by store constraint for %s", payload.email)
        raise HTTPException(status_code=500, detail="Database error")
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Registration failed")
        raise HTTPException(status_code=500, detail="Database error")

    return {"message": "Registration successful!"}


@router.post("/login", response_model=LoginResponse)
async def login(payload: LoginRequest, db: AsyncSession = Depends(get_db)):
    try:
        user = await get_user_by_email(db, payload.email)
    except SQLAlchemyError:
        logger.exception("Login lookup failed")
        raise HTTPException(status_code=500, detail="Server error")

    if not user or not await verify_in_threadpool(payload.password, user.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    return {"message": "Login successful", "user": user}


@router.post("/forgot-password", response_model=OtpResponse, response_model_exclude_none=True)
async def forgot_password(
    payload: EmailRequest,
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
):
    user = await get_user_by_email(db, payload.email)
    if not user:
        raise HTTPException(status_code=404, detail="No account found with this email")

    otp = await otp_service.issue_otp(db, payload.email, otp_service.PURPOSE_RESET, settings.OTP_TTL_MINUTES)
    try:
        await mailer.send_password_reset_code(payload.email, otp)
    except MailDeliveryError:
        await db.rollback()
        raise HTTPException(status_code=500, detail="Failed to send reset email")
    await db.commit()

    response = {"message": "Reset code sent to your email"}
    if settings.OTP_ECHO:
        response["otp"] = otp
    return response


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(payload: PasswordReset, db: AsyncSession = Depends(get_db)):
    user = await get_user_by_email(db, payload.email)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    if not await otp_service.verify_otp(db, payload.email, otp_service.PURPOSE_RESET, payload.otp):
        await db.rollback()
        raise HTTPException(status_code=400, detail="Invalid or expired code")

    try:
        user.password = await hash_in_threadpool(payload.new_password)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Password update failed for %s", payload.email)
        raise HTTPException(status_code=500, detail="Error updating password")

    logger.info("Password reset for %s", payload.email)
    return {"message": "Password updated successfully! You can now login."}
