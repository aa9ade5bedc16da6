import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.future import select

from todo_backend.dependencies import get_db
from todo_backend.models.tasks import Task as TaskModel
from todo_backend.models.user import User as UserModel
from todo_backend.schemas.user import MessageResponse, PhotoResponse, PhotoUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user", tags=["users"])


@router.patch("/update-photo", response_model=PhotoResponse)
async def update_photo(payload: PhotoUpdate, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(UserModel).filter(UserModel.id == payload.user_id))
    user = result.scalars().first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    # A null or empty photo removes the current one
    user.profile_photo = payload.photo or ""
    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Photo update failed for %s", payload.user_id)
        raise HTTPException(status_code=500, detail="Error updating photo")

    return {"message": "Profile updated", "profile_photo": user.profile_photo}


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_account(user_id: str, db: AsyncSession = Depends(get_db)):
    # Tasks go first and are removed even when the user row is already gone
    try:
        deleted_tasks = await db.execute(delete(TaskModel).where(TaskModel.user_id == user_id))
        deleted_user = await db.execute(delete(UserModel).where(UserModel.id == user_id))
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("[ACCOUNT] Delete failed for %s", user_id)
        raise HTTPException(status_code=500, detail="Server error during deletion")

    if not deleted_user.rowcount:
        raise HTTPException(status_code=404, detail="User not found")

    logger.info("[ACCOUNT] Deleted user %s and %d tasks", user_id, deleted_tasks.rowcount)
    return {"message": "Account and all associated data deleted forever."}
