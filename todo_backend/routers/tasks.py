import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.future import select

from todo_backend.dependencies import get_db
from todo_backend.models.tasks import Task as TaskModel
from todo_backend.models.user import User as UserModel
from todo_backend.schemas.task import Task as TaskSchema, TaskCreate
from todo_backend.schemas.user import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.get("/{user_id}", response_model=list[TaskSchema])
async def list_tasks(user_id: str, db: AsyncSession = Depends(get_db)):
    try:
        result = await db.execute(
            select(TaskModel)
            .filter(TaskModel.user_id == user_id)
            .order_by(TaskModel.created_at.desc(), TaskModel.id.desc())
        )
    except SQLAlchemyError:
        logger.exception("Listing tasks failed for %s", user_id)
        raise HTTPException(status_code=500, detail="Error fetching tasks")
    return result.scalars().all()


@router.post("", response_model=TaskSchema, status_code=status.HTTP_201_CREATED)
async def create_task(payload: TaskCreate, db: AsyncSession = Depends(get_db)):
    owner = await db.get(UserModel, payload.user_id)
    if not owner:
        raise HTTPException(status_code=404, detail="User not found")

    task = TaskModel(user_id=payload.user_id, text=payload.text, completed=False)
    db.add(task)
    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Saving task failed for %s", payload.user_id)
        raise HTTPException(status_code=500, detail="Error saving task")
    await db.refresh(task)
    return task


@router.patch("/{task_id}", response_model=TaskSchema)
async def toggle_task(task_id: int, db: AsyncSession = Depends(get_db)):
    task = await db.get(TaskModel, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")

    task.completed = not task.completed
    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Updating task %s failed", task_id)
        raise HTTPException(status_code=500, detail="Error updating task")
    return task


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(task_id: int, db: AsyncSession = Depends(get_db)):
    # Deleting an absent task is not an error
    try:
        await db.execute(delete(TaskModel).where(TaskModel.id == task_id))
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Deleting task %s failed", task_id)
        raise HTTPException(status_code=500, detail="Error deleting task")
    return {"message": "Task deleted"}
