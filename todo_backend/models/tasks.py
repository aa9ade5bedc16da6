from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Boolean
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from todo_backend.database import Base
from todo_backend.models.user import User


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Task(Base):
    __tablename__ = "tasks"

    # Database-assigned, so it also orders tasks created within one clock tick
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(String(32), ForeignKey(User.id, ondelete="CASCADE"), index=True, nullable=False)
    text = Column(Text, nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    owner = relationship("User", back_populates="tasks")
