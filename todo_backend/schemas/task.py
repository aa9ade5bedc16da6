from pydantic import Field, field_validator
from datetime import datetime
from todo_backend.schemas.user import CamelModel


class TaskCreate(CamelModel):
    user_id: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)

    @field_validator("text", mode="before")
    @classmethod
    def strip(cls, v):
        # Free text is stored as written, minus surrounding whitespace
        return v.strip() if isinstance(v, str) else v


class Task(CamelModel):
    id: int
    user_id: str
    text: str
    completed: bool
    created_at: datetime
