from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Index
from sqlmodel import SQLModel, Field

from taskmanager.models.user import utcnow


class TaskStatus(str, Enum):
    pending = "pending"
    in_progress = "in-progress"
    completed = "completed"


class TaskPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


class Task(SQLModel, table=True):
    __tablename__ = "tasks"

    __table_args__ = (
        Index("ix_tasks_user_created", "user_id", "created_at"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id")  # owner, never reassigned
    title: str = Field(max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    # enum values as plain strings ("in-progress" is not a valid identifier)
    status: str = Field(default=TaskStatus.pending.value, max_length=20)
    priority: str = Field(default=TaskPriority.medium.value, max_length=10)
    due_date: Optional[datetime] = Field(default=None, sa_type=DateTime)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
