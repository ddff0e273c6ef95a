from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import ConfigDict, Field, field_validator

from taskmanager.models.task import TaskPriority, TaskStatus
from taskmanager.schemas.common import CamelModel


class SortField(str, Enum):
    """Columns a task list may be ordered by."""

    created_at = "createdAt"
    updated_at = "updatedAt"
    due_date = "dueDate"
    title = "title"
    status = "status"
    priority = "priority"


class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"


class _TaskInput(CamelModel):
    # Unknown keys (id, userId, createdAt, ...) are dropped, never written.
    model_config = ConfigDict(str_strip_whitespace=True, use_enum_values=True, extra="ignore")

    @field_validator("description", mode="after", check_fields=False)
    @classmethod
    def _blank_description_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @field_validator("due_date", mode="before", check_fields=False)
    @classmethod
    def _blank_due_date_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("due_date", mode="after", check_fields=False)
    @classmethod
    def _due_date_naive_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and v.tzinfo is not None:
            v = v.astimezone(timezone.utc).replace(tzinfo=None)
        return v


class TaskCreate(_TaskInput):
    title: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    status: TaskStatus = TaskStatus.pending.value
    priority: TaskPriority = TaskPriority.medium.value
    due_date: Optional[datetime] = None


class TaskUpdate(_TaskInput):
    """Partial update; only fields present in the payload are applied."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None

    @field_validator("title", "status", "priority", mode="before")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v


class TaskRead(CamelModel):
    id: UUID
    user_id: UUID
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class TaskStats(CamelModel):
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    high_priority: int = 0
