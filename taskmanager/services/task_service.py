from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional
from uuid import UUID

from sqlmodel import Session, select

from taskmanager.core.config import settings
from taskmanager.core.errors import FIELD_MESSAGES, NotFoundError, ValidationError, validate_payload
from taskmanager.models.task import Task, TaskPriority, TaskStatus
from taskmanager.models.user import utcnow
from taskmanager.schemas.task import SortField, SortOrder, TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)

_SORT_COLUMNS = {
    SortField.created_at: Task.created_at,
    SortField.updated_at: Task.updated_at,
    SortField.due_date: Task.due_date,
    SortField.title: Task.title,
    SortField.status: Task.status,
    SortField.priority: Task.priority,
}


def _parse_task_id(task_id: UUID | str) -> Optional[UUID]:
    if isinstance(task_id, UUID):
        return task_id
    try:
        return UUID(str(task_id))
    except ValueError:
        return None


def _coerce(enum_cls, value, field: str):
    if value is None or value == "":
        return None
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError([{"field": field, "message": FIELD_MESSAGES[field]}])


def _get_owned(db: Session, owner_id: UUID, task_id: UUID | str) -> Task:
    """Fetch by id AND owner; someone else's task looks exactly like a missing one."""
    tid = _parse_task_id(task_id)
    task = None
    if tid is not None:
        task = db.exec(select(Task).where(Task.id == tid, Task.user_id == owner_id)).first()
    if task is None:
        raise NotFoundError("Task not found")
    return task


def list_tasks(
    db: Session,
    owner_id: UUID,
    *,
    status: TaskStatus | str | None = None,
    priority: TaskPriority | str | None = None,
    sort_by: SortField | str = SortField.created_at,
    sort_order: SortOrder | str = SortOrder.desc,
    limit: Optional[int] = None,
) -> List[Task]:
    status = _coerce(TaskStatus, status, "status")
    priority = _coerce(TaskPriority, priority, "priority")
    sort_by = _coerce(SortField, sort_by, "sortBy") or SortField.created_at
    sort_order = _coerce(SortOrder, sort_order, "sortOrder") or SortOrder.desc

    if limit is None:
        limit = settings.task_list_default_limit
    if not 1 <= limit <= settings.task_list_max_limit:
        raise ValidationError([{"field": "limit", "message": FIELD_MESSAGES["limit"]}])

    stmt = select(Task).where(Task.user_id == owner_id)
    if status is not None:
        stmt = stmt.where(Task.status == status.value)
    if priority is not None:
        stmt = stmt.where(Task.priority == priority.value)

    column = _SORT_COLUMNS[sort_by]
    stmt = stmt.order_by(column.desc() if sort_order is SortOrder.desc else column.asc(), Task.id)
    return list(db.exec(stmt.limit(limit)).all())


def get_task(db: Session, owner_id: UUID, task_id: UUID | str) -> Task:
    return _get_owned(db, owner_id, task_id)


def create_task(db: Session, owner_id: UUID, fields: TaskCreate | Mapping[str, Any]) -> Task:
    data = validate_payload(TaskCreate, fields)
    task = Task(user_id=owner_id, **data.model_dump())
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info("Created task %s for user %s", task.id, owner_id)
    return task


def update_task(
    db: Session, owner_id: UUID, task_id: UUID | str, fields: TaskUpdate | Mapping[str, Any]
) -> Task:
    data = validate_payload(TaskUpdate, fields)
    task = _get_owned(db, owner_id, task_id)

    changes = data.model_dump(exclude_unset=True)
    if changes:
        for field, value in changes.items():
            setattr(task, field, value)
        task.updated_at = utcnow()
        db.add(task)
        db.commit()
        db.refresh(task)
        logger.info("Updated task %s (%s)", task.id, ", ".join(sorted(changes)))
    return task


def delete_task(db: Session, owner_id: UUID, task_id: UUID | str) -> None:
    task = _get_owned(db, owner_id, task_id)
    tid = task.id
    db.delete(task)
    db.commit()
    logger.info("Deleted task %s for user %s", tid, owner_id)
