from uuid import UUID

from sqlalchemy import case
from sqlmodel import Session, func, select

from taskmanager.models.task import Task, TaskPriority, TaskStatus
from taskmanager.schemas.task import TaskStats


def _count_where(condition):
    # SUM over zero rows is NULL
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


def summarize(db: Session, owner_id: UUID) -> TaskStats:
    """Per-owner task counts in one aggregate query; an owner with no tasks gets zeros."""
    stmt = select(
        func.count(Task.id),
        _count_where(Task.status == TaskStatus.pending.value),
        _count_where(Task.status == TaskStatus.in_progress.value),
        _count_where(Task.status == TaskStatus.completed.value),
        _count_where(Task.priority == TaskPriority.high.value),
    ).where(Task.user_id == owner_id)

    total, pending, in_progress, completed, high = db.exec(stmt).one()
    return TaskStats(
        total=total or 0,
        pending=pending or 0,
        in_progress=in_progress or 0,
        completed=completed or 0,
        high_priority=high or 0,
    )
