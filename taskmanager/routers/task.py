# taskmanager/routers/task.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from taskmanager.core.config import settings
from taskmanager.db.session import get_session
from taskmanager.dependencies.auth import get_current_user
from taskmanager.models.user import User
from taskmanager.schemas.common import MessageResponse
from taskmanager.schemas.task import (
    SortField,
    SortOrder,
    TaskCreate,
    TaskRead,
    TaskStats,
    TaskUpdate,
)
from taskmanager.services import stats_service, task_service

router = APIRouter(prefix="/tasks", tags=["Tasks"])


@router.get("/stats/summary", response_model=TaskStats)
def get_task_stats(
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    return stats_service.summarize(db, user.id)


@router.get("", response_model=List[TaskRead])
def list_tasks(
    # checked by the service; an empty value means "no filter"
    task_status: Optional[str] = Query(None, alias="status", description="pending | in-progress | completed"),
    priority: Optional[str] = Query(None, description="low | medium | high"),
    sort_by: SortField = Query(SortField.created_at, alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.desc, alias="sortOrder"),
    limit: int = Query(settings.task_list_default_limit, ge=1, le=settings.task_list_max_limit),
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    tasks = task_service.list_tasks(
        db,
        user.id,
        status=task_status,
        priority=priority,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
    )
    return [TaskRead.model_validate(t) for t in tasks]


@router.get("/{task_id}", response_model=TaskRead)
def get_task(
    task_id: str,
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    return TaskRead.model_validate(task_service.get_task(db, user.id, task_id))


@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
def create_task(
    payload: TaskCreate,
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    return TaskRead.model_validate(task_service.create_task(db, user.id, payload))


@router.put("/{task_id}", response_model=TaskRead)
def update_task(
    task_id: str,
    payload: TaskUpdate,
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    return TaskRead.model_validate(task_service.update_task(db, user.id, task_id, payload))


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(
    task_id: str,
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    task_service.delete_task(db, user.id, task_id)
    return MessageResponse(message="Task deleted successfully")
