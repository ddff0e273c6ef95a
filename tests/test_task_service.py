from datetime import datetime
from uuid import uuid4

import pytest
from sqlalchemy import DateTime
from sqlmodel import select

from taskmanager.core.errors import NotFoundError, ValidationError
from taskmanager.models.task import Task
from taskmanager.models.user import User
from taskmanager.services import task_service


@pytest.fixture
def alice(make_user):
    return make_user("alice")[1]


@pytest.fixture
def bob(make_user):
    return make_user("bob")[1]


def test_create_applies_defaults(session, alice):
    task = task_service.create_task(session, alice.id, {"title": "Write report"})

    assert task.user_id == alice.id
    assert task.status == "pending"
    assert task.priority == "medium"
    assert task.description is None
    assert task.due_date is None


@pytest.mark.parametrize(
    "column",
    [User.__table__.c.created_at, Task.__table__.c.due_date, Task.__table__.c.created_at, Task.__table__.c.updated_at],
)
def test_datetime_columns_store_naive_utc(column):
    assert type(column.type) is DateTime
    assert column.type.timezone is False


def test_naive_due_date_persists(session, alice):
    created = task_service.create_task(session, alice.id, {"title": "Pay rent", "dueDate": "2030-02-01"})
    session.expire_all()

    stored = session.exec(select(Task).where(Task.id == created.id)).one()

    assert stored.due_date == datetime(2030, 2, 1)
    assert stored.created_at.tzinfo is None


def test_create_then_get_round_trips_user_fields(session, alice):
    fields = {
        "title": "Plan trip",
        "description": "Book flights and hotel",
        "status": "in-progress",
        "priority": "high",
        "dueDate": "2030-01-15T09:30:00Z",
    }

    created = task_service.create_task(session, alice.id, fields)
    fetched = task_service.get_task(session, alice.id, str(created.id))

    assert fetched.id == created.id
    assert fetched.title == "Plan trip"
    assert fetched.description == "Book flights and hotel"
    assert fetched.status == "in-progress"
    assert fetched.priority == "high"
    assert fetched.due_date == datetime(2030, 1, 15, 9, 30)


@pytest.mark.parametrize("title", ["", "   ", None])
def test_create_rejects_empty_title_without_persisting(session, alice, title):
    with pytest.raises(ValidationError) as excinfo:
        task_service.create_task(session, alice.id, {"title": title})

    assert excinfo.value.errors == [
        {"field": "title", "message": "Title is required and must be less than 100 characters"}
    ]
    assert session.exec(select(Task)).all() == []


def test_create_rejects_missing_title(session, alice):
    with pytest.raises(ValidationError) as excinfo:
        task_service.create_task(session, alice.id, {"description": "No title"})

    assert excinfo.value.fields() == ["title"]


@pytest.mark.parametrize(
    ("fields", "bad_field"),
    [
        ({"title": "x" * 101}, "title"),
        ({"title": "ok", "description": "d" * 501}, "description"),
        ({"title": "ok", "status": "done"}, "status"),
        ({"title": "ok", "priority": "urgent"}, "priority"),
        ({"title": "ok", "dueDate": "next tuesday"}, "dueDate"),
    ],
)
def test_create_validates_each_field(session, alice, fields, bad_field):
    with pytest.raises(ValidationError) as excinfo:
        task_service.create_task(session, alice.id, fields)

    assert excinfo.value.fields() == [bad_field]


def test_create_ignores_owner_and_id_in_payload(session, alice, bob):
    forced_id = uuid4()

    task = task_service.create_task(
        session, alice.id, {"title": "Mine", "userId": str(bob.id), "id": str(forced_id)}
    )

    assert task.user_id == alice.id
    assert task.id != forced_id


def test_other_user_cannot_see_or_touch_task(session, alice, bob):
    task = task_service.create_task(session, alice.id, {"title": "Private"})

    with pytest.raises(NotFoundError):
        task_service.get_task(session, bob.id, task.id)
    with pytest.raises(NotFoundError):
        task_service.update_task(session, bob.id, task.id, {"title": "Hijacked"})
    with pytest.raises(NotFoundError):
        task_service.delete_task(session, bob.id, task.id)

    assert task_service.get_task(session, alice.id, task.id).title == "Private"


@pytest.mark.parametrize("task_id", [uuid4(), "not-a-uuid", ""])
def test_get_unknown_or_malformed_id_is_not_found(session, alice, task_id):
    with pytest.raises(NotFoundError):
        task_service.get_task(session, alice.id, task_id)


def test_update_is_partial(session, alice):
    task = task_service.create_task(
        session, alice.id, {"title": "Original", "description": "keep me", "priority": "low"}
    )
    created_at = task.created_at

    updated = task_service.update_task(session, alice.id, task.id, {"status": "completed"})

    assert updated.status == "completed"
    assert updated.title == "Original"
    assert updated.description == "keep me"
    assert updated.priority == "low"
    assert updated.created_at == created_at
    assert updated.updated_at >= created_at


def test_update_can_clear_optional_fields(session, alice):
    task = task_service.create_task(
        session, alice.id, {"title": "T", "description": "d", "dueDate": "2030-02-01"}
    )

    updated = task_service.update_task(
        session, alice.id, task.id, {"description": "", "dueDate": None}
    )

    assert updated.description is None
    assert updated.due_date is None


@pytest.mark.parametrize("field", ["title", "status", "priority"])
def test_update_rejects_null_for_required_fields(session, alice, field):
    task = task_service.create_task(session, alice.id, {"title": "T"})

    with pytest.raises(ValidationError) as excinfo:
        task_service.update_task(session, alice.id, task.id, {field: None})

    assert excinfo.value.fields() == [field]


def test_update_never_reassigns_owner(session, alice, bob):
    task = task_service.create_task(session, alice.id, {"title": "T"})

    updated = task_service.update_task(
        session, alice.id, task.id, {"userId": str(bob.id), "title": "Renamed"}
    )

    assert updated.user_id == alice.id
    assert updated.title == "Renamed"


def test_delete_removes_task(session, alice):
    task = task_service.create_task(session, alice.id, {"title": "Temp"})

    task_service.delete_task(session, alice.id, task.id)

    with pytest.raises(NotFoundError):
        task_service.get_task(session, alice.id, task.id)


def test_list_is_scoped_to_owner(session, alice, bob):
    task_service.create_task(session, alice.id, {"title": "A1"})
    task_service.create_task(session, alice.id, {"title": "A2"})
    task_service.create_task(session, bob.id, {"title": "B1"})

    titles = {t.title for t in task_service.list_tasks(session, alice.id)}

    assert titles == {"A1", "A2"}


def test_list_filters_by_status_and_priority(session, alice):
    task_service.create_task(session, alice.id, {"title": "p-low", "priority": "low"})
    task_service.create_task(session, alice.id, {"title": "p-high", "priority": "high"})
    task_service.create_task(
        session, alice.id, {"title": "c-high", "status": "completed", "priority": "high"}
    )

    pending = task_service.list_tasks(session, alice.id, status="pending")
    high_pending = task_service.list_tasks(session, alice.id, status="pending", priority="high")

    assert {t.title for t in pending} == {"p-low", "p-high"}
    assert [t.title for t in high_pending] == ["p-high"]


def test_list_sorts_and_limits(session, alice):
    for title in ["banana", "apple", "cherry"]:
        task_service.create_task(session, alice.id, {"title": title})

    asc = task_service.list_tasks(session, alice.id, sort_by="title", sort_order="asc")
    desc_two = task_service.list_tasks(session, alice.id, sort_by="title", sort_order="desc", limit=2)

    assert [t.title for t in asc] == ["apple", "banana", "cherry"]
    assert [t.title for t in desc_two] == ["cherry", "banana"]


def test_list_defaults_to_fifty(session, alice):
    for i in range(55):
        session.add(Task(user_id=alice.id, title=f"task {i}"))
    session.commit()

    assert len(task_service.list_tasks(session, alice.id)) == 50


@pytest.mark.parametrize(
    ("kwargs", "field"),
    [
        ({"sort_by": "password_hash"}, "sortBy"),
        ({"sort_by": "userId"}, "sortBy"),
        ({"sort_order": "sideways"}, "sortOrder"),
        ({"status": "archived"}, "status"),
        ({"priority": "urgent"}, "priority"),
        ({"limit": 0}, "limit"),
        ({"limit": 1000}, "limit"),
    ],
)
def test_list_rejects_values_outside_allow_lists(session, alice, kwargs, field):
    with pytest.raises(ValidationError) as excinfo:
        task_service.list_tasks(session, alice.id, **kwargs)

    assert excinfo.value.fields() == [field]
