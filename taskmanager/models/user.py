from datetime import datetime, timezone
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    """Naive UTC timestamp; every datetime column is a plain (timezone-less) DateTime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class UserRole(str, Enum):
    user = "user"
    admin = "admin"


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    username: str = Field(max_length=30, index=True, unique=True)
    email: str = Field(max_length=254, index=True, unique=True)
    password_hash: str = Field(max_length=128)
    role: str = Field(default=UserRole.user.value, max_length=10)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
