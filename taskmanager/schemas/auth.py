from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from pydantic import ConfigDict, EmailStr, Field, StringConstraints, field_validator

from taskmanager.core.security import BCRYPT_MAX_BYTES
from taskmanager.schemas.common import CamelModel


def _normalize_email(v):
    return v.strip().lower() if isinstance(v, str) else v


# passwords are never stripped; only the username is trimmed
Username = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=30)]


class RegisterRequest(CamelModel):
    model_config = ConfigDict(extra="ignore")

    username: Username
    email: EmailStr
    password: str = Field(min_length=6)

    @field_validator("email", mode="before")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def _password_fits_bcrypt(cls, v: str) -> str:
        if len(v.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValueError("Password is too long")
        return v


class LoginRequest(CamelModel):
    model_config = ConfigDict(extra="ignore")

    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email", mode="after")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return _normalize_email(v)


class ProfileUpdate(CamelModel):
    """Only these two fields can change through the profile endpoint."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    username: Optional[str] = Field(default=None, min_length=3, max_length=30)
    email: Optional[EmailStr] = None

    @field_validator("email", mode="after")
    @classmethod
    def _lower_email(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_email(v)


class UserPublic(CamelModel):
    id: UUID
    username: str
    email: str
    role: str
    created_at: datetime


class AuthResponse(CamelModel):
    message: str
    token: str
    user: UserPublic


class ProfileResponse(CamelModel):
    message: Optional[str] = None
    user: UserPublic


class TokenResponse(CamelModel):
    # OAuth2 password flow expects these exact snake_case names
    model_config = ConfigDict(alias_generator=None)

    access_token: str
    token_type: str = "bearer"
