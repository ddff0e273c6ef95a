from __future__ import annotations

import logging
from typing import Any, Mapping, Tuple
from uuid import UUID

from jose import JWTError
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, or_, select

from taskmanager.core.errors import (
    AuthError,
    ConflictError,
    InvalidCredentialsError,
    validate_payload,
)
from taskmanager.core.jwt import create_access_token, verify_access_token
from taskmanager.core.security import burn_password_check, hash_password, verify_password
from taskmanager.models.user import User
from taskmanager.schemas.auth import ProfileUpdate, RegisterRequest

logger = logging.getLogger(__name__)


def register_user(db: Session, payload: RegisterRequest | Mapping[str, Any]) -> Tuple[str, User]:
    """
    Create an account and return ``(token, user)``.
    - Field validation happens before any query
    - Username/email collisions raise ConflictError
    """
    data = validate_payload(RegisterRequest, payload)

    existing = db.exec(
        select(User).where(or_(User.email == data.email, User.username == data.username))
    ).first()
    if existing is not None:
        raise ConflictError("User already exists with this email or username")

    user = User(
        username=data.username,
        email=data.email,
        password_hash=hash_password(data.password),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race against a concurrent registration
        db.rollback()
        raise ConflictError("User already exists with this email or username")
    db.refresh(user)

    logger.info("Registered user %s", user.id)
    return create_access_token(user.id), user


def authenticate(db: Session, email: str, password: str) -> Tuple[str, User]:
    """
    Check credentials and return ``(token, user)``.
    Unknown email and wrong password fail identically.
    """
    user = db.exec(select(User).where(User.email == email.strip().lower())).first()
    if user is None:
        burn_password_check(password)
        logger.info("Failed login attempt")
        raise InvalidCredentialsError()
    if not verify_password(password, user.password_hash):
        logger.info("Failed login attempt")
        raise InvalidCredentialsError()
    return create_access_token(user.id), user


def resolve_identity(db: Session, token: str | None) -> User:
    if not token:
        raise AuthError("No token, authorization denied")
    try:
        payload = verify_access_token(token)
        user_id = UUID(str(payload["sub"]))
    except (JWTError, ValueError):
        raise AuthError("Token is not valid")

    user = db.get(User, user_id)
    if user is None:
        raise AuthError("Token is not valid")
    return user


def update_profile(db: Session, user: User, payload: ProfileUpdate | Mapping[str, Any]) -> User:
    data = validate_payload(ProfileUpdate, payload)
    changes = data.model_dump(exclude_none=True)
    if not changes:
        return user

    clauses = [getattr(User, field) == value for field, value in changes.items()]
    clash = db.exec(select(User).where(or_(*clauses), User.id != user.id)).first()
    if clash is not None:
        raise ConflictError("Username or email already exists")

    for field, value in changes.items():
        setattr(user, field, value)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Username or email already exists")
    db.refresh(user)

    logger.info("Updated profile for user %s (%s)", user.id, ", ".join(sorted(changes)))
    return user
