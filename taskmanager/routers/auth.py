from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel import Session

from taskmanager.db.session import get_session
from taskmanager.dependencies.auth import get_current_user
from taskmanager.models.user import User
from taskmanager.schemas.auth import (
    AuthResponse,
    LoginRequest,
    ProfileResponse,
    ProfileUpdate,
    RegisterRequest,
    TokenResponse,
    UserPublic,
)
from taskmanager.services import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_session)):
    token, user = auth_service.register_user(db, payload)
    return AuthResponse(
        message="User registered successfully",
        token=token,
        user=UserPublic.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, db: Session = Depends(get_session)):
    token, user = auth_service.authenticate(db, payload.email, payload.password)
    return AuthResponse(
        message="Login successful",
        token=token,
        user=UserPublic.model_validate(user),
    )


@router.post("/token", response_model=TokenResponse)
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_session),
):
    """OAuth2 password form for the interactive docs; ``username`` carries the email."""
    token, _ = auth_service.authenticate(db, form_data.username, form_data.password)
    return TokenResponse(access_token=token)


@router.get("/profile", response_model=ProfileResponse, response_model_exclude_none=True)
def get_profile(user: User = Depends(get_current_user)):
    return ProfileResponse(user=UserPublic.model_validate(user))


@router.put("/profile", response_model=ProfileResponse)
def update_profile(
    payload: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
):
    updated = auth_service.update_profile(db, user, payload)
    return ProfileResponse(
        message="Profile updated successfully",
        user=UserPublic.model_validate(updated),
    )
