from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import Session

from taskmanager.db.session import get_session
from taskmanager.models.user import User
from taskmanager.services.auth_service import resolve_identity

# auto_error=False so a missing header goes through our AuthError body, not FastAPI's
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_session),
) -> User:
    """Strict auth dependency; raises AuthError when no/invalid token."""
    return resolve_identity(db, token)
