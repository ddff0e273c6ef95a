import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter
from sqlmodel import text

from taskmanager.core.config import settings
from taskmanager.core.errors import ServerError
from taskmanager.db import session as db_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

_STARTED_AT = time.monotonic()


def _database_ok() -> bool:
    try:
        with db_session.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.warning("Database connectivity check failed", exc_info=True)
        return False


@router.get("/health")
def health_app():
    db_ok = _database_ok()
    return {
        "status": "OK" if db_ok else "DEGRADED",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - _STARTED_AT, 3),
        "environment": settings.app_env,
        "version": settings.app_version,
        "database": "connected" if db_ok else "disconnected",
    }


@router.get("/health/db")
def health_db():
    # Migration is a deployment concern. Runtime only verifies DB connectivity.
    if not _database_ok():
        raise ServerError("Database connection failed")
    return {"ok": True}
