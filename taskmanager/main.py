# taskmanager/main.py
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from taskmanager.core.config import settings
from taskmanager.core.errors import register_exception_handlers
from taskmanager.core.logging_config import setup_logging
from taskmanager.db.session import create_all_tables

# model imports register the tables on SQLModel.metadata
from taskmanager.models import task as _m_task  # noqa: F401
from taskmanager.models import user as _m_user  # noqa: F401

from taskmanager.routers import auth, health, task

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_tables:
        logger.info("AUTO_CREATE_TABLES is on; creating missing tables")
        create_all_tables()
    logger.info("Task Manager API %s started (env=%s)", settings.app_version, settings.app_env)
    yield


app = FastAPI(
    title="Task Manager API",
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

register_exception_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "%s %s -> %s (%.1f ms)",
        request.method, request.url.path, response.status_code, elapsed_ms,
    )
    return response


# routers
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(task.router)
