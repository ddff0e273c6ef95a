# taskmanager/core/errors.py
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, TypeVar

import pydantic
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class AppError(Exception):
    """Base for errors that map onto a fixed HTTP status and ``{"error": ...}`` body."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.message}


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"

    def __init__(self, errors: List[Dict[str, Optional[str]]], message: Optional[str] = None):
        super().__init__(message)
        self.errors = errors

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.message, "errors": self.errors}

    def fields(self) -> List[Optional[str]]:
        return [e["field"] for e in self.errors]


class ConflictError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Resource already exists"


class AuthError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class InvalidCredentialsError(AuthError):
    # Login failures stay 400 so clients don't treat them as an expired session.
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid credentials"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ServerError(AppError):
    pass


# ---- field messages ----
FIELD_MESSAGES: Dict[str, str] = {
    "username": "Username must be between 3 and 30 characters",
    "email": "Please enter a valid email",
    "password": "Password must be between 6 and 72 characters",
    "title": "Title is required and must be less than 100 characters",
    "description": "Description must be less than 500 characters",
    "status": "Invalid status",
    "priority": "Invalid priority",
    "dueDate": "Invalid date format",
    "sortBy": "Invalid sort field",
    "sortOrder": "Sort order must be 'asc' or 'desc'",
    "limit": "Limit must be a positive integer within the allowed range",
}

_LOCATION_PARTS = {"body", "query", "path", "header", "cookie"}


def _field_from_loc(loc: Iterable[Any]) -> Optional[str]:
    names = [str(p) for p in loc if isinstance(p, str) and p not in _LOCATION_PARTS]
    if not names:
        return None
    name = names[-1]
    return to_camel(name) if "_" in name else name


def format_validation_errors(errors: Iterable[Mapping[str, Any]]) -> List[Dict[str, Optional[str]]]:
    out: List[Dict[str, Optional[str]]] = []
    for err in errors:
        field = _field_from_loc(err.get("loc", ()))
        message = FIELD_MESSAGES.get(field or "")
        if message is None:
            message = str(err.get("msg", "Invalid value")).removeprefix("Value error, ")
        out.append({"field": field, "message": message})
    return out


def validate_payload(model: Type[M], data: Any) -> M:
    """Validate ``data`` against ``model``; pydantic failures become ValidationError."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as exc:
        raise ValidationError(format_validation_errors(exc.errors())) from exc


# ---- handlers ----
async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": "Server error"})
    return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=headers)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    err = ValidationError(format_validation_errors(exc.errors()))
    return JSONResponse(status_code=err.status_code, content=err.to_body())


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Server error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
