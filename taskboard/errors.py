"""Structured error helpers for API responses.

Every failure reaches the client as ``{"error": str, "details"?: str}``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


def build_error_payload(message: str, details: Optional[str] = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"error": message}
    if details is not None:
        payload["details"] = details
    return payload


class AppError(Exception):
    """Application-scoped error for standardized API responses."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[str] = None, status_code: Optional[int] = None):
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        super().__init__(self.message if details is None else f"{self.message}: {details}")

    @property
    def payload(self) -> Dict[str, Any]:
        return build_error_payload(self.message, self.details)


class InvalidInput(AppError):
    """Client supplied an empty or malformed request body."""

    status_code = 400
    message = "Input is required and must be a non-empty string"


class NotFound(AppError):
    """Id does not resolve to an existing task."""

    status_code = 404
    message = "Task not found"


class UpstreamUnavailable(AppError):
    """The language model call failed; carries the upstream status when known."""

    status_code = 500
    message = "LLM API error"


class ModelNotFound(UpstreamUnavailable):
    """Configured model identifier is not recognized upstream (operator-fixable)."""

    status_code = 400
    message = "Model not found"


class EmptyResponse(AppError):
    status_code = 500
    message = "No response from LLM"


class MalformedExtraction(AppError):
    """Model reply is not a JSON array."""

    status_code = 500
    message = "Failed to parse task extraction result"


class InvalidTask(AppError):
    """At least one draft in the model reply failed validation."""

    status_code = 500
    message = "Each task must have a valid title"


async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.payload)


async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return JSONResponse(
        status_code=400,
        content=build_error_payload("Invalid request body", "; ".join(parts) or None),
    )


def internal_error(action: str, exc: Exception) -> JSONResponse:
    """Render an unexpected failure as a 500 with details (logged)."""
    logger.exception("Failed to %s", action)
    return JSONResponse(
        status_code=500,
        content=build_error_payload(f"Failed to {action}", str(exc) or exc.__class__.__name__),
    )
