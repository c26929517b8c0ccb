"""Application-level errors and standardized error handlers."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse

from .metrics import AUTH_SUCCESS_USER_UNRESOLVED_TOTAL

logger = logging.getLogger(__name__)

# Error codes
ERR_USER_UNRESOLVED = "user_unresolved"
ERR_MISSING_PRINCIPAL = "missing_principal"


class AuthenticationFailedError(Exception):
    """Raised when a success callback cannot complete sign-in.

    This is the only fatal error on the success path: the host responds with
    its authentication failure page instead of the success redirect.
    """

    def __init__(self, code: str, message: str | None = None):
        super().__init__(message or code)
        self.code = code


class OnboardingError(Exception):
    """Aggregate of first-login side effects that failed.

    ``failures`` maps the step name (``analytics``, ``clone``) to the
    exception it raised. All steps were attempted before this is raised.
    """

    def __init__(self, user_id: str, failures: dict[str, BaseException]):
        steps = ", ".join(sorted(failures))
        super().__init__(f"onboarding failed for user {user_id}: {steps}")
        self.user_id = user_id
        self.failures = dict(failures)

    @property
    def errors(self) -> list[BaseException]:
        return list(self.failures.values())


class AnalyticsDeliveryError(RuntimeError):
    """Raised when the analytics sink rejects an event."""

    def __init__(self, event: str, status: int):
        super().__init__(f"analytics sink rejected {event} with status {status}")
        self.event = event
        self.status = status


def json_error(
    code: str, message: str, status: int, meta: dict[str, Any] | None = None
) -> JSONResponse:
    """Create a standardized JSON error response.

    Shape: {"code", "message", "meta"} with lowercase codes.
    """
    return JSONResponse(
        {"code": code.lower(), "message": message, "meta": meta or {}},
        status_code=status,
    )


def authentication_failure_handler(failure_url: str):
    """Build an exception handler sending failed sign-ins to ``failure_url``."""

    async def _handler(request: Request, exc: AuthenticationFailedError) -> RedirectResponse:
        AUTH_SUCCESS_USER_UNRESOLVED_TOTAL.inc()
        logger.warning(
            "Authentication success callback failed",
            extra={"meta": {"code": exc.code, "path": request.url.path}},
        )
        return RedirectResponse(url=failure_url, status_code=302)

    return _handler


async def global_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Map unexpected exceptions to the standard error envelope."""
    req_id = request.headers.get("x-request-id") or "-"
    now = datetime.now(UTC).isoformat()
    base_meta = {"request_id": req_id, "timestamp": now}

    if isinstance(exc, HTTPException):
        status_to_code = {
            400: "bad_request",
            401: "unauthorized",
            403: "forbidden",
            404: "not_found",
            422: "validation_error",
            500: "internal_error",
            502: "bad_gateway",
            503: "service_unavailable",
        }
        code = status_to_code.get(exc.status_code, "http_error")
        return json_error(
            code=code,
            message=str(exc.detail),
            status=exc.status_code,
            meta={**base_meta, "original_status": exc.status_code},
        )

    logger.error("Unhandled error on %s", request.url.path, exc_info=exc)
    return json_error("internal_error", "Something went wrong", 500, meta=base_meta)


def register_error_handlers(app, failure_url: str) -> None:
    """Register the error handlers on the FastAPI app."""
    app.add_exception_handler(
        AuthenticationFailedError, authentication_failure_handler(failure_url)
    )
    app.add_exception_handler(HTTPException, global_error_handler)
    app.add_exception_handler(Exception, global_error_handler)
