"""Custom middleware for the application."""

import secrets
import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from config import get_settings

settings = get_settings()

VIEW_SESSION_HEADER = "X-View-Session"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for structured request logging."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else None,
        )

        logger = structlog.get_logger()
        logger.info("request_started")

        start_time = time.time()
        try:
            response = await call_next(request)
            process_time = time.time() - start_time

            logger.info(
                "request_completed",
                status_code=response.status_code,
                process_time_ms=round(process_time * 1000, 2),
            )

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Process-Time"] = str(process_time)

            return response

        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                "request_failed",
                error=str(e),
                process_time_ms=round(process_time * 1000, 2),
                exc_info=True,
            )
            raise


class ViewSessionMiddleware(BaseHTTPMiddleware):
    """Attach an opaque view-session token to every request.

    Clients may send their own token in `X-View-Session`; browsers get one
    issued as a session cookie (no expiry) on the first response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        cookie_name = settings.view_session_cookie
        token = request.headers.get(VIEW_SESSION_HEADER) or request.cookies.get(cookie_name)
        issued = False
        if not token:
            token = secrets.token_urlsafe(24)
            issued = True
        request.state.view_session = token[:128]

        response = await call_next(request)

        if issued:
            response.set_cookie(
                cookie_name,
                token,
                httponly=True,
                samesite="lax",
                secure=settings.environment == "production",
            )
        return response


def get_view_session(request: Request) -> str:
    """FastAPI dependency returning the request's view-session token."""
    return getattr(request.state, "view_session", "") or ""
