"""
FastAPI composition for authflow.

``create_app()`` wires settings, logging, error handlers, the database, the
analytics HTTP client and the success handler. Sign-in routes of the host
application obtain the handler through ``get_success_handler`` and return its
response once authentication succeeded.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx
from fastapi import FastAPI, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .analytics import AnalyticsService
from .db import Database
from .errors import register_error_handlers
from .http_client import build_async_httpx_client
from .logging_config import configure_logging
from .middleware import RequestIDMiddleware
from .onboarding import OnboardingOrchestrator
from .redirect_helper import RedirectHelper
from .redirects import RedirectTargetResolver
from .release_notes import ReleaseNotesAcknowledger
from .session_user import SessionUserService
from .settings import Settings, get_settings
from .state_decoder import StateDecoder
from .success_handler import AuthenticationSuccessHandler, SessionCookie
from .user_data import UserDataService
from .user_store import UserDAO
from .workspace_cloner import ExampleWorkspaceCloner

logger = logging.getLogger(__name__)


@dataclass
class Services:
    db: Database
    user_store: UserDAO
    analytics: AnalyticsService
    success_handler: AuthenticationSuccessHandler


def build_services(
    settings: Settings, db: Database, client: httpx.AsyncClient | None
) -> Services:
    user_store = UserDAO(db)
    analytics = AnalyticsService(
        client=client,
        sink_url=settings.ANALYTICS_URL,
        write_key=settings.ANALYTICS_WRITE_KEY,
    )
    handler = AuthenticationSuccessHandler(
        session_users=SessionUserService(user_store),
        release_notes=ReleaseNotesAcknowledger(
            UserDataService(user_store, settings.RELEASE_NOTES_VERSION)
        ),
        onboarding=OnboardingOrchestrator(analytics, ExampleWorkspaceCloner(user_store)),
        redirects=RedirectTargetResolver(
            RedirectHelper(
                landing_path=settings.LANDING_PATH,
                default_url=settings.DEFAULT_REDIRECT_URL,
            ),
            StateDecoder(),
            default_url=settings.DEFAULT_REDIRECT_URL,
            allowed_hosts=settings.allowed_redirect_hosts(),
        ),
        session_cookie=SessionCookie(
            settings.SESSION_COOKIE,
            secure=settings.SESSION_COOKIE_SECURE,
            samesite=settings.SESSION_COOKIE_SAMESITE,
        ),
    )
    return Services(
        db=db, user_store=user_store, analytics=analytics, success_handler=handler
    )


def create_app(
    settings: Settings | None = None,
    *,
    http_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        db = Database(settings.DATABASE_URL)
        await db.create_all()
        client = None
        if settings.ANALYTICS_URL:
            kwargs = {"transport": http_transport} if http_transport else {}
            client = build_async_httpx_client(settings.HTTP_CLIENT_TIMEOUT, **kwargs)
        app.state.services = build_services(settings, db, client)
        logger.info("authflow started")
        try:
            yield
        finally:
            if client is not None:
                await client.aclose()
            await db.dispose()

    app = FastAPI(title="authflow", lifespan=lifespan)
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app, settings.FAILURE_URL)

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_success_handler(request: Request) -> AuthenticationSuccessHandler:
    """FastAPI dependency returning the app's success handler."""
    return get_services(request).success_handler
