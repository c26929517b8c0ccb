"""
Authentication success handler.

Runs after credentials or the OAuth2 code exchange were accepted:
1. Resolve the current user (failure aborts sign-in)
2. Acknowledge the current release notes (best-effort)
3. Run first-login onboarding when the user qualifies (best-effort)
4. Redirect to the landing URL, setting the session cookie on the same response

The redirect also makes the browser store the session cookie for the API
domain while following it.
"""

from __future__ import annotations

import logging
import time

from fastapi import Request
from fastapi.responses import RedirectResponse

from .errors import ERR_MISSING_PRINCIPAL, AuthenticationFailedError, OnboardingError
from .metrics import AUTH_SUCCESS_LATENCY_SECONDS, AUTH_SUCCESS_REDIRECT_TOTAL
from .models import Authentication
from .onboarding import OnboardingOrchestrator
from .redirects import RedirectTargetResolver
from .release_notes import ReleaseNotesAcknowledger
from .session_user import CurrentUserSource

logger = logging.getLogger(__name__)


class SessionCookie:
    """Name and attributes of the session cookie written on the redirect."""

    def __init__(self, name: str, secure: bool = True, samesite: str = "lax") -> None:
        self.name = name
        self.secure = secure
        self.samesite = samesite

    def apply(self, response: RedirectResponse, session_id: str) -> None:
        response.set_cookie(
            self.name,
            session_id,
            path="/",
            httponly=True,
            secure=self.secure,
            samesite=self.samesite,
        )


class AuthenticationSuccessHandler:
    def __init__(
        self,
        session_users: CurrentUserSource,
        release_notes: ReleaseNotesAcknowledger,
        onboarding: OnboardingOrchestrator,
        redirects: RedirectTargetResolver,
        session_cookie: SessionCookie | None = None,
    ) -> None:
        self._session_users = session_users
        self._release_notes = release_notes
        self._onboarding = onboarding
        self._redirects = redirects
        self._session_cookie = session_cookie

    async def on_authentication_success(
        self, request: Request, authentication: Authentication
    ) -> RedirectResponse:
        return await self.on_success(request, authentication, is_from_signup=False)

    async def on_success(
        self,
        request: Request,
        authentication: Authentication,
        is_from_signup: bool = False,
    ) -> RedirectResponse:
        """Complete a successful sign-in and build the landing redirect.

        Raises:
            AuthenticationFailedError: the current user could not be resolved
        """
        if authentication.principal is None:
            raise AuthenticationFailedError(ERR_MISSING_PRINCIPAL)

        start = time.perf_counter()
        flow = authentication.kind
        logger.debug(
            "Login succeeded for user: %s",
            authentication.principal,
            extra={"meta": {"flow": flow, "is_from_signup": is_from_signup}},
        )

        user = await self._session_users.get_current_user(request)

        await self._release_notes.acknowledge(user)

        if self._onboarding.is_first_login(user):
            try:
                await self._onboarding.run(user)
            except OnboardingError as e:
                for step, err in e.failures.items():
                    logger.error(
                        "First-login %s failed: %s",
                        step,
                        err,
                        exc_info=err,
                        extra={
                            "meta": {
                                "user_id": user.id,
                                "step": step,
                                "error_type": type(err).__name__,
                            }
                        },
                    )

        location = await self._redirects.resolve(request, authentication, is_from_signup)
        response = RedirectResponse(url=location, status_code=302)

        session_id = getattr(request.state, "session_id", None)
        if session_id and self._session_cookie is not None:
            self._session_cookie.apply(response, session_id)

        AUTH_SUCCESS_REDIRECT_TOTAL.labels(flow=flow).inc()
        AUTH_SUCCESS_LATENCY_SECONDS.labels(flow=flow).observe(time.perf_counter() - start)
        logger.info(
            "Sign-in redirect issued",
            extra={"meta": {"user_id": user.id, "flow": flow, "location": location}},
        )
        return response
