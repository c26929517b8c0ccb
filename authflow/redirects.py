"""
Post-authentication redirect target selection.

OAuth2 sign-ins land on the ``origin`` carried through the authorization
server in ``state``; local sign-ins land where the RedirectHelper points,
optionally tagged with ``isFromSignup=true``. Every candidate is validated
before use and replaced by the default redirect URL when it is rejected:
- Absolute ``http``/``https`` URLs with a host, or root-relative paths
- No whitespace, control characters or backslashes
- Host on the configured allowlist, when one is configured
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from urllib.parse import urlparse

from fastapi import Request

from .constants import (
    DEFAULT_REDIRECT_URL,
    QUERY_PARAMETER_IS_FROM_SIGNUP,
    QUERY_PARAMETER_STATE,
)
from .metrics import AUTH_REDIRECT_FALLBACK_TOTAL
from .models import Authentication, OAuth2Authentication
from .redirect_helper import RedirectHelper
from .state_decoder import StateDecoder

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[\x00-\x20\x7f\\]")


def check_redirect_target(target: str | None, allowed_hosts: Iterable[str] = ()) -> str | None:
    """
    Check whether ``target`` may be used as a ``Location``.

    Returns:
        None when the target is acceptable, otherwise the rejection reason
    """
    if not target:
        return "empty"
    if _UNSAFE_CHARS.search(target):
        return "unsafe_chars"

    try:
        parsed = urlparse(target)
        # Accessing port validates it
        parsed.port
    except ValueError:
        return "unparseable"

    if parsed.scheme or parsed.netloc:
        if parsed.scheme not in ("http", "https"):
            return "unsupported_scheme"
        if not parsed.hostname:
            return "missing_host"
        hosts = {h.lower() for h in allowed_hosts}
        if hosts and parsed.hostname.lower() not in hosts:
            return "host_not_allowed"
        return None

    if target.startswith("/"):
        return None
    return "not_absolute"


def append_signup_flag(url: str) -> str:
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{QUERY_PARAMETER_IS_FROM_SIGNUP}=true"


class RedirectTargetResolver:
    def __init__(
        self,
        redirect_helper: RedirectHelper,
        state_decoder: StateDecoder | None = None,
        default_url: str = DEFAULT_REDIRECT_URL,
        allowed_hosts: Iterable[str] = (),
    ) -> None:
        self._redirect_helper = redirect_helper
        self._state_decoder = state_decoder or StateDecoder()
        self.default_url = default_url
        self.allowed_hosts = [h.lower() for h in allowed_hosts]

    def _validated(self, target: str | None, flow: str) -> str:
        reason = check_redirect_target(target, self.allowed_hosts)
        if reason is None:
            return target
        AUTH_REDIRECT_FALLBACK_TOTAL.labels(reason=reason).inc()
        logger.debug(
            "Redirect target rejected, using default",
            extra={
                "meta": {
                    "component": "auth.redirect",
                    "flow": flow,
                    "reason": reason,
                    "target": target,
                    "output_path": self.default_url,
                }
            },
        )
        return self.default_url

    def handle_oauth2_redirect(self, request: Request) -> str:
        """Landing URL for an OAuth2 callback: the last ``origin`` in ``state``."""
        state = request.query_params.get(QUERY_PARAMETER_STATE)
        if not state:
            return self.default_url

        origin = self._state_decoder.origin(state)
        if origin is None:
            AUTH_REDIRECT_FALLBACK_TOTAL.labels(reason="no_origin").inc()
            logger.debug(
                "OAuth2 state carries no origin, using default",
                extra={"meta": {"component": "auth.redirect", "state_len": len(state)}},
            )
            return self.default_url
        return self._validated(origin, "oauth2")

    async def handle_redirect(self, request: Request, is_from_signup: bool = False) -> str:
        """Landing URL for a local sign-in."""
        url = await self._redirect_helper.get_redirect_url(request)
        if is_from_signup and url:
            url = append_signup_flag(url)
        return self._validated(url, "local")

    async def resolve(
        self,
        request: Request,
        authentication: Authentication,
        is_from_signup: bool = False,
    ) -> str:
        if isinstance(authentication, OAuth2Authentication):
            return self.handle_oauth2_redirect(request)
        return await self.handle_redirect(request, is_from_signup)
