"""
Landing URL for local (form/credential) sign-ins.

Priority order:
1. Explicit ``redirectUrl`` query parameter
2. Origin of the ``Referer`` header (then ``Origin``) joined with the landing path
3. Default redirect URL
"""

from __future__ import annotations

import logging
from urllib.parse import urljoin, urlparse

from fastapi import Request

from .constants import DEFAULT_REDIRECT_URL, QUERY_PARAMETER_REDIRECT_URL

logger = logging.getLogger(__name__)


def _origin_of(url: str | None) -> str | None:
    if not url:
        return None
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    if parsed.scheme in ("http", "https") and parsed.netloc:
        return f"{parsed.scheme}://{parsed.netloc}"
    return None


class RedirectHelper:
    def __init__(
        self,
        landing_path: str = "/applications",
        default_url: str = DEFAULT_REDIRECT_URL,
    ) -> None:
        if not landing_path.startswith("/"):
            raise ValueError("landing_path must start with /")
        self.landing_path = landing_path
        self.default_url = default_url

    async def get_redirect_url(self, request: Request) -> str:
        explicit = request.query_params.get(QUERY_PARAMETER_REDIRECT_URL)
        if explicit:
            return explicit

        origin = _origin_of(request.headers.get("referer")) or _origin_of(
            request.headers.get("origin")
        )
        if origin:
            return urljoin(origin, self.landing_path)

        logger.debug("No redirect context on request, using default redirect URL")
        return self.default_url
