"""Domain models for authflow."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from .constants import FLOW_LOCAL, FLOW_OAUTH2


@dataclass
class User:
    """Authenticated principal as loaded for the current request.

    ``example_workspace_id`` is ``None`` until example content has been
    provisioned; such a user is treated as signing in for the first time.
    """

    id: str
    email: str | None = None
    invite_token: str | None = None
    example_workspace_id: str | None = None
    release_notes_viewed_version: str | None = None

    @property
    def is_from_invite(self) -> bool:
        return self.invite_token is not None


@dataclass(frozen=True)
class OAuth2Authentication:
    """Sign-in completed through an OAuth2 authorization-code callback."""

    principal: Any
    provider: str
    attributes: dict[str, Any] = field(default_factory=dict)
    kind: Literal["oauth2"] = FLOW_OAUTH2


@dataclass(frozen=True)
class LocalAuthentication:
    """Sign-in completed by the local form/credential flow."""

    principal: Any
    kind: Literal["local"] = FLOW_LOCAL


Authentication = OAuth2Authentication | LocalAuthentication
