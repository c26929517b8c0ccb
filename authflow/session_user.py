"""Resolve the signed-in user for the current request."""

from __future__ import annotations

import logging
from typing import Protocol

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError

from .errors import ERR_USER_UNRESOLVED, AuthenticationFailedError
from .models import User
from .user_store import UserDAO

logger = logging.getLogger(__name__)


class CurrentUserSource(Protocol):
    async def get_current_user(self, request: Request) -> User: ...


class SessionUserService:
    """Loads the user the upstream authentication layer attached to the request.

    The authentication layer stores the principal id on ``request.state.user_id``
    once credentials or the OAuth2 code exchange succeeded.
    """

    def __init__(self, user_store: UserDAO) -> None:
        self._user_store = user_store

    async def get_current_user(self, request: Request) -> User:
        user_id = getattr(request.state, "user_id", None)
        if not user_id:
            raise AuthenticationFailedError(
                ERR_USER_UNRESOLVED, "no authenticated user on request"
            )

        try:
            user = await self._user_store.get_user(str(user_id))
        except SQLAlchemyError as e:
            logger.error(
                "User store lookup failed: %s",
                e,
                exc_info=e,
                extra={"meta": {"user_id": user_id, "error_type": type(e).__name__}},
            )
            raise AuthenticationFailedError(
                ERR_USER_UNRESOLVED, f"user {user_id} could not be loaded"
            ) from e

        if user is None:
            logger.warning(
                "Authenticated user not found in store",
                extra={"meta": {"user_id": user_id}},
            )
            raise AuthenticationFailedError(
                ERR_USER_UNRESOLVED, f"user {user_id} not found"
            )
        return user
