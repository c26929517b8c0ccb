"""Provision the example workspace a user gets on first sign-in."""

from __future__ import annotations

import logging
import uuid

from .models import User
from .user_store import UserDAO

logger = logging.getLogger(__name__)


class ExampleWorkspaceCloner:
    """Assigns an example workspace to a user exactly once.

    Concurrent calls for the same user race on a conditional update; the
    loser adopts the winner's workspace id, so a user never ends up with two.
    """

    def __init__(self, user_store: UserDAO) -> None:
        self._user_store = user_store

    async def clone_examples_workspace(self, user: User) -> str:
        if user.example_workspace_id is not None:
            return user.example_workspace_id

        candidate = uuid.uuid4().hex
        stored = await self._user_store.set_example_workspace_if_absent(user.id, candidate)
        if stored is None:
            raise LookupError(f"user {user.id} not found")

        user.example_workspace_id = stored
        if stored == candidate:
            logger.info(
                "Example workspace provisioned",
                extra={"meta": {"user_id": user.id, "workspace_id": stored}},
            )
        else:
            logger.info(
                "Example workspace already provisioned by a concurrent sign-in",
                extra={"meta": {"user_id": user.id, "workspace_id": stored}},
            )
        return stored
