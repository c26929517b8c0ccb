"""Per-user data updates made on sign-in."""

from __future__ import annotations

import logging

from .models import User
from .user_store import UserDAO

logger = logging.getLogger(__name__)


class UserDataService:
    def __init__(self, user_store: UserDAO, release_notes_version: str) -> None:
        self._user_store = user_store
        self.release_notes_version = release_notes_version

    async def ensure_viewed_current_version_release_notes(self, user: User) -> None:
        """Mark the current release notes version as viewed by ``user``.

        Writes only when the stored version differs, so repeated calls are
        no-ops.
        """
        if user.release_notes_viewed_version == self.release_notes_version:
            return

        changed = await self._user_store.set_release_notes_version(
            user.id, self.release_notes_version
        )
        user.release_notes_viewed_version = self.release_notes_version
        if changed:
            logger.debug(
                "Release notes %s marked viewed",
                self.release_notes_version,
                extra={"meta": {"user_id": user.id}},
            )
