"""Best-effort release notes acknowledgement on sign-in."""

from __future__ import annotations

import logging

from .metrics import ONBOARDING_FAILURES_TOTAL
from .models import User
from .user_data import UserDataService

logger = logging.getLogger(__name__)


class ReleaseNotesAcknowledger:
    def __init__(self, user_data: UserDataService) -> None:
        self._user_data = user_data

    async def acknowledge(self, user: User) -> bool:
        """Mark the current release notes as viewed by ``user``.

        Returns False, after logging, when the update failed. The sign-in
        continues either way.
        """
        try:
            await self._user_data.ensure_viewed_current_version_release_notes(user)
        except Exception as e:
            ONBOARDING_FAILURES_TOTAL.labels(step="release_notes").inc()
            logger.error(
                "Failed to acknowledge release notes: %s",
                e,
                exc_info=e,
                extra={
                    "meta": {
                        "user_id": user.id,
                        "error_type": type(e).__name__,
                        "version": self._user_data.release_notes_version,
                    }
                },
            )
            return False
        return True
