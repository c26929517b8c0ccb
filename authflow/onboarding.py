"""
First-login onboarding.

A user without an example workspace is signing in for the first time. For
such users two side effects run concurrently: the ``FIRST_LOGIN`` analytics
event and provisioning of the example workspace. Both are always attempted;
failures are collected and raised together once both have finished.

The qualifier is a hint: two racing first sign-ins may both see no workspace.
The cloner's conditional update keeps provisioning exactly-once; the analytics
event may then be sent twice.
"""

from __future__ import annotations

import asyncio
import logging

from .analytics import AnalyticsService
from .constants import ATTR_IS_FROM_INVITE, EVENT_FIRST_LOGIN
from .errors import OnboardingError
from .metrics import ONBOARDING_FAILURES_TOTAL, ONBOARDING_RUNS_TOTAL
from .models import User
from .workspace_cloner import ExampleWorkspaceCloner

logger = logging.getLogger(__name__)


def is_first_login(user: User) -> bool:
    return user.example_workspace_id is None


class OnboardingOrchestrator:
    def __init__(
        self, analytics: AnalyticsService, cloner: ExampleWorkspaceCloner
    ) -> None:
        self._analytics = analytics
        self._cloner = cloner

    def is_first_login(self, user: User) -> bool:
        return is_first_login(user)

    async def run(self, user: User) -> None:
        """Send the first-login event and clone the example workspace.

        Raises:
            OnboardingError: one or both steps failed; both were attempted
        """
        ONBOARDING_RUNS_TOTAL.inc()
        steps = ("analytics", "clone")
        results = await asyncio.gather(
            self._analytics.send_object_event(
                EVENT_FIRST_LOGIN,
                user,
                {ATTR_IS_FROM_INVITE: user.invite_token is not None},
            ),
            self._cloner.clone_examples_workspace(user),
            return_exceptions=True,
        )

        failures: dict[str, BaseException] = {}
        for step, result in zip(steps, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                ONBOARDING_FAILURES_TOTAL.labels(step=step).inc()
                failures[step] = result

        if failures:
            raise OnboardingError(user.id, failures)

        logger.info(
            "First-login onboarding completed",
            extra={
                "meta": {
                    "user_id": user.id,
                    "is_from_invite": user.is_from_invite,
                    "workspace_id": user.example_workspace_id,
                }
            },
        )
