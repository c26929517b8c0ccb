"""Analytics events emitted by the sign-in flow.

Events are always counted in the ``analytics_events_total`` metric. When a
sink URL is configured they are also POSTed there as JSON; delivery failures
raise so callers can aggregate and log them.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .errors import AnalyticsDeliveryError
from .metrics import ANALYTICS_EVENTS_TOTAL
from .models import User

logger = logging.getLogger(__name__)


class AnalyticsService:
    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        sink_url: str | None = None,
        write_key: str | None = None,
    ) -> None:
        self._client = client
        self._sink_url = sink_url
        self._write_key = write_key

    async def send_object_event(
        self, event_name: str, subject: User, attributes: dict[str, Any] | None = None
    ) -> None:
        ANALYTICS_EVENTS_TOTAL.labels(event=event_name).inc()

        if not self._sink_url or self._client is None:
            logger.debug(
                "Analytics event %s recorded locally",
                event_name,
                extra={"meta": {"user_id": subject.id}},
            )
            return

        headers = {}
        if self._write_key:
            headers["Authorization"] = f"Bearer {self._write_key}"
        payload = {
            "event": event_name,
            "userId": subject.id,
            "properties": dict(attributes or {}),
        }
        resp = await self._client.post(self._sink_url, json=payload, headers=headers)
        if resp.status_code >= 300:
            raise AnalyticsDeliveryError(event_name, resp.status_code)
        logger.debug(
            "Analytics event %s delivered",
            event_name,
            extra={"meta": {"user_id": subject.id, "status": resp.status_code}},
        )
