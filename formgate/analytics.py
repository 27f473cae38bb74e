"""Universal Analytics event tracking (Measurement Protocol v1).

Events are sent in the background with :func:`fire_and_forget`; a failed
send is logged and never reaches the request that triggered it.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Awaitable
from typing import Any

import httpx

logger = logging.getLogger(__name__)

COLLECT_URL = "https://www.google-analytics.com/collect"
_DEFAULT_TIMEOUT = 5.0

# Strong references to in-flight tasks so they are not collected mid-send
_background_tasks: set[asyncio.Future] = set()


class AnalyticsEvent:
    def __init__(self, client: "AnalyticsClient", category: str, action: str) -> None:
        self._client = client
        self.category = category
        self.action = action

    async def send(self) -> None:
        await self._client.post({"t": "event", "ec": self.category, "ea": self.action})


class AnalyticsClient:
    """Minimal Measurement Protocol client for one tracking ID."""

    def __init__(
        self,
        tracking_id: str,
        *,
        client_id: str | None = None,
        collect_url: str = COLLECT_URL,
        timeout: float = _DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.tracking_id = tracking_id
        self.client_id = client_id
        self.collect_url = collect_url
        self.timeout = timeout
        self._transport = transport

    def event(self, category: str, action: str) -> AnalyticsEvent:
        return AnalyticsEvent(self, category, action)

    async def post(self, params: dict[str, Any]) -> None:
        data = {
            "v": "1",
            "tid": self.tracking_id,
            "cid": self.client_id or str(uuid.uuid4()),
            **params,
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            resp = await client.post(self.collect_url, data=data)
        resp.raise_for_status()


def _log_task_result(task: asyncio.Future) -> None:
    _background_tasks.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.warning("Analytics event failed: %s", exc)


def fire_and_forget(pending: Awaitable[Any]) -> asyncio.Future:
    """Schedule ``pending`` on the running loop without awaiting it."""
    loop = asyncio.get_running_loop()
    task = asyncio.ensure_future(pending, loop=loop)
    _background_tasks.add(task)
    task.add_done_callback(_log_task_result)
    return task
