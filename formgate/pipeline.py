"""Entry-processing pipeline interface and its HTTP adapter.

The pipeline validates, transforms and stores entries; the gateway only
forwards ``(fields, options)`` plus caller attribution and reads back the
processed fields and an optional redirect target.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx

from formgate.context import RequestContext
from formgate.errors import GatewayError, ProcessingError

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class PipelineResult:
    fields: Any = field(default_factory=dict)
    redirect: str | None = None


class EntryPipeline(Protocol):
    async def process_entry(
        self,
        fields: Any,
        options: Mapping[str, Any],
        context: RequestContext,
    ) -> PipelineResult: ...


class HttpEntryPipeline:
    """Forward entries to an upstream processing service as JSON.

    Upstream contract::

        200 {"success": true, "fields": {...}, "redirect": "..."}
        4xx/5xx {"success": false, "errorCode": "E_INVALID_FIELD", "data": {...}}

    Error bodies that name an ``errorCode`` become taxonomized
    :class:`GatewayError`; any other failure is a :class:`ProcessingError`.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = _DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def process_entry(
        self,
        fields: Any,
        options: Mapping[str, Any],
        context: RequestContext,
    ) -> PipelineResult:
        payload = {
            "fields": fields,
            "options": dict(options),
            "parameters": context.params.to_dict(),
            "ip": context.ip,
            "userAgent": context.user_agent,
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            resp = await client.post(self.url, json=payload)

        try:
            body = resp.json()
        except (json.JSONDecodeError, ValueError):
            body = None

        if resp.is_error or not isinstance(body, dict) or body.get("success") is False:
            raise self._error_from(resp, body)

        return PipelineResult(fields=body.get("fields", {}), redirect=body.get("redirect") or None)

    @staticmethod
    def _error_from(resp: httpx.Response, body: Any) -> GatewayError:
        if isinstance(body, dict) and body.get("errorCode"):
            logger.info("Pipeline rejected entry: %s", body["errorCode"])
            return GatewayError(body["errorCode"], data=body.get("data"))

        logger.warning("Pipeline failure (status %d) from %s", resp.status_code, resp.url)
        return ProcessingError(data={"status": resp.status_code})
