"""Per-request context for entry submissions.

Static-site forms post ``application/x-www-form-urlencoded`` bodies using
bracket notation (``fields[name]=x``, ``options[reCaptcha][siteKey]=k``).
Query strings use the same notation and JSON bodies carry the nested
structure directly. ``fields`` and ``options`` are each taken from the query
string when present there, otherwise from the body.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

from starlette.datastructures import UploadFile
from starlette.requests import Request

logger = logging.getLogger(__name__)

CHALLENGE_RESPONSE_KEY = "g-recaptcha-response"

_BRACKET_RE = re.compile(r"\[([^\[\]]*)\]")
_FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


@dataclass(frozen=True)
class EntryParams:
    """Route parameters identifying the target site and property."""

    version: str
    username: str
    repository: str
    branch: str
    property: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RequestContext:
    """Read-only bundle of everything a submission needs."""

    params: EntryParams
    fields: Any = None
    options: Mapping[str, Any] = field(default_factory=dict)
    ip: str | None = None
    user_agent: str | None = None
    challenge_response: str | None = None

    @property
    def redirect(self) -> str | None:
        return self.options.get("redirect") or None

    @property
    def redirect_error(self) -> str | None:
        return self.options.get("redirectError") or None


# ---------------------------------------------------------------------------
# Bracket-notation expansion
# ---------------------------------------------------------------------------

def _split_key(key: str) -> list[str]:
    head, sep, rest = key.partition("[")
    if not sep or not head or not rest.endswith("]"):
        return [key]
    parts = _BRACKET_RE.findall(sep + rest)
    return [head, *parts] if parts else [key]


def _descend(root: dict[str, Any], path: list[str]) -> dict[str, Any]:
    node = root
    for part in path:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    return node


def expand_brackets(pairs: Iterable[tuple[str, Any]]) -> dict[str, Any]:
    """Turn flat ``a[b][c]=v`` pairs into nested mappings.

    ``a[]=v`` appends to a list. A later plain value for the same key
    replaces an earlier one.
    """
    result: dict[str, Any] = {}
    for key, value in pairs:
        parts = _split_key(key)
        if len(parts) > 1 and parts[-1] == "":
            parent = _descend(result, parts[:-2])
            bucket = parent.get(parts[-2])
            if not isinstance(bucket, list):
                bucket = []
                parent[parts[-2]] = bucket
            bucket.append(value)
        else:
            _descend(result, parts[:-1])[parts[-1]] = value
    return result


# ---------------------------------------------------------------------------
# Source merging
# ---------------------------------------------------------------------------

def _present(value: Any) -> bool:
    return value is not None and value != ""


def merge_sources(query: Mapping[str, Any], body: Mapping[str, Any]) -> tuple[Any, dict[str, Any]]:
    """Return ``(fields, options)``, preferring the query string per key.

    A query key wins whenever it was supplied, even as an empty mapping.
    """
    fields = query["fields"] if _present(query.get("fields")) else body.get("fields")
    options = query["options"] if _present(query.get("options")) else body.get("options")
    if options is None:
        options = {}
    if not isinstance(options, Mapping):
        logger.warning("Ignoring non-mapping options of type %s", type(options).__name__)
        options = {}
    return fields, dict(options)


def query_options(request: Request) -> dict[str, Any]:
    """Options carried by the query string alone, for when the body is unreadable."""
    _, options = merge_sources(expand_brackets(request.query_params.multi_items()), {})
    return options


async def read_body(request: Request) -> dict[str, Any]:
    """Parse the request body into a nested mapping (empty if unsupported)."""
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()

    if content_type == "application/json" or content_type.endswith("+json"):
        raw = await request.body()
        if not raw:
            return {}
        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Discarding malformed JSON body on %s", request.url.path)
            return {}
        return payload if isinstance(payload, dict) else {}

    if content_type in _FORM_TYPES:
        form = await request.form()
        return expand_brackets(
            (key, value) for key, value in form.multi_items() if not isinstance(value, UploadFile)
        )

    return {}


def client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded
    return request.client.host if request.client else None


async def build_context(request: Request, params: EntryParams) -> RequestContext:
    """Assemble the :class:`RequestContext` for an inbound entry request."""
    query = expand_brackets(request.query_params.multi_items())
    body = await read_body(request)
    fields, options = merge_sources(query, body)

    challenge = body.get(CHALLENGE_RESPONSE_KEY) or query.get(CHALLENGE_RESPONSE_KEY)

    return RequestContext(
        params=params,
        fields=fields,
        options=options,
        ip=client_ip(request),
        user_agent=request.headers.get("user-agent"),
        challenge_response=challenge if isinstance(challenge, str) else None,
    )
