"""Entry submission endpoints."""

import logging
import re

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse, Response

from formgate.api.models import EntryResponse
from formgate.context import EntryParams, build_context, query_options
from formgate.normalizer import NormalizedResponse
from formgate.orchestrator import Failure

logger = logging.getLogger(__name__)

router = APIRouter(tags=["entries"])

_VERSION_RE = re.compile(r"^\d+$")
_SEGMENT_RE = re.compile(r"^[A-Za-z0-9_.\-]+$")

_RESPONSES = {
    200: {"model": EntryResponse, "description": "Entry accepted"},
    302: {"description": "Redirect to the caller-supplied success or error target"},
    500: {"model": EntryResponse, "description": "Entry rejected"},
}


def validate_segment(name: str, value: str) -> str:
    """Validate a path segment used to locate site configuration."""
    if not _SEGMENT_RE.match(value) or value in {".", ".."}:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid {name}. Only letters, numbers, underscores, hyphens, and periods are allowed.",
        )
    return value


def _params(version: str, username: str, repository: str, branch: str,
            property_name: str | None = None) -> EntryParams:
    if not _VERSION_RE.match(version):
        raise HTTPException(status_code=400, detail="Invalid API version. Expected a number, e.g. v2.")
    return EntryParams(
        version=version,
        username=validate_segment("username", username),
        repository=validate_segment("repository", repository),
        branch=validate_segment("branch", branch),
        property=validate_segment("property", property_name) if property_name else None,
    )


def render(normalized: NormalizedResponse) -> Response:
    if normalized.is_redirect:
        return RedirectResponse(url=normalized.redirect_to, status_code=normalized.status_code)
    return JSONResponse(content=normalized.body, status_code=normalized.status_code)


async def _handle_entry(request: Request, params: EntryParams) -> Response:
    normalizer = request.app.state.normalizer
    try:
        context = await build_context(request, params)
    except Exception as exc:
        logger.warning("Unreadable entry request on %s: %s", request.url.path, exc)
        options = query_options(request)
        normalized = normalizer.normalize(
            Failure(exc),
            redirect=options.get("redirect") or None,
            redirect_error=options.get("redirectError") or None,
        )
        return render(normalized)

    outcome = await request.app.state.orchestrator.handle(context)
    normalized = normalizer.normalize(
        outcome,
        redirect=context.redirect,
        redirect_error=context.redirect_error,
    )
    return render(normalized)


@router.post("/v{version}/entry/{username}/{repository}/{branch}", responses=_RESPONSES)
async def create_entry(request: Request, version: str, username: str,
                       repository: str, branch: str) -> Response:
    """Submit an entry for a site configured at the root of its config file."""
    return await _handle_entry(request, _params(version, username, repository, branch))


@router.post("/v{version}/entry/{username}/{repository}/{branch}/{property_name}", responses=_RESPONSES)
async def create_property_entry(request: Request, version: str, username: str,
                                repository: str, branch: str, property_name: str) -> Response:
    """Submit an entry for one property (config section) of a site."""
    return await _handle_entry(
        request, _params(version, username, repository, branch, property_name)
    )
