"""Shared test fixtures for FormGate test suite."""

import os
from typing import Any

import pytest

from formgate.context import EntryParams, RequestContext
from formgate.errors import ErrorTaxonomy
from formgate.pipeline import PipelineResult
from formgate.site_config import SiteConfig
from formgate.verification.provider import ProviderError, ProviderResult

# Ensure test environment variables are set before any config import
os.environ.setdefault("FORMGATE_PIPELINE_URL", "http://pipeline.test/entries")
os.environ.setdefault("FORMGATE_ANALYTICS_UA_TRACKING_ID", "")


SITE_KEY = "6LcSiteKey"
SECRET = "server-held-secret"


# ---------------------------------------------------------------------------
# Fake collaborators
# ---------------------------------------------------------------------------

class FakeSiteConfigLoader:
    """Returns a fixed SiteConfig and records every lookup."""

    def __init__(self, data: dict[str, Any] | None = None, error: Exception | None = None) -> None:
        self.data = data or {}
        self.error = error
        self.calls: list[EntryParams] = []

    async def get_site_config(self, params: EntryParams) -> SiteConfig:
        self.calls.append(params)
        if self.error is not None:
            raise self.error
        return SiteConfig(self.data)


class FakeProvider:
    def __init__(self, hostname: str | None = "example.com", error: Exception | None = None) -> None:
        self.hostname = hostname
        self.error = error
        self.calls: list[tuple[str | None, str | None]] = []

    async def verify(self, response_token, remote_ip=None) -> ProviderResult:
        self.calls.append((response_token, remote_ip))
        if self.error is not None:
            raise self.error
        return ProviderResult(hostname=self.hostname, raw={"success": True, "hostname": self.hostname})


class RecordingProviderFactory:
    """Provider factory that remembers the credentials it was built with."""

    def __init__(self, provider: FakeProvider | None = None) -> None:
        self.provider = provider or FakeProvider()
        self.built_with: list[tuple[str, str]] = []

    def __call__(self, site_key: str, secret: str) -> FakeProvider:
        self.built_with.append((site_key, secret))
        return self.provider


class FakePipeline:
    def __init__(self, result: PipelineResult | None = None, error: Exception | None = None) -> None:
        self.result = result or PipelineResult(fields={"name": "x"})
        self.error = error
        self.calls: list[tuple[Any, dict]] = []

    async def process_entry(self, fields, options, context) -> PipelineResult:
        self.calls.append((fields, dict(options)))
        if self.error is not None:
            raise self.error
        return self.result


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def entry_params():
    return EntryParams(version="2", username="alice", repository="blog", branch="main", property="comments")


@pytest.fixture
def make_context(entry_params):
    """Factory for RequestContext with sensible defaults."""

    def _make(**overrides) -> RequestContext:
        values = {
            "params": entry_params,
            "fields": {"name": "x"},
            "options": {},
            "ip": "203.0.113.7",
            "user_agent": "pytest",
            "challenge_response": "solved-token",
        }
        values.update(overrides)
        return RequestContext(**values)

    return _make


@pytest.fixture
def recaptcha_site_config():
    """Site configuration with verification enabled."""
    return {
        "reCaptcha": {"enabled": True, "siteKey": SITE_KEY, "secret": SECRET},
    }


@pytest.fixture
def recaptcha_options():
    return {"reCaptcha": {"siteKey": SITE_KEY}}


@pytest.fixture
def taxonomy():
    return ErrorTaxonomy()
