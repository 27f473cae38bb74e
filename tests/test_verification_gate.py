"""Tests for the verification gate: credential checks, provider errors, replay checks."""

import asyncio

import pytest

from formgate.errors import ErrorKind, GatewayError
from formgate.verification.gate import VerificationGate
from formgate.verification.provider import ProviderError

from tests.conftest import (
    SECRET,
    SITE_KEY,
    FakeProvider,
    FakeSiteConfigLoader,
    RecordingProviderFactory,
)


def _gate(site_data, provider=None):
    loader = FakeSiteConfigLoader(site_data)
    factory = RecordingProviderFactory(provider)
    return VerificationGate(loader, factory), loader, factory


def _verify(gate, context):
    return asyncio.run(gate.verify(context))


class TestVerificationDisabled:
    def test_disabled_returns_false_without_provider(self, make_context):
        gate, _, factory = _gate({"reCaptcha": {"enabled": False}})
        assert _verify(gate, make_context()) is False
        assert factory.built_with == []

    def test_missing_block_counts_as_disabled(self, make_context, recaptcha_options):
        gate, _, factory = _gate({})
        assert _verify(gate, make_context(options=recaptcha_options)) is False
        assert factory.built_with == []

    def test_loads_config_for_target_property(self, make_context, entry_params):
        gate, loader, _ = _gate({})
        _verify(gate, make_context())
        assert loader.calls == [entry_params]


class TestCredentialChecks:
    def test_missing_site_key_rejected(self, make_context, recaptcha_site_config):
        gate, _, factory = _gate(recaptcha_site_config)
        with pytest.raises(GatewayError) as exc_info:
            _verify(gate, make_context(options={}))
        assert exc_info.value.code == ErrorKind.MISSING_CREDENTIALS.value
        assert factory.built_with == []

    def test_empty_recaptcha_options_rejected(self, make_context, recaptcha_site_config):
        gate, _, factory = _gate(recaptcha_site_config)
        with pytest.raises(GatewayError) as exc_info:
            _verify(gate, make_context(options={"reCaptcha": {"secret": "whatever"}}))
        assert exc_info.value.code == "MISSING_CREDENTIALS"
        assert factory.built_with == []

    def test_foreign_site_key_rejected(self, make_context, recaptcha_site_config):
        gate, _, factory = _gate(recaptcha_site_config)
        options = {"reCaptcha": {"siteKey": "6LcSomeoneElse"}}
        with pytest.raises(GatewayError) as exc_info:
            _verify(gate, make_context(options=options))
        assert exc_info.value.code == "CONFIG_MISMATCH"
        assert factory.built_with == []
        assert factory.provider.calls == []


class TestProviderCall:
    def test_provider_built_with_site_credentials(self, make_context, recaptcha_site_config, recaptcha_options):
        gate, _, factory = _gate(recaptcha_site_config)
        assert _verify(gate, make_context(options=recaptcha_options)) is True
        assert factory.built_with == [(SITE_KEY, SECRET)]
        assert factory.provider.calls == [("solved-token", "203.0.113.7")]

    def test_provider_error_carries_payload(self, make_context, recaptcha_site_config, recaptcha_options):
        payload = {"success": False, "error-codes": ["invalid-input-response"]}
        gate, _, _ = _gate(recaptcha_site_config, FakeProvider(error=ProviderError(payload)))
        with pytest.raises(GatewayError) as exc_info:
            _verify(gate, make_context(options=recaptcha_options))
        assert exc_info.value.code == "PROVIDER_ERROR"
        assert exc_info.value.data == payload

    def test_unexpected_provider_exception_propagates(self, make_context, recaptcha_site_config, recaptcha_options):
        gate, _, _ = _gate(recaptcha_site_config, FakeProvider(error=ConnectionError("down")))
        with pytest.raises(ConnectionError):
            _verify(gate, make_context(options=recaptcha_options))

    def test_config_fetch_exception_propagates(self, make_context):
        gate = VerificationGate(FakeSiteConfigLoader(error=OSError("disk")), RecordingProviderFactory())
        with pytest.raises(OSError, match="disk"):
            _verify(gate, make_context())


class TestAllowedOrigins:
    def test_hostname_outside_allowlist_is_replay(self, make_context, recaptcha_site_config, recaptcha_options):
        site = {**recaptcha_site_config, "allowedOrigins": ["blog.example.org"]}
        gate, _, _ = _gate(site, FakeProvider(hostname="evil.example.net"))
        with pytest.raises(GatewayError) as exc_info:
            _verify(gate, make_context(options=recaptcha_options))
        assert exc_info.value.code == "REPLAY_OR_FORGERY"
        message = exc_info.value.data["message"]
        assert "evil.example.net" in message
        assert "blog.example.org" in message

    def test_hostname_in_allowlist_passes(self, make_context, recaptcha_site_config, recaptcha_options):
        site = {**recaptcha_site_config, "allowedOrigins": ["a.example.org", "blog.example.org"]}
        gate, _, _ = _gate(site, FakeProvider(hostname="blog.example.org"))
        assert _verify(gate, make_context(options=recaptcha_options)) is True

    def test_empty_allowlist_accepts_any_hostname(self, make_context, recaptcha_site_config, recaptcha_options):
        site = {**recaptcha_site_config, "allowedOrigins": []}
        gate, _, _ = _gate(site, FakeProvider(hostname="anywhere.example"))
        assert _verify(gate, make_context(options=recaptcha_options)) is True

    def test_single_string_origin_is_not_substring_matched(self, make_context, recaptcha_site_config, recaptcha_options):
        site = {**recaptcha_site_config, "allowedOrigins": "blog.example.org"}
        gate, _, _ = _gate(site, FakeProvider(hostname="example.org"))
        with pytest.raises(GatewayError) as exc_info:
            _verify(gate, make_context(options=recaptcha_options))
        assert exc_info.value.code == "REPLAY_OR_FORGERY"
