"""reCAPTCHA verification-provider client.

A :class:`RecaptchaVerifier` is built for one site's credentials and used
for a single verification, so concurrent requests for different sites never
share client state. No retries are made; an HTTP failure propagates to the
caller as-is.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

import httpx

from formgate.utils import mask_secret

logger = logging.getLogger(__name__)

RECAPTCHA_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"
_DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class ProviderResult:
    """Successful verification as attested by the provider."""

    hostname: str | None
    challenge_ts: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)


class ProviderError(Exception):
    """The provider rejected the challenge response."""

    def __init__(self, payload: Any) -> None:
        self.payload = payload
        super().__init__(f"verification rejected: {payload!r}")


class VerificationProvider(Protocol):
    async def verify(self, response_token: str | None, remote_ip: str | None = None) -> ProviderResult: ...


ProviderFactory = Callable[[str, str], VerificationProvider]


class RecaptchaVerifier:
    """Verify challenge responses against Google's ``siteverify`` endpoint."""

    def __init__(
        self,
        site_key: str,
        secret: str,
        *,
        verify_url: str = RECAPTCHA_VERIFY_URL,
        timeout: float = _DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.site_key = site_key
        self._secret = secret
        self.verify_url = verify_url
        self.timeout = timeout
        self._transport = transport

    def __repr__(self) -> str:
        return f"RecaptchaVerifier(site_key={self.site_key!r}, secret={mask_secret(self._secret)!r})"

    async def verify(self, response_token: str | None, remote_ip: str | None = None) -> ProviderResult:
        if not response_token:
            raise ProviderError({"success": False, "error-codes": ["missing-input-response"]})

        form = {"secret": self._secret or "", "response": response_token}
        if remote_ip:
            form["remoteip"] = remote_ip

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            resp = await client.post(self.verify_url, data=form)
        resp.raise_for_status()
        payload = resp.json()

        if not isinstance(payload, dict) or not payload.get("success"):
            logger.info("reCAPTCHA rejected response for site key %s", self.site_key)
            raise ProviderError(payload)

        return ProviderResult(
            hostname=payload.get("hostname"),
            challenge_ts=payload.get("challenge_ts"),
            raw=payload,
        )


def recaptcha_factory(
    verify_url: str = RECAPTCHA_VERIFY_URL,
    timeout: float = _DEFAULT_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ProviderFactory:
    """Return a factory building one :class:`RecaptchaVerifier` per call."""

    def build(site_key: str, secret: str) -> RecaptchaVerifier:
        return RecaptchaVerifier(
            site_key,
            secret,
            verify_url=verify_url,
            timeout=timeout,
            transport=transport,
        )

    return build
