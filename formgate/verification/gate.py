"""Verification gate: decide whether and how a challenge must be validated.

Checks run in a fixed order and the first failure wins:

1. verification disabled for the site -> not used (``False``)
2. caller supplied no site key -> ``MISSING_CREDENTIALS``
3. caller site key differs from the configured one -> ``CONFIG_MISMATCH``
4. provider rejects the challenge response -> ``PROVIDER_ERROR``
5. attested hostname outside ``allowedOrigins`` -> ``REPLAY_OR_FORGERY``

Steps 2 and 3 reject before any provider client is built. Exceptions raised
while loading the site configuration or talking to the provider propagate
unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from formgate.context import RequestContext
from formgate.errors import ErrorKind, GatewayError
from formgate.site_config import SiteConfigLoader
from formgate.verification.provider import ProviderError, ProviderFactory

logger = logging.getLogger(__name__)


def _allowed_origins(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


class VerificationGate:
    """Stateless gate; safe to share across concurrent requests."""

    def __init__(self, loader: SiteConfigLoader, provider_factory: ProviderFactory) -> None:
        self._loader = loader
        self._provider_factory = provider_factory

    async def verify(self, context: RequestContext) -> bool:
        """Return ``True`` if verification passed, ``False`` if not used.

        Raises :class:`GatewayError` when verification fails.
        """
        site_config = await self._loader.get_site_config(context.params)

        if not site_config.get("reCaptcha.enabled"):
            return False

        recaptcha_options = context.options.get("reCaptcha")
        supplied_key = recaptcha_options.get("siteKey") if isinstance(recaptcha_options, Mapping) else None

        if not supplied_key:
            logger.warning("reCAPTCHA missing credentials for %s/%s",
                           context.params.username, context.params.repository)
            raise GatewayError(ErrorKind.MISSING_CREDENTIALS)

        site_key = site_config.get("reCaptcha.siteKey")
        secret = site_config.get("reCaptcha.secret")

        if supplied_key != site_key:
            logger.warning("reCAPTCHA site key mismatch for %s/%s",
                           context.params.username, context.params.repository)
            raise GatewayError(ErrorKind.CONFIG_MISMATCH)

        provider = self._provider_factory(site_key, secret)
        try:
            result = await provider.verify(context.challenge_response, context.ip)
        except ProviderError as exc:
            logger.warning("reCAPTCHA provider error: %s", exc.payload)
            raise GatewayError(ErrorKind.PROVIDER_ERROR, data=exc.payload) from exc

        allowed = _allowed_origins(site_config.get("allowedOrigins"))
        if allowed and result.hostname not in allowed:
            message = (
                f"reCAPTCHA replay detected: challenge solved on {result.hostname!r}, "
                f"expected one of {allowed}"
            )
            logger.warning(message)
            raise GatewayError(ErrorKind.REPLAY_OR_FORGERY, data={"message": message})

        return True
