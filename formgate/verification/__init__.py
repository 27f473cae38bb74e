"""Human-verification gate and provider client."""

from formgate.verification.gate import VerificationGate
from formgate.verification.provider import (
    ProviderError,
    ProviderResult,
    RecaptchaVerifier,
    recaptcha_factory,
)

__all__ = [
    "VerificationGate",
    "ProviderError",
    "ProviderResult",
    "RecaptchaVerifier",
    "recaptcha_factory",
]
