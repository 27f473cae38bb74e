"""Error kinds and the error taxonomy used to build public error responses.

Every failure that should reach the client with a stable code is raised as a
:class:`GatewayError`. The :class:`ErrorTaxonomy` maps its internal code to
the public ``errorCode`` and a human-readable message. A taxonomy instance
is built per application and injected into the response normalizer.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Failure sources reconciled by the gateway."""

    MISSING_CREDENTIALS = "MISSING_CREDENTIALS"
    CONFIG_MISMATCH = "CONFIG_MISMATCH"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    REPLAY_OR_FORGERY = "REPLAY_OR_FORGERY"
    PROCESSING_ERROR = "PROCESSING_ERROR"
    UNTAXONOMIZED = "UNTAXONOMIZED"


class GatewayError(Exception):
    """An error carrying a taxonomy code and optional structured data."""

    def __init__(self, code: str | ErrorKind, data: Any = None) -> None:
        self.code = code.value if isinstance(code, ErrorKind) else str(code)
        self.data = data
        super().__init__(self.code)

    def __str__(self) -> str:
        if self.data is None:
            return self.code
        try:
            detail = json.dumps(self.data, sort_keys=True, default=str)
        except (TypeError, ValueError):
            detail = repr(self.data)
        return f"{self.code}: {detail}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, data={self.data!r})"


class ProcessingError(GatewayError):
    """Opaque failure reported by the entry-processing pipeline."""

    def __init__(self, data: Any = None, code: str | ErrorKind = ErrorKind.PROCESSING_ERROR) -> None:
        super().__init__(code, data)


# Internal code -> (public errorCode, message)
_DEFAULT_ENTRIES: dict[str, tuple[str, str]] = {
    ErrorKind.MISSING_CREDENTIALS.value: (
        "RECAPTCHA_MISSING_CREDENTIALS",
        "Missing reCAPTCHA API credentials",
    ),
    ErrorKind.CONFIG_MISMATCH.value: (
        "RECAPTCHA_CONFIG_MISMATCH",
        "reCAPTCHA site key does not match the site configuration",
    ),
    ErrorKind.PROVIDER_ERROR.value: (
        "RECAPTCHA_PROVIDER_ERROR",
        "reCAPTCHA verification failed",
    ),
    ErrorKind.REPLAY_OR_FORGERY.value: (
        "RECAPTCHA_REPLAY_OR_FORGERY",
        "reCAPTCHA challenge was solved on an origin this site does not allow",
    ),
    ErrorKind.PROCESSING_ERROR.value: (
        "PROCESSING_ERROR",
        "The entry could not be processed",
    ),
    "E_INVALID_FIELD": ("E_INVALID_FIELD", "One or more fields are invalid"),
    "MISSING_REQUIRED_FIELDS": ("MISSING_REQUIRED_FIELDS", "Missing required fields"),
    "INVALID_FIELDS": ("INVALID_FIELDS", "Invalid fields"),
    "INVALID_EMAIL": ("INVALID_EMAIL", "Invalid email address"),
    "IS_SPAM": ("IS_SPAM", "The entry was flagged as spam"),
    "MISSING_CONFIG_FILE": ("MISSING_CONFIG_FILE", "Site configuration file not found"),
    "MISSING_CONFIG_BLOCK": ("MISSING_CONFIG_BLOCK", "Site configuration block not found"),
    "TOO_MANY_REQUESTS": ("TOO_MANY_REQUESTS", "Too many requests, try again later"),
}


class ErrorTaxonomy:
    """Registry mapping internal error codes to public codes and messages.

    Unknown codes are passed through as their own public code and have no
    message.
    """

    def __init__(self, entries: dict[str, tuple[str, str]] | None = None) -> None:
        self._entries: dict[str, tuple[str, str]] = dict(_DEFAULT_ENTRIES)
        if entries:
            self._entries.update(entries)

    def register(self, code: str, message: str, public_code: str | None = None) -> None:
        self._entries[code] = (public_code or code, message)

    def get_error_code(self, code: str) -> str:
        entry = self._entries.get(code)
        return entry[0] if entry else code

    def get_message(self, code: str) -> str | None:
        entry = self._entries.get(code)
        return entry[1] if entry else None

    def __contains__(self, code: object) -> bool:
        return code in self._entries
