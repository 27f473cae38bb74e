"""Response normalizer.

Decision table, first match wins:

===========  =====================  ==================================
error        redirect target        response
===========  =====================  ==================================
no           success redirect       302 to the success target
yes          error redirect         302 to the error target
no           none                   200 ``{success, fields}``
yes          none                   500 ``{success, errorCode, ...}``
===========  =====================  ==================================

The status code never depends on which error occurred.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from formgate.errors import ErrorTaxonomy, GatewayError
from formgate.orchestrator import Failure, Outcome


@dataclass(frozen=True)
class NormalizedResponse:
    status_code: int
    body: dict[str, Any] | None = None
    redirect_to: str | None = None

    @property
    def is_redirect(self) -> bool:
        return self.redirect_to is not None


class ResponseNormalizer:
    def __init__(self, taxonomy: ErrorTaxonomy) -> None:
        self._taxonomy = taxonomy

    def normalize(
        self,
        outcome: Outcome,
        redirect: str | None = None,
        redirect_error: str | None = None,
    ) -> NormalizedResponse:
        """Map an outcome plus the caller's redirect options to a response.

        ``redirect`` is used when the pipeline did not return a success
        target of its own.
        """
        error = outcome.error if isinstance(outcome, Failure) else None
        status_code = 500 if error is not None else 200

        if error is None:
            target = outcome.redirect_url or redirect
            if target:
                return NormalizedResponse(status_code=302, redirect_to=target)

        if error is not None and redirect_error:
            return NormalizedResponse(status_code=302, redirect_to=redirect_error)

        return NormalizedResponse(status_code=status_code, body=self._payload(outcome, error))

    def _payload(self, outcome: Outcome, error: BaseException | None) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": error is None}

        if isinstance(error, GatewayError):
            message = self._taxonomy.get_message(error.code)
            if message:
                payload["message"] = message
            if error.data is not None:
                payload["data"] = error.data
            payload["rawError"] = str(error)
            payload["errorCode"] = self._taxonomy.get_error_code(error.code)
        elif error is not None:
            payload["rawError"] = str(error)
        else:
            payload["fields"] = outcome.fields

        return payload
