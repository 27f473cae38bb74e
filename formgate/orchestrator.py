"""Submission orchestrator: gate, process, and reduce everything to an Outcome."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Union

from formgate.analytics import AnalyticsClient, fire_and_forget
from formgate.context import RequestContext
from formgate.pipeline import EntryPipeline
from formgate.verification.gate import VerificationGate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Success:
    fields: Any = None
    redirect_url: str | None = None

    @property
    def error(self) -> None:
        return None


@dataclass(frozen=True)
class Failure:
    error: BaseException


Outcome = Union[Success, Failure]


class SubmissionOrchestrator:
    """Run one entry submission end to end.

    Holds only its collaborators; every value produced while handling a
    request lives in that request's :class:`Outcome`.
    """

    def __init__(
        self,
        gate: VerificationGate,
        pipeline: EntryPipeline,
        analytics: AnalyticsClient | None = None,
    ) -> None:
        self._gate = gate
        self._pipeline = pipeline
        self._analytics = analytics

    async def submit(self, context: RequestContext) -> Outcome:
        """Hand the entry to the pipeline and record a success event."""
        try:
            result = await self._pipeline.process_entry(context.fields, context.options, context)
        except Exception as exc:
            logger.warning("Entry processing failed for %s/%s: %s",
                           context.params.username, context.params.repository, exc)
            return Failure(exc)

        if self._analytics is not None:
            self._track_new_entry()

        return Success(fields=result.fields, redirect_url=result.redirect)

    def _track_new_entry(self) -> None:
        """Schedule the ``Entries / New entry`` event; failures are only logged."""
        try:
            pending = self._analytics.event("Entries", "New entry").send()
            if inspect.isawaitable(pending):
                fire_and_forget(pending)
        except Exception as exc:
            logger.warning("Analytics event not scheduled: %s", exc)

    async def handle(self, context: RequestContext) -> Outcome:
        """Verification gate followed by :meth:`submit`; never raises."""
        try:
            used = await self._gate.verify(context)
        except Exception as exc:
            logger.info("Verification rejected entry for %s/%s: %s",
                        context.params.username, context.params.repository, exc)
            return Failure(exc)

        logger.debug("reCAPTCHA %s", "verified" if used else "not used")
        return await self.submit(context)
