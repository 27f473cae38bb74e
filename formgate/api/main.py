"""FormGate FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from formgate import __version__
from formgate.analytics import AnalyticsClient
from formgate.api.middleware import request_logging_middleware
from formgate.config import GatewaySettings, get_config
from formgate.errors import ErrorTaxonomy
from formgate.normalizer import ResponseNormalizer
from formgate.orchestrator import SubmissionOrchestrator
from formgate.pipeline import EntryPipeline, HttpEntryPipeline
from formgate.site_config import FileSiteConfigLoader, SiteConfigLoader
from formgate.verification.gate import VerificationGate
from formgate.verification.provider import ProviderFactory, recaptcha_factory

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle handler."""
    config: GatewaySettings = app.state.config
    logger.info(
        "FormGate API starting - sites=%s, pipeline=%s, analytics=%s",
        config.sites_dir,
        config.pipeline_url or "<injected>",
        "on" if app.state.analytics_enabled else "off",
    )
    yield
    logger.info("FormGate API shutdown")


def create_app(
    config: GatewaySettings | None = None,
    *,
    site_loader: SiteConfigLoader | None = None,
    pipeline: EntryPipeline | None = None,
    provider_factory: ProviderFactory | None = None,
    taxonomy: ErrorTaxonomy | None = None,
    analytics: AnalyticsClient | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application.

    Collaborators default to the adapters described by ``config``; pass
    them explicitly to replace any of them.
    """
    config = config or get_config()

    if pipeline is None:
        if not config.pipeline_url:
            logger.critical("FORMGATE_PIPELINE_URL is not set. Set it in .env or export it.")
            raise ValueError("No entry pipeline configured: set FORMGATE_PIPELINE_URL")
        pipeline = HttpEntryPipeline(config.pipeline_url, timeout=config.pipeline_timeout)

    if analytics is None and config.analytics_enabled:
        analytics = AnalyticsClient(
            config.analytics_ua_tracking_id,
            collect_url=config.analytics_collect_url,
        )

    gate = VerificationGate(
        loader=site_loader or FileSiteConfigLoader(config.sites_dir),
        provider_factory=provider_factory or recaptcha_factory(
            verify_url=config.recaptcha_verify_url,
            timeout=config.recaptcha_timeout,
        ),
    )

    app = FastAPI(
        title="FormGate API",
        description="Verification-gated entry submission gateway for static sites",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.orchestrator = SubmissionOrchestrator(gate, pipeline, analytics)
    app.state.normalizer = ResponseNormalizer(taxonomy or ErrorTaxonomy())
    app.state.analytics_enabled = analytics is not None

    # CORS - forms may post from any configured static site
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    # Request logging and X-Request-ID middleware
    app.add_middleware(BaseHTTPMiddleware, dispatch=request_logging_middleware)

    from formgate.api.routes.entry import router as entry_router
    from formgate.api.routes.health import router as health_router

    app.include_router(entry_router)
    app.include_router(health_router)

    return app
