"""
FormGate CLI

Run the gateway and inspect how a site's verification is configured
"""
import click
from rich.console import Console
from rich.table import Table

from formgate import __version__
from formgate.config import get_config
from formgate.context import EntryParams
from formgate.errors import GatewayError
from formgate.site_config import FileSiteConfigLoader, create_config_object
from formgate.utils import get_logger, mask_secret, setup_logging

console = Console()
logger = get_logger(__name__)


# ═══════════════════════════════════════════════════════════════════
# MAIN CLI GROUP
# ═══════════════════════════════════════════════════════════════════

@click.group()
@click.version_option(version=__version__)
def main():
    """
    FormGate - verification-gated entry submissions for static sites
    """
    pass


# ═══════════════════════════════════════════════════════════════════
# SERVER
# ═══════════════════════════════════════════════════════════════════

@main.command()
@click.option('--host', default=None, help='Bind address (default: FORMGATE_API_HOST)')
@click.option('--port', type=int, default=None, help='Port (default: FORMGATE_API_PORT)')
@click.option('--reload', is_flag=True, help='Reload on code changes')
def serve(host, port, reload):
    """Run the gateway with uvicorn"""
    import uvicorn

    config = get_config()
    setup_logging(config.log_level, str(config.log_file) if config.log_file else None)

    uvicorn.run(
        "formgate.api.main:create_app",
        factory=True,
        host=host or config.api_host,
        port=port or config.api_port,
        reload=reload,
    )


# ═══════════════════════════════════════════════════════════════════
# SITE CONFIGURATION
# ═══════════════════════════════════════════════════════════════════

@main.command('site-config')
@click.argument('username')
@click.argument('repository')
@click.argument('branch')
@click.option('--property', 'property_name', default=None, help='Config section (API v2+)')
@click.option('--api-version', default='2', show_default=True, help='Entry API version')
@click.option('--sites-dir', type=click.Path(file_okay=False), default=None,
              help='Override FORMGATE_SITES_DIR')
def site_config(username, repository, branch, property_name, api_version, sites_dir):
    """Show the verification settings resolved for a site"""
    loader = FileSiteConfigLoader(sites_dir or get_config().sites_dir)
    params = EntryParams(
        version=api_version,
        username=username,
        repository=repository,
        branch=branch,
        property=property_name,
    )
    config_object = create_config_object(api_version, property_name)

    try:
        site = loader.load(params)
    except GatewayError as e:
        console.print(f"[bold red]✗ {e.code}[/bold red] {loader.config_path(params)}")
        raise SystemExit(1)

    table = Table(title=f"{username}/{repository}@{branch}")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="magenta")

    table.add_row("Config file", config_object.file)
    table.add_row("Config block", config_object.path or "<root>")
    table.add_row("reCAPTCHA enabled", str(bool(site.get("reCaptcha.enabled"))))
    table.add_row("reCAPTCHA site key", str(site.get("reCaptcha.siteKey") or ""))
    table.add_row("reCAPTCHA secret", mask_secret(str(site.get("reCaptcha.secret") or "")))

    origins = site.get("allowedOrigins") or []
    if isinstance(origins, str):
        origins = [origins]
    table.add_row("Allowed origins", ", ".join(origins) or "<any>")

    console.print(table)


if __name__ == '__main__':
    main()
