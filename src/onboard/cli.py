"""Command line entry point: serve the web app or run the workflow headless."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
import uvicorn

from onboard.auth import authenticated_client
from onboard.config import AppSettings, ConfigError, load_setup
from onboard.logging import setup_logging
from onboard.reconcile import IdentityResolutionError
from onboard.tracker.github import DEFAULT_API_URL
from onboard.workflow import EventType, run_workflow

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(package_name="technical-onboarding")
def main() -> None:
    """Technical onboarding - GitHub boards for new hires."""


@main.command()
@click.option("--host", default=None, help="Bind address (default: ONBOARD_HOST or 127.0.0.1)")
@click.option("--port", type=int, default=None, help="Port (default: ONBOARD_PORT or 9000)")
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for log files (default: ONBOARD_LOG_DIR or ./logs)",
)
def serve(host: str | None, port: int | None, log_dir: Path | None) -> None:
    """Serve the OAuth login and workload pages."""
    from onboard.api import create_app  # noqa: PLC0415

    try:
        settings = AppSettings.from_env()
        setup = load_setup(settings.config_path)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    setup_logging(log_dir or settings.log_dir, settings.log_level, secrets=[setup.client_secret])

    app = create_app(setup, settings=settings)
    uvicorn.run(app, host=host or settings.host, port=port or settings.port)


@main.command()
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to the setup file (default: ONBOARD_CONFIG or onboard.yaml)",
)
@click.option("--token", envvar="GITHUB_TOKEN", required=True, help="GitHub access token")
@click.option(
    "--username",
    default="",
    help="GitHub login to onboard (default: the token's owner)",
)
@click.option("--api-url", envvar="GITHUB_API_URL", default=DEFAULT_API_URL, show_default=True)
@click.option("--json", "as_json", is_flag=True, help="Print events as JSON lines")
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for log files (default: ONBOARD_LOG_DIR or ./logs)",
)
@click.option("-v", "--verbose", is_flag=True, help="Also log to stderr")
def run(
    config_path: Path | None,
    token: str,
    username: str,
    api_url: str,
    as_json: bool,
    log_dir: Path | None,
    verbose: bool,
) -> None:
    """Run the onboarding workflow once and print its events.

    Exits with status 1 when the run ends in an error.
    """
    try:
        settings = AppSettings.from_env()
        setup = load_setup(config_path or settings.config_path)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    setup_logging(
        log_dir or settings.log_dir,
        settings.log_level,
        console=verbose,
        secrets=[setup.client_secret, token],
    )

    client = authenticated_client(token, api_url)
    last = None
    try:
        for event in run_workflow(setup.workflow_spec(), username, client):
            last = event
            if as_json:
                click.echo(json.dumps(event.to_dict()))
            elif event.error:
                click.echo(f"[{event.kind.value}] {event.message}: {event.error}")
            else:
                click.echo(f"[{event.kind.value}] {event.message}")
    except IdentityResolutionError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        client.close()

    if last is None or last.kind is EventType.ERROR:
        logger.error("Run did not complete")
        sys.exit(1)
