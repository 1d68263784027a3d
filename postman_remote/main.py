"""CLI entry point for postman-remote."""

import json
import sys
from pathlib import Path
from typing import Any

import click
import pydantic
import structlog

from postman_remote.api.fetcher import ResourceFetcher
from postman_remote.cli.common import build_context, build_resolver, report_error
from postman_remote.cli.profiles import login_command, logout_command, profiles_command
from postman_remote.config.settings import RemoteSettings
from postman_remote.enums import ResourceKind
from postman_remote.exceptions import ConfigurationError, PostmanRemoteError
from postman_remote.loader import load_json
from postman_remote.utils.logging_config import configure_logging

log = structlog.get_logger(__name__)

KIND_CHOICE = click.Choice([kind.value for kind in ResourceKind])


def _write_json(data: Any, output: str | None) -> None:
    rendered = json.dumps(data, indent=2, ensure_ascii=False)
    if output:
        Path(output).write_text(rendered + "\n", encoding="utf-8")
        click.echo(click.style(f"Saved to {output}", fg="green"), err=True)
    else:
        click.echo(rendered)


@click.group()
@click.option(
    "--config",
    type=click.Path(dir_okay=False),
    default=None,
    envvar="POSTMAN_REMOTE_CONFIG",
    help="Path to a YAML settings file",
)
@click.option("--log-level", default="WARNING", help="Logging level")
@click.option("--log-json", is_flag=True, help="Emit logs as JSON lines")
@click.pass_context
def cli(ctx: click.Context, config: str | None, log_level: str, log_json: bool) -> None:
    """postman-remote: fetch Postman collections and environments."""
    configure_logging(log_level, json_output=log_json)

    try:
        settings = RemoteSettings.from_yaml(config) if config else RemoteSettings()
    except pydantic.ValidationError as e:
        report_error(ConfigurationError(f"Invalid settings: {e}"))
    except ConfigurationError as e:
        report_error(e)

    ctx.obj = {"settings": settings}


@cli.command()
@click.argument("kind", type=KIND_CHOICE)
@click.argument("location")
@click.option("--api-key", default=None, help="Postman API key (overrides stored profiles)")
@click.option("--alias", default=None, help="Profile alias to take the API key from")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write JSON to a file")
@click.pass_context
def fetch(
    ctx: click.Context,
    kind: str,
    location: str,
    api_key: str | None,
    alias: str | None,
    output: str | None,
) -> None:
    """Fetch a KIND from LOCATION (Postman ID/UID, URL or file path)."""
    settings = ctx.obj["settings"]

    try:
        context = build_context(settings, api_key, alias)
        with ResourceFetcher.from_settings(settings, resolver=build_resolver()) as fetcher:
            resource = load_json(ResourceKind(kind), location, fetcher, context)
    except PostmanRemoteError as e:
        log.debug("fetch_failed", kind=kind, error_kind=str(e.kind))
        report_error(e)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)

    _write_json(resource, output)


@cli.command(name="list")
@click.argument("kind", type=KIND_CHOICE)
@click.option("--api-key", default=None, help="Postman API key (overrides stored profiles)")
@click.option("--alias", default=None, help="Profile alias to take the API key from")
@click.pass_context
def list_resources(ctx: click.Context, kind: str, api_key: str | None, alias: str | None) -> None:
    """List every KIND in the workspaces of the API key."""
    settings = ctx.obj["settings"]

    try:
        context = build_context(settings, api_key, alias)
        with ResourceFetcher.from_settings(settings, resolver=build_resolver()) as fetcher:
            resources = fetcher.get_all(ResourceKind(kind), context)
    except PostmanRemoteError as e:
        report_error(e)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)

    _write_json(resources, None)


@cli.command()
@click.argument("kind", type=KIND_CHOICE)
@click.argument("location")
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.option("--api-key", default=None, help="Postman API key (overrides stored profiles)")
@click.option("--alias", default=None, help="Profile alias to take the API key from")
@click.pass_context
def sync(
    ctx: click.Context,
    kind: str,
    location: str,
    source: str,
    api_key: str | None,
    alias: str | None,
) -> None:
    """Upload the KIND in SOURCE file to LOCATION."""
    settings = ctx.obj["settings"]
    resource_kind = ResourceKind(kind)

    try:
        context = build_context(settings, api_key, alias)
        with ResourceFetcher.from_settings(settings, resolver=build_resolver()) as fetcher:
            data = load_json(resource_kind, source, fetcher, context)
            fetcher.update(resource_kind, data, location, context)
    except PostmanRemoteError as e:
        report_error(e)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)

    click.echo(click.style(f"Synchronized {kind} with {location}", fg="green"))


cli.add_command(login_command)
cli.add_command(logout_command)
cli.add_command(profiles_command)


if __name__ == "__main__":
    cli()
