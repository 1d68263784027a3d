"""Helpers shared by the CLI commands."""

import sys
from typing import NoReturn

import click

from postman_remote.config.settings import RemoteSettings
from postman_remote.credentials.models import ResolutionContext
from postman_remote.credentials.profile_store import ProfileStore
from postman_remote.credentials.resolver import CredentialResolver
from postman_remote.exceptions import PostmanRemoteError


def report_error(error: PostmanRemoteError) -> NoReturn:
    """Print ``error`` and its hint to stderr and exit with status 1."""
    click.echo(click.style(f"Error: {error.message}", fg="red"), err=True)
    if error.hint:
        click.echo(click.style(f"Hint: {error.hint}", fg="yellow"), err=True)
    sys.exit(1)


def build_store(settings: RemoteSettings) -> ProfileStore:
    return ProfileStore(home_file=settings.rc_file, project_file=settings.project_rc_file)


def announce(message: str) -> None:
    click.echo(message, err=True)


def build_resolver() -> CredentialResolver:
    """Resolver prompting on the terminal and naming the profile it reads on stderr."""
    return CredentialResolver(announce=announce)


def build_context(
    settings: RemoteSettings,
    api_key: str | None = None,
    alias: str | None = None,
) -> ResolutionContext:
    """Create the resolution context for one CLI invocation.

    An API key from the command line or ``POSTMAN_API_KEY`` wins; the rc
    files are only read when no such key is given.

    Raises:
        ProfileStoreError: If an rc file is unreadable or invalid
    """
    explicit = api_key or settings.explicit_api_key
    if explicit:
        return ResolutionContext(explicit_secret=explicit)

    store = build_store(settings)
    data = store.load(home=True, project=settings.use_project_rc)
    return ResolutionContext(alias=alias or settings.api_key_alias, profiles=store.profiles(data))
