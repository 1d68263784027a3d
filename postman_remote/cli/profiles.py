"""CLI commands for API-key profile management.

Profiles are stored in the Newman rc file (``~/.postman/newmanrc`` or the
project ``.newmanrc``). A profile's API key is either obfuscated, which
only keeps it from appearing literally in the file, or encrypted with a
passkey that is asked for every time the profile is used.

Commands:
    - login: Store an API key under an alias
    - logout: Remove an alias
    - profiles: List stored aliases

Example:
    Store an encrypted key and remove it again::

        $ postman-remote login --alias work --encrypt
        $ postman-remote profiles
        $ postman-remote logout work
"""

import click

from postman_remote.cli.common import build_store, report_error
from postman_remote.credentials import codec
from postman_remote.credentials.models import DEFAULT_ALIAS, Profile
from postman_remote.exceptions import PostmanRemoteError

SUCCESS_LOGIN = "Login successful."
SUCCESS_LOGOUT = "Logout successful."


@click.command(name="login")
@click.option("--alias", default=DEFAULT_ALIAS, show_default=True, help="Name of the profile")
@click.option(
    "--api-key",
    prompt="Postman API key",
    hide_input=True,
    help="Postman API key (will prompt if not provided)",
)
@click.option("--encrypt/--no-encrypt", default=False, help="Protect the API key with a passkey")
@click.option("--passkey", default=None, help="Passkey for --encrypt (will prompt if not provided)")
@click.option("--project", is_flag=True, help="Store in the project rc file instead of the home one")
@click.pass_context
def login_command(
    ctx: click.Context,
    alias: str,
    api_key: str,
    encrypt: bool,
    passkey: str | None,
    project: bool,
) -> None:
    """Store a Postman API key under ALIAS.

    An existing profile with the same alias is replaced.
    """
    if not api_key:
        click.echo(click.style("Error: API key cannot be empty", fg="red"), err=True)
        ctx.exit(1)

    if encrypt and not passkey:
        passkey = click.prompt("Passkey", hide_input=True, confirmation_prompt=True)

    if encrypt and not passkey:
        click.echo(click.style("Error: Passkey cannot be empty", fg="red"), err=True)
        ctx.exit(1)

    if encrypt:
        profile = Profile(alias=alias, secret=codec.encrypt(api_key, passkey), encrypted=True)
    else:
        profile = Profile(alias=alias, secret=codec.encode(api_key), encrypted=False)

    target = "project" if project else "home"
    store = build_store(ctx.obj["settings"])

    try:
        data = store.load(home=not project, project=project)
        path = store.store(store.add_profile(data, profile), target)
    except PostmanRemoteError as e:
        report_error(e)

    click.echo(f"Stored profile {alias} in {path}")
    click.echo(click.style(SUCCESS_LOGIN, fg="green"))


@click.command(name="logout")
@click.argument("alias", default=DEFAULT_ALIAS)
@click.option("--project", is_flag=True, help="Remove from the project rc file instead of the home one")
@click.pass_context
def logout_command(ctx: click.Context, alias: str, project: bool) -> None:
    """Remove the profile ALIAS (default: "default")."""
    target = "project" if project else "home"
    store = build_store(ctx.obj["settings"])

    try:
        data = store.load(home=not project, project=project)
        store.store(store.remove_profile(data, alias), target)
    except PostmanRemoteError as e:
        report_error(e)

    click.echo(click.style(SUCCESS_LOGOUT, fg="green"))


@click.command(name="profiles")
@click.pass_context
def profiles_command(ctx: click.Context) -> None:
    """List stored profile aliases."""
    settings = ctx.obj["settings"]
    store = build_store(settings)

    try:
        profiles = store.profiles(store.load(home=True, project=settings.use_project_rc))
    except PostmanRemoteError as e:
        report_error(e)

    if not profiles:
        click.echo(click.style("No profiles stored", fg="yellow"))
        return

    for profile in profiles:
        marker = " (encrypted)" if profile.encrypted else ""
        click.echo(f"{profile.alias}{marker}")
