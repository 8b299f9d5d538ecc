"""Command line tool for Community Hub sync.

Runs the same sync the host hooks run, against JSON file stores, which is
handy for checking credentials and mappings outside the host.
"""

from __future__ import annotations

from typing import Annotated

import typer
from dotenv import load_dotenv

from .admin import MappingEditor, sanitize_text
from .client import CommunityHubClient
from .config import mask_secret
from .credentials import CredentialCache
from .errors import CommunityHubSyncError
from .helpers import create_account_sync, load_settings
from .logging_config import get_logger, setup_logging
from .mapping import REMOTE_KEY, FieldMapping
from .storage import JsonFileSettingsStore
from .users import JsonFileUserStore

logger = get_logger("cli")

app = typer.Typer(
    name="communityhub-sync",
    help="Sync host user profiles from Community Hub (Salesforce) Accounts.",
    add_completion=False,
)

SettingsFile = Annotated[
    str,
    typer.Option(
        "--settings-file",
        "-s",
        envvar="COMMUNITYHUB_SETTINGS_FILE",
        help="JSON settings store",
    ),
]
UsersFile = Annotated[
    str,
    typer.Option(
        "--users-file",
        "-u",
        envvar="COMMUNITYHUB_USERS_FILE",
        help="JSON user store",
    ),
]


@app.callback()
def main(
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Log level (default: from LOG_LEVEL or INFO)"),
    ] = None,
) -> None:
    """Sync host user profiles from Community Hub Accounts."""
    load_dotenv()
    setup_logging(log_level)


@app.command()
def config(settings_file: SettingsFile = "settings.json") -> None:
    """Print the effective settings with secrets masked."""
    store = JsonFileSettingsStore(settings_file)
    settings = load_settings(store)
    cache = CredentialCache(store)

    items = [
        ("Sync Enabled", str(settings.sync_enabled)),
        ("Login URL", settings.login_url or "(not set)"),
        ("Client ID", settings.client_id or "(not set)"),
        ("Client Secret", mask_secret(settings.client_secret)),
        ("Username", settings.username or "(not set)"),
        ("Password", mask_secret(settings.password)),
        ("API Version", settings.api_version),
        ("Instance URL", cache.instance_url or "(not set)"),
        ("Access Token", mask_secret(cache.access_token)),
    ]
    for key, value in items:
        typer.echo(f"{key:<20} {value}")

    if settings.credentials() is None:
        typer.echo(
            "Warning: login_url, client_id, client_secret, username and password "
            "are all required to authenticate",
            err=True,
        )


@app.command()
def token(
    settings_file: SettingsFile = "settings.json",
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Ignore the cached token")
    ] = False,
) -> None:
    """Obtain an access token and report the instance URL."""
    store = JsonFileSettingsStore(settings_file)
    with CommunityHubClient(load_settings(store), CredentialCache(store)) as client:
        access_token = client.token_manager.get_token(force=force)
        if not access_token:
            typer.echo("Could not obtain an access token", err=True)
            raise typer.Exit(code=1)
        typer.echo(f"Access token: {mask_secret(access_token)}")
        typer.echo(f"Instance URL: {client.token_manager.cache.instance_url}")


@app.command()
def sync(
    user_id: Annotated[int, typer.Argument(help="Host user id")],
    settings_file: SettingsFile = "settings.json",
    users_file: UsersFile = "users.json",
) -> None:
    """Sync one user from their Community Hub Account."""
    store = JsonFileSettingsStore(settings_file)
    users = JsonFileUserStore(users_file)
    try:
        account_sync = create_account_sync(store, users)
    except CommunityHubSyncError as e:
        typer.echo(f"Cannot sync: {e}", err=True)
        raise typer.Exit(code=1) from e

    logger.debug("Syncing user %d", user_id)
    try:
        synced = account_sync.sync_user_data(user_id)
    finally:
        account_sync.client.close()

    if not synced:
        typer.echo(f"User {user_id} was not synced", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"User {user_id} synced")


@app.command("mapping-show")
def mapping_show(settings_file: SettingsFile = "settings.json") -> None:
    """List the field mapping table."""
    mapping = FieldMapping(JsonFileSettingsStore(settings_file))
    if not len(mapping):
        typer.echo("(no field mappings)")
        return
    for local_key in mapping.keys():
        typer.echo(f"{local_key:<30} <- {mapping.remote_key(local_key)}")


@app.command("mapping-set")
def mapping_set(
    local_key: Annotated[str, typer.Argument(help="Local profile field")],
    remote_key: Annotated[str, typer.Argument(help="Remote Account field")],
    settings_file: SettingsFile = "settings.json",
) -> None:
    """Add or change one field mapping."""
    mapping = FieldMapping(JsonFileSettingsStore(settings_file))
    rows = [
        {"local_key": key, "remote_key": mapping.remote_key(key)}
        for key in mapping.keys()
    ]
    rows.append({"local_key": local_key, "remote_key": remote_key})
    saved = MappingEditor(mapping).save(rows)
    key = sanitize_text(local_key)
    if key not in saved:
        typer.echo("Both keys must be non-empty plain text", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"{key} <- {saved[key][REMOTE_KEY]}")


@app.command("mapping-remove")
def mapping_remove(
    local_key: Annotated[str, typer.Argument(help="Local profile field")],
    settings_file: SettingsFile = "settings.json",
) -> None:
    """Remove one field mapping."""
    mapping = FieldMapping(JsonFileSettingsStore(settings_file))
    if not mapping.has(local_key):
        typer.echo(f"No mapping for {local_key}", err=True)
        raise typer.Exit(code=1)
    mapping.remove(local_key)
    mapping.save()
    typer.echo(f"Removed {local_key}")


if __name__ == "__main__":
    app()
