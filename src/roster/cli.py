"""CLI entry point for Roster.

Provides ``roster serve``, ``roster init-db`` and ``roster users`` subcommands.

Follows Function Core / Imperative Shell:
- Pure functions: format_user_line
- Shell: configure_logging, bootstrap_store
- Click commands: main, serve, init_db, users
"""

from __future__ import annotations

import atexit
import json
import logging
import sys
from typing import TYPE_CHECKING

import click

from roster.app import create_app
from roster.models import User
from roster.store import (
    StoreError,
    close_store,
    get_db_path,
    list_users,
    open_store,
    run_migrations,
)

if TYPE_CHECKING:
    from sqlalchemy import Engine

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_INFRASTRUCTURE_ERROR = 3

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 5000

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pure functions
# ---------------------------------------------------------------------------


def format_user_line(user: User) -> str:
    """Format a single user for terminal output."""
    return f"  {user.id:>5}  {user.created_at.isoformat(sep=' ')}  {user.name}"


# ---------------------------------------------------------------------------
# Shell
# ---------------------------------------------------------------------------


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def bootstrap_store(db_path: str | None) -> Engine:
    """Open the store and apply migrations, exiting the process on failure.

    There is no degraded mode: without a usable schema nothing can be served.
    """
    path = get_db_path(db_path)
    try:
        engine = open_store(path)
        run_migrations(engine)
    except StoreError as e:
        logger.error("%s", e)
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_INFRASTRUCTURE_ERROR)

    atexit.register(close_store, engine)
    return engine


# ---------------------------------------------------------------------------
# Click commands
# ---------------------------------------------------------------------------

db_path_option = click.option(
    "--db-path",
    envvar="ROSTER_DB_PATH",
    default=None,
    help="SQLite database file. Defaults to db/dev.db in the working directory.",
)


@click.group()
@click.version_option(package_name="roster")
@click.option("--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """Roster — minimal user list web app."""
    configure_logging(verbose)


@main.command()
@click.option(
    "--host",
    envvar="ROSTER_HOST",
    default=DEFAULT_HOST,
    show_default=True,
    help="Interface to bind.",
)
@click.option(
    "--port",
    envvar="ROSTER_PORT",
    type=int,
    default=DEFAULT_PORT,
    show_default=True,
    help="Port to listen on.",
)
@db_path_option
@click.option("--debug", is_flag=True, help="Run Flask in debug mode.")
def serve(host: str, port: int, db_path: str | None, debug: bool) -> None:
    """Serve the web client and the JSON API."""
    engine = bootstrap_store(db_path)
    app = create_app(engine)
    logger.info("Serving on http://%s:%d", host, port)
    app.run(host=host, port=port, debug=debug, use_reloader=False)


@main.command("init-db")
@db_path_option
def init_db(db_path: str | None) -> None:
    """Create the database and apply schema migrations."""
    bootstrap_store(db_path)
    click.echo(f"Database ready: {get_db_path(db_path)}")


@main.command()
@db_path_option
@click.option("--json", "output_json", is_flag=True, help="Machine-readable JSON output.")
def users(db_path: str | None, output_json: bool) -> None:
    """List users, newest first."""
    engine = bootstrap_store(db_path)
    records = [User.model_validate(row) for row in list_users(engine)]

    if output_json:
        click.echo(json.dumps([u.model_dump(mode="json") for u in records], indent=2))
        return

    if not records:
        click.echo("No users found.")
        return

    click.echo(f"Users ({len(records)}):")
    click.echo("")
    for user in records:
        click.echo(format_user_line(user))
