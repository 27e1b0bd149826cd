"""Main CLI entry point."""

import logging

import click

from bankimport.config import load_settings
from bankimport.database.factories import create_database

# Import and register all commands at module level
from bankimport.cli.commands import (
    account,
    import_cmd,
    logs,
    serve,
    templates,
    worker,
)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _setup_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides BANKIMPORT_DB_PATH environment variable)",
    envvar="BANKIMPORT_DB_PATH",
)
@click.option(
    "--storage-dir",
    type=click.Path(),
    help="Object storage directory (overrides BANKIMPORT_STORAGE_DIR environment variable)",
)
@click.pass_context
def cli(ctx, db_path: str | None, storage_dir: str | None):
    """bankimport - Bank statement import pipeline.

    Import CSV, OFX/QFX, JSON, XML, MT940, XLS/XLSX and PDF statements into
    tenant accounts, process queued PDF imports and inspect import logs.
    """
    ctx.ensure_object(dict)

    try:
        settings = load_settings(database_path=db_path, storage_dir=storage_dir)
    except ValueError as e:
        raise click.UsageError(str(e)) from e

    _setup_logging(settings.log_level)
    ctx.obj["settings"] = settings

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_database(settings)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db


# Register all commands
account.register_commands(cli)
import_cmd.register_commands(cli)
worker.register_commands(cli)
logs.register_commands(cli)
templates.register_commands(cli)
serve.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
