"""Main CLI entry point for writing-service management commands."""

import click

from writing_service.cli.commands import database, server
from writing_service.infra.logging.config import setup_logging


@click.group()
@click.version_option(version="1.0.0", prog_name="writing-service")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Writing Service CLI - management commands for the GraphQL backend.

    \b
    Command Groups:
      db         Schema creation and connectivity
      server     Development server

    \b
    Quick Start:
      writing-service db check            # Test database connection
      writing-service db create-tables    # Create missing tables
      writing-service server dev          # Run with auto-reload
    """
    ctx.ensure_object(dict)


cli.add_command(database.db)
cli.add_command(server.server)


def main() -> None:
    """Entry point for CLI."""
    setup_logging()
    cli(obj={})


if __name__ == "__main__":
    main()
