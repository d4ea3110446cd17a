"""Root CLI command registration."""

from __future__ import annotations

import sys

import click

from monoterm.debug_log import configure_cli_logging
from monoterm.version import get_monoterm_version

from .init_config import init_config
from .listen import listen
from .msg import msg


@click.group(invoke_without_command=True)
@click.option("--version", is_flag=True, help="Show version and exit")
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (repeatable)")
@click.pass_context
def cli(ctx: click.Context, version: bool, verbose: int) -> None:
    """Talk to the running monoterm instance."""
    if version:
        click.echo(f"monoterm {get_monoterm_version()}")
        ctx.exit(0)

    configure_cli_logging(verbose)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        sys.exit(2)


cli.add_command(listen)
cli.add_command(msg)
cli.add_command(init_config)
