"""Write a default configuration file."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from monoterm.config import MonotermConfig
from monoterm.paths import get_config_path


@click.command("init-config")
@click.option(
    "--path",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Where to write the config (default: user config directory).",
)
@click.option("--force", is_flag=True, help="Overwrite an existing config file.")
def init_config(config_path: Path | None, force: bool) -> None:
    """Write the default configuration file."""
    path = config_path or get_config_path()
    if path.exists() and not force:
        click.secho(f"Config already exists: {path}", fg="yellow")
        click.echo("Use --force to overwrite it.")
        sys.exit(1)

    MonotermConfig().save(path)
    click.secho(f"Wrote {path}", fg="green")
