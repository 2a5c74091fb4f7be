"""
The cli module defines the bridgefs CLI interface. It does not have any domain logic of its own. It
is dedicated to parsing, resolving arguments, and delegating to the appropriate module.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

import click

from bridgefs.common import VERSION
from bridgefs.config import Config

logger = logging.getLogger(__name__)


@dataclass
class Context:
    config: Config


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Emit verbose logging.")
@click.option("--config", "-c", type=click.Path(path_type=Path), help="Override the config file location.")  # fmt: skip
@click.pass_context
def cli(cc: click.Context, verbose: bool, config: Path | None = None) -> None:
    """Inode table tooling for the filesystem bridge."""
    cc.obj = Context(
        config=Config.parse(config_path_override=config),
    )
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@cli.command()
def version() -> None:
    """Print version."""
    click.echo(VERSION)


@cli.group()
def config() -> None:
    """Utilites for configuring bridgefs."""


@config.command()
@click.pass_obj
def show(ctx: Context) -> None:
    """Print the effective configuration."""
    click.echo(json.dumps(ctx.config.dump(), indent=2))


# fmt: off
@cli.command()
@click.argument("opfile", type=click.Path(path_type=Path, exists=True, dir_okay=False), nargs=1)
@click.option("--dump", "-d", is_flag=True, help="Print the final state of the table as JSON.")
@click.pass_obj
# fmt: on
def replay(ctx: Context, opfile: Path, dump: bool) -> None:
    """Replay an operation log against a fresh inode table."""
    from bridgefs.inodes import create_inode_table
    from bridgefs.replay import parse_operations
    from bridgefs.replay import replay as replay_operations

    with opfile.open("r") as fp:
        ops = parse_operations(fp.read())
    table = create_inode_table(ctx.config)
    logger.debug(f"Replaying {len(ops)} operations from {opfile}")
    for line in replay_operations(table, ops):
        click.echo(line)
    if dump:
        click.echo(json.dumps(table.dump(), indent=2))
