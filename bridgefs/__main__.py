import sys

import click

from bridgefs.cli import cli
from bridgefs.common import BridgeExpectedError


def main() -> None:
    # Expected errors are the user's to fix, so show the message alone. Anything else, invariant
    # violations included, keeps its traceback.
    try:
        cli(prog_name="bridgefs")
    except BridgeExpectedError as e:
        click.secho(f"error ({type(e).__name__}): ", fg="red", bold=True, nl=False, err=True)
        click.echo(str(e), err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
