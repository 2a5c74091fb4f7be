"""
The replay module applies a recorded log of filesystem-layer calls to an inode table. It's a
debugging aid: when the table ends up in a surprising state, write down the sequence of calls and
step through it.

An operation log has one call per line:

    add /music
    add-or-get /music/a.flac
    get-inode /music/a.flac
    get-path 2
    rename /music/a.flac "/music/b c.flac"
    unlink /music/b.flac

Arguments are split like a shell would, so paths with spaces can be quoted. Blank lines and lines
starting with `#` are ignored.
"""

import logging
import shlex
from collections.abc import Iterator
from dataclasses import dataclass

from bridgefs.common import BridgeError, BridgeExpectedError
from bridgefs.inodes import InodeTable

logger = logging.getLogger(__name__)

# Operation name -> number of arguments.
OPERATIONS: dict[str, int] = {
    "add": 1,
    "add-or-get": 1,
    "get-inode": 1,
    "get-path": 1,
    "rename": 2,
    "unlink": 1,
}


class InvalidOperationError(BridgeExpectedError):
    pass


@dataclass(frozen=True, slots=True)
class Operation:
    name: str
    args: tuple[str, ...]
    lineno: int

    def __str__(self) -> str:
        return shlex.join([self.name, *self.args])


def parse_operations(text: str) -> list[Operation]:
    ops: list[Operation] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            tokens = shlex.split(line)
        except ValueError as e:
            raise InvalidOperationError(f"Failed to parse line {lineno}: {e}") from e
        name, args = tokens[0], tuple(tokens[1:])
        try:
            nargs = OPERATIONS[name]
        except KeyError as e:
            raise InvalidOperationError(
                f"Unknown operation {name} on line {lineno}: must be one of {', '.join(OPERATIONS)}"
            ) from e
        if len(args) != nargs:
            raise InvalidOperationError(
                f"Operation {name} on line {lineno} takes {nargs} argument(s): got {len(args)}"
            )
        if name == "get-path" and not args[0].isdigit():
            raise InvalidOperationError(
                f"Operation get-path on line {lineno} takes an inode number: got {args[0]}"
            )
        ops.append(Operation(name=name, args=args, lineno=lineno))
    return ops


def run_operation(table: InodeTable, op: Operation) -> str:
    """Apply a single operation and describe its result in one line."""
    logger.debug(f"Replaying line {op.lineno}: {op}")
    result: object = "ok"
    if op.name == "add":
        result = table.add(op.args[0])
    elif op.name == "add-or-get":
        result = table.add_or_get(op.args[0])
    elif op.name == "get-inode":
        result = table.get_inode(op.args[0])
    elif op.name == "get-path":
        result = table.get_path(int(op.args[0]))
    elif op.name == "rename":
        table.rename(op.args[0], op.args[1])
    elif op.name == "unlink":
        table.unlink(op.args[0])
    else:
        raise BridgeError(f"Impossible: unhandled operation {op.name}")
    return f"{op} => {result}"


def replay(table: InodeTable, ops: list[Operation]) -> Iterator[str]:
    for op in ops:
        yield run_operation(table, op)
