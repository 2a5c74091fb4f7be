"""
The inodes module tracks the two-way mapping between the paths of the backing store and the inode
numbers that the kernel-facing filesystem layer hands out.

The kernel talks to us in inodes and caches them, while the backing store only understands paths.
So every request has us translate an inode into a path, and every time we expose a path to the
kernel for the first time we need a stable inode for it.

The subtle part is that the two directions are not kept perfectly in sync on purpose:

- `unlink` only removes the path -> inode entry. The kernel may still hold an open handle on the
  inode, and that handle must keep resolving to a path.
- `rename` onto an occupied path overwrites the occupant's path -> inode entry, but leaves the
  occupant's inode -> path entry as it was, which is now stale.

Nothing here locks. The filesystem layer is expected to serialize every mutating call.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, Generic, NoReturn, TypeVar

from sortedcontainers import SortedList

from bridgefs.common import InodeTableInvariantError
from bridgefs.paths import PathKey, RawPath, SharedPath, as_key

if TYPE_CHECKING:
    from bridgefs.config import Config

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")

ROOT_INODE = 1
MAX_INODE = 2**64 - 1


class DuplicatePathError(InodeTableInvariantError):
    pass


class UnknownPathError(InodeTableInvariantError):
    pass


class InodeSpaceExhaustedError(InodeTableInvariantError):
    pass


class OrderedIndex(Generic[K, V]):
    """
    OrderedIndex is a dict that also keeps its keys sorted, so that we can iterate over it in key
    order. Lookups go through the dict; the keys are also kept in a SortedList, so inserts and
    removals stay logarithmic.

    Keys only need to hash, compare equal, and order consistently with each other. That is what lets
    the path index be queried with a PathView while it stores SharedPaths.
    """

    def __init__(self) -> None:
        self._map: dict[K, V] = {}
        self._keys: SortedList = SortedList()

    def __len__(self) -> int:
        return len(self._map)

    def __contains__(self, key: K) -> bool:
        return key in self._map

    def get(self, key: K) -> V | None:
        return self._map.get(key)

    def insert(self, key: K, value: V) -> V | None:
        """
        Insert `key` -> `value`, returning the value previously stored under an equal key. The new
        key object replaces the old one, so the index always holds the most recently inserted key.
        """
        prev = self._map.pop(key, None)
        if prev is not None:
            # Drops the old key object, which compares equal to the new one.
            self._keys.remove(key)
        self._keys.add(key)
        self._map[key] = value
        return prev

    def pop(self, key: K) -> V | None:
        """Remove `key` and return its value. Removing an absent key is a no-op returning None."""
        value = self._map.pop(key, None)
        if value is not None:
            self._keys.remove(key)
        return value

    def items(self) -> Iterator[tuple[K, V]]:
        """
        Iterate over a snapshot of the entries in key order. The index may be modified while the
        iterator is live; changes are not reflected in it.
        """
        return iter([(k, self._map[k]) for k in self._keys])

    def keys(self) -> Iterator[K]:
        return iter(list(self._keys))


class InodeTable:
    """
    InodeTable is a bidirectional map of paths to inodes. Inodes are handed out in increasing order
    starting at ROOT_INODE and are never reused, even once no path refers to them anymore.
    """

    def __init__(self, dump_on_violation: bool = False):
        self.dump_on_violation = dump_on_violation

        self._path_to_inode: OrderedIndex[PathKey, int] = OrderedIndex()
        self._inode_to_path: OrderedIndex[int, SharedPath] = OrderedIndex()
        self._next_inode_ctr: int = ROOT_INODE

    def __len__(self) -> int:
        return len(self._path_to_inode)

    def __contains__(self, path: RawPath | PathKey) -> bool:
        return as_key(path) in self._path_to_inode

    def __repr__(self) -> str:
        return f"InodeTable(next_inode={self._next_inode_ctr}, live_paths={len(self)})"

    @property
    def next_inode(self) -> int:
        return self._next_inode_ctr

    def _next_inode(self) -> int:
        # Increment to infinity. Well, to 2^64 - 1.
        cur = self._next_inode_ctr
        if cur > MAX_INODE:
            self._violation(InodeSpaceExhaustedError(f"All {MAX_INODE} inodes have been issued"))
        self._next_inode_ctr += 1
        return cur

    def _violation(self, e: InodeTableInvariantError) -> NoReturn:
        if self.dump_on_violation:
            logger.debug(f"Inode table at time of violation: {self.dump()}")
        raise e

    def add(self, path: RawPath | SharedPath) -> int:
        """
        Register a path that the caller knows is not already in the table, and return its new inode.
        Raises DuplicatePathError if it is; that means the caller's own bookkeeping is broken. Use
        `add_or_get` when you cannot prove uniqueness.

        A str, bytes, or PurePath is wrapped in a new SharedPath, and that SharedPath is what
        `get_path` hands back. Compare its `.path` against a PurePosixPath, not the raw value. Pass a
        SharedPath in to get that very object back.
        """
        spath = SharedPath.of(path)
        if spath in self._path_to_inode:
            logger.debug(f"Attempted to add duplicate {spath=}")
            self._violation(DuplicatePathError(f"Duplicate path inserted into inode table: {spath}"))
        inode = self._next_inode()
        self._path_to_inode.insert(spath, inode)
        self._inode_to_path.insert(inode, spath)
        logger.debug(f"Allocated {inode=} for {spath=}")
        return inode

    def add_or_get(self, path: RawPath | SharedPath) -> int:
        """
        Return the inode of `path`, allocating and registering a new one only if the path is not in
        the table yet. Raw paths are wrapped in a SharedPath on insert, as in `add`.
        """
        inode = self._path_to_inode.get(as_key(path))
        if inode is not None:
            return inode
        spath = SharedPath.of(path)
        inode = self._next_inode()
        self._path_to_inode.insert(spath, inode)
        self._inode_to_path.insert(inode, spath)
        logger.debug(f"Allocated {inode=} for {spath=}")
        return inode

    def get_path(self, inode: int) -> SharedPath | None:
        # Unlinked inodes still resolve here; only inodes we never issued come back as None.
        return self._inode_to_path.get(inode)

    def get_inode(self, path: RawPath | PathKey) -> int | None:
        return self._path_to_inode.get(as_key(path))

    def rename(self, old_path: RawPath | PathKey, new_path: RawPath | SharedPath) -> None:
        """
        Move the inode of `old_path` over to `new_path`. Raises UnknownPathError if `old_path` is not
        in the table.

        If `new_path` was already registered to another inode, that inode loses its path -> inode
        entry, but its inode -> path entry still points at `new_path`.
        """
        old_key = as_key(old_path)
        if old_key not in self._path_to_inode:
            logger.debug(f"Attempted to rename unknown {old_key=}")
            self._violation(UnknownPathError(f"Renamed path not found in inode table: {old_key}"))
        spath = SharedPath.of(new_path)
        inode = self._path_to_inode.pop(old_key)
        assert inode is not None
        self._inode_to_path.pop(inode)

        replaced = self._path_to_inode.insert(spath, inode)
        self._inode_to_path.insert(inode, spath)
        if replaced is not None and replaced != inode:
            logger.debug(f"Rename onto {spath=} displaced {replaced=}, which keeps its stale path")
        logger.debug(f"Renamed {inode=} from {old_key=} to {spath=}")

    def unlink(self, path: RawPath | PathKey) -> None:
        # The inode is no longer reachable by this name, but the inode -> path entry remains so that
        # open handles can keep resolving it.
        inode = self._path_to_inode.pop(as_key(path))
        if inode is not None:
            logger.debug(f"Unlinked {inode=} from {path=}")

    def items(self) -> Iterator[tuple[SharedPath, int]]:
        """Iterate over the live path -> inode entries in path order."""
        for k, v in self._path_to_inode.items():
            assert isinstance(k, SharedPath)
            yield k, v

    def dump(self) -> dict[str, Any]:
        return {
            "next_inode": self._next_inode_ctr,
            "forward": {str(k): v for k, v in self._path_to_inode.items()},
            "reverse": {k: str(v) for k, v in self._inode_to_path.items()},
        }


def create_inode_table(c: Config) -> InodeTable:
    """Create a table with the configured root path already registered as ROOT_INODE."""
    table = InodeTable(dump_on_violation=c.dump_on_violation)
    root_inode = table.add(c.root_path)
    assert root_inode == ROOT_INODE
    return table
