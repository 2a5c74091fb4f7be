"""
The paths module defines the two kinds of path keys that the inode table indexes on.

1. SharedPath: The owned, immutable path value. A single SharedPath object is referenced by the
   forward index, the reverse index, and whichever callers are still holding it. Nobody owns it
   more than anybody else; it is garbage collected once the last holder lets go.

2. PathView: A borrowed, read-only stand-in for a path, used purely for lookups. It wraps whatever
   the caller already has (a str, the raw bytes from the kernel, a PurePath) without building a
   SharedPath or a PurePosixPath out of it. It does still split the raw value into its own tuple
   of segment strings, so it avoids building an owned key, not copying the path text.

Both inherit from PathKey, which defines equality, hashing, and ordering in terms of the path's
segments. Because every comparison goes through the same `split_segments` function, a view and an
owned key for the same path are interchangeable as dict and sorted-list keys.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import PurePath, PurePosixPath
from typing import Any

RawPath = str | bytes | PurePath


def split_segments(raw: str) -> tuple[str, ...]:
    """
    Split a path string into the segments we order and compare on. A leading slash becomes the root
    segment "/", and empty and "." segments are dropped, so "/a//b/./" and "/a/b" are the same key.
    """
    if not raw:
        return ()
    head: tuple[str, ...] = ("/",) if raw.startswith("/") else ()
    return head + tuple(s for s in raw.split("/") if s and s != ".")


def _to_str(raw: RawPath) -> str:
    if isinstance(raw, bytes):
        return os.fsdecode(raw)
    return str(raw)


class PathKey:
    """
    The comparison protocol shared by owned keys and borrowed views. Comparisons are only defined
    between PathKeys; comparing against a bare str or Path returns NotImplemented.
    """

    __slots__ = ()

    segments: tuple[str, ...]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PathKey):
            return NotImplemented
        return self.segments == other.segments

    def __ne__(self, other: object) -> bool:
        if not isinstance(other, PathKey):
            return NotImplemented
        return self.segments != other.segments

    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, PathKey):
            return NotImplemented
        return self.segments < other.segments

    def __le__(self, other: Any) -> bool:
        if not isinstance(other, PathKey):
            return NotImplemented
        return self.segments <= other.segments

    def __gt__(self, other: Any) -> bool:
        if not isinstance(other, PathKey):
            return NotImplemented
        return self.segments > other.segments

    def __ge__(self, other: Any) -> bool:
        if not isinstance(other, PathKey):
            return NotImplemented
        return self.segments >= other.segments

    def __hash__(self) -> int:
        return hash(self.segments)

    def __str__(self) -> str:
        if not self.segments:
            return ""
        if self.segments[0] == "/":
            return "/" + "/".join(self.segments[1:])
        return "/".join(self.segments)


@dataclass(frozen=True, slots=True, eq=False)
class SharedPath(PathKey):
    path: PurePosixPath
    segments: tuple[str, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "segments", split_segments(str(self.path)))

    @classmethod
    def of(cls, value: RawPath | SharedPath) -> SharedPath:
        # Hand back the same object so that sharing is preserved.
        if isinstance(value, SharedPath):
            return value
        if isinstance(value, PathView):
            value = value.raw
        return cls(PurePosixPath(_to_str(value)))


@dataclass(frozen=True, slots=True, eq=False)
class PathView(PathKey):
    raw: RawPath
    segments: tuple[str, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "segments", split_segments(_to_str(self.raw)))


def as_key(value: RawPath | PathKey) -> PathKey:
    """Borrow a lookup key for `value`. PathKeys are passed through untouched."""
    if isinstance(value, PathKey):
        return value
    return PathView(value)
