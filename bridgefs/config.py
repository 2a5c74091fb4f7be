"""
The config module provides the config schema and parsing logic.

Like the rest of the filesystem bridge, we give detailed errors when an invalid configuration is
detected, and emit warnings when unrecognized keys are found.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any

import appdirs
import tomllib

from bridgefs.common import BridgeExpectedError

XDG_CONFIG_BRIDGEFS = Path(appdirs.user_config_dir("bridgefs"))
CONFIG_PATH = XDG_CONFIG_BRIDGEFS / "config.toml"

logger = logging.getLogger(__name__)


class ConfigNotFoundError(BridgeExpectedError):
    pass


class ConfigDecodeError(BridgeExpectedError):
    pass


class InvalidConfigValueError(BridgeExpectedError, ValueError):
    pass


@dataclass(frozen=True)
class Config:
    # The backing store path registered as the root inode.
    root_path: PurePosixPath
    # Log the whole inode table before raising an invariant violation. Can be huge.
    dump_on_violation: bool

    @classmethod
    def default(cls) -> Config:
        return Config(root_path=PurePosixPath("/"), dump_on_violation=False)

    @classmethod
    def parse(cls, config_path_override: Path | None = None) -> Config:
        # As we parse, delete consumed values from the data dictionary. If any are left over at the
        # end of the config, warn that unknown config keys were found.
        cfgpath = config_path_override or CONFIG_PATH
        # Every key has a default, so running without a config file is fine. Pointing us at a file
        # that doesn't exist is not.
        if config_path_override is None and not cfgpath.exists():
            logger.debug(f"No configuration file at {cfgpath}, using defaults")
            return cls.default()
        try:
            with cfgpath.open("r") as fp:
                data = tomllib.loads(fp.read())
        except FileNotFoundError as e:
            raise ConfigNotFoundError(f"Configuration file not found ({cfgpath})") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigDecodeError(
                f"Failed to decode configuration file: invalid TOML: {e}"
            ) from e

        try:
            raw_root_path = data["root_path"]
            del data["root_path"]
            if not isinstance(raw_root_path, str):
                raise ValueError(f"Must be a str: got {type(raw_root_path)}")
            root_path = PurePosixPath(raw_root_path)
            if not root_path.is_absolute():
                raise ValueError(f"Must be an absolute path: got {raw_root_path}")
        except KeyError:
            root_path = PurePosixPath("/")
        except ValueError as e:
            raise InvalidConfigValueError(
                f"Invalid value for root_path in configuration file ({cfgpath}): {e}"
            ) from e

        try:
            dump_on_violation = data["dump_on_violation"]
            del data["dump_on_violation"]
            if not isinstance(dump_on_violation, bool):
                raise ValueError(f"Must be a bool: got {type(dump_on_violation)}")
        except KeyError:
            dump_on_violation = False
        except ValueError as e:
            raise InvalidConfigValueError(
                f"Invalid value for dump_on_violation in configuration file ({cfgpath}): {e}"
            ) from e

        if data:
            unrecognized_accessors: list[str] = []
            # Do a DFS over the data keys to assemble the map of unknown keys. State is a tuple of
            # ("accessor", node).
            dfs_state: deque[tuple[str, Any]] = deque([("", data)])
            while dfs_state:
                accessor, node = dfs_state.pop()
                if isinstance(node, dict):
                    for k, v in node.items():
                        child_accessor = k if not accessor else f"{accessor}.{k}"
                        dfs_state.append((child_accessor, v))
                    continue
                unrecognized_accessors.append(accessor)
            logger.warning(
                f"Unrecognized options found in configuration file: {', '.join(unrecognized_accessors)}"
            )

        return Config(
            root_path=root_path,
            dump_on_violation=dump_on_violation,
        )

    def dump(self) -> dict[str, Any]:
        return {
            "root_path": str(self.root_path),
            "dump_on_violation": self.dump_on_violation,
        }
