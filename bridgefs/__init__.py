from bridgefs.common import (
    VERSION,
    BridgeError,
    BridgeExpectedError,
    InodeTableInvariantError,
    initialize_logging,
)
from bridgefs.config import Config
from bridgefs.inodes import (
    MAX_INODE,
    ROOT_INODE,
    DuplicatePathError,
    InodeSpaceExhaustedError,
    InodeTable,
    UnknownPathError,
    create_inode_table,
)
from bridgefs.paths import PathKey, PathView, SharedPath, as_key

__all__ = [
    # Plumbing
    "initialize_logging",
    "VERSION",
    # Errors
    "BridgeError",
    "BridgeExpectedError",
    "InodeTableInvariantError",
    "DuplicatePathError",
    "UnknownPathError",
    "InodeSpaceExhaustedError",
    # Configuration
    "Config",
    # Path keys
    "PathKey",
    "PathView",
    "SharedPath",
    "as_key",
    # Inode table
    "MAX_INODE",
    "ROOT_INODE",
    "InodeTable",
    "create_inode_table",
]

initialize_logging(__name__)
