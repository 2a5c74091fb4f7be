import logging
from collections.abc import Iterator
from pathlib import Path, PurePosixPath

import pytest
from click.testing import CliRunner

from bridgefs.config import Config
from bridgefs.inodes import InodeTable, create_inode_table

logger = logging.getLogger(__name__)


@pytest.fixture(autouse=True)
def debug_logging() -> None:
    logging.getLogger().setLevel(logging.DEBUG)


@pytest.fixture()
def isolated_dir() -> Iterator[Path]:
    with CliRunner().isolated_filesystem():
        yield Path.cwd()


@pytest.fixture()
def config() -> Config:
    return Config(
        root_path=PurePosixPath("/"),
        dump_on_violation=True,
    )


@pytest.fixture()
def table(config: Config) -> InodeTable:
    """A table with only the root registered, as the filesystem layer sets it up on mount."""
    return create_inode_table(config)
