"""
The common module holds the plumbing shared by every other module: the version, the error
hierarchy, and logging setup.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path

import appdirs

with (Path(__file__).parent / ".version").open("r") as fp:
    VERSION = fp.read().strip()


class BridgeError(Exception):
    pass


class BridgeExpectedError(BridgeError):
    """These errors are printed without traceback."""

    pass


class InodeTableInvariantError(BridgeError):
    """
    The caller broke an invariant it was responsible for maintaining. These are programming errors,
    not recoverable conditions, so they are never expected errors and always carry a traceback.
    """

    pass


BRIEF_FORMAT = logging.Formatter("%(asctime)s %(levelname)-7s %(message)s", datefmt="%H:%M:%S")
DETAILED_FORMAT = logging.Formatter(
    "%(asctime)s.%(msecs)03d %(levelname)-7s [%(process)d %(name)s:%(lineno)d] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# Rotate at 8MiB, keep five old files around.
LOG_FILE_MAX_BYTES = 8 * 1024 * 1024
LOG_FILE_BACKUPS = 5

_configured_loggers: set[str | None] = set()


def log_directory() -> Path:
    """Where the log file goes: $XDG_STATE_HOME on Linux, ~/Library/Logs on macOS."""
    if appdirs.system == "darwin":
        return Path(appdirs.user_log_dir("bridgefs"))
    return Path(appdirs.user_state_dir("bridgefs"))


def initialize_logging(logger_name: str | None = None, log_dir: Path | None = None) -> None:
    """
    Attach a stderr handler and a rotating file handler to `logger_name`. Repeated calls for the
    same logger do nothing.

    Under pytest we leave the logger alone so that caplog sees every record, unless the LOG_TEST
    environment variable is set. Then the handlers are attached and both use the detailed format,
    which helps when chasing a table bug from inside a test.
    """
    if logger_name in _configured_loggers:
        return
    _configured_loggers.add(logger_name)

    forced = bool(os.environ.get("LOG_TEST"))
    if "pytest" in sys.modules and not forced:
        return

    logger = logging.getLogger(logger_name)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(DETAILED_FORMAT if forced else BRIEF_FORMAT)
    logger.addHandler(stderr_handler)

    log_dir = log_dir or log_directory()
    log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = logging.handlers.RotatingFileHandler(
        log_dir / "bridgefs.log",
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
    )
    file_handler.setFormatter(DETAILED_FORMAT)
    logger.addHandler(file_handler)
