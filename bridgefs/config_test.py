import tempfile
from pathlib import Path, PurePosixPath

import pytest

from bridgefs.config import (
    Config,
    ConfigDecodeError,
    ConfigNotFoundError,
    InvalidConfigValueError,
)


def test_config_minimal() -> None:
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "config.toml"
        path.touch()

        c = Config.parse(config_path_override=path)
        assert c == Config.default()
        assert c.root_path == PurePosixPath("/")
        assert c.dump_on_violation is False


def test_config_full() -> None:
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "config.toml"
        with path.open("w") as fp:
            fp.write(
                """
                root_path = "/srv/store"
                dump_on_violation = true
                """
            )

        c = Config.parse(config_path_override=path)
        assert c == Config(
            root_path=PurePosixPath("/srv/store"),
            dump_on_violation=True,
        )


def test_config_not_found() -> None:
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "config.toml"
        with pytest.raises(ConfigNotFoundError):
            Config.parse(config_path_override=path)


def test_config_missing_default_file_uses_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    with tempfile.TemporaryDirectory() as tmpdir:
        monkeypatch.setattr("bridgefs.config.CONFIG_PATH", Path(tmpdir) / "config.toml")
        assert Config.parse() == Config.default()


def test_config_decode_error() -> None:
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "config.toml"
        with path.open("w") as fp:
            fp.write("root_path = ")
        with pytest.raises(ConfigDecodeError):
            Config.parse(config_path_override=path)


def test_config_value_validation() -> None:
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "config.toml"

        def write(x: str) -> None:
            with path.open("w") as fp:
                fp.write(x)

        # root_path
        write("root_path = 123")
        with pytest.raises(InvalidConfigValueError) as excinfo:
            Config.parse(config_path_override=path)
        assert (
            str(excinfo.value)
            == f"Invalid value for root_path in configuration file ({path}): Must be a str: got <class 'int'>"
        )
        write('root_path = "relative/store"')
        with pytest.raises(InvalidConfigValueError) as excinfo:
            Config.parse(config_path_override=path)
        assert (
            str(excinfo.value)
            == f"Invalid value for root_path in configuration file ({path}): Must be an absolute path: got relative/store"
        )

        # dump_on_violation
        write('dump_on_violation = "yes"')
        with pytest.raises(InvalidConfigValueError) as excinfo:
            Config.parse(config_path_override=path)
        assert (
            str(excinfo.value)
            == f"Invalid value for dump_on_violation in configuration file ({path}): Must be a bool: got <class 'str'>"
        )


def test_config_unrecognized_keys_warn(caplog: pytest.LogCaptureFixture) -> None:
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "config.toml"
        with path.open("w") as fp:
            fp.write(
                """
                lalala = 1
                [nested]
                key = "x"
                """
            )
        Config.parse(config_path_override=path)
        assert "Unrecognized options found in configuration file" in caplog.text
        assert "lalala" in caplog.text
        assert "nested.key" in caplog.text
