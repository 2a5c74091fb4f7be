import json
import sys
from pathlib import Path

import pytest
from click.testing import CliRunner

from bridgefs.__main__ import main
from bridgefs.cli import Context, cli, replay, show
from bridgefs.common import VERSION
from bridgefs.config import Config
from bridgefs.inodes import DuplicatePathError
from bridgefs.replay import InvalidOperationError


def test_replay_command(config: Config, isolated_dir: Path) -> None:
    opfile = isolated_dir / "ops.txt"
    opfile.write_text("add /a\nrename /a /b\nunlink /b\nget-path 2\n")
    runner = CliRunner()
    res = runner.invoke(replay, [str(opfile), "--dump"], obj=Context(config=config))
    assert res.exit_code == 0, res.output
    lines = res.output.splitlines()
    assert lines[:4] == [
        "add /a => 2",
        "rename /a /b => ok",
        "unlink /b => ok",
        "get-path 2 => /b",
    ]
    assert json.loads("\n".join(lines[4:])) == {
        "next_inode": 3,
        "forward": {"/": 1},
        "reverse": {"1": "/", "2": "/b"},
    }


def test_replay_command_errors(config: Config, isolated_dir: Path) -> None:
    runner = CliRunner()
    ctx = Context(config=config)

    opfile = isolated_dir / "ops.txt"
    opfile.write_text("chmod /a\n")
    res = runner.invoke(replay, [str(opfile)], obj=ctx)
    assert isinstance(res.exception, InvalidOperationError)

    opfile.write_text("add /\n")
    res = runner.invoke(replay, [str(opfile)], obj=ctx)
    assert isinstance(res.exception, DuplicatePathError)

    res = runner.invoke(replay, [str(isolated_dir / "missing.txt")], obj=ctx)
    assert res.exit_code == 2


def test_config_show(config: Config) -> None:
    res = CliRunner().invoke(show, obj=Context(config=config))
    assert res.exit_code == 0
    assert json.loads(res.output) == {"root_path": "/", "dump_on_violation": True}


def test_cli_group(isolated_dir: Path) -> None:
    cfgpath = isolated_dir / "config.toml"
    cfgpath.write_text('root_path = "/srv/store"\n')
    opfile = isolated_dir / "ops.txt"
    opfile.write_text("get-path 1\nadd-or-get /srv/store/a\n")
    runner = CliRunner()

    res = runner.invoke(cli, ["-c", str(cfgpath), "replay", str(opfile)])
    assert res.exit_code == 0, res.output
    assert res.output.splitlines() == ["get-path 1 => /srv/store", "add-or-get /srv/store/a => 2"]

    res = runner.invoke(cli, ["-c", str(cfgpath), "version"])
    assert res.exit_code == 0
    assert res.output.strip() == VERSION


@pytest.mark.usefixtures("isolated_dir")
def test_cli_missing_explicit_config() -> None:
    res = CliRunner().invoke(cli, ["-c", "nope.toml", "version"])
    assert res.exit_code != 0


@pytest.mark.usefixtures("isolated_dir")
def test_main_prints_expected_errors_without_traceback(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(sys, "argv", ["bridgefs", "-c", "nope.toml", "version"])
    with pytest.raises(SystemExit) as excinfo:
        main()
    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert "error (ConfigNotFoundError): Configuration file not found" in err
    assert "Traceback" not in err
