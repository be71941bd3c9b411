"""Tests for the status, targets and upgrade-config commands."""

from __future__ import annotations

from pathlib import Path
from types import ModuleType

import pytest
import typer

from relman.cli.context import CLIContext
from relman.core.config import ConfigState, load_config
from relman.core.errors import ErrorCode
from relman.core.result import Ok
from relman.core.status import StatusLedger, save_ledger
from relman.output.console import MockConsole

V1_CONFIG = """\
release_path = "releases"
included_files = ["README.md", "LICENSE"]

[config.Linux.amd64]
libs = ["/opt/lib"]
env = { CC = "gcc" }

[config.Windows.i686]
libs = []
env = {}
"""


def _use_console(monkeypatch: pytest.MonkeyPatch, module: ModuleType, root: Path) -> MockConsole:
    console = MockConsole()

    def fake_build_context(*, verbose: bool = False) -> CLIContext:
        return CLIContext(project_root=root, console=console)

    monkeypatch.setattr(module, "build_context", fake_build_context)
    return console


class TestUpgradeConfig:
    def test_rewrites_in_place(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        import relman.cli.commands.upgrade_config as cmd

        (tmp_path / "Release.toml").write_text(V1_CONFIG, encoding="utf-8")
        console = _use_console(monkeypatch, cmd, tmp_path)

        cmd.upgrade_config(release_config=Path("Release.toml"), out=None)

        loaded = load_config(tmp_path / "Release.toml")
        assert isinstance(loaded, Ok)
        assert loaded.value.state == ConfigState.CURRENT
        assert loaded.value.document.included_files == ("README.md", "LICENSE")
        assert console.find("(schema v1 -> v2)")

    def test_writes_to_out(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        import relman.cli.commands.upgrade_config as cmd

        (tmp_path / "Release.toml").write_text(V1_CONFIG, encoding="utf-8")
        _use_console(monkeypatch, cmd, tmp_path)

        cmd.upgrade_config(release_config=Path("Release.toml"), out=Path("new/Release.toml"))

        assert (tmp_path / "Release.toml").read_text(encoding="utf-8") == V1_CONFIG
        loaded = load_config(tmp_path / "new" / "Release.toml")
        assert isinstance(loaded, Ok)
        assert loaded.value.state == ConfigState.CURRENT

    def test_current_config_is_left_alone(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        import relman.cli.commands.upgrade_config as cmd

        content = 'release_path = "r"\nincluded_files = []\n\n[[config.Mac.amd64]]\n'
        (tmp_path / "Release.toml").write_text(content, encoding="utf-8")
        console = _use_console(monkeypatch, cmd, tmp_path)

        cmd.upgrade_config(release_config=Path("Release.toml"), out=None)

        assert (tmp_path / "Release.toml").read_text(encoding="utf-8") == content
        assert console.find("already uses schema v2")

    def test_missing_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        import relman.cli.commands.upgrade_config as cmd

        _use_console(monkeypatch, cmd, tmp_path)

        with pytest.raises(typer.Exit) as exc:
            cmd.upgrade_config(release_config=Path("Release.toml"), out=None)

        assert exc.value.exit_code == int(ErrorCode.CONFIG_ERROR)


class TestTargets:
    def test_lists_targets_and_skips(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        import relman.cli.commands.targets as cmd

        content = V1_CONFIG + "\n[config.Mac.i686]\nlibs = []\nenv = {}\n"
        (tmp_path / "Release.toml").write_text(content, encoding="utf-8")
        console = _use_console(monkeypatch, cmd, tmp_path)

        cmd.targets(release_config=Path("Release.toml"))

        assert console.messages[1:] == [
            "x86_64-unknown-linux-gnu",
            "  libs: /opt/lib",
            "  env: CC=gcc",
            "i686-pc-windows-gnu",
            "warning: skipped: Mac/i686 is not a supported target",
        ]


class TestStatus:
    def test_shows_versions(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        import relman.cli.commands.status as cmd

        ledger = StatusLedger()
        ledger.succeed("x86_64-unknown-linux-gnu", "1.0.0")
        ledger.publish("1.0.0")
        ledger.fail("x86_64-unknown-linux-gnu", "1.1.0")
        save_ledger(ledger, tmp_path / "Status.toml")
        console = _use_console(monkeypatch, cmd, tmp_path)

        cmd.status(status_file=Path("Status.toml"), version=None)

        assert console.messages == [
            "1.0.0 (published)",
            "  x86_64-unknown-linux-gnu: Success",
            "1.1.0 (not published)",
            "  x86_64-unknown-linux-gnu: Failed",
        ]

    def test_filters_one_version(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        import relman.cli.commands.status as cmd

        ledger = StatusLedger()
        ledger.succeed("a", "1.0.0")
        ledger.succeed("b", "1.1.0")
        save_ledger(ledger, tmp_path / "Status.toml")
        console = _use_console(monkeypatch, cmd, tmp_path)

        cmd.status(status_file=Path("Status.toml"), version="1.1.0")

        assert console.messages == ["1.1.0 (not published)", "  b: Success"]

    def test_unknown_version(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        import relman.cli.commands.status as cmd

        console = _use_console(monkeypatch, cmd, tmp_path)

        with pytest.raises(typer.Exit) as exc:
            cmd.status(status_file=Path("Status.toml"), version="9.9.9")

        assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
        assert console.has_error()

    def test_empty_ledger(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        import relman.cli.commands.status as cmd

        console = _use_console(monkeypatch, cmd, tmp_path)

        cmd.status(status_file=Path("Status.toml"), version=None)

        assert console.messages == ["No builds recorded yet"]
