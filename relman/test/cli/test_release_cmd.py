from __future__ import annotations

import zipfile
from pathlib import Path

import pytest
import typer

from relman.cli.context import CLIContext
from relman.core.errors import ErrorCode
from relman.core.result import Ok, Result
from relman.core.status import BuildStatus, load_ledger
from relman.output.console import MockConsole
from relman.platform.process import SpawnError

CONFIG = """\
release_path = "releases"
included_files = ["README.md"]

[[config.Linux.amd64]]

[[config.Linux.amd64]]
build_name = "static"
libs = ["/opt/musl/lib"]

[[config.Solaris.sparc]]
"""


def _project(root: Path, config: str = CONFIG) -> None:
    (root / "Cargo.toml").write_text(
        '[package]\nname = "tool"\nversion = "0.3.1"\n', encoding="utf-8"
    )
    (root / "Release.toml").write_text(config, encoding="utf-8")
    (root / "README.md").write_text("# tool", encoding="utf-8")


def _patch(
    monkeypatch: pytest.MonkeyPatch, root: Path, exit_codes: dict[str, int] | None = None
) -> tuple[MockConsole, list[list[str]]]:
    import relman.cli.commands.release_cmd as release_cmd
    import relman.services.executor as executor_mod

    console = MockConsole()

    def fake_build_context(*, verbose: bool = False) -> CLIContext:
        return CLIContext(project_root=root, console=console)

    calls: list[list[str]] = []

    def fake_run_streaming(
        cmd: list[str], cwd: Path, env: dict[str, str] | None = None
    ) -> Result[int, SpawnError]:
        calls.append(cmd)
        triple = cmd[3]
        out = cwd / "target" / triple / "release"
        out.mkdir(parents=True, exist_ok=True)
        (out / "tool").write_bytes(b"bin")
        return Ok((exit_codes or {}).get(triple, 0))

    monkeypatch.setattr(release_cmd, "build_context", fake_build_context)
    monkeypatch.setattr(executor_mod, "run_streaming", fake_run_streaming)
    return console, calls


def _release(**overrides: object) -> None:
    import relman.cli.commands.release_cmd as release_cmd

    kwargs: dict[str, object] = {
        "force_compile": False,
        "publish": False,
        "verbose": False,
        "release_config": Path("Release.toml"),
        "status_file": Path("Status.toml"),
        "manifest": Path("Cargo.toml"),
    }
    kwargs.update(overrides)
    release_cmd.release(**kwargs)  # type: ignore[arg-type]


def test_release_builds_and_packages(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _project(tmp_path)
    console, calls = _patch(monkeypatch, tmp_path)

    _release()

    assert [c[3] for c in calls] == ["x86_64-unknown-linux-gnu", "x86_64-unknown-linux-gnu"]
    ledger = load_ledger(tmp_path / "Status.toml").ledger
    assert ledger.status_of("x86_64-unknown-linux-gnu", "0.3.1") == BuildStatus.SUCCESS
    assert ledger.status_of("x86_64-unknown-linux-gnu-static", "0.3.1") == BuildStatus.SUCCESS

    archive = tmp_path / "releases" / "tool" / "0.3.1" / "x86_64-unknown-linux-gnu-static.zip"
    with zipfile.ZipFile(archive) as zf:
        assert sorted(zf.namelist()) == ["README.md", "tool"]
    assert console.find("0.3.1: 2 built, 0 already built")
    assert console.find("skipped config entry: Solaris is not a valid operating system")


def test_release_second_run_skips(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _project(tmp_path)
    _patch(monkeypatch, tmp_path)
    _release()

    console, calls = _patch(monkeypatch, tmp_path)
    _release()

    assert calls == []
    assert console.find("0.3.1: 0 built, 2 already built")


def test_release_build_failure_exit_code(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _project(tmp_path)
    console, _ = _patch(monkeypatch, tmp_path, {"x86_64-unknown-linux-gnu": 101})

    with pytest.raises(typer.Exit) as exc:
        _release()

    assert exc.value.exit_code == int(ErrorCode.BUILD_ERROR)
    assert console.has_error()


def test_release_missing_manifest(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _project(tmp_path)
    (tmp_path / "Cargo.toml").unlink()
    console, calls = _patch(monkeypatch, tmp_path)

    with pytest.raises(typer.Exit) as exc:
        _release()

    assert exc.value.exit_code == int(ErrorCode.CONFIG_ERROR)
    assert calls == []
    assert console.find("Cargo manifest not found")


def test_release_bad_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _project(tmp_path, config='release_path = "r"\n')
    _, calls = _patch(monkeypatch, tmp_path)

    with pytest.raises(typer.Exit) as exc:
        _release()

    assert exc.value.exit_code == int(ErrorCode.CONFIG_ERROR)
    assert calls == []


def test_release_no_valid_targets(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _project(tmp_path, config='release_path = "r"\nincluded_files = []\n\n[[config.Mac.i686]]\n')
    console, _ = _patch(monkeypatch, tmp_path)

    with pytest.raises(typer.Exit) as exc:
        _release()

    assert exc.value.exit_code == int(ErrorCode.CONFIG_ERROR)
    assert console.find("No valid targets")


def test_release_old_schema_suggests_upgrade(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    v0 = """\
release_path = "releases"
license = "README.md"
readme = "README.md"

[config.Linux.amd64]
libs = []
env = {}
"""
    _project(tmp_path, config=v0)
    console, calls = _patch(monkeypatch, tmp_path)

    _release()

    assert len(calls) == 1
    assert console.find("uses config schema v0; run `relman upgrade-config`")


def test_release_publish_twice_is_user_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    import relman.services.publisher as publisher_mod

    def fake_publish_run(
        cmd: list[str], cwd: Path, env: dict[str, str] | None = None
    ) -> Result[int, SpawnError]:
        return Ok(0)

    monkeypatch.setattr(publisher_mod, "run_streaming", fake_publish_run)
    _project(tmp_path)
    _patch(monkeypatch, tmp_path)
    _release(publish=True)
    assert load_ledger(tmp_path / "Status.toml").ledger.is_published("0.3.1")

    console, calls = _patch(monkeypatch, tmp_path)
    with pytest.raises(typer.Exit) as exc:
        _release(publish=True)

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
    assert calls == []
    assert console.find("has already been published")


def test_release_corrupt_status_file_warns(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    _project(tmp_path)
    (tmp_path / "Status.toml").write_text("not [valid", encoding="utf-8")
    console, calls = _patch(monkeypatch, tmp_path)

    _release()

    assert len(calls) == 2
    assert console.has_warning()
    assert console.find("starting from an empty status file")
