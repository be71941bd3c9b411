from __future__ import annotations

import os
import stat
import zipfile
from pathlib import Path

from relman.core.result import Err, Ok
from relman.core.target import Arch, Os, Target
from relman.services.packager import ZipPackager, release_dir, stage_target, zip_directory


def _target(os_: Os, arch: Arch, build_name: str | None = None) -> Target:
    created = Target.new(os_, arch, build_name)
    assert isinstance(created, Ok)
    return created.value


def _project(tmp_path: Path, target: Target, binary_name: str) -> Path:
    root = tmp_path / "project"
    (root / "docs").mkdir(parents=True)
    (root / "README.md").write_text("# tool", encoding="utf-8")
    (root / "LICENSE").write_text("MIT", encoding="utf-8")
    (root / "docs" / "guide.md").write_text("guide", encoding="utf-8")
    out_dir = root / "target" / target.target_str / "release"
    out_dir.mkdir(parents=True)
    (out_dir / binary_name).write_bytes(b"binary")
    return root


def test_release_dir_layout(tmp_path: Path) -> None:
    assert release_dir(tmp_path, "tool", "1.2.0") == tmp_path / "tool" / "1.2.0"


def test_stage_target_copies_files_and_binary(tmp_path: Path) -> None:
    target = _target(Os.LINUX, Arch.AMD64)
    root = _project(tmp_path, target, "tool")
    dest = tmp_path / "stage"

    result = stage_target(
        project_root=root,
        project_name="tool",
        target=target,
        included_files=["README.md", "docs/guide.md"],
        dest_dir=dest,
    )

    assert isinstance(result, Ok)
    assert result.value.binary == dest / "tool"
    assert (dest / "README.md").read_text(encoding="utf-8") == "# tool"
    assert (dest / "docs" / "guide.md").read_text(encoding="utf-8") == "guide"


def test_stage_target_prefers_exe_for_windows(tmp_path: Path) -> None:
    target = _target(Os.WINDOWS, Arch.AMD64)
    root = _project(tmp_path, target, "tool.exe")

    result = stage_target(
        project_root=root,
        project_name="tool",
        target=target,
        included_files=[],
        dest_dir=tmp_path / "stage",
    )

    assert isinstance(result, Ok)
    assert result.value.binary == tmp_path / "stage" / "tool.exe"


def test_stage_target_without_binary(tmp_path: Path) -> None:
    target = _target(Os.LINUX, Arch.AMD64)
    root = _project(tmp_path, target, "something-else")

    result = stage_target(
        project_root=root,
        project_name="tool",
        target=target,
        included_files=["LICENSE"],
        dest_dir=tmp_path / "stage",
    )

    assert isinstance(result, Ok)
    assert result.value.binary is None


def test_stage_target_missing_included_file(tmp_path: Path) -> None:
    target = _target(Os.LINUX, Arch.AMD64)
    root = _project(tmp_path, target, "tool")

    result = stage_target(
        project_root=root,
        project_name="tool",
        target=target,
        included_files=["CHANGELOG.md"],
        dest_dir=tmp_path / "stage",
    )

    assert isinstance(result, Err)
    assert "could not stage x86_64-unknown-linux-gnu" in result.error.message


def test_stage_target_reroots_absolute_included_file(tmp_path: Path) -> None:
    target = _target(Os.LINUX, Arch.AMD64)
    root = _project(tmp_path, target, "tool")
    shared = tmp_path / "shared" / "LICENSE-APACHE"
    shared.parent.mkdir()
    shared.write_text("Apache", encoding="utf-8")
    dest = tmp_path / "stage"

    result = stage_target(
        project_root=root,
        project_name="tool",
        target=target,
        included_files=[str(shared)],
        dest_dir=dest,
    )

    assert isinstance(result, Ok)
    staged = dest / shared.relative_to(shared.anchor)
    assert staged.read_text(encoding="utf-8") == "Apache"
    assert shared.read_text(encoding="utf-8") == "Apache"


def test_stage_target_rejects_parent_escape(tmp_path: Path) -> None:
    target = _target(Os.LINUX, Arch.AMD64)
    root = _project(tmp_path, target, "tool")
    (tmp_path / "outside.txt").write_text("x", encoding="utf-8")

    result = stage_target(
        project_root=root,
        project_name="tool",
        target=target,
        included_files=["../outside.txt"],
        dest_dir=tmp_path / "stage",
    )

    assert isinstance(result, Err)
    assert "../outside.txt" in result.error.message
    assert not (tmp_path / "stage").exists()


def test_zip_directory_handles_epoch_mtime(tmp_path: Path) -> None:
    source = tmp_path / "stage"
    (source / "docs").mkdir(parents=True)
    (source / "tool").write_bytes(b"binary")
    (source / "docs" / "guide.md").write_text("guide", encoding="utf-8")
    # ZIP cannot represent 1970; this must not raise.
    os.utime(source / "tool", (0, 0))

    result = zip_directory(source, tmp_path / "out" / "bundle.zip")

    assert result == Ok(tmp_path / "out" / "bundle.zip")
    with zipfile.ZipFile(tmp_path / "out" / "bundle.zip") as zf:
        assert sorted(zf.namelist()) == ["docs/guide.md", "tool"]
        assert zf.read("tool") == b"binary"
        mode = zf.getinfo("tool").external_attr >> 16
        assert stat.S_IMODE(mode) == 0o755


def test_zip_directory_rejects_missing_source(tmp_path: Path) -> None:
    result = zip_directory(tmp_path / "missing", tmp_path / "bundle.zip")
    assert isinstance(result, Err)
    assert not (tmp_path / "bundle.zip").exists()


def test_zip_packager_layout(tmp_path: Path) -> None:
    target = _target(Os.LINUX, Arch.AMD64, "static")
    root = _project(tmp_path, target, "tool")
    packager = ZipPackager(
        project_root=root,
        project_name="tool",
        included_files=["README.md", "LICENSE"],
        release_path=tmp_path / "releases",
    )

    result = packager.package(target, "1.2.0")

    version_dir = tmp_path / "releases" / "tool" / "1.2.0"
    assert result == Ok(version_dir / "x86_64-unknown-linux-gnu-static.zip")
    assert (version_dir / "x86_64-unknown-linux-gnu-static" / "tool").is_file()
    with zipfile.ZipFile(version_dir / "x86_64-unknown-linux-gnu-static.zip") as zf:
        assert sorted(zf.namelist()) == ["LICENSE", "README.md", "tool"]


def test_zip_packager_drops_files_from_earlier_run(tmp_path: Path) -> None:
    target = _target(Os.LINUX, Arch.AMD64)
    root = _project(tmp_path, target, "tool")

    def packager(included_files: list[str]) -> ZipPackager:
        return ZipPackager(
            project_root=root,
            project_name="tool",
            included_files=included_files,
            release_path=tmp_path / "releases",
        )

    assert isinstance(packager(["README.md", "docs/guide.md"]).package(target, "1.2.0"), Ok)
    result = packager(["README.md"]).package(target, "1.2.0")

    assert isinstance(result, Ok)
    assert not (result.value.parent / "x86_64-unknown-linux-gnu" / "docs").exists()
    with zipfile.ZipFile(result.value) as zf:
        assert sorted(zf.namelist()) == ["README.md", "tool"]
