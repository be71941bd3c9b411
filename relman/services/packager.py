"""Staging and zipping of per-target release bundles.

For crate `tool` version `1.2.0` and target `x86_64-unknown-linux-gnu`:

    <release_path>/tool/1.2.0/x86_64-unknown-linux-gnu/      staging dir
        README.md, LICENSE, ...                               included files
        tool                                                  built binary
    <release_path>/tool/1.2.0/x86_64-unknown-linux-gnu.zip    archive
"""

from __future__ import annotations

import shutil
import stat
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol
from zipfile import ZIP_DEFLATED, ZipFile, ZipInfo

from ..core.result import Err, Ok, Result
from ..core.target import Os, Target
from ..platform.files import copy_file

__all__ = [
    "Packager",
    "PackagingError",
    "StagedOutput",
    "ZipPackager",
    "release_dir",
    "stage_target",
    "zip_directory",
]

_ARCHIVE_MODE = 0o755


@dataclass(frozen=True, slots=True)
class PackagingError:
    message: str


@dataclass(frozen=True, slots=True)
class StagedOutput:
    directory: Path
    binary: Path | None


class Packager(Protocol):
    def package(self, target: Target, version: str) -> Result[Path, PackagingError]:
        """Stage the target's outputs and return the archive path."""
        ...


def release_dir(release_path: Path, project_name: str, version: str) -> Path:
    return release_path / project_name / version


def _binary_candidates(project_root: Path, project_name: str, target: Target) -> list[Path]:
    out_dir = project_root / "target" / target.target_str / "release"
    plain = out_dir / project_name
    exe = out_dir / f"{project_name}.exe"
    # Windows builds produce only the .exe; look there first for them.
    return [exe, plain] if target.os == Os.WINDOWS else [plain, exe]


def _bundle_path(rel: str) -> Path | None:
    """Where an included file lands inside the bundle; None if it would escape it."""
    path = Path(rel)
    if path.is_absolute():
        path = path.relative_to(path.anchor)
    if ".." in path.parts:
        return None
    return path


def stage_target(
    *,
    project_root: Path,
    project_name: str,
    target: Target,
    included_files: Sequence[str],
    dest_dir: Path,
) -> Result[StagedOutput, PackagingError]:
    """Copy included files and the built binary into a fresh dest_dir.

    Included files keep their path relative to the project root; absolute
    entries are re-rooted under dest_dir. A missing binary (library crates)
    is not an error; a missing included file is.
    """
    bundle_paths: list[tuple[Path, Path]] = []
    for rel in included_files:
        inside = _bundle_path(rel)
        if inside is None:
            return Err(PackagingError(f"included file {rel} escapes the release bundle"))
        bundle_paths.append((project_root / rel, inside))

    try:
        # Leftovers from an earlier run would end up in the archive.
        if dest_dir.exists():
            shutil.rmtree(dest_dir)
        dest_dir.mkdir(parents=True)
        for src, inside in bundle_paths:
            copy_file(src, dest_dir / inside.parent, name=inside.name)

        binary: Path | None = None
        for candidate in _binary_candidates(project_root, project_name, target):
            if candidate.is_file():
                binary = copy_file(candidate, dest_dir)
                break
    except OSError as e:
        return Err(PackagingError(f"could not stage {target}: {e}"))

    return Ok(StagedOutput(directory=dest_dir, binary=binary))


def zip_directory(source_dir: Path, dest_zip: Path) -> Result[Path, PackagingError]:
    """Zip every file under source_dir, paths relative to it, mode 0755."""
    if not source_dir.is_dir():
        return Err(PackagingError(f"not a directory: {source_dir}"))

    try:
        dest_zip.parent.mkdir(parents=True, exist_ok=True)
        with ZipFile(dest_zip, "w", compression=ZIP_DEFLATED) as zf:
            for path in sorted(source_dir.rglob("*")):
                if not path.is_file():
                    continue
                arcname = path.relative_to(source_dir).as_posix()
                # ZIP cannot store timestamps before 1980 (e.g. mtime=0 in CI).
                info = ZipInfo.from_file(path, arcname, strict_timestamps=False)
                info.compress_type = ZIP_DEFLATED
                info.external_attr = (stat.S_IFREG | _ARCHIVE_MODE) << 16
                with path.open("rb") as src, zf.open(info, "w") as dst:
                    shutil.copyfileobj(src, dst)
    except OSError as e:
        return Err(PackagingError(f"could not write {dest_zip}: {e}"))

    return Ok(dest_zip)


class ZipPackager:
    """Stages each successful build and zips it next to its staging dir."""

    def __init__(
        self,
        *,
        project_root: Path,
        project_name: str,
        included_files: Sequence[str],
        release_path: Path,
    ) -> None:
        self._project_root = project_root
        self._project_name = project_name
        self._included_files = tuple(included_files)
        self._release_path = release_path

    def package(self, target: Target, version: str) -> Result[Path, PackagingError]:
        version_dir = release_dir(self._release_path, self._project_name, version)
        staged = stage_target(
            project_root=self._project_root,
            project_name=self._project_name,
            target=target,
            included_files=self._included_files,
            dest_dir=version_dir / target.output_string(),
        )
        if isinstance(staged, Err):
            return staged
        return zip_directory(staged.value.directory, version_dir / f"{target.output_string()}.zip")
