"""Filesystem helpers."""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

__all__ = ["atomic_write_text", "copy_file"]


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Replace path with content, never leaving a partially written file.

    The content is written to a sibling temp file, flushed to disk, then
    moved over the destination. A crash leaves either the old or the new
    file, never a truncated one.

    Raises:
        OSError: If the parent directory cannot be created or the file
            cannot be written or replaced.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    finally:
        tmp_path.unlink(missing_ok=True)


def copy_file(src: Path, dest_dir: Path, *, name: str | None = None) -> Path:
    """Copy src into dest_dir (keeping permission bits) and return the new path.

    Raises:
        OSError: If src is missing or dest_dir is not writable.
    """
    dest_dir.mkdir(parents=True, exist_ok=True)
    dest = dest_dir / (name or src.name)
    shutil.copy2(src, dest)
    return dest
