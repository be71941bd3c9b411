"""Crate name and version from Cargo.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from .result import Err, Ok, Result
from .structured import get_str, get_table

__all__ = ["ManifestError", "ProjectManifest", "load_manifest"]


@dataclass(frozen=True, slots=True)
class ManifestError:
    message: str
    path: Path


@dataclass(frozen=True, slots=True)
class ProjectManifest:
    name: str
    version: str


def load_manifest(path: Path) -> Result[ProjectManifest, ManifestError]:
    """Read `[package] name` and `version` from a Cargo manifest."""
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Err(ManifestError(f"Cargo manifest not found: {path}", path=path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(ManifestError(f"Error reading {path}: {e}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ManifestError(f"Invalid TOML syntax: {e}", path=path))

    package = get_table(data, "package")
    if package is None:
        return Err(ManifestError("Cargo manifest has no [package] section", path=path))
    name = get_str(package, "name")
    if name is None:
        return Err(ManifestError("[package] has no name", path=path))
    version = get_str(package, "version")
    if version is None:
        return Err(ManifestError("[package] has no version", path=path))

    return Ok(ProjectManifest(name=name, version=version))
