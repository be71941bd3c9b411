"""Schema v2 (current): a list of overrides per target, optional build names.

    release_path = "releases"
    included_files = ["README.md", "LICENSE"]

    [[config.Linux.amd64]]
    libs = ["/usr/local/lib"]

    [[config.Linux.amd64]]
    build_name = "static"
    env = { OPENSSL_STATIC = "1" }
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..resolve import Resolution, resolve_targets
from ..result import Err, Ok, Result
from ..structured import (
    StrDict,
    as_obj_list,
    as_str_dict,
    as_str_list,
    as_str_map,
    get_raw_str,
    get_table,
)
from .base import ConfigError
from .v1 import ConfigV1

__all__ = ["ReleaseConfig", "TargetOverride", "parse", "upgrade"]

VERSION = 2


@dataclass(frozen=True, slots=True)
class TargetOverride:
    """Per-target settings: variant name, native lib dirs, extra environment."""

    build_name: str | None = None
    libs: tuple[str, ...] = ()
    env: dict[str, str] = field(default_factory=dict)


TargetMatrix = dict[str, dict[str, list[TargetOverride]]]


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Current release configuration document."""

    release_path: str
    included_files: tuple[str, ...]
    config: TargetMatrix

    def targets(self) -> Resolution:
        return resolve_targets(self.config)


def _parse_override(where: str, obj: object) -> Result[TargetOverride, ConfigError]:
    table = as_str_dict(obj)
    if table is None:
        return Err(ConfigError(f"{where} must be a table"))

    build_name: str | None = None
    if "build_name" in table:
        build_name = get_raw_str(table, "build_name")
        if build_name is None:
            return Err(ConfigError(f"{where}.build_name must be a string"))

    libs = as_str_list(table.get("libs", []))
    if libs is None:
        return Err(ConfigError(f"{where}.libs must be a list of strings"))
    env = as_str_map(table.get("env", {}))
    if env is None:
        return Err(ConfigError(f"{where}.env must be a table of strings"))

    return Ok(TargetOverride(build_name=build_name, libs=tuple(libs), env=env))


def parse(data: StrDict) -> Result[ReleaseConfig, ConfigError]:
    release_path = get_raw_str(data, "release_path")
    if release_path is None:
        return Err(ConfigError("missing or non-string field: release_path"))
    included = as_str_list(data.get("included_files"))
    if included is None:
        return Err(ConfigError("included_files must be a list of strings"))
    config = get_table(data, "config")
    if config is None:
        return Err(ConfigError("missing [config] table"))

    matrix: TargetMatrix = {}
    for os_name, os_obj in config.items():
        arches = as_str_dict(os_obj)
        if arches is None:
            return Err(ConfigError(f"config.{os_name} must be a table"))
        per_arch: dict[str, list[TargetOverride]] = {}
        for arch_name, entries_obj in arches.items():
            where = f"config.{os_name}.{arch_name}"
            entries = as_obj_list(entries_obj)
            if entries is None:
                return Err(
                    ConfigError(
                        f"{where} must be an array of tables",
                        hint=f"use [[{where}]] for each build of this target",
                    )
                )
            overrides: list[TargetOverride] = []
            for index, entry in enumerate(entries):
                override = _parse_override(f"{where}[{index}]", entry)
                if isinstance(override, Err):
                    return override
                overrides.append(override.value)
            per_arch[arch_name] = overrides
        matrix[os_name] = per_arch

    return Ok(
        ReleaseConfig(
            release_path=release_path,
            included_files=tuple(included),
            config=matrix,
        )
    )


def upgrade(previous: ConfigV1) -> ReleaseConfig:
    matrix: TargetMatrix = {}
    for os_name, arches in previous.config.items():
        per_arch = matrix.setdefault(os_name, {})
        for arch_name, flat in arches.items():
            per_arch.setdefault(arch_name, []).append(
                TargetOverride(build_name=None, libs=flat.libs, env=dict(flat.env))
            )
    return ReleaseConfig(
        release_path=previous.release_path,
        included_files=previous.included_files,
        config=matrix,
    )
