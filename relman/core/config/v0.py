"""Schema v0: separate `license`/`readme` fields, one override per target.

    release_path = "releases"
    license = "LICENSE"
    readme = "README.md"

    [config.Linux.amd64]
    libs = []
    env = {}
"""

from __future__ import annotations

from dataclasses import dataclass

from ..result import Err, Ok, Result
from ..structured import StrDict, as_str_dict, as_str_list, as_str_map, get_raw_str, get_table
from .base import ConfigError, EmptyConfig

__all__ = ["ConfigV0", "FlatOverride", "parse", "parse_flat_matrix", "upgrade"]

VERSION = 0


@dataclass(frozen=True, slots=True)
class FlatOverride:
    """Per-target override of the v0 and v1 schemas (no build name)."""

    libs: tuple[str, ...]
    env: dict[str, str]


FlatMatrix = dict[str, dict[str, FlatOverride]]


@dataclass(frozen=True, slots=True)
class ConfigV0:
    release_path: str
    license: str
    readme: str
    config: FlatMatrix


def _parse_flat_override(where: str, obj: object) -> Result[FlatOverride, ConfigError]:
    table = as_str_dict(obj)
    if table is None:
        return Err(ConfigError(f"{where} must be a table"))
    libs = as_str_list(table.get("libs"))
    if libs is None:
        return Err(ConfigError(f"{where}.libs must be a list of strings"))
    env = as_str_map(table.get("env"))
    if env is None:
        return Err(ConfigError(f"{where}.env must be a table of strings"))
    return Ok(FlatOverride(libs=tuple(libs), env=env))


def parse_flat_matrix(data: StrDict) -> Result[FlatMatrix, ConfigError]:
    """Parse `config.<os>.<arch> = {libs, env}`, shared with schema v1."""
    config = get_table(data, "config")
    if config is None:
        return Err(ConfigError("missing [config] table"))

    matrix: FlatMatrix = {}
    for os_name, os_obj in config.items():
        arches = as_str_dict(os_obj)
        if arches is None:
            return Err(ConfigError(f"config.{os_name} must be a table"))
        parsed: dict[str, FlatOverride] = {}
        for arch_name, override_obj in arches.items():
            override = _parse_flat_override(f"config.{os_name}.{arch_name}", override_obj)
            if isinstance(override, Err):
                return override
            parsed[arch_name] = override.value
        matrix[os_name] = parsed
    return Ok(matrix)


def parse(data: StrDict) -> Result[ConfigV0, ConfigError]:
    fields: dict[str, str] = {}
    for key in ("release_path", "license", "readme"):
        value = get_raw_str(data, key)
        if value is None:
            return Err(ConfigError(f"missing or non-string field: {key}"))
        fields[key] = value

    matrix = parse_flat_matrix(data)
    if isinstance(matrix, Err):
        return matrix

    return Ok(
        ConfigV0(
            release_path=fields["release_path"],
            license=fields["license"],
            readme=fields["readme"],
            config=matrix.value,
        )
    )


def upgrade(_: EmptyConfig) -> ConfigV0:
    return ConfigV0(release_path="", license="", readme="", config={})
