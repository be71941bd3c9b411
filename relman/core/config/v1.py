"""Schema v1: `included_files` list, still one override per target."""

from __future__ import annotations

from dataclasses import dataclass

from ..result import Err, Ok, Result
from ..structured import StrDict, as_str_list, get_raw_str
from .base import ConfigError
from .v0 import ConfigV0, FlatMatrix, parse_flat_matrix

__all__ = ["ConfigV1", "parse", "upgrade"]

VERSION = 1


@dataclass(frozen=True, slots=True)
class ConfigV1:
    release_path: str
    included_files: tuple[str, ...]
    config: FlatMatrix


def parse(data: StrDict) -> Result[ConfigV1, ConfigError]:
    release_path = get_raw_str(data, "release_path")
    if release_path is None:
        return Err(ConfigError("missing or non-string field: release_path"))
    included = as_str_list(data.get("included_files"))
    if included is None:
        return Err(ConfigError("included_files must be a list of strings"))

    matrix = parse_flat_matrix(data)
    if isinstance(matrix, Err):
        return matrix

    return Ok(
        ConfigV1(
            release_path=release_path,
            included_files=tuple(included),
            config=matrix.value,
        )
    )


def upgrade(previous: ConfigV0) -> ConfigV1:
    # readme first, then license
    return ConfigV1(
        release_path=previous.release_path,
        included_files=(previous.readme, previous.license),
        config=previous.config,
    )
