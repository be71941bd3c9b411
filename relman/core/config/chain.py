"""Loading release configs through the schema migration chain.

`SCHEMA_CHAIN` lists every schema the tool has shipped, newest first, and
ends with the empty base schema that never parses. A config file is parsed
as the newest schema that accepts it and then upgraded one step at a time
up to the current schema, so configs written for an older release keep
working without edits.
"""

from __future__ import annotations

import tomllib
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Any

from ...platform.files import atomic_write_text
from ..result import Err, Ok, Result
from ..structured import StrDict, as_str_dict
from . import v0, v1, v2
from ._toml import dumps_release_config
from .base import ConfigError, EmptyConfig, parse_empty
from .v2 import ReleaseConfig

__all__ = [
    "CURRENT_VERSION",
    "ConfigState",
    "LoadedConfig",
    "SCHEMA_CHAIN",
    "SchemaVersion",
    "load_config",
    "parse_config",
    "save_config",
]


class ConfigState(Enum):
    CURRENT = auto()
    UPGRADED = auto()

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(frozen=True, slots=True)
class SchemaVersion:
    """One historical config shape.

    Attributes:
        version: Schema number, or -1 for the empty base.
        parse: Parse untyped TOML data as this schema.
        upgrade: Build this schema's document from the previous schema's.
    """

    version: int
    parse: Callable[[StrDict], Result[Any, ConfigError]]
    upgrade: Callable[[Any], Any]


SCHEMA_CHAIN: tuple[SchemaVersion, ...] = (
    SchemaVersion(version=v2.VERSION, parse=v2.parse, upgrade=v2.upgrade),
    SchemaVersion(version=v1.VERSION, parse=v1.parse, upgrade=v1.upgrade),
    SchemaVersion(version=v0.VERSION, parse=v0.parse, upgrade=v0.upgrade),
    SchemaVersion(version=-1, parse=parse_empty, upgrade=lambda _: EmptyConfig()),
)

CURRENT_VERSION = SCHEMA_CHAIN[0].version


@dataclass(frozen=True, slots=True)
class LoadedConfig:
    document: ReleaseConfig
    state: ConfigState
    source_version: int


def parse_config(
    data: StrDict, chain: tuple[SchemaVersion, ...] = SCHEMA_CHAIN
) -> Result[LoadedConfig, ConfigError]:
    """Parse as the newest schema that accepts data, then upgrade to current.

    If no schema accepts the data, the error from the current schema is
    returned: it describes what the user should write today.
    """
    current = chain[0].parse(data)
    if isinstance(current, Ok):
        return Ok(
            LoadedConfig(
                document=current.value,
                state=ConfigState.CURRENT,
                source_version=chain[0].version,
            )
        )

    for index in range(1, len(chain)):
        older = chain[index].parse(data)
        if isinstance(older, Err):
            continue
        document: Any = older.value
        for newer in reversed(chain[:index]):
            document = newer.upgrade(document)
        return Ok(
            LoadedConfig(
                document=document,
                state=ConfigState.UPGRADED,
                source_version=chain[index].version,
            )
        )

    return current


def _read_toml(path: Path) -> Result[StrDict, ConfigError]:
    try:
        content = path.read_bytes()
    except FileNotFoundError:
        return Err(ConfigError(f"Release config not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except OSError as e:
        return Err(ConfigError(f"Error reading {path}: {e}", path=path))

    try:
        data_obj: object = tomllib.loads(content.decode("utf-8"))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Invalid UTF-8 in release config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Release config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[LoadedConfig, ConfigError]:
    """Load a release config of any known schema as the current schema.

    Args:
        path: Path to the release config (usually Release.toml)

    Returns:
        Ok(LoadedConfig) on success, Err(ConfigError) on failure
    """
    data = _read_toml(path)
    if isinstance(data, Err):
        return data
    return parse_config(data.value).map_err(lambda e: e.at(path))


def save_config(document: ReleaseConfig | EmptyConfig, path: Path) -> Result[None, ConfigError]:
    """Write a document in the current schema."""
    if isinstance(document, EmptyConfig):
        return Err(ConfigError("the empty base config cannot be saved", path=path))

    try:
        atomic_write_text(path, dumps_release_config(document))
    except OSError as e:
        return Err(ConfigError(f"Could not write {path}: {e}", path=path))
    return Ok(None)
