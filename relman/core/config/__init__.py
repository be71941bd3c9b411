"""Release configuration schemas and their migration chain."""

from .base import ConfigError, EmptyConfig
from .chain import (
    CURRENT_VERSION,
    SCHEMA_CHAIN,
    ConfigState,
    LoadedConfig,
    SchemaVersion,
    load_config,
    parse_config,
    save_config,
)
from .v2 import ReleaseConfig, TargetOverride

__all__ = [
    "CURRENT_VERSION",
    "ConfigError",
    "ConfigState",
    "EmptyConfig",
    "LoadedConfig",
    "ReleaseConfig",
    "SCHEMA_CHAIN",
    "SchemaVersion",
    "TargetOverride",
    "load_config",
    "parse_config",
    "save_config",
]
