"""Errors shared by every schema version, and the empty base of the chain."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

from ..result import Err, Result
from ..structured import StrDict

__all__ = ["ConfigError", "EmptyConfig", "parse_empty"]


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when a release config cannot be read, parsed or written."""

    message: str
    path: Path | None = None
    hint: str | None = None

    def at(self, path: Path) -> ConfigError:
        return replace(self, path=path)


@dataclass(frozen=True, slots=True)
class EmptyConfig:
    """Sentinel "no earlier version". Never parses and cannot be saved."""


def parse_empty(data: StrDict) -> Result[EmptyConfig, ConfigError]:
    return Err(ConfigError("no earlier config schema"))
