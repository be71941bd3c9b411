"""Errors that end a release run.

The orchestrator returns one of these instead of raising; the CLI maps each
to a message and an exit code.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..core.status import LedgerWriteFailed
from ..platform.process import SpawnError

__all__ = [
    "AlreadyPublished",
    "BuildsFailed",
    "NoTargets",
    "PackagingFailed",
    "PublishFailed",
    "ReleaseError",
    "SpawnFailed",
]


@dataclass(frozen=True, slots=True)
class NoTargets:
    """The config resolved to an empty build matrix."""


@dataclass(frozen=True, slots=True)
class AlreadyPublished:
    version: str


@dataclass(frozen=True, slots=True)
class SpawnFailed:
    build_id: str
    error: SpawnError


@dataclass(frozen=True, slots=True)
class PackagingFailed:
    build_id: str
    reason: str


@dataclass(frozen=True, slots=True)
class BuildsFailed:
    version: str
    failed: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class PublishFailed:
    version: str
    reason: str


ReleaseError = (
    NoTargets
    | AlreadyPublished
    | LedgerWriteFailed
    | SpawnFailed
    | PackagingFailed
    | BuildsFailed
    | PublishFailed
)
