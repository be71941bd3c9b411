"""Error presentation utilities.

Centralized error formatting and exit code mapping so every command reports
a failure once, the same way.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relman.core.config import ConfigError
from relman.core.errors import ErrorCode
from relman.core.manifest import ManifestError
from relman.core.status import LedgerWriteFailed
from relman.output.console import Style
from relman.services.release_errors import (
    AlreadyPublished,
    BuildsFailed,
    NoTargets,
    PackagingFailed,
    PublishFailed,
    ReleaseError,
    SpawnFailed,
)

if TYPE_CHECKING:
    from relman.output.console import ConsoleProtocol

__all__ = [
    "print_config_error",
    "print_manifest_error",
    "print_release_error",
    "release_error_exit_code",
]


def print_config_error(error: ConfigError, console: ConsoleProtocol) -> None:
    where = f" ({error.path})" if error.path is not None else ""
    console.error(f"{error.message}{where}")
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def print_manifest_error(error: ManifestError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    console.print(f"manifest: {error.path}", Style.DIM)


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    match error:
        case NoTargets():
            console.error("No valid targets in the release config")
            console.print("hint: run with --verbose to see skipped entries", Style.DIM)
        case AlreadyPublished(version=version):
            console.error(f"Version {version} has already been published")
            console.print("hint: bump the crate version before publishing again", Style.DIM)
        case LedgerWriteFailed():
            console.error(error.message)
        case SpawnFailed(build_id=build_id, error=spawn):
            console.error(f"{build_id}: {spawn}")
        case PackagingFailed(build_id=build_id, reason=reason):
            console.error(f"{build_id}: packaging failed: {reason}")
        case BuildsFailed(version=version, failed=failed):
            console.error(f"Some builds of {version} failed: {', '.join(failed)}")
            console.print("hint: re-run to retry only the failed targets", Style.DIM)
        case PublishFailed(version=version, reason=reason):
            console.error(f"Publishing {version} failed ({reason})")


def release_error_exit_code(error: ReleaseError) -> int:
    match error:
        case AlreadyPublished():
            return int(ErrorCode.USER_ERROR)
        case NoTargets():
            return int(ErrorCode.CONFIG_ERROR)
        case SpawnFailed() | BuildsFailed() | PublishFailed():
            return int(ErrorCode.BUILD_ERROR)
        case LedgerWriteFailed() | PackagingFailed():
            return int(ErrorCode.IO_ERROR)
