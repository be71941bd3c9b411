"""Persistent build-status ledger.

The ledger records, per release version, whether the version was published
and the outcome of every build of that version:

    ["1.0.0"]
    published = false

    ["1.0.0".build_names]
    "x86_64-unknown-linux-gnu" = "Success"
    "x86_64-pc-windows-gnu" = "Failed"

It is the only input to resume decisions: a build is redone unless its
recorded status is Success. The ledger is read once at startup and written
back after every state change, so a killed run leaves it consistent with
the last completed step (an interrupted build stays Started and is retried).

State machine per (version, build): Waiting (absent) -> Started ->
Success | Failed. Failed is retried by the next run; Success sticks until
the build disappears from the config and is pruned.
"""

from __future__ import annotations

import tomllib
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from ..platform.files import atomic_write_text
from .result import Err, Ok, Result
from .structured import as_str_dict, get_bool, get_table
from .toml_text import toml_key

__all__ = [
    "BuildStatus",
    "LedgerLoad",
    "LedgerStore",
    "LedgerWriteFailed",
    "StatusLedger",
    "VersionStatus",
    "dumps_ledger",
    "load_ledger",
    "save_ledger",
]


class BuildStatus(StrEnum):
    WAITING = "Waiting"
    STARTED = "Started"
    SUCCESS = "Success"
    FAILED = "Failed"

    @classmethod
    def parse(cls, value: object) -> BuildStatus:
        """Read a stored status. Anything unrecognised means "not built"."""
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                pass
        return cls.WAITING


@dataclass(slots=True)
class VersionStatus:
    published: bool = False
    build_names: dict[str, BuildStatus] = field(default_factory=dict)


@dataclass(slots=True)
class StatusLedger:
    """Build and publish state for every release version.

    All queries treat a missing version or build as "nothing built, not
    published", so a first-ever run needs no special casing.
    """

    versions: dict[str, VersionStatus] = field(default_factory=dict)

    def version_status(self, version: str) -> VersionStatus | None:
        return self.versions.get(version)

    def status_of(self, build_id: str, version: str) -> BuildStatus:
        vs = self.versions.get(version)
        if vs is None:
            return BuildStatus.WAITING
        return vs.build_names.get(build_id, BuildStatus.WAITING)

    def needs_compile(self, build_id: str, version: str) -> bool:
        return self.status_of(build_id, version) != BuildStatus.SUCCESS

    def clear_missing_targets(self, version: str, valid_ids: Iterable[str]) -> list[str]:
        """Drop builds of version that are no longer configured.

        Returns:
            The removed build ids, in ledger order.
        """
        vs = self.versions.get(version)
        if vs is None:
            return []
        keep = set(valid_ids)
        removed = [build_id for build_id in vs.build_names if build_id not in keep]
        for build_id in removed:
            del vs.build_names[build_id]
        return removed

    def _set_status(self, build_id: str, version: str, status: BuildStatus) -> None:
        vs = self.versions.setdefault(version, VersionStatus())
        vs.build_names[build_id] = status

    def start(self, build_id: str, version: str) -> None:
        self._set_status(build_id, version, BuildStatus.STARTED)

    def succeed(self, build_id: str, version: str) -> None:
        self._set_status(build_id, version, BuildStatus.SUCCESS)

    def fail(self, build_id: str, version: str) -> None:
        self._set_status(build_id, version, BuildStatus.FAILED)

    def all_clear(self, version: str) -> bool:
        """True if every recorded build of version succeeded.

        Vacuously true for a version with no recorded builds; callers that
        need "something was built" must check that separately.
        """
        vs = self.versions.get(version)
        if vs is None:
            return True
        return all(status == BuildStatus.SUCCESS for status in vs.build_names.values())

    def failed_builds(self, version: str) -> list[str]:
        """Build ids of version whose recorded status is not Success."""
        vs = self.versions.get(version)
        if vs is None:
            return []
        return [b for b, status in vs.build_names.items() if status != BuildStatus.SUCCESS]

    def is_published(self, version: str) -> bool:
        vs = self.versions.get(version)
        return vs.published if vs is not None else False

    def publish(self, version: str) -> None:
        self.versions.setdefault(version, VersionStatus()).published = True


# -----------------------------------------------------------------------------
# Persistence
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class LedgerWriteFailed:
    """The ledger could not be persisted; resuming would silently break."""

    path: Path
    reason: str

    @property
    def message(self) -> str:
        return f"Could not write status file {self.path}: {self.reason}"


@dataclass(frozen=True, slots=True)
class LedgerLoad:
    ledger: StatusLedger
    warning: str | None = None


def dumps_ledger(ledger: StatusLedger) -> str:
    blocks: list[str] = []
    for version, vs in ledger.versions.items():
        lines = [f"[{toml_key(version)}]", f"published = {'true' if vs.published else 'false'}", ""]
        lines.append(f"[{toml_key(version)}.build_names]")
        lines += [f"{toml_key(build_id)} = \"{status}\"" for build_id, status in vs.build_names.items()]
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks) + "\n" if blocks else ""


def _parse_ledger(data: dict[str, object]) -> StatusLedger | str:
    ledger = StatusLedger()
    for version, entry_obj in data.items():
        entry = as_str_dict(entry_obj)
        if entry is None:
            return f"entry for version {version!r} is not a table"
        published = get_bool(entry, "published")
        if published is None:
            return f"entry for version {version!r} has no boolean 'published'"
        # "arches" is how ledgers written before build names were keyed
        builds = get_table(entry, "build_names")
        if builds is None:
            builds = get_table(entry, "arches")
        if builds is None:
            return f"entry for version {version!r} has no build_names table"
        ledger.versions[version] = VersionStatus(
            published=published,
            build_names={build_id: BuildStatus.parse(s) for build_id, s in builds.items()},
        )
    return ledger


def load_ledger(path: Path) -> LedgerLoad:
    """Read the ledger, falling back to an empty one.

    A missing file is a first run. An unreadable or malformed file is
    reported through `LedgerLoad.warning` and also yields an empty ledger:
    the worst case is rebuilding targets that had already succeeded.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return LedgerLoad(ledger=StatusLedger())
    except (OSError, UnicodeDecodeError) as e:
        return LedgerLoad(ledger=StatusLedger(), warning=f"Could not read {path}: {e}")

    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        return LedgerLoad(ledger=StatusLedger(), warning=f"Invalid TOML in {path}: {e}")

    parsed = _parse_ledger(data)
    if isinstance(parsed, str):
        return LedgerLoad(ledger=StatusLedger(), warning=f"Ignoring {path}: {parsed}")
    return LedgerLoad(ledger=parsed)


def save_ledger(ledger: StatusLedger, path: Path) -> Result[None, LedgerWriteFailed]:
    try:
        atomic_write_text(path, dumps_ledger(ledger))
    except OSError as e:
        return Err(LedgerWriteFailed(path=path, reason=str(e)))
    return Ok(None)


@dataclass(slots=True)
class LedgerStore:
    """A ledger together with the file it is persisted to."""

    path: Path
    ledger: StatusLedger

    @classmethod
    def open(cls, path: Path) -> tuple[LedgerStore, str | None]:
        loaded = load_ledger(path)
        return cls(path=path, ledger=loaded.ledger), loaded.warning

    def persist(self) -> Result[None, LedgerWriteFailed]:
        return save_ledger(self.ledger, self.path)
