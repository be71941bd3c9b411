"""Resolve the configured OS/arch matrix into a list of build targets.

Resolution is best-effort: entries naming an unknown OS or architecture, an
unsupported (os, arch) pair, or a build already produced by an earlier
entry are recorded in `Resolution.skipped` and the rest of the matrix is
still resolved.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from .result import Err
from .target import Arch, Os, Target

if TYPE_CHECKING:
    from .config.v2 import TargetOverride

__all__ = ["Resolution", "SkippedEntry", "resolve_targets"]


SkipReason = Literal["unknown_os", "unknown_arch", "invalid_target", "duplicate"]


@dataclass(frozen=True, slots=True)
class SkippedEntry:
    os: str
    arch: str | None
    reason: SkipReason
    build_name: str | None = None

    @property
    def message(self) -> str:
        match self.reason:
            case "unknown_os":
                return f"{self.os} is not a valid operating system"
            case "unknown_arch":
                return f"{self.arch} is not a valid architecture"
            case "invalid_target":
                return f"{self.os}/{self.arch} is not a supported target"
            case "duplicate":
                name = f" ({self.build_name})" if self.build_name else ""
                return f"{self.os}/{self.arch}{name} is configured more than once"


@dataclass(frozen=True, slots=True)
class Resolution:
    targets: tuple[Target, ...]
    skipped: tuple[SkippedEntry, ...]

    def output_strings(self) -> list[str]:
        return [t.output_string() for t in self.targets]


def resolve_targets(
    matrix: Mapping[str, Mapping[str, Sequence[TargetOverride]]],
) -> Resolution:
    """Build the target list in document order."""
    targets: list[Target] = []
    skipped: list[SkippedEntry] = []
    seen: set[str] = set()

    for os_name, arches in matrix.items():
        os = Os.parse(os_name)
        if os is None:
            skipped.append(SkippedEntry(os=os_name, arch=None, reason="unknown_os"))
            continue

        for arch_name, overrides in arches.items():
            arch = Arch.parse(arch_name)
            if arch is None:
                skipped.append(SkippedEntry(os=os_name, arch=arch_name, reason="unknown_arch"))
                continue

            for override in overrides:
                created = Target.new(os, arch, override.build_name)
                if isinstance(created, Err):
                    skipped.append(
                        SkippedEntry(
                            os=os_name,
                            arch=arch_name,
                            reason="invalid_target",
                            build_name=override.build_name,
                        )
                    )
                    continue

                target = created.value
                key = target.output_string()
                if key in seen:
                    skipped.append(
                        SkippedEntry(
                            os=os_name,
                            arch=arch_name,
                            reason="duplicate",
                            build_name=override.build_name,
                        )
                    )
                    continue
                seen.add(key)

                target.add_libs(override.libs)
                target.add_env(override.env)
                targets.append(target)

    return Resolution(targets=tuple(targets), skipped=tuple(skipped))
