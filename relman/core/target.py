"""Build targets: (operating system, architecture, optional build name).

Only the (os, arch) pairs listed in `TARGET_TRIPLES` can be built. The same
table drives validation and rendering of the rustc target triple, so the
two can never disagree.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum

from .result import Err, Ok, Result

__all__ = [
    "Arch",
    "InvalidTarget",
    "Os",
    "TARGET_TRIPLES",
    "Target",
    "UNKNOWN_TRIPLE",
    "canonical_string",
    "is_valid_pair",
]


class Os(StrEnum):
    """Operating system, spelled as it appears in release configs."""

    LINUX = "Linux"
    WINDOWS = "Windows"
    MAC = "Mac"

    @classmethod
    def parse(cls, name: str) -> Os | None:
        try:
            return cls(name)
        except ValueError:
            return None


class Arch(StrEnum):
    """CPU architecture (with libc flavour), spelled as in release configs."""

    AARCH64 = "aarch64"
    ARMV7H = "armv7h"
    ARMV7H_MUSL = "armv7hmusl"
    ARMH = "armh"
    ARMH_MUSL = "armhmusl"
    AMD64 = "amd64"
    AMD64_MUSL = "amd64musl"
    I686 = "i686"

    @classmethod
    def parse(cls, name: str) -> Arch | None:
        try:
            return cls(name)
        except ValueError:
            return None


TARGET_TRIPLES: dict[tuple[Os, Arch], str] = {
    (Os.LINUX, Arch.AARCH64): "aarch64-unknown-linux-gnu",
    (Os.LINUX, Arch.ARMV7H): "armv7-unknown-linux-gnueabihf",
    (Os.LINUX, Arch.ARMV7H_MUSL): "armv7-unknown-linux-musleabihf",
    (Os.LINUX, Arch.ARMH): "arm-unknown-linux-gnueabihf",
    (Os.LINUX, Arch.ARMH_MUSL): "arm-unknown-linux-musleabihf",
    (Os.LINUX, Arch.AMD64): "x86_64-unknown-linux-gnu",
    (Os.LINUX, Arch.AMD64_MUSL): "x86_64-unknown-linux-musl",
    (Os.WINDOWS, Arch.AMD64): "x86_64-pc-windows-gnu",
    (Os.WINDOWS, Arch.I686): "i686-pc-windows-gnu",
    (Os.MAC, Arch.AMD64): "x86_64-apple-darwin",
}

UNKNOWN_TRIPLE = "unknown"


def is_valid_pair(os: Os, arch: Arch) -> bool:
    return (os, arch) in TARGET_TRIPLES


def canonical_string(os: Os, arch: Arch) -> str:
    """Render the rustc target triple, or "unknown" for unsupported pairs."""
    return TARGET_TRIPLES.get((os, arch), UNKNOWN_TRIPLE)


@dataclass(frozen=True, slots=True)
class InvalidTarget:
    """The (os, arch) pair is not a supported build target."""

    os: Os
    arch: Arch

    @property
    def message(self) -> str:
        return f"{self.os}/{self.arch} is not a supported target"


@dataclass(slots=True)
class Target:
    """A single entry of the build matrix.

    Construct with `Target.new`, which enforces the whitelist. Library
    directories and environment overrides accumulate from config overrides;
    everything else is fixed after construction.
    """

    os: Os
    arch: Arch
    build_name: str | None = None
    native_dirs: list[str] = field(default_factory=list)
    environment: dict[str, str] = field(default_factory=dict)

    @classmethod
    def new(
        cls, os: Os, arch: Arch, build_name: str | None = None
    ) -> Result[Target, InvalidTarget]:
        if not is_valid_pair(os, arch):
            return Err(InvalidTarget(os=os, arch=arch))
        return Ok(cls(os=os, arch=arch, build_name=build_name))

    def canonical_string(self) -> str:
        return canonical_string(self.os, self.arch)

    @property
    def target_str(self) -> str:
        """The rustc target triple passed to `cargo build --target`."""
        return self.canonical_string()

    def output_string(self) -> str:
        """Ledger key and archive name: triple plus `-<build_name>` if set."""
        triple = self.canonical_string()
        if self.build_name:
            return f"{triple}-{self.build_name}"
        return triple

    def add_libs(self, libs: Iterable[str]) -> None:
        self.native_dirs.extend(libs)

    def add_env(self, env: Mapping[str, str]) -> None:
        for key, value in env.items():
            self.environment[key] = value

    def libs(self) -> str:
        """Render library directories as rustc link search flags."""
        return " ".join(f"-L native={d}" for d in self.native_dirs)

    def __str__(self) -> str:
        return self.output_string()
