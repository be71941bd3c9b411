"""Cargo release builds for a single target."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from ..core.result import Result
from ..core.target import Target
from ..output.console import ConsoleProtocol
from ..platform.process import SpawnError, merged_env, run_streaming

__all__ = ["CargoExecutor", "TargetExecutor", "build_command", "build_env"]


class TargetExecutor(Protocol):
    def build(self, target: Target, version: str) -> Result[int, SpawnError]:
        """Run the release build of target to completion.

        Returns:
            Ok(returncode) once the build exits, Err(SpawnError) if it could
            not be started.
        """
        ...


def build_command(target: Target) -> list[str]:
    return ["cargo", "build", "--target", target.target_str, "--release"]


def build_env(target: Target) -> dict[str, str]:
    """Environment overrides for a target: static CRT, link dirs, config env."""
    rustflags = "-C target-feature=+crt-static"
    libs = target.libs()
    if libs:
        rustflags = f"{rustflags} {libs}"
    env = {"RUSTFLAGS": rustflags}
    env.update(target.environment)
    return env


class CargoExecutor:
    """Runs `cargo build --target <triple> --release` in the project root."""

    def __init__(self, *, project_root: Path, console: ConsoleProtocol) -> None:
        self._project_root = project_root
        self._console = console

    def build(self, target: Target, version: str) -> Result[int, SpawnError]:
        cmd = build_command(target)
        overrides = build_env(target)
        env_str = " ".join(f"{k}={v!r}" for k, v in overrides.items())
        self._console.debug(f"[{version}] {env_str} {' '.join(cmd)}")
        return run_streaming(cmd, cwd=self._project_root, env=merged_env(overrides))
