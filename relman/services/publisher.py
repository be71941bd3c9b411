"""Publishing the crate once every target has built."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from ..core.result import Result
from ..output.console import ConsoleProtocol
from ..platform.process import SpawnError, run_streaming

__all__ = ["CargoPublisher", "Publisher"]


class Publisher(Protocol):
    def publish(self, version: str) -> Result[int, SpawnError]: ...


class CargoPublisher:
    """Runs `cargo publish` in the project root."""

    def __init__(self, *, project_root: Path, console: ConsoleProtocol) -> None:
        self._project_root = project_root
        self._console = console

    def publish(self, version: str) -> Result[int, SpawnError]:
        cmd = ["cargo", "publish"]
        self._console.debug(f"[{version}] {' '.join(cmd)}")
        return run_streaming(cmd, cwd=self._project_root)
