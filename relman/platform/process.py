"""Running external build tools.

Build output streams straight to the terminal; only the exit status comes
back. A process that exits non-zero is an *outcome* (Ok with its return
code), a process that cannot be started at all is an *error*:

    match run_streaming(["cargo", "build"], cwd=root):
        case Ok(0):
            ...  # built
        case Ok(code):
            ...  # build failed with exit code
        case Err(error):
            ...  # cargo missing, cwd missing, ...
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from relman.core.result import Err, Ok, Result

__all__ = ["SpawnError", "merged_env", "run_streaming"]


@dataclass(frozen=True, slots=True)
class SpawnError:
    """A command could not be started.

    Attributes:
        command: The command that was attempted.
        reason: OS error description.
    """

    command: tuple[str, ...]
    reason: str

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"could not start {cmd_str}: {self.reason}"


def merged_env(overrides: Mapping[str, str]) -> dict[str, str]:
    """Current environment with overrides applied on top."""
    env = dict(os.environ)
    env.update(overrides)
    return env


def run_streaming(
    cmd: list[str],
    cwd: Path,
    env: Mapping[str, str] | None = None,
) -> Result[int, SpawnError]:
    """Run a command to completion without capturing its output.

    No timeout is applied: release builds run until they finish.

    Args:
        cmd: Command and arguments.
        cwd: Working directory.
        env: Full environment for the child (inherits ours if None).

    Returns:
        Ok(returncode) once the process exits, Err(SpawnError) if it could
        not be started.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=dict(env) if env is not None else None,
            check=False,
        )
    except OSError as e:
        return Err(SpawnError(command=tuple(cmd), reason=str(e)))

    return Ok(proc.returncode)
