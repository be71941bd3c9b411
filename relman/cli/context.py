from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relman.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    project_root: Path
    console: ConsoleProtocol


def build_context(*, verbose: bool = False) -> CLIContext:
    return CLIContext(project_root=Path.cwd(), console=RichConsole(verbose=verbose))


def resolve_path(ctx: CLIContext, path: Path) -> Path:
    """Interpret a user-supplied path relative to the project root."""
    p = path.expanduser()
    return p if p.is_absolute() else ctx.project_root / p
