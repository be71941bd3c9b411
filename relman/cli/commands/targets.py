"""Targets command - show the resolved build matrix."""

from __future__ import annotations

from pathlib import Path

import typer

from relman.cli.commands._helpers import DEFAULT_RELEASE_CONFIG, load_release_config
from relman.cli.context import build_context, resolve_path
from relman.output.console import Style


def targets(
    release_config: Path = typer.Option(
        DEFAULT_RELEASE_CONFIG, "-r", "--release-config", help="Path of the release config"
    ),
) -> None:
    """List the targets the release config resolves to."""
    ctx = build_context()
    resolution = load_release_config(ctx, resolve_path(ctx, release_config)).document.targets()

    for target in resolution.targets:
        ctx.console.print(target.output_string(), Style.BOLD)
        if target.native_dirs:
            ctx.console.print(f"  libs: {', '.join(target.native_dirs)}", Style.DIM)
        for key, value in target.environment.items():
            ctx.console.print(f"  env: {key}={value}", Style.DIM)

    for entry in resolution.skipped:
        ctx.console.warning(f"skipped: {entry.message}")
