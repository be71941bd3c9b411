"""Upgrade-config command - rewrite a release config in the current schema."""

from __future__ import annotations

from pathlib import Path

import typer

from relman.cli.commands._helpers import (
    DEFAULT_RELEASE_CONFIG,
    exit_with_code,
    load_release_config,
)
from relman.cli.context import build_context, resolve_path
from relman.core.config import CURRENT_VERSION, ConfigState, save_config
from relman.core.errors import ErrorCode
from relman.core.result import Err
from relman.output.errors import print_config_error


def upgrade_config(
    release_config: Path = typer.Option(
        DEFAULT_RELEASE_CONFIG, "-r", "--release-config", help="Path of the release config"
    ),
    out: Path | None = typer.Option(
        None, "--out", help="Write here instead of overwriting the config", show_default=False
    ),
) -> None:
    """Rewrite the release config in the current schema."""
    ctx = build_context()
    source = resolve_path(ctx, release_config)
    loaded = load_release_config(ctx, source)
    dest = resolve_path(ctx, out) if out is not None else source

    if loaded.state == ConfigState.CURRENT and dest == source:
        ctx.console.success(f"{source.name} already uses schema v{CURRENT_VERSION}")
        return

    saved = save_config(loaded.document, dest)
    if isinstance(saved, Err):
        print_config_error(saved.error, ctx.console)
        exit_with_code(int(ErrorCode.IO_ERROR))

    ctx.console.success(f"wrote {dest} (schema v{loaded.source_version} -> v{CURRENT_VERSION})")
