"""Shared helpers for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

import typer

from relman.core.config import ConfigState, LoadedConfig, load_config
from relman.core.errors import ErrorCode
from relman.core.resolve import Resolution
from relman.core.result import Err
from relman.output.errors import print_config_error

if TYPE_CHECKING:
    from relman.cli.context import CLIContext

DEFAULT_RELEASE_CONFIG = Path("Release.toml")
DEFAULT_STATUS_FILE = Path("Status.toml")
DEFAULT_MANIFEST = Path("Cargo.toml")


def exit_with_code(code: int) -> NoReturn:
    raise typer.Exit(code=code)


def load_release_config(ctx: CLIContext, path: Path) -> LoadedConfig:
    """Load the release config or exit with CONFIG_ERROR."""
    result = load_config(path)
    if isinstance(result, Err):
        print_config_error(result.error, ctx.console)
        exit_with_code(int(ErrorCode.CONFIG_ERROR))

    loaded = result.value
    if loaded.state == ConfigState.UPGRADED:
        ctx.console.info(
            f"{path.name} uses config schema v{loaded.source_version}; "
            "run `relman upgrade-config` to rewrite it"
        )
    return loaded


def report_skipped(ctx: CLIContext, resolution: Resolution) -> None:
    for entry in resolution.skipped:
        ctx.console.debug(f"skipped config entry: {entry.message}")
