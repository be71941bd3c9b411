"""Status command - show the build ledger."""

from __future__ import annotations

from pathlib import Path

import typer

from relman.cli.commands._helpers import DEFAULT_STATUS_FILE, exit_with_code
from relman.cli.context import build_context, resolve_path
from relman.core.errors import ErrorCode
from relman.core.status import BuildStatus, load_ledger
from relman.output.console import Style

_STATUS_STYLE = {
    BuildStatus.SUCCESS: Style.SUCCESS,
    BuildStatus.FAILED: Style.ERROR,
    BuildStatus.STARTED: Style.WARNING,
    BuildStatus.WAITING: Style.DIM,
}


def status(
    status_file: Path = typer.Option(
        DEFAULT_STATUS_FILE, "-s", "--status-file", help="Path of the status file"
    ),
    version: str | None = typer.Option(
        None, "--release-version", help="Only show this version", show_default=False
    ),
) -> None:
    """Show recorded build and publish status per version."""
    ctx = build_context()
    loaded = load_ledger(resolve_path(ctx, status_file))
    if loaded.warning:
        ctx.console.warning(loaded.warning)

    ledger = loaded.ledger
    versions = [version] if version is not None else list(ledger.versions)
    if version is not None and ledger.version_status(version) is None:
        ctx.console.error(f"No status recorded for version {version}")
        exit_with_code(int(ErrorCode.USER_ERROR))
    if not versions:
        ctx.console.print("No builds recorded yet", Style.DIM)
        return

    for v in versions:
        vs = ledger.version_status(v)
        if vs is None:
            continue
        published = "published" if vs.published else "not published"
        ctx.console.header(f"{v} ({published})")
        for build_id, build_status in vs.build_names.items():
            ctx.console.print(f"  {build_id}: {build_status}", _STATUS_STYLE[build_status])
