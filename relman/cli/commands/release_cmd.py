"""Release command - build every configured target, package, publish."""

from __future__ import annotations

from pathlib import Path

import typer

from relman.cli.commands._helpers import (
    DEFAULT_MANIFEST,
    DEFAULT_RELEASE_CONFIG,
    DEFAULT_STATUS_FILE,
    exit_with_code,
    load_release_config,
    report_skipped,
)
from relman.cli.context import build_context, resolve_path
from relman.core.errors import ErrorCode
from relman.core.manifest import load_manifest
from relman.core.result import Err, Ok
from relman.core.status import LedgerStore
from relman.output.console import ConsoleProtocol, Style
from relman.output.errors import (
    print_manifest_error,
    print_release_error,
    release_error_exit_code,
)
from relman.services.executor import CargoExecutor
from relman.services.packager import ZipPackager
from relman.services.publisher import CargoPublisher
from relman.services.release import ReleaseOrchestrator, ReleaseReport, ReleaseRequest


def release(
    force_compile: bool = typer.Option(
        False, "-f", "--force", help="Force recompiling of succeeded builds"
    ),
    publish: bool = typer.Option(
        False, "-p", "--publish", help="Publish to crates.io on successful build"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Print debug info"),
    release_config: Path = typer.Option(
        DEFAULT_RELEASE_CONFIG,
        "-r",
        "--release-config",
        help="Alternative path for the release config",
    ),
    status_file: Path = typer.Option(
        DEFAULT_STATUS_FILE,
        "-s",
        "--status-file",
        help="Alternative path for the status file",
    ),
    manifest: Path = typer.Option(
        DEFAULT_MANIFEST, "--manifest", help="Cargo manifest of the crate to release"
    ),
) -> None:
    """Build release archives for every configured target."""
    ctx = build_context(verbose=verbose)

    manifest_result = load_manifest(resolve_path(ctx, manifest))
    if isinstance(manifest_result, Err):
        print_manifest_error(manifest_result.error, ctx.console)
        exit_with_code(int(ErrorCode.CONFIG_ERROR))
    project = manifest_result.value

    config = load_release_config(ctx, resolve_path(ctx, release_config)).document
    resolution = config.targets()
    report_skipped(ctx, resolution)

    store, warning = LedgerStore.open(resolve_path(ctx, status_file))
    if warning:
        ctx.console.warning(f"{warning}; starting from an empty status file")

    orchestrator = ReleaseOrchestrator(
        store=store,
        executor=CargoExecutor(project_root=ctx.project_root, console=ctx.console),
        packager=ZipPackager(
            project_root=ctx.project_root,
            project_name=project.name,
            included_files=config.included_files,
            release_path=resolve_path(ctx, Path(config.release_path)),
        ),
        publisher=CargoPublisher(project_root=ctx.project_root, console=ctx.console),
        console=ctx.console,
    )
    request = ReleaseRequest(
        version=project.version,
        targets=resolution.targets,
        force_compile=force_compile,
        publish=publish,
    )

    match orchestrator.run(request):
        case Ok(report):
            _print_summary(ctx.console, report)
        case Err(error):
            print_release_error(error, ctx.console)
            exit_with_code(release_error_exit_code(error))


def _print_summary(console: ConsoleProtocol, report: ReleaseReport) -> None:
    console.newline()
    console.print(
        f"{report.version}: {len(report.built)} built, {len(report.skipped)} already built",
        Style.BOLD,
    )
    if report.published:
        console.success(f"published {report.version}")
