"""Release orchestration: build every target once, then optionally publish.

The flow for one version:

1. Refuse to start if publishing was requested for a published version.
2. Prune ledger entries for builds no longer in the config, persist.
3. For each target, in order: skip it if it already succeeded (unless
   forced), otherwise mark Started, persist, build, record Success/Failed,
   persist, and package successful builds. Every target is attempted even
   after a failure.
4. Persist, then fail the run if any build of the version is not Success.
5. Publish if requested, and record it.

Builds run strictly one after another.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ..core.result import Err, Ok, Result
from ..core.status import LedgerStore, StatusLedger
from ..core.target import Target
from ..output.console import ConsoleProtocol
from .executor import TargetExecutor
from .packager import Packager
from .publisher import Publisher
from .release_errors import (
    AlreadyPublished,
    BuildsFailed,
    NoTargets,
    PackagingFailed,
    PublishFailed,
    ReleaseError,
    SpawnFailed,
)

__all__ = ["ReleaseOrchestrator", "ReleaseReport", "ReleaseRequest"]


@dataclass(frozen=True, slots=True)
class ReleaseRequest:
    version: str
    targets: tuple[Target, ...]
    force_compile: bool = False
    publish: bool = False


@dataclass(slots=True)
class ReleaseReport:
    version: str
    built: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    pruned: list[str] = field(default_factory=list)
    archives: list[Path] = field(default_factory=list)
    published: bool = False


class ReleaseOrchestrator:
    """Drives executor and packager for a version, keeping the ledger current."""

    def __init__(
        self,
        *,
        store: LedgerStore,
        executor: TargetExecutor,
        packager: Packager,
        publisher: Publisher,
        console: ConsoleProtocol,
    ) -> None:
        self._store = store
        self._executor = executor
        self._packager = packager
        self._publisher = publisher
        self._console = console

    @property
    def ledger(self) -> StatusLedger:
        return self._store.ledger

    def run(self, request: ReleaseRequest) -> Result[ReleaseReport, ReleaseError]:
        version = request.version

        if request.publish and self.ledger.is_published(version):
            return Err(AlreadyPublished(version=version))
        if not request.targets:
            return Err(NoTargets())

        report = ReleaseReport(version=version)

        report.pruned = self.ledger.clear_missing_targets(
            version, [t.output_string() for t in request.targets]
        )
        for build_id in report.pruned:
            self._console.debug(f"Dropped stale status for {build_id}")
        persisted = self._store.persist()
        if isinstance(persisted, Err):
            return persisted

        packaging_errors: list[PackagingFailed] = []
        for target in request.targets:
            outcome = self._build_target(target, request, report)
            if isinstance(outcome, Err):
                return outcome
            if outcome.value is not None:
                packaging_errors.append(outcome.value)

        persisted = self._store.persist()
        if isinstance(persisted, Err):
            return persisted

        if packaging_errors:
            return Err(packaging_errors[0])
        if not self.ledger.all_clear(version):
            failed = tuple(self.ledger.failed_builds(version))
            return Err(BuildsFailed(version=version, failed=failed))

        if request.publish:
            published = self._publish(version)
            if isinstance(published, Err):
                return published
            report.published = True

        return Ok(report)

    def _build_target(
        self, target: Target, request: ReleaseRequest, report: ReleaseReport
    ) -> Result[PackagingFailed | None, ReleaseError]:
        """Build and package one target.

        Returns:
            Ok(None) when done (built, failed or skipped), Ok(PackagingFailed)
            when the build succeeded but packaging did not, Err for fatal
            errors that end the run.
        """
        version = request.version
        build_id = target.output_string()

        if not request.force_compile and not self.ledger.needs_compile(build_id, version):
            self._console.info(f"Skipping: {build_id}, already compiled")
            report.skipped.append(build_id)
            return Ok(None)

        self._console.header(f"Building {build_id}")
        self.ledger.start(build_id, version)
        persisted = self._store.persist()
        if isinstance(persisted, Err):
            return persisted

        built = self._executor.build(target, version)
        if isinstance(built, Err):
            return Err(SpawnFailed(build_id=build_id, error=built.error))

        if built.value != 0:
            self.ledger.fail(build_id, version)
            report.failed.append(build_id)
            self._console.error(f"{build_id}: build failed (exit {built.value})")
            persisted = self._store.persist()
            return persisted if isinstance(persisted, Err) else Ok(None)

        self.ledger.succeed(build_id, version)
        persisted = self._store.persist()
        if isinstance(persisted, Err):
            return persisted

        archive = self._packager.package(target, version)
        if isinstance(archive, Err):
            # Leave it for the next run to rebuild and repackage.
            self.ledger.fail(build_id, version)
            report.failed.append(build_id)
            persisted = self._store.persist()
            if isinstance(persisted, Err):
                return persisted
            return Ok(PackagingFailed(build_id=build_id, reason=archive.error.message))

        report.built.append(build_id)
        report.archives.append(archive.value)
        self._console.success(f"{build_id} -> {archive.value}")
        return Ok(None)

    def _publish(self, version: str) -> Result[None, ReleaseError]:
        self._console.header(f"Publishing {version}")
        result = self._publisher.publish(version)
        if isinstance(result, Err):
            return Err(PublishFailed(version=version, reason=str(result.error)))
        if result.value != 0:
            return Err(PublishFailed(version=version, reason=f"exit {result.value}"))

        self.ledger.publish(version)
        persisted = self._store.persist()
        if isinstance(persisted, Err):
            return persisted
        return Ok(None)
