"""
Snapshot manager - high-level snapshot operations.
"""

import logging
from contextlib import contextmanager
from dataclasses import replace
from typing import Callable, List, Optional

from ..errors import (
    ConflictError,
    NotFoundError,
    RestoreStep,
    SnapshotError,
    ValidationError,
)
from ..remote.base import ConfigurationService
from ..storage.base import BlobStore
from .capture import SnapshotCapture
from .codec import SnapshotCodec
from .diff import DiffPreviewer
from .history import HistoryLog, DEFAULT_CAP
from .index import SnapshotIndex
from .keys import snapshot_key, snapshot_prefix
from .models import (
    ConsistencyReport,
    DiffResult,
    HistoryRecord,
    PruneResult,
    RestoreOptions,
    RestoreOutcome,
    RestoreStatus,
    Snapshot,
    SnapshotSummary,
    utcnow,
)
from .retention import RetentionManager
from .summary import SummaryExtractor, profile_name, scalar_summary
from .validator import RestoreValidator

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[DiffResult], bool]

SAFETY_DESCRIPTION = "Pre-restoration backup"


class SnapshotManager:
    """Snapshot create/restore/list/prune for remote configuration targets."""

    def __init__(
        self,
        store: BlobStore,
        remote: ConfigurationService,
        extractor: SummaryExtractor = scalar_summary,
        history_cap: int = DEFAULT_CAP,
        clock=utcnow,
    ):
        """
        Initialize snapshot manager.

        Args:
            store: Blob store holding snapshots, indexes and history
            remote: Service owning the live configuration
            extractor: Summary extractor, shared by capture and validation
            history_cap: Maximum restore records kept per target
            clock: Returns the current tz-aware datetime
        """
        self.store = store
        self.remote = remote
        self.extractor = extractor
        self.profile = profile_name(extractor)
        self.clock = clock

        self.codec = SnapshotCodec()
        self.index = SnapshotIndex(store, clock=clock)
        self.history = HistoryLog(store, cap=history_cap)
        self.previewer = DiffPreviewer()
        self.capture = SnapshotCapture(remote, extractor, clock=clock)
        self.validator = RestoreValidator(remote, extractor, self.previewer)
        self.retention = RetentionManager(store, self.index, clock=clock)

    # =========================================================================
    # Core Operations
    # =========================================================================

    def create_snapshot(self, target_id: str, description: str) -> Snapshot:
        """
        Capture the live configuration of a target and persist it.

        Args:
            target_id: Remote configuration instance
            description: Free-text description

        Returns:
            The created snapshot

        Raises:
            ConflictError: a snapshot with the generated id already exists
        """
        with self._step(RestoreStep.CREATE, target_id):
            snapshot = self.capture.capture(target_id, description)
            self._persist(snapshot)
        return snapshot

    def restore(
        self,
        target_id: str,
        snapshot_id: str,
        options: Optional[RestoreOptions] = None,
        confirm: Optional[ConfirmCallback] = None,
    ) -> RestoreOutcome:
        """
        Restore a target to a snapshot.

        Order: load target -> fetch live -> preview -> safety backup ->
        apply -> validate -> log. The apply is attempted exactly once with
        the token read in the fetch step; a stale token raises
        ConflictError and the caller must start over.

        Args:
            target_id: Remote configuration instance
            snapshot_id: Snapshot to restore
            options: Preview/safety-backup switches
            confirm: Called with the diff before anything is mutated;
                     returning False cancels the restore

        Returns:
            RestoreOutcome (status CANCELLED if confirm declined)
        """
        options = options or RestoreOptions()

        snapshot = self._load_current(target_id, snapshot_id)

        with self._step(RestoreStep.FETCH, target_id, snapshot_id):
            live = self.remote.fetch_current(target_id)

        diff = None
        if not options.force_without_preview:
            with self._step(RestoreStep.PREVIEW, target_id, snapshot_id):
                diff = self.previewer.compute_diff(
                    self.extractor(live.payload), snapshot.summary_fields
                )
            if confirm is not None and not confirm(diff):
                logger.info("Restoration of %s cancelled at preview", snapshot_id)
                return RestoreOutcome(
                    status=RestoreStatus.CANCELLED,
                    target_id=target_id,
                    snapshot_id=snapshot_id,
                    diff=diff,
                )

        safety_id = None
        if not options.skip_safety_backup:
            with self._step(RestoreStep.SAFETY_BACKUP, target_id, snapshot_id):
                # Same state the apply token guards, so the restore is undoable
                safety = self.capture.from_state(
                    target_id, live, SAFETY_DESCRIPTION, trigger="safety"
                )
                self._persist(safety)
            safety_id = safety.id
            logger.info("Created backup of current state: %s", safety_id)

        # From here on a mutation may have happened: every outcome is logged.
        try:
            new_token = self.remote.apply_configuration(target_id, snapshot.payload, live.token)
        except Exception as e:
            if isinstance(e, SnapshotError):
                e.with_context(RestoreStep.APPLY, target_id, snapshot_id)
            self._record_failure(target_id, snapshot_id, f"Apply failed: {e}", safety_id)
            raise

        try:
            validation = self.validator.validate(snapshot)
        except Exception as e:
            if isinstance(e, SnapshotError):
                e.with_context(RestoreStep.VALIDATE, target_id, snapshot_id)
            self._record_failure(
                target_id, snapshot_id,
                f"Applied, but post-restore validation failed: {e}", safety_id,
            )
            raise

        if validation.success:
            status = RestoreStatus.SUCCEEDED
            details = f"Restored '{snapshot.description}'"
            logger.info("Configuration restoration of %s completed successfully", snapshot_id)
        else:
            status = RestoreStatus.VALIDATION_MISMATCH
            details = "Applied with validation mismatches: " + "; ".join(validation.failures)
            logger.warning("Restoration of %s completed with warnings", snapshot_id)

        self._record(target_id, snapshot_id, status, details, safety_id)

        return RestoreOutcome(
            status=status,
            target_id=target_id,
            snapshot_id=snapshot_id,
            diff=diff,
            safety_snapshot_id=safety_id,
            validation=validation,
            new_token=new_token,
        )

    def preview(self, target_id: str, snapshot_id: str) -> DiffResult:
        """Diff between the live configuration and a snapshot, without restoring."""
        snapshot = self._load_current(target_id, snapshot_id)
        with self._step(RestoreStep.PREVIEW, target_id, snapshot_id):
            live = self.remote.fetch_current(target_id)
            return self.previewer.compute_diff(
                self.extractor(live.payload), snapshot.summary_fields
            )

    def prune(self, target_id: str, max_age_days: float) -> PruneResult:
        """Delete snapshots older than max_age_days. See RetentionManager.prune."""
        with self._step(RestoreStep.PRUNE, target_id):
            return self.retention.prune(target_id, max_age_days)

    # =========================================================================
    # Query Operations
    # =========================================================================

    def load(self, target_id: str, snapshot_id: str) -> Snapshot:
        """
        Load and validate a snapshot.

        Raises:
            NotFoundError: no blob for this id
            ValidationError: blob is corrupt or belongs to another target
        """
        with self._step(RestoreStep.LOAD, target_id, snapshot_id):
            key = snapshot_key(target_id, snapshot_id)
            data = self.store.find(key)
            if data is None:
                if self.index.contains(target_id, snapshot_id):
                    logger.warning(
                        "Index entry %s references a missing snapshot blob; skipping",
                        snapshot_id,
                    )
                raise NotFoundError(f"Snapshot '{snapshot_id}' not found")

            snapshot = self.codec.decode(data, snapshot_id)

            if snapshot.id != snapshot_id:
                raise ValidationError(
                    f"Snapshot blob contains id {snapshot.id}, expected {snapshot_id}"
                )
            if snapshot.target_id != target_id:
                raise ValidationError(
                    f"Backup is for different target: {snapshot.target_id} "
                    f"(expected: {target_id})"
                )
        return snapshot

    def list_snapshots(self, target_id: str) -> List[SnapshotSummary]:
        """
        List all snapshots of a target.

        Index entries whose blob is missing are reported with
        available=False and a warning.

        Returns:
            List of SnapshotSummary sorted by creation time (newest first)
        """
        entries = self.index.list(target_id)
        stored = set(self.store.list(snapshot_prefix(target_id)))

        summaries = []
        for entry in entries:
            available = snapshot_key(target_id, entry.id) in stored
            if not available:
                logger.warning("Index entry %s has no snapshot blob", entry.id)
            summaries.append(SnapshotSummary.from_entry(entry, available=available))
        return summaries

    def list_history(self, target_id: str, limit: int = DEFAULT_CAP) -> List[HistoryRecord]:
        """Most recent restore attempts first."""
        return self.history.list(target_id, limit)

    def compare(self, target_id: str, snapshot_a: str, snapshot_b: str) -> DiffResult:
        """Diff two stored snapshots (a = before, b = after)."""
        a = self._load_current(target_id, snapshot_a)
        b = self._load_current(target_id, snapshot_b)
        return self.previewer.compute_diff(a.summary_fields, b.summary_fields)

    def check_consistency(self, target_id: str) -> ConsistencyReport:
        """Find dangling index entries and orphaned snapshot blobs."""
        report = ConsistencyReport(
            dangling_entries=[s.id for s in self.list_snapshots(target_id) if not s.available],
            orphan_blobs=self.retention.find_orphans(target_id),
        )
        if not report.consistent:
            logger.warning(
                "Target %s: %d dangling index entries, %d orphan blobs",
                target_id, len(report.dangling_entries), len(report.orphan_blobs),
            )
        return report

    # =========================================================================
    # Internals
    # =========================================================================

    def _load_current(self, target_id: str, snapshot_id: str) -> Snapshot:
        """Load a snapshot with summary fields from this manager's extractor.

        Snapshots captured under another summary profile are re-summarised
        from their payload so preview and validation compare like with like.
        """
        snapshot = self.load(target_id, snapshot_id)
        if snapshot.summary_profile == self.profile:
            return snapshot

        logger.info(
            "Snapshot %s was summarised with profile %s; re-extracting with %s",
            snapshot_id, snapshot.summary_profile, self.profile,
        )
        with self._step(RestoreStep.LOAD, target_id, snapshot_id):
            return replace(
                snapshot,
                summary_fields=self.extractor(snapshot.payload),
                summary_profile=self.profile,
            )

    def _persist(self, snapshot: Snapshot) -> None:
        """Write the blob, then the index entry. Never overwrites."""
        key = snapshot_key(snapshot.target_id, snapshot.id)
        if self.store.exists(key) or self.index.contains(snapshot.target_id, snapshot.id):
            raise ConflictError(
                f"Snapshot id {snapshot.id} already exists",
                snapshot_id=snapshot.id,
            )

        self.store.put(key, self.codec.encode(snapshot))
        self.index.append(snapshot.target_id, snapshot.to_entry())
        logger.info("Configuration backup created: %s (%s)", snapshot.id, snapshot.description)

    def _record(
        self,
        target_id: str,
        snapshot_id: str,
        outcome: RestoreStatus,
        details: str,
        safety_id: Optional[str],
    ) -> None:
        with self._step(RestoreStep.LOG, target_id, snapshot_id):
            self.history.append(HistoryRecord(
                timestamp=self.clock(),
                target_id=target_id,
                snapshot_id=snapshot_id,
                outcome=outcome,
                details=details,
                safety_snapshot_id=safety_id,
            ))

    def _record_failure(
        self,
        target_id: str,
        snapshot_id: str,
        details: str,
        safety_id: Optional[str],
    ) -> None:
        """Record a failed attempt without masking the error that caused it."""
        try:
            self._record(target_id, snapshot_id, RestoreStatus.FAILED, details, safety_id)
        except SnapshotError:
            logger.exception(
                "Failed to record restore failure of %s in history", snapshot_id
            )

    @contextmanager
    def _step(
        self,
        step: RestoreStep,
        target_id: str,
        snapshot_id: Optional[str] = None,
    ):
        """Attach step/target/snapshot context to errors raised inside."""
        try:
            yield
        except SnapshotError as e:
            e.with_context(step, target_id, snapshot_id)
            raise
