"""
Retention - prunes snapshots older than a retention window.
"""

import logging
from datetime import timedelta
from typing import List

from ..errors import SnapshotError
from ..storage.base import BlobStore
from .index import SnapshotIndex
from .keys import snapshot_key, snapshot_prefix, snapshot_id_from_key
from .models import PruneResult, utcnow

logger = logging.getLogger(__name__)


class RetentionManager:
    """Best-effort removal of expired snapshots (blob first, index entry second)."""

    def __init__(self, store: BlobStore, index: SnapshotIndex, clock=utcnow):
        self.store = store
        self.index = index
        self.clock = clock

    def prune(self, target_id: str, max_age_days: float) -> PruneResult:
        """
        Delete snapshots created before now - max_age_days.

        An index entry is removed only after its blob delete succeeded (or
        the blob was already gone). Per-entry failures are collected in the
        result and do not stop the pass.

        Args:
            target_id: Target whose snapshots to prune
            max_age_days: Retention window in days

        Returns:
            PruneResult with deleted ids, retained count and failures
        """
        if max_age_days < 0:
            raise ValueError("max_age_days must not be negative")

        cutoff = self.clock() - timedelta(days=max_age_days)
        entries = self.index.list(target_id)
        expired = [e for e in entries if e.created_at < cutoff]

        result = PruneResult(retained_count=len(entries) - len(expired))
        if not expired:
            logger.info("No snapshots older than %s days for %s", max_age_days, target_id)
            return result

        logger.info("Pruning %d snapshot(s) for %s", len(expired), target_id)
        for entry in expired:
            try:
                self.store.delete(snapshot_key(target_id, entry.id))
                self.index.remove(target_id, entry.id)
            except SnapshotError as e:
                logger.warning("Failed to delete %s: %s", entry.id, e)
                result.failures[entry.id] = str(e)
                continue
            result.deleted_ids.append(entry.id)

        # Entries that failed to delete are still listed
        result.retained_count += len(result.failures)

        logger.info(
            "Cleanup completed for %s: %d deleted, %d retained",
            target_id, len(result.deleted_ids), result.retained_count,
        )
        return result

    def find_orphans(self, target_id: str) -> List[str]:
        """Snapshot ids whose blob exists but has no index entry."""
        indexed = {e.id for e in self.index.list(target_id)}
        orphans = []
        for key in self.store.list(snapshot_prefix(target_id)):
            snapshot_id = snapshot_id_from_key(key)
            if snapshot_id and snapshot_id not in indexed:
                orphans.append(snapshot_id)
        return orphans

    def sweep_orphans(self, target_id: str) -> List[str]:
        """Delete blobs left behind by a create that never reached the index."""
        orphans = self.find_orphans(target_id)
        for snapshot_id in orphans:
            self.store.delete(snapshot_key(target_id, snapshot_id))
            logger.info("Swept orphan snapshot blob %s", snapshot_id)
        return orphans
