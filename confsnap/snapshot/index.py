"""
Snapshot index - the ordered catalogue of snapshots for each target.

One catalogue document per target, updated read-modify-write. There is
no locking: two processes mutating the same target's index at once can
lose an update. confsnap is operated as a single-actor CLI.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from ..storage.base import BlobStore
from .keys import index_key
from .models import SnapshotIndexEntry, format_timestamp, utcnow

logger = logging.getLogger(__name__)

INDEX_VERSION = "1.0"


class SnapshotIndex:
    """Catalogue of snapshot summaries backed by a BlobStore."""

    def __init__(self, store: BlobStore, clock=utcnow):
        self.store = store
        self.clock = clock

    def append(self, target_id: str, entry: SnapshotIndexEntry) -> None:
        """Add an entry. Entries with an id already present are replaced."""
        document = self._load(target_id) or self._empty(target_id)
        backups = [b for b in document["backups"] if _raw_id(b) != entry.id]
        backups.append(entry.to_dict())
        document["backups"] = backups
        self._save(target_id, document)

    def list(self, target_id: str) -> List[SnapshotIndexEntry]:
        """All entries for a target, newest first.

        A missing or corrupt catalogue yields an empty list.
        """
        document = self._load(target_id)
        if document is None:
            return []

        entries = []
        for raw in document["backups"]:
            try:
                entries.append(SnapshotIndexEntry.from_dict(raw))
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed index entry for %s: %s", target_id, e)

        entries.sort(key=lambda e: (e.created_at, e.id), reverse=True)
        return entries

    def get(self, target_id: str, snapshot_id: str) -> Optional[SnapshotIndexEntry]:
        for entry in self.list(target_id):
            if entry.id == snapshot_id:
                return entry
        return None

    def contains(self, target_id: str, snapshot_id: str) -> bool:
        return self.get(target_id, snapshot_id) is not None

    def remove(self, target_id: str, snapshot_id: str) -> bool:
        """Remove an entry.

        Returns:
            True if an entry was removed, False if it was not indexed
        """
        document = self._load(target_id)
        if document is None:
            return False

        backups = document["backups"]
        remaining = [b for b in backups if _raw_id(b) != snapshot_id]
        if len(remaining) == len(backups):
            return False

        document["backups"] = remaining
        self._save(target_id, document)
        return True

    # =========================================================================
    # Persistence
    # =========================================================================

    def _empty(self, target_id: str) -> Dict[str, Any]:
        now = format_timestamp(self.clock())
        return {
            "version": INDEX_VERSION,
            "targetId": target_id,
            "created": now,
            "lastUpdated": now,
            "backups": [],
        }

    def _load(self, target_id: str) -> Optional[Dict[str, Any]]:
        data = self.store.find(index_key(target_id))
        if data is None:
            return None

        try:
            document = json.loads(data)
        except (ValueError, UnicodeDecodeError) as e:
            logger.warning("Index for %s is corrupt, treating as empty: %s", target_id, e)
            return None

        if not isinstance(document, dict) or not isinstance(document.get("backups"), list):
            logger.warning("Index for %s has unexpected shape, treating as empty", target_id)
            return None
        return document

    def _save(self, target_id: str, document: Dict[str, Any]) -> None:
        document["lastUpdated"] = format_timestamp(self.clock())
        self.store.put(index_key(target_id), json.dumps(document, indent=2).encode("utf-8"))


def _raw_id(raw: Any) -> Optional[str]:
    # Malformed entries are left in place; list() skips them
    if not isinstance(raw, dict):
        return None
    return raw.get("backupId")
