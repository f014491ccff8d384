"""
Restore history - append-only, bounded audit log of restore attempts.
"""

import json
import logging
from typing import Any, Dict, List

from ..storage.base import BlobStore
from .keys import history_key
from .models import HistoryRecord

logger = logging.getLogger(__name__)

HISTORY_VERSION = "1.0"
DEFAULT_CAP = 50


class HistoryLog:
    """One bounded history document per target; oldest records drop first."""

    def __init__(self, store: BlobStore, cap: int = DEFAULT_CAP):
        if cap < 1:
            raise ValueError("History cap must be at least 1")
        self.store = store
        self.cap = cap

    def append(self, record: HistoryRecord) -> None:
        document = self._load(record.target_id)
        restorations = document["restorations"]
        restorations.append(record.to_dict())

        dropped = len(restorations) - self.cap
        if dropped > 0:
            del restorations[:dropped]
            logger.debug("Dropped %d oldest history records for %s", dropped, record.target_id)

        self.store.put(
            history_key(record.target_id),
            json.dumps(document, indent=2).encode("utf-8"),
        )

    def list(self, target_id: str, limit: int = DEFAULT_CAP) -> List[HistoryRecord]:
        """Most recent records first, at most limit of them."""
        records = []
        for raw in reversed(self._load(target_id)["restorations"]):
            if len(records) >= limit:
                break
            try:
                records.append(HistoryRecord.from_dict(raw))
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed history record for %s: %s", target_id, e)
        return records

    def _load(self, target_id: str) -> Dict[str, Any]:
        empty = {"version": HISTORY_VERSION, "targetId": target_id, "restorations": []}

        data = self.store.find(history_key(target_id))
        if data is None:
            return empty

        try:
            document = json.loads(data)
        except (ValueError, UnicodeDecodeError) as e:
            logger.warning("History for %s is corrupt, starting fresh: %s", target_id, e)
            return empty

        if not isinstance(document, dict) or not isinstance(document.get("restorations"), list):
            logger.warning("History for %s has unexpected shape, starting fresh", target_id)
            return empty
        return document
