"""
Data models for the snapshot/restore system.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Any, Union
import hashlib

from ..remote.base import ConfigurationState

# Values allowed in a snapshot summary (cheap to diff, no nesting)
SummaryValue = Union[str, int, float, bool, None]
SummaryFields = Dict[str, SummaryValue]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def make_snapshot_id(created_at: datetime) -> str:
    """Build a sortable snapshot id from a timestamp.

    >>> make_snapshot_id(datetime(2026, 1, 15, 10, 30, 0, 123456, tzinfo=timezone.utc))
    'backup-2026-01-15T10-30-00-123456Z'
    """
    stamp = created_at.astimezone(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%f")
    return f"backup-{stamp}Z"


def format_timestamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat()


def parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class RestoreStatus(str, Enum):
    """Outcome of a restore attempt."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    VALIDATION_MISMATCH = "validation-mismatch"
    CANCELLED = "cancelled"              # declined at preview, never logged


@dataclass(frozen=True)
class Snapshot:
    """Remote configuration state at a point in time. Immutable once written."""

    # Identity
    id: str
    target_id: str
    created_at: datetime
    description: str

    # Captured configuration
    payload: bytes                         # opaque configuration document
    concurrency_token_at_capture: str      # provenance only, never reused for writes
    summary_fields: SummaryFields = field(default_factory=dict)

    # Metadata
    trigger: str = "manual"                # "manual" or "safety"
    summary_profile: Optional[str] = None  # extractor that produced summary_fields

    @classmethod
    def create(
        cls,
        target_id: str,
        description: str,
        state: ConfigurationState,
        summary_fields: SummaryFields,
        created_at: Optional[datetime] = None,
        trigger: str = "manual",
        summary_profile: Optional[str] = None,
    ) -> 'Snapshot':
        """Create a new snapshot with an id derived from its timestamp."""
        created_at = created_at or utcnow()
        return cls(
            id=make_snapshot_id(created_at),
            target_id=target_id,
            created_at=created_at,
            description=description,
            payload=state.payload,
            concurrency_token_at_capture=state.token,
            summary_fields=dict(summary_fields),
            trigger=trigger,
            summary_profile=summary_profile,
        )

    @property
    def payload_sha256(self) -> str:
        return hashlib.sha256(self.payload).hexdigest()

    def to_entry(self) -> 'SnapshotIndexEntry':
        """Index entry mirroring this snapshot."""
        return SnapshotIndexEntry(
            id=self.id,
            created_at=self.created_at,
            description=self.description,
            summary_fields=dict(self.summary_fields),
            trigger=self.trigger,
        )


@dataclass
class SnapshotIndexEntry:
    """Catalogue entry for one snapshot."""
    id: str
    created_at: datetime
    description: str
    summary_fields: SummaryFields = field(default_factory=dict)
    trigger: str = "manual"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "backupId": self.id,
            "timestamp": format_timestamp(self.created_at),
            "description": self.description,
            "trigger": self.trigger,
            "metadata": dict(self.summary_fields),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SnapshotIndexEntry':
        snapshot_id = data["backupId"]
        if not isinstance(snapshot_id, str) or not snapshot_id or "/" in snapshot_id:
            raise ValueError(f"Invalid snapshot id: {snapshot_id!r}")
        return cls(
            id=snapshot_id,
            created_at=parse_timestamp(data["timestamp"]),
            description=data.get("description", ""),
            summary_fields=dict(data.get("metadata") or {}),
            trigger=data.get("trigger", "manual"),
        )


@dataclass
class SnapshotSummary:
    """Summary info for listing snapshots."""
    id: str
    created_at: datetime
    description: str
    summary_fields: SummaryFields
    trigger: str
    available: bool = True                 # False if the blob is missing

    @classmethod
    def from_entry(cls, entry: SnapshotIndexEntry, available: bool = True) -> 'SnapshotSummary':
        return cls(
            id=entry.id,
            created_at=entry.created_at,
            description=entry.description,
            summary_fields=dict(entry.summary_fields),
            trigger=entry.trigger,
            available=available,
        )


@dataclass
class HistoryRecord:
    """One restore attempt. Append-only."""
    timestamp: datetime
    target_id: str
    snapshot_id: str
    outcome: RestoreStatus
    details: str = ""
    safety_snapshot_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": format_timestamp(self.timestamp),
            "targetId": self.target_id,
            "backupId": self.snapshot_id,
            "outcome": self.outcome.value,
            "details": self.details,
            "safetyBackupId": self.safety_snapshot_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HistoryRecord':
        return cls(
            timestamp=parse_timestamp(data["timestamp"]),
            target_id=data.get("targetId", ""),
            snapshot_id=data["backupId"],
            outcome=RestoreStatus(data["outcome"]),
            details=data.get("details", ""),
            safety_snapshot_id=data.get("safetyBackupId"),
        )


@dataclass
class RestoreOptions:
    """Switches for a restore run."""
    force_without_preview: bool = False
    skip_safety_backup: bool = False


@dataclass
class DiffEntry:
    """A single summary field compared between two states."""
    field: str
    before: SummaryValue
    after: SummaryValue
    changed: bool


@dataclass
class DiffResult:
    """Field-by-field comparison of two summaries."""
    entries: List[DiffEntry] = field(default_factory=list)

    @property
    def changes(self) -> List[DiffEntry]:
        return [e for e in self.entries if e.changed]

    @property
    def has_changes(self) -> bool:
        return any(e.changed for e in self.entries)

    @property
    def total_changes(self) -> int:
        return len(self.changes)


@dataclass
class ValidationResult:
    """Result of comparing the live configuration with the restored snapshot."""
    success: bool
    mismatches: List[DiffEntry] = field(default_factory=list)

    @property
    def failures(self) -> List[str]:
        return [
            f"{m.field}: expected {m.after!r}, got {m.before!r}"
            for m in self.mismatches
        ]


@dataclass
class RestoreOutcome:
    """Result of a restore operation."""
    status: RestoreStatus
    target_id: str
    snapshot_id: str
    diff: Optional[DiffResult] = None
    safety_snapshot_id: Optional[str] = None
    validation: Optional[ValidationResult] = None
    new_token: Optional[str] = None

    @property
    def applied(self) -> bool:
        return self.status in (RestoreStatus.SUCCEEDED, RestoreStatus.VALIDATION_MISMATCH)


@dataclass
class PruneResult:
    """Result of a retention pass."""
    deleted_ids: List[str] = field(default_factory=list)
    retained_count: int = 0
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.failures


@dataclass
class ConsistencyReport:
    """Mismatches between a target's index and its stored blobs."""
    dangling_entries: List[str] = field(default_factory=list)   # indexed, blob missing
    orphan_blobs: List[str] = field(default_factory=list)       # blob present, not indexed

    @property
    def consistent(self) -> bool:
        return not self.dangling_entries and not self.orphan_blobs
