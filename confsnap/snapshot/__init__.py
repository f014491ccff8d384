"""
Snapshot/Restore engine for remote configuration objects.

Backs up a remote service's configuration before a change and restores
a prior snapshot safely. Key features:

- Optimistic concurrency: every write presents the token read just before it
- Automatic safety snapshot before each restore (restores are undoable)
- Diff preview over summary fields before anything is mutated
- Post-restore validation against a fresh read
- Age-based retention and a bounded restore history
"""

from .models import (
    Snapshot,
    SnapshotIndexEntry,
    SnapshotSummary,
    HistoryRecord,
    RestoreOptions,
    RestoreOutcome,
    RestoreStatus,
    DiffEntry,
    DiffResult,
    ValidationResult,
    PruneResult,
    ConsistencyReport,
)
from .codec import SnapshotCodec
from .index import SnapshotIndex
from .capture import SnapshotCapture
from .diff import DiffPreviewer
from .validator import RestoreValidator
from .retention import RetentionManager
from .history import HistoryLog
from .summary import scalar_summary, cloudfront_summary, get_extractor
from .manager import SnapshotManager

__all__ = [
    'Snapshot',
    'SnapshotIndexEntry',
    'SnapshotSummary',
    'HistoryRecord',
    'RestoreOptions',
    'RestoreOutcome',
    'RestoreStatus',
    'DiffEntry',
    'DiffResult',
    'ValidationResult',
    'PruneResult',
    'ConsistencyReport',
    'SnapshotCodec',
    'SnapshotIndex',
    'SnapshotCapture',
    'DiffPreviewer',
    'RestoreValidator',
    'RetentionManager',
    'HistoryLog',
    'scalar_summary',
    'cloudfront_summary',
    'get_extractor',
    'SnapshotManager',
]
