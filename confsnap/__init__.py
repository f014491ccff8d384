"""
confsnap - Configuration snapshot and restore for remote services

Backs up a remote configuration object (a CloudFront distribution by
default) before a change and restores a prior snapshot safely, guarded
by the service's concurrency token.

Usage:
    # As a module
    python -m confsnap backup "Before pretty URLs setup"

    # Programmatically
    from confsnap import SnapshotManager, LocalBlobStore, CloudFrontConfigurationService

    manager = SnapshotManager(
        store=LocalBlobStore(Path("config/cloudfront-backups")),
        remote=CloudFrontConfigurationService(),
        extractor=cloudfront_summary,
    )
    snapshot = manager.create_snapshot("E2IBMHQ3GCW6ZK", "Before change")
    outcome = manager.restore("E2IBMHQ3GCW6ZK", snapshot.id)
"""

__version__ = "1.0.0"

# Main exports
from .snapshot import (
    SnapshotManager,
    Snapshot,
    SnapshotSummary,
    HistoryRecord,
    RestoreOptions,
    RestoreOutcome,
    RestoreStatus,
    DiffResult,
    ValidationResult,
    PruneResult,
    scalar_summary,
    cloudfront_summary,
)

# Collaborators
from .storage import BlobStore, LocalBlobStore, S3BlobStore
from .remote import ConfigurationService, ConfigurationState, CloudFrontConfigurationService

# Errors
from .errors import (
    SnapshotError,
    NotFoundError,
    ValidationError,
    ConflictError,
    TransportError,
    RestoreStep,
)

__all__ = [
    # Version
    "__version__",
    # Engine
    "SnapshotManager",
    "Snapshot",
    "SnapshotSummary",
    "HistoryRecord",
    "RestoreOptions",
    "RestoreOutcome",
    "RestoreStatus",
    "DiffResult",
    "ValidationResult",
    "PruneResult",
    "scalar_summary",
    "cloudfront_summary",
    # Collaborators
    "BlobStore",
    "LocalBlobStore",
    "S3BlobStore",
    "ConfigurationService",
    "ConfigurationState",
    "CloudFrontConfigurationService",
    # Errors
    "SnapshotError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "TransportError",
    "RestoreStep",
]
