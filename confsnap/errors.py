"""
Error taxonomy for snapshot/restore operations.

Every error carries enough context (step, target, snapshot) for an
operator to tell whether a remote mutation happened.

Validation mismatches after a restore are NOT errors; they are reported
as data through ValidationResult.
"""

from enum import Enum
from typing import Any, Dict, Optional


class RestoreStep(str, Enum):
    """Steps where an error can occur."""
    CREATE = "CREATE"
    LOAD = "LOAD"
    FETCH = "FETCH"
    PREVIEW = "PREVIEW"
    SAFETY_BACKUP = "SAFETY_BACKUP"
    APPLY = "APPLY"
    VALIDATE = "VALIDATE"
    LOG = "LOG"
    PRUNE = "PRUNE"


class SnapshotError(Exception):
    """Base class for all confsnap errors."""

    error_type = "SNAPSHOT_ERROR"

    def __init__(
        self,
        message: str,
        step: Optional[RestoreStep] = None,
        target_id: Optional[str] = None,
        snapshot_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.step = step
        self.target_id = target_id
        self.snapshot_id = snapshot_id

    def with_context(
        self,
        step: Optional[RestoreStep] = None,
        target_id: Optional[str] = None,
        snapshot_id: Optional[str] = None,
    ) -> "SnapshotError":
        """Fill in context fields that are not already set. Returns self."""
        if self.step is None:
            self.step = step
        if self.target_id is None:
            self.target_id = target_id
        if self.snapshot_id is None:
            self.snapshot_id = snapshot_id
        return self

    @property
    def mutation_possible(self) -> bool:
        """True if the remote configuration may have been changed."""
        return self.step in (RestoreStep.APPLY, RestoreStep.VALIDATE, RestoreStep.LOG)

    def to_dict(self) -> Dict[str, Any]:
        """Structured form for JSON output."""
        return {
            "error_type": self.error_type,
            "message": self.message,
            "step": self.step.value if self.step else None,
            "target_id": self.target_id,
            "snapshot_id": self.snapshot_id,
            "mutation_possible": self.mutation_possible,
        }

    def __str__(self) -> str:
        context = []
        if self.step:
            context.append(f"step={self.step.value}")
        if self.target_id:
            context.append(f"target={self.target_id}")
        if self.snapshot_id:
            context.append(f"snapshot={self.snapshot_id}")
        if not context:
            return self.message
        return f"{self.message} [{', '.join(context)}]"


class NotFoundError(SnapshotError):
    """Snapshot, blob or remote target does not exist."""
    error_type = "NOT_FOUND"


class ValidationError(SnapshotError):
    """Snapshot is malformed, belongs to another target, or fails integrity checks."""
    error_type = "VALIDATION"


class ConflictError(SnapshotError):
    """Concurrency token was stale at apply time, or a snapshot id collided."""
    error_type = "CONFLICT"


class TransportError(SnapshotError):
    """Transport or storage failure, including timeouts."""
    error_type = "TRANSPORT"
