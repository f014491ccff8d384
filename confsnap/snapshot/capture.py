"""
Snapshot capture - reads the remote configuration into a Snapshot.
"""

from datetime import datetime
from typing import Optional

from ..remote.base import ConfigurationService, ConfigurationState
from .models import Snapshot, utcnow
from .summary import SummaryExtractor, profile_name


class SnapshotCapture:
    """Captures remote configuration state."""

    def __init__(
        self,
        remote: ConfigurationService,
        extractor: SummaryExtractor,
        clock=utcnow,
    ):
        """
        Initialize snapshot capture.

        Args:
            remote: Service the configuration is read from
            extractor: Summary extractor (shared with RestoreValidator)
            clock: Returns the current tz-aware datetime
        """
        self.remote = remote
        self.extractor = extractor
        self.clock = clock
        self.profile = profile_name(extractor)

    def capture(
        self,
        target_id: str,
        description: str,
        trigger: str = "manual",
    ) -> Snapshot:
        """
        Fetch the live configuration and build a snapshot of it.

        Args:
            target_id: Remote configuration instance to capture
            description: Free-text description
            trigger: How snapshot was triggered ("manual", "safety")

        Returns:
            Snapshot (not yet persisted)
        """
        state = self.remote.fetch_current(target_id)
        return self.from_state(target_id, state, description, trigger=trigger)

    def from_state(
        self,
        target_id: str,
        state: ConfigurationState,
        description: str,
        trigger: str = "manual",
        created_at: Optional[datetime] = None,
    ) -> Snapshot:
        """Build a snapshot from an already-fetched configuration state."""
        return Snapshot.create(
            target_id=target_id,
            description=description,
            state=state,
            summary_fields=self.extractor(state.payload),
            created_at=created_at or self.clock(),
            trigger=trigger,
            summary_profile=self.profile,
        )
