"""
RestoreValidator - verifies a restore took effect.

Re-fetches the live configuration and compares its summary with the
restored snapshot's summary.
"""

import logging

from ..remote.base import ConfigurationService
from .diff import DiffPreviewer
from .models import Snapshot, ValidationResult
from .summary import SummaryExtractor

logger = logging.getLogger(__name__)


class RestoreValidator:
    """Post-restore check against a fresh read of the remote configuration."""

    def __init__(
        self,
        remote: ConfigurationService,
        extractor: SummaryExtractor,
        previewer: DiffPreviewer = None,
    ):
        """
        Args:
            remote: Service to re-fetch the live configuration from
            extractor: The same summary extractor used at capture time
            previewer: Field comparator (shared with the restore preview)
        """
        self.remote = remote
        self.extractor = extractor
        self.previewer = previewer or DiffPreviewer()

    def validate(self, target: Snapshot) -> ValidationResult:
        """
        Compare live state with the target snapshot.

        Mismatches are returned, never raised. Transport failures from the
        re-fetch propagate.
        """
        live = self.remote.fetch_current(target.target_id)
        live_summary = self.extractor(live.payload)

        diff = self.previewer.compute_diff(live_summary, target.summary_fields)
        mismatches = diff.changes

        if mismatches:
            for m in mismatches:
                logger.warning(
                    "Restore validation mismatch on %s: expected %r, got %r",
                    m.field, m.after, m.before,
                )
        else:
            logger.info("All restoration validations passed for %s", target.id)

        return ValidationResult(success=not mismatches, mismatches=mismatches)
