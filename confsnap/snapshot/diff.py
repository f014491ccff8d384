"""
Diff preview - what a restore would change, computed over summary fields only.
"""

from .models import DiffEntry, DiffResult, SummaryFields


class DiffPreviewer:
    """Compares two snapshot summaries. Pure, no side effects."""

    def compute_diff(self, current: SummaryFields, target: SummaryFields) -> DiffResult:
        """
        Compare the current summary with the one a restore would produce.

        Fields present on only one side are reported with None on the
        other side.

        Args:
            current: Summary of the live configuration
            target: Summary of the snapshot to restore

        Returns:
            DiffResult with one entry per field, sorted by field name
        """
        entries = []
        for name in sorted(set(current) | set(target)):
            before = current.get(name)
            after = target.get(name)
            entries.append(DiffEntry(
                field=name,
                before=before,
                after=after,
                changed=(name in current) != (name in target) or not _same(before, after),
            ))
        return DiffResult(entries=entries)


def _same(a, b) -> bool:
    # bool is an int subclass: True must not equal 1 here
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    return a == b
