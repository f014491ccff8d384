"""
ConsoleUI - Rich-based console interface.

Formats snapshots, restore previews, outcomes and history.
"""

from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table

from ..errors import SnapshotError
from ..snapshot.models import (
    ConsistencyReport,
    DiffResult,
    HistoryRecord,
    PruneResult,
    RestoreOutcome,
    RestoreStatus,
    Snapshot,
    SnapshotSummary,
    SummaryValue,
)


def _fmt(value: SummaryValue) -> str:
    return "Not set" if value is None or value == "" else str(value)


def _fmt_time(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S UTC")


class ConsoleUI:
    """
    Rich console interface for confsnap.
    """

    OUTCOME_STYLES = {
        RestoreStatus.SUCCEEDED: "green",
        RestoreStatus.VALIDATION_MISMATCH: "yellow",
        RestoreStatus.FAILED: "bold red",
        RestoreStatus.CANCELLED: "dim",
    }

    def __init__(self, quiet: bool = False, console: Optional[Console] = None):
        self.quiet = quiet
        self.console = console or Console()

    def print(self, *args, **kwargs):
        """Print to console."""
        if self.quiet:
            return
        self.console.print(*args, **kwargs)

    def print_header(self, title: str):
        """Print a section header."""
        if self.quiet:
            return
        self.console.print()
        self.console.rule(f"[bold blue]{title}[/]")

    def print_error(self, error: Exception):
        """Errors are printed even in quiet mode."""
        self.console.print(f"[bold red]Operation failed:[/] {error}")
        if isinstance(error, SnapshotError) and error.mutation_possible:
            self.console.print(
                "[yellow]The remote configuration may have been modified; "
                "check the restore history.[/]"
            )

    def print_snapshot_created(self, snapshot: Snapshot):
        if self.quiet:
            return
        table = Table(show_header=False, box=None)
        table.add_column("Key", style="dim")
        table.add_column("Value")
        table.add_row("Backup ID", snapshot.id)
        table.add_row("Created", _fmt_time(snapshot.created_at))
        table.add_row("Description", snapshot.description)
        for name, value in snapshot.summary_fields.items():
            table.add_row(name, _fmt(value))
        self.console.print(Panel(table, title="Configuration backup created", border_style="green"))

    def print_snapshots(self, snapshots: List[SnapshotSummary]):
        """Display the snapshot catalogue, newest first."""
        if self.quiet:
            return

        if not snapshots:
            self.console.print("No backups found")
            return

        table = Table(title=f"Available Configuration Backups ({len(snapshots)})")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Backup ID")
        table.add_column("Created")
        table.add_column("Trigger", style="dim")
        table.add_column("Description")
        table.add_column("Summary", style="dim")

        for i, snap in enumerate(snapshots, 1):
            summary = ", ".join(f"{k}={_fmt(v)}" for k, v in snap.summary_fields.items())
            backup_id = snap.id if snap.available else f"[red]{snap.id} (missing)[/]"
            table.add_row(
                str(i), backup_id, _fmt_time(snap.created_at),
                snap.trigger, snap.description, summary,
            )

        self.console.print(table)

    def print_diff(self, diff: DiffResult, title: str = "Restoration Preview"):
        """Display a field-by-field diff; unchanged fields are dimmed."""
        if self.quiet:
            return

        table = Table(title=title)
        table.add_column("Field")
        table.add_column("Current")
        table.add_column("After restore")

        for entry in diff.entries:
            if entry.changed:
                table.add_row(f"[bold]{entry.field}[/]", _fmt(entry.before), f"[cyan]{_fmt(entry.after)}[/]")
            else:
                table.add_row(f"[dim]{entry.field}[/]", f"[dim]{_fmt(entry.before)}[/]", "[dim](no change)[/]")

        self.console.print(table)
        if not diff.has_changes:
            self.console.print("[dim]Summary fields are identical; the full payload will still be re-applied.[/]")

    def confirm_restore(self, diff: DiffResult) -> bool:
        """Show the preview and ask before anything is mutated."""
        self.print_diff(diff)
        self.console.print(
            "\n[yellow]This will modify the remote configuration.[/] "
            "Current configuration will be backed up before restoration."
        )
        return Confirm.ask("Proceed with restoration?", console=self.console, default=False)

    def accept_restore(self, diff: DiffResult) -> bool:
        """Show the preview and proceed without asking (--force)."""
        self.print_diff(diff)
        return True

    def print_outcome(self, outcome: RestoreOutcome):
        if self.quiet:
            return

        style = self.OUTCOME_STYLES.get(outcome.status, "white")
        self.console.print(f"[{style}]Restore {outcome.snapshot_id}: {outcome.status.value}[/]")

        if outcome.safety_snapshot_id:
            self.console.print(f"  [dim]Backup of previous state:[/] {outcome.safety_snapshot_id}")
        if outcome.validation and not outcome.validation.success:
            self.console.print("  [yellow]Failed validations:[/]")
            for failure in outcome.validation.failures:
                self.console.print(f"    - {failure}")

    def print_history(self, records: List[HistoryRecord]):
        if self.quiet:
            return

        if not records:
            self.console.print("No restorations recorded")
            return

        table = Table(title="Restoration History")
        table.add_column("When")
        table.add_column("Backup ID")
        table.add_column("Outcome")
        table.add_column("Safety backup", style="dim")
        table.add_column("Details", style="dim")

        for record in records:
            style = self.OUTCOME_STYLES.get(record.outcome, "white")
            table.add_row(
                _fmt_time(record.timestamp),
                record.snapshot_id,
                f"[{style}]{record.outcome.value}[/]",
                record.safety_snapshot_id or "-",
                record.details,
            )

        self.console.print(table)

    def print_prune(self, result: PruneResult, max_age_days: float):
        if self.quiet:
            return

        if not result.deleted_ids and not result.failures:
            self.console.print(f"No backups older than {max_age_days:g} days to clean up")
        for snapshot_id in result.deleted_ids:
            self.console.print(f"  [green]Deleted:[/] {snapshot_id}")
        for snapshot_id, error in result.failures.items():
            self.console.print(f"  [yellow]Failed to delete {snapshot_id}:[/] {error}")
        self.console.print(f"Cleanup completed. {result.retained_count} backups retained.")

    def print_consistency(self, report: ConsistencyReport):
        if self.quiet:
            return

        if report.consistent:
            self.console.print("[green]Index and stored backups are consistent[/]")
            return
        for snapshot_id in report.dangling_entries:
            self.console.print(f"  [red]Index entry without backup:[/] {snapshot_id}")
        for snapshot_id in report.orphan_blobs:
            self.console.print(f"  [yellow]Backup not in index:[/] {snapshot_id}")
