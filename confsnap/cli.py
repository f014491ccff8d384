"""
CLI - Command-line interface for confsnap.

Thin layer over SnapshotManager: parses arguments, builds the storage
and remote adapters from Config, renders results with rich.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.logging import RichHandler

from .config import Config
from .errors import SnapshotError
from .remote import CloudFrontConfigurationService
from .snapshot import RestoreOptions, RestoreStatus, SnapshotManager, get_extractor
from .storage import LocalBlobStore, S3BlobStore
from .ui import ConsoleUI

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="confsnap",
        description="Back up and restore remote configuration (CloudFront distributions)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    confsnap backup "Before pretty URLs setup"
    confsnap list
    confsnap restore backup-2026-01-15T10-30-00-000000Z
    confsnap restore backup-2026-01-15T10-30-00-000000Z --force
    confsnap cleanup 30
    confsnap history --limit 10

Environment Variables:
    CLOUDFRONT_DISTRIBUTION_ID   Target distribution
    CONFSNAP_BACKUP_DIR          Local backup directory
    CONFSNAP_S3_BUCKET           Store backups in S3 instead
        """,
    )
    parser.add_argument("-c", "--config", help="Path to TOML config file")
    parser.add_argument("-t", "--target", help="Target id (e.g. CloudFront distribution id)")
    parser.add_argument("--backup-dir", help="Local backup directory")
    parser.add_argument("--profile", help="Summary profile (cloudfront, scalars)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only print errors")

    sub = parser.add_subparsers(dest="command", required=True)

    backup = sub.add_parser("backup", help="Back up the current configuration")
    backup.add_argument("description", nargs="?", default="Manual backup")

    restore = sub.add_parser("restore", help="Restore a backup")
    restore.add_argument("backup_id")
    restore.add_argument("--force", action="store_true",
                         help="Do not ask for confirmation after the preview")
    restore.add_argument("--skip-preview", action="store_true",
                         help="Do not compute a preview diff")
    restore.add_argument("--skip-backup", action="store_true",
                         help="Do not back up the current state first")

    sub.add_parser("list", help="List available backups")

    preview = sub.add_parser("preview", help="Show what restoring a backup would change")
    preview.add_argument("backup_id")

    compare = sub.add_parser("compare", help="Compare two backups")
    compare.add_argument("backup_a")
    compare.add_argument("backup_b")

    cleanup = sub.add_parser("cleanup", help="Delete backups older than the retention window")
    cleanup.add_argument("retention_days", nargs="?", type=float)
    cleanup.add_argument("--sweep-orphans", action="store_true",
                         help="Also delete backups missing from the index")

    history = sub.add_parser("history", help="Show restoration history")
    history.add_argument("--limit", type=int, default=20)

    sub.add_parser("check", help="Check index/backup consistency")

    return parser.parse_args(argv)


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=verbose, show_path=verbose)],
        force=True,
    )
    # boto is chatty at DEBUG
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)


def build_manager(config: Config) -> SnapshotManager:
    """Wire storage, remote service and summary profile from config."""
    if config.storage.backend == "s3":
        store = S3BlobStore(
            bucket=config.storage.bucket,
            prefix=config.storage.prefix,
            region=config.storage.region,
            endpoint_url=config.storage.endpoint_url,
            connect_timeout=config.remote.connect_timeout,
            read_timeout=config.remote.read_timeout,
        )
    else:
        store = LocalBlobStore(Path(config.storage.path))

    remote = CloudFrontConfigurationService(
        region=config.remote.region,
        connect_timeout=config.remote.connect_timeout,
        read_timeout=config.remote.read_timeout,
        max_attempts=config.remote.max_attempts,
    )

    return SnapshotManager(
        store=store,
        remote=remote,
        extractor=get_extractor(config.summary.profile),
        history_cap=config.retention.history_cap,
    )


def run(args, config: Config, manager: SnapshotManager, ui: ConsoleUI) -> int:
    """Execute one subcommand. Returns the process exit code."""
    target = config.target.id

    if args.command == "backup":
        snapshot = manager.create_snapshot(target, args.description)
        ui.print_snapshot_created(snapshot)

    elif args.command == "restore":
        options = RestoreOptions(
            force_without_preview=args.skip_preview,
            skip_safety_backup=args.skip_backup,
        )
        confirm = ui.accept_restore if args.force else ui.confirm_restore

        ui.print_header(f"Restoring {args.backup_id}")
        outcome = manager.restore(target, args.backup_id, options, confirm=confirm)
        ui.print_outcome(outcome)
        if outcome.status == RestoreStatus.VALIDATION_MISMATCH:
            return 2

    elif args.command == "list":
        ui.print_snapshots(manager.list_snapshots(target))

    elif args.command == "preview":
        ui.print_diff(manager.preview(target, args.backup_id))

    elif args.command == "compare":
        ui.print_diff(
            manager.compare(target, args.backup_a, args.backup_b),
            title=f"{args.backup_a} -> {args.backup_b}",
        )

    elif args.command == "cleanup":
        days = args.retention_days
        if days is None:
            days = config.retention.max_age_days
        result = manager.prune(target, days)
        ui.print_prune(result, days)
        if args.sweep_orphans:
            for snapshot_id in manager.retention.sweep_orphans(target):
                ui.print(f"  [green]Swept orphan:[/] {snapshot_id}")
        if not result.success:
            return 1

    elif args.command == "history":
        ui.print_history(manager.list_history(target, args.limit))

    elif args.command == "check":
        report = manager.check_consistency(target)
        ui.print_consistency(report)
        if not report.consistent:
            return 1

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    try:
        config = Config.load(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 1
    config.override_from_args(args)

    setup_logging(config.output.verbose, config.output.quiet)
    ui = ConsoleUI(quiet=config.output.quiet)

    errors = config.validate()
    if errors:
        for error in errors:
            ui.console.print(f"[red]Config error:[/] {error}")
        return 1

    logger.debug(config.summary_text())

    try:
        manager = build_manager(config)
        return run(args, config, manager, ui)
    except SnapshotError as e:
        ui.print_error(e)
        return 1
    except KeyboardInterrupt:
        ui.console.print("[yellow]Interrupted[/]")
        return 130
