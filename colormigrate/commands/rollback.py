"""Restore a project from a refactor backup."""

import sys
from pathlib import Path

import click
from rich.table import Table

from colormigrate.config_runtime import load_runtime_config
from colormigrate.refactor import BackupManager, BackupManifest
from colormigrate.ui import console, print_error, print_header, print_status_panel, print_warning
from colormigrate.utils.error_handler import handle_exceptions
from colormigrate.utils.exit_codes import ExitCodes


def backup_manager_for(project_path: str) -> BackupManager:
    """BackupManager rooted at the configured backup dir of a project."""
    root = Path(project_path).resolve()
    cfg = load_runtime_config(root)
    return BackupManager(root, cfg["paths"]["backup_dir"])


def print_backup_table(backups: list[BackupManifest]) -> None:
    if not backups:
        console.print("[dim]No backups found[/dim]")
        return
    table = Table(show_header=True, header_style="bold")
    table.add_column("Backup ID", style="cmd", no_wrap=True)
    table.add_column("Created")
    table.add_column("Files", justify="right")
    table.add_column("Location", style="dim", overflow="fold")
    for manifest in backups:
        table.add_row(manifest.id, manifest.created_at, str(manifest.file_count), str(manifest.location))
    console.print(table)


@click.command("rollback")
@handle_exceptions
@click.option("--project-path", "-p", default=".", type=click.Path(file_okay=False), help="Project root")
@click.option("--list", "list_only", is_flag=True, help="List available backups")
@click.option("--backup-id", "-b", help="Backup to restore")
@click.option("--verify-only", is_flag=True, help="Check the backup's hashes without restoring")
def rollback(project_path: str, list_only: bool, backup_id: str | None, verify_only: bool) -> None:
    """Restore files from a backup taken by 'refactor --apply'.

    Each backed-up file is checked against the sha256 recorded when the
    backup was taken. Copies that are missing or no longer match are
    reported and skipped; every other file is restored.

    \b
    EXAMPLES:
      color-migrate rollback --list
      color-migrate rollback --backup-id 1718000000000 --verify-only
      color-migrate rollback --backup-id 1718000000000

    \b
    EXIT CODES:
      0 = success
      3 = no backup id given
      4 = backup has missing or corrupted files
    """
    manager = backup_manager_for(project_path)

    if list_only:
        print_header("BACKUPS")
        print_backup_table(manager.list_backups())
        return

    if not backup_id:
        print_error("Pass --backup-id ID, or --list to see available backups")
        sys.exit(ExitCodes.TASK_INCOMPLETE)

    verification = manager.verify_backup(backup_id)
    console.print(
        f"Backup {backup_id}: {verification.verified}/{verification.total} verified, "
        f"{verification.missing} missing, {verification.corrupted} corrupted",
        highlight=False,
    )

    if verify_only:
        if verification.is_valid:
            print_status_panel("VERIFIED", f"Backup {backup_id} is intact", "All hashes match.", level="success")
            return
        print_status_panel(
            "INTEGRITY FAILURE",
            f"Backup {backup_id} is damaged",
            "Restoring would skip the missing and corrupted files.",
            level="error",
        )
        sys.exit(ExitCodes.INTEGRITY_FAILURE)

    result = manager.restore_backup(backup_id)
    for relative in result.missing:
        print_warning(f"missing from backup: {relative}")
    for relative in result.mismatched:
        print_warning(f"hash mismatch, not restored: {relative}")
    for relative in result.failed:
        print_error(f"could not restore: {relative}")

    if result.is_complete:
        print_status_panel(
            "RESTORED",
            f"Restored {len(result.restored)} file(s) from backup {backup_id}",
            "The backup is kept; delete it with 'color-migrate backup delete'.",
            level="success",
        )
        return

    print_status_panel(
        "PARTIAL RESTORE",
        f"Restored {len(result.restored)} file(s); "
        f"{len(result.missing) + len(result.mismatched) + len(result.failed)} skipped",
        "Check the files listed above by hand.",
        level="error",
    )
    sys.exit(ExitCodes.INTEGRITY_FAILURE)
