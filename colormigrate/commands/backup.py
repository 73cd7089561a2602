"""Inspect and prune refactor backups."""

import sys

import click

from colormigrate.commands.rollback import backup_manager_for, print_backup_table
from colormigrate.ui import console, print_header, print_status_panel, print_success
from colormigrate.utils.error_handler import handle_exceptions
from colormigrate.utils.exit_codes import ExitCodes


@click.group("backup")
@click.help_option("-h", "--help")
def backup():
    """List, verify and delete refactor backups.

    \b
    EXAMPLES:
      color-migrate backup list
      color-migrate backup verify 1718000000000
      color-migrate backup delete 1718000000000
    """
    pass


@backup.command("list")
@handle_exceptions
@click.option("--project-path", "-p", default=".", type=click.Path(file_okay=False), help="Project root")
def list_command(project_path: str) -> None:
    """List backups, newest first."""
    print_header("BACKUPS")
    print_backup_table(backup_manager_for(project_path).list_backups())


@backup.command("verify")
@handle_exceptions
@click.argument("backup_id")
@click.option("--project-path", "-p", default=".", type=click.Path(file_okay=False), help="Project root")
def verify_command(backup_id: str, project_path: str) -> None:
    """Recompute a backup's hashes and compare them to its manifest."""
    verification = backup_manager_for(project_path).verify_backup(backup_id)
    console.print(f"Total:     {verification.total}")
    console.print(f"Verified:  {verification.verified}")
    console.print(f"Missing:   {verification.missing}")
    console.print(f"Corrupted: {verification.corrupted}")

    if verification.is_valid:
        print_status_panel("VERIFIED", f"Backup {backup_id} is intact", "All hashes match.", level="success")
        return
    print_status_panel(
        "INTEGRITY FAILURE",
        f"Backup {backup_id} has {verification.missing} missing and {verification.corrupted} corrupted file(s)",
        "A restore would skip those files.",
        level="error",
    )
    sys.exit(ExitCodes.INTEGRITY_FAILURE)


@backup.command("delete")
@handle_exceptions
@click.argument("backup_id")
@click.option("--project-path", "-p", default=".", type=click.Path(file_okay=False), help="Project root")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
def delete_command(backup_id: str, project_path: str, yes: bool) -> None:
    """Irreversibly delete a backup."""
    manager = backup_manager_for(project_path)
    manifest = manager.get_manifest(backup_id)
    if not yes:
        click.confirm(f"Delete backup {backup_id} ({manifest.file_count} files)?", abort=True)
    manager.delete_backup(backup_id)
    print_success(f"Deleted backup {backup_id}")
