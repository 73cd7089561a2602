"""Tests for the color-migrate command line."""

import json

import pytest
from click.testing import CliRunner

from colormigrate.cli import cli
from colormigrate.refactor import BackupManager
from colormigrate.utils.exit_codes import ExitCodes


@pytest.fixture
def runner(tmp_path, monkeypatch):
    """Create CLI test runner; the error log lands under a scratch cwd."""
    monkeypatch.chdir(tmp_path)
    return CliRunner()


def _refactor(runner, project, *extra):
    return runner.invoke(
        cli,
        ["refactor", "--mapping", str(project / "color_mapping.yaml"), "--project-path", str(project), *extra],
    )


def test_root_help_lists_commands(runner):
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    for name in ("refactor", "rollback", "backup", "map-validate"):
        assert name in result.output


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "color-migrate" in result.output


def test_dry_run_by_default(runner, dart_project):
    badge = dart_project / "lib" / "widgets" / "badge.dart"
    before = badge.read_text(encoding="utf-8")

    result = _refactor(runner, dart_project)

    assert result.exit_code == ExitCodes.SUCCESS, result.output
    assert "DRY RUN" in result.output
    assert badge.read_text(encoding="utf-8") == before
    assert "UNMAPPED CONSTANTS" in result.output
    assert "AppColors.legacyGrey" in result.output


def test_reports(runner, dart_project, tmp_path_factory):
    out = tmp_path_factory.mktemp("reports")
    result = _refactor(runner, dart_project, "--diff", "--html", str(out / "r.html"), "--output", str(out / "r.json"))

    assert result.exit_code == ExitCodes.SUCCESS, result.output
    assert "+++ b/lib/widgets/badge.dart" in result.output
    assert (out / "r.html").exists()
    assert json.loads((out / "r.json").read_text(encoding="utf-8"))["summary"]["total_changes"] == 3


def test_apply_then_rollback(runner, dart_project):
    badge = dart_project / "lib" / "widgets" / "badge.dart"
    before = badge.read_text(encoding="utf-8")

    result = _refactor(runner, dart_project, "--apply")
    assert result.exit_code == ExitCodes.SUCCESS, result.output
    assert "APPLIED" in result.output
    assert "Theme.of(context)" in badge.read_text(encoding="utf-8")

    backups = BackupManager(dart_project).list_backups()
    assert len(backups) == 1
    backup_id = backups[0].id

    listed = runner.invoke(cli, ["rollback", "--list", "--project-path", str(dart_project)])
    assert listed.exit_code == 0
    assert backup_id in listed.output

    verified = runner.invoke(
        cli, ["rollback", "--backup-id", backup_id, "--verify-only", "--project-path", str(dart_project)]
    )
    assert verified.exit_code == 0
    assert badge.read_text(encoding="utf-8") != before

    restored = runner.invoke(cli, ["rollback", "--backup-id", backup_id, "--project-path", str(dart_project)])
    assert restored.exit_code == 0, restored.output
    assert badge.read_text(encoding="utf-8") == before


def test_missing_mapping_exits_task_incomplete(runner, tmp_path):
    result = runner.invoke(
        cli, ["refactor", "--mapping", str(tmp_path / "nope.yaml"), "--project-path", str(tmp_path)]
    )
    assert result.exit_code == ExitCodes.TASK_INCOMPLETE


def test_invalid_mapping_exits_task_incomplete(runner, dart_project):
    (dart_project / "color_mapping.yaml").write_text(
        "strict_mappings:\n  AppColors.a: {target: colorScheme.nope}\n", encoding="utf-8"
    )
    result = _refactor(runner, dart_project)
    assert result.exit_code == ExitCodes.TASK_INCOMPLETE


def test_validation_errors_block_apply(runner, dart_project):
    tint = dart_project / "lib" / "tint.dart"
    tint.write_text(
        "import 'package:flutter/material.dart';\n\n"
        "class Tint {\n  const Tint() : c = AppColors.primaryBlue;\n  final Color c;\n}\n",
        encoding="utf-8",
    )
    before = tint.read_text(encoding="utf-8")

    dry = _refactor(runner, dart_project)
    assert dry.exit_code == ExitCodes.VALIDATION_ERRORS

    blocked = _refactor(runner, dart_project, "--apply")
    assert blocked.exit_code == ExitCodes.APPLY_BLOCKED
    assert "BLOCKED" in blocked.output
    assert tint.read_text(encoding="utf-8") == before

    forced = _refactor(runner, dart_project, "--apply", "--force")
    assert forced.exit_code == ExitCodes.VALIDATION_ERRORS
    assert tint.read_text(encoding="utf-8") != before


def test_corrupted_backup_exits_integrity_failure(runner, dart_project):
    _refactor(runner, dart_project, "--apply")
    manifest = BackupManager(dart_project).list_backups()[0]
    (manifest.location / "lib" / "settings.dart").write_text("tampered\n", encoding="utf-8")

    verify = runner.invoke(cli, ["backup", "verify", manifest.id, "--project-path", str(dart_project)])
    assert verify.exit_code == ExitCodes.INTEGRITY_FAILURE

    restore = runner.invoke(cli, ["rollback", "--backup-id", manifest.id, "--project-path", str(dart_project)])
    assert restore.exit_code == ExitCodes.INTEGRITY_FAILURE
    assert "PARTIAL RESTORE" in restore.output


def test_backup_list_and_delete(runner, dart_project):
    _refactor(runner, dart_project, "--apply")
    backup_id = BackupManager(dart_project).list_backups()[0].id

    listed = runner.invoke(cli, ["backup", "list", "--project-path", str(dart_project)])
    assert listed.exit_code == 0
    assert backup_id in listed.output

    deleted = runner.invoke(cli, ["backup", "delete", backup_id, "--yes", "--project-path", str(dart_project)])
    assert deleted.exit_code == 0
    assert BackupManager(dart_project).list_backups() == []


def test_unknown_backup_is_reported(runner, dart_project):
    result = runner.invoke(cli, ["rollback", "--backup-id", "42", "--project-path", str(dart_project)])
    assert result.exit_code != 0
    assert "Backup not found" in result.output


def test_map_validate(runner, dart_project):
    ok = runner.invoke(cli, ["map-validate", "--mapping", str(dart_project / "color_mapping.yaml")])
    assert ok.exit_code == 0, ok.output
    assert "VALID" in ok.output

    bad = dart_project / "bad.yaml"
    bad.write_text(
        "extensions:\n  One:\n    AppColors.a: {target: a}\n  Two:\n    AppColors.a: {target: a}\n",
        encoding="utf-8",
    )
    result = runner.invoke(cli, ["map-validate", "--mapping", str(bad)])
    assert result.exit_code == ExitCodes.VALIDATION_ERRORS


def test_map_validate_theme(runner, dart_project):
    mapping = str(dart_project / "color_mapping.yaml")
    result = runner.invoke(cli, ["map-validate", "--mapping", mapping, "--theme", "--project-path", str(dart_project)])
    assert result.exit_code == ExitCodes.VALIDATION_ERRORS
    assert "colorScheme.onError" in result.output
