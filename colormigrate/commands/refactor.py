"""Rewrite legacy colour constants into theme lookups."""

import json
import sys
from pathlib import Path

import click

from colormigrate.config_runtime import load_runtime_config
from colormigrate.exceptions import MappingError, ValidationBlockedError
from colormigrate.mapping import load_mapping, validate_mapping
from colormigrate.profile import RewriteProfile
from colormigrate.refactor import CodeRefactorer, generate_html_diff, run_to_dict
from colormigrate.ui import (
    console,
    print_error,
    print_plan,
    print_status_panel,
    print_validation,
    print_warning,
)
from colormigrate.utils.error_handler import handle_exceptions
from colormigrate.utils.exit_codes import ExitCodes


@click.command("refactor")
@handle_exceptions
@click.option(
    "--mapping",
    "-m",
    "mapping_file",
    type=click.Path(),
    default="color_mapping.yaml",
    help="Mapping YAML (default: color_mapping.yaml in the project)",
)
@click.option("--project-path", "-p", default=".", type=click.Path(file_okay=False), help="Project root")
@click.option("--apply", "apply_changes", is_flag=True, help="Write changes (default is a dry run)")
@click.option("--force", is_flag=True, help="Write even when validation reports errors")
@click.option("--diff", "show_diff", is_flag=True, help="Show unified diffs instead of a change list")
@click.option("--html", "html_output", type=click.Path(), help="Write an HTML diff report")
@click.option("--output", "-o", type=click.Path(), help="Write the run as JSON")
def refactor(
    mapping_file: str,
    project_path: str,
    apply_changes: bool,
    force: bool,
    show_diff: bool,
    html_output: str | None,
    output: str | None,
) -> None:
    """Rewrite mapped colour constants into theme lookups.

    Every reference to a configured namespace (AppColors by default) is
    resolved against the mapping: strict entries become
    Theme.of(context).<slot>, extension entries become
    Theme.of(context).extension<Group>()!.<property>, preserved and
    unmapped names are left untouched.

    Runs as a dry run unless --apply is given. An apply run validates the
    rewritten code first and refuses to write while validation reports
    errors (override with --force). Every applied run takes a verified
    backup before the first write; undo it with 'color-migrate rollback'.

    \b
    EXAMPLES:
      color-migrate refactor --mapping color_mapping.yaml
      color-migrate refactor --mapping color_mapping.yaml --diff
      color-migrate refactor --mapping color_mapping.yaml --html report.html
      color-migrate refactor --mapping color_mapping.yaml --apply

    \b
    EXIT CODES:
      0 = success
      1 = rewritten code has validation errors
      2 = apply refused because of validation errors
      3 = mapping file missing or invalid
    """
    root = Path(project_path).resolve()
    mapping_path = Path(mapping_file)
    if not mapping_path.is_absolute() and not mapping_path.exists():
        mapping_path = root / mapping_path

    if not mapping_path.exists():
        print_status_panel(
            "MISSING INPUT",
            f"Mapping file not found: {mapping_file}",
            "Create a mapping YAML and pass it with --mapping.",
            level="error",
        )
        sys.exit(ExitCodes.TASK_INCOMPLETE)

    cfg = load_runtime_config(root)
    profile = RewriteProfile.from_config(cfg)

    try:
        mapping = load_mapping(mapping_path)
    except MappingError as e:
        print_status_panel("MISSING INPUT", "Mapping file could not be loaded", str(e), level="error")
        sys.exit(ExitCodes.TASK_INCOMPLETE)

    mapping_check = validate_mapping(mapping, profile)
    for warning in mapping_check.warnings:
        print_warning(f"mapping: {warning}")
    if not mapping_check.is_valid:
        for error in mapping_check.errors:
            print_error(f"mapping: {error}")
        print_status_panel(
            "MISSING INPUT",
            f"Mapping has {len(mapping_check.errors)} error(s)",
            "Fix the mapping and re-run (see 'color-migrate map-validate').",
            level="error",
        )
        sys.exit(ExitCodes.TASK_INCOMPLETE)

    refactorer = CodeRefactorer(root, mapping, profile=profile, cfg=cfg)
    exit_code = ExitCodes.SUCCESS

    try:
        run = refactorer.refactor_project(dry_run=not apply_changes, force=force)
    except ValidationBlockedError as e:
        run = e.run
        if run is not None:
            print_plan(run, show_diff)
            print_validation(run)
        print_status_panel(
            "BLOCKED",
            "Apply refused: validation found errors. Nothing was written.",
            "Review the dry-run output, fix the sites above, or pass --force.",
            level="error",
        )
        sys.exit(ExitCodes.APPLY_BLOCKED)

    print_plan(run, show_diff)
    print_validation(run)

    if html_output:
        path = generate_html_diff(run, html_output)
        console.print(f"\nHTML report: [path]{path}[/path]", highlight=False)
    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json.dumps(run_to_dict(run), indent=2), encoding="utf-8")
        console.print(f"JSON report: [path]{output_path}[/path]", highlight=False)

    console.print()
    if run.validation is not None and not run.validation.is_valid:
        exit_code = ExitCodes.VALIDATION_ERRORS

    if run.dry_run:
        print_status_panel(
            "DRY RUN",
            f"{run.total_change_count} change(s) planned in {run.modified_file_count} file(s)",
            ExitCodes.get_description(exit_code) if exit_code else "Re-run with --apply to write them.",
            level="warning" if exit_code else "info",
        )
    elif run.backup is not None:
        print_status_panel(
            "APPLIED",
            f"{run.total_change_count} change(s) written to {run.modified_file_count} file(s)",
            f"Backup {run.backup.id} - undo with: color-migrate rollback --backup-id {run.backup.id}",
            level="warning" if exit_code else "success",
        )
    else:
        print_status_panel("NO CHANGES", "Nothing to rewrite", "No mapped references were found.", level="info")

    if exit_code != ExitCodes.SUCCESS:
        sys.exit(exit_code)
