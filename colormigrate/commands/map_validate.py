"""Check a mapping file before running a refactor."""

import sys
from pathlib import Path

import click

from colormigrate.config_runtime import load_runtime_config
from colormigrate.exceptions import MappingError
from colormigrate.mapping import load_mapping, validate_mapping
from colormigrate.profile import RewriteProfile
from colormigrate.ui import console, print_error, print_header, print_status_panel, print_warning
from colormigrate.utils.error_handler import handle_exceptions
from colormigrate.utils.exit_codes import ExitCodes


@click.command("map-validate")
@handle_exceptions
@click.option("--mapping", "-m", "mapping_file", required=True, type=click.Path(), help="Mapping YAML")
@click.option("--project-path", "-p", default=".", type=click.Path(file_okay=False), help="Project root")
@click.option("--theme", is_flag=True, help="Also require the essential theme slots to be mapped")
def map_validate(mapping_file: str, project_path: str, theme: bool) -> None:
    """Validate a mapping file against the project's rewrite profile.

    Errors (invalid identifiers, unknown colorScheme slots, a name in two
    extension groups) make the mapping unusable. Warnings (duplicate
    strict targets, names outside the configured namespaces) are worth a
    look but do not block a refactor.

    --theme adds the theme completeness check: every essential
    colorScheme slot should be mapped. Missing error/onError slots are
    errors, other missing slots warnings.

    \b
    EXIT CODES:
      0 = mapping is valid (warnings allowed)
      1 = mapping has errors
      3 = mapping file missing or unreadable
    """
    path = Path(mapping_file)
    if not path.exists():
        print_error(f"Mapping file not found: {mapping_file}")
        sys.exit(ExitCodes.TASK_INCOMPLETE)

    try:
        mapping = load_mapping(path)
    except MappingError as e:
        print_error(str(e))
        sys.exit(ExitCodes.TASK_INCOMPLETE)

    profile = RewriteProfile.from_config(load_runtime_config(Path(project_path).resolve()))
    result = validate_mapping(mapping, profile, check_theme=theme)

    print_header("MAPPING")
    console.print(f"Strict mappings:  {len(mapping.strict)}")
    console.print(f"Extension groups: {len(mapping.extensions)}")
    console.print(f"Extension colors: {sum(len(g.members) for g in mapping.extensions.values())}")
    console.print(f"Preserved:        {len(mapping.preserved)}")

    for error in result.errors:
        print_error(error)
    for warning in result.warnings:
        print_warning(warning)

    if not result.is_valid:
        print_status_panel(
            "INVALID",
            f"{len(result.errors)} error(s), {len(result.warnings)} warning(s)",
            "Fix the errors before running refactor.",
            level="error",
        )
        sys.exit(ExitCodes.VALIDATION_ERRORS)

    print_status_panel(
        "VALID",
        f"Mapping is usable with {len(result.warnings)} warning(s)",
        f"Next: color-migrate refactor --mapping {mapping_file}",
        level="success",
    )
