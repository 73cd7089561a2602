"""Path confinement helpers for project and backup trees."""

from pathlib import Path

from colormigrate.exceptions import SecurityError


def sanitize_path(path_str: str | Path, project_root: str | Path | None = None) -> Path:
    """Resolve a path and ensure it stays inside project_root."""
    if project_root is None:
        project_root = "."

    root = Path(project_root).resolve()

    if not Path(path_str).is_absolute():
        target = (root / path_str).resolve()
    else:
        target = Path(path_str).resolve()

    try:
        target.relative_to(root)
    except ValueError as e:
        raise SecurityError(
            f"Path traversal attempt detected: {path_str} resolves outside {root}"
        ) from e

    return target


def is_valid_backup_id(backup_id: str) -> bool:
    """Backup ids are millisecond timestamps: digits only."""
    return bool(backup_id) and backup_id.isdigit()
