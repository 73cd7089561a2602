"""Helper utility functions for colormigrate.

IMPORTANT UTILITIES:
- normalize_relative_path(): Use this whenever a path is stored in a backup
  manifest or compared against one. Manifests store Unix-style paths
  relative to the project root, but callers may pass absolute or Windows
  paths. This function normalizes both to match.
"""

import hashlib
import json
import os
import shutil
from pathlib import Path
from typing import Any

from .constants import FILE_ENCODINGS
from .logging import logger


def normalize_relative_path(file_path: str | Path, project_root: Path | str | None = None) -> str:
    """Normalize a file path to the project-relative form used in manifests.

    Transformations:
    1. Convert backslashes to forward slashes (Windows -> Unix)
    2. Strip project root prefix if provided (absolute -> relative)
    3. Strip leading slashes

    Examples:
        >>> normalize_relative_path("lib\\\\widgets\\\\badge.dart")
        'lib/widgets/badge.dart'

        >>> normalize_relative_path("/work/app/lib/main.dart", project_root="/work/app")
        'lib/main.dart'
    """

    normalized = str(file_path).replace("\\", "/")

    if project_root is not None:
        root_str = str(project_root).replace("\\", "/").rstrip("/")

        if normalized.startswith(root_str + "/"):
            normalized = normalized[len(root_str) + 1 :]
        elif normalized == root_str:
            normalized = ""

    return normalized.lstrip("/")


def is_safe_relative_path(relative_path: str) -> bool:
    """True if a manifest path stays inside the directory it is joined to."""
    if not relative_path or relative_path.startswith("/") or ":" in relative_path.split("/")[0]:
        return False
    return ".." not in relative_path.split("/")


def compute_file_hash(file_path: Path) -> str:
    """
    Compute SHA256 hash of a file.

    Args:
        file_path: Path to the file

    Returns:
        Hex digest of SHA256 hash
    """
    sha256_hash = hashlib.sha256()
    with open(file_path, "rb") as f:
        for byte_block in iter(lambda: f.read(4096), b""):
            sha256_hash.update(byte_block)
    return sha256_hash.hexdigest()


def read_text_with_fallback(file_path: Path) -> tuple[str, str]:
    """Read file trying multiple encodings. Returns (content, encoding_used)."""
    raw = Path(file_path).read_bytes()
    for encoding in FILE_ENCODINGS:
        try:
            return raw.decode(encoding), encoding
        except UnicodeDecodeError:
            continue
    raise UnicodeDecodeError(
        "all", raw, 0, len(raw), f"Failed to decode {file_path} with any of: {FILE_ENCODINGS}"
    )


def write_text_atomic(file_path: Path, content: str, encoding: str = "utf-8") -> None:
    """Write text through a sibling temp file and rename it into place."""
    file_path = Path(file_path)
    tmp_path = file_path.with_name(f".{file_path.name}.cmtmp")
    try:
        with open(tmp_path, "w", encoding=encoding, newline="") as f:
            f.write(content)
        if file_path.exists():
            shutil.copymode(file_path, tmp_path)
        os.replace(tmp_path, file_path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


def load_json_file(file_path: str | Path) -> dict[str, Any]:
    """
    Load and parse a JSON file.

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If file contains invalid JSON
        PermissionError: If file cannot be read
    """
    try:
        with open(file_path, encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        logger.error(f"JSON file not found: {file_path}")
        raise
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in file {file_path}: {e}")
        raise
    except PermissionError:
        logger.error(f"Permission denied reading file: {file_path}")
        raise


def save_json_file(data: dict[str, Any], file_path: str | Path) -> None:
    """Save data as JSON to file."""
    with open(file_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, default=str)
