"""Project walk: which source files a refactor run should look at."""

import os
from pathlib import Path
from typing import Any

from colormigrate.config_runtime import DEFAULTS
from colormigrate.utils.logging import logger


def discover_source_files(project_root: str | Path, cfg: dict[str, Any] | None = None) -> list[Path]:
    """Walk project_root and return rewritable source files, sorted.

    Skips excluded directories (tests, build output, tool state and the
    backup root), generated files, files over ``limits.max_file_size`` and
    everything past ``limits.max_files`` (0 means no limit).
    """
    cfg = cfg or DEFAULTS
    root = Path(project_root).resolve()
    scan = cfg["scan"]
    limits = cfg["limits"]

    skip_dirs = set(scan["exclude_dirs"])
    skip_dirs.add(Path(cfg["paths"]["backup_dir"]).name)
    extensions = tuple(scan["extensions"])
    generated = tuple(scan["generated_suffixes"])
    max_size = limits["max_file_size"]
    max_files = limits["max_files"]

    found: list[Path] = []
    oversized = 0

    for dirpath, dirs, files in os.walk(root):
        dirs[:] = sorted(d for d in dirs if d not in skip_dirs)

        for name in sorted(files):
            if not name.endswith(extensions) or name.endswith(generated):
                continue
            path = Path(dirpath) / name
            try:
                if path.stat().st_size > max_size:
                    oversized += 1
                    logger.debug(f"Skipping {path}: larger than {max_size} bytes")
                    continue
            except OSError as e:
                logger.warning(f"Cannot stat {path}: {e}")
                continue
            found.append(path)

    found.sort()
    if oversized:
        logger.info(f"Skipped {oversized} file(s) over the size limit")
    if max_files and len(found) > max_files:
        logger.info(f"Limiting run to {max_files} of {len(found)} files")
        found = found[:max_files]

    return found
