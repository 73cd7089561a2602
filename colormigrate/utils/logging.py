"""Loguru setup shared by every colormigrate module.

Usage:
    from colormigrate.utils.logging import logger
    logger.info("Planned {n} change(s)", n=3)

Environment Variables:
    COLORMIGRATE_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default: INFO)
    COLORMIGRATE_LOG_JSON: 0|1 (default: 0). 1 writes one JSON record per line
    COLORMIGRATE_LOG_FILE: also append DEBUG-level records to this file

Console logs go to stderr so that stdout stays free for the rich report
and for ``--output -`` style piping.
"""

import os
import sys

from loguru import logger

from .constants import ENV_LOG_FILE, ENV_LOG_JSON, ENV_LOG_LEVEL

logger.remove()

_log_level = os.environ.get(ENV_LOG_LEVEL, "INFO").upper()
_json_mode = os.environ.get(ENV_LOG_JSON, "0") == "1"
_log_file = os.environ.get(ENV_LOG_FILE)

# No emojis: Windows consoles still default to cp1252
_human_format = "<dim>{time:HH:mm:ss}</dim> <level>{level: <7}</level> {message}"

logger.level("WARNING", color="<yellow>")
logger.level("ERROR", color="<red>")

if _json_mode:
    logger.add(sys.stderr, level=_log_level, serialize=True)
else:
    logger.add(sys.stderr, level=_log_level, format=_human_format, colorize=None)

if _log_file:
    logger.add(
        _log_file,
        level="DEBUG",
        rotation="10 MB",
        retention=3,
        encoding="utf-8",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
    )


__all__ = ["logger"]
