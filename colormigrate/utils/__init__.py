"""colormigrate utilities package."""

from .constants import (
    BACKUP_DIR_NAME,
    BACKUP_MANIFEST_NAME,
    CONFIG_FILE_NAME,
    DEFAULT_MAX_FILE_SIZE,
    ERROR_LOG_FILE,
    STATE_DIR,
)
from .error_handler import handle_exceptions
from .exit_codes import ExitCodes
from .helpers import (
    compute_file_hash,
    is_safe_relative_path,
    load_json_file,
    normalize_relative_path,
    read_text_with_fallback,
    save_json_file,
    write_text_atomic,
)
from .logging import logger

__all__ = [
    "STATE_DIR",
    "ERROR_LOG_FILE",
    "CONFIG_FILE_NAME",
    "BACKUP_DIR_NAME",
    "BACKUP_MANIFEST_NAME",
    "DEFAULT_MAX_FILE_SIZE",
    "handle_exceptions",
    "ExitCodes",
    "compute_file_hash",
    "is_safe_relative_path",
    "load_json_file",
    "normalize_relative_path",
    "read_text_with_fallback",
    "save_json_file",
    "write_text_atomic",
    "logger",
]
