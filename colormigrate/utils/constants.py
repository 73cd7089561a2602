"""Centralized constants for the colormigrate utils package.

This module provides a single source of truth for paths, directories,
and configuration values used across utility modules.
"""

from pathlib import Path

# ============================================================================
# OUTPUT DIRECTORIES
# ============================================================================

# Working directory for tool state (config, logs)
STATE_DIR = Path("./.colormigrate")

# Log files
ERROR_LOG_FILE = STATE_DIR / "error.log"

# Per-project config file, relative to the project root
CONFIG_FILE_NAME = "config.json"

# ============================================================================
# BACKUPS
# ============================================================================

# Backup root, relative to the project root
BACKUP_DIR_NAME = ".color_migrate_backups"

# Manifest stored inside every backup directory
BACKUP_MANIFEST_NAME = ".backup_metadata.json"

# ============================================================================
# FILE PROCESSING LIMITS
# ============================================================================

# Maximum file size to rewrite (default: 2MB)
DEFAULT_MAX_FILE_SIZE = 2 * 1024 * 1024

# Encodings tried in order when reading source files
FILE_ENCODINGS = ["utf-8", "utf-8-sig", "latin-1"]

# ============================================================================
# ENVIRONMENT VARIABLES
# ============================================================================

ENV_PREFIX = "COLORMIGRATE"
ENV_LOG_LEVEL = "COLORMIGRATE_LOG_LEVEL"
ENV_LOG_JSON = "COLORMIGRATE_LOG_JSON"
ENV_LOG_FILE = "COLORMIGRATE_LOG_FILE"
