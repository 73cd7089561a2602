"""Runtime configuration for colormigrate - centralized configuration management."""

import json
import os
from pathlib import Path
from typing import Any

from colormigrate.utils.constants import BACKUP_DIR_NAME, CONFIG_FILE_NAME, DEFAULT_MAX_FILE_SIZE, ENV_PREFIX
from colormigrate.utils.logging import logger

# ColorScheme slots a strict mapping may target
MATERIAL_COLOR_SCHEME_SLOTS = [
    "colorScheme.primary",
    "colorScheme.onPrimary",
    "colorScheme.primaryContainer",
    "colorScheme.onPrimaryContainer",
    "colorScheme.secondary",
    "colorScheme.onSecondary",
    "colorScheme.secondaryContainer",
    "colorScheme.onSecondaryContainer",
    "colorScheme.tertiary",
    "colorScheme.onTertiary",
    "colorScheme.tertiaryContainer",
    "colorScheme.onTertiaryContainer",
    "colorScheme.error",
    "colorScheme.onError",
    "colorScheme.errorContainer",
    "colorScheme.onErrorContainer",
    "colorScheme.background",
    "colorScheme.onBackground",
    "colorScheme.surface",
    "colorScheme.onSurface",
    "colorScheme.surfaceVariant",
    "colorScheme.onSurfaceVariant",
    "colorScheme.outline",
    "colorScheme.outlineVariant",
    "colorScheme.shadow",
    "colorScheme.scrim",
    "colorScheme.inverseSurface",
    "colorScheme.onInverseSurface",
    "colorScheme.inversePrimary",
]

# Slots every theme migration should cover; a missing required slot is an error
ESSENTIAL_COLOR_SCHEME_SLOTS = [
    "colorScheme.primary",
    "colorScheme.onPrimary",
    "colorScheme.secondary",
    "colorScheme.onSecondary",
    "colorScheme.error",
    "colorScheme.onError",
    "colorScheme.surface",
    "colorScheme.onSurface",
    "colorScheme.background",
    "colorScheme.onBackground",
]

REQUIRED_COLOR_SCHEME_SLOTS = ["colorScheme.error", "colorScheme.onError"]

DEFAULTS = {
    "paths": {
        "state_dir": "./.colormigrate",
        "backup_dir": BACKUP_DIR_NAME,
    },
    "limits": {
        "max_file_size": DEFAULT_MAX_FILE_SIZE,
        "max_files": 0,
    },
    "scan": {
        "extensions": [".dart"],
        "generated_suffixes": [".g.dart", ".freezed.dart", ".mocks.dart"],
        "exclude_dirs": [
            ".git",
            ".dart_tool",
            ".idea",
            ".vscode",
            ".colormigrate",
            "build",
            "test",
            "integration_test",
            "node_modules",
        ],
    },
    "rewrite": {
        "namespaces": ["AppColors"],
        "handle_type": "BuildContext",
        "handle_name": "context",
        "handle_accessor": "Theme.of",
        "render_method": "build",
        "ui_base_marker": "Widget",
        "group_lookup": "extension",
        "accessor_imports": ["package:flutter/material.dart"],
        "canonical_slots": MATERIAL_COLOR_SCHEME_SLOTS,
        "essential_slots": ESSENTIAL_COLOR_SCHEME_SLOTS,
        "required_slots": REQUIRED_COLOR_SCHEME_SLOTS,
    },
}

SECTIONS = ("paths", "limits", "scan", "rewrite")


def _coerce_env_value(raw: str, default_value: Any) -> Any:
    if isinstance(default_value, bool):
        return raw.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(default_value, int):
        return int(raw)
    if isinstance(default_value, float):
        return float(raw)
    if isinstance(default_value, list):
        return [v.strip() for v in raw.split(",") if v.strip()]
    return raw


def load_runtime_config(root: str | Path = ".") -> dict[str, Any]:
    """
    Load runtime configuration from .colormigrate/config.json and environment variables.

    Config priority (highest to lowest):
    1. Environment variables (COLORMIGRATE_<SECTION>_<KEY>)
    2. .colormigrate/config.json under root
    3. Built-in defaults

    Args:
        root: Project root to look for the config file in

    Returns:
        Configuration dictionary with merged values
    """

    import copy

    cfg = copy.deepcopy(DEFAULTS)

    path = Path(root) / ".colormigrate" / CONFIG_FILE_NAME
    try:
        if path.exists():
            with open(path, encoding="utf-8") as f:
                user = json.load(f)

            if isinstance(user, dict):
                for section in SECTIONS:
                    if section in user and isinstance(user[section], dict):
                        for key, value in user[section].items():
                            if key in cfg[section] and isinstance(value, type(cfg[section][key])):
                                cfg[section][key] = value
                            else:
                                logger.warning(f"Ignoring unknown or mistyped config key {section}.{key}")
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Could not load config file from {path}: {e}")
        logger.info("Continuing with default configuration")

    for section in cfg:
        for key in cfg[section]:
            env_var = f"{ENV_PREFIX}_{section.upper()}_{key.upper()}"
            if env_var in os.environ:
                value = os.environ[env_var]
                try:
                    cfg[section][key] = _coerce_env_value(value, cfg[section][key])
                except (ValueError, AttributeError) as e:
                    logger.warning(f"Invalid value for environment variable {env_var}: '{value}' - {e}")
                    logger.info(f"Using default value: {cfg[section][key]}")

    return cfg
