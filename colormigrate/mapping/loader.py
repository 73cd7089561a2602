"""Loads mapping tables from YAML documents.

Expected layout::

    version: "1.0"
    strict_mappings:
      AppColors.primaryBlue:
        target: colorScheme.primary
        verify_value: "0xFF2196F3"
    extensions:
      AppExtraColors:
        AppColors.blue50:
          target: blue50
          value: "0xFFE3F2FD"
    preserved:
      - AppColors.transparent
    rules:
      require_value_match: true
"""

from pathlib import Path
from typing import Any

import yaml

from colormigrate.exceptions import MappingError
from colormigrate.mapping.models import (
    ExtensionGroup,
    ExtensionMember,
    MappingRules,
    MappingTable,
    StrictMapping,
)
from colormigrate.utils.logging import logger


def _as_text(value: Any) -> str | None:
    """Colour values may be written unquoted; YAML then reads 0xFF... as an int."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise MappingError(f"Expected a string value, got {value!r}")
    if isinstance(value, int):
        return f"0x{value:08X}"
    return str(value)


def _require_map(value: Any, where: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise MappingError(f"Invalid mapping configuration: '{where}' must be a map")
    return value


def _parse_strict(data: Any) -> dict[str, StrictMapping]:
    strict = {}
    for name, entry in _require_map(data, "strict_mappings").items():
        entry = _require_map(entry, f"strict_mappings.{name}")
        if "target" not in entry:
            raise MappingError(f"Strict mapping for {name} has no 'target'")
        strict[str(name)] = StrictMapping(
            target=str(entry["target"]),
            verify_value=_as_text(entry.get("verify_value")),
            description=_as_text(entry.get("description")),
        )
    return strict


def _parse_extensions(data: Any) -> dict[str, ExtensionGroup]:
    groups = {}
    for group_name, members in _require_map(data, "extensions").items():
        parsed = {}
        for name, entry in _require_map(members, f"extensions.{group_name}").items():
            entry = _require_map(entry, f"extensions.{group_name}.{name}")
            if "target" not in entry:
                raise MappingError(f"Extension member {name} in {group_name} has no 'target'")
            parsed[str(name)] = ExtensionMember(
                target=str(entry["target"]),
                value=_as_text(entry.get("value")),
            )
        groups[str(group_name)] = ExtensionGroup(name=str(group_name), members=parsed)
    return groups


RULE_KEYS = ("require_value_match", "block_if_mismatch")

# Written by older mapping generators; accepted and ignored
IGNORED_RULE_KEYS = ("auto_generate", "group_similar_colors")


def _parse_rules(data: Any) -> MappingRules:
    rules = _require_map(data, "rules")
    values = {}
    for key, value in rules.items():
        if key in IGNORED_RULE_KEYS:
            logger.debug(f"Ignoring mapping rule '{key}'")
            continue
        if key not in RULE_KEYS:
            raise MappingError(f"Unknown rule '{key}' (expected one of: {', '.join(RULE_KEYS)})")
        if not isinstance(value, bool):
            raise MappingError(f"Rule '{key}' must be true or false")
        values[key] = value
    return MappingRules(**values)


def mapping_from_dict(data: dict[str, Any]) -> MappingTable:
    """Build a MappingTable from an already-decoded document."""
    preserved = data.get("preserved") or []
    if not isinstance(preserved, list):
        raise MappingError("Invalid mapping configuration: 'preserved' must be a list")

    table = MappingTable(
        strict=_parse_strict(data.get("strict_mappings")),
        extensions=_parse_extensions(data.get("extensions")),
        preserved=tuple(str(name) for name in preserved),
        rules=_parse_rules(data.get("rules")),
        version=str(data.get("version", "1.0")),
    )
    logger.debug(
        f"Loaded mapping v{table.version}: {len(table.strict)} strict, "
        f"{len(table.extensions)} extension groups, {len(table.preserved)} preserved"
    )
    return table


def load_mapping_from_yaml(content: str) -> MappingTable:
    """Parse a mapping table from YAML text. Raises MappingError."""
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise MappingError(f"Invalid YAML in mapping configuration: {e}") from e

    if not isinstance(data, dict):
        raise MappingError("Invalid mapping configuration: root must be a map")

    return mapping_from_dict(data)


def load_mapping(file_path: str | Path) -> MappingTable:
    """Load a mapping table from a YAML file. Raises MappingError."""
    path = Path(file_path)
    if not path.exists():
        raise MappingError(f"Mapping file not found: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise MappingError(f"Could not read mapping file {path}: {e}") from e

    return load_mapping_from_yaml(content)
