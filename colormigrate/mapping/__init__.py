"""Mapping table models, YAML loading and validation."""

from .loader import load_mapping, load_mapping_from_yaml, mapping_from_dict
from .models import ExtensionGroup, ExtensionMember, MappingRules, MappingTable, StrictMapping
from .validator import MappingValidationResult, ThemeValidationResult, validate_mapping, validate_theme

__all__ = [
    "ExtensionGroup",
    "ExtensionMember",
    "MappingRules",
    "MappingTable",
    "MappingValidationResult",
    "StrictMapping",
    "ThemeValidationResult",
    "load_mapping",
    "load_mapping_from_yaml",
    "mapping_from_dict",
    "validate_mapping",
    "validate_theme",
]
