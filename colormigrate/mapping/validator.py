"""Schema checks for mapping tables.

The rewriter treats a mapping as given; this module is where configuration
defects are surfaced before a run. Errors make a mapping unusable, warnings
are worth a look but do not block.
"""

import re
from collections import Counter
from dataclasses import dataclass, field

from colormigrate.mapping.models import MappingTable
from colormigrate.profile import RewriteProfile

IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
COLOR_VALUE_RE = re.compile(r"^(0[xX][0-9A-Fa-f]{8}|#[0-9A-Fa-f]{6}([0-9A-Fa-f]{2})?)$")


@dataclass
class MappingValidationResult:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def is_valid_identifier(name: str) -> bool:
    return bool(IDENTIFIER_RE.match(name))


def _is_qualified_name(name: str) -> bool:
    parts = name.split(".")
    return len(parts) == 2 and all(is_valid_identifier(p) for p in parts)


def _is_member_chain(target: str) -> bool:
    return bool(target) and all(is_valid_identifier(p) for p in target.split("."))


def validate_mapping(
    mapping: MappingTable, profile: RewriteProfile | None = None, check_theme: bool = False
) -> MappingValidationResult:
    """Check a mapping table against the identifier grammar and the profile.

    With check_theme the findings of validate_theme are folded in as well.
    """
    profile = profile or RewriteProfile()
    result = MappingValidationResult()
    errors, warnings = result.errors, result.warnings
    rules = mapping.rules

    def _check_name(name: str, where: str) -> None:
        if not _is_qualified_name(name):
            errors.append(f"Invalid constant name in {where}: {name} (expected Namespace.member)")
            return
        namespace = name.split(".", 1)[0]
        if namespace not in profile.namespaces:
            warnings.append(
                f"{name} in {where} is outside the configured namespaces "
                f"({', '.join(profile.namespaces)}) and will never match"
            )

    def _check_value(value: str, what: str) -> None:
        if not rules.require_value_match or COLOR_VALUE_RE.match(value):
            return
        (errors if rules.block_if_mismatch else warnings).append(f"Unrecognised {what}: {value}")

    for name, strict in mapping.strict.items():
        _check_name(name, "strict_mappings")
        if not _is_member_chain(strict.target):
            errors.append(f"Invalid target for {name}: {strict.target}")
        elif profile.canonical_slots and strict.target not in profile.canonical_slots:
            errors.append(f"Invalid canonical slot: {strict.target} for {name}")
        if strict.verify_value is not None:
            _check_value(strict.verify_value, f"verify_value for {name}")

    target_counts = Counter(strict.target for strict in mapping.strict.values())
    for target, count in target_counts.items():
        if count > 1:
            warnings.append(f"Duplicate strict target: {target} ({count} constants)")

    for group in mapping.extensions.values():
        if not is_valid_identifier(group.name):
            errors.append(f"Invalid extension name: {group.name} (must be a valid identifier)")
        if not group.members:
            warnings.append(f"Extension {group.name} has no colors")
        for name, member in group.members.items():
            _check_name(name, f"extension {group.name}")
            if not is_valid_identifier(member.target):
                errors.append(f"Invalid extension property name: {member.target} in {group.name}")
            if member.value is not None:
                _check_value(member.value, f"value for {name} in {group.name}")

    seen_in_groups: dict[str, list[str]] = {}
    for group in mapping.extensions.values():
        for name in group.members:
            seen_in_groups.setdefault(name, []).append(group.name)
    for name, groups in seen_in_groups.items():
        if len(groups) > 1:
            errors.append(f"{name} appears in more than one extension group: {', '.join(groups)}")
        if name in mapping.strict:
            warnings.append(f"{name} has both a strict mapping and an extension mapping; strict wins")

    mapped = mapping.mapped_names
    for name in mapping.preserved:
        _check_name(name, "preserved")
        if name in mapped:
            warnings.append(f"{name} is listed as preserved but is also mapped; the mapping wins")

    if check_theme:
        theme = validate_theme(mapping, profile)
        errors.extend(theme.errors)
        warnings.extend(theme.warnings)

    return result


@dataclass
class ThemeValidationResult(MappingValidationResult):
    missing_slots: list[str] = field(default_factory=list)


def validate_theme(mapping: MappingTable, profile: RewriteProfile | None = None) -> ThemeValidationResult:
    """Check that the mapping covers the theme the migration targets.

    Every essential slot of the profile should be the target of some strict
    mapping. A missing required slot (``colorScheme.error`` and
    ``colorScheme.onError`` for Flutter) is an error, any other missing
    essential slot a warning. Extension group names become theme extension
    classes, so they should read as type names.
    """
    profile = profile or RewriteProfile()
    result = ThemeValidationResult()

    mapped = {strict.target for strict in mapping.strict.values()}
    wanted = list(profile.essential_slots)
    wanted.extend(sorted(profile.required_slots.difference(wanted)))
    for slot in wanted:
        if slot in mapped:
            continue
        result.missing_slots.append(slot)
        message = f"Missing essential theme slot: {slot}"
        if slot in profile.required_slots:
            result.errors.append(message)
        else:
            result.warnings.append(message)

    for group in mapping.extensions.values():
        bare = group.name.lstrip("_$")
        if is_valid_identifier(group.name) and bare and not bare[0].isupper():
            result.warnings.append(f"Extension {group.name} should be an UpperCamelCase type name")

    return result
