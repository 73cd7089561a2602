"""Mapping table models.

A mapping is the user-authored migration contract. Keys are qualified
constant names as they appear in source (``AppColors.primaryBlue``).
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class StrictMapping:
    """Maps a constant onto one canonical slot, e.g. ``colorScheme.primary``."""

    target: str
    verify_value: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class ExtensionMember:
    """One property of a theme extension group."""

    target: str
    value: str | None = None


@dataclass(frozen=True)
class ExtensionGroup:
    """A named theme extension and the constants that move into it."""

    name: str
    members: dict[str, ExtensionMember] = field(default_factory=dict)


@dataclass(frozen=True)
class MappingRules:
    """How colour values written in the mapping are checked.

    require_value_match turns the value format check on. block_if_mismatch
    makes a malformed value an error instead of a warning.
    """

    require_value_match: bool = True
    block_if_mismatch: bool = True


@dataclass(frozen=True)
class MappingTable:
    """The full mapping. Extension groups keep their declared order."""

    strict: dict[str, StrictMapping] = field(default_factory=dict)
    extensions: dict[str, ExtensionGroup] = field(default_factory=dict)
    preserved: tuple[str, ...] = ()
    rules: MappingRules = field(default_factory=MappingRules)
    version: str = "1.0"

    def groups_containing(self, name: str) -> list[ExtensionGroup]:
        """Every extension group listing name, in declared order."""
        return [group for group in self.extensions.values() if name in group.members]

    def is_preserved(self, name: str) -> bool:
        return name in self.preserved

    @property
    def mapped_names(self) -> set[str]:
        names = set(self.strict)
        for group in self.extensions.values():
            names.update(group.members)
        return names
