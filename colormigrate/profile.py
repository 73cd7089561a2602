"""Rewrite profile: the names the rewriter looks for and the code it emits."""

from dataclasses import dataclass, field
from typing import Any

from colormigrate.config_runtime import DEFAULTS


@dataclass(frozen=True)
class RewriteProfile:
    """Immutable description of one "namespace constant -> handle lookup" migration.

    With the defaults, ``AppColors.primaryBlue`` mapped to ``colorScheme.primary``
    becomes ``Theme.of(context).colorScheme.primary``; an extension member
    becomes ``Theme.of(context).extension<Group>()!.property``.
    """

    namespaces: tuple[str, ...] = ("AppColors",)
    handle_type: str = "BuildContext"
    handle_name: str = "context"
    handle_accessor: str = "Theme.of"
    render_method: str = "build"
    ui_base_marker: str = "Widget"
    group_lookup: str = "extension"
    accessor_imports: tuple[str, ...] = ("package:flutter/material.dart",)
    canonical_slots: frozenset[str] = field(default_factory=frozenset)
    essential_slots: tuple[str, ...] = ()
    required_slots: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_config(cls, cfg: dict[str, Any] | None = None) -> "RewriteProfile":
        """Build a profile from the ``rewrite`` section of a runtime config."""
        section = dict(DEFAULTS["rewrite"])
        if cfg is not None:
            section.update(cfg.get("rewrite", {}))
        return cls(
            namespaces=tuple(section["namespaces"]),
            handle_type=section["handle_type"],
            handle_name=section["handle_name"],
            handle_accessor=section["handle_accessor"],
            render_method=section["render_method"],
            ui_base_marker=section["ui_base_marker"],
            group_lookup=section["group_lookup"],
            accessor_imports=tuple(section["accessor_imports"]),
            canonical_slots=frozenset(section["canonical_slots"]),
            essential_slots=tuple(section["essential_slots"]),
            required_slots=frozenset(section["required_slots"]),
        )

    @property
    def accessor_call(self) -> str:
        """The handle lookup expression, e.g. ``Theme.of(context)``."""
        return f"{self.handle_accessor}({self.handle_name})"

    @property
    def accessor_parts(self) -> tuple[str | None, str]:
        """(prefix, member) of the accessor callee; prefix is None for a bare call."""
        prefix, _, member = self.handle_accessor.rpartition(".")
        return (prefix or None), member

    def strict_expression(self, target: str) -> str:
        return f"{self.accessor_call}.{target}"

    def extension_expression(self, group: str, prop: str) -> str:
        return f"{self.accessor_call}.{self.group_lookup}<{group}>()!.{prop}"

    def is_handle_type(self, type_name: str | None) -> bool:
        """True if a declared parameter type is the handle type (nullable or prefixed)."""
        if not type_name:
            return False
        simple = type_name.strip().rstrip("?").rsplit(".", 1)[-1]
        return simple == self.handle_type

    def is_ui_type(self, superclass: str | None) -> bool:
        return bool(superclass) and self.ui_base_marker in superclass
