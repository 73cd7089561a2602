"""Reference resolver: finds namespace constant references and classifies them."""

from colormigrate.mapping.models import MappingTable
from colormigrate.profile import RewriteProfile
from colormigrate.refactor.models import ColorReference, Resolution
from colormigrate.syntax import NodeKind, SourceUnit
from colormigrate.utils.logging import logger


class ReferenceResolver:
    """Locate every ``Namespace.member`` whose namespace is configured.

    Classification priority: strict mapping, then the first extension group
    (in declared order) listing the name, then preserved, then unmapped.
    """

    def __init__(self, mapping: MappingTable, profile: RewriteProfile | None = None):
        self.mapping = mapping
        self.profile = profile or RewriteProfile()
        self._reported_conflicts: set[str] = set()

    def resolve(self, unit: SourceUnit) -> list[ColorReference]:
        """All references in source order, each with its resolution."""
        references = []
        namespaces = set(self.profile.namespaces)

        for node in unit.tree.find_all(NodeKind.QUALIFIED_NAME):
            if node.prefix not in namespaces:
                continue
            reference = ColorReference(
                offset=node.offset,
                length=node.length,
                text=unit.source_of(node),
                node=node,
                prefix=node.prefix,
                member=node.member,
            )
            self._classify(reference)
            references.append(reference)

        return references

    def _classify(self, reference: ColorReference) -> None:
        name = reference.qualified_name

        strict = self.mapping.strict.get(name)
        if strict is not None:
            reference.resolution = Resolution.STRICT
            reference.target = strict.target
            return

        groups = self.mapping.groups_containing(name)
        if groups:
            if len(groups) > 1 and name not in self._reported_conflicts:
                self._reported_conflicts.add(name)
                logger.warning(
                    f"{name} is listed in several extension groups "
                    f"({', '.join(g.name for g in groups)}); using {groups[0].name}"
                )
            group = groups[0]
            reference.resolution = Resolution.EXTENSION
            reference.group = group.name
            reference.target = group.members[name].target
            return

        if self.mapping.is_preserved(name):
            reference.resolution = Resolution.PRESERVED
        else:
            reference.resolution = Resolution.UNMAPPED
