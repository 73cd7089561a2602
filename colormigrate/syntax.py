"""Language-neutral syntax tree contracts.

The resolver, context analyzer and validator only ever see these types:
node kind, offset, length, parent navigation and a handful of declaration
attributes. A concrete parser (see colormigrate.parsers) builds the tree.

Offsets and lengths are indices into the decoded source text, so
``text[node.offset:node.end]`` is always the node's source.
"""

from __future__ import annotations

import bisect
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class NodeKind(Enum):
    """Closed set of node kinds produced by parsers."""

    COMPILATION_UNIT = "compilation_unit"
    DIRECTIVE = "directive"
    CLASS = "class"
    METHOD = "method"
    FUNCTION = "function"
    CONSTRUCTOR = "constructor"
    FIELD = "field"
    PARAMETER = "parameter"
    QUALIFIED_NAME = "qualified_name"
    INVOCATION = "invocation"


DECLARATION_KINDS = frozenset({NodeKind.METHOD, NodeKind.FUNCTION, NodeKind.CONSTRUCTOR})


@dataclass(eq=False)
class SyntaxNode:
    """A node in a parsed source file.

    Kind-specific attributes are left at their defaults for kinds that do
    not use them:

    - CLASS: name, keyword, superclass
    - METHOD: name, is_static, is_getter, is_setter, has_body
    - FUNCTION: name, has_body
    - CONSTRUCTOR: name, is_const, is_factory, has_body
    - FIELD: name, is_static, is_const
    - PARAMETER: name, type_name
    - DIRECTIVE: keyword, uri
    - QUALIFIED_NAME: prefix, member
    - INVOCATION: prefix (None for a bare call), member (of the callee)

    QUALIFIED_NAME and INVOCATION also set in_const when they sit inside a
    const expression (const constructor call, const literal, const variable
    or default parameter value).
    """

    kind: NodeKind
    offset: int
    length: int
    text: str = ""
    name: str | None = None
    parent: SyntaxNode | None = field(default=None, repr=False)
    children: list[SyntaxNode] = field(default_factory=list, repr=False)

    keyword: str | None = None
    superclass: str | None = None
    uri: str | None = None
    type_name: str | None = None
    prefix: str | None = None
    member: str | None = None

    is_static: bool = False
    is_const: bool = False
    is_factory: bool = False
    is_getter: bool = False
    is_setter: bool = False
    has_body: bool = False
    in_const: bool = False

    @property
    def end(self) -> int:
        return self.offset + self.length

    def add(self, child: SyntaxNode) -> SyntaxNode:
        """Attach child to this node and return it."""
        child.parent = self
        self.children.append(child)
        return child

    @property
    def parameters(self) -> list[SyntaxNode]:
        return [c for c in self.children if c.kind is NodeKind.PARAMETER]

    def ancestors(self) -> Iterator[SyntaxNode]:
        """Yield parents from the closest outwards."""
        current = self.parent
        while current is not None:
            yield current
            current = current.parent

    def enclosing(self, *kinds: NodeKind) -> SyntaxNode | None:
        """Closest ancestor of one of the given kinds."""
        for ancestor in self.ancestors():
            if ancestor.kind in kinds:
                return ancestor
        return None

    def walk(self) -> Iterator[SyntaxNode]:
        """Pre-order traversal, children in source order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find_all(self, kind: NodeKind) -> list[SyntaxNode]:
        """All descendants (including self) of a kind, in source order."""
        nodes = [node for node in self.walk() if node.kind is kind]
        nodes.sort(key=lambda n: n.offset)
        return nodes


@dataclass(frozen=True, eq=False)
class SourceUnit:
    """A file's text plus its parsed tree. Immutable once built."""

    path: Path | None
    text: str
    tree: SyntaxNode
    _line_starts: tuple[int, ...] = field(default=(), repr=False)

    def __post_init__(self):
        starts = [0]
        for index, char in enumerate(self.text):
            if char == "\n":
                starts.append(index + 1)
        object.__setattr__(self, "_line_starts", tuple(starts))

    def line_of(self, offset: int) -> int:
        """1-based line number containing offset."""
        return bisect.bisect_right(self._line_starts, offset)

    def column_of(self, offset: int) -> int:
        """1-based column of offset within its line."""
        line = self.line_of(offset)
        return offset - self._line_starts[line - 1] + 1

    def source_of(self, node: SyntaxNode) -> str:
        return self.text[node.offset : node.end]
