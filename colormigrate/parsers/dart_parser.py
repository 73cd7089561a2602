"""Dart syntax tree builder on top of tree-sitter.

tree-sitter does the parsing. This module walks the concrete tree it
returns and keeps only what the rewriter needs: directives, classes,
constructors, methods, functions, fields and formal parameters, plus every
``Prefix.member`` reference and every ``Prefix.member(...)`` or ``name(...)``
call found in bodies, initializers and default values.

tree-sitter reports positions in UTF-8 bytes. They are converted to code
point offsets here, once, so the tree lines up with the decoded text.

A tree containing ERROR or MISSING nodes raises DartParseError at the
first such node.
"""

import re
from pathlib import Path
from typing import Any

from tree_sitter_language_pack import get_parser

from colormigrate.exceptions import DartParseError
from colormigrate.syntax import NodeKind, SourceUnit, SyntaxNode

CLASS_TYPES = {
    "class_definition": "class",
    "mixin_declaration": "mixin",
    "extension_declaration": "extension",
    "enum_declaration": "enum",
}

CLASS_BODY_TYPES = frozenset({"class_body", "extension_body", "enum_body"})

DIRECTIVE_TYPES = frozenset({"import_or_export", "part_directive", "part_of_directive", "library_name"})

MEMBER_TYPES = frozenset(
    {"method_signature", "declaration", "function_signature", "getter_signature", "setter_signature"}
)

CONSTRUCTOR_TYPES = frozenset(
    {
        "constructor_signature",
        "constant_constructor_signature",
        "factory_constructor_signature",
        "redirecting_factory_constructor_signature",
    }
)

FUNCTION_TYPES = frozenset({"function_signature", "getter_signature", "setter_signature", "operator_signature"})

FIELD_LIST_TYPES = frozenset({"static_final_declaration_list", "initialized_identifier_list"})

FIELD_TYPES = frozenset({"static_final_declaration", "initialized_identifier"})

NAME_TYPES = frozenset({"identifier", "type_identifier"})

MEMBER_SELECTOR_TYPES = frozenset({"unconditional_assignable_selector", "conditional_assignable_selector"})

SELECTOR_TYPES = frozenset({"selector", "argument_part", "index_selector"}) | MEMBER_SELECTOR_TYPES

# A literal or variable definition carrying one of these is a const context
CONST_CONTEXT_TYPES = frozenset({"list_literal", "set_or_map_literal", "record_literal", "initialized_variable_definition"})

SIGNATURE_KEYWORDS = frozenset({"const", "factory", "external", "augment"})

PARAMETER_MODIFIERS = frozenset({"required", "final", "const", "covariant", "var", "late"})

_SUPERCLASS_RE = re.compile(r"\bextends\s+([\w$.]+)")

_parser = None


def _dart_parser():
    global _parser
    if _parser is None:
        _parser = get_parser("dart")
    return _parser


def _find_child_by_type(node: Any, child_type: str) -> Any | None:
    """Find first child of given type."""
    if node is None:
        return None
    for child in node.children:
        if child.type == child_type:
            return child
    return None


def _find_first(node: Any, types: frozenset[str] | set[str]) -> Any | None:
    for child in node.children:
        if child.type in types:
            return child
    return None


def _has_token(node: Any, word: str) -> bool:
    """True if node has a direct child spelled ``word`` (keyword tokens and *_builtin nodes)."""
    for child in node.children:
        if child.type == word or child.type == f"{word}_builtin":
            return True
        if not child.is_named and child.text == word.encode():
            return True
    return False


def _first_error(node: Any) -> Any | None:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def _char_offsets(text: str, data: bytes) -> list[int] | None:
    """Byte offset -> code point offset table. None when the text is pure ASCII."""
    if len(data) == len(text):
        return None
    table = [0] * (len(data) + 1)
    position = 0
    for index, char in enumerate(text):
        width = len(char.encode("utf-8"))
        for step in range(width):
            table[position + step] = index
        position += width
    table[position] = len(text)
    return table


def _unquote(literal: str) -> str:
    literal = literal.lstrip("rR")
    for quote in ('"""', "'''", '"', "'"):
        if literal.startswith(quote) and literal.endswith(quote) and len(literal) >= 2 * len(quote):
            return literal[len(quote) : -len(quote)]
    return literal


class DartParser:
    """Build a colormigrate syntax tree from a tree-sitter Dart parse."""

    def __init__(self, text: str, path: Path | None = None):
        self.text = text
        self.path = path
        self.data = text.encode("utf-8")
        self._chars = _char_offsets(text, self.data)
        self.import_prefixes: set[str] = set()

    def parse(self) -> SyntaxNode:
        tree = _dart_parser().parse(self.data)
        root = tree.root_node
        if root.has_error:
            raise self._syntax_error(root)

        unit = SyntaxNode(NodeKind.COMPILATION_UNIT, 0, len(self.text))
        for child in root.children:
            if child.type == "import_or_export":
                self._collect_prefix(child)
        self._declarations(unit, root.children, owner=None)
        return unit

    # -------------------------------------------------------------------------
    # Positions
    # -------------------------------------------------------------------------

    def _pos(self, byte_offset: int) -> int:
        if self._chars is None:
            return byte_offset
        return self._chars[byte_offset]

    def _span(self, start_node: Any, end_node: Any | None = None) -> tuple[int, int]:
        start = self._pos(start_node.start_byte)
        end = self._pos((start_node if end_node is None else end_node).end_byte)
        return start, end - start

    def _text(self, node: Any) -> str:
        return self.text[self._pos(node.start_byte) : self._pos(node.end_byte)]

    def _syntax_error(self, root: Any) -> DartParseError:
        node = _first_error(root)
        offset = self._pos(node.start_byte) if node is not None else 0
        if node is not None and node.is_missing:
            message = f"Missing '{node.type}'"
        elif node is not None and self._text(node).strip():
            snippet = self._text(node).strip().splitlines()[0][:40]
            message = f"Unexpected '{snippet}'"
        else:
            message = "Syntax error"
        line = self.text.count("\n", 0, offset) + 1
        column = offset - (self.text.rfind("\n", 0, offset) + 1) + 1
        return DartParseError(message, line=line, column=column, offset=offset)

    # -------------------------------------------------------------------------
    # Declarations
    # -------------------------------------------------------------------------

    def _declarations(self, parent: SyntaxNode, nodes: list[Any], owner: SyntaxNode | None) -> None:
        """Walk a program or class body: signatures are followed by their function_body sibling."""
        nodes = list(nodes)
        for index, ts in enumerate(nodes):
            kind = ts.type
            if kind in CLASS_TYPES:
                self._class(parent, ts)
            elif kind in DIRECTIVE_TYPES:
                self._directive(parent, ts)
            elif kind in MEMBER_TYPES:
                body = nodes[index + 1] if index + 1 < len(nodes) else None
                if body is not None and body.type != "function_body":
                    body = None
                self._member(parent, ts, body, owner)
            elif kind in FIELD_LIST_TYPES:
                modifiers = self._leading_modifiers(nodes, index)
                self._fields(parent, ts, is_static=False, is_const="const" in modifiers)
            elif kind == "enum_constant":
                self._scan(parent, ts, in_const=True)
            elif kind in ("initializers", "redirection"):
                last = parent.children[-1] if parent.children else None
                if last is not None and last.kind is NodeKind.CONSTRUCTOR:
                    self._scan(last, ts)
            elif kind in CLASS_BODY_TYPES:
                self._declarations(parent, ts.children, owner)

    def _leading_modifiers(self, nodes: list[Any], index: int) -> set[str]:
        """Keywords written before a top-level variable list (`const`, `final`, `late`...)."""
        words = set()
        for previous in reversed(nodes[:index]):
            if previous.type in (";", "}", "function_body") or previous.type in FIELD_LIST_TYPES:
                break
            if previous.type in CLASS_TYPES or previous.type in DIRECTIVE_TYPES:
                break
            words.add(previous.type.removesuffix("_builtin"))
        return words

    def _directive(self, parent: SyntaxNode, ts: Any) -> None:
        offset, length = self._span(ts)
        text = self._text(ts)
        if ts.type == "import_or_export":
            keyword = text.split()[0]
            literal = self._first_descendant(ts, "string_literal")
            uri = _unquote(self._text(literal)) if literal is not None else None
        elif ts.type == "library_name":
            keyword, uri = "library", None
        else:
            keyword, uri = "part", None
            if ts.type == "part_directive":
                literal = self._first_descendant(ts, "string_literal")
                uri = _unquote(self._text(literal)) if literal is not None else None
        parent.add(SyntaxNode(NodeKind.DIRECTIVE, offset, length, text=text, keyword=keyword, uri=uri))

    def _collect_prefix(self, ts: Any) -> None:
        """Remember `import '...' as prefix;` names so `prefix.Class.member` is recognised."""
        spec = self._first_descendant(ts, "import_specification")
        if spec is None:
            return
        children = spec.children
        for index, child in enumerate(children):
            if child.type == "as" and index + 1 < len(children):
                self.import_prefixes.add(self._text(children[index + 1]))

    def _first_descendant(self, ts: Any, node_type: str) -> Any | None:
        for child in ts.children:
            if child.type == node_type:
                return child
            found = self._first_descendant(child, node_type)
            if found is not None:
                return found
        return None

    def _class(self, parent: SyntaxNode, ts: Any) -> None:
        name_node = ts.child_by_field_name("name")
        if name_node is None:
            name_node = _find_first(ts, NAME_TYPES)
        superclass = None
        extends = _find_child_by_type(ts, "superclass")
        if extends is not None:
            match = _SUPERCLASS_RE.search(self._text(extends))
            if match:
                superclass = match.group(1).rsplit(".", 1)[-1]

        offset, length = self._span(ts)
        node = parent.add(
            SyntaxNode(
                NodeKind.CLASS,
                offset,
                length,
                name=self._text(name_node) if name_node is not None else None,
                keyword=CLASS_TYPES[ts.type],
                superclass=superclass,
            )
        )
        body = _find_first(ts, CLASS_BODY_TYPES)
        if body is not None:
            self._declarations(node, body.children, owner=node)

    def _member(self, parent: SyntaxNode, sig: Any, body: Any | None, owner: SyntaxNode | None) -> None:
        inner = sig if sig.type in FUNCTION_TYPES else _find_first(sig, CONSTRUCTOR_TYPES | FUNCTION_TYPES)
        if inner is None:
            field_list = _find_first(sig, FIELD_LIST_TYPES)
            if field_list is not None:
                self._fields(parent, field_list, is_static=_has_token(sig, "static"), is_const=_has_token(sig, "const"))
            else:
                self._scan(parent, sig)
            return

        name = self._signature_name(inner)
        is_constructor = inner.type in CONSTRUCTOR_TYPES
        if owner is not None and owner.keyword in ("class", "enum"):
            # `name(args)` without a return type is ambiguous in the grammar
            named_after_class = name == owner.name or name.startswith(f"{owner.name}.")
            if inner.type in ("constructor_signature", "function_signature"):
                is_constructor = named_after_class

        offset, length = self._span(sig, body)
        if is_constructor:
            head = self._text(inner).split("(", 1)[0].split()
            node = SyntaxNode(
                NodeKind.CONSTRUCTOR,
                offset,
                length,
                name=name,
                is_const=inner.type == "constant_constructor_signature" or "const" in head,
                is_factory=inner.type in ("factory_constructor_signature", "redirecting_factory_constructor_signature")
                or "factory" in head,
                has_body=body is not None,
            )
        elif owner is not None:
            node = SyntaxNode(
                NodeKind.METHOD,
                offset,
                length,
                name=name,
                is_static=_has_token(sig, "static"),
                is_getter=inner.type == "getter_signature",
                is_setter=inner.type == "setter_signature",
                has_body=body is not None,
            )
        else:
            node = SyntaxNode(NodeKind.FUNCTION, offset, length, name=name, has_body=body is not None)
        parent.add(node)

        self._parameters(node, inner)
        self._scan_children(node, [c for c in sig.children if c is not inner and c.type != "annotation"])
        if body is not None:
            self._scan(node, body)

    def _signature_name(self, inner: Any) -> str:
        if inner.type in CONSTRUCTOR_TYPES:
            head = self._text(inner).split("(", 1)[0].split("=", 1)[0]
            words = [w for w in head.split() if w not in SIGNATURE_KEYWORDS]
            return "".join(words)
        if inner.type == "operator_signature":
            return "".join(self._text(inner).split("(", 1)[0].split()[-2:])
        name_node = inner.child_by_field_name("name")
        if name_node is None:
            plist = _find_child_by_type(inner, "formal_parameter_list")
            for child in inner.children:
                if plist is not None and child.start_byte >= plist.start_byte:
                    break
                if child.type == "identifier":
                    name_node = child
        return self._text(name_node) if name_node is not None else ""

    def _fields(self, parent: SyntaxNode, field_list: Any, is_static: bool, is_const: bool) -> None:
        for entry in field_list.children:
            if entry.type not in FIELD_TYPES:
                continue
            name_node = _find_first(entry, NAME_TYPES)
            offset, length = self._span(entry)
            node = parent.add(
                SyntaxNode(
                    NodeKind.FIELD,
                    offset,
                    length,
                    name=self._text(name_node) if name_node is not None else None,
                    is_static=is_static,
                    is_const=is_const,
                )
            )
            self._scan_children(node, entry.children, in_const=is_const)

    # -------------------------------------------------------------------------
    # Parameters
    # -------------------------------------------------------------------------

    def _parameters(self, owner: SyntaxNode, signature: Any) -> None:
        plist = _find_child_by_type(signature, "formal_parameter_list")
        if plist is not None:
            self._parameter_list(owner, plist)

    def _parameter_list(self, owner: SyntaxNode, plist: Any) -> None:
        defaults = []
        for child in plist.children:
            if child.type == "formal_parameter":
                self._parameter(owner, child)
            elif child.type == "optional_formal_parameters":
                self._parameter_list(owner, child)
            elif child.type != "annotation":
                defaults.append(child)
        # default values must be constant
        self._scan_children(owner, defaults, in_const=True)

    def _parameter(self, owner: SyntaxNode, ts: Any) -> None:
        field_param = _find_first(ts, frozenset({"constructor_param", "super_formal_parameter"}))
        type_name = None
        if field_param is not None:
            names = [c for c in field_param.children if c.type in NAME_TYPES]
            name_node = names[-1] if names else None
        else:
            names = [c for c in ts.children if c.type == "identifier"]
            name_node = names[-1] if names else None
            if name_node is not None:
                words = [
                    w for w in self.text[self._pos(ts.start_byte) : self._pos(name_node.start_byte)].split()
                    if w not in PARAMETER_MODIFIERS and not w.startswith("@")
                ]
                type_name = " ".join(words) or None

        offset, length = self._span(ts)
        owner.add(
            SyntaxNode(
                NodeKind.PARAMETER,
                offset,
                length,
                text=self._text(ts),
                name=self._text(name_node) if name_node is not None else None,
                type_name=type_name,
            )
        )

    # -------------------------------------------------------------------------
    # Expressions
    # -------------------------------------------------------------------------

    def _scan(self, owner: SyntaxNode, ts: Any, in_const: bool = False) -> None:
        """Record references and calls under ts, attaching them to owner."""
        kind = ts.type
        if kind == "local_function_declaration":
            self._local_function(owner, ts, in_const)
            return
        if kind in ("const_object_expression", "new_expression"):
            in_const = in_const or kind == "const_object_expression"
            self._constructor_call(owner, ts, in_const)
        elif kind in CONST_CONTEXT_TYPES and _has_token(ts, "const"):
            in_const = True

        self._scan_children(owner, ts.children, in_const)

    def _scan_children(self, owner: SyntaxNode, children: list[Any], in_const: bool = False) -> None:
        """Scan sibling nodes; expression chains are flattened into siblings by the grammar."""
        index = 0
        while index < len(children):
            child = children[index]
            if child.type in NAME_TYPES and self._is_chain_head(children, index):
                index += self._chain(owner, children, index, in_const)
                continue
            self._scan(owner, child, in_const)
            index += 1

    def _is_chain_head(self, siblings: list[Any], index: int) -> bool:
        if index + 1 >= len(siblings) or siblings[index + 1].type not in SELECTOR_TYPES:
            return False
        return index == 0 or siblings[index - 1].type not in (".", "?.", "..", "?..")

    def _selector_member(self, selector: Any) -> Any | None:
        """The identifier of a `.member` selector, or None."""
        inner = selector
        if selector.type == "selector":
            inner = _find_child_by_type(selector, "unconditional_assignable_selector")
        elif selector.type != "unconditional_assignable_selector":
            return None
        if inner is None:
            return None
        return _find_first(inner, NAME_TYPES)

    @staticmethod
    def _is_call(selector: Any) -> bool:
        return selector.type == "argument_part" or _find_child_by_type(selector, "argument_part") is not None

    def _chain(self, owner: SyntaxNode, siblings: list[Any], index: int, in_const: bool) -> int:
        """Handle `head.sel.sel(...)...`; return how many siblings were consumed."""
        head = siblings[index]
        selectors = []
        for sibling in siblings[index + 1 :]:
            if sibling.type not in SELECTOR_TYPES:
                break
            selectors.append(sibling)

        head_name = self._text(head)
        members = [self._selector_member(s) for s in selectors[:2]]
        qualified = None
        rest = selectors
        if (
            head_name in self.import_prefixes
            and len(members) == 2
            and members[0] is not None
            and members[1] is not None
        ):
            qualified = (self._text(members[0]), self._text(members[1]), selectors[1])
            rest = selectors[2:]
        elif members[0] is not None:
            qualified = (head_name, self._text(members[0]), selectors[0])
            rest = selectors[1:]

        if qualified is not None:
            prefix, member, last = qualified
            offset, length = self._span(head, last)
            reference = SyntaxNode(
                NodeKind.QUALIFIED_NAME,
                offset,
                length,
                text=self.text[offset : offset + length],
                prefix=prefix,
                member=member,
                in_const=in_const,
            )
            if rest and self._is_call(rest[0]):
                call_offset, call_length = self._span(head, rest[0])
                invocation = owner.add(
                    SyntaxNode(
                        NodeKind.INVOCATION,
                        call_offset,
                        call_length,
                        text=self.text[call_offset : call_offset + call_length],
                        prefix=prefix,
                        member=member,
                        in_const=in_const,
                    )
                )
                invocation.add(reference)
            else:
                owner.add(reference)
        elif self._is_call(selectors[0]):
            offset, length = self._span(head, selectors[0])
            owner.add(
                SyntaxNode(
                    NodeKind.INVOCATION,
                    offset,
                    length,
                    text=self.text[offset : offset + length],
                    member=head_name,
                    in_const=in_const,
                )
            )

        for selector in selectors:
            self._scan(owner, selector, in_const)
        return 1 + len(selectors)

    def _constructor_call(self, owner: SyntaxNode, ts: Any, in_const: bool) -> None:
        """`const Type(...)`, `new Type.named(...)`: recorded like the equivalent bare call."""
        arguments = _find_child_by_type(ts, "arguments")
        type_node = _find_first(ts, NAME_TYPES)
        if arguments is None or type_node is None:
            return
        names = [c for c in ts.children if c.type in NAME_TYPES and c.start_byte < arguments.start_byte]
        if len(names) >= 2:
            prefix, member = self._text(names[-2]), self._text(names[-1])
        else:
            prefix, member = None, self._text(type_node)
        offset, length = self._span(ts)
        owner.add(
            SyntaxNode(
                NodeKind.INVOCATION,
                offset,
                length,
                text=self._text(ts),
                prefix=prefix,
                member=member,
                in_const=in_const,
            )
        )

    def _local_function(self, owner: SyntaxNode, ts: Any, in_const: bool) -> None:
        container = _find_child_by_type(ts, "lambda_expression")
        if container is None:
            container = ts
        signature = _find_child_by_type(container, "function_signature")
        body = _find_child_by_type(container, "function_body")
        if signature is None:
            self._scan_children(owner, ts.children, in_const)
            return

        offset, length = self._span(ts)
        node = owner.add(
            SyntaxNode(
                NodeKind.FUNCTION,
                offset,
                length,
                name=self._signature_name(signature),
                has_body=body is not None,
            )
        )
        self._parameters(node, signature)
        if body is not None:
            self._scan(node, body)


def parse_dart(text: str, path: Path | None = None) -> SourceUnit:
    """Parse Dart source into a SourceUnit. Raises DartParseError."""
    tree = DartParser(text, path).parse()
    return SourceUnit(path=path, text=text, tree=tree)
