"""Tests for the tree-sitter backed Dart syntax tree."""

import pytest

from colormigrate.exceptions import DartParseError
from colormigrate.parsers import parse_dart
from colormigrate.syntax import NodeKind

from dart_samples import BADGE_DART, SETTINGS_DART


def _first(unit, kind, name=None):
    for node in unit.tree.find_all(kind):
        if name is None or node.name == name:
            return node
    raise AssertionError(f"no {kind} named {name}")


class TestStructure:
    def test_directives(self):
        unit = parse_dart(BADGE_DART)
        directive = _first(unit, NodeKind.DIRECTIVE)
        assert directive.keyword == "import"
        assert directive.uri == "package:flutter/material.dart"

    def test_class_superclass_and_members(self):
        unit = parse_dart(BADGE_DART)
        badge = _first(unit, NodeKind.CLASS, "Badge")
        assert badge.superclass == "StatelessWidget"

        ctor = _first(unit, NodeKind.CONSTRUCTOR, "Badge")
        assert ctor.is_const
        assert not ctor.has_body

        build = _first(unit, NodeKind.METHOD, "build")
        assert build.has_body
        assert [(p.name, p.type_name) for p in build.parameters] == [("context", "BuildContext")]

    def test_generic_superclass_keeps_simple_name(self):
        unit = parse_dart(SETTINGS_DART)
        state = _first(unit, NodeKind.CLASS, "_SettingsPageState")
        assert state.superclass == "State"
        create = _first(unit, NodeKind.METHOD, "createState")
        assert create.has_body

    def test_annotation_does_not_swallow_declaration(self):
        unit = parse_dart("class A {\n  @override\n  @Deprecated('x')\n  String toString() => 'A';\n}\n")
        method = _first(unit, NodeKind.METHOD, "toString")
        assert method.parent.name == "A"

    def test_static_method_and_named_constructor(self):
        source = """
class Palette {
  Palette.dark(this.seed);
  final int seed;
  static Color accent() { return AppColors.primaryBlue; }
  Color get tint => AppColors.blue50;
}
"""
        unit = parse_dart(source)
        ctor = _first(unit, NodeKind.CONSTRUCTOR)
        assert ctor.name == "Palette.dark"
        assert ctor.parameters[0].name == "seed"
        assert ctor.parameters[0].type_name is None

        accent = _first(unit, NodeKind.METHOD, "accent")
        assert accent.is_static

        tint = _first(unit, NodeKind.METHOD, "tint")
        assert tint.is_getter

        field = _first(unit, NodeKind.FIELD, "seed")
        assert not field.is_static

    def test_const_constructor_initializer_references(self):
        source = """
class Tint {
  final Color color;
  const Tint() : color = AppColors.primaryBlue;
}
"""
        unit = parse_dart(source)
        ref = _first(unit, NodeKind.QUALIFIED_NAME)
        assert ref.parent.kind is NodeKind.CONSTRUCTOR
        assert ref.parent.is_const

    def test_named_and_optional_parameters(self):
        unit = parse_dart("void paint(Canvas canvas, {required BuildContext? context, int depth = 2}) {}\n")
        function = _first(unit, NodeKind.FUNCTION, "paint")
        assert [p.name for p in function.parameters] == ["canvas", "context", "depth"]
        assert function.parameters[1].type_name == "BuildContext?"

    def test_local_function_is_lifted(self):
        source = "void main() {\n  Color pick() => AppColors.primaryBlue;\n  print(pick());\n}\n"
        unit = parse_dart(source)
        pick = _first(unit, NodeKind.FUNCTION, "pick")
        assert pick.parent.name == "main"
        ref = _first(unit, NodeKind.QUALIFIED_NAME)
        assert ref.parent is pick


class TestReferences:
    def test_qualified_names_in_source_order(self):
        unit = parse_dart(BADGE_DART)
        refs = [
            (n.prefix, n.member)
            for n in unit.tree.find_all(NodeKind.QUALIFIED_NAME)
        ]
        assert refs == [("AppColors", "primaryBlue"), ("AppColors", "blue50")]

    def test_offsets_slice_the_source(self):
        unit = parse_dart(BADGE_DART)
        for node in unit.tree.find_all(NodeKind.QUALIFIED_NAME):
            assert unit.source_of(node) == f"{node.prefix}.{node.member}"

    def test_chained_selectors_only_record_the_head(self):
        unit = parse_dart("final c = AppColors.primaryBlue.withOpacity(0.5).value;\n")
        refs = unit.tree.find_all(NodeKind.QUALIFIED_NAME)
        assert len(refs) == 1
        assert refs[0].member == "primaryBlue"

    def test_reference_inside_interpolation(self):
        unit = parse_dart("String describe() => 'c=${AppColors.primaryBlue}';\n")
        ref = _first(unit, NodeKind.QUALIFIED_NAME)
        assert unit.source_of(ref) == "AppColors.primaryBlue"
        assert ref.parent.name == "describe"

    def test_references_in_strings_and_comments_are_ignored(self):
        unit = parse_dart("// AppColors.a\nString s() => 'AppColors.b';\n")
        assert unit.tree.find_all(NodeKind.QUALIFIED_NAME) == []

    def test_invocations(self):
        unit = parse_dart("Widget w(BuildContext context) => Box(color: Theme.of(context).colorScheme.primary);\n")
        calls = [(n.prefix, n.member) for n in unit.tree.find_all(NodeKind.INVOCATION)]
        assert ("Theme", "of") in calls
        assert (None, "Box") in calls

    def test_line_numbers(self):
        unit = parse_dart(BADGE_DART)
        ref = _first(unit, NodeKind.QUALIFIED_NAME)
        assert unit.line_of(ref.offset) == 9
        assert unit.column_of(ref.offset) == 14


class TestErrors:
    def test_unbalanced_brackets(self):
        with pytest.raises(DartParseError):
            parse_dart("class A {\n  void f() {\n}\n")

    def test_mismatched_brackets(self):
        with pytest.raises(DartParseError) as exc:
            parse_dart("void f() { g(]; }\n")
        assert exc.value.line == 1

    def test_class_without_body(self):
        with pytest.raises(DartParseError):
            parse_dart("class A extends B\n")

    def test_unterminated_string(self):
        with pytest.raises(DartParseError) as exc:
            parse_dart("var s = 'open;\n")
        assert exc.value.line >= 1


class TestInitializerLists:
    SOURCE = """
class A {
  final Map<String, int> m;
  final Color c;
  A(BuildContext context) : m = {}, c = AppColors.a;
  static Color s() => AppColors.b;
}
"""

    def test_map_literal_does_not_end_the_constructor(self):
        unit = parse_dart(self.SOURCE)
        ctor = _first(unit, NodeKind.CONSTRUCTOR, "A")
        assert not ctor.has_body
        assert [(p.name, p.type_name) for p in ctor.parameters] == [("context", "BuildContext")]

        refs = unit.tree.find_all(NodeKind.QUALIFIED_NAME)
        assert [(r.member, r.parent.kind) for r in refs] == [
            ("a", NodeKind.CONSTRUCTOR),
            ("b", NodeKind.METHOD),
        ]
        assert refs[1].parent.is_static


class TestPrefixedImports:
    SOURCE = """import 'package:app/colors.dart' as c;

Color pick() => c.AppColors.primaryBlue;
"""

    def test_prefix_is_part_of_the_reference(self):
        unit = parse_dart(self.SOURCE)
        ref = _first(unit, NodeKind.QUALIFIED_NAME)
        assert (ref.prefix, ref.member) == ("AppColors", "primaryBlue")
        assert unit.source_of(ref) == "c.AppColors.primaryBlue"

    def test_unprefixed_member_access_is_unchanged(self):
        unit = parse_dart("Color pick() => other.AppColors;\n")
        ref = _first(unit, NodeKind.QUALIFIED_NAME)
        assert (ref.prefix, ref.member) == ("other", "AppColors")


class TestConstExpressions:
    def test_const_constructor_call_marks_references(self):
        source = "Widget w(BuildContext context) => const Text('x', style: TextStyle(color: AppColors.a));\n"
        unit = parse_dart(source)
        ref = _first(unit, NodeKind.QUALIFIED_NAME)
        assert ref.in_const

    def test_const_local_variable_marks_references(self):
        source = "void f() {\n  const c = [AppColors.a];\n  final d = AppColors.b;\n}\n"
        unit = parse_dart(source)
        a, b = unit.tree.find_all(NodeKind.QUALIFIED_NAME)
        assert a.in_const
        assert not b.in_const

    def test_default_value_is_const(self):
        unit = parse_dart("void f({Color c = AppColors.a}) {}\n")
        ref = _first(unit, NodeKind.QUALIFIED_NAME)
        assert ref.in_const
        assert ref.parent.name == "f"


class TestOffsets:
    def test_non_ascii_text_before_reference(self):
        source = "// Farbe für Überschrift ✓\nfinal c = AppColors.primaryBlue;\n"
        unit = parse_dart(source)
        ref = _first(unit, NodeKind.QUALIFIED_NAME)
        assert unit.source_of(ref) == "AppColors.primaryBlue"
        assert unit.line_of(ref.offset) == 2
        assert unit.column_of(ref.offset) == 11
