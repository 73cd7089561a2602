"""Tests for reference resolution against a mapping."""

from colormigrate.mapping import ExtensionGroup, ExtensionMember, MappingTable, StrictMapping
from colormigrate.parsers import parse_dart
from colormigrate.profile import RewriteProfile
from colormigrate.refactor import ReferenceResolver, Resolution

SOURCE = """
Widget tile(BuildContext context) {
  return Row(children: [
    Box(color: AppColors.primaryBlue),
    Box(color: AppColors.blue50),
    Box(color: AppColors.transparent),
    Box(color: AppColors.legacyGrey),
    Box(color: Colors.red),
  ]);
}
"""


def test_classification_in_source_order(mapping, profile):
    refs = ReferenceResolver(mapping, profile).resolve(parse_dart(SOURCE))

    assert [r.qualified_name for r in refs] == [
        "AppColors.primaryBlue",
        "AppColors.blue50",
        "AppColors.transparent",
        "AppColors.legacyGrey",
    ]
    assert [r.resolution for r in refs] == [
        Resolution.STRICT,
        Resolution.EXTENSION,
        Resolution.PRESERVED,
        Resolution.UNMAPPED,
    ]
    assert refs[0].target == "colorScheme.primary"
    assert (refs[1].group, refs[1].target) == ("AppExtraColors", "blue50")


def test_reference_spans_match_text(mapping, profile):
    unit = parse_dart(SOURCE)
    for ref in ReferenceResolver(mapping, profile).resolve(unit):
        assert unit.text[ref.offset : ref.offset + ref.length] == ref.text == ref.qualified_name


def test_strict_wins_over_extension():
    """A name in both partitions always resolves strict."""
    table = MappingTable(
        strict={"AppColors.a": StrictMapping(target="colorScheme.primary")},
        extensions={"Extra": ExtensionGroup("Extra", {"AppColors.a": ExtensionMember("a")})},
    )
    refs = ReferenceResolver(table).resolve(parse_dart("final x = AppColors.a;\n"))
    assert refs[0].resolution is Resolution.STRICT
    assert refs[0].group is None


def test_first_group_wins_and_conflict_is_logged_once(caplog_loguru):
    table = MappingTable(
        extensions={
            "First": ExtensionGroup("First", {"AppColors.a": ExtensionMember("one")}),
            "Second": ExtensionGroup("Second", {"AppColors.a": ExtensionMember("two")}),
        }
    )
    resolver = ReferenceResolver(table)
    refs = resolver.resolve(parse_dart("final x = AppColors.a;\nfinal y = AppColors.a;\n"))

    assert [(r.group, r.target) for r in refs] == [("First", "one"), ("First", "one")]
    conflicts = [m for m in caplog_loguru if "several extension groups" in m]
    assert len(conflicts) == 1


def test_only_configured_namespaces():
    profile = RewriteProfile(namespaces=("Brand",))
    table = MappingTable(strict={"Brand.ink": StrictMapping(target="colorScheme.onSurface")})
    refs = ReferenceResolver(table, profile).resolve(
        parse_dart("final a = Brand.ink;\nfinal b = AppColors.ink;\n")
    )
    assert [r.qualified_name for r in refs] == ["Brand.ink"]
