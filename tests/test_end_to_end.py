"""End-to-end rewrite with a non-Flutter profile."""

from colormigrate.mapping import MappingTable, StrictMapping
from colormigrate.profile import RewriteProfile
from colormigrate.refactor import CodeRefactorer, ContextAvailability, RefactorValidator

PROFILE = RewriteProfile(
    namespaces=("Palette",),
    handle_type="Handle",
    handle_name="context",
    handle_accessor="handle",
    render_method="widget",
    ui_base_marker="Component",
    accessor_imports=(),
)

MAPPING = MappingTable(strict={"Palette.primaryBlue": StrictMapping(target="scheme.primary")})

SOURCE = "class Card {\n  widget(context) { return Box(color: Palette.primaryBlue); }\n}\n"

EXPECTED = "class Card {\n  widget(context) { return Box(color: handle(context).scheme.primary); }\n}\n"


def test_render_entry_rewrite(tmp_path, cfg):
    path = tmp_path / "card.dart"
    path.write_text(SOURCE, encoding="utf-8")

    run = CodeRefactorer(tmp_path, MAPPING, profile=PROFILE, cfg=cfg).refactor_project(dry_run=False)

    assert path.read_text(encoding="utf-8") == EXPECTED
    edits = run.transformations()
    assert len(edits) == 1
    assert edits[0].old_text == "Palette.primaryBlue"
    assert edits[0].new_text == "handle(context).scheme.primary"
    assert edits[0].availability is ContextAvailability.AVAILABLE
    assert run.validation.errors == []
    assert run.validation.warnings == []
    assert run.backup is not None


def test_rewritten_accessor_is_revalidated(tmp_path, cfg):
    """The validator finds the bare accessor call in the new text and classifies it."""
    path = tmp_path / "card.dart"
    path.write_text(SOURCE.replace("widget(context)", "static paint()"), encoding="utf-8")

    run = CodeRefactorer(tmp_path, MAPPING, profile=PROFILE, cfg=cfg).refactor_project()

    assert run.transformations()[0].availability is ContextAvailability.REQUIRES_MANUAL
    assert len(run.validation.warnings) == 1
    assert run.validation.warnings[0].line == 2
    assert RefactorValidator(PROFILE).validate_changes(run).warnings[0].message.startswith(
        "Manual intervention required"
    )
