"""Tests for post-rewrite validation."""

from pathlib import Path

from colormigrate.parsers import parse_dart
from colormigrate.profile import RewriteProfile
from colormigrate.refactor import (
    CodeRefactorer,
    FileRefactorResult,
    IssueSeverity,
    RefactorRun,
    RefactorValidator,
)

IMPORT = "import 'package:flutter/material.dart';\n\n"


def _plan(tmp_path, mapping, profile, cfg, name, source):
    path = tmp_path / name
    path.write_text(source, encoding="utf-8")
    return CodeRefactorer(tmp_path, mapping, profile=profile, cfg=cfg).refactor_project(files=[path])


def test_render_entry_is_clean(tmp_path, mapping, profile, cfg):
    source = IMPORT + (
        "class Tile extends StatelessWidget {\n"
        "  Widget build(BuildContext context) => Box(color: AppColors.primaryBlue);\n"
        "}\n"
    )
    run = _plan(tmp_path, mapping, profile, cfg, "tile.dart", source)
    assert run.total_change_count == 1
    assert run.validation.errors == []
    assert run.validation.warnings == []


def test_static_method_gives_one_warning(tmp_path, mapping, profile, cfg):
    source = IMPORT + (
        "class Palette {\n"
        "  static Color accent() {\n"
        "    return AppColors.primaryBlue;\n"
        "  }\n"
        "}\n"
    )
    run = _plan(tmp_path, mapping, profile, cfg, "palette.dart", source)

    assert run.validation.errors == []
    assert len(run.validation.warnings) == 1
    warning = run.validation.warnings[0]
    assert warning.severity is IssueSeverity.WARNING
    assert warning.file_path.name == "palette.dart"
    assert warning.line == 5
    assert "static method" in warning.message


def test_const_constructor_gives_one_error(tmp_path, mapping, profile, cfg):
    source = IMPORT + (
        "class Tint {\n"
        "  final Color c;\n"
        "  const Tint() : c = AppColors.errorRed;\n"
        "}\n"
    )
    run = _plan(tmp_path, mapping, profile, cfg, "tint.dart", source)

    assert run.validation.warnings == []
    assert len(run.validation.errors) == 1
    error = run.validation.errors[0]
    assert error.file_path.name == "tint.dart"
    assert error.line == 5
    assert "const constructor" in error.message
    assert not run.validation.is_valid


def test_missing_import_warns_with_suggestion(tmp_path, mapping, profile, cfg):
    source = "Widget w(BuildContext context) => Box(color: AppColors.primaryBlue);\n"
    run = _plan(tmp_path, mapping, profile, cfg, "w.dart", source)

    assert len(run.validation.warnings) == 1
    warning = run.validation.warnings[0]
    assert "Missing import" in warning.message
    assert warning.suggestion == "Add: import 'package:flutter/material.dart';"


def test_part_files_skip_import_check(tmp_path, mapping, profile, cfg):
    source = "part of 'app.dart';\n\nWidget w(BuildContext context) => Box(color: AppColors.primaryBlue);\n"
    run = _plan(tmp_path, mapping, profile, cfg, "w.dart", source)
    assert run.validation.warnings == []


def test_parse_failure_in_rewritten_text_is_an_error(tmp_path):
    result = FileRefactorResult(
        path=tmp_path / "bad.dart",
        original_text="",
        rewritten_text="void f() {\n",
        transformations=[object()],
    )
    run = RefactorRun(project_root=tmp_path, dry_run=True, file_results=[result])

    report = RefactorValidator().validate_changes(run)
    assert len(report.errors) == 1
    assert "parse errors" in report.errors[0].message


def test_bare_accessor_is_found():
    profile = RewriteProfile(handle_accessor="handle", accessor_imports=())
    validator = RefactorValidator(profile)

    unit = parse_dart("class C {\n  static Color s() => handle(context).scheme.primary;\n}\n", Path("c.dart"))
    calls = validator.find_accessor_calls(unit)
    assert len(calls) == 1
    assert calls[0].member == "handle"


def test_const_expression_in_build_warns(tmp_path, mapping, profile, cfg):
    source = IMPORT + (
        "class Tile extends StatelessWidget {\n"
        "  Widget build(BuildContext context) {\n"
        "    return const Text('x', style: TextStyle(color: AppColors.primaryBlue));\n"
        "  }\n"
        "}\n"
    )
    run = _plan(tmp_path, mapping, profile, cfg, "tile.dart", source)

    assert run.validation.errors == []
    assert len(run.validation.warnings) == 1
    warning = run.validation.warnings[0]
    assert warning.line == 5
    assert "inside a const expression" in warning.message
    assert warning.suggestion == "Remove the enclosing const keyword"
