"""Tests for diff and report rendering."""

import json

from colormigrate.refactor import (
    CodeRefactorer,
    generate_change_listing,
    generate_html_diff,
    generate_unified_diff,
    run_to_dict,
)


def _badge(run):
    return next(r for r in run.file_results if r.path.name == "badge.dart")


def test_unified_diff(dart_project, mapping, profile, cfg):
    run = CodeRefactorer(dart_project, mapping, profile=profile, cfg=cfg).refactor_project()
    diff = generate_unified_diff(_badge(run), label="lib/widgets/badge.dart")

    assert diff.startswith("--- a/lib/widgets/badge.dart\n+++ b/lib/widgets/badge.dart\n")
    assert "-      color: AppColors.primaryBlue," in diff
    assert "+      color: Theme.of(context).colorScheme.primary," in diff


def test_change_listing(dart_project, mapping, profile, cfg):
    run = CodeRefactorer(dart_project, mapping, profile=profile, cfg=cfg).refactor_project()
    listing = generate_change_listing(_badge(run), label="badge.dart")

    assert "@@ Changes: 2 @@" in listing
    assert "- AppColors.blue50" in listing
    assert "+ Theme.of(context).extension<AppExtraColors>()!.blue50" in listing
    assert "Map to AppExtraColors.blue50" in listing


def test_html_report_escapes(dart_project, mapping, profile, cfg, tmp_path):
    run = CodeRefactorer(dart_project, mapping, profile=profile, cfg=cfg).refactor_project()
    path = generate_html_diff(run, tmp_path / "out" / "report.html")

    html = path.read_text(encoding="utf-8")
    assert "<h3>lib/widgets/badge.dart</h3>" in html
    assert "extension&lt;AppExtraColors&gt;()!.blue50" in html
    assert "<strong>Total Changes:</strong> 3" in html


def test_run_to_dict_is_json(dart_project, mapping, profile, cfg):
    run = CodeRefactorer(dart_project, mapping, profile=profile, cfg=cfg).refactor_project()
    data = json.loads(json.dumps(run_to_dict(run)))

    assert data["summary"] == {
        "files_scanned": 3,
        "files_modified": 2,
        "total_changes": 3,
        "failures": 0,
        "unmapped_constants": 1,
    }
    assert data["unmapped"] == [
        {
            "name": "AppColors.legacyGrey",
            "usage_count": 1,
            "severity": "info",
            "locations": ["lib/dividers.dart:7"],
        }
    ]
    files = {f["path"]: f for f in data["files"]}
    change = files["lib/settings.dart"]["changes"][0]
    assert change["old_text"] == "AppColors.errorRed"
    assert change["kind"] == "strict"
    assert change["availability"] == "available"
    assert data["validation"]["is_valid"] is True


def test_no_changes_renders_nothing(tmp_path, mapping, profile, cfg):
    path = tmp_path / "plain.dart"
    path.write_text("void main() {}\n", encoding="utf-8")
    result = CodeRefactorer(tmp_path, mapping, profile=profile, cfg=cfg).refactor_file(path)
    assert generate_unified_diff(result) == ""
    assert generate_change_listing(result) == ""
