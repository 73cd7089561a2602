"""Human-reviewable renderings of a refactor plan."""

import difflib
import html
from datetime import datetime
from pathlib import Path
from typing import Any

from colormigrate.refactor.models import FileRefactorResult, RefactorRun
from colormigrate.utils.helpers import normalize_relative_path


def generate_unified_diff(result: FileRefactorResult, label: str | None = None, context: int = 3) -> str:
    """Unified diff between a file's original and rewritten text."""
    if not result.has_changes:
        return ""
    name = label or str(result.path)
    return "".join(
        difflib.unified_diff(
            result.original_text.splitlines(keepends=True),
            result.rewritten_text.splitlines(keepends=True),
            fromfile=f"a/{name}",
            tofile=f"b/{name}",
            n=context,
        )
    )


def generate_change_listing(result: FileRefactorResult, label: str | None = None) -> str:
    """One ``- old / + new`` block per transformation."""
    if not result.has_changes:
        return ""
    name = label or str(result.path)
    lines = [f"--- {name}", f"+++ {name}", f"@@ Changes: {result.change_count} @@", ""]
    for t in sorted(result.transformations, key=lambda t: t.offset):
        lines.append(f"- {t.old_text}")
        lines.append(f"+ {t.new_text}")
        lines.append(f"  // line {t.line}: {t.description}")
        lines.append("")
    return "\n".join(lines)


HTML_STYLES = """
    body { font-family: -apple-system, 'Segoe UI', Arial, sans-serif; max-width: 1200px;
           margin: 40px auto; padding: 20px; background: #f5f5f5; }
    h1 { color: #1976D2; }
    .summary, .file-diff { background: white; padding: 20px; border-radius: 8px;
                           margin-bottom: 20px; box-shadow: 0 2px 4px rgba(0,0,0,0.1); }
    .change-count { color: #666; font-size: 14px; }
    .diff-block { margin: 15px 0; font-family: 'Courier New', monospace; font-size: 14px; }
    .old-code { background: #ffebee; color: #c62828; padding: 8px; border-left: 3px solid #c62828; }
    .new-code { background: #e8f5e9; color: #2e7d32; padding: 8px; border-left: 3px solid #2e7d32; }
    .description { color: #666; font-style: italic; padding: 4px 8px; font-size: 12px; }
    .issue-error { color: #c62828; }
    .issue-warning { color: #ef6c00; }
"""


def render_html_report(run: RefactorRun) -> str:
    root = run.project_root
    parts = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        '  <meta charset="utf-8">',
        "  <title>Refactoring Diff Report</title>",
        f"  <style>{HTML_STYLES}</style>",
        "</head>",
        "<body>",
        "  <h1>Refactoring Diff Report</h1>",
        '  <div class="summary">',
        "    <h2>Summary</h2>",
        f"    <p><strong>Mode:</strong> {'dry run' if run.dry_run else 'applied'}</p>",
        f"    <p><strong>Files Scanned:</strong> {run.files_scanned}</p>",
        f"    <p><strong>Files Modified:</strong> {run.modified_file_count}</p>",
        f"    <p><strong>Total Changes:</strong> {run.total_change_count}</p>",
        f"    <p><strong>Generated:</strong> {html.escape(datetime.now().isoformat(timespec='seconds'))}</p>",
    ]
    if run.backup is not None:
        parts.append(f"    <p><strong>Backup:</strong> {html.escape(run.backup.id)}</p>")
    if run.validation is not None:
        for issue in run.validation.errors + run.validation.warnings:
            css = f"issue-{issue.severity.value}"
            location = html.escape(normalize_relative_path(issue.location(), root))
            parts.append(f'    <p class="{css}">{location}: {html.escape(issue.message)}</p>')
    parts.append("  </div>")

    for result in run.file_results:
        if not result.has_changes:
            continue
        name = html.escape(normalize_relative_path(result.path, root))
        parts.append('  <div class="file-diff">')
        parts.append(f"    <h3>{name}</h3>")
        parts.append(f'    <p class="change-count">{result.change_count} changes</p>')
        for t in sorted(result.transformations, key=lambda t: t.offset):
            parts.append('    <div class="diff-block">')
            parts.append(f'      <div class="old-code">- {html.escape(t.old_text)}</div>')
            parts.append(f'      <div class="new-code">+ {html.escape(t.new_text)}</div>')
            parts.append(f'      <div class="description">line {t.line}: {html.escape(t.description)}</div>')
            parts.append("    </div>")
        parts.append("  </div>")

    parts.extend(["</body>", "</html>", ""])
    return "\n".join(parts)


def generate_html_diff(run: RefactorRun, output_path: str | Path) -> Path:
    """Write the HTML report for a run and return its path."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_html_report(run), encoding="utf-8")
    return output_path


def run_to_dict(run: RefactorRun) -> dict[str, Any]:
    """JSON-serialisable summary of a run, including every edit."""
    root = run.project_root

    def _rel(path) -> str:
        return normalize_relative_path(path, root)

    validation = None
    if run.validation is not None:
        validation = {
            "is_valid": run.validation.is_valid,
            "errors": [_issue_to_dict(i, _rel) for i in run.validation.errors],
            "warnings": [_issue_to_dict(i, _rel) for i in run.validation.warnings],
        }

    return {
        "project_root": str(root),
        "dry_run": run.dry_run,
        "cancelled": run.cancelled,
        "summary": {
            "files_scanned": run.files_scanned,
            "files_modified": run.modified_file_count,
            "total_changes": run.total_change_count,
            "failures": len(run.failures),
            "unmapped_constants": len(run.unmapped),
        },
        "backup_id": run.backup.id if run.backup is not None else None,
        "files": [
            {
                "path": _rel(result.path),
                "changes": [
                    {
                        "offset": t.offset,
                        "length": t.length,
                        "line": t.line,
                        "old_text": t.old_text,
                        "new_text": t.new_text,
                        "kind": t.kind.value,
                        "description": t.description,
                        "availability": t.availability.value if t.availability else None,
                    }
                    for t in sorted(result.transformations, key=lambda t: t.offset)
                ],
            }
            for result in run.file_results
        ],
        "failures": [
            {"path": _rel(f.path), "stage": f.stage, "message": f.message} for f in run.failures
        ],
        "unmapped": [
            {
                "name": constant.name,
                "usage_count": constant.usage_count,
                "severity": constant.severity.value,
                "locations": [f"{_rel(u.path)}:{u.line}" for u in constant.usages],
            }
            for constant in run.unmapped
        ],
        "validation": validation,
    }


def _issue_to_dict(issue, rel) -> dict[str, Any]:
    return {
        "file": rel(issue.file_path),
        "line": issue.line,
        "message": issue.message,
        "severity": issue.severity.value,
        "suggestion": issue.suggestion,
    }
