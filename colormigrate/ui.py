"""Rich console output for colormigrate commands.

Every command prints through the one ``console`` defined here, so that the
theme below applies everywhere and tests can capture all output from
stdout.

Usage:
    from colormigrate.ui import console, print_plan, print_status_panel

    print_plan(run, show_diff=False)
    print_status_panel("DRY RUN", "3 change(s) planned", "Re-run with --apply.")
"""

import sys

from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from rich.theme import Theme

from colormigrate.refactor import RefactorRun, ValidationIssue, generate_unified_diff
from colormigrate.utils.helpers import normalize_relative_path

COLORMIGRATE_THEME = Theme({
    "info": "bold cyan",
    "warning": "bold yellow",
    "error": "bold red",
    "success": "bold green",
    "old": "red",
    "new": "green",
    "cmd": "bold magenta",
    "path": "bold cyan",
    "dim": "dim white",
})

# Panel level -> (text style, border style)
PANEL_STYLES = {
    "error": ("bold red", "red"),
    "warning": ("bold yellow", "yellow"),
    "success": ("bold green", "green"),
    "info": ("bold cyan", "cyan"),
}

console = Console(
    theme=COLORMIGRATE_THEME,
    force_terminal=sys.stdout.isatty()
)


def print_header(title: str) -> None:
    console.rule(f"[bold]{title}[/bold]")


def print_error(msg: str) -> None:
    console.print(f"[error]ERROR:[/error] {msg}", highlight=False)


def print_warning(msg: str) -> None:
    console.print(f"[warning]WARNING:[/warning] {msg}", highlight=False)


def print_success(msg: str) -> None:
    console.print(f"[success]OK:[/success] {msg}", highlight=False)


def print_status_panel(status: str, message: str, detail: str, level: str = "info") -> None:
    """Boxed end-of-command status.

    Args:
        status: Short label, e.g. "BLOCKED" or "APPLIED"
        message: What happened
        detail: What to do next
        level: "error", "warning", "success" or "info"
    """
    text_style, border_style = PANEL_STYLES.get(level, ("white", "white"))
    panel = Panel(
        Text.assemble(
            (f"STATUS: [{status}]\n", text_style),
            (f"{message}\n", border_style),
            (detail, border_style)
        ),
        border_style=border_style,
        expand=False
    )
    console.print(panel)


def print_plan(run: RefactorRun, show_diff: bool = False) -> None:
    """Per-file change list (or unified diff) for a planned or applied run."""
    root = run.project_root
    print_header("REFACTOR PLAN")
    console.print(f"Files scanned:  {run.files_scanned}")
    console.print(f"Files modified: {run.modified_file_count}")
    console.print(f"Total changes:  {run.total_change_count}")

    for result in run.file_results:
        rel = normalize_relative_path(result.path, root)
        console.print(f"\n[path]{rel}[/path] [dim]({result.change_count} changes)[/dim]", highlight=False)
        if show_diff:
            console.print(generate_unified_diff(result, label=rel), markup=False, highlight=False)
            continue
        for t in sorted(result.transformations, key=lambda t: t.offset):
            availability = t.availability.value if t.availability else "unknown"
            console.print(
                f"  line {t.line}: [old]{t.old_text}[/old] -> [new]{t.new_text}[/new] "
                f"[dim]({availability})[/dim]",
                highlight=False,
            )

    if run.failures:
        console.print()
        for failure in run.failures:
            rel = normalize_relative_path(failure.path, root)
            print_warning(f"{rel}: {failure.stage} failed: {failure.message}")

    print_unmapped(run)


# Unmapped severity -> theme style
UNMAPPED_STYLES = {"critical": "error", "warning": "warning", "info": "info"}


def print_unmapped(run: RefactorRun, info_limit: int = 5) -> None:
    """Constants the mapping does not cover, most used first."""
    if not run.unmapped:
        return
    root = run.project_root
    print_header("UNMAPPED CONSTANTS")
    console.print(f"Total: {len(run.unmapped)}")
    shown_info = 0
    for constant in run.unmapped:
        severity = constant.severity.value
        if severity == "info":
            shown_info += 1
            if shown_info > info_limit:
                continue
        style = UNMAPPED_STYLES[severity]
        first = constant.usages[0]
        console.print(
            f"  [{style}]{severity.upper():<8}[/{style}] {constant.name} "
            f"[dim](used {constant.usage_count} time(s), first at "
            f"{normalize_relative_path(first.path, root)}:{first.line})[/dim]",
            highlight=False,
        )
    if shown_info > info_limit:
        console.print(f"  [dim]... and {shown_info - info_limit} more[/dim]")
    if any(c.severity.value == "critical" for c in run.unmapped):
        console.print("[warning]Add mappings for critical constants before migrating[/warning]")


def _print_issue(issue: ValidationIssue, run: RefactorRun, printer) -> None:
    printer(f"{normalize_relative_path(issue.location(), run.project_root)}: {issue.message}")
    if issue.suggestion:
        console.print(f"    [dim]{issue.suggestion}[/dim]", highlight=False)


def print_validation(run: RefactorRun) -> None:
    report = run.validation
    if report is None:
        return
    print_header("VALIDATION")
    if not report.errors and not report.warnings:
        console.print("[success]No issues found[/success]")
        return
    for issue in report.errors:
        _print_issue(issue, run, print_error)
    for issue in report.warnings:
        _print_issue(issue, run, print_warning)
