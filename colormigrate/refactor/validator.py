"""Post-rewrite validation of a refactor plan.

For every changed file the rewritten text is re-parsed, its imports are
checked for the module that defines the handle accessor, and each accessor
call in the new tree is re-classified by the context analyzer:

- UNAVAILABLE      -> error (the rewrite cannot compile there)
- REQUIRES_MANUAL  -> warning (someone has to thread the handle in)
- inside a const expression -> warning (the `const` has to go)
"""

from colormigrate.exceptions import DartParseError
from colormigrate.parsers import parse_dart
from colormigrate.profile import RewriteProfile
from colormigrate.refactor.context import ContextAnalyzer
from colormigrate.refactor.models import (
    ContextAvailability,
    FileRefactorResult,
    IssueSeverity,
    RefactorRun,
    ValidationIssue,
    ValidationReport,
)
from colormigrate.syntax import NodeKind, SourceUnit, SyntaxNode
from colormigrate.utils.logging import logger


class RefactorValidator:
    """Checks rewritten buffers before (or after) they are written."""

    def __init__(self, profile: RewriteProfile | None = None):
        self.profile = profile or RewriteProfile()
        self.context_analyzer = ContextAnalyzer(self.profile)

    def validate_changes(self, run: RefactorRun) -> ValidationReport:
        report = ValidationReport()
        for result in run.file_results:
            if not result.has_changes:
                continue
            for issue in self.validate_file(result):
                report.add(issue)

        logger.info(
            f"Validation: {len(report.errors)} error(s), {len(report.warnings)} warning(s) "
            f"across {run.modified_file_count} file(s)"
        )
        return report

    def validate_file(self, result: FileRefactorResult) -> list[ValidationIssue]:
        try:
            unit = parse_dart(result.rewritten_text, result.path)
        except DartParseError as e:
            return [
                ValidationIssue(
                    file_path=result.path,
                    line=e.line or None,
                    message=f"Modified code contains parse errors: {e.reason}",
                    severity=IssueSeverity.ERROR,
                    suggestion="Review the transformations for this file",
                )
            ]

        accessor_calls = self.find_accessor_calls(unit)
        issues = self.check_imports(result, unit, accessor_calls)
        issues.extend(self.check_context(result, unit, accessor_calls))
        return issues

    def find_accessor_calls(self, unit: SourceUnit) -> list[SyntaxNode]:
        prefix, member = self.profile.accessor_parts
        return [
            node
            for node in unit.tree.find_all(NodeKind.INVOCATION)
            if node.prefix == prefix and node.member == member
        ]

    def check_imports(
        self, result: FileRefactorResult, unit: SourceUnit, accessor_calls: list[SyntaxNode]
    ) -> list[ValidationIssue]:
        if not accessor_calls or not self.profile.accessor_imports:
            return []

        directives = unit.tree.find_all(NodeKind.DIRECTIVE)
        if any(d.keyword == "part" and d.text.split()[:2] == ["part", "of"] for d in directives):
            # Imports live in the owning library
            return []

        imported = {d.uri for d in directives if d.keyword == "import"}
        if imported.intersection(self.profile.accessor_imports):
            return []

        wanted = self.profile.accessor_imports[0]
        return [
            ValidationIssue(
                file_path=result.path,
                message=f"Missing import for {self.profile.handle_accessor}",
                severity=IssueSeverity.WARNING,
                suggestion=f"Add: import '{wanted}';",
            )
        ]

    def check_context(
        self, result: FileRefactorResult, unit: SourceUnit, accessor_calls: list[SyntaxNode]
    ) -> list[ValidationIssue]:
        issues = []
        handle = self.profile.handle_type
        for call in accessor_calls:
            availability = self.context_analyzer.analyze(call)
            if availability is ContextAvailability.UNAVAILABLE:
                reasons = self.context_analyzer.manual_intervention_reasons(call)
                issues.append(
                    ValidationIssue(
                        file_path=result.path,
                        line=unit.line_of(call.offset),
                        message=f"{handle} not available: {', '.join(reasons)}",
                        severity=IssueSeverity.ERROR,
                        suggestion="Consider a different approach or keep the original constant",
                    )
                )
            elif availability is ContextAvailability.REQUIRES_MANUAL:
                reasons = self.context_analyzer.manual_intervention_reasons(call)
                issues.append(
                    ValidationIssue(
                        file_path=result.path,
                        line=unit.line_of(call.offset),
                        message=f"Manual intervention required: {', '.join(reasons)}",
                        severity=IssueSeverity.WARNING,
                        suggestion=f"Add a {handle} parameter manually",
                    )
                )
            elif call.in_const:
                reasons = self.context_analyzer.manual_intervention_reasons(call)
                issues.append(
                    ValidationIssue(
                        file_path=result.path,
                        line=unit.line_of(call.offset),
                        message=f"Manual intervention required: {', '.join(reasons)}",
                        severity=IssueSeverity.WARNING,
                        suggestion="Remove the enclosing const keyword",
                    )
                )
        return issues
