"""Transformation engine and project driver.

A run plans every file first (read, parse, resolve, build edits, splice
into an in-memory buffer), validates the plan, and only in apply mode
snapshots the files about to change and writes the buffers back. Each
file is processed inside its own envelope: a failure becomes a
FileFailure record and the run moves on.
"""

from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from colormigrate.config_runtime import load_runtime_config
from colormigrate.discovery import discover_source_files
from colormigrate.exceptions import DartParseError, TransformationConflictError, ValidationBlockedError
from colormigrate.mapping.models import MappingTable
from colormigrate.parsers import parse_dart
from colormigrate.profile import RewriteProfile
from colormigrate.refactor.backup import BackupManager
from colormigrate.refactor.context import ContextAnalyzer
from colormigrate.refactor.models import (
    ColorReference,
    FileFailure,
    FileRefactorResult,
    RefactorRun,
    Resolution,
    Transformation,
    TransformationKind,
    UnmappedSeverity,
    UnmappedUsage,
    group_unmapped,
)
from colormigrate.refactor.resolver import ReferenceResolver
from colormigrate.refactor.validator import RefactorValidator
from colormigrate.syntax import SourceUnit
from colormigrate.utils.helpers import normalize_relative_path, read_text_with_fallback, write_text_atomic
from colormigrate.utils.logging import logger


def build_transformations(
    unit: SourceUnit,
    references: Iterable[ColorReference],
    profile: RewriteProfile,
    analyzer: ContextAnalyzer | None = None,
) -> list[Transformation]:
    """One edit per mapped reference. Context availability is recorded, never a gate."""
    analyzer = analyzer or ContextAnalyzer(profile)
    transformations = []

    for ref in references:
        if ref.resolution is Resolution.STRICT:
            new_text = profile.strict_expression(ref.target)
            kind = TransformationKind.STRICT
            description = f"Map to {ref.target}"
        elif ref.resolution is Resolution.EXTENSION:
            new_text = profile.extension_expression(ref.group, ref.target)
            kind = TransformationKind.EXTENSION
            description = f"Map to {ref.group}.{ref.target}"
        else:
            continue

        transformations.append(
            Transformation(
                offset=ref.offset,
                length=ref.length,
                old_text=ref.text,
                new_text=new_text,
                kind=kind,
                description=description,
                line=unit.line_of(ref.offset),
                availability=analyzer.analyze(ref.node),
            )
        )

    return transformations


def apply_transformations(text: str, transformations: Iterable[Transformation]) -> str:
    """Splice edits into text from the highest offset down.

    Raises TransformationConflictError if two edits overlap, or if an edit's
    old_text is not what the buffer holds at its offset.
    """
    ordered = sorted(transformations, key=lambda t: t.offset)

    for previous, current in zip(ordered, ordered[1:]):
        if current.offset < previous.end:
            raise TransformationConflictError(
                f"Overlapping edits at offsets {previous.offset}-{previous.end} "
                f"and {current.offset}-{current.end}"
            )

    for t in ordered:
        if t.offset < 0 or t.end > len(text) or text[t.offset : t.end] != t.old_text:
            raise TransformationConflictError(
                f"Edit at offset {t.offset} expected {t.old_text!r}, "
                f"found {text[t.offset : t.end]!r}"
            )

    result = text
    for t in reversed(ordered):
        result = result[: t.offset] + t.new_text + result[t.end :]
    return result


class CodeRefactorer:
    """Plans and applies a mapping over a project."""

    def __init__(
        self,
        project_root: str | Path,
        mapping: MappingTable,
        profile: RewriteProfile | None = None,
        cfg: dict[str, Any] | None = None,
        backup_manager: BackupManager | None = None,
        validator: RefactorValidator | None = None,
    ):
        self.project_root = Path(project_root).resolve()
        self.cfg = cfg if cfg is not None else load_runtime_config(self.project_root)
        self.mapping = mapping
        self.profile = profile or RewriteProfile.from_config(self.cfg)
        self.resolver = ReferenceResolver(mapping, self.profile)
        self.analyzer = ContextAnalyzer(self.profile)
        self.backup_manager = backup_manager or BackupManager(
            self.project_root, self.cfg["paths"]["backup_dir"]
        )
        self.validator = validator or RefactorValidator(self.profile)

    def _relative(self, path: Path) -> str:
        return normalize_relative_path(Path(path).resolve(), self.project_root)

    def refactor_source(self, text: str, path: Path | None = None) -> tuple[str, list[Transformation]]:
        """Rewrite one buffer. Raises DartParseError or TransformationConflictError."""
        rewritten, transformations, _ = self._plan_source(text, path)
        return rewritten, transformations

    def _plan_source(
        self, text: str, path: Path | None
    ) -> tuple[str, list[Transformation], list[UnmappedUsage]]:
        unit = parse_dart(text, path)
        references = self.resolver.resolve(unit)
        unmapped = [
            UnmappedUsage(ref.qualified_name, path, unit.line_of(ref.offset))
            for ref in references
            if ref.resolution is Resolution.UNMAPPED
        ]
        transformations = build_transformations(unit, references, self.profile, self.analyzer)
        if not transformations:
            return text, [], unmapped
        return apply_transformations(text, transformations), transformations, unmapped

    def refactor_file(self, path: Path) -> FileRefactorResult | FileFailure:
        """Plan one file inside its failure envelope. Nothing is written."""
        try:
            original, encoding = read_text_with_fallback(path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Cannot read {path}: {e}")
            return FileFailure(path=path, stage="read", message=str(e))

        try:
            rewritten, transformations, unmapped = self._plan_source(original, path)
        except DartParseError as e:
            logger.warning(f"Parse error in {path}: {e}")
            return FileFailure(path=path, stage="parse", message=str(e))
        except TransformationConflictError as e:
            logger.warning(f"Conflicting edits in {path}: {e}")
            return FileFailure(path=path, stage="transform", message=str(e))

        return FileRefactorResult(
            path=path,
            original_text=original,
            rewritten_text=rewritten,
            transformations=transformations,
            encoding=encoding,
            unmapped=unmapped,
        )

    def refactor_project(
        self,
        files: Iterable[str | Path] | None = None,
        dry_run: bool = True,
        force: bool = False,
        cancel: Callable[[], bool] | None = None,
    ) -> RefactorRun:
        """Plan, validate and (unless dry_run) back up and write the project.

        Raises ValidationBlockedError in apply mode when validation finds
        errors and force is not set; nothing has been written at that point.
        Raises BackupError if the snapshot cannot be taken.
        """
        if files is None:
            paths = discover_source_files(self.project_root, self.cfg)
        else:
            paths = [p if p.is_absolute() else self.project_root / p for p in map(Path, files)]
        run = RefactorRun(project_root=self.project_root, dry_run=dry_run)
        logger.info(f"{'Previewing' if dry_run else 'Applying'} refactoring over {len(paths)} file(s)")

        unmapped = []
        for path in paths:
            if cancel is not None and cancel():
                logger.warning("Run cancelled; no further files scheduled")
                run.cancelled = True
                break

            run.files_scanned += 1
            outcome = self.refactor_file(path)
            if isinstance(outcome, FileFailure):
                run.failures.append(outcome)
                continue
            unmapped.extend(outcome.unmapped)
            if outcome.has_changes:
                run.file_results.append(outcome)
                logger.info(f"  {self._relative(path)}: {outcome.change_count} change(s)")

        run.unmapped = group_unmapped(unmapped)
        critical = [c.name for c in run.unmapped if c.severity is UnmappedSeverity.CRITICAL]
        if critical:
            logger.warning(f"Heavily used constants with no mapping: {', '.join(critical)}")

        run.validation = self.validator.validate_changes(run)

        if dry_run or run.cancelled or not run.file_results:
            return run

        if not run.validation.is_valid and not force:
            raise ValidationBlockedError(
                f"Refusing to apply: validation found {len(run.validation.errors)} error(s). "
                "Review the dry-run output or pass force to write anyway.",
                run=run,
            )

        run.backup = self.backup_manager.create_backup([r.path for r in run.file_results])
        self._write_results(run, cancel)
        return run

    def _write_results(self, run: RefactorRun, cancel: Callable[[], bool] | None) -> None:
        written = []
        for result in run.file_results:
            if cancel is not None and cancel():
                logger.warning(
                    f"Run cancelled after writing {len(written)} file(s); "
                    f"restore with backup {run.backup.id} if needed"
                )
                run.cancelled = True
                break
            try:
                write_text_atomic(result.path, result.rewritten_text, result.encoding)
            except OSError as e:
                logger.error(f"Failed to write {result.path}: {e}")
                run.failures.append(FileFailure(path=result.path, stage="write", message=str(e)))
                continue
            written.append(result)

        run.file_results = written
        logger.info(
            f"Wrote {len(written)} file(s), {run.total_change_count} change(s); backup {run.backup.id}"
        )


def refactor(
    project_root: str | Path,
    mapping: MappingTable,
    dry_run: bool = True,
    *,
    profile: RewriteProfile | None = None,
    cfg: dict[str, Any] | None = None,
    files: Iterable[str | Path] | None = None,
    force: bool = False,
    cancel: Callable[[], bool] | None = None,
) -> RefactorRun:
    """Run a mapping over a project. See CodeRefactorer.refactor_project."""
    refactorer = CodeRefactorer(project_root, mapping, profile=profile, cfg=cfg)
    return refactorer.refactor_project(files=files, dry_run=dry_run, force=force, cancel=cancel)
