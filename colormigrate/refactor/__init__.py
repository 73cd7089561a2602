"""Reference resolution, context analysis, rewriting, backup and validation."""

from .backup import BackupManager
from .context import ContextAnalyzer
from .diff import generate_change_listing, generate_html_diff, generate_unified_diff, run_to_dict
from .engine import CodeRefactorer, apply_transformations, build_transformations, refactor
from .models import (
    BackupManifest,
    BackupVerification,
    ColorReference,
    ContextAvailability,
    FileFailure,
    FileRefactorResult,
    IssueSeverity,
    RefactorRun,
    Resolution,
    RestoreResult,
    Transformation,
    TransformationKind,
    UnmappedConstant,
    UnmappedSeverity,
    UnmappedUsage,
    ValidationIssue,
    ValidationReport,
)
from .resolver import ReferenceResolver
from .validator import RefactorValidator

__all__ = [
    "BackupManager",
    "BackupManifest",
    "BackupVerification",
    "CodeRefactorer",
    "ColorReference",
    "ContextAnalyzer",
    "ContextAvailability",
    "FileFailure",
    "FileRefactorResult",
    "IssueSeverity",
    "RefactorRun",
    "RefactorValidator",
    "ReferenceResolver",
    "Resolution",
    "RestoreResult",
    "Transformation",
    "TransformationKind",
    "UnmappedConstant",
    "UnmappedSeverity",
    "UnmappedUsage",
    "ValidationIssue",
    "ValidationReport",
    "apply_transformations",
    "build_transformations",
    "generate_change_listing",
    "generate_html_diff",
    "generate_unified_diff",
    "refactor",
    "run_to_dict",
]
