"""Result and record types shared by the refactor pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from colormigrate.syntax import SyntaxNode


class Resolution(Enum):
    """How a located constant reference is classified against the mapping."""

    STRICT = "strict"
    EXTENSION = "extension"
    PRESERVED = "preserved"
    UNMAPPED = "unmapped"


class ContextAvailability(Enum):
    """Whether the scope around a reference can supply the runtime handle."""

    AVAILABLE = "available"
    CAN_INJECT = "can_inject"
    REQUIRES_MANUAL = "requires_manual"
    UNAVAILABLE = "unavailable"


class TransformationKind(Enum):
    STRICT = "strict"
    EXTENSION = "extension"


class IssueSeverity(Enum):
    ERROR = "error"
    WARNING = "warning"


class UnmappedSeverity(Enum):
    """How urgently an unmapped constant needs a mapping, by usage count."""

    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"

    @classmethod
    def for_count(cls, count: int) -> "UnmappedSeverity":
        if count >= 10:
            return cls.CRITICAL
        if count >= 3:
            return cls.WARNING
        return cls.INFO


@dataclass
class ColorReference:
    """A located ``Namespace.member`` occurrence in one source file."""

    offset: int
    length: int
    text: str
    node: SyntaxNode = field(repr=False)
    prefix: str
    member: str
    resolution: Resolution = Resolution.UNMAPPED
    target: str | None = None
    group: str | None = None

    @property
    def qualified_name(self) -> str:
        return f"{self.prefix}.{self.member}"


@dataclass(frozen=True)
class Transformation:
    """One atomic text edit: replace ``old_text`` at [offset, offset+length)."""

    offset: int
    length: int
    old_text: str
    new_text: str
    kind: TransformationKind
    description: str
    line: int = 0
    availability: ContextAvailability | None = None

    @property
    def end(self) -> int:
        return self.offset + self.length


@dataclass(frozen=True)
class UnmappedUsage:
    """One occurrence of a namespace constant the mapping does not mention."""

    name: str
    path: Path
    line: int


@dataclass
class UnmappedConstant:
    name: str
    usages: list[UnmappedUsage] = field(default_factory=list)

    @property
    def usage_count(self) -> int:
        return len(self.usages)

    @property
    def severity(self) -> UnmappedSeverity:
        return UnmappedSeverity.for_count(self.usage_count)


def group_unmapped(usages: list[UnmappedUsage]) -> list[UnmappedConstant]:
    """One entry per constant, most used first."""
    by_name: dict[str, UnmappedConstant] = {}
    for usage in usages:
        by_name.setdefault(usage.name, UnmappedConstant(usage.name)).usages.append(usage)
    return sorted(by_name.values(), key=lambda c: (-c.usage_count, c.name))


@dataclass
class FileRefactorResult:
    path: Path
    original_text: str
    rewritten_text: str
    transformations: list[Transformation] = field(default_factory=list)
    encoding: str = "utf-8"
    unmapped: list[UnmappedUsage] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.transformations)

    @property
    def change_count(self) -> int:
        return len(self.transformations)


@dataclass(frozen=True)
class FileFailure:
    """A file that could not be processed. stage is read, parse, transform or write."""

    path: Path
    stage: str
    message: str


@dataclass
class ValidationIssue:
    file_path: Path
    message: str
    severity: IssueSeverity
    line: int | None = None
    suggestion: str | None = None

    def location(self) -> str:
        return f"{self.file_path}:{self.line}" if self.line else str(self.file_path)


@dataclass
class ValidationReport:
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add(self, issue: ValidationIssue) -> None:
        if issue.severity is IssueSeverity.ERROR:
            self.errors.append(issue)
        else:
            self.warnings.append(issue)


@dataclass(frozen=True)
class BackupManifest:
    """Persisted record of one snapshot: relative path -> sha256 of the copy."""

    id: str
    created_at: str
    file_hashes: dict[str, str]
    location: Path

    @property
    def file_count(self) -> int:
        return len(self.file_hashes)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.created_at,
            "fileCount": self.file_count,
            "location": str(self.location),
            "fileHashes": dict(self.file_hashes),
        }


@dataclass(frozen=True)
class BackupVerification:
    total: int
    verified: int
    missing: int
    corrupted: int

    @property
    def is_valid(self) -> bool:
        return self.missing == 0 and self.corrupted == 0


@dataclass
class RestoreResult:
    backup_id: str
    restored: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    mismatched: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return not (self.missing or self.mismatched or self.failed)


@dataclass
class RefactorRun:
    """Aggregate of one refactor pass over a project."""

    project_root: Path
    dry_run: bool
    file_results: list[FileRefactorResult] = field(default_factory=list)
    failures: list[FileFailure] = field(default_factory=list)
    files_scanned: int = 0
    backup: BackupManifest | None = None
    validation: ValidationReport | None = None
    cancelled: bool = False
    unmapped: list[UnmappedConstant] = field(default_factory=list)

    @property
    def modified_file_count(self) -> int:
        return sum(1 for r in self.file_results if r.has_changes)

    @property
    def total_change_count(self) -> int:
        return sum(r.change_count for r in self.file_results)

    def transformations(self) -> list[Transformation]:
        return [t for r in self.file_results for t in r.transformations]
