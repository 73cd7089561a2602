"""Custom exceptions for colormigrate.

Per-file problems (parse errors, unreadable files, conflicting edits) are
raised inside a file's envelope and converted to result records there.
Exceptions that escape to the caller mean the whole run could not proceed.
"""


class ColorMigrateError(Exception):
    """Base class for every error raised by colormigrate."""

    pass


class DartParseError(ColorMigrateError):
    """Raised when Dart source cannot be tokenized or structurally parsed.

    Attributes:
        line: 1-based line of the offending token
        column: 1-based column of the offending token
        offset: Character offset into the source text
    """

    def __init__(self, message: str, line: int = 0, column: int = 0, offset: int = 0):
        location = f"{line}:{column}: " if line else ""
        super().__init__(f"{location}{message}")
        self.reason = message
        self.line = line
        self.column = column
        self.offset = offset


class MappingError(ColorMigrateError):
    """Raised when a mapping document is missing or structurally invalid."""

    pass


class TransformationConflictError(ColorMigrateError):
    """Raised when edits overlap or no longer match the text they replace."""

    pass


class ValidationBlockedError(ColorMigrateError):
    """Raised when an apply run is refused because the plan has validation errors.

    Attributes:
        run: The planned (unwritten) RefactorRun, with its validation report
    """

    def __init__(self, message: str, run=None):
        super().__init__(message)
        self.run = run


class BackupError(ColorMigrateError):
    """Raised when a backup cannot be created, read or restored."""

    pass


class BackupNotFoundError(BackupError):
    """Raised when a backup id has no directory under the backup root."""

    pass


class SecurityError(ColorMigrateError):
    """Raised when a path would escape the directory it is confined to."""

    pass
