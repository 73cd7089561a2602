"""Centralized exit codes for the colormigrate CLI."""


class ExitCodes:
    """Standard exit codes for colormigrate CLI commands."""

    SUCCESS = 0

    VALIDATION_ERRORS = 1
    APPLY_BLOCKED = 2

    TASK_INCOMPLETE = 3

    INTEGRITY_FAILURE = 4

    @classmethod
    def get_description(cls, code: int) -> str:
        """Get human-readable description for an exit code."""
        descriptions = {
            cls.SUCCESS: "Success",
            cls.VALIDATION_ERRORS: "Rewritten code has validation errors",
            cls.APPLY_BLOCKED: "Apply refused - validation errors must be reviewed first",
            cls.TASK_INCOMPLETE: "Task could not be completed due to missing prerequisites",
            cls.INTEGRITY_FAILURE: "Backup is missing files or has hash mismatches",
        }
        return descriptions.get(code, f"Unknown exit code: {code}")
