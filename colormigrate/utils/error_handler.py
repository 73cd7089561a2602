"""Centralized error handler for colormigrate commands."""

import traceback
from collections.abc import Callable
from datetime import datetime
from functools import wraps
from typing import Any

import click

from colormigrate.exceptions import ColorMigrateError
from colormigrate.utils.logging import logger

from .constants import ERROR_LOG_FILE, STATE_DIR


def _append_error_log(command: str, error: Exception) -> str:
    """Write the traceback to the error log and return a hint for the user."""
    try:
        STATE_DIR.mkdir(parents=True, exist_ok=True)
        with open(ERROR_LOG_FILE, "a", encoding="utf-8") as f:
            f.write("\n" + "=" * 80 + "\n")
            f.write(f"[{datetime.now().isoformat()}] Error in command: {command}\n")
            f.write("=" * 80 + "\n")
            f.write(f"{type(error).__name__}: {error}\n\n")
            f.write(traceback.format_exc())
            f.write("=" * 80 + "\n\n")
    except OSError:
        return "Traceback could not be written to the error log"
    return f"Full traceback logged to: {ERROR_LOG_FILE}"


def handle_exceptions(func: Callable[..., Any]) -> Callable[..., Any]:
    """Turn uncaught exceptions in a click command into a ClickException.

    colormigrate's own errors (bad mapping, missing backup, refused path)
    are reported by message alone. Anything else is treated as a bug: the
    traceback is logged and appended to ``.colormigrate/error.log``.
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (click.ClickException, click.exceptions.Exit, click.Abort):
            raise
        except ColorMigrateError as e:
            logger.debug(f"Command '{func.__name__}' stopped: {type(e).__name__}: {e}")
            raise click.ClickException(str(e)) from e
        except Exception as e:
            logger.opt(exception=True).error(f"Command '{func.__name__}' failed: {e}")
            log_hint = _append_error_log(func.__name__, e)
            raise click.ClickException(f"{type(e).__name__}: {e}\n\n{log_hint}") from e

    return wrapper
