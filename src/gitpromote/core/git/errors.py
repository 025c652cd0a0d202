"""Translation boundary between git subprocess failures and gitpromote errors.

Everything raised inside :func:`git_operation` leaves it as either an
``InvalidArgumentError`` or a ``GitOperationError``; every
``GitOperationError`` is logged at ERROR before it propagates.
"""
from __future__ import annotations

import logging
import subprocess
from contextlib import contextmanager
from typing import Any, Iterator

from gitpromote.core.exceptions import GitOperationError, InvalidArgumentError

logger = logging.getLogger(__name__)


def _stderr_of(exc: BaseException) -> str:
    stderr = getattr(exc, "stderr", None)
    if isinstance(stderr, bytes):
        stderr = stderr.decode("utf-8", errors="replace")
    return (stderr or "").strip()


def fail(error: GitOperationError) -> GitOperationError:
    """Log ``error`` at ERROR and return it for raising."""
    logger.error("%s [%s]", error, ", ".join(f"{k}={v}" for k, v in sorted(error.context.items())))
    return error


@contextmanager
def git_operation(operation: str, message: str, **context: Any) -> Iterator[None]:
    """Run a block of git calls, translating any failure into ``GitOperationError``.

    Args:
        operation: Short operation name stored on the error (``clone``, ``merge``...)
        message: Human-readable error message
        **context: Extra diagnostic context (never secrets)
    """
    try:
        yield
    except (InvalidArgumentError, GitOperationError):
        raise
    except subprocess.CalledProcessError as exc:
        ctx = dict(context)
        ctx["returncode"] = exc.returncode
        stderr = _stderr_of(exc)
        if stderr:
            ctx["stderr"] = stderr
        raise fail(GitOperationError(message, operation=operation, cause=exc, context=ctx)) from exc
    except subprocess.TimeoutExpired as exc:
        ctx = dict(context)
        ctx["timeout"] = exc.timeout
        raise fail(GitOperationError(f"{message} (timed out)", operation=operation, cause=exc, context=ctx)) from exc
    except Exception as exc:
        raise fail(GitOperationError(message, operation=operation, cause=exc, context=context)) from exc


__all__ = ["git_operation", "fail"]
