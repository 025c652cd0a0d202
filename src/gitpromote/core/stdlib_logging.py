from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from gitpromote.core.config.domains.logging import DEFAULT_FORMAT

_CONFIGURED_TARGET: str | None = None
_GITPROMOTE_HANDLER: logging.Handler | None = None


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.INFO


def configure_stdlib_logging(
    *,
    level: str = "INFO",
    log_path: Optional[Path] = None,
    fmt: str = DEFAULT_FORMAT,
) -> logging.Handler:
    """Install one gitpromote handler on the root logger.

    Logs go to ``log_path`` when given, otherwise to stderr (stdout stays
    free for command output). Idempotent per target; switching targets
    replaces the previously installed handler.
    """
    global _CONFIGURED_TARGET, _GITPROMOTE_HANDLER

    target = str(Path(log_path).resolve()) if log_path is not None else "<stderr>"
    root = logging.getLogger()
    root.setLevel(_level_from_name(level))

    if _CONFIGURED_TARGET == target and _GITPROMOTE_HANDLER is not None:
        _GITPROMOTE_HANDLER.setLevel(_level_from_name(level))
        return _GITPROMOTE_HANDLER

    if _GITPROMOTE_HANDLER is not None:
        root.removeHandler(_GITPROMOTE_HANDLER)
        _GITPROMOTE_HANDLER.close()
        _GITPROMOTE_HANDLER = None

    handler: logging.Handler
    if log_path is not None:
        Path(target).parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(target, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(_level_from_name(level))
    handler.setFormatter(logging.Formatter(fmt))
    root.addHandler(handler)

    _GITPROMOTE_HANDLER = handler
    _CONFIGURED_TARGET = target
    return handler


def reset_stdlib_logging_for_tests() -> None:
    """Test-only: remove the handler installed by configure_stdlib_logging."""
    global _CONFIGURED_TARGET, _GITPROMOTE_HANDLER
    if _GITPROMOTE_HANDLER is not None:
        logging.getLogger().removeHandler(_GITPROMOTE_HANDLER)
        _GITPROMOTE_HANDLER.close()
    _CONFIGURED_TARGET = None
    _GITPROMOTE_HANDLER = None


__all__ = ["configure_stdlib_logging", "reset_stdlib_logging_for_tests"]
