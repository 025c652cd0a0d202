"""Repository handle owned by a git session.

Every git invocation of a session goes through :class:`GitRepository`, which
pins the working directory, the committer identity and the timeout lookup.
Once closed the handle refuses further use.
"""
from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Mapping, Optional

from gitpromote.core.exceptions import GitOperationError
from gitpromote.core.utils.subprocess import run_git_command

from .errors import fail

logger = logging.getLogger(__name__)


class GitRepository:
    """Handle on one cloned working tree."""

    def __init__(
        self,
        workdir: Path,
        *,
        identity: Optional[Mapping[str, str]] = None,
        config_root: Optional[Path] = None,
    ) -> None:
        self._workdir = Path(workdir)
        self._identity = dict(identity or {})
        self._config_root = config_root
        self._closed = False

    @property
    def workdir(self) -> Path:
        return self._workdir

    @property
    def closed(self) -> bool:
        return self._closed

    def git(self, *args: str, env: Optional[Mapping[str, str]] = None) -> subprocess.CompletedProcess:
        """Run ``git <args>`` in the working tree; raises CalledProcessError on failure."""
        if self._closed:
            raise fail(
                GitOperationError(
                    "Repository handle is closed",
                    operation="session",
                    context={"workdir": str(self._workdir)},
                )
            )
        full_env = dict(os.environ if env is None else env)
        full_env.update(self._identity)
        return run_git_command(
            ["git", *args],
            cwd=self._workdir,
            env=full_env,
            capture_output=True,
            text=True,
            check=True,
            config_root=self._config_root,
        )

    def close(self) -> None:
        """Release the handle. Idempotent; the working tree stays on disk."""
        if not self._closed:
            logger.debug("Releasing repository handle for %s", self._workdir)
        self._closed = True

    def __enter__(self) -> "GitRepository":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"GitRepository({str(self._workdir)!r}, {state})"


def identity_env(name: str, email: str) -> dict[str, str]:
    """Environment that pins author and committer for commits made by the core."""
    return {
        "GIT_AUTHOR_NAME": name,
        "GIT_AUTHOR_EMAIL": email,
        "GIT_COMMITTER_NAME": name,
        "GIT_COMMITTER_EMAIL": email,
    }


__all__ = ["GitRepository", "identity_env"]
