"""Value types handed out by :class:`~gitpromote.core.git.service.GitService`."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .repository import GitRepository

REMOTES_PREFIX = "refs/remotes/"


@dataclass(frozen=True)
class Branch:
    """A remote branch resolved to the commit it pointed at.

    Attributes:
        name: Remote-tracking short name, e.g. ``origin/release-1``
        commit_id: Full commit hash of the ref at resolution time
        ref: Full refname, e.g. ``refs/remotes/origin/release-1``
    """

    name: str
    commit_id: str
    ref: str = ""


@dataclass(frozen=True)
class RemoteRef:
    """One line of ``git for-each-ref refs/remotes``."""

    refname: str
    commit_id: str
    symref: str = ""

    @property
    def short_name(self) -> str:
        if self.refname.startswith(REMOTES_PREFIX):
            return self.refname[len(REMOTES_PREFIX):]
        return self.refname

    def split_remote(self, remotes: tuple[str, ...]) -> tuple[str, str] | None:
        """Return ``(remote, branch)`` for the longest matching remote name."""
        short = self.short_name
        for remote in sorted(remotes, key=len, reverse=True):
            prefix = f"{remote}/"
            if short.startswith(prefix) and len(short) > len(prefix):
                return remote, short[len(prefix):]
        return None


@dataclass(frozen=True)
class GitSession:
    """A cloned repository bound to its working directory and remote name.

    Only ``GitService.clone`` creates sessions, fully populated. Close the
    session (or use it as a context manager) to release the repository handle.
    """

    repository: GitRepository
    workdir: Path
    remote: str = "origin"

    @property
    def closed(self) -> bool:
        return self.repository.closed

    def close(self) -> None:
        self.repository.close()

    def __enter__(self) -> "GitSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["Branch", "RemoteRef", "GitSession", "REMOTES_PREFIX"]
