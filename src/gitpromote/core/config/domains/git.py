"""Domain-specific configuration for the remote repository.

Holds the remote URL and the credentials used for clone and push. The
password is only ever read through this accessor and never logged.
"""
from __future__ import annotations

from functools import cached_property

from ..base import BaseDomainConfig


class GitConfig(BaseDomainConfig):
    """Accessor for the ``git`` section."""

    def _config_section(self) -> str:
        return "git"

    @cached_property
    def url(self) -> str:
        """Remote repository URL cloned by the service."""
        return str(self.section.get("url") or "").strip()

    @cached_property
    def username(self) -> str:
        return str(self.section.get("username") or "")

    @cached_property
    def password(self) -> str:
        return str(self.section.get("password") or "")

    @cached_property
    def remote(self) -> str:
        """Name given to the cloned remote (``origin`` by default)."""
        return str(self.section.get("remote") or "origin").strip()

    @cached_property
    def committer_name(self) -> str:
        committer = self.section.get("committer") or {}
        return str(committer.get("name") or "gitpromote")

    @cached_property
    def committer_email(self) -> str:
        committer = self.section.get("committer") or {}
        return str(committer.get("email") or "gitpromote@localhost")

    def __repr__(self) -> str:
        return f"GitConfig(url={self.url!r}, username={self.username!r}, remote={self.remote!r})"


__all__ = ["GitConfig"]
