"""Domain-specific configuration for operation timeouts.

``git_operations_seconds`` defaults to null: git calls block until they
complete. Set a number to bound every git invocation.
"""
from __future__ import annotations

from functools import cached_property
from typing import Optional

from ..base import BaseDomainConfig

_DEFAULT_SECONDS = 300.0


class TimeoutsConfig(BaseDomainConfig):
    """Domain-specific configuration accessor for operation timeouts."""

    def _config_section(self) -> str:
        return "timeouts"

    @cached_property
    def git_operations_seconds(self) -> Optional[float]:
        """Get timeout for git operations in seconds (None = unlimited)."""
        raw = self.section.get("git_operations_seconds")
        return None if raw is None else float(raw)

    @cached_property
    def default_seconds(self) -> float:
        """Get default timeout in seconds."""
        raw = self.section.get("default_seconds")
        return _DEFAULT_SECONDS if raw is None else float(raw)


__all__ = ["TimeoutsConfig"]
