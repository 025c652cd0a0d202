"""Domain-specific configuration for the promotion workflow defaults.

These values are only fallbacks for the CLI; the service itself takes
branch names and paths as arguments.
"""
from __future__ import annotations

from functools import cached_property
from pathlib import Path
from typing import Optional

from ..base import BaseDomainConfig


class PromotionConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "promotion"

    @cached_property
    def source_branch(self) -> str:
        return str(self.section.get("source_branch") or "").strip()

    @cached_property
    def target_branch(self) -> str:
        return str(self.section.get("target_branch") or "main").strip()

    @cached_property
    def workdir(self) -> Optional[Path]:
        raw = self.section.get("workdir")
        if not raw:
            return None
        path = Path(str(raw)).expanduser()
        return path if path.is_absolute() else self.repo_root / path

    @cached_property
    def push(self) -> bool:
        return bool(self.section.get("push", True))


__all__ = ["PromotionConfig"]
