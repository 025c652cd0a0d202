"""Domain-specific configuration accessors."""
from __future__ import annotations

from .git import GitConfig
from .logging import LoggingConfig
from .promotion import PromotionConfig
from .timeouts import TimeoutsConfig

__all__ = [
    "GitConfig",
    "LoggingConfig",
    "PromotionConfig",
    "TimeoutsConfig",
]
