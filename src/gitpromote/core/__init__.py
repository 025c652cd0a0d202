"""Core libraries for gitpromote: configuration, git session handling and utilities."""
from __future__ import annotations

__all__: list[str] = []
