"""Shared utilities for gitpromote core (merging, subprocess, YAML I/O, paths)."""
from __future__ import annotations

__all__: list[str] = []
