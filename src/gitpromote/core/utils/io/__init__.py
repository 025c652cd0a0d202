"""File I/O helpers."""
from __future__ import annotations

from .yaml import iter_yaml_files, read_yaml

__all__ = ["read_yaml", "iter_yaml_files"]
