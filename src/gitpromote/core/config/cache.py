"""Centralized configuration caching.

Provides a single source of truth for loaded configuration across all domain
configs. Cache keys include the project root, a fingerprint of
``GITPROMOTE_*`` environment overrides and the mtimes of user/project config
files, so edits to either are picked up on the next access.
"""
from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Any, Dict, Optional

from gitpromote.core.utils.io import iter_yaml_files
from gitpromote.core.utils.paths import (
    get_project_config_dir,
    get_user_config_dir,
    resolve_project_root,
)

ENV_PREFIX = "GITPROMOTE_"
# Legacy variables routed into git.* when no GITPROMOTE_git__* override exists.
ENV_ALIASES = ("GIT_URL", "GIT_USERNAME", "GIT_PASSWORD")

_config_cache: Dict[str, Dict[str, Any]] = {}


def _fingerprint_dir(d: Path) -> list[tuple[str, int, int]]:
    files: list[tuple[str, int, int]] = []
    for p in iter_yaml_files(d):
        try:
            st = p.stat()
        except OSError:
            files.append((p.name, 0, 0))
            continue
        files.append((p.name, int(st.st_mtime_ns), int(st.st_size)))
    return files


def _cache_key(repo_root: Path) -> str:
    env_items = sorted(
        (k, os.environ.get(k, ""))
        for k in os.environ.keys()
        if k.startswith(ENV_PREFIX) or k in ENV_ALIASES
    )
    env_fp = hashlib.sha256(repr(env_items).encode("utf-8")).hexdigest()[:12]

    project_dir = get_project_config_dir(repo_root)
    cfg_files = {
        "user": _fingerprint_dir(get_user_config_dir() / "config"),
        "project": _fingerprint_dir(project_dir / "config"),
        "project_local": _fingerprint_dir(project_dir / "config.local"),
    }
    cfg_fp = hashlib.sha256(repr(cfg_files).encode("utf-8")).hexdigest()[:12]

    return f"{repo_root}:env={env_fp}:cfg={cfg_fp}"


def get_cached_config(repo_root: Optional[Path] = None, validate: bool = False) -> Dict[str, Any]:
    """Get configuration with caching.

    Returns the same config dict instance while neither the environment nor
    the config files change. Treat the returned dict as immutable.
    """
    normalized_root = resolve_project_root(repo_root)
    key = _cache_key(normalized_root)

    if key not in _config_cache:
        # Lazy import to avoid circular dependency
        from .manager import ConfigManager

        manager = ConfigManager(repo_root=normalized_root)
        _config_cache[key] = manager._load_config_uncached(validate=validate)
    return _config_cache[key]


def clear_all_caches() -> None:
    """Clear the config dict cache."""
    _config_cache.clear()


def is_cached(repo_root: Optional[Path] = None) -> bool:
    """Check if config for repo_root is cached."""
    return _cache_key(resolve_project_root(repo_root)) in _config_cache


__all__ = [
    "ENV_PREFIX",
    "ENV_ALIASES",
    "get_cached_config",
    "clear_all_caches",
    "is_cached",
]
