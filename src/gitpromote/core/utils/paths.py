"""Project and user directory resolution."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

PROJECT_ROOT_ENV = "PROMOTE_PROJECT_ROOT"
CONFIG_DIR_NAME = ".gitpromote"


def resolve_project_root(start: Optional[Path | str] = None) -> Path:
    """Return the project root.

    Priority: explicit ``start``, then ``$PROMOTE_PROJECT_ROOT``, then cwd.
    """
    if start is not None:
        return Path(start).expanduser().resolve()
    env_root = os.environ.get(PROJECT_ROOT_ENV, "").strip()
    if env_root:
        return Path(env_root).expanduser().resolve()
    return Path.cwd().resolve()


def get_project_config_dir(repo_root: Path) -> Path:
    """Return ``<repo_root>/.gitpromote`` (not created)."""
    return Path(repo_root) / CONFIG_DIR_NAME


def get_user_config_dir() -> Path:
    """Return ``~/.gitpromote`` (not created)."""
    return Path.home() / CONFIG_DIR_NAME


__all__ = [
    "PROJECT_ROOT_ENV",
    "CONFIG_DIR_NAME",
    "resolve_project_root",
    "get_project_config_dir",
    "get_user_config_dir",
]
