"""I/O utilities for writing test configuration files."""
from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from gitpromote.core.config.cache import clear_all_caches


def write_yaml(path: Path, data: Any) -> Path:
    """Write data to a YAML file, creating parent directories if needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data, sort_keys=True), encoding="utf-8")
    return path


def write_project_config(root: Path, name: str, data: Any, *, local: bool = False) -> Path:
    """Write ``<root>/.gitpromote/config[.local]/<name>.yaml`` and drop cached config."""
    directory = Path(root) / ".gitpromote" / ("config.local" if local else "config")
    path = write_yaml(directory / f"{name}.yaml", data)
    clear_all_caches()
    return path


def write_user_config(home: Path, name: str, data: Any) -> Path:
    """Write ``<home>/.gitpromote/config/<name>.yaml`` and drop cached config."""
    path = write_yaml(Path(home) / ".gitpromote" / "config" / f"{name}.yaml", data)
    clear_all_caches()
    return path
