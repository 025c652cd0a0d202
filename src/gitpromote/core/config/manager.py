"""
gitpromote configuration management (YAML layers plus environment overrides).
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from gitpromote.core.utils.io import iter_yaml_files, read_yaml
from gitpromote.core.utils.merge import deep_merge
from gitpromote.core.utils.paths import (
    get_project_config_dir,
    get_user_config_dir,
    resolve_project_root,
)
from gitpromote.data import get_data_path

from .cache import ENV_ALIASES, ENV_PREFIX, get_cached_config

logger = logging.getLogger(__name__)

CONFIG_SCHEMA = "config/config.schema.yaml"


class ConfigManager:
    """Load, merge, and validate gitpromote configuration.

    Configuration sources (highest to lowest priority):
    1. Environment variables: GITPROMOTE_<section>__<key>
    2. Legacy environment aliases: GIT_URL, GIT_USERNAME, GIT_PASSWORD
    3. Project-local config: <project>/.gitpromote/config.local/*.yaml (uncommitted)
    4. Project config: <project>/.gitpromote/config/*.yaml
    5. User config: ~/.gitpromote/config/*.yaml
    6. Bundled defaults: gitpromote.data/config/*.yaml

    Files inside one directory are merged in alphabetical order.
    """

    def __init__(self, repo_root: Optional[Path] = None) -> None:
        self.repo_root = resolve_project_root(repo_root)

        project_root_dir = get_project_config_dir(self.repo_root)

        self.core_config_dir = get_data_path("config")
        self.user_config_dir = get_user_config_dir() / "config"
        self.project_config_dir = project_root_dir / "config"
        self.project_local_config_dir = project_root_dir / "config.local"

    def load_yaml(self, path: Path) -> Dict[str, Any]:
        # Fail closed: configuration must never silently ignore invalid YAML.
        data = read_yaml(path, default={}, raise_on_error=True)
        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {path}")
        return data

    def _load_directory(self, directory: Path, cfg: Dict[str, Any]) -> Dict[str, Any]:
        for path in iter_yaml_files(directory):
            logger.debug("Loading config layer %s", path)
            cfg = deep_merge(cfg, self.load_yaml(path))
        return cfg

    # ========== Environment overrides ==========

    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except ValueError:
                return None
        return None

    def _coerce_type(self, value: str) -> Any:
        if value.strip().lower() in {"null", "none"}:
            return None
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        return value.strip()

    def _parse_env_key(self, raw: str, *, strict: bool) -> List[str]:
        if not raw:
            return []
        segs = raw.split("__")
        if any(seg == "" for seg in segs):
            if strict:
                raise ValueError(f"Malformed {ENV_PREFIX}* key: empty segment in '{raw}'.")
            return []
        # Lowercase so env overrides create canonical keys.
        return [seg.lower() for seg in segs]

    def _iter_env_overrides(self, *, strict: bool) -> Iterator[Tuple[List[str], str]]:
        for key in sorted(os.environ.keys()):
            if not key.startswith(ENV_PREFIX):
                continue
            path = self._parse_env_key(key[len(ENV_PREFIX):], strict=strict)
            if not path:
                continue
            yield path, os.environ[key]

    def _get_nested(self, root: Dict[str, Any], path: List[str]) -> Any:
        cur: Any = root
        for part in path:
            if not isinstance(cur, dict) or part not in cur:
                return None
            cur = cur[part]
        return cur

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any) -> None:
        cur = root
        for part in path[:-1]:
            nxt = cur.get(part)
            if not isinstance(nxt, dict):
                nxt = {}
                cur[part] = nxt
            cur = nxt
        cur[path[-1]] = value

    def apply_env_overrides(self, cfg: Dict[str, Any], *, strict: bool) -> None:
        for path, raw in self._iter_env_overrides(strict=strict):
            # Keys that already hold strings (urls, secrets) keep the raw value.
            if isinstance(self._get_nested(cfg, path), str):
                value: Any = raw
            else:
                value = self._coerce_type(raw)
            self._set_nested(cfg, path, value)

    def _apply_git_env_aliases(self, cfg: Dict[str, Any]) -> None:
        """Allow GIT_URL/GIT_USERNAME/GIT_PASSWORD to populate git.*."""
        if any(k.startswith(f"{ENV_PREFIX}git__") for k in os.environ.keys()):
            return

        for env_key in ENV_ALIASES:
            if env_key not in os.environ:
                continue
            leaf = env_key[len("GIT_"):].lower()
            self._set_nested(cfg, ["git", leaf], os.environ[env_key])

    # ========== Loading ==========

    def _load_config_uncached(self, validate: bool = True) -> Dict[str, Any]:
        """Load and merge configuration from every source (uncached)."""
        cfg: Dict[str, Any] = {}
        cfg = self._load_directory(self.core_config_dir, cfg)
        cfg = self._load_directory(self.user_config_dir, cfg)
        cfg = self._load_directory(self.project_config_dir, cfg)
        cfg = self._load_directory(self.project_local_config_dir, cfg)

        self._apply_git_env_aliases(cfg)
        self.apply_env_overrides(cfg, strict=validate)

        if validate:
            self.validate_schema(cfg)
        return cfg

    def validate_schema(self, config: Dict[str, Any]) -> None:
        from gitpromote.core.schemas.validation import validate_payload

        validate_payload(config, CONFIG_SCHEMA)

    def load_config(self, validate: bool = True) -> Dict[str, Any]:
        """Load configuration using the centralized cache.

        Notes:
        - `validate=True` validates the (cached) config before returning and
          parses GITPROMOTE_* keys strictly.
        - Returned dict should be treated as immutable.
        """
        cfg = get_cached_config(repo_root=self.repo_root, validate=False)
        if validate:
            _ = list(self._iter_env_overrides(strict=True))
            self.validate_schema(cfg)
        return cfg


__all__ = ["ConfigManager", "CONFIG_SCHEMA"]
