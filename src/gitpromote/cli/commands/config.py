"""
gitpromote config command.

SUMMARY: Show the merged configuration (secrets redacted)
"""

from __future__ import annotations

import argparse
import copy
from pathlib import Path
from typing import Any, Dict

import yaml

from gitpromote.cli import OutputFormatter, add_json_flag, add_repo_root_flag
from gitpromote.core.config import ConfigManager
from gitpromote.core.git import redact_url
from gitpromote.core.schemas import SchemaValidationError

SUMMARY = "Show the merged configuration (secrets redacted)"

REDACTED = "***"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command arguments."""
    add_json_flag(parser)
    add_repo_root_flag(parser)


def redact_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``cfg`` safe to print."""
    out = copy.deepcopy(cfg)
    git = out.get("git")
    if isinstance(git, dict):
        if git.get("password"):
            git["password"] = REDACTED
        if isinstance(git.get("url"), str):
            git["url"] = redact_url(git["url"])
    return out


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    repo_root = Path(args.repo_root) if getattr(args, "repo_root", None) else None

    manager = ConfigManager(repo_root)
    try:
        cfg = manager.load_config(validate=True)
    except SchemaValidationError as exc:
        formatter.error(exc, error_code="invalid_config")
        return 2

    safe = redact_config(cfg)
    if formatter.json_mode:
        formatter.json_output(safe)
    else:
        formatter.text(f"# project root: {manager.repo_root}")
        formatter.text(yaml.safe_dump(safe, sort_keys=True).rstrip())
    return 0
