"""
gitpromote promote command.

SUMMARY: Merge a remote source branch into a target branch and push it
"""

from __future__ import annotations

import argparse
import tempfile
from pathlib import Path
from typing import Optional

from gitpromote.cli import OutputFormatter, add_json_flag, add_repo_root_flag
from gitpromote.core.config import ConfigManager
from gitpromote.core.config.domains.promotion import PromotionConfig
from gitpromote.core.exceptions import GitPromoteError, InvalidArgumentError
from gitpromote.core.git import GitService, PromotionResult, promote
from gitpromote.core.schemas import SchemaValidationError

SUMMARY = "Merge a remote source branch into a target branch and push it"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command arguments."""
    parser.add_argument(
        "--source",
        "-s",
        default=None,
        help="Remote branch to promote (default: promotion.source_branch)",
    )
    parser.add_argument(
        "--target",
        "-t",
        default=None,
        help="Branch receiving the merge (default: promotion.target_branch)",
    )
    parser.add_argument(
        "--workdir",
        default=None,
        help="Directory to clone into (default: promotion.workdir, else a temporary directory)",
    )
    parser.add_argument(
        "--no-push",
        action="store_true",
        default=False,
        help="Merge locally without pushing",
    )
    add_json_flag(parser)
    add_repo_root_flag(parser)


def _run(service: GitService, workdir: Optional[Path], source: str, target: str, push: bool) -> PromotionResult:
    if workdir is not None:
        return promote(service, workdir, source, target, push=push)
    with tempfile.TemporaryDirectory(prefix="gitpromote-") as tmp:
        return promote(service, Path(tmp) / "repo", source, target, push=push)


def main(args: argparse.Namespace) -> int:
    """Execute the promote command.

    Returns:
        0 on success, 1 when git fails, 2 on invalid input or configuration
    """
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    repo_root = Path(args.repo_root) if getattr(args, "repo_root", None) else None

    try:
        ConfigManager(repo_root).load_config(validate=True)
    except SchemaValidationError as exc:
        formatter.error(exc, error_code="invalid_config")
        return 2

    promotion = PromotionConfig(repo_root=repo_root)
    source = args.source or promotion.source_branch
    target = args.target or promotion.target_branch
    if not source:
        formatter.error(
            ValueError("missing source branch"),
            "Source branch is required. Use --source or set promotion.source_branch.",
            error_code="missing_source",
        )
        return 2

    workdir = Path(args.workdir) if args.workdir else promotion.workdir
    push = promotion.push and not args.no_push

    try:
        result = _run(GitService(repo_root=repo_root), workdir, source, target, push)
    except InvalidArgumentError as exc:
        formatter.error(exc, error_code="invalid_argument")
        return 2
    except GitPromoteError as exc:
        formatter.error(exc, error_code="git_operation_failed")
        return 1

    payload = result.to_dict()
    if workdir is None:
        # The temporary clone is already gone.
        payload.pop("workdir", None)

    verb = "Promoted and pushed" if result.pushed else "Promoted (not pushed)"
    formatter.success(
        payload,
        f"{verb} {result.source.name} into {result.target}: {result.merge_commit}",
    )
    return 0
