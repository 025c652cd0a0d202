"""End-to-end promotion: clone, resolve, materialize, merge, push."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from .models import Branch
from .service import GitService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromotionResult:
    source: Branch
    target: str
    merge_commit: str
    pushed: bool
    workdir: Path

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source.name,
            "source_commit": self.source.commit_id,
            "target": self.target,
            "merge_commit": self.merge_commit,
            "pushed": self.pushed,
            "workdir": str(self.workdir),
        }


def promote(
    service: GitService,
    workdir: Path | str,
    source: str,
    target: str,
    *,
    push: bool = True,
) -> PromotionResult:
    """Merge remote branch ``source`` into ``target`` and (optionally) push.

    The session is closed on every exit path; the working tree stays in
    ``workdir`` for inspection.
    """
    with service.clone(workdir) as session:
        branch = service.resolve_branch(session, source)
        service.materialize_branch(session, source)
        service.merge(session, branch, target)
        merge_commit = service.head(session)
        if push:
            service.push(session)
        else:
            logger.info("Push skipped; merge commit %s stays local", merge_commit)

    logger.info("Promoted %s into %s (%s)", branch.name, target, merge_commit)
    return PromotionResult(
        source=branch,
        target=target,
        merge_commit=merge_commit,
        pushed=push,
        workdir=session.workdir,
    )


__all__ = ["PromotionResult", "promote"]
