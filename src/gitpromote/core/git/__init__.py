"""
Git session handling for gitpromote.

Keeps every git subprocess call behind :class:`GitService` so the rest of
the code base only deals with sessions, branches and two error kinds.
"""
from __future__ import annotations

from .credentials import Credentials, build_credentials, credential_env, redact_url
from .models import Branch, GitSession, RemoteRef
from .repository import GitRepository
from .service import GitService, merge_message, parse_remote_refs, select_remote_ref
from .workflow import PromotionResult, promote

__all__ = [
    "Branch",
    "Credentials",
    "GitRepository",
    "GitService",
    "GitSession",
    "PromotionResult",
    "RemoteRef",
    "build_credentials",
    "credential_env",
    "merge_message",
    "parse_remote_refs",
    "promote",
    "redact_url",
    "select_remote_ref",
]
