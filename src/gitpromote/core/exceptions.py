from __future__ import annotations

from typing import Any, Dict, Mapping, Optional


class GitPromoteError(Exception):
    """Base exception for gitpromote."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class InvalidArgumentError(GitPromoteError, ValueError):
    """Raised when a caller-supplied precondition fails before any I/O happens."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        GitPromoteError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class GitOperationError(GitPromoteError, RuntimeError):
    """Raised when git, its transport or the session handling fails."""

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        cause: Optional[BaseException] = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if operation:
            ctx["operation"] = operation
        if cause is not None:
            ctx.setdefault("cause", f"{cause.__class__.__name__}: {cause}")
        GitPromoteError.__init__(self, message, context=ctx)
        RuntimeError.__init__(self, message)
        self.operation = operation
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class BranchNotFoundError(GitOperationError, LookupError):
    """Raised when no remote-tracking ref matches a requested branch."""

    def __init__(
        self,
        branch: str,
        *,
        remote: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        ctx["branch"] = branch
        if remote:
            ctx["remote"] = remote
        where = f" on remote '{remote}'" if remote else ""
        GitOperationError.__init__(
            self,
            f"Branch '{branch}' not found{where}",
            operation="resolve_branch",
            context=ctx,
        )
        self.branch = branch


__all__ = [
    "GitPromoteError",
    "InvalidArgumentError",
    "GitOperationError",
    "BranchNotFoundError",
]
