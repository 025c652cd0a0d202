"""Git promotion service.

:class:`GitService` drives the ``git`` executable through a fixed promotion
sequence: clone a remote, resolve a remote branch, materialize it as a local
tracking branch, merge it into a target branch with a merge commit, and push.

Every public operation leaves through a single error boundary
(:func:`~gitpromote.core.git.errors.git_operation`): callers only ever see
``InvalidArgumentError`` (bad input, raised before any git call) or
``GitOperationError`` (anything git, the transport or the session handling
reported). There is no retry and no rollback; a failed merge leaves the
working tree as git left it.

Sessions are not thread-safe. Use one session per workflow run.
"""
from __future__ import annotations

import logging
from pathlib import Path, PurePath
from typing import Any, Iterable, List, Optional

from gitpromote.core.config.domains.git import GitConfig
from gitpromote.core.exceptions import BranchNotFoundError, GitOperationError, InvalidArgumentError
from gitpromote.core.utils.paths import resolve_project_root
from gitpromote.core.utils.subprocess import run_git_command

from .credentials import build_credentials, credential_env, redact_url
from .errors import fail, git_operation
from .models import Branch, GitSession, RemoteRef
from .repository import GitRepository, identity_env

logger = logging.getLogger(__name__)

_REF_FORMAT = "%(refname)%00%(objectname)%00%(symref)"


def merge_message(source: str, target: str) -> str:
    """Commit message recorded for every promotion merge."""
    return f"Merge branch '{source}' into '{target}'"


def parse_remote_refs(output: str) -> List[RemoteRef]:
    """Parse ``git for-each-ref --format=<_REF_FORMAT>`` output."""
    refs: List[RemoteRef] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        parts = line.split("\0")
        if len(parts) < 2:
            continue
        symref = parts[2] if len(parts) > 2 else ""
        refs.append(RemoteRef(refname=parts[0], commit_id=parts[1], symref=symref))
    return refs


def select_remote_ref(
    refs: Iterable[RemoteRef],
    name: str,
    *,
    remotes: Iterable[str],
    preferred_remote: str = "origin",
) -> Optional[RemoteRef]:
    """Pick the remote-tracking ref for branch ``name``.

    A ref matches when its name minus ``refs/remotes/<remote>/`` equals
    ``name`` exactly, so ``origin/old/release-1`` never matches ``release-1``.
    Symbolic refs (``origin/HEAD``) are skipped. Refs of ``preferred_remote``
    win; otherwise listing order decides.
    """
    known = tuple(remotes)
    matches: List[tuple[str, RemoteRef]] = []
    for ref in refs:
        if ref.symref:
            continue
        split = ref.split_remote(known)
        if split is None or split[1] != name:
            continue
        matches.append((split[0], ref))

    if not matches:
        return None
    if len(matches) > 1:
        logger.info(
            "Branch %s exists on several remotes (%s); preferring %s",
            name,
            ", ".join(remote for remote, _ in matches),
            preferred_remote,
        )
    # sort() is stable: listing order is kept inside each group.
    matches.sort(key=lambda item: item[0] != preferred_remote)
    return matches[0][1]


class GitService:
    """Clone, resolve, materialize, checkout, merge and push on a :class:`GitSession`.

    Args:
        repo_root: Project root used to load configuration. Defaults to
            ``$PROMOTE_PROJECT_ROOT`` or the current directory.
        config: Fixed ``GitConfig``. When omitted, configuration is re-read
            for every network call so rotated credentials apply immediately.
    """

    def __init__(self, repo_root: Optional[Path] = None, *, config: Optional[GitConfig] = None) -> None:
        self._repo_root = repo_root
        self._config = config

    def _git_config(self) -> GitConfig:
        if self._config is not None:
            return self._config
        return GitConfig(repo_root=self._repo_root)

    # ---------------------------------------------------------------- guards

    @staticmethod
    def _require_session(session: Any) -> GitRepository:
        if not isinstance(session, GitSession):
            raise fail(
                GitOperationError(
                    f"Could not use git session of type {type(session).__name__}",
                    operation="session",
                )
            )
        if session.closed:
            raise fail(
                GitOperationError(
                    "Git session is closed",
                    operation="session",
                    context={"workdir": str(session.workdir)},
                )
            )
        return session.repository

    @staticmethod
    def _require_branch(branch: Any) -> Branch:
        if not isinstance(branch, Branch) or not branch.commit_id:
            raise fail(
                GitOperationError(
                    f"Could not use branch of type {type(branch).__name__}",
                    operation="merge",
                )
            )
        return branch

    @staticmethod
    def _require_name(name: Any, what: str) -> str:
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgumentError(f"{what} name can not be empty", context={what: repr(name)})
        if name.startswith("-"):
            raise InvalidArgumentError(f"{what} name can not start with '-'", context={what: name})
        return name.strip()

    # ------------------------------------------------------------ operations

    def clone(self, path: Optional[Path | str]) -> GitSession:
        """Clone the configured remote into ``path`` and return a bound session.

        Raises:
            InvalidArgumentError: ``path`` is None or empty (nothing is created).
            GitOperationError: git could not clone (auth, network, bad URL,
                unwritable or non-empty directory).
        """
        if path is None or not str(path).strip() or (isinstance(path, PurePath) and not path.parts):
            raise InvalidArgumentError(
                "Path to clone git repository can not be empty", context={"path": repr(path)}
            )

        workdir = Path(path).expanduser().absolute()
        config = self._git_config()
        config_root = resolve_project_root(self._repo_root)
        url = config.url
        safe_url = redact_url(url)

        logger.info("Cloning git repository %s into %s", safe_url, workdir)
        with git_operation("clone", "Could not clone git repository", url=safe_url, workdir=str(workdir)):
            run_git_command(
                ["git", "clone", "--origin", config.remote, "--", url, str(workdir)],
                env=credential_env(build_credentials(config), url),
                capture_output=True,
                text=True,
                check=True,
                config_root=config_root,
            )

        repository = GitRepository(
            workdir,
            identity=identity_env(config.committer_name, config.committer_email),
            config_root=config_root,
        )
        logger.info("Repository cloned: %s", safe_url)
        return GitSession(repository=repository, workdir=workdir, remote=config.remote)

    def resolve_branch(self, session: GitSession, name: str) -> Branch:
        """Resolve remote branch ``name`` to its current commit.

        Raises:
            BranchNotFoundError: no remote-tracking ref matches ``name``.
        """
        repository = self._require_session(session)
        name = self._require_name(name, "branch")

        logger.info("Retrieving id for branch %s/%s", session.remote, name)
        with git_operation("resolve_branch", "Could not list remote branches", branch=name):
            remotes = tuple(repository.git("remote").stdout.split())
            listing = repository.git("for-each-ref", f"--format={_REF_FORMAT}", "refs/remotes").stdout

        match = select_remote_ref(
            parse_remote_refs(listing), name, remotes=remotes, preferred_remote=session.remote
        )
        if match is None:
            raise fail(BranchNotFoundError(name, remote=session.remote))

        branch = Branch(name=match.short_name, commit_id=match.commit_id, ref=match.refname)
        logger.info("Id %s for branch %s", branch.commit_id, branch.name)
        return branch

    def materialize_branch(self, session: GitSession, name: str) -> None:
        """Create or reset local branch ``name`` at ``<remote>/<name>``, tracking it.

        Re-running overwrites the existing local branch.
        """
        repository = self._require_session(session)
        name = self._require_name(name, "branch")
        start_point = f"{session.remote}/{name}"

        logger.info("Retrieving branch %s", start_point)
        with git_operation(
            "materialize_branch",
            f"Could not create local branch '{name}'",
            branch=name,
            start_point=start_point,
        ):
            repository.git("branch", "--force", "--track", name, start_point)

    def checkout(self, session: GitSession, name: str) -> None:
        """Switch the working tree to ``name``."""
        repository = self._require_session(session)
        name = self._require_name(name, "branch")

        logger.info("Checkout branch %s", name)
        with git_operation("checkout", f"Could not checkout branch '{name}'", branch=name):
            repository.git("checkout", name, "--")

    def merge(self, session: GitSession, branch: Branch, target: str) -> None:
        """Check out ``target`` and merge ``branch`` into it with a merge commit.

        Fast-forward is never used. Conflicts are not resolved: the merge
        fails with ``GitOperationError`` and ``target`` keeps its tip.
        """
        repository = self._require_session(session)
        branch = self._require_branch(branch)
        target = self._require_name(target, "target branch")

        self.checkout(session, target)

        message = merge_message(branch.name, target)
        logger.info("Merge %s into target branch %s, and local commit", branch.name, target)
        with git_operation(
            "merge",
            f"Could not merge '{branch.name}' into '{target}'",
            source=branch.name,
            commit=branch.commit_id,
            target=target,
        ):
            repository.git("merge", "--no-ff", "--no-edit", "-m", message, branch.commit_id)

    def push(self, session: GitSession) -> None:
        """Push the checked-out branch to the session's remote with fresh credentials."""
        repository = self._require_session(session)
        config = self._git_config()

        with git_operation("push", "Could not push to remote", remote=session.remote):
            url = repository.git("remote", "get-url", session.remote).stdout.strip()
            logger.info("Pushing to remote %s (%s)", session.remote, redact_url(url))
            repository.git(
                "push",
                "--porcelain",
                session.remote,
                "HEAD",
                env=credential_env(build_credentials(config), url),
            )

    def head(self, session: GitSession) -> str:
        """Return the commit id of ``HEAD``."""
        repository = self._require_session(session)
        with git_operation("head", "Could not read HEAD"):
            return repository.git("rev-parse", "HEAD").stdout.strip()

    def current_branch(self, session: GitSession) -> Optional[str]:
        """Return the checked-out branch name, or None when ``HEAD`` is detached."""
        repository = self._require_session(session)
        with git_operation("current_branch", "Could not read current branch"):
            name = repository.git("rev-parse", "--abbrev-ref", "HEAD").stdout.strip()
        return None if name == "HEAD" else name

    # Older method names, kept as aliases.
    clone_repo = clone
    get_branch = resolve_branch
    clone_branch_from_repo = materialize_branch
    merge_with_branch = merge


__all__ = [
    "GitService",
    "merge_message",
    "parse_remote_refs",
    "select_remote_ref",
]
