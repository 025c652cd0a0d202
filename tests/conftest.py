import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'gitpromote' and tests/ importable as 'helpers'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from gitpromote.core.config.cache import ENV_ALIASES, ENV_PREFIX, clear_all_caches
from gitpromote.core.git import GitService
from gitpromote.core.stdlib_logging import reset_stdlib_logging_for_tests
from gitpromote.core.utils.paths import PROJECT_ROOT_ENV
from helpers.git_helpers import RemoteFixture, create_remote
from helpers.io_utils import write_project_config


@pytest.fixture(autouse=True)
def _isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Hermetic HOME and environment for every test.

    Removes gitpromote overrides, legacy GIT_* aliases and any inherited
    GIT_CONFIG_* injection, and points HOME at an empty directory so neither
    ~/.gitpromote nor ~/.gitconfig leak into a test.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")

    for key in list(os.environ):
        if (
            key.startswith(ENV_PREFIX)
            or key in ENV_ALIASES
            or key == PROJECT_ROOT_ENV
            or key.startswith("GIT_CONFIG_KEY_")
            or key.startswith("GIT_CONFIG_VALUE_")
            or key in {"GIT_CONFIG_COUNT", "GIT_CONFIG_GLOBAL", "GIT_DIR", "GIT_WORK_TREE"}
        ):
            monkeypatch.delenv(key, raising=False)

    clear_all_caches()
    yield
    clear_all_caches()
    reset_stdlib_logging_for_tests()


@pytest.fixture
def project_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Empty project directory used as cwd and PROMOTE_PROJECT_ROOT."""
    root = tmp_path / "project"
    root.mkdir()
    monkeypatch.setenv(PROJECT_ROOT_ENV, str(root))
    monkeypatch.chdir(root)
    return root


@pytest.fixture
def remote(tmp_path: Path) -> RemoteFixture:
    """Bare remote with ``main``, ``feature`` (one commit ahead) and ``release-1``."""
    return create_remote(tmp_path / "remotes")


@pytest.fixture
def configured_project(project_root: Path, remote: RemoteFixture) -> Path:
    """Project whose git.url points at the ``remote`` fixture."""
    write_project_config(project_root, "git", {"git": {"url": str(remote.bare)}})
    return project_root


@pytest.fixture
def service(configured_project: Path) -> GitService:
    return GitService(repo_root=configured_project)


@pytest.fixture
def session(service: GitService, tmp_path: Path):
    """Open session on a fresh clone of ``remote``; closed after the test."""
    with service.clone(tmp_path / "work") as s:
        yield s
