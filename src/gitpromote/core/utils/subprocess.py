"""Subprocess helpers with config-driven timeouts and a git command wrapper.

This module provides safe subprocess execution with:
- Config-driven timeout management (``None`` means block until completion)
- Process-group termination when a captured command times out
- No shell=True (security)
"""
from __future__ import annotations

import logging
import os
import shlex
import signal
import subprocess
from pathlib import Path
from time import perf_counter
from typing import Any, MutableMapping, Optional, Sequence

logger = logging.getLogger(__name__)


def _flatten_cmd(cmd: Any) -> Sequence[str]:
    if isinstance(cmd, (list, tuple)):
        return [str(p) for p in cmd]
    return shlex.split(str(cmd))


def _popen_process_group_kwargs() -> dict[str, Any]:
    if os.name == "posix":
        return {"start_new_session": True}
    if os.name == "nt":
        creationflags = getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", None)
        if isinstance(creationflags, int):
            return {"creationflags": creationflags}
    return {}


def _terminate_process_group(proc: subprocess.Popen[Any]) -> None:
    if proc.poll() is not None:
        return
    if os.name == "posix":
        try:
            os.killpg(proc.pid, signal.SIGTERM)
        except OSError:
            proc.terminate()
        try:
            proc.wait(timeout=0.2)
        except subprocess.TimeoutExpired:
            pass
        if proc.poll() is None:
            try:
                os.killpg(proc.pid, signal.SIGKILL)
            except OSError:
                proc.kill()
        try:
            proc.wait(timeout=0.2)
        except subprocess.TimeoutExpired:
            pass
        return

    proc.kill()
    try:
        proc.wait(timeout=0.2)
    except subprocess.TimeoutExpired:
        pass


def _run_capture_output_nohang(cmd: Any, *, timeout: float, **kwargs: Any) -> subprocess.CompletedProcess:
    argv = list(_flatten_cmd(cmd))
    input_value = kwargs.pop("input", None)
    cwd = kwargs.pop("cwd", None)
    env = kwargs.pop("env", None)
    text = bool(kwargs.pop("text", True))
    check = bool(kwargs.pop("check", False))
    kwargs.pop("capture_output", None)

    proc = subprocess.Popen(
        argv,
        cwd=cwd,
        env=env,
        stdin=subprocess.PIPE if input_value is not None else None,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=text,
        **_popen_process_group_kwargs(),
    )
    try:
        stdout, stderr = proc.communicate(input=input_value, timeout=timeout)
    except subprocess.TimeoutExpired as exc:
        _terminate_process_group(proc)
        try:
            stdout, stderr = proc.communicate(timeout=0.2)
        except (subprocess.TimeoutExpired, ValueError):
            stdout = getattr(exc, "output", None)
            stderr = getattr(exc, "stderr", None)
        raise subprocess.TimeoutExpired(argv, timeout, output=stdout, stderr=stderr) from None

    completed = subprocess.CompletedProcess(
        argv,
        proc.returncode if proc.returncode is not None else 0,
        stdout=stdout,
        stderr=stderr,
    )
    if check and completed.returncode != 0:
        raise subprocess.CalledProcessError(
            completed.returncode,
            argv,
            output=stdout,
            stderr=stderr,
        )
    return completed


def configured_timeout(timeout_type: str = "default", cwd: Path | str | None = None) -> Optional[float]:
    """Get the configured timeout for a bucket.

    Args:
        timeout_type: ``git_operations`` or ``default``
        cwd: Working directory used to locate the project configuration

    Returns:
        Timeout in seconds, or None when the bucket is configured as unlimited
    """
    from gitpromote.core.config.domains.timeouts import TimeoutsConfig

    repo_root = Path(cwd).resolve() if cwd is not None else None
    timeouts = TimeoutsConfig(repo_root=repo_root)
    if timeout_type == "git_operations":
        return timeouts.git_operations_seconds
    return timeouts.default_seconds


def run_with_timeout(cmd, timeout_type: str = "default", **kwargs):
    """Run a subprocess using the configured timeout bucket.

    Args:
        cmd: Command list/str passed through to ``subprocess.run``.
        timeout_type: ``git_operations`` or ``default``.
        **kwargs: Additional arguments forwarded to ``subprocess.run``.
            An explicit ``timeout`` wins over the configured one.

    Returns:
        CompletedProcess from ``subprocess.run``.

    Raises:
        subprocess.TimeoutExpired: When the command exceeds its timeout.
        subprocess.CalledProcessError: When ``check=True`` and the command fails.
    """
    if "timeout" in kwargs:
        timeout = kwargs.pop("timeout")
    else:
        timeout = configured_timeout(timeout_type, cwd=kwargs.get("cwd"))

    argv = _flatten_cmd(cmd)
    start = perf_counter()
    try:
        capture_output = bool(kwargs.get("capture_output", False))
        if capture_output and timeout is not None and "stdout" not in kwargs and "stderr" not in kwargs:
            result = _run_capture_output_nohang(cmd, timeout=float(timeout), **kwargs)
        else:
            result = subprocess.run(cmd, timeout=timeout, **kwargs)
    except subprocess.TimeoutExpired:
        logger.debug("subprocess timed out after %.1fs: %s", float(timeout or 0), " ".join(argv))
        raise
    except subprocess.CalledProcessError as exc:
        logger.debug(
            "subprocess failed rc=%s in %.1fms: %s",
            exc.returncode,
            (perf_counter() - start) * 1000.0,
            " ".join(argv),
        )
        raise

    logger.debug(
        "subprocess rc=%s in %.1fms: %s",
        result.returncode,
        (perf_counter() - start) * 1000.0,
        " ".join(argv),
    )
    return result


def _to_cwd(cwd: Optional[Path | str]) -> Optional[str]:
    """Convert Path or str cwd to str for subprocess."""
    if cwd is None:
        return None
    return str(cwd)


def run_command(
    cmd: Sequence[str],
    *,
    cwd: Optional[Path | str] = None,
    env: Optional[MutableMapping[str, str]] = None,
    timeout: Optional[float] = None,
    capture_output: bool = False,
    text: bool = True,
    check: bool = False,
    input: Any = None,
) -> subprocess.CompletedProcess:
    """
    Thin wrapper around subprocess.run with safe defaults.

    - No shell=True (security)
    - Optional timeout (None blocks until the command finishes)
    - Optional capture_output/text/check flags
    """
    return run_with_timeout(
        list(cmd),
        cwd=_to_cwd(cwd),
        env=env,
        timeout=timeout,
        capture_output=capture_output,
        text=text,
        check=check,
        input=input,
    )


def run_git_command(
    cmd: Sequence[str],
    *,
    cwd: Optional[Path | str] = None,
    env: Optional[MutableMapping[str, str]] = None,
    timeout: Optional[float] = None,
    capture_output: bool = False,
    text: bool = True,
    check: bool = False,
    config_root: Optional[Path | str] = None,
) -> subprocess.CompletedProcess:
    """
    Run a git command using the ``git_operations`` timeout bucket.

    Args:
        cmd: Git command sequence to execute (starting with ``git``)
        cwd: Working directory (Path or str)
        env: Environment variables
        timeout: Timeout in seconds (defaults to timeouts.git_operations_seconds)
        capture_output: Capture stdout/stderr
        text: Return output as text instead of bytes
        check: Raise CalledProcessError on non-zero exit
        config_root: Project root used to look up the timeout (defaults to cwd)

    Returns:
        CompletedProcess from subprocess.run
    """
    if not cmd or cmd[0] != "git":
        raise ValueError(f"Not a git command: {list(cmd)!r}")

    if timeout is None:
        timeout = configured_timeout(
            "git_operations", cwd=config_root if config_root is not None else cwd
        )

    return run_command(
        cmd,
        cwd=cwd,
        env=env,
        timeout=timeout,
        capture_output=capture_output,
        text=text,
        check=check,
    )


__all__ = [
    "run_with_timeout",
    "configured_timeout",
    "run_command",
    "run_git_command",
]
