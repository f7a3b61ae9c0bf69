"""Streaming execution of the test process."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)

CHUNK_SIZE = 4096


def run_process(
    args: list[str],
    cwd: str | Path,
    on_chunk: Callable[[bytes], None],
    env: dict[str, str] | None = None,
    should_cancel: Callable[[], bool] | None = None,
    terminate_timeout: float = 5.0,
) -> int:
    """Run *args*, forwarding raw stdout/stderr chunks as they arrive.

    stderr is merged into stdout so that chunks keep their relative
    order.  *should_cancel* is polled between chunks; when it returns
    True the child is terminated (then killed after *terminate_timeout*).

    Returns:
        The process exit code.

    Raises:
        RuntimeError: If the process could not be started.
    """
    full_env = dict(os.environ)
    if env:
        full_env.update(env)

    logger.info("running: %s (cwd=%s)", " ".join(args), cwd)
    try:
        proc = subprocess.Popen(
            args,
            cwd=str(cwd),
            env=full_env,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
        )
    except OSError as exc:
        raise RuntimeError(f"Failed to start {args[0]}: {exc}") from exc

    assert proc.stdout is not None
    with proc.stdout:
        while True:
            if should_cancel is not None and should_cancel():
                _terminate(proc, terminate_timeout)
                break
            chunk = proc.stdout.read1(CHUNK_SIZE)
            if not chunk:
                break
            on_chunk(chunk)
    return proc.wait()


def _terminate(proc: subprocess.Popen[bytes], timeout: float) -> None:
    if proc.poll() is not None:
        return
    logger.info("terminating process %d", proc.pid)
    proc.terminate()
    try:
        proc.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        proc.kill()
        proc.wait()
