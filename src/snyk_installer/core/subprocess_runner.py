"""Process launching for the local executor.

Runs a command to completion and, unless quiet, forwards its output
line-by-line to a TaskListener as it arrives.
"""

from __future__ import annotations

import queue
import shutil
import subprocess
import threading
from pathlib import Path
from typing import IO, List, Optional, Union

from snyk_installer.core.listener import NullTaskListener, TaskListener


def resolve_command(cmd: List[str]) -> List[str]:
    """Resolve the executable through PATH.

    On Windows, ``npm`` is a ``npm.cmd`` shim that CreateProcess cannot find
    by its bare name; shutil.which applies PATHEXT.
    """
    if not cmd:
        raise ValueError("Empty command")
    found = shutil.which(cmd[0])
    if found is None:
        return list(cmd)
    return [found, *cmd[1:]]


def run_process(
    cmd: List[str],
    cwd: Optional[Union[str, Path]] = None,
    listener: Optional[TaskListener] = None,
    quiet: bool = False,
    timeout: Optional[float] = None,
) -> int:
    """Run a command and return its exit code.

    Args:
        cmd: Command and arguments to run.
        cwd: Working directory for the command.
        listener: Task log receiving output lines when not quiet.
        quiet: Discard the command's output instead of forwarding it.
        timeout: Optional timeout in seconds; None waits forever.

    Returns:
        The process exit code.

    Raises:
        FileNotFoundError: If the executable does not exist.
        subprocess.TimeoutExpired: If the command times out.
    """
    handler = listener or NullTaskListener()
    resolved = resolve_command(cmd)
    cwd_str = str(cwd) if cwd is not None else None

    if quiet or isinstance(handler, NullTaskListener):
        result = subprocess.run(
            resolved,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            cwd=cwd_str,
            timeout=timeout,
        )
        return result.returncode

    with subprocess.Popen(
        resolved,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        encoding="utf-8",
        errors="replace",
        cwd=cwd_str,
    ) as proc:
        output_queue: queue.Queue = queue.Queue()

        def read_stream(stream: IO[str]) -> None:
            try:
                for line in stream:
                    output_queue.put(line.rstrip("\n\r"))
            finally:
                output_queue.put(None)

        reader = threading.Thread(target=read_stream, args=(proc.stdout,), daemon=True)
        reader.start()

        while True:
            try:
                line = output_queue.get(timeout=timeout)
            except queue.Empty:
                proc.kill()
                raise subprocess.TimeoutExpired(resolved, timeout or 0)
            if line is None:
                break
            handler.println(line)

        reader.join(timeout=1)
        return proc.wait()
