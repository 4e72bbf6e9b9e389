"""Task log abstraction for user-visible installation messages.

Every installation attempt reports the decision it made (up to date,
installing via npm or binary, failure) to a TaskListener:
- Console: print to stderr for the CLI
- Callback: forward lines to an embedding host
- Null: discard everything
"""

from __future__ import annotations

import sys
import threading
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, TextIO


class TaskListener(ABC):
    """Receives the build/operation log of an installation attempt.

    Implementations must be thread-safe: the local process runner emits
    child output from reader threads.
    """

    @abstractmethod
    def println(self, message: str) -> None:
        """Write one line to the task log.

        Args:
            message: Line to write, without trailing newline.
        """


class NullTaskListener(TaskListener):
    """Discards all messages."""

    def println(self, message: str) -> None:
        pass


class ConsoleTaskListener(TaskListener):
    """Thread-safe listener that prints to a text stream."""

    def __init__(self, output: Optional[TextIO] = None, prefix: str = ""):
        """Initialize ConsoleTaskListener.

        Args:
            output: Stream to write to (default: stderr at call time).
            prefix: Optional prefix put in front of every line.
        """
        self._output = output
        self._prefix = prefix
        self._lock = threading.Lock()

    def println(self, message: str) -> None:
        stream = self._output if self._output is not None else sys.stderr
        with self._lock:
            print(f"{self._prefix}{message}", file=stream, flush=True)


class CallbackTaskListener(TaskListener):
    """Forwards each line to a callback, keeping a copy of the log."""

    def __init__(self, on_line: Optional[Callable[[str], None]] = None):
        self._on_line = on_line
        self._lock = threading.Lock()
        self.lines: List[str] = []

    def println(self, message: str) -> None:
        with self._lock:
            self.lines.append(message)
            if self._on_line:
                self._on_line(message)
