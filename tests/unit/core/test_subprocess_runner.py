"""Tests for the local process runner."""

from __future__ import annotations

import sys

import pytest

from snyk_installer.core.listener import CallbackTaskListener
from snyk_installer.core.subprocess_runner import resolve_command, run_process


class TestResolveCommand:
    def test_resolves_through_path(self) -> None:
        resolved = resolve_command([sys.executable, "-V"])
        assert resolved[1:] == ["-V"]

    def test_unknown_command_unchanged(self) -> None:
        assert resolve_command(["definitely-not-a-command-xyz", "a"]) == [
            "definitely-not-a-command-xyz",
            "a",
        ]

    def test_empty_command(self) -> None:
        with pytest.raises(ValueError):
            resolve_command([])


class TestRunProcess:
    def test_returns_exit_code(self) -> None:
        code = run_process([sys.executable, "-c", "import sys; sys.exit(3)"], quiet=True)
        assert code == 3

    def test_streams_output_to_listener(self) -> None:
        listener = CallbackTaskListener()
        code = run_process(
            [sys.executable, "-c", "print('first'); print('second')"],
            listener=listener,
        )
        assert code == 0
        assert listener.lines == ["first", "second"]

    def test_quiet_discards_output(self) -> None:
        listener = CallbackTaskListener()
        run_process([sys.executable, "-c", "print('x')"], listener=listener, quiet=True)
        assert listener.lines == []

    def test_missing_executable_raises(self) -> None:
        with pytest.raises(FileNotFoundError):
            run_process(["definitely-not-a-command-xyz"], quiet=True)
