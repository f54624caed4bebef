"""Exceptions that end a test early, and the helpers that raise them."""

from __future__ import annotations

from typing import NoReturn


class TestFailure(AssertionError):
    """Raised when a test, or the fixture around it, detects a failure."""

    __test__ = False

    def __init__(self, message: str = "", line: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line


class TestIgnored(Exception):
    """Raised to stop a test and count it as ignored."""

    __test__ = False

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


def fail(message: str) -> NoReturn:
    """Abort the running test as failed."""
    raise TestFailure(message)


def ignore(message: str) -> NoReturn:
    """Abort the running test as ignored."""
    raise TestIgnored(message)