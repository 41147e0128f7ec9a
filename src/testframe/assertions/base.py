"""Base data structures for the assertion system."""

from __future__ import annotations

import numbers
from collections.abc import Iterable
from typing import Any, NoReturn

DEFAULT_TOLERANCE = 0.00000001


class AssertionFailure(AssertionError):
    """Raised when a declared expectation is not met.

    Attributes:
        message: Full human-readable failure message, custom prefix included.
        cause: The unexpected error that triggered the failure, if any. Also
            chained as ``__cause__`` so tracebacks show it.
    """

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return self.message


def compose_message(message: str | None, standard: str) -> str:
    """Prefix the standard message with the caller's fragment, if any."""
    if message:
        return f"{message}. {standard}"
    return standard


def raise_failure(
    message: str | None, standard: str, cause: BaseException | None = None
) -> NoReturn:
    raise AssertionFailure(compose_message(message, standard), cause=cause)


def is_integral(value: Any) -> bool:
    return isinstance(value, numbers.Integral)


def render_sequence(items: Iterable[Any]) -> str:
    """Render as ``[a, b, c]`` using ``str()`` of each element."""
    return "[" + ", ".join(str(item) for item in items) + "]"
