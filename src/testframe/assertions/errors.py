"""Exception expectation checks."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from testframe.assertions.base import raise_failure

E = TypeVar("E", bound=BaseException)


def assert_throws(
    procedure: Callable[[], Any],
    expected_kind: type[E],
    message: str | None = None,
) -> E:
    """Call ``procedure`` and return the ``expected_kind`` error it raises.

    Fails if nothing is raised, or if an error of another kind is raised; in
    the latter case the raised error becomes the failure's cause.
    """
    if not (isinstance(expected_kind, type) and issubclass(expected_kind, BaseException)):
        raise TypeError(f"expected_kind must be an exception class, got {expected_kind!r}")

    try:
        procedure()
    except expected_kind as exc:
        return exc
    except Exception as exc:
        raise_failure(
            message,
            f"Expected {expected_kind.__name__} but {type(exc).__name__} "
            f"was thrown: {exc}",
            cause=exc,
        )
    raise_failure(
        message, f"Expected {expected_kind.__name__} to be thrown but nothing was"
    )


def assert_does_not_throw(
    procedure: Callable[[], Any], message: str | None = None
) -> Any:
    """Call ``procedure`` and return its value, failing if it raises."""
    try:
        return procedure()
    except Exception as exc:
        raise_failure(
            message, f"Unexpected {type(exc).__name__} was thrown: {exc}", cause=exc
        )
