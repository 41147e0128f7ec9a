"""Decorators that mark callables as tests and as skipped."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any, TypeVar, overload

F = TypeVar("F", bound=Callable[..., Any])

TEST_ATTR = "_testframe_test"
SKIP_ATTR = "_testframe_skip"


@overload
def test(procedure: F) -> F: ...


@overload
def test(*, skip: bool = False) -> Callable[[F], F]: ...


def test(procedure: Any = None, *, skip: bool = False) -> Any:
    """Mark a zero-argument callable (or method) as a test.

    Usable bare (``@test``) or with options (``@test(skip=True)``).
    """

    def mark(fn: F) -> F:
        setattr(fn, TEST_ATTR, True)
        if skip:
            setattr(fn, SKIP_ATTR, True)
        return fn

    if procedure is None:
        return mark
    return mark(procedure)


# keep pytest from collecting the decorator itself when it is imported into a test module
test.__test__ = False  # type: ignore[attr-defined]


def skip(procedure: F) -> F:
    """Mark a callable as skipped. Has no effect unless it is also a test."""
    setattr(procedure, SKIP_ATTR, True)
    return procedure


def _read_marker(obj: Any, attr: str) -> bool:
    # static lookup; never goes through __getattr__
    if inspect.ismethod(obj):
        obj = obj.__func__
    value = inspect.getattr_static(obj, attr, False)
    if not isinstance(value, bool):
        raise TypeError(
            f"Marker {attr} on {getattr(obj, '__qualname__', obj)!r} must be a bool, "
            f"got {type(value).__name__}"
        )
    return value


def is_test(obj: Any) -> bool:
    return _read_marker(obj, TEST_ATTR)


def is_skipped(obj: Any) -> bool:
    return _read_marker(obj, SKIP_ATTR)
