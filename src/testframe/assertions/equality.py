"""Equality, nullness and membership checks."""

from __future__ import annotations

import math
import numbers
from collections.abc import Iterable, Sequence
from typing import Any, NoReturn

import numpy as np

from testframe.assertions.base import (
    DEFAULT_TOLERANCE,
    AssertionFailure,
    raise_failure,
    render_sequence,
)

_NON_SEQUENCE_TYPES = (str, bytes, bytearray, memoryview)


def fail(message: str) -> NoReturn:
    """Fail unconditionally with exactly ``message``."""
    raise AssertionFailure(message)


def _is_sequence(value: Any) -> bool:
    if isinstance(value, np.ndarray):
        return value.ndim > 0
    return isinstance(value, Sequence) and not isinstance(value, _NON_SEQUENCE_TYPES)


def _values_equal(want: Any, got: Any) -> bool:
    """``==`` that also works for nested sequences and numpy arrays."""
    if _is_sequence(want) and _is_sequence(got):
        return len(want) == len(got) and all(
            _values_equal(w, g) for w, g in zip(want, got)
        )
    result = want == got
    if isinstance(result, np.ndarray):
        return np.shape(want) == np.shape(got) and bool(result.all())
    return bool(result)


def _is_real(value: Any) -> bool:
    return isinstance(value, numbers.Real)


def _within_tolerance(expected: float, actual: float, tolerance: float) -> bool:
    if expected == actual:
        return True
    if math.isnan(expected) and math.isnan(actual):
        return True
    # x + t must land exactly on the upper bound
    if expected - tolerance <= actual <= expected + tolerance:
        return True
    return abs(expected - actual) <= tolerance


def assert_close(
    expected: float,
    actual: float,
    tolerance: float = DEFAULT_TOLERANCE,
    message: str | None = None,
) -> None:
    """Check that two numbers differ by at most ``tolerance``.

    Equal infinities and two NaNs count as equal. A tolerance of 0 is exact
    equality, so ``0.0`` and ``-0.0`` still match.
    """
    if tolerance < 0 or math.isnan(tolerance):
        raise ValueError(f"Tolerance must be non-negative, got {tolerance}")
    if not _within_tolerance(expected, actual, tolerance):
        raise_failure(
            message,
            f"Expected {expected} to not differ from {actual} by more than {tolerance}",
        )


def _assert_sequences_equal(
    expected: Sequence[Any], actual: Sequence[Any], message: str | None
) -> None:
    if len(expected) != len(actual):
        raise_failure(
            message,
            f"Arrays differ in length: expected has {len(expected)} elements "
            f"but actual has {len(actual)} elements",
        )
    for index, (want, got) in enumerate(zip(expected, actual)):
        if not _values_equal(want, got):
            raise_failure(
                message,
                f"Arrays first differ at index {index}, expected {want} but was {got}",
            )


def assert_equals(
    expected: Any,
    actual: Any,
    message: str | None = None,
    *,
    tolerance: float | None = None,
) -> None:
    """Check that ``actual`` equals ``expected``.

    Dispatches on the values:

    * two sequences (lists, tuples, numpy arrays, ...) are compared length
      first, then element by element, reporting the first differing index;
      nested rows are compared the same way;
    * real numbers where either side is a float, or any call with an explicit
      ``tolerance``, use :func:`assert_close` (default tolerance
      :data:`DEFAULT_TOLERANCE`);
    * everything else uses ``==``, which tolerates ``None`` on either side.
    """
    if _is_sequence(expected) and _is_sequence(actual):
        _assert_sequences_equal(expected, actual, message)
        return

    if _is_real(expected) and _is_real(actual):
        if tolerance is not None or isinstance(expected, float) or isinstance(actual, float):
            assert_close(
                expected,
                actual,
                DEFAULT_TOLERANCE if tolerance is None else tolerance,
                message,
            )
            return

    if not _values_equal(expected, actual):
        raise_failure(message, f"Expected = {expected}. Actual = {actual}")


def assert_null(obj: Any, message: str | None = None) -> None:
    if obj is not None:
        raise_failure(message, f"Expected null object but found {obj}")


def assert_contains(
    element: Any, collection: Iterable[Any], message: str | None = None
) -> None:
    """Check that some item of ``collection`` equals ``element``."""
    items = list(collection)
    for item in items:
        if _values_equal(item, element):
            return
    raise_failure(
        message, f"Expected element {element} to be in {render_sequence(items)}"
    )
