"""Ordering, sign and NaN checks for numbers and comparables.

Integral values (``numbers.Integral``) and floating-point values get
different standard messages. For floating-point values the sign of zero never
matters, and NaN is deliberately asymmetric:

* ``assert_not_negative`` and ``assert_not_positive`` pass for NaN, since NaN
  fails every ordered comparison including ``< 0`` and ``> 0``;
* ``assert_negative`` and ``assert_positive`` fail for NaN with the
  "not considered negative, zero or positive" message;
* ``assert_zero`` fails for NaN with its ordinary message.
"""

from __future__ import annotations

import math
from typing import Any

from testframe.assertions.base import is_integral, raise_failure


def _is_nan(number: Any) -> bool:
    return not is_integral(number) and math.isnan(number)


def _unordered(number: Any) -> str:
    return f"Number {number} is not considered negative, zero or positive"


def assert_minimum(minimum: Any, value: Any, message: str | None = None) -> None:
    """Check that ``value >= minimum``."""
    if value >= minimum:
        return
    if is_integral(minimum) and is_integral(value):
        raise_failure(message, f"Number {value} expected to be at least {minimum}")
    raise_failure(message, f"Value {value} expected to be at least {minimum}")


def assert_maximum(maximum: Any, value: Any, message: str | None = None) -> None:
    """Check that ``value <= maximum``.

    The bound comes first, as in :func:`assert_minimum`. APIs that take the
    value first, ``assertMaximum(value, maximum)``, read the other way round.
    """
    if not value <= maximum:
        raise_failure(message, f"Value {value} expected to be at most {maximum}")


def assert_not_negative(number: Any, message: str | None = None) -> None:
    if is_integral(number):
        if number < 0:
            raise_failure(message, f"Number {number} expected to be at least 0")
        return
    if not _is_nan(number) and number < 0:
        raise_failure(message, f"Number {number} expected to be at least 0.0")


def assert_negative(number: Any, message: str | None = None) -> None:
    if is_integral(number):
        if not number < 0:
            raise_failure(message, f"Number {number} expected to be at most -1")
        return
    if _is_nan(number):
        raise_failure(message, _unordered(number))
    if not number < 0:
        raise_failure(message, f"Number {number} expected to be less than 0.0")


def assert_zero(number: Any, message: str | None = None) -> None:
    if is_integral(number):
        if number != 0:
            raise_failure(message, f"Number {number} expected to be 0")
        return
    if _is_nan(number) or number != 0:
        raise_failure(message, f"Number {number} expected to be 0.0")


def assert_not_positive(number: Any, message: str | None = None) -> None:
    if is_integral(number):
        if number > 0:
            raise_failure(message, f"Number {number} expected to be less than 1")
        return
    if not _is_nan(number) and number > 0:
        raise_failure(message, f"Number {number} expected to not be positive")


def assert_positive(number: Any, message: str | None = None) -> None:
    if is_integral(number):
        if not number > 0:
            raise_failure(message, f"Number {number} expected to be greater than 0")
        return
    if _is_nan(number):
        raise_failure(message, _unordered(number))
    if not number > 0:
        raise_failure(message, f"Number {number} expected to be greater than 0.0")


def assert_nan(number: Any, message: str | None = None) -> None:
    if not _is_nan(number):
        raise_failure(message, f"Number {number} expected to be NaN")


def assert_not_nan(number: Any, message: str | None = None) -> None:
    if _is_nan(number):
        raise_failure(message, f"Number {number} expected to not be NaN")
