"""Assertion library used by test procedures."""

from testframe.assertions.base import DEFAULT_TOLERANCE, AssertionFailure
from testframe.assertions.equality import (
    assert_close,
    assert_contains,
    assert_equals,
    assert_null,
    fail,
)
from testframe.assertions.errors import assert_does_not_throw, assert_throws
from testframe.assertions.numeric import (
    assert_maximum,
    assert_minimum,
    assert_nan,
    assert_negative,
    assert_not_nan,
    assert_not_negative,
    assert_not_positive,
    assert_positive,
    assert_zero,
)

__all__ = [
    "DEFAULT_TOLERANCE",
    "AssertionFailure",
    "assert_close",
    "assert_contains",
    "assert_does_not_throw",
    "assert_equals",
    "assert_maximum",
    "assert_minimum",
    "assert_nan",
    "assert_negative",
    "assert_not_nan",
    "assert_not_negative",
    "assert_not_positive",
    "assert_null",
    "assert_positive",
    "assert_throws",
    "assert_zero",
    "fail",
]
