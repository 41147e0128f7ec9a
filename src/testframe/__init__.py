"""Minimal test discovery, execution and assertion framework."""

from testframe.assertions import (
    DEFAULT_TOLERANCE,
    AssertionFailure,
    assert_close,
    assert_contains,
    assert_does_not_throw,
    assert_equals,
    assert_maximum,
    assert_minimum,
    assert_nan,
    assert_negative,
    assert_not_nan,
    assert_not_negative,
    assert_not_positive,
    assert_null,
    assert_positive,
    assert_throws,
    assert_zero,
    fail,
)
from testframe.discovery import DiscoveryError, TestIdentifier, TestRegistry, discover
from testframe.markers import skip, test
from testframe.runner import Status, TestResult, run, run_all

__all__ = [
    "DEFAULT_TOLERANCE",
    "AssertionFailure",
    "DiscoveryError",
    "Status",
    "TestIdentifier",
    "TestRegistry",
    "TestResult",
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
    "discover",
    "fail",
    "run",
    "run_all",
    "skip",
    "test",
]
