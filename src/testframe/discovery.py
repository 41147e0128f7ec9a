"""Test discovery: turn a container into an ordered list of test identifiers."""

from __future__ import annotations

import functools
import importlib
import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from types import ModuleType
from typing import Any

from testframe.markers import is_skipped, is_test


class DiscoveryError(ValueError):
    """A container could not be introspected. Fatal to the whole run."""


@dataclass(frozen=True)
class TestIdentifier:
    """A discovered test.

    Attributes:
        name: Qualified name, e.g. "pkg.tests.MathTests.test_sum".
        procedure: Zero-argument callable that performs the test.
        skip: Whether the test is marked to be skipped.
        container: Qualified name of the container the test came from.
    """

    __test__ = False

    name: str
    procedure: Callable[[], Any] = field(repr=False, compare=False)
    skip: bool = False
    container: str = ""


class TestRegistry:
    """Explicit, ordered table of ``(name, procedure, skip)`` entries.

    Usage::

        registry = TestRegistry("math")

        @registry.test
        def addition():
            assert_equals(4, 2 + 2)

        registry.register("division", check_division, skip=True)
    """

    __test__ = False

    def __init__(self, name: str):
        self.name = name
        self._entries: list[tuple[str, Callable[[], Any], bool]] = []

    def register(
        self, name: str, procedure: Callable[[], Any], skip: bool = False
    ) -> None:
        if not callable(procedure):
            raise DiscoveryError(
                f"Registry '{self.name}': test '{name}' is not callable"
            )
        if any(existing == name for existing, _, _ in self._entries):
            raise DiscoveryError(
                f"Registry '{self.name}': test '{name}' is already registered"
            )
        self._entries.append((name, procedure, skip))

    def test(
        self,
        procedure: Callable[[], Any] | None = None,
        *,
        name: str | None = None,
        skip: bool = False,
    ) -> Any:
        """Decorator form of :meth:`register`."""

        def add(fn: Callable[[], Any]) -> Callable[[], Any]:
            self.register(name or fn.__name__, fn, skip=skip)
            return fn

        if procedure is None:
            return add
        return add(procedure)

    @property
    def entries(self) -> tuple[tuple[str, Callable[[], Any], bool], ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def _require_no_arguments(procedure: Any, label: str) -> None:
    try:
        signature = inspect.signature(procedure)
    except (TypeError, ValueError):
        # builtins without introspectable signatures
        return
    required = [
        p.name
        for p in signature.parameters.values()
        if p.default is inspect.Parameter.empty
        and p.kind not in (p.VAR_POSITIONAL, p.VAR_KEYWORD)
    ]
    if required:
        raise DiscoveryError(
            f"{label} must take no arguments, but requires: {', '.join(required)}"
        )


def _markers(member: Any, label: str) -> tuple[bool, bool]:
    try:
        return is_test(member), is_skipped(member)
    except TypeError as e:
        raise DiscoveryError(f"Malformed test marking on {label}: {e}") from e


def _discover_registry(registry: TestRegistry) -> list[TestIdentifier]:
    identifiers = []
    for name, procedure, skip in registry.entries:
        label = f"{registry.name}.{name}"
        _require_no_arguments(procedure, f"Test '{label}'")
        identifiers.append(
            TestIdentifier(
                name=label, procedure=procedure, skip=skip, container=registry.name
            )
        )
    return identifiers


def _invoke_method(cls: type, attr_name: str) -> Any:
    instance = cls()
    return getattr(instance, attr_name)()


def _discover_class(cls: type) -> list[TestIdentifier]:
    container = f"{cls.__module__}.{cls.__qualname__}"
    _require_no_arguments(cls, f"Test class '{container}'")

    # Base class members first; overrides keep the position of the original.
    names: dict[str, None] = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for attr_name in vars(klass):
            names.setdefault(attr_name, None)

    identifiers = []
    for attr_name in names:
        if attr_name.startswith("__"):
            continue
        label = f"{container}.{attr_name}"
        member = getattr(cls, attr_name)
        marked, skip = _markers(member, label)
        if not marked:
            continue
        if not callable(member):
            raise DiscoveryError(f"Test '{label}' is not callable")

        raw = inspect.getattr_static(cls, attr_name)
        if inspect.isfunction(raw):
            _require_no_arguments(functools.partial(raw, None), f"Test '{label}'")
        else:
            _require_no_arguments(member, f"Test '{label}'")

        identifiers.append(
            TestIdentifier(
                name=label,
                procedure=functools.partial(_invoke_method, cls, attr_name),
                skip=skip,
                container=container,
            )
        )
    return identifiers


def _discover_module(module: ModuleType) -> list[TestIdentifier]:
    identifiers = []
    for attr_name, member in list(vars(module).items()):
        if attr_name.startswith("__") or not callable(member):
            continue
        # tests imported from elsewhere belong to their own module
        if getattr(member, "__module__", None) != module.__name__:
            continue
        label = f"{module.__name__}.{attr_name}"
        marked, skip = _markers(member, label)
        if not marked:
            continue
        _require_no_arguments(member, f"Test '{label}'")
        identifiers.append(
            TestIdentifier(
                name=label, procedure=member, skip=skip, container=module.__name__
            )
        )
    return identifiers


def discover(
    container: Any, logger: logging.Logger | None = None
) -> list[TestIdentifier]:
    """List the tests of a registry, class or module in declaration order.

    Raises DiscoveryError if the container is unsupported or malformed.
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    if isinstance(container, TestRegistry):
        identifiers = _discover_registry(container)
    elif inspect.isclass(container):
        identifiers = _discover_class(container)
    elif inspect.ismodule(container):
        identifiers = _discover_module(container)
    else:
        raise DiscoveryError(
            f"Unsupported test container {container!r}: expected a TestRegistry, "
            "a class or a module"
        )

    skipped = sum(1 for i in identifiers if i.skip)
    logger.debug(
        f"Discovered {len(identifiers)} test(s) ({skipped} skipped) in "
        f"{container_name(container)}"
    )
    return identifiers


def container_name(container: Any) -> str:
    if isinstance(container, TestRegistry):
        return container.name
    if inspect.isclass(container):
        return f"{container.__module__}.{container.__qualname__}"
    if inspect.ismodule(container):
        return container.__name__
    return repr(container)


def load_container(reference: str) -> Any:
    """Import a container from ``package.module`` or ``package.module:Attr``."""
    module_name, _, attr_path = reference.partition(":")
    if not module_name:
        raise DiscoveryError(f"Invalid container reference '{reference}'")

    try:
        module = importlib.import_module(module_name)
    except Exception as e:
        raise DiscoveryError(f"Cannot import test module '{module_name}': {e}") from e

    if not attr_path:
        return module

    obj: Any = module
    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise DiscoveryError(
                f"Container '{attr_path}' not found in module '{module_name}'"
            ) from e
    return obj
