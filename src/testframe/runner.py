from __future__ import annotations

import fnmatch
import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from testframe.assertions.base import AssertionFailure
from testframe.config import RunConfig
from testframe.discovery import (
    DiscoveryError,
    TestIdentifier,
    container_name,
    discover,
    load_container,
)
from testframe.metrics import RunSummary, summarize
from testframe.verbose import close_logger, setup_logger

ContainerName = str


class Status(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class TestResult:
    """Outcome of running one test.

    Attributes:
        identifier: The test that was run.
        status: Passed, failed or skipped.
        message: Failure message; None unless the test failed.
        cause: The error behind the failure. For assertion failures this is
            the failure's own cause (often None); for unexpected errors it is
            the error itself.
        duration: Wall-clock seconds spent in the procedure.
    """

    __test__ = False

    identifier: TestIdentifier
    status: Status
    message: str | None = None
    cause: BaseException | None = None
    duration: float = 0.0
    unexpected: bool = False

    @property
    def name(self) -> str:
        return self.identifier.name

    @property
    def passed(self) -> bool:
        return self.status is Status.PASSED

    @property
    def errored(self) -> bool:
        """Failed because of an unexpected error rather than an assertion."""
        return self.status is Status.FAILED and self.unexpected

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "container": self.identifier.container,
            "status": self.status.value,
            "errored": self.errored,
            "message": self.message,
            "cause": (
                f"{type(self.cause).__name__}: {self.cause}"
                if self.cause is not None
                else None
            ),
            "duration": self.duration,
        }


def run(identifier: TestIdentifier, logger: logging.Logger | None = None) -> TestResult:
    """Run a single test in the calling thread and classify its outcome."""
    if logger is None:
        logger = logging.getLogger(__name__)

    if identifier.skip:
        logger.debug(f"Skipping '{identifier.name}'")
        return TestResult(identifier=identifier, status=Status.SKIPPED)

    logger.debug(f"Running '{identifier.name}'")
    start = time.perf_counter()
    try:
        identifier.procedure()
    except AssertionError as e:
        duration = time.perf_counter() - start
        cause = e.cause if isinstance(e, AssertionFailure) else e.__cause__
        message = str(e) or type(e).__name__
        logger.debug(f"'{identifier.name}' failed: {message}")
        return TestResult(
            identifier=identifier,
            status=Status.FAILED,
            message=message,
            cause=cause,
            duration=duration,
        )
    except Exception as e:
        duration = time.perf_counter() - start
        logger.debug(f"'{identifier.name}' raised {type(e).__name__}: {e}")
        return TestResult(
            identifier=identifier,
            status=Status.FAILED,
            message=f"Unexpected error {type(e).__name__}: {e}",
            cause=e,
            duration=duration,
            unexpected=True,
        )

    duration = time.perf_counter() - start
    logger.debug(f"'{identifier.name}' passed in {duration:.4f}s")
    return TestResult(identifier=identifier, status=Status.PASSED, duration=duration)


def run_all(container: Any, logger: logging.Logger | None = None) -> list[TestResult]:
    """Discover and run every test in ``container``, in declaration order.

    Failures never stop the run. Raises DiscoveryError before any test runs
    if the container is malformed.
    """
    identifiers = discover(container, logger=logger)
    return [run(identifier, logger=logger) for identifier in identifiers]


def _status_label(result: TestResult) -> str:
    if result.errored:
        return "ERROR"
    return {
        Status.PASSED: "PASS",
        Status.FAILED: "FAIL",
        Status.SKIPPED: "SKIP",
    }[result.status]


class Runner:
    """Orchestrates a run over configured containers into a run directory."""

    def __init__(
        self,
        config: RunConfig,
        output_dir: Path | None = None,
        name_filter: str | None = None,
        verbose: bool | None = None,
        parallel: int | None = None,
    ):
        self.config = config
        self.output_dir = Path(output_dir or config.output_dir)
        self.name_filter = name_filter if name_filter is not None else config.name_filter
        self.verbose = config.verbose if verbose is None else verbose
        self.parallel = parallel or config.parallel
        self.interrupted = False
        self.results: dict[ContainerName, list[TestResult]] = {}
        self.summary: RunSummary | None = None

    def collect(
        self, logger: logging.Logger | None = None
    ) -> dict[ContainerName, list[TestIdentifier]]:
        """Resolve and discover every configured container.

        Raises DiscoveryError on the first malformed container, before any
        test is run.
        """
        plan: dict[ContainerName, list[TestIdentifier]] = {}
        for reference in self.config.containers:
            container = load_container(reference)
            identifiers = discover(container, logger=logger)
            if self.name_filter:
                identifiers = [
                    i for i in identifiers if fnmatch.fnmatch(i.name, self.name_filter)
                ]
            plan.setdefault(container_name(container), []).extend(identifiers)
        return plan

    def execute(self) -> Path:
        """Run all discovered tests. Returns the run directory."""
        run_id = datetime.now(timezone.utc).strftime("%Y-%m-%d_%H%M%S")
        run_dir = self.output_dir / run_id
        run_dir.mkdir(parents=True, exist_ok=True)

        debug_file = run_dir / "debug.log"
        logger = setup_logger(
            debug_file, verbose=self.verbose, logger_name="testframe_main"
        )
        try:
            self._execute(run_dir, logger)
        finally:
            close_logger(logger)
        return run_dir

    def _execute(self, run_dir: Path, logger: logging.Logger) -> None:
        logger.debug("Starting test run")

        try:
            plan = self.collect(logger=logger)
        except DiscoveryError as e:
            logger.error(f"Discovery failed: {e}")
            raise

        ordered = [
            (container, index, identifier)
            for container, identifiers in plan.items()
            for index, identifier in enumerate(identifiers)
        ]
        total = len(ordered)
        print(f"Running {total} test(s) with parallelism {self.parallel}...")

        collected: dict[ContainerName, dict[int, TestResult]] = {
            container: {} for container in plan
        }
        completed_count = 0

        with ThreadPoolExecutor(max_workers=self.parallel) as executor:
            future_to_test = {
                executor.submit(run, identifier, logger): (container, index)
                for container, index, identifier in ordered
            }
            try:
                for future in as_completed(future_to_test):
                    container, index = future_to_test[future]
                    result = future.result()
                    collected[container][index] = result
                    completed_count += 1
                    print(
                        f"  [{completed_count}/{total}] {_status_label(result)}  "
                        f"{result.name} ({result.duration:.2f}s)"
                    )
                    if result.status is Status.FAILED:
                        logger.info(f"{result.name}: {result.message}")
            except KeyboardInterrupt:
                self.interrupted = True
                logger.warning(
                    "Run interrupted by user (Ctrl+C). Cancelling pending tests, "
                    "and saving partial results..."
                )
                cancelled_count = sum(1 for f in future_to_test if f.cancel())
                logger.info(
                    f"Cancelled {cancelled_count} pending test(s). Running tests "
                    "will complete naturally."
                )
                for future, (container, index) in future_to_test.items():
                    if (
                        future.done()
                        and not future.cancelled()
                        and future.exception() is None
                    ):
                        collected[container].setdefault(index, future.result())

        # declaration order, whatever the completion order was
        self.results = {
            container: [by_index[i] for i in sorted(by_index)]
            for container, by_index in collected.items()
        }

        summary = summarize([r for rs in self.results.values() for r in rs])
        self.summary = summary
        logger.debug(
            f"Run finished: {summary.passed} passed, {summary.failed} failed "
            f"({summary.errored} errored), {summary.skipped} skipped"
        )

        self._write_results(run_dir)

    def _write_results(self, run_dir: Path) -> None:
        """Write junit.xml and meta.yaml to the run directory."""
        from testframe.reporting.junit import write_junit

        write_junit(run_dir, self.results)

        try:
            import importlib.metadata

            testframe_version = importlib.metadata.version("testframe")
        except Exception:
            testframe_version = "unknown"

        meta: dict[str, Any] = {
            "run_id": run_dir.name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "containers": list(self.results.keys()),
            "name_filter": self.name_filter,
            "parallel": self.parallel,
            "summary": self.summary.to_dict(),
            "testframe_version": testframe_version,
        }
        if self.interrupted:
            meta["interrupted"] = True

        (run_dir / "meta.yaml").write_text(yaml.dump(meta, default_flow_style=False))
