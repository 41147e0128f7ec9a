"""PYTEST_DONT_REWRITE"""

import threading
import time

import pytest
import yaml
from junitparser import JUnitXml

import sample_containers
from testframe.assertions import AssertionFailure, assert_equals
from testframe.config import RunConfig
from testframe.discovery import DiscoveryError, TestIdentifier, TestRegistry
from testframe.markers import test
from testframe.runner import Runner, Status, TestResult, run, run_all


def _identifier(procedure, skip=False, name="suite.case"):
    return TestIdentifier(name=name, procedure=procedure, skip=skip, container="suite")


# --- run ---


def test_run_passing_test():
    result = run(_identifier(lambda: None))
    assert result.status is Status.PASSED
    assert result.passed
    assert result.message is None
    assert result.cause is None
    assert result.duration >= 0


def test_run_assertion_failure_keeps_message():
    def procedure():
        assert_equals(1, 2, "Numbers")

    result = run(_identifier(procedure))
    assert result.status is Status.FAILED
    assert result.message == "Numbers. Expected = 1. Actual = 2"
    assert result.cause is None
    assert not result.errored


def test_run_assertion_failure_keeps_its_cause():
    cause = ValueError("underlying")

    def procedure():
        raise AssertionFailure("wrapped", cause=cause)

    result = run(_identifier(procedure))
    assert result.status is Status.FAILED
    assert result.message == "wrapped"
    assert result.cause is cause
    assert not result.errored


def test_run_bare_assert_counts_as_failure():
    def procedure():
        assert 1 == 2, "plain assert"

    result = run(_identifier(procedure))
    assert result.status is Status.FAILED
    assert result.message == "plain assert"
    assert not result.errored


def test_run_bare_assert_without_message_uses_type_name():
    def procedure():
        raise AssertionError()

    result = run(_identifier(procedure))
    assert result.message == "AssertionError"


def test_run_unexpected_error_is_an_errored_failure():
    raised = KeyError("missing")

    def procedure():
        raise raised

    result = run(_identifier(procedure))
    assert result.status is Status.FAILED
    assert result.errored
    assert result.cause is raised
    assert result.message.startswith("Unexpected error KeyError")


def test_run_skipped_test_is_never_invoked():
    calls = []
    result = run(_identifier(lambda: calls.append(1), skip=True))
    assert result.status is Status.SKIPPED
    assert result.duration == 0.0
    assert calls == []


def test_run_propagates_keyboard_interrupt():
    def procedure():
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        run(_identifier(procedure))


def test_result_to_dict():
    result = run(_identifier(lambda: {}["missing"]))
    data = result.to_dict()
    assert data["name"] == "suite.case"
    assert data["container"] == "suite"
    assert data["status"] == "failed"
    assert data["errored"] is True
    assert data["cause"] == "KeyError: 'missing'"


def test_results_are_immutable():
    result = run(_identifier(lambda: None))
    with pytest.raises(AttributeError):
        result.status = Status.FAILED


# --- run_all ---


def test_run_all_module_in_declaration_order():
    results = run_all(sample_containers)
    assert [r.name.rsplit(".", 1)[-1] for r in results] == [
        "first_passes",
        "second_fails",
        "third_passes",
        "fourth_is_skipped",
    ]
    assert [r.status for r in results] == [
        Status.PASSED,
        Status.FAILED,
        Status.PASSED,
        Status.SKIPPED,
    ]
    assert results[1].message == "Arithmetic. Expected = 3. Actual = 2"


def test_run_all_class_uses_fresh_instances():
    results = run_all(sample_containers.InstanceTests)
    by_name = {r.name.rsplit(".", 1)[-1]: r for r in results}
    assert by_name["appends_first"].passed
    assert by_name["appends_second"].passed
    assert by_name["raises_unexpected"].errored
    assert isinstance(by_name["raises_unexpected"].cause, KeyError)


def test_run_all_registry():
    results = run_all(sample_containers.passing)
    assert [(r.name, r.status) for r in results] == [
        ("passing.division_by_zero", Status.PASSED),
        ("passing.not_ready", Status.SKIPPED),
        ("passing.string_join", Status.PASSED),
    ]


def test_run_all_continues_after_failures():
    registry = TestRegistry("mixed")
    registry.register("passes_a", lambda: None)
    registry.register("fails", lambda: assert_equals(1, 2))
    registry.register("passes_b", lambda: None)

    results = run_all(registry)
    assert [r.status for r in results] == [Status.PASSED, Status.FAILED, Status.PASSED]


def test_run_all_discovery_error_runs_nothing():
    calls = []

    class Broken:
        @test
        def runs(self):
            calls.append(1)

        @test
        def needs_argument(self, value):
            calls.append(value)

    with pytest.raises(DiscoveryError):
        run_all(Broken)
    assert calls == []


def test_run_all_empty_container():
    assert run_all(TestRegistry("empty")) == []


# --- Runner ---


@pytest.fixture
def run_config(tmp_path):
    return RunConfig(
        containers=["sample_containers", "sample_containers:passing"],
        output_dir=str(tmp_path / "runs"),
    )


def test_runner_creates_run_directory(tmp_path, run_config):
    runner = Runner(config=run_config, verbose=False)
    run_dir = runner.execute()

    assert run_dir.exists()
    assert run_dir.parent == tmp_path / "runs"
    assert (run_dir / "junit.xml").exists()
    assert (run_dir / "meta.yaml").exists()
    assert (run_dir / "debug.log").exists()


def test_runner_captures_results(run_config):
    runner = Runner(config=run_config, verbose=False)
    run_dir = runner.execute()

    assert list(runner.results) == ["sample_containers", "passing"]
    statuses = [r.status for r in runner.results["sample_containers"]]
    assert statuses == [Status.PASSED, Status.FAILED, Status.PASSED, Status.SKIPPED]

    xml = JUnitXml.fromfile(str(run_dir / "junit.xml"))
    suite = next(s for s in xml if s.name == "sample_containers")
    assert suite.tests == 4
    assert suite.failures == 1
    assert suite.skipped == 1
    props = {p.name for p in suite.properties()}
    assert "pass_rate" in props


def test_runner_writes_meta(run_config):
    runner = Runner(config=run_config, verbose=False, parallel=2)
    run_dir = runner.execute()

    meta = yaml.safe_load((run_dir / "meta.yaml").read_text())
    assert meta["run_id"] == run_dir.name
    assert meta["containers"] == ["sample_containers", "passing"]
    assert meta["parallel"] == 2
    assert meta["summary"]["total"] == 7
    assert meta["summary"]["passed"] == 4
    assert meta["summary"]["failed"] == 1
    assert meta["summary"]["skipped"] == 2
    assert "interrupted" not in meta
    assert "testframe_version" in meta


def test_runner_debug_log_records_failures(run_config):
    runner = Runner(config=run_config, verbose=False)
    run_dir = runner.execute()

    debug_log = (run_dir / "debug.log").read_text()
    assert "Starting test run" in debug_log
    assert "Arithmetic. Expected = 3. Actual = 2" in debug_log


def test_runner_parallel_keeps_declaration_order(tmp_path, monkeypatch):
    registry = TestRegistry("slow_first")
    release = threading.Event()

    def slow():
        release.wait(timeout=5)
        time.sleep(0.01)

    registry.register("slow", slow)
    registry.register("fast", release.set)
    monkeypatch.setattr(sample_containers, "slow_first", registry, raising=False)

    config = RunConfig(
        containers=["sample_containers:slow_first"], output_dir=str(tmp_path / "runs")
    )
    runner = Runner(config=config, verbose=False, parallel=2)
    runner.execute()

    results = runner.results["slow_first"]
    assert [r.name for r in results] == ["slow_first.slow", "slow_first.fast"]
    assert all(r.passed for r in results)


def test_runner_name_filter(run_config):
    runner = Runner(config=run_config, verbose=False, name_filter="*passes")
    runner.execute()

    names = [r.name for rs in runner.results.values() for r in rs]
    assert names == ["sample_containers.first_passes", "sample_containers.third_passes"]


def test_runner_uses_config_defaults(tmp_path):
    config = RunConfig(
        containers=["sample_containers:passing"],
        output_dir=str(tmp_path / "out"),
        name_filter="passing.string_*",
        parallel=3,
        verbose=True,
    )
    runner = Runner(config=config)
    assert runner.output_dir == tmp_path / "out"
    assert runner.name_filter == "passing.string_*"
    assert runner.parallel == 3
    assert runner.verbose is True


def test_runner_overrides_take_precedence(tmp_path, run_config):
    runner = Runner(
        config=run_config,
        output_dir=tmp_path / "elsewhere",
        name_filter="x*",
        verbose=True,
        parallel=4,
    )
    assert runner.output_dir == tmp_path / "elsewhere"
    assert runner.name_filter == "x*"
    assert runner.verbose is True
    assert runner.parallel == 4


def test_runner_discovery_error_is_raised(tmp_path):
    config = RunConfig(
        containers=["sample_containers", "sample_containers:Missing"],
        output_dir=str(tmp_path / "runs"),
    )
    runner = Runner(config=config, verbose=False)
    with pytest.raises(DiscoveryError, match="Missing"):
        runner.execute()
    assert runner.results == {}


def test_runner_logger_is_released_after_run(run_config):
    import logging

    Runner(config=run_config, verbose=False).execute()
    assert logging.getLogger("testframe_main").handlers == []


def test_runner_keyboard_interrupt_saves_partial_results(tmp_path, run_config, mocker):
    original_run = run
    calls = {"count": 0}

    def interrupting_run(identifier, logger=None):
        calls["count"] += 1
        if calls["count"] == 2:
            raise KeyboardInterrupt
        return original_run(identifier, logger)

    mocker.patch("testframe.runner.run", side_effect=interrupting_run)

    runner = Runner(config=run_config, verbose=False, parallel=1)
    run_dir = runner.execute()

    assert runner.interrupted
    meta = yaml.safe_load((run_dir / "meta.yaml").read_text())
    assert meta["interrupted"] is True
    assert (run_dir / "junit.xml").exists()
    completed = [r for rs in runner.results.values() for r in rs]
    assert all(isinstance(r, TestResult) for r in completed)
    assert len(completed) < 7


def test_runner_exposes_run_summary(run_config):
    runner = Runner(config=run_config, verbose=False)
    assert runner.summary is None
    runner.execute()

    assert runner.summary.total == 7
    assert runner.summary.failed == 1
    assert not runner.summary.all_passed
