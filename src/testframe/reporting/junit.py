from __future__ import annotations

from pathlib import Path

from junitparser import Error, Failure, JUnitXml, Skipped, TestCase, TestSuite

from testframe.metrics import summarize
from testframe.runner import Status, TestResult


def _short_name(result: TestResult) -> str:
    prefix = f"{result.identifier.container}."
    if result.name.startswith(prefix):
        return result.name[len(prefix):]
    return result.name


def write_junit(run_dir: Path, results: dict[str, list[TestResult]]) -> Path:
    """Write junit.xml with one suite per container, return path."""
    xml = JUnitXml()

    for container, container_results in results.items():
        suite = TestSuite(container)

        summary = summarize(container_results)
        suite.add_property("pass_rate", str(summary.pass_rate))
        for stat_name in ("avg", "stddev", "min", "max"):
            stat_val = getattr(summary.durations, stat_name)
            if stat_val is not None:
                suite.add_property(f"duration_{stat_name}", str(stat_val))

        for result in container_results:
            case = TestCase(_short_name(result))
            case.classname = container
            case.time = round(result.duration, 6)
            if result.status is Status.SKIPPED:
                case.result = [Skipped("skipped")]
            elif result.errored:
                error = Error(result.message or "", type(result.cause).__name__)
                case.result = [error]
            elif result.status is Status.FAILED:
                failure = Failure(result.message or "", "AssertionFailure")
                if result.cause is not None:
                    failure.text = f"Caused by {type(result.cause).__name__}: {result.cause}"
                case.result = [failure]
            suite.add_testcase(case)

        # Set time after add_testcase (add_testcase resets it via update_statistics)
        suite.time = summary.durations.total

        # Use append (not +=) to preserve properties and time
        xml.append(suite)

    junit_path = run_dir / "junit.xml"
    xml.write(str(junit_path), pretty=True)
    return junit_path


def generate_report(run_dir: Path) -> Path:
    """Render junit.xml → report.html using Jinja2 template, return path."""
    import yaml
    from jinja2 import Environment, FileSystemLoader

    junit_path = run_dir / "junit.xml"
    report_path = run_dir / "report.html"

    meta: dict = {}
    meta_path = run_dir / "meta.yaml"
    if meta_path.exists():
        meta = yaml.safe_load(meta_path.read_text()) or {}

    xml = JUnitXml.fromfile(str(junit_path))

    suites = []
    for suite in xml:
        cases = []
        for case in suite:
            status = "passed"
            message = ""
            detail = ""
            if case.result:
                outcome = case.result[0]
                status = {
                    "Failure": "failed",
                    "Error": "errored",
                    "Skipped": "skipped",
                }.get(type(outcome).__name__, "failed")
                message = outcome.message or ""
                detail = outcome.text or ""
            cases.append(
                {
                    "name": case.name,
                    "classname": case.classname,
                    "time": case.time,
                    "status": status,
                    "message": message,
                    "detail": detail,
                }
            )

        suites.append(
            {
                "name": suite.name,
                "tests": suite.tests,
                "failures": suite.failures,
                "errors": suite.errors,
                "skipped": suite.skipped,
                "time": suite.time,
                "properties": {p.name: p.value for p in suite.properties()},
                "cases": cases,
            }
        )

    totals = {
        "tests": sum(s["tests"] for s in suites),
        "failures": sum(s["failures"] for s in suites),
        "errors": sum(s["errors"] for s in suites),
        "skipped": sum(s["skipped"] for s in suites),
    }
    totals["passed"] = (
        totals["tests"] - totals["failures"] - totals["errors"] - totals["skipped"]
    )

    tmpl_dir = Path(__file__).parent / "templates"
    env = Environment(loader=FileSystemLoader(str(tmpl_dir)), autoescape=True)
    template = env.get_template("report.html.j2")

    html = template.render(
        suites=suites,
        totals=totals,
        run_dir=str(run_dir),
        meta=meta,
    )
    report_path.write_text(html, encoding="utf-8")
    return report_path
