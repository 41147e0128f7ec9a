from __future__ import annotations

from pathlib import Path
import sys

import typer

app = typer.Typer(name="testframe", help="Discover and run marked tests")


def _add_app_dir(app_dir: str) -> None:
    path = str(Path(app_dir).resolve())
    if path not in sys.path:
        sys.path.insert(0, path)


def _build_config(
    containers: list[str] | None,
    config: str | None,
):
    from testframe.config import RunConfig, load_config

    if config is not None:
        config_path = Path(config)
        if not config_path.exists():
            typer.echo(f"Error: config file not found: {config}", err=True)
            raise typer.Exit(1)
        run_config = load_config(config_path)
        if containers:
            run_config = run_config.model_copy(update={"containers": containers})
        return run_config

    if not containers:
        typer.echo("Error: pass at least one container or --config", err=True)
        raise typer.Exit(1)
    return RunConfig(containers=containers)


@app.command()
def run(
    containers: list[str] | None = typer.Argument(
        None, help="Containers to run: package.module or package.module:Name"
    ),
    config: str | None = typer.Option(None, "--config", "-c", help="Path to run YAML config"),
    name_filter: str | None = typer.Option(
        None, "--filter", "-k", help="Only run tests whose qualified name matches this glob"
    ),
    output_dir: str | None = typer.Option(None, help="Output directory for run results"),
    app_dir: str = typer.Option(".", help="Directory added to the import path"),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output to terminal"
    ),
    parallel: int | None = typer.Option(
        None, "--parallel", "-p", min=1, max=100, help="Number of tests to run in parallel"
    ),
    no_report: bool = typer.Option(
        False, "--no-report", help="Do not render report.html after the run"
    ),
):
    """Run the tests of the given containers."""
    from pydantic import ValidationError

    from testframe.discovery import DiscoveryError
    from testframe.runner import Runner
    from testframe.reporting.junit import generate_report

    _add_app_dir(app_dir)

    try:
        run_config = _build_config(containers, config)
    except ValidationError as e:
        typer.echo(f"Error: invalid configuration: {e}", err=True)
        raise typer.Exit(1)

    runner = Runner(
        config=run_config,
        output_dir=Path(output_dir) if output_dir else None,
        name_filter=name_filter,
        verbose=verbose or None,
        parallel=parallel,
    )

    try:
        run_dir = runner.execute()
    except DiscoveryError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if runner.interrupted:
        typer.echo(f"Run interrupted. Partial results saved: {run_dir}")
    else:
        typer.echo(f"Run complete: {run_dir}")

    if not no_report:
        report_path = generate_report(run_dir)
        typer.echo(f"Report: {report_path}")
    if not runner.verbose:
        typer.echo(f"Debug log: {run_dir / 'debug.log'}")

    # Exit with non-zero if any test failed or the run was interrupted
    if runner.interrupted:
        raise typer.Exit(1)

    if runner.summary is None or not runner.summary.all_passed:
        raise typer.Exit(1)


@app.command("list")
def list_tests(
    containers: list[str] = typer.Argument(
        help="Containers to inspect: package.module or package.module:Name"
    ),
    app_dir: str = typer.Option(".", help="Directory added to the import path"),
):
    """List discovered tests in declaration order without running them."""
    from testframe.discovery import DiscoveryError, discover, load_container

    _add_app_dir(app_dir)

    for reference in containers:
        try:
            identifiers = discover(load_container(reference))
        except DiscoveryError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)
        for identifier in identifiers:
            suffix = "  [skip]" if identifier.skip else ""
            typer.echo(f"{identifier.name}{suffix}")


@app.command()
def report(
    run_dir: str = typer.Argument(help="Path to run output directory"),
):
    """Regenerate HTML report from a previous run."""
    from testframe.reporting.junit import generate_report

    run_path = Path(run_dir)
    if not run_path.exists() or not (run_path / "junit.xml").exists():
        typer.echo(f"Error: not a valid run directory: {run_dir}", err=True)
        raise typer.Exit(1)

    report_path = generate_report(run_path)
    typer.echo(f"Report generated: {report_path}")


@app.command()
def init(
    dir: str = typer.Option(
        "testframe", "--dir", help="Directory to initialize the test project in"
    ),
):
    """Initialize a new test project with an example config and test module."""
    project_dir = Path(dir)
    project_dir.mkdir(parents=True, exist_ok=True)

    config_file = project_dir / "testframe.yaml"
    if config_file.exists():
        typer.echo(f"testframe.yaml already exists in {dir}, skipping.")
        return

    config_file.write_text("""\
containers:
  - example_tests
  - example_tests:CalculatorTests
output_dir: ${TESTFRAME_OUTPUT:-runs}
parallel: 1
""")

    (project_dir / "example_tests.py").write_text('''\
from testframe import assert_equals, assert_throws, skip, test


@test
def addition():
    assert_equals(4, 2 + 2)


@test
@skip
def not_ready_yet():
    assert_equals(5, 2 + 2)


class CalculatorTests:
    def __init__(self):
        self.values = [1, 2, 3]

    @test
    def sums(self):
        assert_equals(6, sum(self.values), "Sum of values")

    @test
    def division_by_zero(self):
        assert_throws(lambda: 1 / 0, ZeroDivisionError)
''')

    typer.echo(f"Initialized test project in {dir}:")
    typer.echo("  testframe.yaml    - example run config")
    typer.echo("  example_tests.py  - example test module")


@app.command()
def schema(
    dir: str = typer.Option(
        "testframe", "--dir", help="Project directory for default schema/doc outputs"
    ),
    out: str | None = typer.Option(
        None,
        help="Output path for JSON Schema (defaults to <dir>/schemas/testframe.schema.json)",
    ),
    doc: str | None = typer.Option(
        None, help="Output path for schema docs (defaults to <dir>/docs/schema.md)"
    ),
):
    """Generate JSON Schema and docs for the run config YAML format."""
    from testframe.schema import write_json_schema, write_schema_doc

    project_dir = Path(dir)
    out_path = (
        Path(out)
        if out is not None
        else project_dir / "schemas" / "testframe.schema.json"
    )
    doc_path = Path(doc) if doc is not None else project_dir / "docs" / "schema.md"
    write_json_schema(out_path)
    write_schema_doc(doc_path)
    typer.echo(f"Wrote schema: {out_path}")
    typer.echo(f"Wrote docs: {doc_path}")
