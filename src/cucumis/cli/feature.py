"""Feature CLI commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

console = Console()
app = typer.Typer(no_args_is_help=True)


def collect_features(paths: List[Path]) -> Dict[str, str]:
    """Read feature files, expanding directories to their ``*.feature`` files.

    Files inside a directory are keyed by their path relative to it, a
    file given directly by its name. Keys that collide are rejected.
    """
    features: Dict[str, str] = {}
    for path in paths:
        if path.is_dir():
            files = [(f.relative_to(path).as_posix(), f) for f in sorted(path.rglob("*.feature"))]
        else:
            files = [(path.name, path)]
        for key, file in files:
            if key in features:
                raise typer.BadParameter(f"Duplicate feature name: {key} ({file})")
            features[key] = file.read_text(encoding="utf-8")
    return features


@app.command("parse")
def parse_feature_cmd(
    file: Path = typer.Argument(..., help="Path to feature file", exists=True, dir_okay=False),
    output_json: bool = typer.Option(
        False, "--json", "-j", help="Output as JSON"
    ),
):
    """Parse and display feature structure."""
    from cucumis.core.gherkin.parser import FeatureParser

    feature = FeatureParser().parse_file(file)

    if output_json:
        data = {
            "name": feature.name,
            "scenarios": [s.to_dict() for s in feature.scenarios],
        }
        console.print_json(json.dumps(data, ensure_ascii=False))
        return

    tree = Tree(f"[bold]{feature.name or file.name}[/bold]")
    for scenario in feature.scenarios:
        branch = tree.add(f"[blue]Scenario:[/blue] {scenario.name}")
        for step in scenario.steps:
            extras = ""
            if step.has_doc_string:
                extras += " [dim](doc-string)[/dim]"
            if step.has_data_table:
                extras += f" [dim]({len(step.data_table)} table rows)[/dim]"
            branch.add(f"{step.keyword} {step.text}{extras}")
    console.print(tree)
    console.print(
        f"[dim]Total: {len(feature.scenarios)} scenarios, {feature.total_steps} steps[/dim]"
    )


@app.command("run")
def run_features_cmd(
    ctx: typer.Context,
    paths: List[Path] = typer.Argument(..., help="Feature files or directories", exists=True),
    env_file: Optional[Path] = typer.Option(
        None, "--env", "-e", help="KEY=VALUE environment file (default from config)"
    ),
    steps_file: Optional[Path] = typer.Option(
        None, "--steps", "-s", help="Python step definitions file", exists=True, dir_okay=False
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", "-b", help="Base URL override"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Results JSON path (default from config)"
    ),
    record_skipped: bool = typer.Option(
        False, "--record-skipped", help="Record steps after a failure as skipped"
    ),
):
    """Run feature files and report results."""
    import asyncio
    from cucumis.config.loader import load_config, load_environment_file
    from cucumis.core.gherkin.errors import StepDefinitionError
    from cucumis.core.gherkin.models import StepStatus
    from cucumis.core.gherkin.results import ResultAggregator, save_results
    from cucumis.core.gherkin.runner import run

    options = ctx.obj or {}
    verbose = options.get("verbose", False)
    quiet = options.get("quiet", False)

    config = load_config(options.get("config_file"))
    if record_skipped:
        config.runner.record_skipped_steps = True

    features = collect_features(paths)
    if not features:
        console.print("[yellow]No feature files found[/yellow]")
        raise typer.Exit(1)

    environment = load_environment_file(env_file or Path.cwd() / config.environment.env_file)
    step_source = steps_file.read_text(encoding="utf-8") if steps_file else None

    def on_step_complete(step, result):
        if quiet:
            return
        icons = {
            StepStatus.PASSED: "[green]✓[/green]",
            StepStatus.FAILED: "[red]✗[/red]",
        }
        icon = icons.get(result.status, "[yellow]-[/yellow]")
        console.print(f"  {icon} {step.keyword} {step.text} [dim]{result.duration_ms}ms[/dim]")
        if result.error:
            console.print(f"    [red]{result.error}[/red]")
        if verbose and step.has_doc_string:
            console.print(f"    [dim]{step.doc_string.strip()}[/dim]")
        if verbose and step.has_data_table:
            for row in step.data_table:
                console.print(f"    [dim]| {' | '.join(row)} |[/dim]")

    def on_scenario_complete(result):
        if quiet:
            return
        console.print(f"[bold]{result.feature}[/bold] › {result.scenario}: {result.status.value}")

    if not quiet:
        console.print(f"\n[bold blue]Running {len(features)} feature(s)[/bold blue]")

    try:
        results = asyncio.run(run(
            features,
            environment,
            step_source,
            config=config,
            base_url=base_url,
            on_step_complete=on_step_complete,
            on_scenario_complete=on_scenario_complete,
        ))
    except StepDefinitionError as e:
        console.print(f"[red]Error loading step definitions:[/red] {e}")
        raise typer.Exit(1)

    aggregator = ResultAggregator()
    aggregator.extend(results)
    _print_summary(aggregator)

    results_path = output or Path.cwd() / config.output.directory / config.output.filename
    save_results(results, results_path)
    console.print(f"  Output: {results_path}")

    if aggregator.failed:
        raise typer.Exit(1)


def _print_summary(aggregator) -> None:
    """Print per-scenario results table and totals."""
    console.print()
    table = Table(title="Results")
    table.add_column("Feature")
    table.add_column("Scenario")
    table.add_column("Status")
    table.add_column("Steps", justify="right")
    table.add_column("Duration", justify="right")

    colors = {"passed": "green", "failed": "red", "skipped": "yellow"}
    for result in aggregator.results:
        status = result.status.value
        color = colors.get(status, "white")
        table.add_row(
            result.feature,
            result.scenario,
            f"[{color}]{status}[/{color}]",
            str(len(result.steps)),
            f"{result.duration_ms}ms",
        )
    console.print(table)

    summary = aggregator.summary()
    console.print(f"  Total: {summary['total']} scenarios")
    console.print(f"  Passed: [green]{summary['passed']}[/green]")
    if summary["failed"]:
        console.print(f"  Failed: [red]{summary['failed']}[/red]")
    if summary["skipped"]:
        console.print(f"  Skipped: [yellow]{summary['skipped']}[/yellow]")
    console.print(f"  Duration: {summary['duration'] / 1000:.1f}s")
