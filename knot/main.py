"""knot-select CLI entrypoint."""

import json
import sys
from pathlib import Path
from typing import NoReturn, Optional

import click

from .config.loader import ConfigError, ConfigProvider, create_default_config
from .config.models import SelectionConfig, SelectionStrategy
from .config.presets import suggest_weight_adjustment
from .selection.api import create_dependency_graph, score_tasks, validate_task_dependencies
from .selection.errors import SelectionError
from .selection.project import analyze_project, recommend_for_project
from .selection.selector import TaskSelector
from .tasks.models import Task
from .tasks.source import FileTaskSource, TaskSourceError
from .utils.formatting import (
    format_dependency_graph,
    format_selection_result,
    format_task_score,
    generate_selection_summary,
)
from .utils.logging import setup_logging

CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"],
}

STRATEGY_CHOICE = click.Choice([s.value for s in SelectionStrategy])


def _fail(message: str) -> NoReturn:
    click.echo(f"✗ {message}", err=True)
    sys.exit(1)


def _load_config(ctx: click.Context) -> SelectionConfig:
    provider = ConfigProvider(ctx.obj["config_path"])
    try:
        return provider.load_config()
    except ConfigError as e:
        _fail(f"Configuration error: {e}")


def _load_tasks(tasks_path: Path) -> list[Task]:
    try:
        return FileTaskSource(tasks_path).get_tasks()
    except TaskSourceError as e:
        _fail(f"Task file error: {e}")


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option(
    "--config",
    "-c",
    default=".knot/config.yml",
    help="Path to configuration file",
    type=click.Path(exists=False, path_type=Path),
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)
@click.pass_context
def cli(ctx: click.Context, config: Path, verbose: bool) -> None:
    """knot-select - pick the next actionable task from a task snapshot."""
    setup_logging(level="DEBUG" if verbose else "WARNING")

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose


@cli.command(name="next")
@click.argument("tasks_file", type=click.Path(exists=False, path_type=Path))
@click.option("--strategy", "-s", type=STRATEGY_CHOICE, help="Override the configured strategy")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.pass_context
def next_task(
    ctx: click.Context, tasks_file: Path, strategy: Optional[str], as_json: bool
) -> None:
    """Select the next task to work on.

    TASKS_FILE: JSON or YAML task snapshot
    """
    config = _load_config(ctx)
    tasks = _load_tasks(tasks_file)

    try:
        selector = TaskSelector(SelectionStrategy(strategy) if strategy else None, config)
        result = selector.select(tasks)
    except SelectionError as e:
        if as_json:
            click.echo(json.dumps({"error": e.to_dict()}, indent=2), err=True)
            sys.exit(1)
        _fail(str(e))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        click.echo(format_selection_result(result, verbose=ctx.obj["verbose"]), nl=False)


@cli.command()
@click.argument("tasks_file", type=click.Path(exists=False, path_type=Path))
@click.option("--strategy", "-s", type=STRATEGY_CHOICE, help="Override the configured strategy")
@click.pass_context
def scores(ctx: click.Context, tasks_file: Path, strategy: Optional[str]) -> None:
    """Score all actionable tasks, best first."""
    config = _load_config(ctx)
    tasks = _load_tasks(tasks_file)
    chosen = SelectionStrategy(strategy) if strategy else config.strategy

    try:
        ranked = score_tasks(tasks, chosen, config)
    except SelectionError as e:
        _fail(str(e))

    if not ranked:
        click.echo("No actionable tasks")
        return
    for i, score in enumerate(ranked, 1):
        click.echo(f"{i}. {format_task_score(score)}")


@cli.command()
@click.argument("tasks_file", type=click.Path(exists=False, path_type=Path))
@click.pass_context
def validate(ctx: click.Context, tasks_file: Path) -> None:
    """Check a snapshot for circular and missing dependencies."""
    tasks = _load_tasks(tasks_file)
    findings = validate_task_dependencies(tasks)

    if not findings:
        click.echo("✓ No dependency problems found")
        return

    titles = {t.id: t.label for t in tasks}
    for finding in findings:
        click.echo(f"✗ [{finding.error_type}] {titles.get(finding.task_id, finding.task_id)}: {finding}")
    sys.exit(1)


@cli.command()
@click.argument("tasks_file", type=click.Path(exists=False, path_type=Path))
@click.pass_context
def recommend(ctx: click.Context, tasks_file: Path) -> None:
    """Recommend a selection strategy for a project."""
    tasks = _load_tasks(tasks_file)
    char = analyze_project(tasks)
    strategy, reason = recommend_for_project(char)
    dependency_count = sum(len(t.dependencies) for t in tasks)
    weights = suggest_weight_adjustment(len(tasks), dependency_count, char.max_hierarchy_depth)

    click.echo(f"Recommended strategy: {strategy.value}")
    click.echo(f"Reason: {reason}")
    click.echo(f"Complexity: {char.complexity.value}")
    click.echo(
        f"Suggested weights: dependent_count={weights.dependent_count} "
        f"priority={weights.priority} depth_first={weights.depth_first} "
        f"critical_path={weights.critical_path}"
    )


@cli.command()
@click.argument("tasks_file", type=click.Path(exists=False, path_type=Path))
@click.option("--details", "-d", is_flag=True, help="Show per-task details")
@click.pass_context
def graph(ctx: click.Context, tasks_file: Path, details: bool) -> None:
    """Show dependency graph statistics."""
    config = _load_config(ctx)
    tasks = _load_tasks(tasks_file)
    dependency_graph = create_dependency_graph(tasks, config)

    click.echo(format_dependency_graph(dependency_graph, show_details=details), nl=False)
    click.echo()
    click.echo(generate_selection_summary(tasks, dependency_graph), nl=False)


@cli.command()
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Overwrite existing configuration",
)
@click.pass_context
def init(ctx: click.Context, force: bool) -> None:
    """Write the default selection configuration."""
    config_path: Path = ctx.obj["config_path"]

    if config_path.exists() and not force:
        click.echo(f"Configuration already exists: {config_path}")
        click.echo("Use --force to overwrite")
        sys.exit(1)

    try:
        create_default_config(config_path)
    except ConfigError as e:
        _fail(f"Failed to create configuration: {e}")
    click.echo(f"✓ Created configuration: {config_path}")


@cli.command()
@click.pass_context
def templates(ctx: click.Context) -> None:
    """List built-in configuration templates."""
    for template in ConfigProvider(ctx.obj["config_path"]).list_templates():
        click.echo(f"{template.name:20} {template.config.strategy.value:18} {template.description}")


@cli.command(name="apply-template")
@click.argument("name")
@click.pass_context
def apply_template(ctx: click.Context, name: str) -> None:
    """Save a built-in template as the configuration."""
    config_path: Path = ctx.obj["config_path"]
    try:
        ConfigProvider(config_path).apply_template(name)
    except ConfigError as e:
        _fail(str(e))
    click.echo(f"✓ Applied template '{name}' to {config_path}")


if __name__ == "__main__":
    cli()
