"""Package-level selection functions."""

from typing import Optional, Sequence

from ..config.models import SelectionConfig, SelectionStrategy, default_config
from ..tasks.models import Task, TaskMap
from .analyzer import DependencyAnalyzer
from .errors import TaskValidationError
from .filter import TaskFilter
from .graph import DependencyGraph, TaskScore
from .project import analyze_project, recommend_for_project
from .selector import TaskSelector


def select_next_actionable_task(
    tasks: Sequence[Task], config: Optional[SelectionConfig] = None
) -> Task:
    """Select the next task using a full configuration (defaults when None).

    Raises:
        SelectionError: If nothing can be selected
        ConfigError: If the configuration is invalid
    """
    config = config if config is not None else default_config()
    return TaskSelector(config.strategy, config).select_next_actionable_task(tasks)


def select_actionable_task(tasks: Sequence[Task], strategy: SelectionStrategy) -> Task:
    """Select the next task with default settings and the given strategy."""
    return TaskSelector(strategy, default_config()).select_next_actionable_task(tasks)


def score_tasks(
    tasks: Sequence[Task],
    strategy: SelectionStrategy,
    config: Optional[SelectionConfig] = None,
) -> list[TaskScore]:
    """Score every actionable task under a strategy, best first.

    The caller's configuration is copied, never modified.
    """
    base = config if config is not None else default_config()
    return TaskSelector(strategy, base.model_copy(deep=True)).score_tasks(tasks)


def validate_task_dependencies(tasks: Sequence[Task]) -> list[TaskValidationError]:
    """Report structural dependency defects.

    Args:
        tasks: Full task list of a project

    Returns:
        One circular_dependency finding per cyclic task, then one
        missing_dependency finding per dangling dependency reference
    """
    graph = DependencyAnalyzer(default_config()).build_dependency_graph(tasks)
    findings = [
        TaskValidationError(
            task_id=task_id,
            message="Task is part of a circular dependency",
            error_type="circular_dependency",
        )
        for task_id in graph.cyclic_tasks
    ]

    task_map = TaskMap(tasks)
    for task in tasks:
        for dep_id in task.dependencies:
            if not task_map.exists(dep_id):
                findings.append(
                    TaskValidationError(
                        task_id=task.id,
                        message=f"Dependency {dep_id} not found",
                        error_type="missing_dependency",
                    )
                )
    return findings


def analyze_project_and_recommend_strategy(
    tasks: Sequence[Task],
) -> tuple[SelectionStrategy, str]:
    """Recommend a strategy for a project, with a one-line justification."""
    return recommend_for_project(analyze_project(tasks))


def get_actionable_tasks(
    tasks: Sequence[Task], config: Optional[SelectionConfig] = None
) -> list[Task]:
    """Return the actionable tasks of a snapshot.

    Raises:
        SelectionError: deadlock or no_actionable when nothing qualifies
    """
    config = config if config is not None else default_config()
    return TaskFilter(DependencyAnalyzer(config)).filter_actionable_tasks(tasks)


def create_dependency_graph(
    tasks: Sequence[Task], config: Optional[SelectionConfig] = None
) -> DependencyGraph:
    """Build the analyzed dependency graph without selecting anything."""
    config = config if config is not None else default_config()
    return DependencyAnalyzer(config).build_dependency_graph(tasks)
