"""Plain-text rendering of selection results and graphs."""

from typing import Optional, Sequence

from ..selection.graph import DependencyGraph, TaskScore
from ..selection.selector import SelectionResult
from ..tasks.models import Task, TaskState

MAX_ALTERNATIVES_SHOWN = 5


def format_selection_result(result: Optional[SelectionResult], verbose: bool = False) -> str:
    """Render a selection result.

    Args:
        result: Selection to render
        verbose: Add score breakdown, timing and the top alternatives

    Returns:
        Multi-line text
    """
    if result is None:
        return "No selection result available"

    lines = [
        f"Selected: {result.task.label}",
        f"Strategy: {result.strategy.value}",
        f"Reason: {result.reason}",
    ]

    if verbose:
        score = result.score
        lines += [
            f"Score: {score.score:.2f}",
            f"Selection time: {result.execution_time * 1000:.2f}ms",
            "",
            "Score Details:",
            f"  Priority: {score.priority.value}",
            f"  Dependent count: {score.dependent_count}",
            f"  Unblocked count: {score.unblocked_task_count}",
            f"  Hierarchy depth: {score.hierarchy_depth}",
            f"  Critical path length: {score.critical_path_length}",
        ]
        if result.alternatives:
            lines += ["", f"Alternatives ({len(result.alternatives)}):"]
            for i, alt in enumerate(result.alternatives[:MAX_ALTERNATIVES_SHOWN], 1):
                lines.append(f"  {i}. {alt.task.label} (score: {alt.score:.2f})")
            if len(result.alternatives) > MAX_ALTERNATIVES_SHOWN:
                lines.append("  ...")

    return "\n".join(lines) + "\n"


def format_dependency_graph(graph: Optional[DependencyGraph], show_details: bool = False) -> str:
    """Render graph statistics, optionally with per-task details."""
    if graph is None:
        return "No dependency graph available"

    lines = [
        "Dependency Graph Analysis:",
        f"  Total tasks: {graph.task_count}",
        f"  Actionable tasks: {graph.actionable_count}",
        f"  Root tasks: {len(graph.root_tasks)}",
        f"  Leaf tasks: {len(graph.leaf_tasks)}",
    ]
    if graph.has_cycles:
        lines.append(f"  ! Cycles detected in {len(graph.cyclic_tasks)} tasks")
    if graph.critical_path:
        lines.append(f"  Critical path length: {len(graph.critical_path)}")

    if show_details:
        lines += ["", "Task Details:"]
        for node in graph.nodes.values():
            status = "✓" if node.is_actionable else "✗"
            lines.append(f"  {status} {node.task.label}")
            if node.dependencies:
                lines.append(f"    Dependencies: {len(node.dependencies)}")
            if node.dependents:
                lines.append(f"    Dependents: {len(node.dependents)}")
            if node.blocking_reasons:
                lines.append(f"    Blocked: {', '.join(node.blocking_reasons)}")

    return "\n".join(lines) + "\n"


def format_task_score(score: TaskScore) -> str:
    return (
        f"{score.task.label} (score: {score.score:.2f}, "
        f"priority: {score.priority.value}, dependents: {score.dependent_count})"
    )


def generate_selection_summary(
    tasks: Sequence[Task], graph: Optional[DependencyGraph] = None
) -> str:
    """Summarize progress and actionability of a project."""
    total = len(tasks)
    pending = sum(1 for t in tasks if t.state == TaskState.PENDING)
    in_progress = sum(1 for t in tasks if t.state == TaskState.IN_PROGRESS)
    completed = sum(1 for t in tasks if t.state == TaskState.COMPLETED)
    completion = completed / total * 100 if total else 0.0

    lines = [
        "Project Summary:",
        f"  Total tasks: {total}",
        f"  Completed: {completed} ({completion:.1f}%)",
        f"  In progress: {in_progress}",
        f"  Pending: {pending}",
    ]

    if graph is not None:
        lines.append(f"  Actionable: {graph.actionable_count}")
        workable = pending + in_progress
        if graph.actionable_count > 0 and workable:
            lines.append(f"  Actionable rate: {graph.actionable_count / workable * 100:.1f}%")
        if graph.has_cycles:
            lines.append("  ! Circular dependencies detected")

    return "\n".join(lines) + "\n"
