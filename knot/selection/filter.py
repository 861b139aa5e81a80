"""Reduces a task snapshot to its actionable tasks."""

import logging
from typing import Sequence

from ..tasks.models import (
    PRIORITY_SCORES,
    Task,
    TaskMap,
    TaskPriority,
    TaskState,
    WORKABLE_STATES,
)
from .analyzer import DependencyAnalyzer, project_id_of
from .errors import deadlock_error, no_actionable_error

logger = logging.getLogger(__name__)


class TaskFilter:
    """Filters tasks by workability and diagnoses why nothing qualifies."""

    def __init__(self, analyzer: DependencyAnalyzer):
        self.analyzer = analyzer

    def filter_actionable_tasks(self, tasks: Sequence[Task]) -> list[Task]:
        """Return the actionable tasks of a snapshot, in input order.

        Args:
            tasks: Full task list of a project

        Returns:
            Actionable tasks (empty for an empty snapshot)

        Raises:
            SelectionError: deadlock if pending work exists but none of it can
                start, no_actionable if nothing is pending or in progress
        """
        if not tasks:
            return []

        project_id = project_id_of(tasks)
        candidates = [t for t in tasks if t.state in WORKABLE_STATES]
        if not candidates:
            raise no_actionable_error(
                len(tasks),
                project_id=project_id,
                message="no pending or in-progress tasks available",
            )

        task_map = TaskMap(tasks)
        validator = self.analyzer.validator
        actionable = []
        blocked: dict = {}
        for task in candidates:
            ok, reasons = validator.validate_and_explain(task, task_map)
            if ok:
                actionable.append(task)
            elif task.state == TaskState.PENDING:
                blocked[task.id] = reasons

        if actionable:
            return actionable

        if any(t.state == TaskState.PENDING for t in tasks):
            logger.warning(f"Possible deadlock: {len(blocked)} pending task(s) cannot start")
            raise deadlock_error(blocked, project_id=project_id)
        raise no_actionable_error(len(tasks), project_id=project_id)

    def is_task_actionable(self, task: Task, tasks: Sequence[Task]) -> bool:
        return self.analyzer.validate_actionability(task, TaskMap(tasks))

    @staticmethod
    def separate_in_progress(tasks: Sequence[Task]) -> tuple[list[Task], list[Task]]:
        """Split tasks into (in-progress, pending); other states are dropped."""
        in_progress = [t for t in tasks if t.state == TaskState.IN_PROGRESS]
        pending = [t for t in tasks if t.state == TaskState.PENDING]
        return in_progress, pending

    @staticmethod
    def filter_by_hierarchy_depth(tasks: Sequence[Task], max_depth: int) -> list[Task]:
        """Keep tasks at most ``max_depth`` parent hops below the top level."""
        task_map = TaskMap(tasks)
        return [t for t in tasks if task_map.hierarchy_depth(t) <= max_depth]

    @staticmethod
    def filter_by_priority(tasks: Sequence[Task], min_priority: TaskPriority) -> list[Task]:
        """Keep tasks at least as important as ``min_priority``."""
        threshold = PRIORITY_SCORES[min_priority]
        return [t for t in tasks if PRIORITY_SCORES[t.priority] >= threshold]
