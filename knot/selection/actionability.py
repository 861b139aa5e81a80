"""Actionability checks: can a task be worked on right now?"""

from ..config.models import SelectionConfig
from ..tasks.models import Task, TaskMap, TaskState, WORKABLE_STATES
from .graph import DependencyGraph, DependencyNode


class ActionabilityValidator:
    """Decides which tasks are currently workable."""

    def __init__(self, config: SelectionConfig):
        self.config = config

    def validate_and_explain(self, task: Task, task_map: TaskMap) -> tuple[bool, list[str]]:
        """Check a task and collect everything that blocks it.

        Args:
            task: Task to check
            task_map: Index over the full snapshot

        Returns:
            Tuple of (actionable, blocking reasons)
        """
        reasons: list[str] = []

        if task.state not in WORKABLE_STATES:
            reasons.append(f"task state is {task.state.value}")
            return False, reasons

        strict = self.config.behavior.strict_dependencies
        for dep_id in task.dependencies:
            dep = task_map.get(dep_id)
            if dep is None:
                if strict:
                    reasons.append(f"dependency {dep_id} not found")
            elif dep.state != TaskState.COMPLETED:
                reasons.append(f"dependency {dep.label} is not completed")

        if not self.config.behavior.allow_parent_with_subtasks and self.has_active_subtasks(
            task, task_map
        ):
            reasons.append("has active subtasks")

        return not reasons, reasons

    def is_actionable(self, task: Task, task_map: TaskMap) -> bool:
        actionable, _ = self.validate_and_explain(task, task_map)
        return actionable

    @staticmethod
    def has_active_subtasks(task: Task, task_map: TaskMap) -> bool:
        return any(child.state in WORKABLE_STATES for child in task_map.children_of(task.id))

    def count_actionable_tasks(self, graph: DependencyGraph, task_map: TaskMap) -> int:
        """Mark ``is_actionable`` on every node and store the total on the graph."""
        count = 0
        for node in graph.nodes.values():
            node.is_actionable = self.is_actionable(node.task, task_map)
            if node.is_actionable:
                count += 1
        graph.actionable_count = count
        return count

    def add_blocking_reasons(self, node: DependencyNode, task_map: TaskMap) -> None:
        """Append blocking reasons to a non-actionable node, skipping duplicates."""
        actionable, reasons = self.validate_and_explain(node.task, task_map)
        if actionable:
            return
        for reason in reasons:
            if reason not in node.blocking_reasons:
                node.blocking_reasons.append(reason)
