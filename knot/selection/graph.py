"""Dependency graph data structures."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from ..tasks.models import Task, TaskPriority


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class DependencyNode:
    """A task plus the graph structure and metrics derived around it."""

    task_id: UUID
    task: Task
    dependencies: list[UUID] = field(default_factory=list)
    dependents: list[UUID] = field(default_factory=list)
    children: list[UUID] = field(default_factory=list)
    parent: Optional[UUID] = None
    dependent_count: int = 0
    child_count: int = 0
    dependency_depth: int = 0
    critical_path_length: int = 0
    unblocked_count: int = 0
    hierarchy_depth: int = 0
    is_actionable: bool = False
    blocking_reasons: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "task_id": str(self.task_id),
            "title": self.task.title,
            "state": self.task.state.value,
            "dependencies": [str(d) for d in self.dependencies],
            "dependents": [str(d) for d in self.dependents],
            "children": [str(c) for c in self.children],
            "parent": str(self.parent) if self.parent else None,
            "dependent_count": self.dependent_count,
            "child_count": self.child_count,
            "dependency_depth": self.dependency_depth,
            "critical_path_length": self.critical_path_length,
            "unblocked_count": self.unblocked_count,
            "hierarchy_depth": self.hierarchy_depth,
            "is_actionable": self.is_actionable,
            "blocking_reasons": list(self.blocking_reasons),
        }


@dataclass
class DependencyGraph:
    """Complete dependency graph of a task snapshot."""

    nodes: dict[UUID, DependencyNode] = field(default_factory=dict)
    root_tasks: list[UUID] = field(default_factory=list)
    leaf_tasks: list[UUID] = field(default_factory=list)
    critical_path: list[UUID] = field(default_factory=list)
    has_cycles: bool = False
    cyclic_tasks: list[UUID] = field(default_factory=list)
    task_count: int = 0
    actionable_count: int = 0
    analyzed_at: datetime = field(default_factory=_now)

    def get(self, task_id: UUID) -> Optional[DependencyNode]:
        return self.nodes.get(task_id)

    def titles(self) -> dict[UUID, str]:
        """Return task id -> title for every node."""
        return {task_id: node.task.title for task_id, node in self.nodes.items()}

    def to_dict(self) -> dict:
        return {
            "nodes": {str(k): v.to_dict() for k, v in self.nodes.items()},
            "root_tasks": [str(t) for t in self.root_tasks],
            "leaf_tasks": [str(t) for t in self.leaf_tasks],
            "critical_path": [str(t) for t in self.critical_path],
            "has_cycles": self.has_cycles,
            "cyclic_tasks": [str(t) for t in self.cyclic_tasks],
            "task_count": self.task_count,
            "actionable_count": self.actionable_count,
            "analyzed_at": self.analyzed_at.isoformat(),
        }


@dataclass
class TaskScore:
    """Scored task with the metrics that produced the score."""

    task: Task
    dependent_count: int = 0
    unblocked_task_count: int = 0
    dependency_depth: int = 0
    critical_path_length: int = 0
    hierarchy_depth: int = 0
    priority: TaskPriority = TaskPriority.MEDIUM
    score: float = 0.0
    selection_reason: str = ""
    calculated_at: datetime = field(default_factory=_now)

    def to_dict(self) -> dict:
        return {
            "task_id": str(self.task.id),
            "title": self.task.title,
            "state": self.task.state.value,
            "dependent_count": self.dependent_count,
            "unblocked_task_count": self.unblocked_task_count,
            "dependency_depth": self.dependency_depth,
            "critical_path_length": self.critical_path_length,
            "hierarchy_depth": self.hierarchy_depth,
            "priority": self.priority.value,
            "score": self.score,
            "selection_reason": self.selection_reason,
            "calculated_at": self.calculated_at.isoformat(),
        }
