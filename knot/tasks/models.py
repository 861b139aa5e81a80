"""Task models consumed by the selection engine."""

from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Iterator, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class TaskState(str, Enum):
    """Task lifecycle states."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"
    CANCELLED = "cancelled"
    DELETION_PENDING = "deletion-pending"


class TaskPriority(str, Enum):
    """Task priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


PRIORITY_SCORES = {
    TaskPriority.HIGH: 3.0,
    TaskPriority.MEDIUM: 2.0,
    TaskPriority.LOW: 1.0,
}

# States a task can be picked up from.
WORKABLE_STATES = (TaskState.PENDING, TaskState.IN_PROGRESS)


def priority_to_score(priority: TaskPriority) -> float:
    """Convert a priority level to its scoring value (high=3, medium=2, low=1)."""
    return PRIORITY_SCORES.get(priority, PRIORITY_SCORES[TaskPriority.MEDIUM])


class Task(BaseModel):
    """A unit of work as delivered by the task source."""

    id: UUID = Field(default_factory=uuid4, description="Task identifier")
    project_id: Optional[UUID] = Field(default=None, description="Owning project")
    parent_id: Optional[UUID] = Field(default=None, description="Parent task (None for roots)")
    title: str = Field(default="", description="Short task title")
    description: str = Field(default="", description="Task description")
    state: TaskState = Field(default=TaskState.PENDING, description="Lifecycle state")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Priority level")
    dependencies: list[UUID] = Field(
        default_factory=list, description="Ids of tasks this task depends on"
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), description="Creation time"
    )

    @property
    def label(self) -> str:
        """Title if set, otherwise the id."""
        return self.title or str(self.id)

    def is_workable(self) -> bool:
        """Check if the task state allows work on it.

        Returns:
            True if pending or in progress
        """
        return self.state in WORKABLE_STATES


class TaskMap:
    """Id-indexed view over a task snapshot."""

    def __init__(self, tasks: Iterable[Task]):
        self._tasks: dict[UUID, Task] = {task.id: task for task in tasks}
        self._children: dict[UUID, list[Task]] = {}
        for task in self._tasks.values():
            if task.parent_id is not None:
                self._children.setdefault(task.parent_id, []).append(task)

    def get(self, task_id: UUID) -> Optional[Task]:
        return self._tasks.get(task_id)

    def exists(self, task_id: UUID) -> bool:
        return task_id in self._tasks

    def all(self) -> list[Task]:
        return list(self._tasks.values())

    def children_of(self, task_id: UUID) -> list[Task]:
        """Return tasks whose parent is the given task."""
        return list(self._children.get(task_id, []))

    def hierarchy_depth(self, task: Task) -> int:
        """Count parent hops from a task to its top-level ancestor.

        A parent id missing from the map still counts as one hop.
        """
        depth = 0
        current = task
        visited: set[UUID] = set()
        while current.parent_id is not None and current.id not in visited:
            visited.add(current.id)
            depth += 1
            parent = self._tasks.get(current.parent_id)
            if parent is None:
                break
            current = parent
        return depth

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(self._tasks.values())

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks
