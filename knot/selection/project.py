"""Project shape analysis and strategy recommendation."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Sequence

from ..config.models import SelectionStrategy
from ..tasks.models import Task, TaskMap, TaskPriority, priority_to_score


class ProjectComplexity(str, Enum):
    SIMPLE = "simple"
    MEDIUM = "medium"
    COMPLEX = "complex"


@dataclass
class ProjectCharacteristics:
    """Aggregate figures describing the shape of a project."""

    task_count: int = 0
    average_dependencies: float = 0.0
    max_dependencies: int = 0
    dependency_ratio: float = 0.0
    has_hierarchy: bool = False
    max_hierarchy_depth: int = 0
    hierarchy_ratio: float = 0.0
    average_priority: float = 0.0
    high_priority_ratio: float = 0.0
    complexity: ProjectComplexity = ProjectComplexity.SIMPLE
    analyzed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def analyze_project(tasks: Sequence[Task]) -> ProjectCharacteristics:
    """Measure dependency density, hierarchy and priority mix of a project.

    Args:
        tasks: Full task list of a project

    Returns:
        ProjectCharacteristics (all zero for an empty project)
    """
    char = ProjectCharacteristics(task_count=len(tasks))
    if not tasks:
        return char

    task_map = TaskMap(tasks)
    count = len(tasks)
    dep_counts = [len(t.dependencies) for t in tasks]
    depths = [task_map.hierarchy_depth(t) for t in tasks]

    char.average_dependencies = sum(dep_counts) / count
    char.max_dependencies = max(dep_counts)
    char.dependency_ratio = sum(1 for c in dep_counts if c > 0) / count

    char.max_hierarchy_depth = max(depths)
    char.hierarchy_ratio = sum(1 for t in tasks if t.parent_id is not None) / count
    char.has_hierarchy = char.max_hierarchy_depth > 0

    char.average_priority = sum(priority_to_score(t.priority) for t in tasks) / count
    char.high_priority_ratio = sum(1 for t in tasks if t.priority == TaskPriority.HIGH) / count

    char.complexity = determine_complexity(char)
    return char


def determine_complexity(char: ProjectCharacteristics) -> ProjectComplexity:
    if char.task_count < 10:
        return ProjectComplexity.SIMPLE
    if char.task_count > 50 or char.average_dependencies > 2.0 or char.max_hierarchy_depth > 3:
        return ProjectComplexity.COMPLEX
    return ProjectComplexity.MEDIUM


def recommend_for_project(char: ProjectCharacteristics) -> tuple[SelectionStrategy, str]:
    """Recommend a strategy and explain why."""
    if char.task_count < 5:
        return SelectionStrategy.CREATION_ORDER, "Simple project - creation order is sufficient"
    if char.dependency_ratio > 0.7 or char.average_dependencies > 2.0:
        return (
            SelectionStrategy.DEPENDENCY_AWARE,
            "High dependency complexity - focus on unblocking tasks",
        )
    if char.has_hierarchy and char.hierarchy_ratio > 0.5:
        return (
            SelectionStrategy.DEPTH_FIRST,
            "Hierarchical structure - complete branches systematically",
        )
    if char.high_priority_ratio > 0.3:
        return SelectionStrategy.PRIORITY, "Many high-priority tasks - focus on urgent work"
    return SelectionStrategy.DEPENDENCY_AWARE, "Balanced approach for general project management"
