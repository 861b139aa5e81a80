"""Scoring strategies turning task metrics into a single score."""

from typing import Callable

from ..config.models import SelectionConfig, SelectionStrategy, Weights
from ..tasks.models import TaskState, priority_to_score
from .graph import TaskScore

# Dependency-aware weights must sum to 1.0 within this tolerance.
WEIGHT_SUM_TOLERANCE = 0.1

IN_PROGRESS_BOOST = 1.2

STRATEGY_DESCRIPTIONS = {
    SelectionStrategy.CREATION_ORDER: "Select tasks in order of creation (oldest first)",
    SelectionStrategy.DEPENDENCY_AWARE: "Select tasks that unblock the most other tasks",
    SelectionStrategy.PRIORITY: "Select highest priority tasks first",
    SelectionStrategy.DEPTH_FIRST: "Complete subtasks before moving to other branches",
    SelectionStrategy.CRITICAL_PATH: "Focus on tasks on the longest dependency chain",
}


def _creation_order(score: TaskScore, config: SelectionConfig) -> float:
    # Older tasks get higher scores.
    return -score.task.created_at.timestamp()


def _dependency_aware(score: TaskScore, config: SelectionConfig) -> float:
    weights = config.weights
    priority = priority_to_score(score.priority)
    value = (
        score.unblocked_task_count * weights.dependent_count
        + priority * weights.priority
        + (score.hierarchy_depth + 1) * weights.depth_first
        + score.critical_path_length * weights.critical_path
    )
    if config.behavior.prefer_in_progress and score.task.state == TaskState.IN_PROGRESS:
        value *= IN_PROGRESS_BOOST
    return value


def _priority(score: TaskScore, config: SelectionConfig) -> float:
    return priority_to_score(score.priority) * 100 + score.dependent_count


def _depth_first(score: TaskScore, config: SelectionConfig) -> float:
    return (
        score.hierarchy_depth * 1000
        + priority_to_score(score.priority)
        - score.dependent_count * 10
    )


def _critical_path(score: TaskScore, config: SelectionConfig) -> float:
    return (
        score.critical_path_length * 100
        + score.unblocked_task_count * 50
        + priority_to_score(score.priority) * 10
    )


_STRATEGIES: dict[SelectionStrategy, Callable[[TaskScore, SelectionConfig], float]] = {
    SelectionStrategy.CREATION_ORDER: _creation_order,
    SelectionStrategy.DEPENDENCY_AWARE: _dependency_aware,
    SelectionStrategy.PRIORITY: _priority,
    SelectionStrategy.DEPTH_FIRST: _depth_first,
    SelectionStrategy.CRITICAL_PATH: _critical_path,
}


def calculate_score(
    strategy: SelectionStrategy, score: TaskScore, config: SelectionConfig
) -> float:
    """Score a task under the given strategy.

    Args:
        strategy: Scoring policy
        score: Task metrics
        config: Selection configuration (weights and behavior)

    Returns:
        Strategy score, higher is better
    """
    return _STRATEGIES[strategy](score, config)


def validate_weights(strategy: SelectionStrategy, weights: Weights) -> None:
    """Check weights for a strategy.

    Only dependency-aware consumes weights, so other strategies accept anything.

    Raises:
        ValueError: If weights are negative or do not sum to roughly 1.0
    """
    if strategy != SelectionStrategy.DEPENDENCY_AWARE:
        return

    for name, value in weights.model_dump().items():
        if value < 0:
            raise ValueError(f"weight {name} cannot be negative: {value}")

    total = weights.total()
    if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
        raise ValueError(f"weights must sum to approximately 1.0, got {total:.3f}")


def default_weights_for_strategy(strategy: SelectionStrategy) -> Weights:
    """Return the weight set a strategy is tuned for."""
    if strategy == SelectionStrategy.DEPENDENCY_AWARE:
        return Weights()
    if strategy == SelectionStrategy.PRIORITY:
        return Weights(dependent_count=0.0, priority=1.0, depth_first=0.0, critical_path=0.0)
    if strategy == SelectionStrategy.DEPTH_FIRST:
        return Weights(dependent_count=0.0, priority=0.0, depth_first=1.0, critical_path=0.0)
    if strategy == SelectionStrategy.CRITICAL_PATH:
        return Weights(dependent_count=0.3, priority=0.1, depth_first=0.0, critical_path=0.6)
    return Weights(dependent_count=0.0, priority=0.0, depth_first=0.0, critical_path=0.0)


def get_available_strategies() -> dict[SelectionStrategy, str]:
    """Return every strategy with a short description."""
    return dict(STRATEGY_DESCRIPTIONS)


def recommend_strategy(
    task_count: int, avg_dependencies: float, has_hierarchy: bool
) -> SelectionStrategy:
    """Pick a strategy from coarse project characteristics.

    Args:
        task_count: Number of tasks in the project
        avg_dependencies: Average dependencies per task
        has_hierarchy: Whether any task has a parent

    Returns:
        Recommended strategy
    """
    if task_count < 10:
        return SelectionStrategy.CREATION_ORDER
    if avg_dependencies > 2.0:
        return SelectionStrategy.DEPENDENCY_AWARE
    if has_hierarchy:
        return SelectionStrategy.DEPTH_FIRST
    return SelectionStrategy.DEPENDENCY_AWARE


def parse_strategy(name: str) -> SelectionStrategy:
    """Parse a strategy name, falling back to dependency-aware for unknown names."""
    try:
        return SelectionStrategy(name.strip().lower())
    except ValueError:
        return SelectionStrategy.DEPENDENCY_AWARE
