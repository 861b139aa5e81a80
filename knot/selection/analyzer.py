"""Dependency analyzer: builds (or reuses) the analyzed graph of a snapshot."""

import logging
from typing import Optional, Sequence
from uuid import UUID

from ..config.models import SelectionConfig
from ..tasks.models import Task, TaskMap
from .actionability import ActionabilityValidator
from .builder import build_graph
from .cache import CacheKey, GraphCache, snapshot_digest
from .cycles import detect_cycles
from .errors import task_not_found_error
from .graph import DependencyGraph, TaskScore
from .metrics import MetricsCalculator

logger = logging.getLogger(__name__)


def project_id_of(tasks: Sequence[Task]) -> Optional[UUID]:
    """Return the project id shared by a snapshot (first task wins)."""
    for task in tasks:
        if task.project_id is not None:
            return task.project_id
    return None


class DependencyAnalyzer:
    """Composes graph building, cycle detection, metrics and actionability."""

    def __init__(self, config: SelectionConfig, cache: Optional[GraphCache] = None):
        """Initialize analyzer.

        Args:
            config: Selection configuration
            cache: Graph cache to read through (None disables caching)
        """
        self.config = config
        self.cache = cache
        self.metrics = MetricsCalculator(config)
        self.validator = ActionabilityValidator(config)

    def build_dependency_graph(self, tasks: Sequence[Task]) -> DependencyGraph:
        """Return the fully analyzed graph of a snapshot.

        Args:
            tasks: Full task list of a project

        Returns:
            Graph with cycles, metrics, actionability and blocking reasons set
        """
        key = None
        if self.cache is not None and self.cache.enabled:
            key = CacheKey(
                project_id=project_id_of(tasks),
                task_hash=snapshot_digest(tasks),
                strategy=self.config.strategy,
                config_hash=self.config.config_hash(),
            )
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug(f"Graph cache hit for {len(tasks)} tasks")
                return cached
            logger.debug(f"Graph cache miss for {len(tasks)} tasks")

        graph = self._analyze(tasks)

        if key is not None:
            self.cache.put(key, graph)
        return graph

    def _analyze(self, tasks: Sequence[Task]) -> DependencyGraph:
        graph = build_graph(tasks)
        if not graph.nodes:
            return graph

        detect_cycles(graph)
        self.metrics.calculate_all(graph)

        task_map = TaskMap(tasks)
        self.validator.count_actionable_tasks(graph, task_map)
        for node in graph.nodes.values():
            if not node.is_actionable:
                self.validator.add_blocking_reasons(node, task_map)

        logger.debug(
            f"Analyzed graph: {graph.actionable_count}/{graph.task_count} actionable, "
            f"critical path {len(graph.critical_path)}"
        )
        return graph

    def calculate_task_score(self, task: Task, graph: DependencyGraph) -> TaskScore:
        """Collect the metrics of a task into an unscored TaskScore.

        Raises:
            SelectionError: If the task is not part of the graph
        """
        node = graph.get(task.id)
        if node is None:
            raise task_not_found_error(task.id, task.title)

        return TaskScore(
            task=task,
            dependent_count=node.dependent_count,
            unblocked_task_count=node.unblocked_count,
            dependency_depth=node.dependency_depth,
            critical_path_length=node.critical_path_length,
            hierarchy_depth=node.hierarchy_depth,
            priority=task.priority,
        )

    def validate_actionability(self, task: Task, task_map: TaskMap) -> bool:
        return self.validator.is_actionable(task, task_map)
