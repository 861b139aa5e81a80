"""Task selector: picks the single best task to work on next."""

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Sequence

from ..config.loader import validate_config
from ..config.models import SelectionConfig, SelectionStrategy, default_config
from ..tasks.models import Task, TaskPriority, TaskState
from .analyzer import DependencyAnalyzer, project_id_of
from .cache import GraphCache, ScoreCache, snapshot_digest
from .errors import (
    SelectionError,
    SelectionErrorType,
    circular_dependency_error,
    no_actionable_error,
)
from .filter import TaskFilter
from .graph import DependencyGraph, TaskScore
from .monitor import PerformanceMonitor
from .strategies import calculate_score

logger = logging.getLogger(__name__)


@dataclass
class SelectionResult:
    """Outcome of one selection."""

    task: Task
    score: TaskScore
    strategy: SelectionStrategy
    reason: str
    alternatives: list[TaskScore] = field(default_factory=list)
    selected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    execution_time: float = 0.0

    def to_dict(self) -> dict:
        return {
            "task": self.task.model_dump(mode="json"),
            "score": self.score.to_dict(),
            "strategy": self.strategy.value,
            "reason": self.reason,
            "alternatives": [alt.to_dict() for alt in self.alternatives],
            "selected_at": self.selected_at.isoformat(),
            "execution_time": self.execution_time,
        }


@dataclass
class _Pipeline:
    config: SelectionConfig
    analyzer: DependencyAnalyzer
    filter: TaskFilter


class TaskSelector:
    """Orchestrates analysis, filtering, scoring and tie-breaking."""

    def __init__(
        self,
        strategy: Optional[SelectionStrategy] = None,
        config: Optional[SelectionConfig] = None,
        score_cache: Optional[ScoreCache] = None,
        monitor: Optional[PerformanceMonitor] = None,
        graph_cache: Optional[GraphCache] = None,
    ):
        """Initialize selector.

        Args:
            strategy: Scoring strategy, overriding the one in ``config``
            config: Selection configuration (None uses defaults)
            score_cache: Optional per-task score memo
            monitor: Optional performance monitor to record into
            graph_cache: Graph cache to use instead of a private one

        Raises:
            ConfigError: If the configuration is invalid
        """
        config = config if config is not None else default_config()
        if strategy is not None and strategy != config.strategy:
            config = config.model_copy(update={"strategy": strategy})
        validate_config(config)

        if graph_cache is None:
            graph_cache = GraphCache(config)
        else:
            graph_cache.config = config
        self.graph_cache = graph_cache
        self.score_cache = score_cache
        self.monitor = monitor
        self.last_result: Optional[SelectionResult] = None
        self._lock = threading.Lock()
        self._pipeline = self._make_pipeline(config)

    def _make_pipeline(self, config: SelectionConfig) -> _Pipeline:
        analyzer = DependencyAnalyzer(config, cache=self.graph_cache)
        return _Pipeline(config=config, analyzer=analyzer, filter=TaskFilter(analyzer))

    @property
    def config(self) -> SelectionConfig:
        return self._pipeline.config

    @property
    def strategy(self) -> SelectionStrategy:
        return self._pipeline.config.strategy

    def update_config(self, config: SelectionConfig) -> None:
        """Swap in a new configuration.

        Analyzer, filter and strategy are rebuilt together and replaced in a
        single step, so concurrent selections see either the old or the new
        triad.

        Raises:
            ConfigError: If the configuration is invalid
        """
        validate_config(config)
        with self._lock:
            self.graph_cache.config = config
            self._pipeline = self._make_pipeline(config)
        logger.debug(f"Selector reconfigured: strategy={config.strategy.value}")

    def select_next_actionable_task(self, tasks: Sequence[Task]) -> Task:
        """Return the best task to work on next.

        Raises:
            SelectionError: If no task can be selected
        """
        return self.select(tasks).task

    def select(self, tasks: Sequence[Task]) -> SelectionResult:
        """Run a full selection and return the result with alternatives.

        Args:
            tasks: Full task list of a project

        Returns:
            SelectionResult for the winning task

        Raises:
            SelectionError: no_tasks, circular_dependency, deadlock or
                no_actionable
        """
        start = time.perf_counter()
        pipeline = self._pipeline

        if not tasks:
            raise SelectionError(SelectionErrorType.NO_TASKS, "no tasks available")

        graph = self._checked_graph(pipeline, tasks)
        actionable = pipeline.filter.filter_actionable_tasks(tasks)
        scores = self._score(pipeline, actionable, graph, tasks)

        threshold = pipeline.config.advanced.score_threshold
        if threshold > 0:
            scores = [s for s in scores if s.score >= threshold]
        if not scores:
            raise no_actionable_error(
                len(tasks),
                project_id=project_id_of(tasks),
                message=f"no task scored at or above the threshold {threshold}",
            )

        best, alternatives = self._pick(pipeline.config, scores)
        best.selection_reason = self._reason(pipeline.config.strategy, best)

        result = SelectionResult(
            task=best.task,
            score=best,
            strategy=pipeline.config.strategy,
            reason=best.selection_reason,
            alternatives=alternatives,
            execution_time=time.perf_counter() - start,
        )
        self.last_result = result
        if self.monitor is not None:
            self.monitor.record_selection(result, len(tasks), len(actionable))

        logger.info(f"Selected task: {best.task.label} ({result.reason})")
        return result

    def score_tasks(self, tasks: Sequence[Task]) -> list[TaskScore]:
        """Score every actionable task, best first.

        Raises:
            SelectionError: On cycles, deadlock or when nothing is actionable
        """
        pipeline = self._pipeline
        if not tasks:
            return []
        graph = self._checked_graph(pipeline, tasks)
        actionable = pipeline.filter.filter_actionable_tasks(tasks)
        scores = self._score(pipeline, actionable, graph, tasks)
        threshold = pipeline.config.advanced.score_threshold
        if threshold > 0:
            scores = [s for s in scores if s.score >= threshold]
        return sorted(scores, key=self._sort_key(pipeline.config))

    def get_selection_reason(self) -> str:
        if self.last_result is None:
            return "no selection has been made"
        return self.last_result.reason

    def _checked_graph(self, pipeline: _Pipeline, tasks: Sequence[Task]) -> DependencyGraph:
        graph = pipeline.analyzer.build_dependency_graph(tasks)
        if graph.has_cycles:
            error = circular_dependency_error(graph.cyclic_tasks, graph.titles())
            error.project_id = project_id_of(tasks)
            raise error
        return graph

    def _score(
        self,
        pipeline: _Pipeline,
        actionable: Sequence[Task],
        graph: DependencyGraph,
        tasks: Sequence[Task],
    ) -> list[TaskScore]:
        fingerprint = None
        if self.score_cache is not None:
            fingerprint = f"{snapshot_digest(tasks)}:{pipeline.config.config_hash()}"

        scores = []
        for task in actionable:
            score = pipeline.analyzer.calculate_task_score(task, graph)
            cached = None
            if fingerprint is not None:
                cached = self.score_cache.get(task.id, fingerprint)

            if cached is not None:
                score.score = cached
            else:
                score.score = calculate_score(pipeline.config.strategy, score, pipeline.config)
                if fingerprint is not None:
                    self.score_cache.put(task.id, score.score, fingerprint)
            scores.append(score)
        return scores

    @staticmethod
    def _sort_key(config: SelectionConfig):
        by_creation = config.behavior.break_ties_by_creation

        def key(score: TaskScore):
            created = score.task.created_at.timestamp() if by_creation else 0.0
            return (-score.score, created, str(score.task.id))

        return key

    def _pick(
        self, config: SelectionConfig, scores: list[TaskScore]
    ) -> tuple[TaskScore, list[TaskScore]]:
        key = self._sort_key(config)
        if config.behavior.prefer_in_progress:
            in_progress = sorted(
                (s for s in scores if s.task.state == TaskState.IN_PROGRESS), key=key
            )
            if in_progress:
                pending = sorted(
                    (s for s in scores if s.task.state != TaskState.IN_PROGRESS), key=key
                )
                return in_progress[0], in_progress[1:] + pending

        ranked = sorted(scores, key=key)
        return ranked[0], ranked[1:]

    @staticmethod
    def _reason(strategy: SelectionStrategy, score: TaskScore) -> str:
        factors = []
        if score.unblocked_task_count > 0:
            factors.append(f"will unblock {score.unblocked_task_count} task(s)")
        if score.priority == TaskPriority.HIGH:
            factors.append("high priority")
        if score.dependent_count > 0:
            factors.append(f"{score.dependent_count} task(s) depend on this")
        if score.task.state == TaskState.IN_PROGRESS:
            factors.append("already in progress")
        if score.hierarchy_depth > 0:
            factors.append("subtask (completing branch)")
        if score.critical_path_length > 1:
            factors.append(f"on critical path (length {score.critical_path_length})")
        if not factors:
            factors.append(f"score: {score.score:.2f}")
        return "; ".join([f"selected using {strategy.value} strategy"] + factors)
