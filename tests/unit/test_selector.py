"""Unit tests for TaskSelector."""

from uuid import uuid4

import pytest

from knot.config.loader import ConfigError
from knot.config.models import (
    AdvancedConfig,
    BehaviorConfig,
    SelectionConfig,
    SelectionStrategy,
    Weights,
)
from knot.selection.cache import GraphCache, ScoreCache
from knot.selection.errors import SelectionError, SelectionErrorType
from knot.selection.monitor import PerformanceMonitor
from knot.selection.selector import TaskSelector
from knot.tasks.models import TaskPriority, TaskState


def _complete(task):
    task.state = TaskState.COMPLETED


def test_linear_chain_selected_in_order(make_task):
    """Test A <- B <- C is worked through one task at a time."""
    a = make_task("A")
    b = make_task("B", dependencies=[a])
    c = make_task("C", dependencies=[b])
    tasks = [c, b, a]
    selector = TaskSelector()

    picked = []
    for _ in range(3):
        task = selector.select_next_actionable_task(tasks)
        picked.append(task.title)
        _complete(task)

    assert picked == ["A", "B", "C"]

    with pytest.raises(SelectionError) as exc_info:
        selector.select_next_actionable_task(tasks)
    assert exc_info.value.error_type == SelectionErrorType.NO_ACTIONABLE


def test_fan_out_prefers_unblocking_task(make_task):
    """Test the task that unblocks the most is picked."""
    u = make_task("Unblocker")
    dependents = [make_task(f"D{i}", dependencies=[u]) for i in range(3)]
    w = make_task("Standalone")

    result = TaskSelector().select([w] + dependents + [u])

    assert result.task is u
    assert result.score.score == pytest.approx(2.2)
    assert [alt.task for alt in result.alternatives] == [w]
    assert result.alternatives[0].score == pytest.approx(0.9)
    assert "will unblock 3 task(s)" in result.reason
    assert result.reason.startswith("selected using dependency-aware strategy")


def test_empty_snapshot():
    """Test an empty snapshot is reported."""
    with pytest.raises(SelectionError) as exc_info:
        TaskSelector().select([])
    assert exc_info.value.error_type == SelectionErrorType.NO_TASKS


def test_self_dependency_is_circular(make_task, project_id):
    """Test a self dependency fails as circular."""
    a = make_task("Loop")
    a.dependencies.append(a.id)
    b = make_task("Fine")

    with pytest.raises(SelectionError) as exc_info:
        TaskSelector().select([a, b])

    error = exc_info.value
    assert error.error_type == SelectionErrorType.CIRCULAR_DEPENDENCY
    assert error.task_id == a.id
    assert error.task_ids == [a.id]
    assert error.project_id == project_id
    assert "Loop" in error.message


def test_priority_strategy_breaks_ties_by_dependents(make_task):
    """Test priority ties go to the task with more dependents."""
    a = make_task("A", priority=TaskPriority.HIGH)
    b = make_task("B", priority=TaskPriority.HIGH)
    dependent = make_task("C", dependencies=[b])

    result = TaskSelector(SelectionStrategy.PRIORITY).select([a, b, dependent])

    assert result.task is b
    assert result.score.score == 301
    assert result.alternatives[0].score == 300


def test_missing_dependency_is_deadlock(make_task):
    """Test a missing dependency leaves a deadlock."""
    ghost = uuid4()
    task = make_task("Orphaned")
    task.dependencies.append(ghost)

    with pytest.raises(SelectionError) as exc_info:
        TaskSelector().select([task])

    error = exc_info.value
    assert error.error_type == SelectionErrorType.DEADLOCK
    assert error.task_ids == [task.id]
    assert error.validation_errors[0].message == f"dependency {ghost} not found"


def test_all_completed_is_no_actionable(make_task):
    """Test a finished snapshot raises no-actionable."""
    tasks = [make_task("A", state=TaskState.COMPLETED), make_task("B", state=TaskState.CANCELLED)]

    with pytest.raises(SelectionError) as exc_info:
        TaskSelector().select(tasks)

    assert exc_info.value.error_type == SelectionErrorType.NO_ACTIONABLE
    assert "no pending or in-progress tasks" in exc_info.value.message


def test_in_progress_preferred(make_task):
    """Test an in-progress task beats a pending one."""
    u = make_task("Unblocker")
    dependents = [make_task(f"D{i}", dependencies=[u]) for i in range(3)]
    running = make_task("Running", state=TaskState.IN_PROGRESS)
    tasks = [u, running] + dependents

    result = TaskSelector().select(tasks)
    assert result.task is running
    assert result.score.score == pytest.approx(1.08)
    assert [alt.task for alt in result.alternatives] == [u]
    assert "already in progress" in result.reason

    relaxed = SelectionConfig(behavior=BehaviorConfig(prefer_in_progress=False))
    assert TaskSelector(config=relaxed).select(tasks).task is u


def test_ties_broken_by_creation_time(make_task):
    """Test equal scores go to the older task."""
    newer = make_task("Newer", created_offset=10)
    older = make_task("Older", created_offset=5)

    assert TaskSelector().select([newer, older]).task is older


def test_ties_broken_by_id_without_creation(make_task):
    """Test equal scores and times go to the lower id."""
    a = make_task("A", created_offset=10)
    b = make_task("B", created_offset=5)
    config = SelectionConfig(behavior=BehaviorConfig(break_ties_by_creation=False))

    result = TaskSelector(config=config).select([a, b])

    assert result.task is min([a, b], key=lambda t: str(t.id))


def test_threshold_removes_everything(make_task):
    """Test a high threshold leaves nothing to pick."""
    config = SelectionConfig(advanced=AdvancedConfig(score_threshold=5.0))

    with pytest.raises(SelectionError) as exc_info:
        TaskSelector(config=config).select([make_task("A"), make_task("B")])

    assert exc_info.value.error_type == SelectionErrorType.NO_ACTIONABLE
    assert "threshold" in exc_info.value.message


def test_threshold_filters_low_scores(make_task):
    """Test scores below the threshold are dropped."""
    u = make_task("Unblocker")
    dependent = make_task("Dependent", dependencies=[u])
    w = make_task("Standalone")
    config = SelectionConfig(advanced=AdvancedConfig(score_threshold=1.0))

    scores = TaskSelector(config=config).score_tasks([u, dependent, w])

    assert [s.task for s in scores] == [u]


def test_score_tasks_sorted(make_task):
    """Test scores come back best first."""
    u = make_task("Unblocker")
    dependents = [make_task(f"D{i}", dependencies=[u]) for i in range(2)]
    w = make_task("Standalone", priority=TaskPriority.LOW)
    v = make_task("Other")

    scores = TaskSelector().score_tasks([w, v, u] + dependents)

    assert [s.task.title for s in scores] == ["Unblocker", "Other", "Standalone"]
    assert TaskSelector().score_tasks([]) == []


def test_strategy_override(make_task):
    """Test an explicit strategy overrides the config."""
    config = SelectionConfig(strategy=SelectionStrategy.PRIORITY)
    selector = TaskSelector(SelectionStrategy.CREATION_ORDER, config)

    assert selector.strategy == SelectionStrategy.CREATION_ORDER
    assert config.strategy == SelectionStrategy.PRIORITY

    older = make_task("Older", priority=TaskPriority.LOW)
    newer = make_task("Newer", priority=TaskPriority.HIGH)
    assert selector.select([newer, older]).task is older


def test_invalid_config_rejected():
    """Test an invalid config fails construction."""
    config = SelectionConfig(weights=Weights(dependent_count=1.0, priority=1.0))

    with pytest.raises(ConfigError) as exc_info:
        TaskSelector(config=config)

    assert exc_info.value.error_type == SelectionErrorType.INVALID_CONFIG


def test_update_config(make_task):
    """Test reconfiguring switches strategy and rejects bad configs."""
    low = make_task("Low", priority=TaskPriority.LOW)
    high = make_task("High", priority=TaskPriority.HIGH)
    selector = TaskSelector(SelectionStrategy.CREATION_ORDER)

    assert selector.select([low, high]).task is low

    selector.update_config(SelectionConfig(strategy=SelectionStrategy.PRIORITY))
    assert selector.strategy == SelectionStrategy.PRIORITY
    assert selector.select([low, high]).task is high

    with pytest.raises(ConfigError):
        selector.update_config(SelectionConfig(advanced=AdvancedConfig(score_threshold=-1)))
    assert selector.strategy == SelectionStrategy.PRIORITY


def test_selection_reason(make_task):
    """Test the last reason is kept on the selector."""
    selector = TaskSelector()
    assert selector.get_selection_reason() == "no selection has been made"

    result = selector.select([make_task("Only")])

    assert selector.get_selection_reason() == result.reason
    assert selector.last_result is result


def test_reason_falls_back_to_score(make_task):
    """Test the score is used when no reason applies."""
    result = TaskSelector(SelectionStrategy.PRIORITY).select([make_task("Only")])
    assert result.reason == "selected using priority strategy; score: 200.00"


def test_monitor_records_selection(make_task):
    """Test a selection is recorded in the monitor."""
    monitor = PerformanceMonitor()
    selector = TaskSelector(monitor=monitor)
    a = make_task("A")
    b = make_task("B", dependencies=[a])

    selector.select([a, b])

    recorded = monitor.metrics()
    assert len(recorded) == 1
    assert recorded[0].task_count == 2
    assert recorded[0].actionable_count == 1
    assert recorded[0].strategy == SelectionStrategy.DEPENDENCY_AWARE


def test_score_cache_reused_until_snapshot_changes(make_task):
    """Test cached scores are reused for an unchanged snapshot."""
    cache = ScoreCache()
    selector = TaskSelector(score_cache=cache)
    a = make_task("A")
    b = make_task("B")

    first = selector.score_tasks([a, b])
    second = selector.score_tasks([a, b])
    assert cache.size() == 2
    assert [s.score for s in first] == [s.score for s in second]
    assert first[0] is not second[0]

    b.priority = TaskPriority.HIGH
    third = selector.score_tasks([a, b])
    assert third[0].task is b
    assert third[0].score > first[0].score


def test_score_cache_returns_callers_tasks(make_task):
    """Test a cache hit still selects from the list passed in."""
    selector = TaskSelector(score_cache=ScoreCache())
    a = make_task("A")
    b = make_task("B")
    selector.select([a, b])

    copies = [a.model_copy(deep=True), b.model_copy(deep=True)]
    result = selector.select(copies)

    assert any(result.task is t for t in copies)
    assert all(any(alt.task is t for t in copies) for alt in result.alternatives)
    assert result.task is not a


def test_score_cache_reason_not_shared(make_task):
    """Test a selection reason does not leak into later scoring."""
    selector = TaskSelector(score_cache=ScoreCache())
    tasks = [make_task("A"), make_task("B")]

    assert selector.select(tasks).reason

    assert all(s.selection_reason == "" for s in selector.score_tasks(tasks))


def test_graph_cache_populated(make_task):
    """Test one graph is cached per distinct snapshot."""
    selector = TaskSelector()
    tasks = [make_task("A"), make_task("B")]

    selector.select(tasks)
    selector.select(tasks)
    assert selector.graph_cache.size() == 1

    tasks[0].state = TaskState.COMPLETED
    selector.select(tasks)
    assert selector.graph_cache.size() == 2


def test_graph_cache_stays_bounded(make_task, clock):
    """Test expired graphs are dropped as snapshots keep changing."""
    selector = TaskSelector(graph_cache=GraphCache(SelectionConfig(), clock=clock))
    tasks = [make_task(f"T{i}") for i in range(50)]

    for task in tasks[:-1]:
        selector.select(tasks)
        _complete(task)
        clock.advance(3600)

    assert selector.graph_cache.size() == 1


def test_graph_cache_disabled(make_task):
    """Test a disabled graph cache stays empty."""
    config = SelectionConfig(advanced=AdvancedConfig(cache_graphs=False))
    selector = TaskSelector(config=config)

    selector.select([make_task("A")])

    assert selector.graph_cache.size() == 0


def test_diamond_never_selects_blocked_task(make_task):
    """Test every pick in a diamond has its dependencies completed."""
    top = make_task("Top")
    left = make_task("Left", dependencies=[top])
    right = make_task("Right", dependencies=[top])
    bottom = make_task("Bottom", dependencies=[left, right])
    tasks = [bottom, right, left, top]
    by_id = {t.id: t for t in tasks}
    selector = TaskSelector()

    order = []
    for _ in tasks:
        task = selector.select_next_actionable_task(tasks)
        assert all(by_id[d].state == TaskState.COMPLETED for d in task.dependencies)
        order.append(task.title)
        _complete(task)

    assert order[0] == "Top"
    assert order[-1] == "Bottom"
