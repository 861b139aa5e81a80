"""Unit tests for PerformanceMonitor."""

import pytest

from knot.config.models import SelectionStrategy
from knot.selection.monitor import PerformanceMonitor
from knot.selection.selector import TaskSelector


def _result(make_task, strategy, execution_time):
    result = TaskSelector(strategy).select([make_task("Only")])
    result.execution_time = execution_time
    return result


def test_average_execution_time(make_task):
    """Test averages are kept per strategy."""
    monitor = PerformanceMonitor()
    monitor.record_selection(_result(make_task, SelectionStrategy.PRIORITY, 0.2), 1, 1)
    monitor.record_selection(_result(make_task, SelectionStrategy.PRIORITY, 0.4), 1, 1)
    monitor.record_selection(_result(make_task, SelectionStrategy.DEPTH_FIRST, 1.0), 1, 1)

    assert monitor.average_execution_time(SelectionStrategy.PRIORITY) == pytest.approx(0.3)
    assert monitor.average_execution_time(SelectionStrategy.DEPTH_FIRST) == pytest.approx(1.0)
    assert monitor.average_execution_time(SelectionStrategy.CRITICAL_PATH) == 0.0


def test_keeps_most_recent_selections(make_task):
    """Test old entries are dropped past the limit."""
    monitor = PerformanceMonitor(max_entries=2)
    for seconds in (0.1, 0.2, 0.3):
        monitor.record_selection(_result(make_task, SelectionStrategy.PRIORITY, seconds), 1, 1)

    assert [m.execution_time for m in monitor.metrics()] == [0.2, 0.3]
