"""Shared fixtures."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from knot.tasks.models import Task, TaskPriority, TaskState

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def project_id():
    return uuid4()


@pytest.fixture
def make_task(project_id):
    """Factory for tasks with strictly increasing creation times."""
    counter = {"n": 0}

    def _make(
        title: str,
        state: TaskState = TaskState.PENDING,
        priority: TaskPriority = TaskPriority.MEDIUM,
        dependencies=None,
        parent=None,
        created_offset=None,
    ) -> Task:
        counter["n"] += 1
        offset = counter["n"] if created_offset is None else created_offset
        return Task(
            project_id=project_id,
            title=title,
            state=state,
            priority=priority,
            dependencies=[d.id for d in dependencies or []],
            parent_id=parent.id if parent is not None else None,
            created_at=BASE_TIME + timedelta(minutes=offset),
        )

    return _make


class FakeClock:
    """Settable clock for TTL tests."""

    def __init__(self):
        self.now = BASE_TIME

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()
