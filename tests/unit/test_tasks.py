"""Unit tests for task models and snapshot loading."""

import json
from uuid import uuid4

import pytest
import yaml

from knot.tasks.models import (
    Task,
    TaskMap,
    TaskPriority,
    TaskState,
    priority_to_score,
)
from knot.tasks.source import FileTaskSource, TaskSourceError, load_tasks


def test_task_defaults():
    """Test Task default values."""
    task = Task(title="Write parser")
    assert task.state == TaskState.PENDING
    assert task.priority == TaskPriority.MEDIUM
    assert task.dependencies == []
    assert task.parent_id is None
    assert task.is_workable()


def test_task_state_values():
    """Test task state string values."""
    task = Task(title="t", state="in-progress")
    assert task.state == TaskState.IN_PROGRESS
    assert Task(title="t", state="deletion-pending").is_workable() is False


def test_priority_scores():
    """Test priority base scores."""
    assert priority_to_score(TaskPriority.HIGH) == 3
    assert priority_to_score(TaskPriority.MEDIUM) == 2
    assert priority_to_score(TaskPriority.LOW) == 1


def test_task_label_falls_back_to_id():
    """Test an untitled task is labelled by id."""
    task = Task()
    assert task.label == str(task.id)


def test_task_map_lookup(make_task):
    """Test tasks are found by id."""
    parent = make_task("Parent")
    child = make_task("Child", parent=parent)
    other = make_task("Other")
    task_map = TaskMap([parent, child, other])

    assert len(task_map) == 3
    assert task_map.get(child.id) is child
    assert task_map.get(uuid4()) is None
    assert task_map.exists(parent.id)
    assert child.id in task_map
    assert task_map.children_of(parent.id) == [child]
    assert task_map.children_of(other.id) == []
    assert [t.title for t in task_map] == ["Parent", "Child", "Other"]


def test_task_map_hierarchy_depth(make_task):
    """Test hierarchy depth through the task map."""
    root = make_task("Root")
    mid = make_task("Mid", parent=root)
    leaf = make_task("Leaf", parent=mid)
    orphan = Task(title="Orphan", parent_id=uuid4())
    task_map = TaskMap([root, mid, leaf, orphan])

    assert task_map.hierarchy_depth(root) == 0
    assert task_map.hierarchy_depth(leaf) == 2
    assert task_map.hierarchy_depth(orphan) == 1


def test_load_tasks_json_list(tmp_path, make_task):
    """Test a JSON list of tasks loads."""
    a = make_task("A")
    b = make_task("B", dependencies=[a])
    path = tmp_path / "tasks.json"
    path.write_text(json.dumps([a.model_dump(mode="json"), b.model_dump(mode="json")]))

    tasks = load_tasks(path)

    assert [t.title for t in tasks] == ["A", "B"]
    assert tasks[1].dependencies == [a.id]


def test_load_tasks_yaml_object(tmp_path):
    """Test a YAML document with a tasks key loads."""
    path = tmp_path / "tasks.yml"
    path.write_text(
        yaml.dump(
            {
                "tasks": [
                    {"title": "Design", "priority": "high"},
                    {"title": "Build", "state": "in-progress"},
                ]
            }
        )
    )

    tasks = FileTaskSource(path).get_tasks()

    assert tasks[0].priority == TaskPriority.HIGH
    assert tasks[1].state == TaskState.IN_PROGRESS


def test_load_tasks_empty_yaml(tmp_path):
    """Test an empty YAML file has no tasks."""
    path = tmp_path / "tasks.yaml"
    path.write_text("")
    assert load_tasks(path) == []


def test_load_tasks_missing_file(tmp_path):
    """Test a missing task file raises."""
    with pytest.raises(TaskSourceError, match="not found"):
        load_tasks(tmp_path / "nope.json")


def test_load_tasks_invalid_json(tmp_path):
    """Test malformed JSON raises."""
    path = tmp_path / "tasks.json"
    path.write_text("{not json")
    with pytest.raises(TaskSourceError, match="Invalid task file"):
        load_tasks(path)


def test_load_tasks_invalid_task(tmp_path):
    """Test an invalid task record raises."""
    path = tmp_path / "tasks.json"
    path.write_text(json.dumps([{"title": "x", "state": "sleeping"}]))
    with pytest.raises(TaskSourceError, match="validation failed"):
        load_tasks(path)


def test_load_tasks_rejects_scalar(tmp_path):
    """Test a scalar document is rejected."""
    path = tmp_path / "tasks.json"
    path.write_text("42")
    with pytest.raises(TaskSourceError, match="Expected a list"):
        load_tasks(path)
