"""Unit tests for selection errors."""

from uuid import uuid4

from knot.selection.errors import (
    SelectionError,
    SelectionErrorType,
    TaskValidationError,
    circular_dependency_error,
    deadlock_error,
    dependency_not_completed_error,
    invalid_config_error,
    no_actionable_error,
    task_not_found_error,
    unique_ids,
)


def test_plain_error_str():
    """Test an error without context renders its message."""
    error = SelectionError(SelectionErrorType.NO_TASKS, "no tasks available")
    assert str(error) == "no tasks available"
    assert error.to_dict() == {"type": "no_tasks", "message": "no tasks available"}


def test_error_str_with_task_and_suggestions():
    """Test task and suggestions are appended."""
    task_id = uuid4()
    error = SelectionError(
        SelectionErrorType.VALIDATION,
        "broken",
        task_id=task_id,
        task_title="Parser",
        suggestions=["fix it", "or remove it"],
    )
    assert str(error) == f"Task {task_id} (Parser): broken Suggestions: fix it; or remove it"


def test_unique_ids_keeps_order():
    """Test duplicate ids are dropped in order."""
    a, b = uuid4(), uuid4()
    assert unique_ids([a, b, a, b]) == [a, b]


def test_circular_dependency_error_few_tasks():
    """Test a short cycle lists every task."""
    a, b = uuid4(), uuid4()
    error = circular_dependency_error([a, b, a], {a: "Alpha", b: "Beta"})

    assert error.error_type == SelectionErrorType.CIRCULAR_DEPENDENCY
    assert error.message == "circular dependencies detected involving 2 task(s): Alpha, Beta"
    assert error.task_id == a
    assert error.task_title == "Alpha"
    assert error.task_ids == [a, b]
    assert error.recovery_action


def test_circular_dependency_error_many_tasks():
    """Test a long cycle keeps every id on the error."""
    ids = [uuid4() for _ in range(4)]
    error = circular_dependency_error(ids, {})

    assert error.task_id is None
    assert str(ids[0]) in error.message
    assert len(error.task_ids) == 4


def test_no_actionable_error():
    """Test the no-actionable error type and message."""
    project = uuid4()
    error = no_actionable_error(5, project_id=project)

    assert error.message == "no actionable tasks found out of 5 total tasks"
    assert error.to_dict()["project_id"] == str(project)
    assert len(error.suggestions) == 4

    custom = no_actionable_error(5, message="nothing to do")
    assert custom.message == "nothing to do"


def test_deadlock_error():
    """Test the deadlock error type and message."""
    a, b = uuid4(), uuid4()
    error = deadlock_error({a: ["dependency X is not completed"], b: ["has active subtasks", "x"]})

    assert error.error_type == SelectionErrorType.DEADLOCK
    assert "possible deadlock" in error.message
    assert error.task_ids == [a, b]
    assert [v.message for v in error.validation_errors] == [
        "dependency X is not completed",
        "has active subtasks; x",
    ]
    data = error.to_dict()
    assert data["validation_errors"][0] == {
        "task_id": str(a),
        "message": "dependency X is not completed",
        "type": "blocked",
    }


def test_validation_error_str():
    """Test a validation finding renders its message."""
    finding = TaskValidationError(task_id=uuid4(), message="Dependency x not found", error_type="missing_dependency")
    assert str(finding) == "Dependency x not found"


def test_task_level_errors():
    """Test task-scoped errors carry the task id."""
    task_id = uuid4()

    missing = task_not_found_error(task_id, "Ghost")
    assert missing.error_type == SelectionErrorType.VALIDATION
    assert missing.task_id == task_id

    pending = dependency_not_completed_error(task_id, "API", "Schema")
    assert "Complete dependency 'Schema' first" in pending.suggestions


def test_invalid_config_error():
    """Test the invalid-config error type."""
    error = invalid_config_error("strategy", "random", ["priority", "depth-first"])

    assert error.error_type == SelectionErrorType.INVALID_CONFIG
    assert error.message == "invalid configuration value for strategy: random"
    assert error.suggestions[0] == "Use one of the valid options: priority, depth-first"
