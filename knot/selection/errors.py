"""Selection errors with optional task context and recovery hints."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping, Optional
from uuid import UUID


class SelectionErrorType(str, Enum):
    """Machine-readable selection failure kinds."""

    NO_TASKS = "no_tasks"
    NO_ACTIONABLE = "no_actionable"
    DEADLOCK = "deadlock"
    CIRCULAR_DEPENDENCY = "circular_dependency"
    INVALID_CONFIG = "invalid_config"
    VALIDATION = "validation"


@dataclass
class TaskValidationError:
    """Structural defect found on a single task."""

    task_id: UUID
    message: str
    error_type: str

    def __str__(self) -> str:
        return self.message


class SelectionError(Exception):
    """Task selection failure."""

    def __init__(
        self,
        error_type: SelectionErrorType,
        message: str,
        task_id: Optional[UUID] = None,
        task_title: str = "",
        project_id: Optional[UUID] = None,
        validation_errors: Optional[list[TaskValidationError]] = None,
        suggestions: Optional[list[str]] = None,
        recovery_action: str = "",
        task_ids: Optional[list[UUID]] = None,
    ):
        """Initialize selection error.

        Args:
            error_type: Failure kind
            message: Human-readable message
            task_id: Task the failure is about, if any
            task_title: Title of that task
            project_id: Project the failure is about, if any
            validation_errors: Per-task findings behind the failure
            suggestions: Remediation hints for end users
            recovery_action: Single recommended next step
            task_ids: All task ids implicated in the failure
        """
        super().__init__(message)
        self.error_type = error_type
        self.message = message
        self.task_id = task_id
        self.task_title = task_title
        self.project_id = project_id
        self.validation_errors = validation_errors or []
        self.suggestions = suggestions or []
        self.recovery_action = recovery_action
        self.task_ids = task_ids or []

    def __str__(self) -> str:
        text = self.message
        if self.task_id is not None:
            text = f"Task {self.task_id} ({self.task_title}): {text}"
        if self.suggestions:
            text += " Suggestions: " + "; ".join(self.suggestions)
        return text

    def to_dict(self) -> dict:
        """Return a JSON-shaped view of the error."""
        data: dict = {"type": self.error_type.value, "message": self.message}
        if self.task_id is not None:
            data["task_id"] = str(self.task_id)
            data["task_title"] = self.task_title
        if self.project_id is not None:
            data["project_id"] = str(self.project_id)
        if self.task_ids:
            data["task_ids"] = [str(t) for t in self.task_ids]
        if self.validation_errors:
            data["validation_errors"] = [
                {"task_id": str(v.task_id), "message": v.message, "type": v.error_type}
                for v in self.validation_errors
            ]
        if self.suggestions:
            data["suggestions"] = list(self.suggestions)
        if self.recovery_action:
            data["recovery_action"] = self.recovery_action
        return data


def unique_ids(ids: Iterable[UUID]) -> list[UUID]:
    """De-duplicate ids keeping first-seen order."""
    seen: set[UUID] = set()
    result = []
    for task_id in ids:
        if task_id not in seen:
            seen.add(task_id)
            result.append(task_id)
    return result


def circular_dependency_error(
    cyclic_tasks: Iterable[UUID], task_titles: Mapping[UUID, str]
) -> SelectionError:
    """Build the error raised when the graph contains cycles.

    Args:
        cyclic_tasks: Ids reported by cycle detection (may contain duplicates)
        task_titles: Task id -> title lookup

    Returns:
        SelectionError of kind circular_dependency
    """
    ids = unique_ids(cyclic_tasks)
    names = ", ".join(f"{task_titles.get(t) or t}" for t in ids)
    error = SelectionError(
        SelectionErrorType.CIRCULAR_DEPENDENCY,
        f"circular dependencies detected involving {len(ids)} task(s): {names}",
        suggestions=[
            "Review and remove circular references",
            "Break the cycle by removing one dependency",
            "Consider creating intermediate tasks to resolve the cycle",
        ],
        recovery_action="Resolve circular dependencies before continuing",
        task_ids=ids,
    )
    if 0 < len(ids) <= 3:
        error.task_id = ids[0]
        error.task_title = task_titles.get(ids[0], "")
    return error


def no_actionable_error(
    total_tasks: int, project_id: Optional[UUID] = None, message: Optional[str] = None
) -> SelectionError:
    """Build the error raised when nothing is workable and nothing is pending."""
    return SelectionError(
        SelectionErrorType.NO_ACTIONABLE,
        message or f"no actionable tasks found out of {total_tasks} total tasks",
        project_id=project_id,
        suggestions=[
            "Complete some dependencies to unblock tasks",
            "Create new tasks without dependencies",
            "Review task states and update as needed",
            "Check if tasks are incorrectly marked as completed",
        ],
        recovery_action="Complete existing tasks or create new actionable tasks",
    )


def deadlock_error(
    blocked: Mapping[UUID, list[str]], project_id: Optional[UUID] = None
) -> SelectionError:
    """Build the error raised when pending work exists but none can start.

    Args:
        blocked: Pending task id -> blocking reasons
        project_id: Project the snapshot belongs to

    Returns:
        SelectionError of kind deadlock
    """
    findings = [
        TaskValidationError(task_id=task_id, message="; ".join(reasons), error_type="blocked")
        for task_id, reasons in blocked.items()
    ]
    return SelectionError(
        SelectionErrorType.DEADLOCK,
        "no actionable tasks found: all pending tasks have unmet dependencies "
        "(possible deadlock scenario)",
        project_id=project_id,
        validation_errors=findings,
        suggestions=[
            "Check for dependencies on missing or cancelled tasks",
            "Complete or remove the blocking dependencies",
        ],
        recovery_action="Resolve dependency constraints of pending tasks",
        task_ids=list(blocked.keys()),
    )


def task_not_found_error(task_id: UUID, task_title: str = "") -> SelectionError:
    """Build the error raised when a task is missing from the dependency graph."""
    return SelectionError(
        SelectionErrorType.VALIDATION,
        "task not found in dependency graph",
        task_id=task_id,
        task_title=task_title,
        suggestions=["Verify the task exists in the project", "Check if the task ID is correct"],
        recovery_action="Create the missing task or verify the task ID",
    )


def dependency_not_completed_error(
    task_id: UUID, task_title: str, dependency_title: str
) -> SelectionError:
    """Build the error describing a task held back by an open dependency."""
    return SelectionError(
        SelectionErrorType.VALIDATION,
        "dependency not completed",
        task_id=task_id,
        task_title=task_title,
        suggestions=[
            f"Complete dependency '{dependency_title}' first",
            "Remove the dependency if it's no longer needed",
            "Check if the dependency is marked as completed",
        ],
        recovery_action="Complete or resolve dependency constraints",
    )


def invalid_config_error(
    config_field: str, value: str, valid_options: Optional[list[str]] = None
) -> SelectionError:
    """Build the error raised for an out-of-range configuration value."""
    suggestions = ["Check the configuration documentation", "Verify the configuration file format"]
    if valid_options:
        suggestions.insert(0, f"Use one of the valid options: {', '.join(valid_options)}")
    return SelectionError(
        SelectionErrorType.INVALID_CONFIG,
        f"invalid configuration value for {config_field}: {value}",
        suggestions=suggestions,
        recovery_action="Update configuration with valid values",
    )
