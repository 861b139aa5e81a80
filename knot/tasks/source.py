"""Task snapshot sources."""

import json
import logging
from pathlib import Path
from typing import Protocol

import yaml
from pydantic import ValidationError

from .models import Task

logger = logging.getLogger(__name__)


class TaskSourceError(Exception):
    """Task snapshot could not be read."""

    pass


class TaskSource(Protocol):
    """Anything that can hand over the full, current task list of a project."""

    def get_tasks(self) -> list[Task]:
        ...


def load_tasks(tasks_path: Path) -> list[Task]:
    """Load a task snapshot from a JSON or YAML file.

    The file holds either a list of task objects or an object with a
    ``tasks`` list. YAML is used for ``.yml``/``.yaml`` files, JSON otherwise.

    Args:
        tasks_path: Path to the snapshot file

    Returns:
        Tasks in file order

    Raises:
        TaskSourceError: If the file is missing or malformed
    """
    if not tasks_path.exists():
        raise TaskSourceError(f"Task file not found: {tasks_path}")

    try:
        with open(tasks_path, "r") as f:
            if tasks_path.suffix in (".yml", ".yaml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise TaskSourceError(f"Invalid task file {tasks_path}: {e}") from e

    if data is None:
        return []

    if isinstance(data, dict):
        data = data.get("tasks", [])

    if not isinstance(data, list):
        raise TaskSourceError(f"Expected a list of tasks in {tasks_path}")

    try:
        tasks = [Task(**item) for item in data]
    except (TypeError, ValidationError) as e:
        raise TaskSourceError(f"Task validation failed for {tasks_path}: {e}") from e

    logger.debug(f"Loaded {len(tasks)} tasks from {tasks_path}")
    return tasks


class FileTaskSource:
    """Task source backed by a snapshot file, re-read on every call."""

    def __init__(self, tasks_path: Path):
        """Initialize file source.

        Args:
            tasks_path: Path to the JSON or YAML snapshot
        """
        self.tasks_path = tasks_path

    def get_tasks(self) -> list[Task]:
        """Return the full task list from disk."""
        return load_tasks(self.tasks_path)
