"""Built-in configuration templates."""

from dataclasses import dataclass
from typing import Optional

from .models import SelectionConfig, Weights, default_config


@dataclass
class ConfigTemplate:
    """Named, described configuration preset."""

    name: str
    description: str
    config: SelectionConfig


_PRESETS = {
    "priority-driven": (
        "Focus on high-priority tasks first",
        {
            "strategy": "priority",
            "weights": {"dependent_count": 0.2, "priority": 0.8, "depth_first": 0.0, "critical_path": 0.0},
            "behavior": {
                "allow_parent_with_subtasks": False,
                "prefer_in_progress": True,
                "break_ties_by_creation": True,
                "strict_dependencies": True,
            },
            "advanced": {
                "max_dependency_depth": 10,
                "score_threshold": 0.0,
                "cache_graphs": True,
                "cache_duration_sec": 300,
            },
        },
    ),
    "depth-first": (
        "Complete subtasks before moving to other branches",
        {
            "strategy": "depth-first",
            "weights": {"dependent_count": 0.1, "priority": 0.2, "depth_first": 0.7, "critical_path": 0.0},
            "behavior": {
                "allow_parent_with_subtasks": False,
                "prefer_in_progress": True,
                "break_ties_by_creation": True,
                "strict_dependencies": True,
            },
            "advanced": {
                "max_dependency_depth": 15,
                "score_threshold": 0.0,
                "cache_graphs": True,
                "cache_duration_sec": 300,
            },
        },
    ),
    "dependency-focused": (
        "Prioritize tasks that unblock others",
        {
            "strategy": "dependency-aware",
            "weights": {"dependent_count": 0.6, "priority": 0.1, "depth_first": 0.1, "critical_path": 0.2},
            "behavior": {
                "allow_parent_with_subtasks": True,
                "prefer_in_progress": True,
                "break_ties_by_creation": True,
                "strict_dependencies": True,
            },
            "advanced": {
                "max_dependency_depth": 20,
                "score_threshold": 0.0,
                "cache_graphs": True,
                "cache_duration_sec": 600,
            },
        },
    ),
    "critical-path": (
        "Focus on tasks that affect project timeline",
        {
            "strategy": "critical-path",
            "weights": {"dependent_count": 0.3, "priority": 0.2, "depth_first": 0.0, "critical_path": 0.5},
            "behavior": {
                "allow_parent_with_subtasks": True,
                "prefer_in_progress": True,
                "break_ties_by_creation": False,
                "strict_dependencies": True,
            },
            "advanced": {
                "max_dependency_depth": 25,
                "score_threshold": 1.0,
                "cache_graphs": True,
                "cache_duration_sec": 900,
            },
        },
    ),
    "legacy-compatible": (
        "Oldest task first, no scoring or caching",
        {
            "strategy": "creation-order",
            "weights": {"dependent_count": 0.0, "priority": 0.0, "depth_first": 0.0, "critical_path": 0.0},
            "behavior": {
                "allow_parent_with_subtasks": False,
                "prefer_in_progress": False,
                "break_ties_by_creation": True,
                "strict_dependencies": True,
            },
            "advanced": {
                "max_dependency_depth": 5,
                "score_threshold": 0.0,
                "cache_graphs": False,
                "cache_duration_sec": 0,
            },
        },
    ),
}


def get_builtin_templates() -> list[ConfigTemplate]:
    """Return fresh copies of every built-in template, default first."""
    templates = [
        ConfigTemplate(
            name="default",
            description="Balanced approach suitable for most projects",
            config=default_config(),
        )
    ]
    for name, (description, data) in _PRESETS.items():
        templates.append(
            ConfigTemplate(name=name, description=description, config=SelectionConfig(**data))
        )
    return templates


def get_template(name: str) -> Optional[ConfigTemplate]:
    """Look up a built-in template by name."""
    for template in get_builtin_templates():
        if template.name == name:
            return template
    return None


def suggest_weight_adjustment(task_count: int, dependency_count: int, hierarchy_depth: int) -> Weights:
    """Suggest dependency-aware weights from project shape.

    Args:
        task_count: Number of tasks
        dependency_count: Total number of dependency edges
        hierarchy_depth: Deepest parent chain

    Returns:
        Suggested weights (always summing to 1.0)
    """
    if dependency_count > task_count // 2:
        return Weights(dependent_count=0.5, priority=0.2, depth_first=0.1, critical_path=0.2)
    if hierarchy_depth > 3:
        return Weights(dependent_count=0.2, priority=0.3, depth_first=0.4, critical_path=0.1)
    return Weights()
