"""Configuration models for task selection."""

import hashlib
import json
from enum import Enum

from pydantic import BaseModel, Field


class SelectionStrategy(str, Enum):
    """Task selection strategies."""

    CREATION_ORDER = "creation-order"
    DEPENDENCY_AWARE = "dependency-aware"
    DEPTH_FIRST = "depth-first"
    PRIORITY = "priority"
    CRITICAL_PATH = "critical-path"


class Weights(BaseModel):
    """Scoring weight factors (dependency-aware strategy only)."""

    dependent_count: float = Field(default=0.4, description="Weight of tasks unblocked")
    priority: float = Field(default=0.3, description="Weight of explicit priority")
    depth_first: float = Field(default=0.2, description="Weight of finishing subtasks first")
    critical_path: float = Field(default=0.1, description="Weight of critical path position")

    def total(self) -> float:
        """Return the sum of all weights."""
        return self.dependent_count + self.priority + self.depth_first + self.critical_path


class BehaviorConfig(BaseModel):
    """Behavioral flags."""

    allow_parent_with_subtasks: bool = Field(
        default=False, description="Allow parent tasks while subtasks are active"
    )
    prefer_in_progress: bool = Field(default=True, description="Prefer in-progress tasks")
    break_ties_by_creation: bool = Field(
        default=True, description="Use creation time as the tie breaker"
    )
    strict_dependencies: bool = Field(
        default=True, description="Missing dependency references block the task"
    )


class AdvancedConfig(BaseModel):
    """Advanced tuning knobs."""

    max_dependency_depth: int = Field(
        default=10, description="Maximum depth analyzed in dependency chains (0 = unbounded)"
    )
    score_threshold: float = Field(
        default=0.0, description="Tasks scoring below this are excluded (0 = off)"
    )
    cache_graphs: bool = Field(default=True, description="Cache dependency graphs")
    cache_duration_sec: float = Field(default=300.0, description="Graph cache TTL")


class SelectionConfig(BaseModel):
    """Main selection configuration model."""

    strategy: SelectionStrategy = Field(default=SelectionStrategy.DEPENDENCY_AWARE)
    weights: Weights = Field(default_factory=Weights)
    behavior: BehaviorConfig = Field(default_factory=BehaviorConfig)
    advanced: AdvancedConfig = Field(default_factory=AdvancedConfig)

    def config_hash(self) -> str:
        """Return a stable digest of the serialized configuration."""
        payload = json.dumps(self.model_dump(mode="json"), sort_keys=True)
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]


def default_config() -> SelectionConfig:
    """Return the balanced default configuration."""
    return SelectionConfig()
