"""Provide the public `taskmd_planner` package exports."""

from __future__ import annotations

from .analysis import (
    DependencyAnalysis,
    DerivedTaskInfo,
    analyze,
    calculate_critical_path_tasks,
    calculate_depth_map,
    calculate_topological_order,
    is_blocked,
)
from .config import ConfigError, PlannerConfig, load_planner_config
from .filters import FilterError, apply_filters
from .graph import TaskGraph
from .metrics import TaskMetrics, calculate_metrics
from .model import EffortEstimate, Task, TaskPriority, TaskStatus
from .recommend import (
    Recommendation,
    RecommendOptions,
    ScoringWeights,
    is_actionable,
    recommend,
    score_task,
)
from .tracks import Track, TrackOptions, TrackResult, TrackTask, assign_tracks
from .validation import ValidationResult, validate_graph

__all__ = [
    "ConfigError",
    "DependencyAnalysis",
    "DerivedTaskInfo",
    "EffortEstimate",
    "FilterError",
    "PlannerConfig",
    "Recommendation",
    "RecommendOptions",
    "ScoringWeights",
    "Task",
    "TaskGraph",
    "TaskMetrics",
    "TaskPriority",
    "TaskStatus",
    "Track",
    "TrackOptions",
    "TrackResult",
    "TrackTask",
    "ValidationResult",
    "analyze",
    "apply_filters",
    "assign_tracks",
    "calculate_critical_path_tasks",
    "calculate_depth_map",
    "calculate_metrics",
    "calculate_topological_order",
    "is_actionable",
    "is_blocked",
    "load_planner_config",
    "recommend",
    "score_task",
    "validate_graph",
]
