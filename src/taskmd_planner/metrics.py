"""Summary statistics for a task set."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Iterable

from .analysis import calculate_depth_map
from .model import Task, build_task_map

UNSET = "unset"


@dataclass
class TaskMetrics:
    total_tasks: int = 0
    tasks_by_status: dict[str, int] = field(default_factory=dict)
    tasks_by_priority: dict[str, int] = field(default_factory=dict)
    tasks_by_effort: dict[str, int] = field(default_factory=dict)
    # Tasks declaring at least one dependency, met or not.
    blocked_tasks_count: int = 0
    critical_path_length: int = 0
    max_dependency_depth: int = 0
    avg_dependencies_per_task: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_tasks": self.total_tasks,
            "tasks_by_status": dict(self.tasks_by_status),
            "tasks_by_priority": dict(self.tasks_by_priority),
            "tasks_by_effort": dict(self.tasks_by_effort),
            "blocked_tasks_count": self.blocked_tasks_count,
            "critical_path_length": self.critical_path_length,
            "max_dependency_depth": self.max_dependency_depth,
            "avg_dependencies_per_task": self.avg_dependencies_per_task,
        }


def calculate_metrics(tasks: Iterable[Task]) -> TaskMetrics:
    """Count tasks by status, priority and effort and measure chain depth."""
    tasks = list(tasks)
    metrics = TaskMetrics(total_tasks=len(tasks))
    if not tasks:
        return metrics

    metrics.tasks_by_status = dict(Counter(t.status.value for t in tasks))
    metrics.tasks_by_priority = dict(Counter(t.priority_value or UNSET for t in tasks))
    metrics.tasks_by_effort = dict(Counter(t.effort_value or UNSET for t in tasks))
    metrics.blocked_tasks_count = sum(1 for t in tasks if t.dependencies)

    total_deps = sum(len(t.dependencies) for t in tasks)
    metrics.avg_dependencies_per_task = total_deps / len(tasks)

    depth_map = calculate_depth_map(tasks, build_task_map(tasks))
    longest = max(depth_map.values(), default=0)
    # The longest chain and the deepest task coincide for a depth-based walk.
    metrics.critical_path_length = longest
    metrics.max_dependency_depth = longest
    return metrics
