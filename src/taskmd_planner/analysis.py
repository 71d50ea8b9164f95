"""Dependency analysis: blocked state, depth, topological order, critical path.

All walks use explicit stacks with an on-path guard, so cyclic input
terminates with deterministic (if not meaningful) numbers instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from loguru import logger

from .model import Task, TaskStatus, build_task_map


def has_unmet_dependencies(task: Task, task_map: dict[str, Task]) -> bool:
    """True if any dependency is unknown or not completed."""
    for dep_id in task.dependencies:
        dep = task_map.get(dep_id)
        if dep is None or dep.status != TaskStatus.COMPLETED:
            return True
    return False


def is_blocked(task: Task, task_map: dict[str, Task]) -> bool:
    """True when the task has an unmet dependency and is not itself completed.

    A completed task whose dependencies are unmet reports ``False``.
    """
    return has_unmet_dependencies(task, task_map) and task.status != TaskStatus.COMPLETED


def calculate_depth_map(
    tasks: Iterable[Task],
    task_map: Optional[dict[str, Task]] = None,
) -> dict[str, int]:
    """Compute the dependency depth of every task.

    A task with no known dependency has depth 1; otherwise its depth is one
    more than the deepest known dependency. A dependency that is already on
    the current walk contributes 0.
    """
    tasks = list(tasks)
    if task_map is None:
        task_map = build_task_map(tasks)

    memo: dict[str, int] = {}

    for task in tasks:
        if task.id in memo:
            continue

        on_path: set[str] = {task.id}
        best: dict[str, int] = {task.id: 0}
        stack: list[tuple[str, int]] = [(task.id, 0)]

        while stack:
            node, idx = stack[-1]
            deps = task_map[node].dependencies
            if idx < len(deps):
                stack[-1] = (node, idx + 1)
                dep_id = deps[idx]
                if dep_id in memo:
                    best[node] = max(best[node], memo[dep_id])
                elif dep_id in task_map and dep_id not in on_path:
                    on_path.add(dep_id)
                    best[dep_id] = 0
                    stack.append((dep_id, 0))
                continue

            stack.pop()
            on_path.discard(node)
            memo[node] = best[node] + 1
            if stack:
                parent = stack[-1][0]
                best[parent] = max(best[parent], memo[node])

    return memo


def calculate_topological_order(
    tasks: Iterable[Task],
    task_map: Optional[dict[str, Task]] = None,
) -> dict[str, int]:
    """Assign each task a post-order position, dependencies first.

    Tasks are visited in list order and dependencies in their listed order.
    Lower numbers are further upstream. Counting starts at 0.
    """
    tasks = list(tasks)
    if task_map is None:
        task_map = build_task_map(tasks)

    order: dict[str, int] = {}
    visited: set[str] = set()
    counter = 0

    for task in tasks:
        if task.id in visited:
            continue
        visited.add(task.id)
        stack: list[tuple[str, int]] = [(task.id, 0)]

        while stack:
            node, idx = stack[-1]
            deps = task_map[node].dependencies
            if idx < len(deps):
                stack[-1] = (node, idx + 1)
                dep_id = deps[idx]
                if dep_id in task_map and dep_id not in visited:
                    visited.add(dep_id)
                    stack.append((dep_id, 0))
                continue

            stack.pop()
            order[node] = counter
            counter += 1

    return order


def calculate_critical_path_tasks(
    tasks: Iterable[Task],
    task_map: Optional[dict[str, Task]] = None,
    depth_map: Optional[dict[str, int]] = None,
) -> set[str]:
    """Return the IDs on any dependency chain of maximum depth.

    Every task at the maximum depth is included, then each chain is walked
    down through dependencies whose depth is exactly one less, so parallel
    longest chains are all marked.
    """
    tasks = list(tasks)
    if task_map is None:
        task_map = build_task_map(tasks)
    if depth_map is None:
        depth_map = calculate_depth_map(tasks, task_map)
    if not depth_map:
        return set()

    max_depth = max(depth_map.values())
    critical: set[str] = set()
    stack: list[tuple[str, int]] = []
    for task in tasks:
        if depth_map.get(task.id) == max_depth and task.id not in critical:
            critical.add(task.id)
            stack.append((task.id, max_depth))

    while stack:
        task_id, target = stack.pop()
        for dep_id in task_map[task_id].dependencies:
            if dep_id not in task_map or dep_id in critical:
                continue
            if depth_map.get(dep_id) == target - 1:
                critical.add(dep_id)
                stack.append((dep_id, target - 1))

    return critical


@dataclass
class DerivedTaskInfo:
    """Computed dependency facts about a single task."""

    id: str
    is_blocked: bool
    dependency_depth: int
    topological_order: int
    on_critical_path: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "is_blocked": self.is_blocked,
            "dependency_depth": self.dependency_depth,
            "topological_order": self.topological_order,
            "on_critical_path": self.on_critical_path,
        }


@dataclass
class DependencyAnalysis:
    """All dependency analysis results for one task list."""

    depth_map: dict[str, int] = field(default_factory=dict)
    topological_order: dict[str, int] = field(default_factory=dict)
    critical_path: set[str] = field(default_factory=set)
    blocked: set[str] = field(default_factory=set)

    @property
    def max_depth(self) -> int:
        return max(self.depth_map.values(), default=0)

    def derived(self, task_id: str) -> Optional[DerivedTaskInfo]:
        if task_id not in self.depth_map:
            return None
        return DerivedTaskInfo(
            id=task_id,
            is_blocked=task_id in self.blocked,
            dependency_depth=self.depth_map[task_id],
            topological_order=self.topological_order[task_id],
            on_critical_path=task_id in self.critical_path,
        )


def analyze(tasks: Iterable[Task]) -> DependencyAnalysis:
    """Run every dependency analysis over ``tasks`` in one pass."""
    tasks = list(tasks)
    task_map = build_task_map(tasks)
    depth_map = calculate_depth_map(tasks, task_map)
    result = DependencyAnalysis(
        depth_map=depth_map,
        topological_order=calculate_topological_order(tasks, task_map),
        critical_path=calculate_critical_path_tasks(tasks, task_map, depth_map),
        blocked={t.id for t in tasks if is_blocked(t, task_map)},
    )
    logger.debug(
        "Analyzed {} tasks: max depth {}, {} on critical path, {} blocked",
        len(task_map),
        result.max_depth,
        len(result.critical_path),
        len(result.blocked),
    )
    return result
