"""Dependency graph over a task list.

Edges run from a dependency to its dependent. References to IDs that are not
in the loaded task set stay on the task but never become edges, so every
traversal here only walks known tasks.
"""

from __future__ import annotations

from collections import deque
from dataclasses import replace
from typing import Iterable

from loguru import logger

from .model import Task, build_task_map

_UNVISITED = 0
_ON_STACK = 1
_DONE = 2


class TaskGraph:
    """Adjacency view of a task list with traversal and cycle detection."""

    def __init__(self, tasks: Iterable[Task]) -> None:
        self.tasks: list[Task] = list(tasks)
        self.task_map: dict[str, Task] = build_task_map(self.tasks)
        # task ID -> IDs of tasks that depend on it
        self.adjacency: dict[str, list[str]] = {tid: [] for tid in self.task_map}
        # task ID -> IDs of known tasks it depends on
        self.rev_adjacency: dict[str, list[str]] = {tid: [] for tid in self.task_map}

        seen_edges: set[tuple[str, str]] = set()
        for task in self.tasks:
            for dep_id in task.dependencies:
                if dep_id not in self.task_map:
                    continue
                edge = (dep_id, task.id)
                if edge in seen_edges:
                    continue
                seen_edges.add(edge)
                self.adjacency[dep_id].append(task.id)
                self.rev_adjacency[task.id].append(dep_id)

        logger.debug("Built task graph: {} tasks, {} edges", len(self.task_map), len(seen_edges))

    def __contains__(self, task_id: object) -> bool:
        return task_id in self.task_map

    def __len__(self) -> int:
        return len(self.task_map)

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def _reachable(self, start: str, edges: dict[str, list[str]]) -> set[str]:
        visited: set[str] = {start}
        queue: deque[str] = deque([start])
        while queue:
            current = queue.popleft()
            for nxt in edges.get(current, []):
                if nxt not in visited:
                    visited.add(nxt)
                    queue.append(nxt)
        visited.discard(start)
        return visited

    def get_upstream(self, task_id: str) -> set[str]:
        """Return every task ``task_id`` transitively depends on."""
        return self._reachable(task_id, self.rev_adjacency)

    def get_downstream(self, task_id: str) -> set[str]:
        """Return every task that transitively depends on ``task_id``."""
        return self._reachable(task_id, self.adjacency)

    def downstream_counts(self) -> dict[str, int]:
        """Number of transitive dependents for each task in the graph."""
        return {t.id: len(self.get_downstream(t.id)) for t in self.tasks}

    # ------------------------------------------------------------------
    # Subgraphs
    # ------------------------------------------------------------------

    def filter_tasks(self, keep: Iterable[str]) -> "TaskGraph":
        """Return a new graph restricted to the IDs in ``keep``.

        Kept tasks are copied with their dependency lists pruned to kept IDs;
        the input tasks are left untouched.
        """
        keep_ids = set(keep)
        kept: list[Task] = []
        for task in self.tasks:
            if task.id not in keep_ids:
                continue
            deps = [d for d in task.dependencies if d in keep_ids]
            kept.append(replace(task, dependencies=deps))
        return TaskGraph(kept)

    # ------------------------------------------------------------------
    # Cycles
    # ------------------------------------------------------------------

    def detect_cycles(self) -> list[list[str]]:
        """Find dependency cycles with a three-colour DFS.

        Each cycle is the path slice from the re-entered node to the top of
        the stack, following dependency direction. A cycle made only of nodes
        that were already reported is skipped.

        Returns:
            A list of cycles (possibly empty), each an ordered list of IDs.
        """
        state: dict[str, int] = {tid: _UNVISITED for tid in self.task_map}
        cycles: list[list[str]] = []
        reported: set[str] = set()

        for task in self.tasks:
            if state[task.id] != _UNVISITED:
                continue

            path: list[str] = [task.id]
            state[task.id] = _ON_STACK
            stack: list[tuple[str, int]] = [(task.id, 0)]

            while stack:
                node, idx = stack[-1]
                deps = self.rev_adjacency[node]
                if idx >= len(deps):
                    stack.pop()
                    path.pop()
                    state[node] = _DONE
                    continue

                stack[-1] = (node, idx + 1)
                dep_id = deps[idx]
                dep_state = state[dep_id]
                if dep_state == _UNVISITED:
                    state[dep_id] = _ON_STACK
                    path.append(dep_id)
                    stack.append((dep_id, 0))
                elif dep_state == _ON_STACK:
                    cycle = path[path.index(dep_id):]
                    if not reported.issuperset(cycle):
                        cycles.append(list(cycle))
                        reported.update(cycle)

        if cycles:
            logger.warning("Detected {} dependency cycle(s): {}", len(cycles), cycles)
        return cycles
