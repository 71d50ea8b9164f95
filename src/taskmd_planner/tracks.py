"""Partition actionable tasks into parallel work tracks by shared scope.

Tasks and scopes form a bipartite graph (a task is linked to every scope it
touches). Each connected component that contains a scope is one track: its
tasks conflict with each other and must be worked in sequence, while
separate tracks can proceed in parallel. Tasks touching nothing are
flexible and fit anywhere.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from loguru import logger

from .logging_utils import pretty, summarize_tracks
from .model import Task
from .recommend import DEFAULT_WEIGHTS, ScoredTask, ScoringWeights, score_actionable


@dataclass(frozen=True)
class TrackOptions:
    """Controls a single :func:`assign_tracks` call.

    ``known_scopes`` of ``None`` disables unknown-scope warnings. ``limit``
    caps the number of tracks returned; flexible tasks are never truncated.
    """

    filters: tuple[str, ...] = ()
    known_scopes: Optional[frozenset[str]] = None
    limit: Optional[int] = None
    weights: ScoringWeights = DEFAULT_WEIGHTS


@dataclass
class TrackTask:
    """Task fields carried into track output."""

    id: str
    title: str
    priority: str = ""
    effort: str = ""
    score: int = 0
    file_path: str = ""
    touches: list[str] = field(default_factory=list)

    @classmethod
    def from_scored(cls, item: ScoredTask) -> "TrackTask":
        task = item.task
        return cls(
            id=task.id,
            title=task.title,
            priority=task.priority_value,
            effort=task.effort_value,
            score=item.score,
            file_path=task.file_path,
            touches=list(task.touches),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "priority": self.priority,
            "effort": self.effort,
            "score": self.score,
            "file_path": self.file_path,
            "touches": list(self.touches),
        }


@dataclass
class Track:
    """Tasks that share scopes, directly or through each other."""

    id: int
    scopes: list[str] = field(default_factory=list)
    tasks: list[TrackTask] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "scopes": list(self.scopes),
            "tasks": [t.to_dict() for t in self.tasks],
        }


@dataclass
class TrackResult:
    tracks: list[Track] = field(default_factory=list)
    flexible: list[TrackTask] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tracks": [t.to_dict() for t in self.tracks],
            "flexible": [t.to_dict() for t in self.flexible],
            "warnings": list(self.warnings),
        }


def _scope_node(scope: str) -> str:
    # Namespaced so a scope never collides with a task ID.
    return f"scope:{scope}"


def _task_node(task_id: str) -> str:
    return f"task:{task_id}"


def find_unknown_scopes(items: list[ScoredTask], known_scopes: Optional[frozenset[str]]) -> list[str]:
    """One warning per (task, scope) pair whose scope is not recognised."""
    if known_scopes is None:
        return []
    warnings: list[str] = []
    seen: set[tuple[str, str]] = set()
    for item in items:
        for scope in item.task.touches:
            key = (item.task.id, scope)
            if scope in known_scopes or key in seen:
                continue
            seen.add(key)
            warnings.append(f"task {item.task.id}: unknown scope '{scope}'")
    return warnings


def group_by_scope(items: list[ScoredTask]) -> list[Track]:
    """Group tasks with scopes into tracks by connected component.

    Items are expected in scan order; tracks are numbered by the position of
    their first member and keep members in scan order.
    """
    edges: dict[str, list[str]] = {}
    for item in items:
        tnode = _task_node(item.task.id)
        edges.setdefault(tnode, [])
        for scope in item.task.touches:
            snode = _scope_node(scope)
            edges[tnode].append(snode)
            edges.setdefault(snode, []).append(tnode)

    component: dict[str, int] = {}
    tracks: list[Track] = []
    for item in items:
        start = _task_node(item.task.id)
        if start in component:
            continue
        track_index = len(tracks)
        tracks.append(Track(id=track_index + 1))
        component[start] = track_index
        queue: deque[str] = deque([start])
        while queue:
            node = queue.popleft()
            for nxt in edges.get(node, []):
                if nxt not in component:
                    component[nxt] = track_index
                    queue.append(nxt)

    for item in items:
        track = tracks[component[_task_node(item.task.id)]]
        track.tasks.append(TrackTask.from_scored(item))
    for track in tracks:
        track.scopes = sorted({scope for t in track.tasks for scope in t.touches})
    return tracks


def assign_tracks(tasks: Iterable[Task], options: TrackOptions = TrackOptions()) -> TrackResult:
    """Split actionable tasks into scope-conflict tracks plus flexible tasks.

    Raises:
        FilterError: If a filter expression is malformed.
    """
    items, _, _ = score_actionable(tasks, options.filters, options.weights)

    warnings = find_unknown_scopes(items, options.known_scopes)
    for warning in warnings:
        logger.warning("Track assignment: {}", warning)

    with_scopes = [it for it in items if it.task.touches]
    flexible = [TrackTask.from_scored(it) for it in items if not it.task.touches]

    tracks = group_by_scope(with_scopes)
    if options.limit is not None and options.limit >= 0:
        tracks = tracks[: options.limit]

    result = TrackResult(tracks=tracks, flexible=flexible, warnings=warnings)
    logger.opt(lazy=True).debug("Track assignment: {}", lambda: pretty(summarize_tracks(result)))
    return result
