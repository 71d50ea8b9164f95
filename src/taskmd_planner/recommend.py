"""Rank actionable tasks by how useful it is to start them now."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Sequence

from loguru import logger

from .analysis import calculate_critical_path_tasks, has_unmet_dependencies
from .filters import apply_filters
from .graph import TaskGraph
from .logging_utils import pretty, summarize_recommendations
from .model import WORKABLE_STATUSES, EffortEstimate, Task, TaskPriority, build_task_map


@dataclass(frozen=True)
class ScoringWeights:
    """Point values used by :func:`score_task`."""

    priority_critical: int = 40
    priority_high: int = 30
    priority_medium: int = 20
    priority_low: int = 10
    critical_path: int = 15
    per_downstream: int = 3
    downstream_max: int = 15
    effort_small: int = 5

    def priority_base(self, priority: Optional[TaskPriority]) -> int:
        if priority == TaskPriority.CRITICAL:
            return self.priority_critical
        if priority == TaskPriority.HIGH:
            return self.priority_high
        if priority == TaskPriority.MEDIUM:
            return self.priority_medium
        return self.priority_low


DEFAULT_WEIGHTS = ScoringWeights()


@dataclass(frozen=True)
class RecommendOptions:
    """Controls a single :func:`recommend` call.

    ``limit`` of ``None`` returns every candidate.
    """

    limit: Optional[int] = None
    filters: tuple[str, ...] = ()
    quick_wins: bool = False
    critical: bool = False
    weights: ScoringWeights = DEFAULT_WEIGHTS


@dataclass
class Recommendation:
    """A ranked, scored task suggestion."""

    rank: int
    id: str
    title: str
    status: str
    priority: str
    effort: str
    score: int
    reasons: list[str] = field(default_factory=list)
    downstream_count: int = 0
    on_critical_path: bool = False
    file_path: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "rank": self.rank,
            "id": self.id,
            "title": self.title,
            "file_path": self.file_path,
            "status": self.status,
            "priority": self.priority,
            "effort": self.effort,
            "score": self.score,
            "reasons": list(self.reasons),
            "downstream_count": self.downstream_count,
            "on_critical_path": self.on_critical_path,
        }


@dataclass
class ScoredTask:
    task: Task
    score: int
    reasons: list[str]


def is_actionable(task: Task, task_map: dict[str, Task]) -> bool:
    """Pending or in-progress with every dependency known and completed."""
    if task.status not in WORKABLE_STATUSES:
        return False
    return not has_unmet_dependencies(task, task_map)


def score_task(
    task: Task,
    critical_path: set[str],
    downstream_counts: dict[str, int],
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> tuple[int, list[str]]:
    """Compute the score of a task and the reasons behind it."""
    score = weights.priority_base(task.priority)
    reasons: list[str] = []
    if task.priority == TaskPriority.CRITICAL:
        reasons.append("critical priority")
    elif task.priority == TaskPriority.HIGH:
        reasons.append("high priority")

    if task.id in critical_path:
        score += weights.critical_path
        reasons.append("on critical path")

    count = downstream_counts.get(task.id, 0)
    score += min(count * weights.per_downstream, weights.downstream_max)
    if count > 0:
        noun = "task" if count == 1 else "tasks"
        reasons.append(f"unblocks {count} {noun}")

    if task.effort == EffortEstimate.SMALL:
        score += weights.effort_small
        reasons.append("quick win")

    return score, reasons


def rank_scored(scored: list[ScoredTask]) -> list[ScoredTask]:
    """Sort by score descending, then ID ascending."""
    return sorted(scored, key=lambda st: (-st.score, st.task.id))


def select_actionable(tasks: list[Task], filters: Sequence[str]) -> list[Task]:
    """Apply filters to ``tasks`` then keep the actionable ones.

    Actionability is judged against the full task list, not the filtered one.
    """
    task_map = build_task_map(tasks)
    candidates = apply_filters(tasks, filters)
    return [t for t in candidates if is_actionable(t, task_map)]


def score_actionable(
    tasks: Iterable[Task],
    filters: Sequence[str] = (),
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> tuple[list[ScoredTask], set[str], dict[str, int]]:
    """Score every actionable task and return them in ranked order.

    Also returns the critical-path set and downstream counts computed over
    the full task list so callers can reuse them.
    """
    tasks = list(tasks)
    actionable = select_actionable(tasks, filters)

    critical_path = calculate_critical_path_tasks(tasks)
    downstream_counts = TaskGraph(tasks).downstream_counts()

    scored = []
    for task in actionable:
        score, reasons = score_task(task, critical_path, downstream_counts, weights)
        scored.append(ScoredTask(task=task, score=score, reasons=reasons))
    return rank_scored(scored), critical_path, downstream_counts


def recommend(tasks: Iterable[Task], options: RecommendOptions = RecommendOptions()) -> list[Recommendation]:
    """Score and rank actionable tasks.

    Raises:
        FilterError: If a filter expression is malformed.
    """
    scored, critical_path, downstream_counts = score_actionable(
        tasks, options.filters, options.weights
    )

    if options.quick_wins:
        scored = [st for st in scored if st.task.effort == EffortEstimate.SMALL]
    if options.critical:
        scored = [st for st in scored if st.task.id in critical_path]
    if options.limit is not None and options.limit >= 0:
        scored = scored[: options.limit]

    recs = [
        Recommendation(
            rank=i,
            id=st.task.id,
            title=st.task.title,
            status=st.task.status.value,
            priority=st.task.priority_value,
            effort=st.task.effort_value,
            score=st.score,
            reasons=st.reasons,
            downstream_count=downstream_counts.get(st.task.id, 0),
            on_critical_path=st.task.id in critical_path,
            file_path=st.task.file_path,
        )
        for i, st in enumerate(scored, 1)
    ]
    logger.opt(lazy=True).debug("Recommendations: {}", lambda: pretty(summarize_recommendations(recs)))
    return recs


def quick_wins(tasks: Iterable[Task], limit: Optional[int] = None) -> list[Recommendation]:
    """Actionable small-effort tasks, ranked by the usual score."""
    return recommend(tasks, RecommendOptions(limit=limit, quick_wins=True))


def critical_only(tasks: Iterable[Task], limit: Optional[int] = None) -> list[Recommendation]:
    """Actionable tasks on the critical path, ranked by the usual score."""
    return recommend(tasks, RecommendOptions(limit=limit, critical=True))
