"""Task model shared by the graph, analysis, recommendation and track modules.

Tasks are read-only inputs: the storage collaborator hands over plain
mappings, :meth:`Task.from_dict` shapes them, and nothing in this package
writes them back.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class TaskStatus(str, Enum):
    """Lifecycle state of a task."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"
    CANCELLED = "cancelled"


class TaskPriority(str, Enum):
    """Importance level. A task without priority carries ``None``."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def sort_key(self) -> int:
        return {"critical": 0, "high": 1, "medium": 2, "low": 3}[self.value]


class EffortEstimate(str, Enum):
    """T-shirt size effort estimate. A task without effort carries ``None``."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


WORKABLE_STATUSES = frozenset({TaskStatus.PENDING, TaskStatus.IN_PROGRESS})


# ---------------------------------------------------------------------------
# Task dataclass
# ---------------------------------------------------------------------------

@dataclass
class Task:
    """A single work item as seen by the scheduling engine."""

    id: str
    title: str = ""
    status: TaskStatus = TaskStatus.PENDING
    priority: Optional[TaskPriority] = None
    effort: Optional[EffortEstimate] = None

    # Ordered; may reference unknown IDs and may repeat.
    dependencies: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    # Shared resources this task modifies ("scopes").
    touches: list[str] = field(default_factory=list)
    parent_id: Optional[str] = None

    group: str = ""
    owner: str = ""
    file_path: str = ""

    @property
    def scopes(self) -> list[str]:
        return self.touches

    @property
    def is_terminal(self) -> bool:
        return self.status in (TaskStatus.COMPLETED, TaskStatus.CANCELLED)

    @property
    def priority_value(self) -> str:
        return self.priority.value if self.priority is not None else ""

    @property
    def effort_value(self) -> str:
        return self.effort.value if self.effort is not None else ""

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict with enum values unwrapped."""
        data: dict[str, Any] = {}
        for k, v in asdict(self).items():
            if isinstance(v, Enum):
                data[k] = v.value
            else:
                data[k] = v
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        """Build a task from a plain mapping, coercing enums gracefully.

        Unknown status strings fall back to ``pending``; unknown or empty
        priority/effort strings become ``None``.
        """
        d = dict(data)

        raw_status = d.pop("status", None)
        status = TaskStatus.PENDING
        if isinstance(raw_status, TaskStatus):
            status = raw_status
        elif raw_status:
            try:
                status = TaskStatus(str(raw_status))
            except ValueError:
                status = TaskStatus.PENDING

        touches = d.pop("touches", None)
        if touches is None:
            touches = d.pop("scopes", None)
        parent = d.pop("parent_id", None)
        if parent is None:
            parent = d.pop("parent", None)

        return cls(
            id=str(d.pop("id", "") or ""),
            title=str(d.pop("title", "") or ""),
            status=status,
            priority=_optional_enum(TaskPriority, d.pop("priority", None)),
            effort=_optional_enum(EffortEstimate, d.pop("effort", None)),
            dependencies=_str_list(d.pop("dependencies", None)),
            tags=_str_list(d.pop("tags", None)),
            touches=_str_list(touches),
            parent_id=str(parent) if parent else None,
            group=str(d.pop("group", "") or ""),
            owner=str(d.pop("owner", "") or ""),
            file_path=str(d.pop("file_path", "") or ""),
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _optional_enum(enum_cls: type[Enum], raw: Any) -> Any:
    if raw is None or raw == "":
        return None
    if isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(str(raw))
    except ValueError:
        return None


def _str_list(raw: Any) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        return [raw]
    return [str(item) for item in raw]


def build_task_map(tasks: Iterable[Task]) -> dict[str, Task]:
    """Map task ID to task. Later duplicates replace earlier ones."""
    return {t.id: t for t in tasks}
