"""Parse and apply ``field=value`` task filters (AND-combined)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from .model import Task


class FilterError(ValueError):
    """Raised when a filter expression cannot be parsed."""


@dataclass(frozen=True)
class FilterCriteria:
    field: str
    value: str


def parse_filters(expressions: Sequence[str]) -> list[FilterCriteria]:
    """Parse ``field=value`` expressions.

    Raises:
        FilterError: If an expression has no ``=``.
    """
    criteria: list[FilterCriteria] = []
    for expr in expressions:
        field_name, sep, value = expr.partition("=")
        if not sep:
            raise FilterError(f"invalid filter format (expected field=value): {expr}")
        criteria.append(FilterCriteria(field=field_name.strip(), value=value.strip()))
    return criteria


def apply_filters(tasks: Iterable[Task], expressions: Optional[Sequence[str]]) -> list[Task]:
    """Return the tasks matching every filter expression, in input order."""
    tasks = list(tasks)
    if not expressions:
        return tasks
    criteria = parse_filters(expressions)
    return [t for t in tasks if all(matches(t, c) for c in criteria)]


def _equality_value(task: Task, field_name: str) -> Optional[str]:
    if field_name == "status":
        return task.status.value
    if field_name == "priority":
        return task.priority_value
    if field_name == "effort":
        return task.effort_value
    if field_name == "id":
        return task.id
    if field_name == "group":
        return task.group
    if field_name == "owner":
        return task.owner
    return None


def _match_presence_or_value(field_value: str, filter_value: str) -> bool:
    if filter_value == "true":
        return field_value != ""
    if filter_value == "false":
        return field_value == ""
    return field_value == filter_value


def matches(task: Task, criteria: FilterCriteria) -> bool:
    """Check a single criterion. Unknown fields match nothing."""
    value = _equality_value(task, criteria.field)
    if value is not None:
        return value == criteria.value

    if criteria.field == "title":
        return criteria.value.lower() in task.title.lower()
    if criteria.field == "blocked":
        declares_deps = bool(task.dependencies)
        return (criteria.value == "true" and declares_deps) or (
            criteria.value == "false" and not declares_deps
        )
    if criteria.field == "tag":
        return criteria.value in task.tags
    if criteria.field == "parent":
        return _match_presence_or_value(task.parent_id or "", criteria.value)
    return False
