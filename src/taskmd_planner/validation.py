"""Check a task list for structural problems in its dependency graph.

Problems are collected as issues rather than raised, so callers can report
all of them at once.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Iterable

from .graph import TaskGraph
from .model import Task

LEVEL_ERROR = "error"
LEVEL_WARNING = "warning"


@dataclass
class ValidationIssue:
    level: str
    message: str
    task_id: str = ""
    file_path: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"level": self.level, "message": self.message}
        if self.task_id:
            data["task_id"] = self.task_id
        if self.file_path:
            data["file_path"] = self.file_path
        return data


@dataclass
class ValidationResult:
    issues: list[ValidationIssue] = field(default_factory=list)
    errors: int = 0
    warnings: int = 0
    task_count: int = 0

    @property
    def is_valid(self) -> bool:
        return self.errors == 0

    def add(self, level: str, message: str, task_id: str = "", file_path: str = "") -> None:
        self.issues.append(ValidationIssue(level=level, message=message, task_id=task_id, file_path=file_path))
        if level == LEVEL_ERROR:
            self.errors += 1
        else:
            self.warnings += 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "issues": [i.to_dict() for i in self.issues],
            "errors": self.errors,
            "warnings": self.warnings,
            "task_count": self.task_count,
        }


def _check_required_fields(tasks: list[Task], result: ValidationResult) -> None:
    for task in tasks:
        if not task.id:
            result.add(LEVEL_ERROR, "task is missing required field: id", file_path=task.file_path)
        if not task.title:
            result.add(LEVEL_ERROR, "task is missing required field: title", task.id, task.file_path)


def _check_duplicate_ids(tasks: list[Task], result: ValidationResult) -> None:
    paths: dict[str, list[str]] = {}
    for task in tasks:
        if task.id:
            paths.setdefault(task.id, []).append(task.file_path)
    for task_id, found in paths.items():
        if len(found) > 1:
            result.add(
                LEVEL_ERROR,
                f"duplicate task ID '{task_id}' found {len(found)} times",
                task_id,
                ", ".join(p for p in found if p),
            )


def _check_dependencies(tasks: list[Task], known: set[str], result: ValidationResult) -> None:
    for task in tasks:
        if task.id in task.dependencies:
            result.add(LEVEL_WARNING, "task depends on itself", task.id, task.file_path)
        for dep_id, count in Counter(task.dependencies).items():
            if count > 1:
                result.add(
                    LEVEL_WARNING,
                    f"dependency '{dep_id}' listed {count} times",
                    task.id,
                    task.file_path,
                )
        for dep_id in task.dependencies:
            if dep_id not in known:
                result.add(
                    LEVEL_ERROR,
                    f"dependency references non-existent task: '{dep_id}'",
                    task.id,
                    task.file_path,
                )


def validate_graph(tasks: Iterable[Task]) -> ValidationResult:
    """Validate IDs, titles, dependency references and cycles."""
    tasks = list(tasks)
    result = ValidationResult(task_count=len(tasks))
    graph = TaskGraph(tasks)

    _check_required_fields(tasks, result)
    _check_duplicate_ids(tasks, result)
    _check_dependencies(tasks, set(graph.task_map), result)

    for cycle in graph.detect_cycles():
        chain = " -> ".join([*cycle, cycle[0]])
        result.add(LEVEL_ERROR, f"circular dependency detected: {chain}", cycle[0])

    return result
