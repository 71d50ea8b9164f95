"""Tests for dependency analysis (analysis.py)."""

from __future__ import annotations

from taskmd_planner.analysis import (
    analyze,
    calculate_critical_path_tasks,
    calculate_depth_map,
    calculate_topological_order,
    has_unmet_dependencies,
    is_blocked,
)
from taskmd_planner.model import Task, TaskStatus, build_task_map


def _t(task_id: str, *deps: str, status: TaskStatus = TaskStatus.PENDING) -> Task:
    return Task(id=task_id, title=f"Task {task_id}", status=status, dependencies=list(deps))


class TestIsBlocked:
    def test_no_dependencies(self) -> None:
        a = _t("a")
        assert not is_blocked(a, build_task_map([a]))

    def test_pending_dependency_blocks(self) -> None:
        tasks = [_t("a"), _t("b", "a")]
        assert is_blocked(tasks[1], build_task_map(tasks))

    def test_missing_dependency_blocks(self) -> None:
        b = _t("b", "ghost")
        assert is_blocked(b, build_task_map([b]))
        assert has_unmet_dependencies(b, build_task_map([b]))

    def test_completed_dependencies_unblock(self) -> None:
        tasks = [_t("a", status=TaskStatus.COMPLETED), _t("b", "a")]
        assert not is_blocked(tasks[1], build_task_map(tasks))

    def test_completed_task_with_unmet_dependency_is_not_blocked(self) -> None:
        tasks = [_t("a"), _t("b", "a", status=TaskStatus.COMPLETED)]
        task_map = build_task_map(tasks)
        assert has_unmet_dependencies(tasks[1], task_map)
        assert not is_blocked(tasks[1], task_map)


class TestDepthMap:
    def test_roots_have_depth_one(self) -> None:
        depths = calculate_depth_map([_t("a"), _t("b"), _t("c", "ghost")])
        assert depths == {"a": 1, "b": 1, "c": 1}

    def test_chain(self) -> None:
        depths = calculate_depth_map([_t("c", "b"), _t("b", "a"), _t("a")])
        assert depths == {"a": 1, "b": 2, "c": 3}

    def test_uses_deepest_dependency(self) -> None:
        tasks = [_t("a"), _t("b", "a"), _t("c"), _t("d", "c", "b")]
        depths = calculate_depth_map(tasks)
        assert depths["d"] == 3

    def test_depth_recurrence_holds(self) -> None:
        tasks = [_t("a"), _t("b", "a"), _t("c", "a", "b"), _t("d", "c", "ghost"), _t("e")]
        task_map = build_task_map(tasks)
        depths = calculate_depth_map(tasks, task_map)
        for t in tasks:
            known = [depths[d] for d in t.dependencies if d in task_map]
            assert depths[t.id] == 1 + max(known, default=0)

    def test_cycle_terminates(self) -> None:
        depths = calculate_depth_map([_t("a", "b"), _t("b", "a")])
        assert depths == {"a": 2, "b": 1}

    def test_long_chain(self) -> None:
        tasks = [_t("n0")] + [_t(f"n{i}", f"n{i - 1}") for i in range(1, 3000)]
        depths = calculate_depth_map(reversed(tasks))
        assert depths["n2999"] == 3000


class TestTopologicalOrder:
    def test_dependencies_come_first(self) -> None:
        order = calculate_topological_order([_t("c", "b"), _t("b", "a"), _t("a")])
        assert order == {"a": 0, "b": 1, "c": 2}

    def test_list_order_for_independent_tasks(self) -> None:
        order = calculate_topological_order([_t("x"), _t("y"), _t("z")])
        assert order == {"x": 0, "y": 1, "z": 2}

    def test_listed_dependency_order(self) -> None:
        order = calculate_topological_order([_t("d", "b", "a"), _t("a"), _t("b")])
        assert order == {"b": 0, "a": 1, "d": 2}

    def test_cycle_terminates(self) -> None:
        order = calculate_topological_order([_t("a", "b"), _t("b", "a")])
        assert order == {"b": 0, "a": 1}

    def test_every_task_gets_a_unique_position(self) -> None:
        tasks = [_t("a", "ghost"), _t("b", "a"), _t("c", "a"), _t("d", "b", "c")]
        order = calculate_topological_order(tasks)
        assert sorted(order.values()) == [0, 1, 2, 3]
        assert order["a"] < order["b"] < order["d"]
        assert order["c"] < order["d"]


class TestCriticalPath:
    def test_single_chain(self) -> None:
        tasks = [_t("a"), _t("b", "a"), _t("c", "b"), _t("x")]
        assert calculate_critical_path_tasks(tasks) == {"a", "b", "c"}

    def test_parallel_chains_both_included(self) -> None:
        tasks = [_t("a"), _t("b", "a"), _t("c"), _t("d", "c"), _t("e")]
        assert calculate_critical_path_tasks(tasks) == {"a", "b", "c", "d"}

    def test_only_longest_branch(self) -> None:
        # d depends on b (depth 2) and c (depth 1)
        tasks = [_t("a"), _t("b", "a"), _t("c"), _t("d", "b", "c")]
        assert calculate_critical_path_tasks(tasks) == {"a", "b", "d"}

    def test_all_roots_when_flat(self) -> None:
        assert calculate_critical_path_tasks([_t("a"), _t("b")]) == {"a", "b"}

    def test_empty(self) -> None:
        assert calculate_critical_path_tasks([]) == set()

    def test_missing_dependency_not_marked(self) -> None:
        assert calculate_critical_path_tasks([_t("a", "ghost")]) == {"a"}


class TestAnalyze:
    def test_derived_info(self) -> None:
        tasks = [
            _t("a", status=TaskStatus.COMPLETED),
            _t("b", "a"),
            _t("c", "b"),
            _t("d"),
        ]
        result = analyze(tasks)
        assert result.max_depth == 3
        assert result.blocked == {"c"}

        info = result.derived("c")
        assert info is not None
        assert info.is_blocked
        assert info.dependency_depth == 3
        assert info.on_critical_path
        assert info.to_dict()["topological_order"] == result.topological_order["c"]

        assert result.derived("missing") is None

    def test_empty(self) -> None:
        result = analyze([])
        assert result.max_depth == 0
        assert result.critical_path == set()
