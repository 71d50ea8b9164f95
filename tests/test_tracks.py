"""Tests for parallel track assignment (tracks.py)."""

from __future__ import annotations

from typing import Optional

import pytest

from taskmd_planner.model import Task, TaskPriority, TaskStatus
from taskmd_planner.tracks import TrackOptions, assign_tracks


def _t(
    task_id: str,
    priority: Optional[str],
    touches: tuple[str, ...] = (),
    deps: tuple[str, ...] = (),
    status: TaskStatus = TaskStatus.PENDING,
) -> Task:
    return Task(
        id=task_id,
        title=f"Task {task_id}",
        status=status,
        priority=TaskPriority(priority) if priority else None,
        touches=list(touches),
        dependencies=list(deps),
    )


@pytest.fixture
def tasks() -> list[Task]:
    return [
        _t("t1", "high", ("api",)),
        _t("t2", "medium", ("api", "db")),
        _t("t3", "low", ("db",)),
        _t("t4", "critical", ("ui",)),
        _t("t5", "medium"),
    ]


def _ids(track) -> list[str]:
    return [t.id for t in track.tasks]


class TestAssignTracks:
    def test_connected_scopes_share_a_track(self, tasks: list[Task]) -> None:
        result = assign_tracks(tasks)
        assert [t.id for t in result.tracks] == [1, 2]
        assert _ids(result.tracks[0]) == ["t4"]
        assert result.tracks[0].scopes == ["ui"]
        assert _ids(result.tracks[1]) == ["t1", "t2", "t3"]
        assert result.tracks[1].scopes == ["api", "db"]
        assert [t.id for t in result.flexible] == ["t5"]
        assert result.warnings == []

    def test_scores_carried_into_output(self, tasks: list[Task]) -> None:
        result = assign_tracks(tasks)
        scores = {t.id: t.score for track in result.tracks for t in track.tasks}
        assert scores == {"t4": 55, "t1": 45, "t2": 35, "t3": 25}
        assert result.flexible[0].score == 35

    def test_tracks_never_share_scopes(self, tasks: list[Task]) -> None:
        tasks.append(_t("t6", "low", ("ui", "docs")))
        tasks.append(_t("t7", "low", ("cli",)))
        result = assign_tracks(tasks)
        seen: set[str] = set()
        for track in result.tracks:
            assert seen.isdisjoint(track.scopes)
            seen.update(track.scopes)

    def test_every_actionable_task_appears_once(self, tasks: list[Task]) -> None:
        tasks.append(_t("done", "high", ("api",), status=TaskStatus.COMPLETED))
        tasks.append(_t("waiting", "high", ("api",), deps=("t1",)))
        result = assign_tracks(tasks)
        placed = [t.id for track in result.tracks for t in track.tasks] + [t.id for t in result.flexible]
        assert sorted(placed) == ["t1", "t2", "t3", "t4", "t5"]

    def test_input_order_does_not_change_grouping(self) -> None:
        a = _t("a", "high", ("x",))
        b = _t("b", "low", ("x",))
        c = _t("c", "medium", ("y",))
        first = assign_tracks([a, b, c])
        second = assign_tracks([c, b, a])
        assert [_ids(t) for t in first.tracks] == [_ids(t) for t in second.tracks] == [["a", "b"], ["c"]]

    def test_limit_truncates_tracks_not_flexible(self, tasks: list[Task]) -> None:
        result = assign_tracks(tasks, TrackOptions(limit=1))
        assert len(result.tracks) == 1
        assert _ids(result.tracks[0]) == ["t4"]
        assert [t.id for t in result.flexible] == ["t5"]

    def test_unknown_scope_warning(self, tasks: list[Task]) -> None:
        result = assign_tracks(tasks, TrackOptions(known_scopes=frozenset({"api", "db"})))
        assert result.warnings == ["task t4: unknown scope 'ui'"]
        # Unknown scopes still form tracks.
        assert _ids(result.tracks[0]) == ["t4"]

    def test_no_known_scopes_means_no_warnings(self, tasks: list[Task]) -> None:
        assert assign_tracks(tasks, TrackOptions(known_scopes=None)).warnings == []

    def test_filters(self, tasks: list[Task]) -> None:
        result = assign_tracks(tasks, TrackOptions(filters=("priority=medium",)))
        assert [_ids(t) for t in result.tracks] == [["t2"]]
        assert [t.id for t in result.flexible] == ["t5"]

    def test_empty(self) -> None:
        result = assign_tracks([])
        assert result.tracks == []
        assert result.flexible == []

    def test_to_dict(self, tasks: list[Task]) -> None:
        d = assign_tracks(tasks).to_dict()
        assert d["tracks"][1]["scopes"] == ["api", "db"]
        assert d["tracks"][0]["tasks"][0]["touches"] == ["ui"]
        assert d["flexible"][0]["id"] == "t5"
        assert d["warnings"] == []
