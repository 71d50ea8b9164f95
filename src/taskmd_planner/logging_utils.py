"""Compact, JSON-friendly summaries of engine results for log lines."""

import json
from typing import Any, Sequence


def summarize_recommendations(recs: Sequence[Any], max_items: int = 5) -> dict[str, Any]:
    """Summarize a ranked recommendation list.

    Args:
        recs: Recommendation objects in rank order.
        max_items: Maximum number of entries listed under ``top``.

    Returns:
        A dictionary with keys ``count`` and ``top``.
    """
    top = [
        {"id": getattr(r, "id", None), "score": getattr(r, "score", None)}
        for r in list(recs)[:max_items]
    ]
    return {"count": len(recs), "top": top}


def summarize_tracks(result: Any) -> dict[str, Any]:
    """Summarize a track assignment result.

    Args:
        result: Object with ``tracks``, ``flexible`` and ``warnings`` lists.

    Returns:
        A dictionary with track sizes, the flexible count and warning count.
    """
    if result is None:
        return {"tracks": None}
    tracks = getattr(result, "tracks", []) or []
    return {
        "tracks": [
            {"id": t.id, "tasks_n": len(t.tasks), "scopes": list(t.scopes)[:5]}
            for t in tracks
        ],
        "flexible_n": len(getattr(result, "flexible", []) or []),
        "warnings_n": len(getattr(result, "warnings", []) or []),
    }


def pretty(obj: Any, *, indent: int = 2) -> str:
    """Serialize an object as JSON for readable logs.

    Args:
        obj: Object to serialize.
        indent: Indentation level for JSON output.

    Returns:
        A JSON string when possible; otherwise `str(obj)`.
    """
    try:
        return json.dumps(obj, indent=indent, default=str)
    except (TypeError, ValueError):
        return str(obj)
