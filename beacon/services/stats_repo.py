# services/stats_repo.py
from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from beacon.models.event import EventType

# Window is evaluated by the store at statement time, so "now" is query execution time.
_WINDOW = "created_at >= now() - (CAST(:days AS int) * interval '1 day')"


def _count(v: Any) -> int:
    return int(v or 0)


def overview(db: Session, *, days: int) -> dict[str, Any]:
    row = (
        db.execute(
            text(
                f"""
                SELECT
                  COUNT(*) FILTER (WHERE type = 'page_view') AS page_views,
                  COUNT(*) FILTER (WHERE type = 'event') AS events,
                  COUNT(DISTINCT session_id) FILTER (WHERE session_id IS NOT NULL) AS sessions
                FROM events
                WHERE {_WINDOW}
                """
            ),
            {"days": days},
        )
        .mappings()
        .first()
    )
    row = row or {}

    return {
        "window_days": days,
        "page_views": _count(row.get("page_views")),
        "events": _count(row.get("events")),
        "sessions": _count(row.get("sessions")),
    }


def timeseries(
    db: Session,
    *,
    days: int,
    event_type: str,
    name: Optional[str] = None,
) -> list[dict[str, Any]]:
    """
    Daily counts for one event type, ascending by day. Days without rows are absent.

    `name` only filters when event_type is "event"; for page_view it is ignored.
    """
    where = [_WINDOW, "type = :type"]
    params: dict[str, Any] = {"days": days, "type": event_type}

    if event_type == EventType.EVENT.value and name:
        where.append("name = :name")
        params["name"] = name

    rows = (
        db.execute(
            text(
                f"""
                SELECT
                  date_trunc('day', created_at) AS day,
                  COUNT(*) AS count
                FROM events
                WHERE {" AND ".join(where)}
                GROUP BY 1
                ORDER BY 1 ASC
                """
            ),
            params,
        )
        .mappings()
        .all()
    )

    return [{"day": r["day"], "count": _count(r["count"])} for r in rows]


def top_events(db: Session, *, days: int, limit: int) -> list[dict[str, Any]]:
    rows = (
        db.execute(
            text(
                f"""
                SELECT
                  name,
                  COUNT(*) AS count
                FROM events
                WHERE {_WINDOW}
                  AND type = 'event'
                  AND name IS NOT NULL
                GROUP BY 1
                ORDER BY 2 DESC
                LIMIT :limit
                """
            ),
            {"days": days, "limit": limit},
        )
        .mappings()
        .all()
    )

    return [{"name": r["name"], "count": _count(r["count"])} for r in rows]
