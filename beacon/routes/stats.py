# beacon/routes/stats.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from beacon.db import get_db
from beacon.models.event import EventType
from beacon.schemas.stats import OverviewOut, TimeseriesOut, TopEventsOut
from beacon.services import stats_repo
from beacon.services.auth import require_stats_auth
from beacon.util.params import top_limit, window_days

# Auth runs before get_db; a rejected request never touches storage.
router = APIRouter(
    prefix="/stats",
    tags=["stats"],
    dependencies=[Depends(require_stats_auth)],
)


# Query params are taken as raw strings: "abc", "0" or "1e3" must be normalized,
# not rejected with 422.
@router.get("/overview", response_model=OverviewOut)
def get_overview(
    days: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
):
    return stats_repo.overview(db, days=window_days(days))


@router.get("/timeseries", response_model=TimeseriesOut)
def get_timeseries(
    days: Optional[str] = Query(default=None),
    type: Optional[str] = Query(default=None),
    name: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
):
    window = window_days(days)
    event_type = EventType.EVENT.value if type == EventType.EVENT.value else EventType.PAGE_VIEW.value

    series = stats_repo.timeseries(db, days=window, event_type=event_type, name=name)

    return {
        "window_days": window,
        "type": event_type,
        "name": name if event_type == EventType.EVENT.value else None,
        "series": series,
    }


@router.get("/top-events", response_model=TopEventsOut)
def get_top_events(
    days: Optional[str] = Query(default=None),
    limit: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
):
    window = window_days(days)
    items = stats_repo.top_events(db, days=window, limit=top_limit(limit))
    return {"window_days": window, "items": items}
