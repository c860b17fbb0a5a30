from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel


class OverviewOut(BaseModel):
    ok: bool = True
    window_days: int
    page_views: int
    events: int
    sessions: int


class SeriesPoint(BaseModel):
    day: datetime  # start of the day (date_trunc), store time zone
    count: int


class TimeseriesOut(BaseModel):
    ok: bool = True
    window_days: int
    type: Literal["page_view", "event"]
    name: Optional[str] = None
    series: List[SeriesPoint] = []


class TopEventItem(BaseModel):
    name: str
    count: int


class TopEventsOut(BaseModel):
    ok: bool = True
    window_days: int
    items: List[TopEventItem] = []
