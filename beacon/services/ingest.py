# services/ingest.py
from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from beacon.errors import InvalidInput
from beacon.models.event import EventType

# Body fields with their own column. Never copied into `data`.
KNOWN_FIELDS = (
    "type",
    "name",
    "path",
    "title",
    "referrer",
    "session_id",
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_term",
    "utm_content",
)

_OPTIONAL_TEXT_FIELDS = KNOWN_FIELDS[2:]

_VALID_TYPES = {t.value for t in EventType}

_INSERT_EVENT = text(
    """
    INSERT INTO events (
        type, name, path, title, referrer, session_id,
        utm_source, utm_medium, utm_campaign, utm_term, utm_content,
        data, ip, user_agent
    ) VALUES (
        :type, :name, :path, :title, :referrer, :session_id,
        :utm_source, :utm_medium, :utm_campaign, :utm_term, :utm_content,
        CAST(:data AS jsonb), CAST(:ip AS inet), :user_agent
    )
    """
)


@dataclass(frozen=True)
class EventRecord:
    type: str
    name: Optional[str] = None
    path: Optional[str] = None
    title: Optional[str] = None
    referrer: Optional[str] = None
    session_id: Optional[str] = None
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    utm_term: Optional[str] = None
    utm_content: Optional[str] = None
    data: dict[str, Any] = field(default_factory=dict)
    ip: Optional[str] = None
    user_agent: Optional[str] = None

    def bind_params(self) -> dict[str, Any]:
        params = asdict(self)
        params["data"] = json.dumps(self.data or {})
        return params


def _str_or_none(v: Any) -> Optional[str]:
    return v if isinstance(v, str) else None


def normalize_event(
    body: Any,
    *,
    ip: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> EventRecord:
    """
    Map an untyped beacon body onto an EventRecord.

    Raises InvalidInput("invalid_type") unless body["type"] is "page_view" or "event".
    Non-string values for the optional text fields are dropped to None. Everything
    not in KNOWN_FIELDS ends up (shallow-copied) in `data`.
    """
    if not isinstance(body, dict):
        body = {}

    event_type = body.get("type")
    if not isinstance(event_type, str) or event_type not in _VALID_TYPES:
        raise InvalidInput("invalid_type")

    data = dict(body)
    for k in KNOWN_FIELDS:
        data.pop(k, None)

    return EventRecord(
        type=event_type,
        name=_str_or_none(body.get("name")),
        data=data,
        ip=ip or None,
        user_agent=user_agent or None,
        **{k: _str_or_none(body.get(k)) for k in _OPTIONAL_TEXT_FIELDS},
    )


def insert_event(db: Session, record: EventRecord) -> None:
    db.execute(_INSERT_EVENT, record.bind_params())
    db.commit()
