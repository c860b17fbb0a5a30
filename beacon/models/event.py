# models/event.py
import enum

from sqlalchemy import BigInteger, Column, DateTime, Index, Text, text
from sqlalchemy.dialects.postgresql import INET, JSONB
from sqlalchemy.sql import func

from beacon.db import Base


class EventType(str, enum.Enum):
    PAGE_VIEW = "page_view"
    EVENT = "event"


class EventDB(Base):
    __tablename__ = "events"

    id = Column(BigInteger, primary_key=True, autoincrement=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # page_view | event, validated on ingest
    type = Column(Text, nullable=False)
    name = Column(Text, nullable=True)

    path = Column(Text, nullable=True)
    title = Column(Text, nullable=True)
    referrer = Column(Text, nullable=True)
    session_id = Column(Text, nullable=True)

    utm_source = Column(Text, nullable=True)
    utm_medium = Column(Text, nullable=True)
    utm_campaign = Column(Text, nullable=True)
    utm_term = Column(Text, nullable=True)
    utm_content = Column(Text, nullable=True)

    data = Column(JSONB, nullable=False, server_default=text("'{}'::jsonb"))
    ip = Column(INET, nullable=True)
    user_agent = Column(Text, nullable=True)


Index("idx_events_created_at", EventDB.created_at.desc())
Index("idx_events_type_name", EventDB.type, EventDB.name)
