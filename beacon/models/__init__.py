# models package init
# Ensure ORM models are importable from a single place.
from beacon.models.event import EventDB, EventType  # noqa: F401
