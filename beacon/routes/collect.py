# beacon/routes/collect.py
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from beacon.config.settings import Settings
from beacon.db import get_db, get_settings
from beacon.errors import InvalidInput
from beacon.services.ingest import insert_event, normalize_event
from beacon.util.log import get_logger, log_event

router = APIRouter(tags=["collect"])

logger = get_logger("collect")


async def read_json_body(request: Request) -> Any:
    # Empty or malformed JSON is a client error like a bad `type`, never a 422.
    try:
        return await request.json()
    except ValueError:
        raise InvalidInput("invalid_type")


@router.post("/collect", status_code=204, response_class=Response)
def collect(
    request: Request,
    payload: Any = Depends(read_json_body),
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db),
):
    # Raises InvalidInput before any statement is issued.
    record = normalize_event(
        payload,
        ip=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )

    insert_event(db, record)

    if logger.isEnabledFor(logging.DEBUG):
        log_event(
            logger,
            level="DEBUG",
            event="event_recorded",
            msg="event stored",
            include_payloads=settings.debug_log_payloads,
            type=record.type,
            name=record.name,
            payload=record.data,
        )
    return Response(status_code=204)
