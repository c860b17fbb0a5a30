from __future__ import annotations

import hmac
from typing import Optional

from fastapi import Depends, Header, Request

from beacon.config.settings import Settings
from beacon.db import get_settings
from beacon.errors import Unauthorized
from beacon.util.log import get_logger, log_event

logger = get_logger("auth")

_BEARER = "bearer "


def _same(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def authorize_stats_request(
    token: Optional[str],
    authorization: Optional[str],
    api_key: Optional[str],
) -> bool:
    """
    Shared-secret check for the reporting endpoints.

    Behavior:
    - no token configured -> allow all (open mode)
    - "Authorization: Bearer <token>" (scheme case-insensitive, value trimmed)
    - "X-API-Key: <token>" (exact match)
    """
    if not token:
        return True

    if isinstance(authorization, str) and authorization.lower().startswith(_BEARER):
        provided = authorization[len(_BEARER):].strip()
        if _same(provided, token):
            return True

    if isinstance(api_key, str) and _same(api_key, token):
        return True

    return False


def require_stats_auth(
    request: Request,
    settings: Settings = Depends(get_settings),
    authorization: str | None = Header(default=None),
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
) -> None:
    if authorize_stats_request(settings.stats_token, authorization, x_api_key):
        return

    log_event(
        logger,
        level="WARN",
        event="stats_unauthorized",
        msg="reporting request rejected",
        path=request.url.path,
        has_authorization=authorization is not None,
        has_api_key=x_api_key is not None,
    )
    raise Unauthorized()
