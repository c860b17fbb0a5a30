from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

# Deny-list of keys that should never be logged raw.
_DENY_KEYS = {
    "payload",
    "body",
    "request_body",
    "headers",
    "authorization",
    "x-api-key",
    "x_api_key",
    "api_key",
    "token",
    "stats_token",
    "password",
    "secret",
    "database_url",
}

def configure_logging(level: str = "INFO") -> None:
    """
    JSONL (message-only) output on stdout for the service loggers.
    Safe to call more than once; handlers are only attached the first time.
    """
    root = logging.getLogger("beacon")
    if not root.handlers:
        h = logging.StreamHandler(sys.stdout)
        h.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(h)
    root.setLevel((level or "INFO").upper())
    root.propagate = False


def get_logger(component: str) -> logging.Logger:
    return logging.getLogger(f"beacon.{component}")


def _truncate_str(s: str, max_len: int = 800) -> str:
    return s if len(s) <= max_len else s[:max_len] + "...<truncated>"


def sanitize_value(v: Any, depth: int = 0, max_depth: int = 3) -> Any:
    """
    Best-effort sanitizer to avoid huge logs and accidental leakage.
    Nested deny-list keys are redacted here; top-level ones in log_event().
    """
    if depth > max_depth:
        return "<max_depth>"

    if v is None or isinstance(v, (int, float, bool)):
        return v

    if isinstance(v, str):
        return _truncate_str(v)

    if isinstance(v, (list, tuple)):
        return [sanitize_value(x, depth + 1, max_depth) for x in list(v)[:50]]

    if isinstance(v, dict):
        out: dict[str, Any] = {}
        for k, vv in v.items():
            if str(k).lower() in _DENY_KEYS:
                out[str(k)] = "<redacted>"
            else:
                out[str(k)] = sanitize_value(vv, depth + 1, max_depth)
        return out

    return _truncate_str(str(v))


def _utc_iso(dt: datetime) -> str:
    return dt.isoformat().replace("+00:00", "Z")


def build_record(
    *,
    level: str,
    component: str,
    event: str,
    msg: str,
    include_payloads: bool = False,
    **fields: Any,
) -> dict[str, Any]:
    record: dict[str, Any] = {
        "ts": _utc_iso(datetime.now(timezone.utc)),
        "level": level.upper(),
        "component": component,
        "event": event,
        "msg": msg,
    }

    for k, v in fields.items():
        lk = str(k).lower()

        # Never log deny-list fields in normal operation.
        if lk in _DENY_KEYS and not include_payloads:
            continue

        # Even in debug, only structured payloads pass; raw secrets stay redacted.
        if lk in _DENY_KEYS:
            record[k] = sanitize_value(v) if isinstance(v, dict) else "<redacted>"
            continue

        record[k] = sanitize_value(v)

    return record


def log_event(
    logger: logging.Logger,
    *,
    level: str,
    event: str,
    msg: str,
    include_payloads: bool = False,
    **fields: Any,
) -> None:
    component = logger.name.rsplit(".", 1)[-1]
    record = build_record(
        level=level,
        component=component,
        event=event,
        msg=msg,
        include_payloads=include_payloads,
        **fields,
    )
    line = json.dumps(record, ensure_ascii=False, separators=(",", ":"), default=str)

    lvl = (level or "").upper()
    if lvl == "ERROR":
        logger.error(line)
    elif lvl in ("WARN", "WARNING"):
        logger.warning(line)
    elif lvl == "DEBUG":
        logger.debug(line)
    else:
        logger.info(line)
