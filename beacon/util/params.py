from __future__ import annotations

import math
from typing import Any


def to_int(value: Any, fallback: int) -> int:
    """
    Loose numeric coercion for query parameters.

    - absent -> fallback
    - blank string -> 0
    - anything float() accepts ("12", " 7.9 ", "1e2"), or an unsigned "0x10"/"0b11"/"0o7" -> truncated toward zero
    - unparseable or non-finite ("abc", "NaN", "Infinity") -> fallback
    """
    if value is None:
        return fallback
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        n = float(value)
    else:
        s = str(value).strip()
        if not s:
            return 0
        if "_" in s:
            return fallback
        try:
            n = float(s)
        except ValueError:
            # Prefixed literals ("0x10", "0b11", "0o7") only count when unsigned.
            if s[0] in "+-":
                return fallback
            try:
                n = float(int(s, 0))
            except (ValueError, OverflowError):
                return fallback
    if not math.isfinite(n):
        return fallback
    return math.trunc(n)


def clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, value))


def window_days(value: Any) -> int:
    # Shared by every reporting endpoint.
    return clamp(to_int(value, 30), 1, 365)


def top_limit(value: Any) -> int:
    return clamp(to_int(value, 10), 1, 100)
