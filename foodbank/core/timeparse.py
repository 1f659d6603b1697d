# foodbank/core/timeparse.py
from __future__ import annotations

import re

_HOURS = re.compile(r"(\d+)\s*(?:hour|hr)", re.IGNORECASE)
_MINUTES = re.compile(r"(\d+)\s*(?:minute|min)", re.IGNORECASE)
_BARE_INT = re.compile(r"\d+")


def _first_int(pattern: re.Pattern, text: str) -> int:
    m = pattern.search(text)
    return int(m.group(1)) if m else 0


def parse_minutes(text: str) -> int:
    """
    Free-text duration ("1 hour 30 minutes", "45 min", "20") to whole minutes.

    Anything unrecognised is 0. Text starting with "0" is 0 whatever follows, so
    "0 to prep, 45 minutes cook" is 0 as well.
    """
    stripped = (text or "").strip()
    if not stripped:
        return 0
    if stripped.startswith("0"):
        return 0

    lowered = stripped.lower()
    if "hour" in lowered or "hr" in lowered:
        return _first_int(_HOURS, stripped) * 60 + _first_int(_MINUTES, stripped)
    if "minute" in lowered or "min" in lowered:
        return _first_int(_MINUTES, stripped)
    if _BARE_INT.fullmatch(stripped):
        return int(stripped)
    return 0
