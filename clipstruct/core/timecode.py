"""Minute:second time codes for timelines, exports and manual edits.

RULES:
- format_time() renders whole seconds as "m:ss"; minutes are not capped at 59
- Invalid, NaN, infinite or negative input formats as "0:00"
- parse_time() accepts "m:ss" only and returns 0 for anything it cannot parse
"""

from __future__ import annotations

import math
from typing import Any


def format_time(seconds: Any) -> str:
    if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
        return "0:00"
    if math.isnan(seconds) or math.isinf(seconds) or seconds < 0:
        return "0:00"
    mins = int(seconds // 60)
    secs = int(seconds % 60)
    return "{}:{:02d}".format(mins, secs)


def parse_time(value: Any) -> int:
    if not value or not isinstance(value, str):
        return 0
    parts = value.strip().split(":")
    if len(parts) != 2:
        return 0
    try:
        mins = int(parts[0])
        secs = int(parts[1])
    except ValueError:
        return 0
    return mins * 60 + secs
