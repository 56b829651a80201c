"""Adapter: raw caption payloads to CaptionEvent objects.

WHY: Caption fetchers hand over already-decoded JSON, but not in one shape.
A transcript endpoint yields ``{text, start, duration}`` triples in seconds,
timed-text JSON3 yields ``{tStartMs, dDurationMs, segs: [{utf8}]}`` in
milliseconds, and hand-written fixtures often use ``{text, start, end}``.
The core only understands CaptionEvent, so this adapter bridges the shapes
and absorbs per-event anomalies.

HOW: Unwraps a top-level ``{"events": [...]}`` or ``{"captions": [...]}``
container, then decodes each item by the keys it carries:
  1. ``tStartMs`` → JSON3 event; text is the concatenation of segs[].utf8
  2. ``start_ms`` / ``startMs`` → millisecond timing
  3. ``start`` with ``duration`` / ``dur`` → seconds
  4. ``start`` with ``end`` → seconds, duration = end - start
HTML entities are unescaped and line breaks flattened to spaces.

RULES:
- Missing, non-numeric, NaN or negative timing fields become 0.0 and log
  a warning; in strict mode they raise MalformedEventError instead
- Non-string text becomes "" (the normalizer later drops it)
- JSON3 events without ``segs`` (window/style setup events) are skipped
- CaptionEvent.index is the item's position in the unwrapped list
- The payload is never modified
"""

from __future__ import annotations

import html
import logging
import math
from typing import Any, Dict, List, Optional

from clipstruct.core.errors import MalformedEventError
from clipstruct.core.ir import CaptionEvent

logger = logging.getLogger(__name__)


def _unwrap(payload: Any) -> List[Any]:
    if isinstance(payload, dict):
        for key in ("events", "captions"):
            if isinstance(payload.get(key), list):
                return payload[key]
        raise ValueError("Caption payload object has no 'events' or 'captions' list")
    if isinstance(payload, list):
        return payload
    raise ValueError(
        "Caption payload must be a list or an object, got {}".format(type(payload).__name__)
    )


def _coerce_number(
    value: Any,
    field_name: str,
    index: int,
    strict: bool,
    scale: float = 1.0,
) -> float:
    """Convert a timing field to non-negative float seconds."""
    number: Optional[float] = None
    if value is not None and not isinstance(value, bool):
        try:
            number = float(value)
        except (TypeError, ValueError):
            number = None

    if number is None or math.isnan(number) or math.isinf(number) or number < 0:
        message = "Caption {} has invalid {}: {!r}".format(index, field_name, value)
        if strict:
            raise MalformedEventError(message, index=index)
        logger.warning("%s; treating it as 0", message)
        return 0.0

    return number / scale


def _clean_text(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return html.unescape(value).replace("\r", " ").replace("\n", " ").strip()


def decode_event(item: Dict[str, Any], index: int, strict: bool = False) -> CaptionEvent:
    """Decode a single caption dict into a CaptionEvent.

    Raises:
        MalformedEventError: In strict mode, for invalid timing fields or a
            non-object item.
    """
    if not isinstance(item, dict):
        message = "Caption {} is not an object: {!r}".format(index, item)
        if strict:
            raise MalformedEventError(message, index=index)
        logger.warning("%s; skipping its text", message)
        return CaptionEvent(text="", start=0.0, duration=0.0, index=index)

    if "tStartMs" in item:
        pieces = [
            seg.get("utf8") for seg in item.get("segs") or []
            if isinstance(seg, dict) and isinstance(seg.get("utf8"), str)
        ]
        start = _coerce_number(item.get("tStartMs"), "tStartMs", index, strict, 1000.0)
        duration = _coerce_number(item.get("dDurationMs"), "dDurationMs", index, strict, 1000.0)
        return CaptionEvent(text=_clean_text("".join(pieces)), start=start, duration=duration, index=index)

    text = _clean_text(item.get("text"))

    if "start_ms" in item or "startMs" in item:
        start_key = "start_ms" if "start_ms" in item else "startMs"
        start = _coerce_number(item.get(start_key), start_key, index, strict, 1000.0)
        if "end_ms" in item:
            end = _coerce_number(item.get("end_ms"), "end_ms", index, strict, 1000.0)
            duration = max(end - start, 0.0)
        else:
            dur_key = next(
                (k for k in ("duration_ms", "dur_ms", "durationMs") if k in item),
                "duration_ms",
            )
            duration = _coerce_number(item.get(dur_key), dur_key, index, strict, 1000.0)
        return CaptionEvent(text=text, start=start, duration=duration, index=index)

    start = _coerce_number(item.get("start"), "start", index, strict)
    if "duration" not in item and "dur" not in item and "end" in item:
        end = _coerce_number(item.get("end"), "end", index, strict)
        duration = max(end - start, 0.0)
    else:
        dur_key = "duration" if "duration" in item or "dur" not in item else "dur"
        duration = _coerce_number(item.get(dur_key), dur_key, index, strict)
    return CaptionEvent(text=text, start=start, duration=duration, index=index)


def decode_events(payload: Any, strict: bool = False) -> List[CaptionEvent]:
    """Decode a caption payload into CaptionEvents in source order.

    Args:
        payload: A list of caption dicts, or an object wrapping one under
                 "events" or "captions".
        strict: Raise MalformedEventError instead of coercing bad timing.

    Returns:
        One CaptionEvent per caption item (JSON3 setup events excluded).

    Raises:
        ValueError: If the payload is neither a list nor a wrapping object.
        MalformedEventError: In strict mode, for any malformed item.
    """
    items = _unwrap(payload)
    events: List[CaptionEvent] = []
    for index, item in enumerate(items):
        if isinstance(item, dict) and "tStartMs" in item and "segs" not in item:
            continue
        events.append(decode_event(item, index, strict=strict))
    return events
