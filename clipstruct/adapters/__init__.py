"""Adapter modules for converting external caption payloads into the IR.

WHY: Captions arrive in several JSON shapes depending on where they were
fetched from (plain {text, start, duration} lists, millisecond-based timed
text, YouTube JSON3 events). Adapters normalise them into CaptionEvent so the
core never sees transport formats.

RULES:
- Adapters are pure data transformations: no network, no file I/O.
- Adapters must not modify the source payload objects.
"""

from clipstruct.adapters.caption_adapter import decode_events

__all__ = ["decode_events"]
