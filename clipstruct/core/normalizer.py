"""Caption Normalizer: strips spoken filler words from caption events.

WHY: Auto-generated captions are full of disfluencies ("um", "you know",
"嗯", "那个") that add noise to keyword matching and inflate merged text
length. They must go before segmentation, but structural signal words
("but", "因为", "首先") must survive untouched.

HOW: All filler phrases are compiled once into a PhraseMatcher with
script-aware word boundaries. For each event, every filler occurrence is
removed unless it lies inside a longer occurrence of a protected term (by
default none; the pipeline passes the structural keyword vocabulary). A
protected term equal to or shorter than the filler never saves it. Whitespace
runs then collapse to a single space and the text is trimmed.

RULES:
- Matching is case-insensitive and whole-word for Latin script
- CJK fillers match as substrings, except inside a longer protected term
- Events whose text is empty after cleaning are dropped, not kept empty
- Timing and index fields pass through unchanged
- Pure: returns new CaptionEvent objects
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Iterable, List, Optional, Sequence, Tuple

from clipstruct.config import PreprocessConfig
from clipstruct.core.ir import CaptionEvent
from clipstruct.core.keywords import PhraseMatcher

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


class CaptionNormalizer:
    """Removes configured filler words from caption text."""

    def __init__(
        self,
        config: Optional[PreprocessConfig] = None,
        protected_terms: Iterable[str] = (),
    ) -> None:
        self.config = config or PreprocessConfig()
        self._fillers = PhraseMatcher(self.config.all_fillers)
        self._protected = PhraseMatcher(protected_terms)

    def clean_text(self, text: str) -> str:
        """Return text with fillers removed and whitespace collapsed."""
        if not text:
            return ""
        protected = _spans(self._protected.finditer(text))

        parts: List[str] = []
        cursor = 0
        for match in self._fillers.finditer(text):
            start, end = match.span()
            if _inside_longer(start, end, protected):
                continue
            parts.append(text[cursor:start])
            cursor = end
        parts.append(text[cursor:])

        return _WHITESPACE_RE.sub(" ", "".join(parts)).strip()

    def normalize(self, events: Sequence[CaptionEvent]) -> List[CaptionEvent]:
        """Clean every event and drop those left without text."""
        cleaned: List[CaptionEvent] = []
        for event in events:
            text = self.clean_text(event.text)
            if text:
                cleaned.append(replace(event, text=text))

        dropped = len(events) - len(cleaned)
        if dropped:
            logger.debug("Dropped %d caption(s) that contained only fillers", dropped)
        return cleaned


def _spans(matches) -> Tuple[Tuple[int, int], ...]:
    return tuple(m.span() for m in matches)


def _inside_longer(start: int, end: int, spans: Tuple[Tuple[int, int], ...]) -> bool:
    return any(
        s_start <= start and end <= s_end and s_end - s_start > end - start
        for s_start, s_end in spans
    )


def normalize(
    events: Sequence[CaptionEvent],
    config: Optional[PreprocessConfig] = None,
) -> List[CaptionEvent]:
    """Convenience wrapper: normalize with a fresh CaptionNormalizer."""
    return CaptionNormalizer(config).normalize(events)
