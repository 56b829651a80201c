"""Segment Builder: merges short captions and groups them into natural segments.

WHY: Caption sources emit one event per on-screen line, often only a few
words long and a fraction of a second apart. Classifying such fragments
individually is meaningless. Speakers pause between ideas, so timing gaps
are a cheap and language-independent proxy for paragraph boundaries.

HOW: Two passes.
  merge_short(): walks events in order and appends each to the running
  unit while the gap to it is below merge_gap_threshold and the joined
  text stays below merge_length_limit.
  segment(): walks merged units and cuts a boundary wherever the gap to
  the next unit reaches segment_gap_threshold. Segments longer than
  max_segment_duration are then re-split so that uniformly dense speech
  does not collapse into one giant block.

RULES:
- Output units/segments are time-ordered and cover every input exactly once
- Units are joined with a single space
- A single event is never split, even if its text is over the length limit
- start <= end holds for every unit and segment, even when a coerced
  event starts before the unit it joins
- Only a single caption whose own span exceeds max_segment_duration can
  produce a segment longer than that limit
- merge_short() accepts its own output, and re-merging changes nothing
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from clipstruct.config import PreprocessConfig
from clipstruct.core.ir import MergedUnit, NaturalSegment, TimedText

logger = logging.getLogger(__name__)


def _as_unit(item: TimedText, position: int) -> MergedUnit:
    """Lift a CaptionEvent (or pass through a MergedUnit) into a MergedUnit."""
    if isinstance(item, MergedUnit):
        return item
    index = item.index if item.index is not None else position
    return MergedUnit(text=item.text, start=item.start, end=item.end, source_indices=(index,))


class SegmentBuilder:
    """Builds merged units and natural segments from cleaned captions."""

    def __init__(self, config: Optional[PreprocessConfig] = None) -> None:
        self.config = config or PreprocessConfig()

    def merge_short(self, items: Sequence[TimedText]) -> List[MergedUnit]:
        """Merge adjacent short captions into units.

        Args:
            items: Cleaned CaptionEvents (or MergedUnits from a previous
                   merge), in time order.

        Returns:
            List of MergedUnit, one per run of mergeable items.
        """
        if not items:
            return []

        gap_threshold = self.config.merge_gap_threshold
        length_limit = self.config.merge_length_limit

        merged: List[MergedUnit] = []
        current = _as_unit(items[0], 0)

        for position in range(1, len(items)):
            nxt = _as_unit(items[position], position)
            gap = nxt.start - current.end
            merged_length = len(current.text) + 1 + len(nxt.text)

            if gap < gap_threshold and merged_length < length_limit:
                current = MergedUnit(
                    text=current.text + " " + nxt.text,
                    start=current.start,
                    end=max(current.end, nxt.end),
                    source_indices=current.source_indices + nxt.source_indices,
                )
            else:
                merged.append(current)
                current = nxt

        merged.append(current)
        return merged

    def segment(self, units: Sequence[MergedUnit]) -> List[NaturalSegment]:
        """Group merged units into natural segments by timing gaps."""
        if not units:
            return []

        gap_threshold = self.config.segment_gap_threshold
        segments: List[NaturalSegment] = []
        current: List[MergedUnit] = []

        for i, unit in enumerate(units):
            current.append(unit)
            is_last = i == len(units) - 1
            if is_last or units[i + 1].start - unit.end >= gap_threshold:
                segments.append(NaturalSegment.from_units(current))
                current = []

        result: List[NaturalSegment] = []
        for seg in segments:
            result.extend(self._split_overlong(seg))

        if len(result) != len(segments):
            logger.debug(
                "Split overlong segments: %d -> %d", len(segments), len(result)
            )
        return result

    def _split_overlong(self, seg: NaturalSegment) -> List[NaturalSegment]:
        """Re-split a segment whose span exceeds max_segment_duration.

        A caption that would push the running sub-segment past the limit
        opens a new sub-segment; a sub-segment that reaches the limit is
        closed. Trailing captions form the final sub-segment.
        """
        limit = self.config.max_segment_duration
        if seg.duration <= limit or len(seg.captions) <= 1:
            return [seg]

        parts: List[NaturalSegment] = []
        current: List[MergedUnit] = []

        for unit in seg.captions:
            if current and unit.end - current[0].start > limit:
                parts.append(NaturalSegment.from_units(current))
                current = []
            current.append(unit)
            if unit.end - current[0].start >= limit:
                parts.append(NaturalSegment.from_units(current))
                current = []

        if current:
            parts.append(NaturalSegment.from_units(current))
        return parts


def merge_short(
    items: Sequence[TimedText],
    config: Optional[PreprocessConfig] = None,
) -> List[MergedUnit]:
    return SegmentBuilder(config).merge_short(items)


def segment(
    units: Sequence[MergedUnit],
    config: Optional[PreprocessConfig] = None,
) -> List[NaturalSegment]:
    return SegmentBuilder(config).segment(units)

