"""Structure Classifier: rule engine assigning a rhetorical type per segment.

WHY: Most explainer and vlog videos follow the same beats: a hook in the
first seconds, context, a core argument, examples, pivots, emotional peaks,
and a call to action at the end. Those beats leave lexical traces
("imagine", "for example", "subscribe") and positional traces (early,
late, long, short) that a small decision table captures well enough for a
first-draft timeline.

HOW: Three steps per analysis.
  1. Type assignment: _RULES is an ordered decision table of
     (type, predicate) pairs; the first predicate that holds wins. If none
     holds, _fallback_type() decides by position and length, so every
     segment always receives a type.
  2. Intent: a per-type default sentence, replaced by a more specific one
     when a refinement trigger occurs in the text.
  3. Post-processing: one pass over the whole sequence that upgrades a
     long background sandwiched between two backgrounds to corePoint, forces
     an early first segment to hook, and forces a last segment mentioning a
     call to action to callToAction.

RULES:
- Rule priority: callToAction, hook, transition, emotional, example,
  background, corePoint, then the positional fallback
- A video_duration of None or <= 0 means unknown; the tail callToAction
  rule is then skipped
- Keyword patterns are compiled once per classifier instance
- Empty input raises EmptyInputError
- Post-processing runs exactly once, right after classification
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from clipstruct.config import StructureConfig
from clipstruct.core.errors import EmptyInputError
from clipstruct.core.ir import NaturalSegment, SegmentType, StructureSegment
from clipstruct.core.keywords import PhraseMatcher

logger = logging.getLogger(__name__)

# Exclamation and question marks, ASCII and full-width.
_EMPHATIC_PUNCTUATION_RE = re.compile(r"[!?！？]")


@dataclass(frozen=True)
class _SegmentContext:
    """Everything a rule predicate may look at for one segment."""

    text: str
    start: float
    end: float
    index: int
    total: int
    video_duration: Optional[float]

    @property
    def duration(self) -> float:
        return self.end - self.start

    @property
    def is_first(self) -> bool:
        return self.index == 0

    @property
    def is_last(self) -> bool:
        return self.index == self.total - 1


_Predicate = Callable[["StructureClassifier", _SegmentContext], bool]


def _is_call_to_action(clf: StructureClassifier, ctx: _SegmentContext) -> bool:
    return (
        ctx.video_duration is not None
        and ctx.end >= ctx.video_duration - clf.config.cta_tail_window
        and clf.has_keywords(ctx.text, SegmentType.CALL_TO_ACTION)
    )


def _is_hook(clf: StructureClassifier, ctx: _SegmentContext) -> bool:
    if ctx.start < clf.config.early_hook_window:
        return True
    return ctx.start < clf.config.hook_window and clf.has_keywords(ctx.text, SegmentType.HOOK)


def _is_transition(clf: StructureClassifier, ctx: _SegmentContext) -> bool:
    return (
        ctx.duration < clf.config.transition_max_duration
        and clf.has_keywords(ctx.text, SegmentType.TRANSITION)
    )


def _is_emotional(clf: StructureClassifier, ctx: _SegmentContext) -> bool:
    return (
        clf.has_keywords(ctx.text, SegmentType.EMOTIONAL)
        and _EMPHATIC_PUNCTUATION_RE.search(ctx.text) is not None
    )


def _is_example(clf: StructureClassifier, ctx: _SegmentContext) -> bool:
    return not ctx.is_first and clf.has_keywords(ctx.text, SegmentType.EXAMPLE)


def _is_background(clf: StructureClassifier, ctx: _SegmentContext) -> bool:
    return (
        not ctx.is_first
        and ctx.start < clf.config.background_window
        and clf.has_keywords(ctx.text, SegmentType.BACKGROUND)
    )


def _is_core_point(clf: StructureClassifier, ctx: _SegmentContext) -> bool:
    return (
        ctx.duration > clf.config.core_point_min_duration
        and clf.has_keywords(ctx.text, SegmentType.CORE_POINT)
    )


# Ordered decision table: first matching predicate wins.
_RULES: Tuple[Tuple[SegmentType, _Predicate], ...] = (
    (SegmentType.CALL_TO_ACTION, _is_call_to_action),
    (SegmentType.HOOK, _is_hook),
    (SegmentType.TRANSITION, _is_transition),
    (SegmentType.EMOTIONAL, _is_emotional),
    (SegmentType.EXAMPLE, _is_example),
    (SegmentType.BACKGROUND, _is_background),
    (SegmentType.CORE_POINT, _is_core_point),
)


def _fallback_type(clf: StructureClassifier, ctx: _SegmentContext) -> SegmentType:
    if ctx.is_first:
        return SegmentType.HOOK
    if ctx.is_last:
        return SegmentType.CALL_TO_ACTION
    if ctx.duration > clf.config.core_point_min_duration:
        return SegmentType.CORE_POINT
    if ctx.duration < clf.config.transition_max_duration:
        return SegmentType.TRANSITION
    return SegmentType.BACKGROUND


class StructureClassifier:
    """Assigns structure types and intents to natural segments."""

    def __init__(self, config: Optional[StructureConfig] = None) -> None:
        self.config = config or StructureConfig()
        self._keywords: Dict[SegmentType, PhraseMatcher] = {
            seg_type: PhraseMatcher(self.config.keywords.get(seg_type, ()))
            for seg_type in SegmentType
        }
        refinements = self.config.intent_refinements
        self._refinements: Dict[SegmentType, Tuple[Tuple[PhraseMatcher, Dict[str, str]], ...]] = {
            seg_type: tuple(
                (PhraseMatcher(r.triggers), dict(r.intents))
                for r in refinements.get(seg_type, ())
            )
            for seg_type in SegmentType
        }

    # -- keyword helpers -----------------------------------------------------

    def has_keywords(self, text: str, seg_type: SegmentType) -> bool:
        """True if text contains any keyword configured for seg_type."""
        return self._keywords[seg_type].search(text)

    # -- type assignment -----------------------------------------------------

    def identify_type(self, ctx: _SegmentContext) -> SegmentType:
        for seg_type, predicate in _RULES:
            if predicate(self, ctx):
                return seg_type
        return _fallback_type(self, ctx)

    # -- intent ----------------------------------------------------------------

    def generate_intent(self, seg_type: SegmentType, text: str) -> str:
        """Return the most specific intent sentence available for the segment."""
        language = self.config.intent_language
        for matcher, intents in self._refinements[seg_type]:
            if language in intents and matcher.search(text):
                return intents[language]
        return self.config.intent_templates[language][seg_type]

    # -- public API ------------------------------------------------------------

    def classify(
        self,
        segments: Sequence[NaturalSegment],
        video_duration: Optional[float] = None,
    ) -> List[StructureSegment]:
        """Classify natural segments into structure segments.

        Args:
            segments: Natural segments in time order.
            video_duration: Total video length in seconds, or None if unknown.

        Returns:
            One StructureSegment per input segment, post-processed.

        Raises:
            EmptyInputError: If segments is empty.
        """
        if not segments:
            raise EmptyInputError("No segments to classify")

        if video_duration is not None and video_duration <= 0:
            video_duration = None

        logger.info("Classifying %d segments", len(segments))

        classified: List[StructureSegment] = []
        for i, seg in enumerate(segments):
            ctx = _SegmentContext(
                text=seg.text,
                start=seg.start,
                end=seg.end,
                index=i,
                total=len(segments),
                video_duration=video_duration,
            )
            seg_type = self.identify_type(ctx)
            classified.append(StructureSegment(
                type=seg_type,
                start=seg.start,
                end=seg.end,
                text=ctx.text,
                intent=self.generate_intent(seg_type, ctx.text),
            ))
            logger.debug(
                "Segment %d: %s (%.1fs-%.1fs)", i + 1, seg_type.value, seg.start, seg.end
            )

        return self.post_process(classified)

    def post_process(self, segments: Sequence[StructureSegment]) -> List[StructureSegment]:
        """Fix obvious ordering errors in a freshly classified sequence."""
        result = list(segments)
        if not result:
            return result

        # A long background between two backgrounds is likely the main point.
        for i in range(1, len(result) - 1):
            prev, curr, nxt = result[i - 1], result[i], result[i + 1]
            if (
                prev.type is SegmentType.BACKGROUND
                and curr.type is SegmentType.BACKGROUND
                and nxt.type is SegmentType.BACKGROUND
                and curr.duration > self.config.core_point_upgrade_min_duration
            ):
                result[i] = self._retype(curr, SegmentType.CORE_POINT)

        first = result[0]
        if first.start < self.config.hook_window and first.type is not SegmentType.HOOK:
            result[0] = self._retype(first, SegmentType.HOOK)

        last = result[-1]
        if (
            last.type is not SegmentType.CALL_TO_ACTION
            and self.has_keywords(last.text, SegmentType.CALL_TO_ACTION)
        ):
            result[-1] = self._retype(last, SegmentType.CALL_TO_ACTION)

        return result

    def _retype(self, seg: StructureSegment, seg_type: SegmentType) -> StructureSegment:
        return replace(seg, type=seg_type, intent=self.generate_intent(seg_type, seg.text))


def classify(
    segments: Sequence[NaturalSegment],
    video_duration: Optional[float] = None,
    config: Optional[StructureConfig] = None,
) -> List[StructureSegment]:
    return StructureClassifier(config).classify(segments, video_duration)
