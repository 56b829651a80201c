"""Value objects flowing through the caption structure pipeline.

WHY: Each pipeline stage (normalize, merge, segment, classify) consumes the
previous stage's output. Typed, immutable value objects make the contract
between stages explicit and let concurrent analyses share nothing.

HOW: Five types form the hierarchy:
  SegmentType     : closed enum of the seven rhetorical categories
  CaptionEvent    : one timestamped caption line from the caption source
  MergedUnit      : a run of adjacent caption events joined into one block
  NaturalSegment  : merged units grouped by timing proximity
  StructureSegment: a classified segment with type and intent

RULES:
- All dataclasses are frozen; stages build new objects instead of mutating
- All times are float seconds
- end is always derived or bounded so that start <= end
- StructureSegment.override() is the only way to apply a manual edit and
  always sets user_modified=True
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple, Union


class SegmentType(str, enum.Enum):
    """The seven rhetorical-structure categories.

    WHY: A closed enum rules out misspelled or unknown type strings that a
    free-form string field would silently accept.

    HOW: Inherits from str so values serialize cleanly to JSON and compare
    equal to their wire strings ("corePoint" == SegmentType.CORE_POINT).
    """

    HOOK = "hook"
    BACKGROUND = "background"
    CORE_POINT = "corePoint"
    EXAMPLE = "example"
    TRANSITION = "transition"
    EMOTIONAL = "emotional"
    CALL_TO_ACTION = "callToAction"

    @property
    def label(self) -> str:
        """Display name used in panels and reports."""
        return _LABELS[self]

    @property
    def short_label(self) -> str:
        """Compact name used in exported timelines."""
        return _SHORT_LABELS[self]


_LABELS = {
    SegmentType.HOOK: "Hook (grab attention)",
    SegmentType.BACKGROUND: "Background (set the scene)",
    SegmentType.CORE_POINT: "Core Point (main argument)",
    SegmentType.EXAMPLE: "Example (illustration)",
    SegmentType.TRANSITION: "Transition (pivot)",
    SegmentType.EMOTIONAL: "Emotional (amplification)",
    SegmentType.CALL_TO_ACTION: "Call To Action (next step)",
}

_SHORT_LABELS = {
    SegmentType.HOOK: "Hook",
    SegmentType.BACKGROUND: "Background",
    SegmentType.CORE_POINT: "Core Point",
    SegmentType.EXAMPLE: "Example",
    SegmentType.TRANSITION: "Transition",
    SegmentType.EMOTIONAL: "Emotional Amplification",
    SegmentType.CALL_TO_ACTION: "Call To Action",
}


@dataclass(frozen=True)
class CaptionEvent:
    """A single timestamped caption line.

    RULES:
    - start and duration are non-negative float seconds
    - index is the event's position in the source caption list, or None
      when the event was built by hand
    """

    text: str
    start: float
    duration: float
    index: Optional[int] = None

    @property
    def end(self) -> float:
        return self.start + self.duration


@dataclass(frozen=True)
class MergedUnit:
    """One or more adjacent caption events concatenated into a text block.

    RULES:
    - start is the first merged event's start
    - end is the latest end among the merged events
    - source_indices lists the original event positions in order
    """

    text: str
    start: float
    end: float
    source_indices: Tuple[int, ...] = ()

    @property
    def duration(self) -> float:
        return self.end - self.start


TimedText = Union[CaptionEvent, MergedUnit]


@dataclass(frozen=True)
class NaturalSegment:
    """Merged units grouped by timing proximity: the unit of classification.

    RULES:
    - captions is never empty
    - start/end bound every contained caption
    """

    captions: Tuple[MergedUnit, ...]
    start: float
    end: float

    def __post_init__(self) -> None:
        if not self.captions:
            raise ValueError("NaturalSegment requires at least one caption")

    @classmethod
    def from_units(cls, units) -> NaturalSegment:
        units = tuple(units)
        if not units:
            raise ValueError("NaturalSegment requires at least one caption")
        return cls(captions=units, start=units[0].start, end=max(u.end for u in units))

    @property
    def duration(self) -> float:
        return self.end - self.start

    @property
    def text(self) -> str:
        return " ".join(c.text for c in self.captions)


@dataclass(frozen=True)
class StructureSegment:
    """A natural segment classified into one rhetorical category.

    WHY: This is the final output unit consumed by timelines, exports and
    statistics. It carries the type, the time bounds, the joined text and a
    human-readable intent explaining the classification.

    HOW: Created once per NaturalSegment by the classifier. A manual edit
    goes through override(), which returns a new segment flagged as
    user_modified.

    RULES:
    - type is always one of the seven SegmentType members
    - duration is derived as end - start
    - user_modified is False for classifier output
    """

    type: SegmentType
    start: float
    end: float
    text: str
    intent: str
    user_modified: bool = field(default=False)

    @property
    def duration(self) -> float:
        return self.end - self.start

    def override(
        self,
        type: Optional[Union[SegmentType, str]] = None,
        intent: Optional[str] = None,
        start: Optional[float] = None,
        end: Optional[float] = None,
    ) -> StructureSegment:
        """Return a copy with the edited fields and user_modified=True.

        Applying the same edit twice yields the same segment.

        Raises:
            ValueError: If type is not a known category, or the edited
                bounds are negative or not strictly increasing.
        """
        new_type = self.type if type is None else SegmentType(type)
        new_start = self.start if start is None else float(start)
        new_end = self.end if end is None else float(end)

        if start is not None or end is not None:
            if new_start < 0 or new_end < 0:
                raise ValueError("Segment times must be non-negative")
            if new_start >= new_end:
                raise ValueError(
                    "Segment start ({:.1f}s) must be before end ({:.1f}s)".format(
                        new_start, new_end
                    )
                )

        return replace(
            self,
            type=new_type,
            intent=self.intent if intent is None else intent,
            start=new_start,
            end=new_end,
            user_modified=True,
        )
