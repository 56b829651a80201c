"""Pipeline entry points chaining normalize → merge → segment → classify.

WHY: Callers (CLI, HTTP API, tests) want one call per use case rather than
wiring four components by hand each time. This module is that wiring, and
the single place where whole-pipeline emptiness is checked.

HOW: preprocess() runs the normalizer and segment builder. analyze() adds
classification and bundles everything, including both statistics views,
into an AnalysisResult. update_segment() applies a manual override to one
classified segment.

RULES:
- preprocess() raises EmptyInputError when given zero caption events
- classify() raises EmptyInputError when preprocessing left nothing
- Filler removal never deletes text inside a longer structural keyword
- update_segment() does not re-run post-processing
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence

from clipstruct.config import PreprocessConfig, StructureConfig
from clipstruct.core.classifier import StructureClassifier
from clipstruct.core.errors import EmptyInputError
from clipstruct.core.ir import CaptionEvent, NaturalSegment, StructureSegment
from clipstruct.core.normalizer import CaptionNormalizer
from clipstruct.core.segmenter import SegmentBuilder
from clipstruct.core.stats import (
    PreprocessStats,
    StructureStats,
    preprocess_stats,
    structure_stats,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    """Everything one analysis run produces."""

    segments: List[NaturalSegment]
    structure: List[StructureSegment]
    preprocess_stats: PreprocessStats
    structure_stats: StructureStats
    video_duration: Optional[float] = None


def preprocess(
    raw_events: Sequence[CaptionEvent],
    config: Optional[PreprocessConfig] = None,
    protected_terms: Optional[Iterable[str]] = None,
) -> List[NaturalSegment]:
    """Clean, merge and segment raw caption events.

    Args:
        raw_events: Caption events in time order.
        config: Preprocessing settings; defaults to PreprocessConfig().
        protected_terms: Phrases filler removal must not cut into. Defaults
            to the structural keyword vocabulary.

    Raises:
        EmptyInputError: If raw_events is empty.
    """
    if not raw_events:
        raise EmptyInputError("Caption data is empty")

    config = config or PreprocessConfig()
    if protected_terms is None:
        protected_terms = StructureConfig().all_keywords

    logger.info("Preprocessing %d captions", len(raw_events))

    cleaned = CaptionNormalizer(config, protected_terms).normalize(raw_events)
    logger.debug("Filler removal kept %d of %d captions", len(cleaned), len(raw_events))

    builder = SegmentBuilder(config)
    merged = builder.merge_short(cleaned)
    logger.debug("Merged into %d units", len(merged))

    segments = builder.segment(merged)
    logger.info("Detected %d natural segments", len(segments))
    return segments


def classify(
    segments: Sequence[NaturalSegment],
    video_duration: Optional[float] = None,
    config: Optional[StructureConfig] = None,
) -> List[StructureSegment]:
    return StructureClassifier(config).classify(segments, video_duration)


def analyze(
    raw_events: Sequence[CaptionEvent],
    video_duration: Optional[float] = None,
    preprocess_config: Optional[PreprocessConfig] = None,
    structure_config: Optional[StructureConfig] = None,
) -> AnalysisResult:
    """Run the full pipeline and return segments, structure and stats.

    Raises:
        EmptyInputError: If there are no events, or none survive cleaning.
    """
    structure_config = structure_config or StructureConfig()
    segments = preprocess(
        raw_events,
        config=preprocess_config,
        protected_terms=structure_config.all_keywords,
    )
    structure = classify(segments, video_duration, structure_config)

    return AnalysisResult(
        segments=segments,
        structure=structure,
        preprocess_stats=preprocess_stats(raw_events, segments),
        structure_stats=structure_stats(structure),
        video_duration=video_duration,
    )


def update_segment(
    structure: Sequence[StructureSegment],
    index: int,
    **changes: Any,
) -> List[StructureSegment]:
    """Return a new list with structure[index] overridden by a manual edit.

    Raises:
        IndexError: If index is out of range.
        ValueError: If the edit is invalid (see StructureSegment.override).
    """
    if not 0 <= index < len(structure):
        raise IndexError("Segment index {} out of range (0-{})".format(index, len(structure) - 1))
    updated = list(structure)
    updated[index] = updated[index].override(**changes)
    return updated
