"""Statistics over preprocessing and classification results.

WHY: Panels and exports show how a video's time is distributed across
structure types, and how aggressively preprocessing compressed the raw
captions. Both are read-only views over pipeline output.

HOW: preprocess_stats() counts raw events, segments and merged units.
structure_stats() sums count and duration per SegmentType and derives the
percentage of total duration.

RULES:
- Never raises on empty input: returns a zeroed result
- Percentages and averages are rounded to one decimal place
- per_type only lists types that actually occur, in first-seen order
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Sequence

from clipstruct.core.ir import NaturalSegment, SegmentType, StructureSegment


@dataclass(frozen=True)
class PreprocessStats:
    total_original_captions: int
    total_segments: int
    total_captions: int
    avg_captions_per_segment: float
    compression_ratio: float  # percent of raw events absorbed by merging/cleaning

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalOriginalCaptions": self.total_original_captions,
            "totalSegments": self.total_segments,
            "totalCaptions": self.total_captions,
            "avgCaptionsPerSegment": self.avg_captions_per_segment,
            "compressionRatio": self.compression_ratio,
        }


@dataclass(frozen=True)
class TypeStats:
    count: int
    duration: float
    percentage: float


@dataclass(frozen=True)
class StructureStats:
    total: int = 0
    total_duration: float = 0.0
    per_type: Dict[SegmentType, TypeStats] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "totalDuration": self.total_duration,
            "perType": {
                seg_type.value: {
                    "count": ts.count,
                    "duration": ts.duration,
                    "percentage": ts.percentage,
                }
                for seg_type, ts in self.per_type.items()
            },
        }


def preprocess_stats(
    raw: Sequence[Any],
    processed: Sequence[NaturalSegment],
) -> PreprocessStats:
    """Summarise how raw caption events were condensed into segments."""
    total_original = len(raw)
    total_segments = len(processed)
    total_captions = sum(len(seg.captions) for seg in processed)

    avg = round(total_captions / total_segments, 1) if total_segments else 0.0
    if total_original:
        compression = round((total_original - total_captions) / total_original * 100, 1)
    else:
        compression = 0.0

    return PreprocessStats(
        total_original_captions=total_original,
        total_segments=total_segments,
        total_captions=total_captions,
        avg_captions_per_segment=avg,
        compression_ratio=compression,
    )


def structure_stats(segments: Sequence[StructureSegment]) -> StructureStats:
    """Aggregate count, duration and share of total duration per type."""
    if not segments:
        return StructureStats()

    counts: Dict[SegmentType, int] = {}
    durations: Dict[SegmentType, float] = {}
    total_duration = 0.0

    for seg in segments:
        counts[seg.type] = counts.get(seg.type, 0) + 1
        durations[seg.type] = durations.get(seg.type, 0.0) + seg.duration
        total_duration += seg.duration

    per_type: Dict[SegmentType, TypeStats] = {}
    for seg_type, count in counts.items():
        duration = durations[seg_type]
        percentage = round(duration / total_duration * 100, 1) if total_duration > 0 else 0.0
        per_type[seg_type] = TypeStats(count=count, duration=duration, percentage=percentage)

    return StructureStats(
        total=len(segments),
        total_duration=total_duration,
        per_type=per_type,
    )
