"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation. Pydantic
models enforce field types at runtime and generate JSON Schema that
appears in the /docs UI.

HOW: Each endpoint pair (request + response) has its own model. Caption
items are accepted as loose dicts and decoded by the caption adapter, so a
single malformed timing field is coerced instead of rejecting the whole
request. SegmentType is reused directly as the closed set of types.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Response models never expose internal implementation details
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from clipstruct.core.ir import SegmentType

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class AnalyzeRequest(BaseModel):
    """Caption payload for one video.

    RULES:
    - captions items may use any shape the caption adapter understands
    - video_duration is optional; without it the tail call-to-action rule
      is skipped
    """

    video_id: str = Field(min_length=1, description="Identifier of the video (e.g. a YouTube ID).")
    title: str = Field(default="", description="Video title, used in exports.")
    url: str = Field(default="", description="Video URL, used in exports.")
    video_duration: Optional[float] = Field(
        default=None,
        description="Total video length in seconds, if known.",
    )
    captions: List[Dict[str, Any]] = Field(
        description="Caption events, e.g. [{\"text\": \"hi\", \"start\": 0.0, \"duration\": 1.2}].",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "video_id": "dQw4w9WgXcQ",
                "title": "How caching works",
                "url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
                "video_duration": 212.0,
                "captions": [
                    {"text": "Imagine a world without caches", "start": 0.0, "duration": 2.5},
                    {"text": "subscribe for more", "start": 205.0, "duration": 3.0},
                ],
            }
        ]
    }}


class SegmentUpdate(BaseModel):
    """A manual edit to one classified segment.

    RULES:
    - Omitted fields keep their current value
    - start/end accept seconds or "m:ss" strings
    """

    type: Optional[SegmentType] = Field(default=None, description="New structure type.")
    intent: Optional[str] = Field(default=None, description="New intent description.")
    start: Optional[Union[float, str]] = Field(default=None, description="New start (seconds or m:ss).")
    end: Optional[Union[float, str]] = Field(default=None, description="New end (seconds or m:ss).")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class SegmentResponse(BaseModel):
    type: SegmentType = Field(description="Structure type.")
    label: str = Field(description="Display name of the structure type.")
    start: float = Field(description="Start time in seconds.")
    end: float = Field(description="End time in seconds.")
    duration: float = Field(description="end - start, in seconds.")
    text: str = Field(description="Segment text.")
    intent: str = Field(description="Why the segment has this type.")
    user_modified: bool = Field(description="True once the segment was edited manually.")


class TypeStatsResponse(BaseModel):
    count: int = Field(description="Number of segments of this type.")
    duration: float = Field(description="Total seconds covered by this type.")
    percentage: float = Field(description="Share of total duration, one decimal.")


class StructureStatsResponse(BaseModel):
    total: int = Field(description="Number of segments.")
    total_duration: float = Field(description="Sum of segment durations in seconds.")
    per_type: Dict[str, TypeStatsResponse] = Field(description="Statistics keyed by type.")


class PreprocessStatsResponse(BaseModel):
    total_original_captions: int = Field(description="Caption events received.")
    total_segments: int = Field(description="Natural segments detected.")
    total_captions: int = Field(description="Merged units across all segments.")
    avg_captions_per_segment: float = Field(description="Merged units per segment, one decimal.")
    compression_ratio: float = Field(description="Percent of events absorbed by cleaning/merging.")


class AnalysisResponse(BaseModel):
    """A stored analysis with its segments and statistics."""

    video_id: str = Field(description="Identifier of the video.")
    title: str = Field(description="Video title.")
    url: str = Field(description="Video URL.")
    video_duration: Optional[float] = Field(default=None, description="Video length in seconds.")
    created_at: float = Field(description="First analysis timestamp (Unix epoch seconds).")
    updated_at: float = Field(description="Last change timestamp (Unix epoch seconds).")
    segments: List[SegmentResponse] = Field(description="Classified segments in time order.")
    stats: StructureStatsResponse = Field(description="Per-type statistics.")
    preprocess_stats: PreprocessStatsResponse = Field(description="Preprocessing statistics.")


class HistoryItem(BaseModel):
    video_id: str = Field(description="Identifier of the video.")
    title: str = Field(description="Video title.")
    url: str = Field(description="Video URL.")
    segment_count: int = Field(description="Number of classified segments.")
    updated_at: float = Field(description="Last change timestamp (Unix epoch seconds).")


class FormatInfo(BaseModel):
    """Description of an available export format."""

    key: str = Field(description="Format identifier used in export URLs.")
    name: str = Field(description="Human-readable format name.")
    suffix: str = Field(description="File suffix produced (e.g. '-structure.md').")


class ErrorResponse(BaseModel):
    """Standard error response body."""

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
