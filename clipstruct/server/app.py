"""FastAPI application exposing structure analysis over HTTP.

WHY: The browser panel, scripts and other tools need to submit captions,
read back the classified structure, correct it by hand, and download
exports without embedding the Python pipeline. FastAPI provides request
validation and automatic OpenAPI documentation.

HOW: A single FastAPI app with endpoints grouped by tags. POST /analyses
decodes the caption payload with the caption adapter, runs the pipeline
synchronously (it is pure CPU work on a few thousand captions at most),
and keeps the result in the in-memory AnalysisStore. Other endpoints read,
edit, delete and export stored analyses.

RULES:
- All endpoints have OpenAPI descriptions on every parameter and response
- Error responses use a consistent ErrorResponse schema
- The analysis store is a module-level singleton; expired entries are
  cleaned up periodically by the lifespan task
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import asyncio
import logging
import re
from contextlib import asynccontextmanager
from typing import Dict, List, Optional
from urllib.parse import quote

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response

from clipstruct import __version__
from clipstruct.adapters import decode_events
from clipstruct.core.errors import EmptyInputError
from clipstruct.core.pipeline import analyze
from clipstruct.core.timecode import parse_time
from clipstruct.formatters import FORMATTERS
from clipstruct.formatters.base import export_filename
from clipstruct.server.models import (
    AnalysisResponse,
    AnalyzeRequest,
    ErrorResponse,
    FormatInfo,
    HealthResponse,
    HistoryItem,
    PreprocessStatsResponse,
    SegmentResponse,
    SegmentUpdate,
    StructureStatsResponse,
    TypeStatsResponse,
)
from clipstruct.server.store import AnalysisStore, StoredAnalysis

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App and store setup
# ---------------------------------------------------------------------------

analysis_store = AnalysisStore()

CLEANUP_INTERVAL_SECONDS = 3600

_TIME_CODE_RE = re.compile(r"^\d+:\d{1,2}$")


async def _periodic_cleanup() -> None:
    """Drop expired analyses once an hour."""
    while True:
        await asyncio.sleep(CLEANUP_INTERVAL_SECONDS)
        analysis_store.cleanup_expired()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start periodic cleanup on startup, cancel on shutdown."""
    task = asyncio.create_task(_periodic_cleanup())
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


app = FastAPI(
    lifespan=lifespan,
    title="ClipStruct API",
    description=(
        "REST API for analysing the narrative structure of a video from its "
        "captions. Submit caption events, get back time-bounded segments "
        "labelled hook, background, core point, example, transition, "
        "emotional amplification or call to action, edit them, and export "
        "the result as Markdown, plain text or JSON."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _analysis_to_response(entry: StoredAnalysis) -> AnalysisResponse:
    """Convert a StoredAnalysis into its API representation."""
    stats = entry.stats
    pre = entry.preprocess_stats
    return AnalysisResponse(
        video_id=entry.video_id,
        title=entry.title,
        url=entry.url,
        video_duration=entry.video_duration,
        created_at=entry.created_at,
        updated_at=entry.updated_at,
        segments=[
            SegmentResponse(
                type=seg.type,
                label=seg.type.short_label,
                start=seg.start,
                end=seg.end,
                duration=seg.duration,
                text=seg.text,
                intent=seg.intent,
                user_modified=seg.user_modified,
            )
            for seg in entry.structure
        ],
        stats=StructureStatsResponse(
            total=stats.total,
            total_duration=stats.total_duration,
            per_type={
                seg_type.value: TypeStatsResponse(
                    count=ts.count,
                    duration=ts.duration,
                    percentage=ts.percentage,
                )
                for seg_type, ts in stats.per_type.items()
            },
        ),
        preprocess_stats=PreprocessStatsResponse(
            total_original_captions=pre.total_original_captions,
            total_segments=pre.total_segments,
            total_captions=pre.total_captions,
            avg_captions_per_segment=pre.avg_captions_per_segment,
            compression_ratio=pre.compression_ratio,
        ),
    )


def _get_or_404(video_id: str) -> StoredAnalysis:
    entry = analysis_store.get(video_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Analysis not found: {}".format(video_id))
    return entry


def _update_to_changes(update: SegmentUpdate) -> Dict[str, object]:
    """Turn a SegmentUpdate into keyword arguments for a segment override.

    RULES:
    - Fields left unset are omitted
    - "m:ss" strings are converted to seconds; other strings are rejected
    """
    changes: Dict[str, object] = {}
    if update.type is not None:
        changes["type"] = update.type
    if update.intent is not None:
        changes["intent"] = update.intent
    for field_name in ("start", "end"):
        value = getattr(update, field_name)
        if value is None:
            continue
        if isinstance(value, str):
            if not _TIME_CODE_RE.match(value.strip()):
                raise HTTPException(
                    status_code=422,
                    detail="Invalid time code for {}: '{}' (expected m:ss)".format(field_name, value),
                )
            value = float(parse_time(value))
        changes[field_name] = value
    return changes


def _content_disposition(filename: str) -> str:
    """Attachment header that survives non-ASCII titles."""
    fallback = filename.encode("ascii", "replace").decode("ascii").replace("?", "_")
    return "attachment; filename=\"{}\"; filename*=UTF-8''{}".format(
        fallback, quote(filename)
    )


# ---------------------------------------------------------------------------
# Endpoints: Analyses
# ---------------------------------------------------------------------------


@app.post(
    "/analyses",
    status_code=201,
    response_model=AnalysisResponse,
    tags=["analyses"],
    summary="Analyse a video's caption track",
    description=(
        "Clean, merge and segment the submitted captions, classify each "
        "segment into a structure type, and store the result under video_id. "
        "Submitting the same video_id again replaces the previous analysis."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Caption payload could not be decoded"},
        422: {"model": ErrorResponse, "description": "No usable captions found"},
    },
)
def create_analysis(request: AnalyzeRequest) -> AnalysisResponse:
    try:
        events = decode_events(request.captions)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    try:
        result = analyze(events, video_duration=request.video_duration)
    except EmptyInputError as exc:
        logger.info("Rejected analysis for %s: %s", request.video_id, exc)
        raise HTTPException(status_code=422, detail="No usable captions found")

    entry = analysis_store.save(
        request.video_id,
        result,
        title=request.title,
        url=request.url,
    )
    return _analysis_to_response(entry)


@app.get(
    "/analyses",
    response_model=List[HistoryItem],
    tags=["analyses"],
    summary="List analysis history",
    description="Returns stored analyses, most recently updated first.",
)
async def list_analyses() -> List[HistoryItem]:
    return [
        HistoryItem(
            video_id=entry.video_id,
            title=entry.title,
            url=entry.url,
            segment_count=len(entry.structure),
            updated_at=entry.updated_at,
        )
        for entry in analysis_store.list_analyses()
    ]


@app.get(
    "/analyses/{video_id}",
    response_model=AnalysisResponse,
    tags=["analyses"],
    summary="Get a stored analysis",
    description="Returns the classified segments and statistics for one video.",
    responses={
        404: {"model": ErrorResponse, "description": "Analysis not found or expired"},
    },
)
async def get_analysis(video_id: str) -> AnalysisResponse:
    return _analysis_to_response(_get_or_404(video_id))


@app.patch(
    "/analyses/{video_id}/segments/{index}",
    response_model=AnalysisResponse,
    tags=["analyses"],
    summary="Manually correct one segment",
    description=(
        "Override the type, intent, start or end of the segment at index. "
        "The segment is flagged user_modified and statistics are recomputed."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Analysis or segment not found"},
        422: {"model": ErrorResponse, "description": "Invalid edit"},
    },
)
async def update_analysis_segment(
    video_id: str,
    index: int,
    update: SegmentUpdate,
) -> AnalysisResponse:
    changes = _update_to_changes(update)
    try:
        entry = analysis_store.update_segment(video_id, index, **changes)
    except IndexError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    if entry is None:
        raise HTTPException(status_code=404, detail="Analysis not found: {}".format(video_id))
    return _analysis_to_response(entry)


@app.delete(
    "/analyses/{video_id}",
    status_code=204,
    tags=["analyses"],
    summary="Delete a stored analysis",
    responses={
        404: {"model": ErrorResponse, "description": "Analysis not found"},
    },
)
async def delete_analysis(video_id: str) -> Response:
    if not analysis_store.delete(video_id):
        raise HTTPException(status_code=404, detail="Analysis not found: {}".format(video_id))
    return Response(status_code=204)


@app.get(
    "/analyses/{video_id}/export/{format_key}",
    tags=["analyses"],
    summary="Download an export of a stored analysis",
    description=(
        "Render the analysis in one of the formats listed by GET /formats "
        "and return it as a file attachment."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Analysis or format not found"},
    },
)
def export_analysis(video_id: str, format_key: str) -> Response:
    formatter_cls = FORMATTERS.get(format_key)
    if formatter_cls is None:
        available = ", ".join(sorted(FORMATTERS.keys()))
        raise HTTPException(
            status_code=404,
            detail="Unknown export format '{}'. Available: {}".format(format_key, available),
        )

    entry = _get_or_404(video_id)
    output = formatter_cls().format(entry.to_report())[0]
    filename = export_filename(entry.title or entry.video_id, output.suffix)

    return Response(
        content=output.content.encode("utf-8"),
        media_type="{}; charset=utf-8".format(output.media_type),
        headers={"Content-Disposition": _content_disposition(filename)},
    )


# ---------------------------------------------------------------------------
# Endpoints: Formats
# ---------------------------------------------------------------------------


@app.get(
    "/formats",
    response_model=List[FormatInfo],
    tags=["formats"],
    summary="List available export formats",
    description=(
        "Returns all supported export formats with their identifiers, "
        "human-readable names, and file suffixes."
    ),
)
async def list_formats() -> List[FormatInfo]:
    result = []
    for key, formatter_cls in sorted(FORMATTERS.items()):
        formatter = formatter_cls()
        result.append(FormatInfo(key=key, name=formatter.name, suffix=formatter.suffix))
    return result


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness and readiness check for load balancers and orchestrators.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api(host: str = "127.0.0.1", port: int = 8000, log_level: Optional[str] = None) -> None:
    """Entry point for the clipstruct-api console script."""
    import uvicorn
    uvicorn.run(app, host=host, port=port, log_level=log_level)
