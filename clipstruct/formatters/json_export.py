"""Schema-validated JSON export of a structure analysis.

WHY: Downstream tools (editing scripts, dashboards, re-import into the
panel) need the structure in a machine-readable form with a stable shape.
A JSON schema pins that shape down, and validating every export catches
regressions before a broken file leaves the process.

HOW: Builds a plain dict (camelCase keys, matching the panel's storage
format), validates it with jsonschema against structure_schema.json, and
serialises it with indent=2 and ensure_ascii=False so Chinese text stays
readable.

RULES:
- Schema version is "1.0.0"
- Segment types serialise as their enum values ("corePoint", ...)
- Validate output against the schema before returning; raise on failure
- Output suffix: "-structure.json"; media type: "application/json"
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema

from clipstruct.core.ir import StructureSegment
from clipstruct.formatters.base import BaseFormatter, FormatterOutput, StructureReport

SCHEMA_VERSION = "1.0.0"

_SCHEMA_PATH = Path(__file__).resolve().parent / "structure_schema.json"

_CACHED_SCHEMA: Optional[Dict[str, Any]] = None


def get_schema() -> Dict[str, Any]:
    """Load the export schema from disk, cached after the first call."""
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(_SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


def segment_to_dict(seg: StructureSegment) -> Dict[str, Any]:
    return {
        "type": seg.type.value,
        "start": seg.start,
        "end": seg.end,
        "duration": seg.duration,
        "text": seg.text,
        "intent": seg.intent,
        "userModified": seg.user_modified,
    }


def _known_duration(value: Optional[float]) -> Optional[float]:
    return value if value is not None and value > 0 else None


def report_to_dict(report: StructureReport) -> Dict[str, Any]:
    return {
        "version": SCHEMA_VERSION,
        "title": report.title,
        "url": report.url,
        "analyzedAt": report.analyzed_at.isoformat(),
        "videoDuration": _known_duration(report.video_duration),
        "segments": [segment_to_dict(seg) for seg in report.segments],
        "stats": report.stats.to_dict(),
    }


class JSONFormatter(BaseFormatter):
    """Formatter that produces schema-validated structure JSON."""

    @property
    def name(self) -> str:
        return "JSON"

    @property
    def suffix(self) -> str:
        return "-structure.json"

    def format(self, report: StructureReport) -> List[FormatterOutput]:
        """Convert the report into structure JSON.

        Raises:
            jsonschema.ValidationError: If the generated JSON does not
                conform to structure_schema.json.
        """
        output = report_to_dict(report)
        jsonschema.validate(instance=output, schema=get_schema())

        return [
            FormatterOutput(
                suffix=self.suffix,
                content=json.dumps(output, indent=2, ensure_ascii=False),
                media_type="application/json",
            )
        ]
