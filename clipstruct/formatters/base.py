"""Abstract base formatter, report container, and output container.

WHY: Every export format consumes the same classified structure but
produces different file content. This base class enforces a consistent
interface so the CLI and the HTTP API can work with any formatter
generically.

HOW: StructureReport bundles the classified segments with the video
metadata shown in export headers. BaseFormatter is an ABC with two
requirements: a ``name`` property and a ``format()`` method.
FormatterOutput is a plain dataclass that bundles a file suffix with its
content and MIME type.

RULES:
- Subclasses MUST implement ``name`` (human-readable) and ``format()``
- ``format()`` returns a list; every current formatter returns one item
- ``suffix`` starts with a hyphen, e.g. ``"-structure.md"``
- The caller is responsible for prepending a filename stem
  (see export_filename)
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from clipstruct.core.ir import StructureSegment
from clipstruct.core.stats import StructureStats, structure_stats

# Maximum number of text characters shown per segment in human-readable exports.
CONTENT_PREVIEW_CHARS = 200

_UNSAFE_FILENAME_RE = re.compile(r'[<>:"/\\|?*]')


@dataclass
class StructureReport:
    """A classified video plus the metadata printed in export headers.

    Attributes:
        segments: Classified structure segments in time order.
        title: Video title ("Untitled video" when unknown).
        url: Video URL, may be empty.
        analyzed_at: When the analysis ran (timezone-aware).
    """

    segments: List[StructureSegment]
    title: str = "Untitled video"
    url: str = ""
    analyzed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    video_duration: Optional[float] = None

    @property
    def stats(self) -> StructureStats:
        return structure_stats(self.segments)


@dataclass
class FormatterOutput:
    """One output file produced by a formatter.

    Attributes:
        suffix: File suffix appended to the filename stem,
                e.g. ``"-structure.md"`` → ``"ClipStruct_talk-structure.md"``.
        content: The file content as a string.
        media_type: MIME type for the content, e.g. ``"text/markdown"``.
    """

    suffix: str
    content: str
    media_type: str


def preview(text: str, limit: int = CONTENT_PREVIEW_CHARS) -> str:
    """Truncate text to ``limit`` characters, marking the cut with '...'."""
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def export_filename(title: str, suffix: str) -> str:
    """Build a filesystem-safe export name from a video title and a suffix.

    Characters illegal on common filesystems become "_" and the title is
    truncated to 50 characters.
    """
    clean = _UNSAFE_FILENAME_RE.sub("_", title or "Untitled video")[:50]
    return "ClipStruct_{}{}".format(clean, suffix)


class BaseFormatter(ABC):
    """Abstract base for all export formatters.

    To add a new export format:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter
    3. Implement format() and name
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'Markdown'."""

    @property
    @abstractmethod
    def suffix(self) -> str:
        """File suffix this formatter produces, e.g. '-structure.md'."""

    @abstractmethod
    def format(self, report: StructureReport) -> List[FormatterOutput]:
        """Convert a StructureReport into one or more output files."""


def format_timestamp(moment: datetime) -> str:
    """Render an analysis timestamp for export headers."""
    text = moment.strftime("%Y-%m-%d %H:%M")
    zone = moment.tzname()
    return "{} {}".format(text, zone) if zone else text
