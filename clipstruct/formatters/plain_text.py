"""Plain text export of a structure analysis.

WHY: Not every destination renders Markdown (email bodies, chat, terminal
pagers). The plain text export carries the same sections as the Markdown
one with ruled headings instead of markup.

HOW: Same four sections as MarkdownFormatter (header, timeline,
overview, details), separated by "=" and "-" rules 50 characters wide.

RULES:
- Timeline lines: "m:ss-m:ss | Short Label | intent"
- Content previews are truncated at 200 characters with "..."
- No trailing whitespace on any line
- Output suffix: "-structure.txt"; media type: "text/plain"
"""

from __future__ import annotations

from typing import List

from clipstruct.core.timecode import format_time
from clipstruct.formatters.base import (
    BaseFormatter,
    FormatterOutput,
    StructureReport,
    format_timestamp,
    preview,
)

_HEAVY_RULE = "=" * 50
_LIGHT_RULE = "-" * 50


class PlainTextFormatter(BaseFormatter):
    """Formatter that produces a plain text structure report."""

    @property
    def name(self) -> str:
        return "Plain Text"

    @property
    def suffix(self) -> str:
        return "-structure.txt"

    def format(self, report: StructureReport) -> List[FormatterOutput]:
        lines: List[str] = [
            "Video Structure Analysis",
            _HEAVY_RULE,
            "",
            "Title: {}".format(report.title),
            "URL: {}".format(report.url),
            "Analyzed: {}".format(format_timestamp(report.analyzed_at)),
            "",
            "Structure Timeline",
            _LIGHT_RULE,
        ]

        for seg in report.segments:
            lines.append("{}-{} | {} | {}".format(
                format_time(seg.start), format_time(seg.end),
                seg.type.short_label, seg.intent,
            ))

        lines.extend(["", "Structure Overview", _LIGHT_RULE])
        for seg_type, ts in report.stats.per_type.items():
            lines.append("{}: {} segment(s), {} total ({:.1f}%)".format(
                seg_type.short_label, ts.count, format_time(ts.duration), ts.percentage,
            ))

        lines.extend(["", "Details", _LIGHT_RULE])
        for i, seg in enumerate(report.segments, start=1):
            lines.append("")
            lines.append("{}. {} ({}-{})".format(
                i, seg.type.short_label, format_time(seg.start), format_time(seg.end),
            ))
            lines.append("Intent: {}".format(seg.intent))
            lines.append("Content: {}".format(preview(seg.text)))

        lines.extend(["", _HEAVY_RULE, "Generated by ClipStruct", ""])

        content = "\n".join(line.rstrip() for line in lines)
        return [
            FormatterOutput(
                suffix=self.suffix,
                content=content,
                media_type="text/plain",
            )
        ]
