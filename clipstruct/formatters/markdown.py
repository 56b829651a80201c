"""Markdown export of a structure analysis.

WHY: Analysts paste structure breakdowns into notes, docs and issue
trackers, most of which render Markdown. The export mirrors what the
timeline panel shows: a compact timeline, a per-type overview, and the
text of every segment.

HOW: Four sections built line by line: header metadata, timeline
(one bullet per segment), overview (one bullet per type present, from
structure_stats), details (one heading per segment with intent and a
200-character content preview), followed by a generated-by footer.

RULES:
- Timeline lines: "- m:ss-m:ss | **Short Label** | intent"
- Overview percentages come from structure_stats (one decimal)
- Content previews are truncated at 200 characters with "..."
- Output suffix: "-structure.md"; media type: "text/markdown"
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


class MarkdownFormatter(BaseFormatter):
    """Formatter that produces a Markdown structure report."""

    @property
    def name(self) -> str:
        return "Markdown"

    @property
    def suffix(self) -> str:
        return "-structure.md"

    def format(self, report: StructureReport) -> List[FormatterOutput]:
        lines: List[str] = [
            "# Video Structure Analysis",
            "",
            "- **Title**: {}".format(report.title),
            "- **URL**: {}".format(report.url),
            "- **Analyzed**: {}".format(format_timestamp(report.analyzed_at)),
            "",
            "## Structure Timeline",
            "",
        ]

        for seg in report.segments:
            lines.append("- {}-{} | **{}** | {}".format(
                format_time(seg.start), format_time(seg.end),
                seg.type.short_label, seg.intent,
            ))

        lines.extend(["", "## Structure Overview", ""])
        for seg_type, ts in report.stats.per_type.items():
            lines.append("- **{}**: {} segment(s), {} total ({:.1f}%)".format(
                seg_type.short_label, ts.count, format_time(ts.duration), ts.percentage,
            ))

        lines.extend(["", "## Details", ""])
        for i, seg in enumerate(report.segments, start=1):
            lines.append("### {}. {} ({}-{})".format(
                i, seg.type.short_label, format_time(seg.start), format_time(seg.end),
            ))
            lines.append("")
            lines.append("**Intent**: {}".format(seg.intent))
            lines.append("")
            lines.append("**Content**: {}".format(preview(seg.text)))
            lines.append("")

        lines.extend(["---", "", "*Generated by ClipStruct*", ""])

        return [
            FormatterOutput(
                suffix=self.suffix,
                content="\n".join(lines),
                media_type="text/markdown",
            )
        ]
