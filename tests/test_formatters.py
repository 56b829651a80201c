"""Unit tests for the export formatters and the formatter registry.

WHY: Exports leave the process and get pasted into docs or re-imported by
other tools. A malformed JSON export or a timeline that drops a segment
would only be noticed by the person reading the file.

HOW: Builds a small StructureReport by hand (fixed timestamp, three
segments) and checks each formatter's sections, the JSON schema
validation, and the shared helpers (preview, export_filename).

RULES:
- JSON output is validated against structure_schema.json with jsonschema
- Tests never depend on the current time
"""

import json
from datetime import datetime, timezone

import jsonschema
import pytest

from clipstruct.core.ir import SegmentType, StructureSegment
from clipstruct.formatters import FORMATTERS
from clipstruct.formatters.base import StructureReport, export_filename, preview
from clipstruct.formatters.json_export import JSONFormatter, get_schema, report_to_dict
from clipstruct.formatters.markdown import MarkdownFormatter
from clipstruct.formatters.plain_text import PlainTextFormatter


@pytest.fixture
def report():
    segments = [
        StructureSegment(
            type=SegmentType.HOOK, start=0.0, end=12.0,
            text="Imagine shipping ten times faster",
            intent="Hooks the viewer by painting an imagined scenario",
        ),
        StructureSegment(
            type=SegmentType.CORE_POINT, start=20.0, end=65.0,
            text="The reason is simple: " + "caching " * 40,
            intent="Explains the underlying reason or logic",
        ),
        StructureSegment(
            type=SegmentType.CALL_TO_ACTION, start=100.0, end=108.0,
            text="订阅频道", intent="引导观众订阅频道", user_modified=True,
        ),
    ]
    return StructureReport(
        segments=segments,
        title="Build speed",
        url="https://example.com/watch?v=abc",
        analyzed_at=datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc),
        video_duration=110.0,
    )


class TestRegistry:

    def test_expected_keys(self):
        assert set(FORMATTERS) == {"markdown", "plain_text", "json"}

    def test_suffixes_unique(self):
        suffixes = [cls().suffix for cls in FORMATTERS.values()]
        assert len(set(suffixes)) == len(suffixes)


class TestMarkdownFormatter:

    def test_single_output(self, report):
        outputs = MarkdownFormatter().format(report)
        assert len(outputs) == 1
        assert outputs[0].suffix == "-structure.md"
        assert outputs[0].media_type == "text/markdown"

    def test_sections(self, report):
        content = MarkdownFormatter().format(report)[0].content
        assert content.startswith("# Video Structure Analysis")
        assert "- **Title**: Build speed" in content
        assert "- **Analyzed**: 2024-05-01 12:30 UTC" in content
        assert "## Structure Timeline" in content
        assert "## Structure Overview" in content
        assert "## Details" in content
        assert content.rstrip().endswith("*Generated by ClipStruct*")

    def test_timeline_lines(self, report):
        content = MarkdownFormatter().format(report)[0].content
        assert "- 0:00-0:12 | **Hook** | Hooks the viewer by painting an imagined scenario" in content
        assert "- 1:40-1:48 | **Call To Action** | 引导观众订阅频道" in content

    def test_overview_percentages(self, report):
        content = MarkdownFormatter().format(report)[0].content
        # 45s of 65s total
        assert "- **Core Point**: 1 segment(s), 0:45 total (69.2%)" in content

    def test_content_preview_truncated(self, report):
        content = MarkdownFormatter().format(report)[0].content
        long_line = [l for l in content.splitlines() if l.startswith("**Content**: The reason")][0]
        assert long_line.endswith("...")
        assert len(long_line) == len("**Content**: ") + 200 + 3


class TestPlainTextFormatter:

    def test_output(self, report):
        outputs = PlainTextFormatter().format(report)
        assert outputs[0].suffix == "-structure.txt"
        assert outputs[0].media_type == "text/plain"

    def test_no_markdown_markup(self, report):
        content = PlainTextFormatter().format(report)[0].content
        assert "**" not in content
        assert "#" not in content.replace("watch?v=abc", "")
        assert "0:20-1:05 | Core Point | Explains the underlying reason or logic" in content
        assert "Generated by ClipStruct" in content

    def test_no_trailing_whitespace(self, report):
        report.url = ""
        content = PlainTextFormatter().format(report)[0].content
        assert all(line == line.rstrip() for line in content.splitlines())


class TestJSONFormatter:

    def test_valid_against_schema(self, report):
        output = JSONFormatter().format(report)[0]
        data = json.loads(output.content)
        jsonschema.validate(instance=data, schema=get_schema())
        assert output.suffix == "-structure.json"
        assert output.media_type == "application/json"

    def test_fields(self, report):
        data = json.loads(JSONFormatter().format(report)[0].content)
        assert data["version"] == "1.0.0"
        assert data["videoDuration"] == 110.0
        assert [s["type"] for s in data["segments"]] == ["hook", "corePoint", "callToAction"]
        assert data["segments"][2]["userModified"] is True
        assert data["stats"]["total"] == 3
        assert data["stats"]["perType"]["corePoint"]["percentage"] == 69.2

    def test_non_ascii_kept_readable(self, report):
        content = JSONFormatter().format(report)[0].content
        assert "订阅频道" in content

    def test_unknown_duration_is_null(self, report):
        report.video_duration = None
        data = json.loads(JSONFormatter().format(report)[0].content)
        assert data["videoDuration"] is None

    def test_empty_report_valid(self):
        empty = StructureReport(segments=[])
        data = json.loads(JSONFormatter().format(empty)[0].content)
        assert data["segments"] == []
        assert data["stats"] == {"total": 0, "totalDuration": 0.0, "perType": {}}

    def test_schema_rejects_unknown_type(self, report):
        data = report_to_dict(report)
        data["segments"][0]["type"] = "outro"
        with pytest.raises(jsonschema.ValidationError):
            jsonschema.validate(instance=data, schema=get_schema())


class TestHelpers:

    def test_preview_short_text_unchanged(self):
        assert preview("short") == "short"

    def test_preview_truncates(self):
        assert preview("x" * 250) == "x" * 200 + "..."

    def test_export_filename_sanitized(self):
        assert export_filename('a/b:c?"d', "-structure.md") == "ClipStruct_a_b_c__d-structure.md"

    def test_export_filename_truncated(self):
        name = export_filename("t" * 80, ".json")
        assert name == "ClipStruct_" + "t" * 50 + ".json"

    def test_export_filename_default_title(self):
        assert export_filename("", "-structure.txt") == "ClipStruct_Untitled video-structure.txt"
