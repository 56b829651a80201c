"""Command-line interface for ClipStruct.

WHY: Users need a simple way to analyse a caption file from the terminal
and to start the HTTP API. The CLI wires together the caption adapter,
the analysis pipeline, pluggable export formatters, and file saving
behind a single command.

HOW: Uses argparse with two subcommands. ``analyze`` reads a caption JSON
file, decodes it with the caption adapter, runs the pipeline, prints a
short timeline to stderr, and saves one file per requested format next to
the input (or to --output-dir, or to stdout with --stdout). ``serve`` runs
the FastAPI app under uvicorn.

RULES:
- Positional argument for analyze: caption JSON file path
- --formats: comma-separated formatter keys (default: all registered)
- Output naming: ClipStruct_{title}{suffix}, numeric suffix for conflicts
  (ClipStruct_talk-structure-2.md)
- Status output goes to stderr (not stdout)
- Exit code 1 for unreadable input, unknown formats, or no usable captions
- Python 3.9 compatible: no match/case, no X | Y unions
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from clipstruct.adapters import decode_events
from clipstruct.core.errors import EmptyInputError
from clipstruct.core.pipeline import analyze
from clipstruct.core.timecode import format_time
from clipstruct.formatters import FORMATTERS
from clipstruct.formatters.base import FormatterOutput, StructureReport, export_filename


def _status(msg: str) -> None:
    """Print a status message to stderr so stdout stays pipeable."""
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _resolve_output_path(filename: str, output_dir: Path) -> Path:
    """Return a path in output_dir that does not overwrite an existing file.

    RULES:
    - First choice: output_dir / filename
    - On conflict: insert -2, -3, ... before the extension
    """
    candidate = output_dir / filename
    if not candidate.exists():
        return candidate

    dot_idx = filename.rfind(".")
    if dot_idx > 0:
        name, ext = filename[:dot_idx], filename[dot_idx:]
    else:
        name, ext = filename, ""

    counter = 2
    while True:
        candidate = output_dir / "{}-{}{}".format(name, counter, ext)
        if not candidate.exists():
            return candidate
        counter += 1


def _save_output(output: FormatterOutput, title: str, output_dir: Path) -> Path:
    path = _resolve_output_path(export_filename(title, output.suffix), output_dir)
    path.write_text(output.content, encoding="utf-8")
    return path


def _parse_formats(value: Optional[str]) -> List[str]:
    if not value:
        return list(FORMATTERS.keys())
    keys = [f.strip() for f in value.split(",") if f.strip()]
    for key in keys:
        if key not in FORMATTERS:
            available = ", ".join(sorted(FORMATTERS.keys()))
            _fail("Unknown format '{}'. Available formats: {}".format(key, available))
    return keys


def _run_analyze(args: argparse.Namespace) -> None:
    """Analyse one caption file and write the requested exports.

    RULES:
    - Validate input and output paths before decoding anything
    - --stdout prints every export to stdout instead of saving files
    - Timeline summary goes to stderr
    """
    input_path = Path(args.input_file).resolve()
    if not input_path.is_file():
        _fail("File not found: {}".format(input_path))

    output_dir = Path(args.output_dir).resolve() if args.output_dir else input_path.parent
    if not args.stdout and not output_dir.is_dir():
        _fail("Output directory does not exist: {}".format(output_dir))

    format_keys = _parse_formats(args.formats)

    try:
        with open(input_path, encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, ValueError) as e:
        _fail("Could not read caption JSON from {}: {}".format(input_path, e))

    try:
        events = decode_events(payload, strict=args.strict)
        _status("Loaded {} caption events from {}".format(len(events), input_path.name))
        result = analyze(events, video_duration=args.duration)
    except EmptyInputError:
        _fail("No usable captions found in {}".format(input_path.name))
    except ValueError as e:
        _fail(str(e))

    pre = result.preprocess_stats
    _status("  {} natural segments from {} merged captions ({}% compressed)".format(
        pre.total_segments, pre.total_captions, pre.compression_ratio,
    ))
    _status("")
    for seg in result.structure:
        _status("  {}-{}  {:<24} {}".format(
            format_time(seg.start), format_time(seg.end), seg.type.short_label, seg.intent,
        ))
    _status("")

    title = args.title or input_path.stem
    report = StructureReport(
        segments=result.structure,
        title=title,
        url=args.url or "",
        video_duration=args.duration,
    )

    saved: List[Path] = []
    for key in format_keys:
        formatter = FORMATTERS[key]()
        for output in formatter.format(report):
            if args.stdout:
                sys.stdout.write(output.content)
                if not output.content.endswith("\n"):
                    sys.stdout.write("\n")
            else:
                path = _save_output(output, title, output_dir)
                saved.append(path)
                _status("  Saved: {}".format(path.name))

    if saved:
        _status("Done! Saved {} file(s) to {}".format(len(saved), output_dir))


def _run_serve(args: argparse.Namespace) -> None:
    from clipstruct.server.app import run_api
    run_api(host=args.host, port=args.port, log_level="debug" if args.verbose else None)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable; tests can inspect the parser without running the pipeline.
    """
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging.",
    )

    parser = argparse.ArgumentParser(
        prog="clipstruct",
        description="Analyse the narrative structure of a video from its captions.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        parents=[common],
        help="Analyse a caption JSON file and write structure exports.",
    )
    analyze_parser.add_argument(
        "input_file",
        help="Caption JSON: a list of {text, start, duration} objects, or timed-text JSON3.",
    )
    analyze_parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Total video duration in seconds (enables the closing call-to-action rule).",
    )
    analyze_parser.add_argument(
        "--title",
        default=None,
        help="Video title for export headers (default: input file name).",
    )
    analyze_parser.add_argument(
        "--url",
        default=None,
        help="Video URL for export headers.",
    )
    analyze_parser.add_argument(
        "--formats",
        default=None,
        help="Comma-separated list of export formats. "
             "Available: {}. Default: all.".format(", ".join(sorted(FORMATTERS.keys()))),
    )
    analyze_parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save exports (default: same as input file).",
    )
    analyze_parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print exports to stdout instead of saving files.",
    )
    analyze_parser.add_argument(
        "--strict",
        action="store_true",
        help="Reject malformed caption timing instead of treating it as 0.",
    )
    analyze_parser.set_defaults(func=_run_analyze)

    serve_parser = subparsers.add_parser("serve", parents=[common], help="Run the HTTP API.")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: %(default)s).")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port (default: %(default)s).")
    serve_parser.set_defaults(func=_run_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the clipstruct console script and ``python -m clipstruct``.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args.func(args)


if __name__ == "__main__":
    main()
