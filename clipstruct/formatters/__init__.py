"""Export formatter registry: pluggable format hub.

WHY: The CLI and the HTTP API need a single lookup to find the right
formatter by name. A central dict makes it trivial to add new formats:
create the formatter class, import it here, add one line.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["markdown"]()``.

RULES:
- Keys are snake_case identifiers (used in CLI flags and API paths)
- Values are BaseFormatter subclasses (not instances)
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

from typing import Dict, Type

from clipstruct.formatters.base import BaseFormatter
from clipstruct.formatters.json_export import JSONFormatter
from clipstruct.formatters.markdown import MarkdownFormatter
from clipstruct.formatters.plain_text import PlainTextFormatter

FORMATTERS: Dict[str, Type[BaseFormatter]] = {
    "markdown": MarkdownFormatter,
    "plain_text": PlainTextFormatter,
    "json": JSONFormatter,
}
