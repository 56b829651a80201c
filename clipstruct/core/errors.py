"""Error kinds raised by the caption structure pipeline.

RULES:
- EmptyInputError is the only fatal pipeline error: no caption events, or
  nothing left to classify. Callers surface it as "no usable captions".
- MalformedEventError is recoverable. The caption adapter raises it only in
  strict mode; by default the offending fields are coerced to zero.
- Both subclass ValueError so callers that already catch ValueError keep
  working.
"""

from __future__ import annotations


class EmptyInputError(ValueError):
    """Raised when the pipeline receives nothing it can analyze."""


class MalformedEventError(ValueError):
    """Raised for a caption event with missing or invalid timing fields."""

    def __init__(self, message: str, index: int | None = None) -> None:
        super().__init__(message)
        self.index = index
