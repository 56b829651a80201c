"""Precompiled, script-aware phrase matching for fillers and keywords.

WHY: Both the normalizer (filler removal) and the classifier (structural
signal words) need case-insensitive whole-phrase matching over mixed
English/Chinese captions. A plain ``\\b`` boundary works for Latin text but
never fires between two CJK characters, because CJK scripts do not put
spaces between words. Rebuilding regexes on every call is also wasteful.

HOW: Each phrase is escaped and guarded only on the edges that end in a
Latin word character: the guard forbids another Latin letter, digit or
underscore directly before/after. Edges ending in a CJK character (or
punctuation) are left unguarded, so "想象" matches inside "我们想象一下"
while "so" does not match inside "also". All phrases of one list are
compiled once into a single alternation, longest phrase first.

RULES:
- Matching is case-insensitive
- Empty or whitespace-only phrases are ignored
- A matcher built from an empty list never matches
"""

from __future__ import annotations

import re
from typing import Iterable, Iterator, Optional, Tuple

# Characters that make up a "word" in Latin-script text.
_LATIN_WORD_CHARS = "0-9A-Za-zÀ-ɏ_"
_LATIN_WORD_RE = re.compile("[{}]".format(_LATIN_WORD_CHARS))


def phrase_pattern(phrase: str) -> str:
    """Build the regex source for one phrase with script-aware boundaries."""
    body = re.escape(phrase)
    if _LATIN_WORD_RE.match(phrase[0]):
        body = "(?<![{}])".format(_LATIN_WORD_CHARS) + body
    if _LATIN_WORD_RE.match(phrase[-1]):
        body = body + "(?![{}])".format(_LATIN_WORD_CHARS)
    return body


class PhraseMatcher:
    """Case-insensitive whole-phrase matcher over a fixed phrase list."""

    def __init__(self, phrases: Iterable[str]) -> None:
        cleaned = {p.strip().lower() for p in phrases if p and p.strip()}
        self.phrases: Tuple[str, ...] = tuple(sorted(cleaned, key=lambda p: (-len(p), p)))
        self._pattern: Optional[re.Pattern] = None
        if self.phrases:
            self._pattern = re.compile(
                "|".join(phrase_pattern(p) for p in self.phrases),
                re.IGNORECASE,
            )

    def __bool__(self) -> bool:
        return self._pattern is not None

    def __repr__(self) -> str:
        return "PhraseMatcher({} phrases)".format(len(self.phrases))

    def search(self, text: str) -> bool:
        """Return True if any phrase occurs in text."""
        if self._pattern is None:
            return False
        return self._pattern.search(text) is not None

    def first(self, text: str) -> Optional[str]:
        """Return the first matching phrase (lowercased), or None."""
        if self._pattern is None:
            return None
        match = self._pattern.search(text)
        return match.group(0).lower() if match else None

    def finditer(self, text: str) -> Iterator[re.Match]:
        if self._pattern is None:
            return iter(())
        return self._pattern.finditer(text)
