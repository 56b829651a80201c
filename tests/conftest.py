"""Shared test fixtures for the clipstruct test suite.

WHY: Several test modules need the same small caption track.
Centralizing it here keeps the scenario identical across unit, API and
end-to-end tests.

HOW: Pytest fixtures expose a realistic short video
(hook, context, core argument, example, call to action) as caption dicts
and as decoded events.

RULES:
- Times are chosen so every segment boundary is at least 5s apart
- The sample video is 120 seconds long
- Fixtures return fresh lists so tests may mutate them freely
"""

from typing import Any, Dict, List

import pytest

from clipstruct.adapters import decode_events
from clipstruct.core.ir import CaptionEvent


# ---------------------------------------------------------------------------
# Sample video: 120 seconds, five natural segments
# ---------------------------------------------------------------------------

SAMPLE_CAPTIONS: List[Dict[str, Any]] = [
    {"text": "um imagine shipping", "start": 0.0, "duration": 2.0},
    {"text": "ten times faster", "start": 2.2, "duration": 1.8},
    {"text": "A few years ago our builds took an hour", "start": 16.0, "duration": 4.0},
    {"text": "and the team was stuck waiting", "start": 20.3, "duration": 3.0},
    {"text": "The reason is simple: caching wins.", "start": 30.0, "duration": 25.0},
    {"text": "Most importantly it is cheap.", "start": 55.2, "duration": 20.0},
    {"text": "For example, one repo went from 60 to 6 minutes.", "start": 82.0, "duration": 10.0},
    {"text": "Please subscribe for more", "start": 110.0, "duration": 5.0},
]


@pytest.fixture
def sample_captions() -> List[Dict[str, Any]]:
    """Caption dicts for the 120-second sample video."""
    return [dict(c) for c in SAMPLE_CAPTIONS]


@pytest.fixture
def sample_events() -> List[CaptionEvent]:
    """Decoded CaptionEvents for the 120-second sample video."""
    return decode_events([dict(c) for c in SAMPLE_CAPTIONS])
