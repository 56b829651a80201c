"""In-memory analysis store with TTL expiry and a capped history.

WHY: The HTTP API needs somewhere to keep analyses between the request that
creates them and the requests that edit, list, or export them. Durable
storage is a deployment concern; an in-memory store is enough for a single
process and mirrors the panel's behaviour (entries expire after
DATA_EXPIRY_DAYS, history keeps at most MAX_HISTORY_ITEMS videos).

HOW: StoredAnalysis holds one video's classified structure and metadata.
AnalysisStore keeps them in a dict keyed by video ID, guarded by a
threading.Lock. Saving an existing video replaces it. When the store is
full the least recently updated entry is evicted. Reads drop entries whose
last update is older than the TTL.

RULES:
- All public methods that touch state acquire self._lock
- get() returns None for unknown or expired video IDs (no exceptions)
- list_analyses() returns newest first (by updated_at)
- update_segment() applies a manual override and bumps updated_at;
  invalid edits raise IndexError / ValueError and leave the entry unchanged
- Stored StructureSegments are immutable; edits replace list entries
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from clipstruct.config import DATA_EXPIRY_DAYS, MAX_HISTORY_ITEMS
from clipstruct.core.ir import StructureSegment
from clipstruct.core.pipeline import AnalysisResult, update_segment
from clipstruct.core.stats import PreprocessStats, StructureStats, structure_stats
from clipstruct.formatters.base import StructureReport

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = DATA_EXPIRY_DAYS * 24 * 60 * 60


@dataclass
class StoredAnalysis:
    """One video's analysis as kept by the API.

    RULES:
    - video_id: caller-supplied identifier, unique within the store
    - structure: current segments, including any manual edits
    - created_at / updated_at: epoch seconds
    """

    video_id: str
    title: str
    url: str
    video_duration: Optional[float]
    structure: List[StructureSegment]
    preprocess_stats: PreprocessStats
    created_at: float
    updated_at: float

    @property
    def stats(self) -> StructureStats:
        return structure_stats(self.structure)

    def to_report(self) -> StructureReport:
        return StructureReport(
            segments=list(self.structure),
            title=self.title,
            url=self.url,
            analyzed_at=datetime.fromtimestamp(self.updated_at, tz=timezone.utc),
            video_duration=self.video_duration,
        )


class AnalysisStore:
    """Thread-safe in-memory store for structure analyses."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_items: int = MAX_HISTORY_ITEMS,
    ) -> None:
        self._items: Dict[str, StoredAnalysis] = {}
        self._lock = threading.Lock()
        self._ttl_seconds = ttl_seconds
        self.max_items = max_items

    def save(
        self,
        video_id: str,
        result: AnalysisResult,
        title: str = "",
        url: str = "",
    ) -> StoredAnalysis:
        """Store (or replace) the analysis for video_id."""
        now = time.time()
        with self._lock:
            previous = self._items.pop(video_id, None)
            entry = StoredAnalysis(
                video_id=video_id,
                title=title,
                url=url,
                video_duration=result.video_duration,
                structure=list(result.structure),
                preprocess_stats=result.preprocess_stats,
                created_at=previous.created_at if previous else now,
                updated_at=now,
            )
            self._items[video_id] = entry

            evicted = []
            while len(self._items) > self.max_items:
                oldest = min(self._items.values(), key=lambda a: a.updated_at)
                evicted.append(self._items.pop(oldest.video_id).video_id)

        logger.info("Stored analysis for %s (%d segments)", video_id, len(entry.structure))
        for old_id in evicted:
            logger.info("Evicted analysis %s (history limit %d)", old_id, self.max_items)
        return entry

    def get(self, video_id: str) -> Optional[StoredAnalysis]:
        with self._lock:
            entry = self._items.get(video_id)
            if entry is None:
                return None
            if self._is_expired(entry, time.time()):
                del self._items[video_id]
                logger.info("Expired analysis %s", video_id)
                return None
            return entry

    def list_analyses(self) -> List[StoredAnalysis]:
        """Return live analyses, most recently updated first."""
        now = time.time()
        with self._lock:
            live = [a for a in self._items.values() if not self._is_expired(a, now)]
        return sorted(live, key=lambda a: a.updated_at, reverse=True)

    def update_segment(self, video_id: str, index: int, **changes: Any) -> Optional[StoredAnalysis]:
        """Apply a manual edit to one segment.

        Returns:
            The updated entry, or None if video_id is unknown or expired.

        Raises:
            IndexError: If index is out of range.
            ValueError: If the edit is invalid.
        """
        with self._lock:
            entry = self._items.get(video_id)
            if entry is None:
                return None
            now = time.time()
            if self._is_expired(entry, now):
                del self._items[video_id]
                logger.info("Expired analysis %s", video_id)
                return None
            entry.structure = update_segment(entry.structure, index, **changes)
            entry.updated_at = now
            return entry

    def delete(self, video_id: str) -> bool:
        with self._lock:
            entry = self._items.pop(video_id, None)
        if entry is None:
            return False
        logger.info("Deleted analysis %s", video_id)
        return True

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def cleanup_expired(self) -> int:
        """Remove every analysis older than the TTL; return how many went."""
        now = time.time()
        with self._lock:
            expired = [vid for vid, a in self._items.items() if self._is_expired(a, now)]
            for vid in expired:
                del self._items[vid]
        for vid in expired:
            logger.info("Expired analysis %s", vid)
        return len(expired)

    def _is_expired(self, entry: StoredAnalysis, now: float) -> bool:
        return now - entry.updated_at > self._ttl_seconds
