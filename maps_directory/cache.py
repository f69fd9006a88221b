"""
Per-category dataset cache.

One explicit entry per category holds the last loaded Records together with an
enumerated load status. The cache is also the single place that tracks the
in-flight load of each category, so a second request can join it.
"""
import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from maps_directory.errors import LoadFailure
from maps_directory.models import Record, RowWarning


class LoadStatus(str, Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass(frozen=True)
class CacheEntry:
    """Snapshot of one category's cached dataset."""
    category: str
    records: Tuple[Record, ...] = ()
    status: LoadStatus = LoadStatus.UNLOADED
    error: Optional[LoadFailure] = None
    warnings: Tuple[RowWarning, ...] = field(default_factory=tuple)
    loaded_at: Optional[float] = None


class DatasetCache:
    """Keyed store of CacheEntry values. Mutated only by the Loader."""

    def __init__(self):
        self._entries: Dict[str, CacheEntry] = {}
        self._inflight: Dict[str, asyncio.Task] = {}

    def entry(self, category: str) -> CacheEntry:
        return self._entries.get(category) or CacheEntry(category=category)

    def status(self, category: str) -> LoadStatus:
        return self.entry(category).status

    def records(self, category: str) -> Tuple[Record, ...]:
        return self.entry(category).records

    def pending(self, category: str) -> Optional[asyncio.Task]:
        """Return the outstanding load task for a category, if any."""
        task = self._inflight.get(category)
        if task is not None and task.done():
            return None
        return task

    def mark_loading(self, category: str, task: asyncio.Task) -> None:
        if self.pending(category) is not None:
            raise RuntimeError(f"A load for '{category}' is already in flight")
        self._inflight[category] = task
        current = self.entry(category)
        self._entries[category] = CacheEntry(
            category=category,
            records=current.records,
            status=LoadStatus.LOADING,
            warnings=current.warnings,
            loaded_at=current.loaded_at,
        )

    def store(
        self,
        category: str,
        records: Tuple[Record, ...],
        warnings: Tuple[RowWarning, ...] = (),
    ) -> CacheEntry:
        """Replace the category's entry with freshly loaded records."""
        self._inflight.pop(category, None)
        entry = CacheEntry(
            category=category,
            records=tuple(records),
            status=LoadStatus.LOADED,
            warnings=tuple(warnings),
            loaded_at=time.time(),
        )
        self._entries[category] = entry
        return entry

    def mark_failed(self, category: str, failure: LoadFailure) -> CacheEntry:
        """Record a failed load. Previously loaded records are kept."""
        self._inflight.pop(category, None)
        current = self.entry(category)
        entry = CacheEntry(
            category=category,
            records=current.records,
            status=LoadStatus.FAILED,
            error=failure,
            warnings=current.warnings,
            loaded_at=current.loaded_at,
        )
        self._entries[category] = entry
        return entry

    def invalidate(self, category: str) -> None:
        """Drop the loaded status so the next load refetches. Records stay until replaced."""
        current = self.entry(category)
        if current.status is LoadStatus.LOADED:
            self._entries[category] = CacheEntry(
                category=category,
                records=current.records,
                status=LoadStatus.UNLOADED,
                warnings=current.warnings,
                loaded_at=current.loaded_at,
            )

    def get_cache_stats(self) -> dict:
        counts = {status.value: 0 for status in LoadStatus}
        for entry in self._entries.values():
            counts[entry.status.value] += 1
        return {
            "categories": len(self._entries),
            "records": sum(len(e.records) for e in self._entries.values()),
            **counts,
        }
