"""
Loader: fetch-then-parse orchestration for category datasets.
"""
import asyncio
import time
from typing import Dict, Iterable, Optional, Tuple, Union

from loguru import logger

from maps_directory.cache import DatasetCache, LoadStatus
from maps_directory.clients import DatasetClient
from maps_directory.errors import LoadFailure, ParseFailure, TransportFailure, UnknownCategory
from maps_directory.models import Record
from maps_directory.parser import parse_dataset
from maps_directory.registry import SourceRegistry

# Records on success, the raised exception otherwise
LoadOutcome = Union[Tuple[Record, ...], BaseException]


def _consume_exception(task: asyncio.Task) -> None:
    # Failures are reported to every awaiting caller; this only keeps asyncio from
    # warning about a result nobody collected after all callers went away.
    if not task.cancelled():
        task.exception()


class Loader:
    """
    Loads category datasets into a DatasetCache.

    Args:
        registry (SourceRegistry): Resolves category ids to resource locations.
        cache (DatasetCache): Store updated by this loader. A new one is created when omitted.
        client: Object exposing ``async fetch(locator) -> bytes``. Defaults to the DatasetClient singleton.
    """

    def __init__(
        self,
        registry: SourceRegistry,
        cache: Optional[DatasetCache] = None,
        client=None,
    ):
        self.registry = registry
        self.cache = cache if cache is not None else DatasetCache()
        self.client = client if client is not None else DatasetClient()

    async def load(self, category_id: str) -> Tuple[Record, ...]:
        """
        Return the Records of a category, fetching them on a cache miss.

        A category that is already loaded is served from the cache. A category that
        is currently loading is joined rather than fetched twice.

        Args:
            category_id (str): Configured category id.

        Returns:
            Tuple[Record, ...]: Records in source row order.

        Raises:
            UnknownCategory: If the id is not configured.
            LoadFailure: If the fetch or the parse failed.
        """
        try:
            location = self.registry.location_for(category_id)
        except UnknownCategory:
            logger.error(f"Unknown category requested: '{category_id}'")
            raise

        entry = self.cache.entry(category_id)
        if entry.status is LoadStatus.LOADED:
            return entry.records

        task = self.cache.pending(category_id)
        if task is None:
            task = asyncio.ensure_future(self._fetch_and_parse(category_id, location))
            task.add_done_callback(_consume_exception)
            self.cache.mark_loading(category_id, task)
        else:
            logger.debug(f"Joining in-flight load for '{category_id}'")

        # Shielded so that a caller giving up never cancels the shared load
        return await asyncio.shield(task)

    async def reload(self, category_id: str) -> Tuple[Record, ...]:
        """Force a refetch. Stale records stay visible until the new load lands."""
        self.cache.invalidate(category_id)
        return await self.load(category_id)

    async def load_all(self, category_ids: Optional[Iterable[str]] = None) -> Dict[str, LoadOutcome]:
        """
        Load several categories concurrently.

        Args:
            category_ids: Ids to load. Defaults to every configured category.

        Returns:
            Dict[str, LoadOutcome]: Per category, its Records or the exception its load raised.
        """
        ids = list(category_ids) if category_ids is not None else self.registry.ids()
        results = await asyncio.gather(*[self.load(c) for c in ids], return_exceptions=True)
        return dict(zip(ids, results))

    async def _fetch_and_parse(self, category_id: str, location: str) -> Tuple[Record, ...]:
        start = time.perf_counter()
        logger.debug(f"⏳ Loading '{category_id}' from {location}")
        try:
            raw = await self.client.fetch(location)
            result = parse_dataset(raw)
        except (TransportFailure, ParseFailure) as e:
            failure = LoadFailure(category_id, e)
            self.cache.mark_failed(category_id, failure)
            logger.error(f"Error loading '{category_id}': {e}")
            raise failure from e
        except Exception as e:
            failure = LoadFailure(category_id, TransportFailure(location, cause=e))
            self.cache.mark_failed(category_id, failure)
            logger.exception(f"Unexpected error while loading '{category_id}'")
            raise failure from e

        if result.warnings:
            logger.warning(f"CSV parsing warnings for '{category_id}': {len(result.warnings)} row(s) skipped")
            for warning in result.warnings:
                logger.debug(f"  line {warning.line}: {warning.reason} | {warning.raw[:80]}")

        self.cache.store(category_id, result.records, result.warnings)
        duration = time.perf_counter() - start
        logger.info(f"Loaded {len(result.records)} records for '{category_id}' in {duration:.2f}s")
        return result.records
