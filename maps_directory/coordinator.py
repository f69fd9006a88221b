"""
View coordinator: the selection state behind the directory screen.

The rendering layer calls into this object and redraws from ``current_view()``.
Recomputing the view is synchronous; only category loads suspend.
"""
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from loguru import logger

from maps_directory import config
from maps_directory.cache import LoadStatus
from maps_directory.errors import LoadFailure, UnknownCategory
from maps_directory.filters import visible
from maps_directory.loader import Loader
from maps_directory.models import Record


@dataclass
class SelectionState:
    """What the user currently has selected."""
    active_category: str
    query: str = ""
    show_all: bool = False


@dataclass(frozen=True)
class ViewSnapshot:
    """Everything the rendering layer needs to draw the result table."""
    records: Tuple[Record, ...]
    result_count: int
    status: LoadStatus
    error: Optional[str] = None

    @property
    def summary(self) -> str:
        if self.error:
            return self.error
        return f"Showing {self.result_count} results"


class ViewCoordinator:
    """
    Holds the SelectionState and derives the visible records from it.

    Args:
        loader (Loader): Loader whose cache backs the view.
        default_category (str): Category shown before the user picks one. Defaults to DEFAULT_CATEGORY.
        clear_query_on_show_all (bool): Whether toggling show-all resets the search. Defaults to SHOW_ALL_CLEARS_QUERY.
    """

    def __init__(
        self,
        loader: Loader,
        default_category: Optional[str] = None,
        clear_query_on_show_all: Optional[bool] = None,
    ):
        self.loader = loader
        self.registry = loader.registry
        category = default_category or config.DEFAULT_CATEGORY
        self.registry.get(category)
        self.state = SelectionState(active_category=category)
        if clear_query_on_show_all is None:
            clear_query_on_show_all = config.SHOW_ALL_CLEARS_QUERY
        self.clear_query_on_show_all = clear_query_on_show_all

    def list_categories(self) -> List[Dict[str, str]]:
        return [{"id": c.id, "label": c.label} for c in self.registry.list_categories()]

    async def start(self) -> ViewSnapshot:
        """Load the default category."""
        return await self.select(self.state.active_category)

    async def select(self, category_id: str) -> ViewSnapshot:
        """
        Switch the active category and make sure its dataset is loaded.

        The query and show-all flag are reset before the load starts. Other
        categories keep their cached records, so switching back is instant.

        Raises:
            UnknownCategory: If the id is not configured. The state is left untouched.
        """
        try:
            self.registry.get(category_id)
        except UnknownCategory:
            logger.error(f"Cannot select unknown category '{category_id}'")
            raise

        self.state.active_category = category_id
        self.state.query = ""
        self.state.show_all = False
        await self._load(category_id, self.loader.load)
        return self.current_view()

    async def retry(self) -> ViewSnapshot:
        """Refetch the active category, e.g. after a failed load."""
        await self._load(self.state.active_category, self.loader.reload)
        return self.current_view()

    def set_query(self, text: str) -> ViewSnapshot:
        self.state.query = text or ""
        return self.current_view()

    def toggle_show_all(self) -> ViewSnapshot:
        self.state.show_all = not self.state.show_all
        if self.clear_query_on_show_all:
            self.state.query = ""
        return self.current_view()

    def current_view(self) -> ViewSnapshot:
        """Derive the view from the selection state and the active category's cache entry."""
        entry = self.loader.cache.entry(self.state.active_category)
        records = tuple(visible(entry.records, self.state.query, self.state.show_all))
        error = None
        if entry.status is LoadStatus.FAILED and entry.error is not None:
            error = f"{entry.error.user_message}: {entry.error.cause}"
        return ViewSnapshot(
            records=records,
            result_count=len(records),
            status=entry.status,
            error=error,
        )

    async def _load(self, category_id: str, load: Callable[[str], Awaitable]) -> None:
        try:
            await load(category_id)
        except LoadFailure as e:
            if category_id != self.state.active_category:
                # Stale load: the user already switched away
                logger.debug(f"Ignoring failed stale load for '{category_id}': {e}")
                return
            logger.warning(f"'{category_id}' is unavailable: {e}")
            return

        if category_id != self.state.active_category:
            logger.debug(f"Stale load for '{category_id}' finished; kept in cache")
