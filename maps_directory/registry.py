from dataclasses import dataclass
from typing import Dict, Iterable, List

from maps_directory import config
from maps_directory.errors import UnknownCategory


@dataclass(frozen=True)
class Category:
    """One dataset partition, e.g. "Restaurants"."""
    id: str
    label: str
    location: str


class SourceRegistry:
    """
    Closed mapping from category id to the location of its raw dataset.
    Pure lookups only: resolving a location never performs I/O.
    """

    def __init__(self, categories: Iterable[Category]):
        self._by_id: Dict[str, Category] = {}
        for category in categories:
            if category.id in self._by_id:
                raise ValueError(f"Duplicate category id '{category.id}'")
            self._by_id[category.id] = category

    @classmethod
    def default(cls, base_url: str = None) -> "SourceRegistry":
        """
        Build the registry of the deployed categories.

        Args:
            base_url (str): Root the dataset files are hosted under. Defaults to DATA_BASE_URL.

        Returns:
            SourceRegistry: Registry with one entry per configured category.
        """
        base = (base_url or config.DATA_BASE_URL).rstrip("/")
        return cls(
            Category(id=name, label=name, location=f"{base}/data/{filename}")
            for name, filename in config.CATEGORY_FILES.items()
        )

    def get(self, category_id: str) -> Category:
        try:
            return self._by_id[category_id]
        except KeyError:
            raise UnknownCategory(category_id) from None

    def location_for(self, category_id: str) -> str:
        """Return the resource location of a category or raise UnknownCategory."""
        return self.get(category_id).location

    def list_categories(self) -> List[Category]:
        return list(self._by_id.values())

    def ids(self) -> List[str]:
        return list(self._by_id)

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)
