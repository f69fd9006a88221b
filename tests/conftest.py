import pytest
from unittest.mock import AsyncMock, MagicMock

from maps_directory.cache import DatasetCache
from maps_directory.errors import TransportFailure
from maps_directory.loader import Loader
from maps_directory.registry import SourceRegistry

BASE_URL = "http://datasets.test/maps-directory-antigua"

RESTAURANTS_CSV = (
    "Name,Phone,Hours,Rating,Address,URL\n"
    "Acme Cafe,555-0100,9-5,4.5,12 Main St,http://x\n"
    "Harbour Grill,555-0101,11-10,4.1,1 Redcliffe Quay,http://maps.test/grill\n"
    "Papa Pizza,555-0102,12-11,N/A,Old Parham Rd,\n"
    ",,,,,\n"
).encode("utf-8")

GAS_STATIONS_CSV = (
    "Name,Phone,Hours,Rating,Address,URL\n"
    "West Bus Station Fuel,555-0200,24h,3.9,Market St,http://maps.test/fuel\n"
).encode("utf-8")


@pytest.fixture
def registry() -> SourceRegistry:
    return SourceRegistry.default(base_url=BASE_URL)


def make_client(registry: SourceRegistry, responses: dict) -> MagicMock:
    """
    Build a fake dataset client.

    `responses` maps category ids to raw bytes, an exception to raise, or an async
    callable producing either. Unknown locators answer with HTTP 404.
    """
    by_location = {registry.location_for(cid): value for cid, value in responses.items()}

    async def fetch(locator):
        response = by_location.get(locator)
        if response is None:
            raise TransportFailure(locator, status=404)
        if callable(response):
            response = await response(locator)
        if isinstance(response, BaseException):
            raise response
        return response

    client = MagicMock()
    client.fetch = AsyncMock(side_effect=fetch)
    return client


@pytest.fixture
def loader_factory(registry):
    def factory(responses: dict) -> Loader:
        return Loader(registry, DatasetCache(), client=make_client(registry, responses))
    return factory
