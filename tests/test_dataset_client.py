import pytest
from unittest.mock import AsyncMock, MagicMock

from aiohttp import ClientConnectionError

from maps_directory.clients import DatasetClient
from maps_directory.errors import TransportFailure

URL = "http://datasets.test/maps-directory-antigua/data/R8_google_maps_data.csv"


@pytest.fixture
def client():
    # Reset singleton state
    DatasetClient._instance = None
    DatasetClient._initialized = False
    yield DatasetClient()
    DatasetClient._instance = None
    DatasetClient._initialized = False


def _mock_session(status=200, body=b""):
    resp = MagicMock()
    resp.status = status
    resp.read = AsyncMock(return_value=body)

    session = MagicMock()
    session.get.return_value.__aenter__.return_value = resp
    return session


def test_client_is_a_singleton(client):
    assert DatasetClient() is client


@pytest.mark.asyncio
async def test_http_success_returns_body(client):
    session = _mock_session(body=b"Name\nAcme Cafe\n")
    client._get_session = AsyncMock(return_value=session)

    body = await client.fetch(URL)

    assert body == b"Name\nAcme Cafe\n"
    session.get.assert_called_once_with(URL)


@pytest.mark.asyncio
async def test_http_error_status_raises_transport_failure(client):
    client._get_session = AsyncMock(return_value=_mock_session(status=404))

    with pytest.raises(TransportFailure) as excinfo:
        await client.fetch(URL)

    assert excinfo.value.status == 404
    assert str(excinfo.value) == "HTTP error! status: 404"
    assert excinfo.value.locator == URL


@pytest.mark.asyncio
async def test_connection_error_raises_transport_failure(client):
    session = MagicMock()
    session.get.side_effect = ClientConnectionError("connection refused")
    client._get_session = AsyncMock(return_value=session)

    with pytest.raises(TransportFailure) as excinfo:
        await client.fetch(URL)

    assert excinfo.value.status is None
    assert isinstance(excinfo.value.cause, ClientConnectionError)


@pytest.mark.asyncio
async def test_local_path_and_file_url_are_read_from_disk(client, tmp_path):
    path = tmp_path / "R8_google_maps_data.csv"
    path.write_bytes(b"Name\nAcme Cafe\n")

    assert await client.fetch(str(path)) == b"Name\nAcme Cafe\n"
    assert await client.fetch(path.as_uri()) == b"Name\nAcme Cafe\n"


@pytest.mark.asyncio
async def test_missing_local_file_raises_transport_failure(client, tmp_path):
    with pytest.raises(TransportFailure) as excinfo:
        await client.fetch(str(tmp_path / "missing.csv"))

    assert isinstance(excinfo.value.cause, FileNotFoundError)


@pytest.mark.asyncio
async def test_close_without_session_is_a_noop(client):
    await client.close()
    assert client._session is None
