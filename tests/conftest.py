import httpx
import pytest

from poster_export.assets import ResourceLoader
from poster_export.delivery import MemorySink
from poster_export.layouts import LayoutProvider
from tests.helpers import RecordingSleep


def _not_found(request: httpx.Request) -> httpx.Response:
    return httpx.Response(404, request=request)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def memory_sink() -> MemorySink:
    return MemorySink()


@pytest.fixture
def offline_loader(tmp_path):
    """Loader whose remote fetches always answer 404."""

    client = httpx.Client(transport=httpx.MockTransport(_not_found))
    loader = ResourceLoader(assets_dir=tmp_path, client=client)
    yield loader
    client.close()


@pytest.fixture
def bare_provider() -> LayoutProvider:
    """Posters without logo/QR pictures, so nothing needs loading."""

    return LayoutProvider(logo=None, qr=None)
