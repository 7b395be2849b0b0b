import pytest
from httpx import ASGITransport, AsyncClient

from blobserve import api
from blobserve.config import Environment, get_settings
from blobserve.db import close_database, open_database
from blobserve.gateway import Gateway
from blobserve.sublevel import Sublevel


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="session", autouse=True)
def my_setup():
    get_settings().env = Environment.test


@pytest.fixture(scope="function")
def database(tmp_path):
    """A fresh, empty database for every test"""
    database = open_database(tmp_path / "blobserve_unittest.db")
    yield database
    close_database()


@pytest.fixture(scope="function")
def root(database) -> Sublevel:
    return Sublevel()


@pytest.fixture(scope="function")
def gateway(root) -> Gateway:
    gateway = Gateway(root)
    api.app.state.gateway = gateway
    return gateway


@pytest.fixture(scope="function")
async def client(gateway):
    async with AsyncClient(transport=ASGITransport(app=api.app), base_url="http://test", follow_redirects=False) as client:
        yield client


@pytest.fixture(scope="function")
def app():
    return api.app
