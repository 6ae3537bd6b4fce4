from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.services.presale_pipeline import get_result_store
from web_api.main import app


@pytest.fixture(autouse=True)
def clear_result_store():
    get_result_store().clear()
    yield
    get_result_store().clear()


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
