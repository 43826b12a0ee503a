from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.config import Settings
from src.main import create_app

API_KEY = "test-api-key"
DOMAIN = "http://test"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        uploads_path=str(tmp_path / "uploads"),
        api_key=API_KEY,
        domain=DOMAIN,
        max_file_size=1024 * 1024,
        max_files=3,
        max_dimension=200,
    )


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"X-API-Key": API_KEY}


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url=DOMAIN) as ac:
        yield ac
