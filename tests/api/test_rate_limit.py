from collections.abc import AsyncIterator, Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient, Response

from src.config import Settings
from src.main import create_app

API_KEY = "rate-key"


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def time(self) -> float:
        return self.now


@pytest.fixture
def clock() -> Iterator[FakeClock]:
    fake = FakeClock()
    with patch("limits.storage.memory.time", fake):
        yield fake


@pytest.fixture
async def limited_client(tmp_path: Path, clock: FakeClock) -> AsyncIterator[AsyncClient]:
    cfg = Settings(uploads_path=str(tmp_path), api_key=API_KEY, rate_limit_max=3, rate_limit_window=60, max_files=3)
    app = create_app(cfg)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


async def _delete(client: AsyncClient, api_key: str | None = API_KEY) -> Response:
    headers = {"X-API-Key": api_key} if api_key else {}
    return await client.request("DELETE", "/delete", json={"filename": "a.jpg", "namespace": "posts"}, headers=headers)


class TestRateLimit:
    async def test_rejects_after_max(self, limited_client: AsyncClient) -> None:
        for _ in range(3):
            assert (await _delete(limited_client)).status_code == 404
        response = await _delete(limited_client)
        assert response.status_code == 429
        assert response.json() == {"error": "Too many requests"}

    async def test_admits_after_window(self, limited_client: AsyncClient, clock: FakeClock) -> None:
        for _ in range(3):
            await _delete(limited_client)
        assert (await _delete(limited_client)).status_code == 429
        clock.now += 61.0
        assert (await _delete(limited_client)).status_code == 404

    async def test_unauthenticated_attempts_count(self, limited_client: AsyncClient) -> None:
        for _ in range(3):
            assert (await _delete(limited_client, api_key=None)).status_code == 401
        assert (await _delete(limited_client)).status_code == 429

    async def test_oversized_forms_without_key_are_counted(self, limited_client: AsyncClient) -> None:
        files = [("images", (f"{i}.jpg", b"x", "image/jpeg")) for i in range(50)]
        codes = [(await limited_client.post("/upload-multiple/posts", files=files)).status_code for _ in range(4)]
        assert codes == [401, 401, 401, 429]

    async def test_upload_throttled(self, limited_client: AsyncClient) -> None:
        for _ in range(3):
            await _delete(limited_client)
        response = await limited_client.post("/upload/posts", headers={"X-API-Key": API_KEY})
        assert response.status_code == 429

    async def test_static_reads_not_throttled(self, limited_client: AsyncClient) -> None:
        for _ in range(3):
            await _delete(limited_client)
        response = await limited_client.get("/uploads/posts/a.jpg")
        assert response.status_code == 404
