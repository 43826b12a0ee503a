from pathlib import Path

from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel

from src.config import Settings
from src.core.exceptions import (
    AppError,
    AuthError,
    MalformedRequestError,
    NotFoundError,
    PayloadTooLarge,
    ProcessingError,
    RateLimitError,
    StorageError,
    ValidationError,
    error_body,
)
from src.main import app, create_app


class _DummyBody(BaseModel):
    value: int


@app.post("/_validate")
async def _validation_endpoint(body: _DummyBody) -> _DummyBody:
    return body


@app.get("/_boom")
async def _boom_endpoint() -> None:
    raise RuntimeError("kaboom")


async def test_validation_error_format() -> None:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/_validate", json={"value": "not_an_int"})
    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "Invalid request"
    assert "body.value" in data["details"]


async def test_validation_error_missing_field() -> None:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/_validate", json={})
    assert response.status_code == 400
    assert "value" in response.json()["details"]


async def test_malformed_json() -> None:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post(
            "/_validate", content=b"{not json", headers={"Content-Type": "application/json"}
        )
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request"


async def test_unhandled_error_hides_details() -> None:
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/_boom")
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


async def test_unhandled_error_details_in_debug(tmp_path: Path) -> None:
    debug_app = create_app(Settings(uploads_path=str(tmp_path), debug=True))

    @debug_app.get("/_boom")
    async def _boom() -> None:
        raise RuntimeError("kaboom")

    transport = ASGITransport(app=debug_app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/_boom")
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error", "details": "kaboom"}


async def test_method_not_allowed() -> None:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/delete")
    assert response.status_code == 405
    assert "error" in response.json()


class TestAppError:
    def test_stores_status_and_detail(self) -> None:
        err = AppError(status_code=404, detail="Not found")
        assert err.status_code == 404
        assert err.detail == "Not found"
        assert err.details is None

    def test_status_codes(self) -> None:
        assert AuthError("x").status_code == 401
        assert RateLimitError().status_code == 429
        assert ValidationError("x").status_code == 400
        assert PayloadTooLarge("x").status_code == 400
        assert MalformedRequestError("x").status_code == 400
        assert NotFoundError().status_code == 404
        assert ProcessingError("x").status_code == 500
        assert StorageError("x").status_code == 500

    def test_error_body(self) -> None:
        assert error_body("boom") == {"error": "boom"}
        assert error_body("boom", "why") == {"error": "boom", "details": "why"}

    async def test_app_error_handler_returns_json(self) -> None:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/uploads/posts/nonexistent.jpg")
        assert response.status_code == 404
        assert response.json() == {"error": "Not found"}
