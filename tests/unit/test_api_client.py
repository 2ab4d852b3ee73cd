from __future__ import annotations

import httpx
import pytest

from admin_console.api.client import (
    ENV_BASE_URL,
    AdminApiError,
    AdminTransportError,
    ApiErrorDetail,
    normalize_error_payload,
)
from admin_console.auth.session_gate import NotAuthenticatedError


class TestNormalizeErrorPayload:
    def test_detail_string(self) -> None:
        assert normalize_error_payload(400, {"detail": "User not found"}) == ApiErrorDetail("User not found")

    def test_detail_field_errors_joined(self) -> None:
        body = {
            "detail": [
                {"loc": ["body", "rows", 0, "email"], "msg": "value is not a valid email"},
                {"loc": ["body", "amount"], "msg": "must be positive"},
            ]
        }

        detail = normalize_error_payload(422, body)

        assert detail.message == "rows.0.email: value is not a valid email; amount: must be positive"

    def test_detail_field_error_without_loc(self) -> None:
        assert normalize_error_payload(422, {"detail": [{"msg": "bad"}]}).message == "bad"

    @pytest.mark.parametrize("key", ["message", "error"])
    def test_message_or_error_key(self, key: str) -> None:
        assert normalize_error_payload(500, {key: " boom "}).message == "boom"

    def test_plain_text_truncated(self) -> None:
        detail = normalize_error_payload(502, "x" * 500)
        assert detail.message == "x" * 200

    @pytest.mark.parametrize("body", [None, "", {}, {"detail": []}, {"detail": [{"loc": ["x"]}]}, [1, 2]])
    def test_uninformative_bodies_fall_back_to_status(self, body) -> None:
        assert normalize_error_payload(503, body).message == "Request failed with status 503"


@pytest.mark.asyncio
async def test_request_sends_bearer_token_and_json(make_client) -> None:
    client, handler = make_client(lambda req: httpx.Response(200, json={"ok": True}))
    async with client:
        data = await client.post("/admin/users", json={"email": "a@example.com"})

    assert data == {"ok": True}
    request = handler.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "http://admin.test/admin/users"
    assert request.headers["Authorization"] == "Bearer test-token"
    assert request.headers["Content-Type"] == "application/json"
    assert handler.json_bodies() == [{"email": "a@example.com"}]


@pytest.mark.asyncio
async def test_query_params_passed(make_client) -> None:
    client, handler = make_client(lambda req: httpx.Response(200, json=[]))
    async with client:
        await client.get("/admin/users", params={"email": "a@example.com"})

    assert handler.requests[0].url.params["email"] == "a@example.com"


@pytest.mark.asyncio
async def test_env_base_url_wins_over_config(make_client, monkeypatch) -> None:
    monkeypatch.setenv(ENV_BASE_URL, "http://env.test/")
    client, handler = make_client(lambda req: httpx.Response(204))
    async with client:
        assert await client.delete("/admin/transactions/u1/t1") is None

    assert str(handler.requests[0].url) == "http://env.test/admin/transactions/u1/t1"


@pytest.mark.asyncio
async def test_missing_base_url_is_transport_error(make_client) -> None:
    client, handler = make_client(lambda req: httpx.Response(200), base_url=None)
    async with client:
        with pytest.raises(AdminTransportError, match=ENV_BASE_URL):
            await client.get("/admin/stats")
    assert handler.requests == []


@pytest.mark.asyncio
async def test_error_response_normalized(make_client) -> None:
    client, _ = make_client(lambda req: httpx.Response(403, json={"detail": "Admin access required"}))
    async with client:
        with pytest.raises(AdminApiError) as exc_info:
            await client.get("/admin/stats")

    assert exc_info.value.status_code == 403
    assert exc_info.value.message == "Admin access required"


@pytest.mark.asyncio
async def test_plain_text_error_response(make_client) -> None:
    client, _ = make_client(lambda req: httpx.Response(500, text="Internal Server Error"))
    async with client:
        with pytest.raises(AdminApiError, match="Internal Server Error"):
            await client.get("/admin/stats")


@pytest.mark.asyncio
async def test_network_error_is_transport_error(make_client) -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client, _ = make_client(refuse)
    async with client:
        with pytest.raises(AdminTransportError, match="Network error"):
            await client.get("/admin/stats")


@pytest.mark.asyncio
async def test_timeout_is_transport_error(make_client) -> None:
    def slow(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client, _ = make_client(slow)
    async with client:
        with pytest.raises(AdminTransportError, match="timed out"):
            await client.get("/admin/stats")


@pytest.mark.asyncio
async def test_missing_token_refuses_request(make_client) -> None:
    client, handler = make_client(lambda req: httpx.Response(200), token=None)
    async with client:
        with pytest.raises(NotAuthenticatedError):
            await client.get("/admin/stats")
    assert handler.requests == []


@pytest.mark.asyncio
async def test_non_json_success_returns_none(make_client) -> None:
    client, _ = make_client(lambda req: httpx.Response(200, text="OK"))
    async with client:
        assert await client.get("/admin/stats") is None
