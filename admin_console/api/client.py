from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

"""Async HTTP client for the admin backend (/admin/* endpoints).

- Every request carries `Authorization: Bearer <token>` from a TokenProvider.
- Base URL is read from ADMIN_API_BASE_URL at request time (config fallback).
- Non-2xx responses are normalized into one AdminApiError(message) whatever
  shape the backend used for its error body.
- Transport failures (connect, timeout) raise AdminTransportError.
"""

__all__ = [
    "ENV_BASE_URL",
    "AdminApiClient",
    "AdminApiError",
    "AdminTransportError",
    "ApiErrorDetail",
    "TokenProvider",
    "normalize_error_payload",
]

logger = logging.getLogger(__name__)

ENV_BASE_URL = "ADMIN_API_BASE_URL"
MAX_TEXT_DETAIL = 200


class TokenProvider(Protocol):
    """Issues the bearer token for the current session."""

    async def get_token(self) -> str: ...


class AdminApiError(Exception):
    """Backend answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class AdminTransportError(Exception):
    """Request never produced a response (network, timeout, missing base URL)."""


@dataclass(frozen=True)
class ApiErrorDetail:
    message: str


def _format_field_error(item: Any) -> str | None:
    if isinstance(item, str):
        return item
    if not isinstance(item, dict):
        return None
    msg = item.get("msg") or item.get("message")
    if not msg:
        return None
    loc = item.get("loc")
    if isinstance(loc, (list, tuple)):
        # "body" プレフィックスは利用者に意味がないので除外
        parts = [str(p) for p in loc if p != "body"]
        if parts:
            return f"{'.'.join(parts)}: {msg}"
    return str(msg)


def normalize_error_payload(status_code: int, body: Any) -> ApiErrorDetail:
    """Map any backend error body shape onto one ApiErrorDetail.

    Handled shapes:
        {"detail": "text"}
        {"detail": [{"loc": [...], "msg": "..."}, ...]}
        {"message": "text"} / {"error": "text"}
        plain text body
        nothing informative -> "Request failed with status <code>"
    """
    fallback = ApiErrorDetail(f"Request failed with status {status_code}")
    if isinstance(body, dict):
        detail = body.get("detail")
        if isinstance(detail, str) and detail.strip():
            return ApiErrorDetail(detail.strip())
        if isinstance(detail, list):
            messages = [m for m in (_format_field_error(i) for i in detail) if m]
            if messages:
                return ApiErrorDetail("; ".join(messages))
        for key in ("message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return ApiErrorDetail(value.strip())
        return fallback
    if isinstance(body, str) and body.strip():
        return ApiErrorDetail(body.strip()[:MAX_TEXT_DETAIL])
    return fallback


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class AdminApiClient:
    """Bearer-authenticated JSON client for the admin backend."""

    def __init__(
        self,
        tokens: TokenProvider,
        *,
        base_url: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._tokens = tokens
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def resolve_base_url(self) -> str:
        """Base URL for the next request (environment wins over config)."""
        base = os.getenv(ENV_BASE_URL) or self._base_url
        if not base:
            raise AdminTransportError(f"API base URL is not configured (set {ENV_BASE_URL})")
        return base.rstrip("/")

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> AdminApiClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON body (None if no JSON).

        Raises:
            AdminApiError: non-2xx response (message normalized)
            AdminTransportError: no response was received
        """
        url = f"{self.resolve_base_url()}{path}"
        token = await self._tokens.get_token()
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        client = await self._get_client()
        try:
            response = await client.request(method, url, json=json, params=params, headers=headers)
        except httpx.TimeoutException as e:
            raise AdminTransportError(f"Request timed out: {method} {path}") from e
        except httpx.HTTPError as e:
            raise AdminTransportError(f"Network error: {e}") from e

        if response.is_error:
            detail = normalize_error_payload(response.status_code, _response_body(response))
            logger.debug(f"api: {method} {path} -> {response.status_code} {detail.message}")
            raise AdminApiError(response.status_code, detail.message)

        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type and response.content:
            return response.json()
        return None

    async def get(self, path: str, *, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)
