from __future__ import annotations

from typing import Any
from urllib.parse import quote

from .client import AdminApiClient

"""Thin wrappers over the /admin/* CRUD endpoints.

Business logic (payout processing, seller suspension, credit ledger) lives in
the backend; these methods only shape requests and unwrap list payloads.
"""

__all__ = [
    "AdminEndpoints",
    "payout_owner",
]


def _seg(value: str) -> str:
    return quote(str(value), safe="")


def _unwrap_list(data: Any, key: str) -> list[dict[str, Any]]:
    # {key: [...]} と素のリストの両方を受け付ける
    if isinstance(data, dict):
        return list(data.get(key) or [])
    return list(data or [])


class AdminEndpoints:
    def __init__(self, client: AdminApiClient) -> None:
        self._client = client

    # ------------------------------------------------------------------
    # Dashboard / users
    # ------------------------------------------------------------------

    async def get_stats(self) -> dict[str, Any]:
        return await self._client.get("/admin/stats") or {}

    async def list_users(self, *, email: str | None = None) -> list[dict[str, Any]]:
        params = {"email": email} if email else None
        return _unwrap_list(await self._client.get("/admin/users", params=params), "users")

    async def get_user(self, user_id: str) -> dict[str, Any]:
        return await self._client.get(f"/admin/users/{_seg(user_id)}") or {}

    async def create_user(self, email: str, password: str, name: str | None = None) -> Any:
        body: dict[str, Any] = {"email": email, "password": password}
        if name:
            body["name"] = name
        return await self._client.post("/admin/users", json=body)

    async def update_user(self, user_id: str, *, name: str, email: str) -> Any:
        return await self._client.put(f"/admin/users/{_seg(user_id)}", json={"name": name, "email": email})

    async def update_billing(self, user_id: str, billing: dict[str, Any]) -> Any:
        return await self._client.put(f"/admin/users/{_seg(user_id)}/billing", json=billing)

    async def gift_credits(self, user_id: str, amount: int) -> Any:
        if amount <= 0:
            raise ValueError("gift amount must be positive")
        return await self._client.post(f"/admin/users/{_seg(user_id)}/gift-credits", json={"amount": amount})

    # ------------------------------------------------------------------
    # Transactions (single-row edits; bulk goes through BulkSubmitter)
    # ------------------------------------------------------------------

    async def add_transaction(self, user_id: str, transaction: dict[str, Any]) -> Any:
        return await self._client.post(f"/admin/transactions/{_seg(user_id)}", json=transaction)

    async def update_transaction(self, user_id: str, transaction_id: str, transaction: dict[str, Any]) -> Any:
        return await self._client.put(
            f"/admin/transactions/{_seg(user_id)}/{_seg(transaction_id)}", json=transaction
        )

    async def delete_transaction(self, user_id: str, transaction_id: str) -> Any:
        return await self._client.delete(f"/admin/transactions/{_seg(user_id)}/{_seg(transaction_id)}")

    # ------------------------------------------------------------------
    # Sellers
    # ------------------------------------------------------------------

    async def list_sellers(self) -> dict[str, Any]:
        """Seller list with counters ({sellers, count, verified, unverified, suspended})."""
        data = await self._client.get("/admin/sellers") or {}
        data.setdefault("sellers", [])
        return data

    async def verify_seller(self, user_id: str) -> Any:
        return await self._client.post(f"/admin/seller/{_seg(user_id)}/verify")

    async def suspend_seller(self, user_id: str, reason: str) -> Any:
        if not reason.strip():
            raise ValueError("a suspension reason is required")
        return await self._client.post(f"/admin/seller/{_seg(user_id)}/suspend", json={"reason": reason.strip()})

    async def unsuspend_seller(self, user_id: str) -> Any:
        return await self._client.post(f"/admin/seller/{_seg(user_id)}/unsuspend")

    # ------------------------------------------------------------------
    # Payouts
    # ------------------------------------------------------------------

    async def payout_queue(self) -> list[dict[str, Any]]:
        return _unwrap_list(await self._client.get("/admin/payouts/queue"), "payouts")

    async def payout_history(self) -> list[dict[str, Any]]:
        return _unwrap_list(await self._client.get("/admin/payouts/history"), "payouts")

    async def approve_payout(self, payout_id: str, user_id: str | None) -> Any:
        return await self._client.post(f"/admin/payouts/{_seg(payout_id)}/approve", json={"user_id": user_id})

    async def reject_payout(self, payout_id: str, user_id: str | None) -> Any:
        return await self._client.post(f"/admin/payouts/{_seg(payout_id)}/reject", json={"user_id": user_id})

    async def complete_payout(self, payout_id: str, user_id: str | None) -> Any:
        return await self._client.post(f"/admin/payouts/{_seg(payout_id)}/complete", json={"user_id": user_id})


def payout_owner(payout: dict[str, Any]) -> str | None:
    """User id of a payout request (explicit field, else from 'users/<uid>/...' docPath)."""
    if payout.get("userId"):
        return str(payout["userId"])
    doc_path = payout.get("docPath") or ""
    parts = doc_path.split("/")
    return parts[1] if len(parts) > 1 and parts[1] else None
