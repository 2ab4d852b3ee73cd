from __future__ import annotations

from .endpoints import AdminEndpoints

"""UserStore backed by the admin API (query-by-email)."""

__all__ = [
    "ApiUserStore",
]


class ApiUserStore:
    """Resolve a user id with GET /admin/users?email=<email>."""

    def __init__(self, endpoints: AdminEndpoints) -> None:
        self._endpoints = endpoints

    async def find_user_id_by_email(self, email: str) -> str | None:
        for user in await self._endpoints.list_users(email=email):
            if str(user.get("email", "")).strip().lower() == email:
                uid = user.get("id") or user.get("uid") or user.get("userId")
                return str(uid) if uid else None
        return None
