from .bulk_submit import BULK_PATH, BulkSubmitter, SubmitMetrics
from .client import (
    ENV_BASE_URL,
    AdminApiClient,
    AdminApiError,
    AdminTransportError,
    ApiErrorDetail,
    TokenProvider,
    normalize_error_payload,
)
from .endpoints import AdminEndpoints, payout_owner
from .user_store import ApiUserStore

__all__ = [
    "ENV_BASE_URL",
    "AdminApiClient",
    "AdminApiError",
    "AdminTransportError",
    "ApiErrorDetail",
    "TokenProvider",
    "normalize_error_payload",
    "BULK_PATH",
    "BulkSubmitter",
    "SubmitMetrics",
    "AdminEndpoints",
    "payout_owner",
    "ApiUserStore",
]
