from .session_gate import (
    DEFAULT_TTL_SECONDS,
    DENIED_NOTICE,
    AuthorizationSource,
    NotAuthenticatedError,
    SessionCache,
    SessionGate,
    SessionTokenProvider,
    StaticTokenProvider,
)

__all__ = [
    "DEFAULT_TTL_SECONDS",
    "DENIED_NOTICE",
    "AuthorizationSource",
    "NotAuthenticatedError",
    "SessionCache",
    "SessionGate",
    "SessionTokenProvider",
    "StaticTokenProvider",
]
