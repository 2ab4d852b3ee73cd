from .identity import IdentityCache, IdentityResolver, UserStore, normalize_email
from .orchestrator import ImportOrchestrator
from .poller import PayoutQueuePoller, PayoutSnapshot
from .validator import canonicalize, validate_row

__all__ = [
    "IdentityCache",
    "IdentityResolver",
    "UserStore",
    "normalize_email",
    "ImportOrchestrator",
    "PayoutQueuePoller",
    "PayoutSnapshot",
    "canonicalize",
    "validate_row",
]
