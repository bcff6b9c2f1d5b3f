"""Client-side mirror of server state for the presentation layer."""

from .api import ApiError, AttendanceApiClient
from .cache import CachedRecord, CachedSession, ClientStateCache

__all__ = [
    "ApiError",
    "AttendanceApiClient",
    "CachedRecord",
    "CachedSession",
    "ClientStateCache",
]
