"""Python client for the We Watch API, with the preview image cache."""

from wewatch.client.api import ApiError, SessionExpired, WeWatchClient
from wewatch.client.preview_cache import CacheLookup, LookupState, PreviewCache, link_host
from wewatch.client.storage import DurableStore, JsonFileStore, MemoryStore, StorageQuotaExceeded

__all__ = [
    "ApiError",
    "SessionExpired",
    "WeWatchClient",
    "CacheLookup",
    "LookupState",
    "PreviewCache",
    "link_host",
    "DurableStore",
    "JsonFileStore",
    "MemoryStore",
    "StorageQuotaExceeded",
]
