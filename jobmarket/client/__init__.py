"""Python client for the Job Market API.

Nothing under jobmarket.client is imported by the server package.
"""
from jobmarket.client.api_client import ApiError, JobMarketClient
from jobmarket.client.hints import TokenDisplayHint, looks_valid, read_display_hint
from jobmarket.client.token_store import CredentialStore, FileTokenStore, MemoryTokenStore

__all__ = [
    "ApiError",
    "CredentialStore",
    "FileTokenStore",
    "JobMarketClient",
    "MemoryTokenStore",
    "TokenDisplayHint",
    "looks_valid",
    "read_display_hint",
]
