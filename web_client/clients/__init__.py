from clients.records_api_client import (
    APIError,
    RecordsAPIClient,
    get_records_api_client,
)
from clients.auth_store import AuthStore

__all__ = [
    "APIError",
    "RecordsAPIClient",
    "get_records_api_client",
    "AuthStore",
]
