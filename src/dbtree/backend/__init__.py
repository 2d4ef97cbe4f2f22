"""Backend collaborators: HTTP client, connection handler and wire models."""

from .client import BackendClient
from .handler import ConnectionHandler, HELPER_QUERIES
from .models import Connection, HistoryEntry, QueryResult

__all__ = [
    "BackendClient",
    "Connection",
    "ConnectionHandler",
    "HELPER_QUERIES",
    "HistoryEntry",
    "QueryResult",
]
