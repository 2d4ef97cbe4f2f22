"""Client for the remote database backend."""

from typing import Dict, List, Optional

import httpx

from .models import HistoryEntry, QueryResult, Schemas


class BackendClient:
    """Async HTTP client for the backend that owns connections and queries.

    Every call is a single request; HTTP errors surface as
    ``httpx.HTTPStatusError``.
    """

    def __init__(self, base_url: str = "http://localhost:8766", timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def register_connection(self, conn_id: str, url: str, conn_type: str) -> None:
        """Register a connection under ``conn_id``."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self._url("/connections"),
                json={"id": conn_id, "url": url, "type": conn_type},
            )
            response.raise_for_status()

    async def list_history(self, conn_id: str) -> List[HistoryEntry]:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(self._url(f"/connections/{conn_id}/history"))
            response.raise_for_status()
            items = response.json().get("items") or []
            return [HistoryEntry.model_validate(item) for item in items]

    async def schemas(self, conn_id: str) -> Schemas:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(self._url(f"/connections/{conn_id}/schemas"))
            response.raise_for_status()
            data: Dict[str, List[str]] = response.json().get("schemas") or {}
            return {schema: list(tables) for schema, tables in data.items()}

    async def execute(self, conn_id: str, query: str) -> QueryResult:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self._url(f"/connections/{conn_id}/execute"),
                json={"query": query},
            )
            response.raise_for_status()
            return QueryResult.model_validate(response.json())

    async def history(self, conn_id: str, history_id: str) -> QueryResult:
        """Re-open the result of a past query."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(self._url(f"/connections/{conn_id}/history/{history_id}"))
            response.raise_for_status()
            return QueryResult.model_validate(response.json())

    async def page(self, conn_id: str, page: int) -> QueryResult:
        """Fetch one page of the connection's current result."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(
                self._url(f"/connections/{conn_id}/result"),
                params={"page": page},
            )
            response.raise_for_status()
            return QueryResult.model_validate(response.json())

    async def ping(self) -> Optional[str]:
        """Return the backend status string, or ``None`` if unreachable."""
        try:
            async with httpx.AsyncClient(timeout=1.0) as client:
                response = await client.get(self._url("/"))
                if response.status_code == 200:
                    return response.json().get("status")
        except httpx.HTTPError:
            return None
        return None
