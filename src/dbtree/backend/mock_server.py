"""Mock backend API for running the drawer without a real database.

Run locally with:

    dbtree mock-backend --port 8766

The mock data lives in-memory; restarting the server resets everything.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException

from .models import ConnectionRegister, HistoryEntry, QueryRequest, QueryResult

app = FastAPI(title="dbtree Mock Backend")

PAGE_SIZE = 10


# --- In-memory store -------------------------------------------------------

connections: Dict[str, ConnectionRegister] = {}
history: Dict[str, List[HistoryEntry]] = {}
results: Dict[str, QueryResult] = {}
pages: Dict[str, List[List[object]]] = {}

SAMPLE_SCHEMAS: Dict[str, List[str]] = {
    "public": ["customers", "invoices", "orders"],
    "audit": ["events"],
}


# --- Helpers ----------------------------------------------------------------

def _get_connection(conn_id: str) -> ConnectionRegister:
    conn = connections.get(conn_id)
    if conn is None:
        raise HTTPException(status_code=404, detail="Connection not found")
    return conn


def _run_query(query: str) -> tuple[List[str], List[List[object]]]:
    lowered = query.lower()
    if "count(" in lowered:
        return ["count"], [[42]]
    if "information_schema" in lowered:
        return ["column_name", "data_type"], [["id", "integer"], ["name", "text"], ["created_at", "timestamp"]]
    rows: List[List[object]] = [[i, f"row {i}", datetime(2024, 1, 1, tzinfo=timezone.utc).isoformat()] for i in range(1, 26)]
    return ["id", "name", "created_at"], rows


def _page(conn_id: str, page: int, query: Optional[str]) -> QueryResult:
    rows = pages.get(conn_id, [])
    total_pages = max((len(rows) + PAGE_SIZE - 1) // PAGE_SIZE, 1)
    page = min(max(page, 0), total_pages - 1)
    current = results[conn_id]
    return QueryResult(
        columns=current.columns,
        rows=rows[page * PAGE_SIZE:(page + 1) * PAGE_SIZE],
        page=page,
        total_pages=total_pages,
        query=query,
    )


def _store(conn_id: str, query: str) -> QueryResult:
    columns, rows = _run_query(query)
    results[conn_id] = QueryResult(columns=columns, query=query)
    pages[conn_id] = rows
    return _page(conn_id, 0, query)


# --- Routes -----------------------------------------------------------------

@app.post("/connections", status_code=201)
def register_connection(payload: ConnectionRegister) -> dict:
    connections[payload.id] = payload
    history.setdefault(payload.id, [])
    return {"id": payload.id}


@app.get("/connections/{conn_id}/schemas")
def get_schemas(conn_id: str) -> dict:
    _get_connection(conn_id)
    return {"schemas": SAMPLE_SCHEMAS}


@app.get("/connections/{conn_id}/history")
def list_history(conn_id: str) -> dict:
    _get_connection(conn_id)
    items = history.get(conn_id, [])
    return {"items": items, "total": len(items)}


@app.get("/connections/{conn_id}/history/{history_id}", response_model=QueryResult)
def get_history(conn_id: str, history_id: str) -> QueryResult:
    _get_connection(conn_id)
    for entry in history.get(conn_id, []):
        if entry.id == history_id:
            return _store(conn_id, entry.query)
    raise HTTPException(status_code=404, detail="History entry not found")


@app.post("/connections/{conn_id}/execute", response_model=QueryResult)
def execute(conn_id: str, request: QueryRequest) -> QueryResult:
    _get_connection(conn_id)
    entries = history.setdefault(conn_id, [])
    entries.append(HistoryEntry(id=f"h{len(entries) + 1}", query=request.query))
    return _store(conn_id, request.query)


@app.get("/connections/{conn_id}/result", response_model=QueryResult)
def get_result(conn_id: str, page: int = 0) -> QueryResult:
    _get_connection(conn_id)
    if conn_id not in results:
        raise HTTPException(status_code=404, detail="No result for connection")
    return _page(conn_id, page, results[conn_id].query)


@app.get("/")
def healthcheck() -> dict:
    return {"status": "ok"}
