"""Wire models shared by the backend client and the mock backend."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Connection(BaseModel):
    id: int
    name: str
    type: str
    url: str


class ConnectionRegister(BaseModel):
    id: str
    url: str
    type: str


class HistoryEntry(BaseModel):
    id: str
    query: str
    executed_at: datetime = Field(default_factory=lambda: datetime.now(tz=timezone.utc))


class QueryRequest(BaseModel):
    query: str


class QueryResult(BaseModel):
    columns: List[str] = Field(default_factory=list)
    rows: List[List[Any]] = Field(default_factory=list)
    page: int = 0
    total_pages: int = 1
    query: Optional[str] = None

    def as_text(self) -> str:
        """Plain table rendering for the detail view and the output log."""
        if not self.columns:
            return "(no columns)"
        cells = [[str(c) for c in self.columns]] + [[str(v) for v in row] for row in self.rows]
        widths = [max(len(row[i]) for row in cells if i < len(row)) for i in range(len(self.columns))]
        lines = []
        for index, row in enumerate(cells):
            lines.append(" | ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)))
            if index == 0:
                lines.append("-+-".join("-" * w for w in widths))
        lines.append(f"(page {self.page + 1}/{max(self.total_pages, 1)}, {len(self.rows)} rows)")
        return "\n".join(lines)


Schemas = Dict[str, List[str]]
"""Schema name -> table names."""
