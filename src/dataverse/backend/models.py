"""Data models for backend requests and responses."""

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AnswerResponse(BaseModel):
    """Response from the "generate answer" endpoint.

    Only ``sql`` and ``md_summary`` drive the client; everything else is
    kept as received for display and debugging, whatever its type.
    Unknown keys are tolerated.
    """

    model_config = ConfigDict(extra="allow")

    sql: str = Field(default="", description="Generated SQL query (empty if none)")
    md_summary: str = Field(default="", description="Narrative summary in markdown")
    question: Any = None
    tables_used: list[Any] = Field(default_factory=list)
    query_summary: Any = None
    validation: Any = None
    metadata: Any = None
    needs_conversational_clarification: Any = False
    clarification_message: Any = None

    @field_validator("sql", "md_summary", mode="before")
    @classmethod
    def _text_or_empty(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("tables_used", mode="before")
    @classmethod
    def _list_or_empty(cls, value: Any) -> list:
        return value if isinstance(value, list) else []

    @property
    def has_query(self) -> bool:
        return bool(self.sql.strip())


class QueryExecutionResult(BaseModel):
    """Response from the "execute query" endpoint.

    Rows are kept in order as received; a row that is not a mapping renders
    as empty cells (or as "no fields" when it is the first row).
    """

    model_config = ConfigDict(extra="allow")

    data: list[Any] = Field(default_factory=list, description="Rows in order")
    row_count: int | float | None = Field(
        default=None, description="Row count reported by the backend"
    )
    status: Any = None
    error_message: Any = None

    @field_validator("data", mode="before")
    @classmethod
    def _rows_or_empty(cls, value: Any) -> list:
        return value if isinstance(value, list) else []

    @field_validator("row_count", mode="before")
    @classmethod
    def _count_or_none(cls, value: Any) -> int | float | None:
        if isinstance(value, bool) or not isinstance(value, int | float):
            return None
        if not math.isfinite(value):
            return None
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value
