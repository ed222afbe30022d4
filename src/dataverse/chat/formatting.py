"""Result formatting for the chat thread.

Hides how query rows become the markdown section revealed under an answer.
"""

import json
from collections.abc import Mapping
from typing import Any

from ..backend.models import QueryExecutionResult

NO_ROWS_TEXT = "No rows returned."
NO_FIELDS_TEXT = "No fields available."
QUERY_FAILED_TEXT = "Failed to execute query. Please try again."
RESULTS_HEADING = "### Query Results"


def format_cell(value: Any) -> str:
    """Render one table cell.

    None becomes an empty cell, dicts and lists become compact JSON,
    everything else is converted with str(). Booleans use JSON spelling.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, dict | list | tuple):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
    return str(value)


def build_markdown_table(rows: list[Any]) -> str:
    """Convert a row set to a markdown table.

    Columns come from the keys of the first row, in order. Rows that are
    not mappings contribute empty cells.

    Args:
        rows: List of rows, normally dicts

    Returns:
        Markdown table string, or a fallback sentence when there is nothing
        to tabulate
    """
    if not rows:
        return NO_ROWS_TEXT

    first = rows[0]
    headers = list(first.keys()) if isinstance(first, Mapping) else []
    if not headers:
        return NO_FIELDS_TEXT

    lines = []
    # Header row
    lines.append("| " + " | ".join(str(h) for h in headers) + " |")
    # Separator
    lines.append("| " + " | ".join("---" for _ in headers) + " |")
    # Data rows
    for row in rows:
        cells = row if isinstance(row, Mapping) else {}
        lines.append("| " + " | ".join(format_cell(cells.get(h)) for h in headers) + " |")

    return "\n".join(lines)


def build_result_section(result: QueryExecutionResult) -> str:
    """Build the markdown section appended to an answer after execution.

    The section starts with a blank line and a heading so it reads as a
    continuation of whatever is already in the result field.
    """
    lines = ["\n\n" + RESULTS_HEADING]
    if result.row_count is not None:
        lines.append(f"Rows returned: {result.row_count}")
    lines.append(build_markdown_table(result.data))
    return "\n".join(lines)
