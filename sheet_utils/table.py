"""Turn sheet cell grids into row dicts and select from them."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from .conditions import ROW_ID, ConditionMatcher, parse_condition
from .values import ISO_DATE_RE, parse_number

logger = logging.getLogger(__name__)

Row = Dict[str, Any]

HEADER_ROW_COUNT = 1
# rowID of the first data row: sheet rows are 1-based and row 1 is the header.
FIRST_DATA_ROW = HEADER_ROW_COUNT + 1


def coerce_cell(text: str) -> Any:
    """Type a display string.

    ``YYYY-MM-DD`` stays a string so it never shifts across timezones;
    numeric text becomes ``int``/``float``; everything else is kept as is.
    """
    if not isinstance(text, str):
        return text
    if ISO_DATE_RE.fullmatch(text):
        return text
    number = parse_number(text)
    return text if number is None else number


def rows_from_values(values: Sequence[Sequence[Any]]) -> List[Row]:
    """Build rows from a header row plus data rows of display strings."""
    if len(values) < FIRST_DATA_ROW:
        return []

    headers = [str(header) for header in values[0]]
    if ROW_ID in headers:
        logger.warning(f"Sheet has a '{ROW_ID}' column; it is shadowed by the row number")

    rows: List[Row] = []
    for idx, cells in enumerate(values[1:]):
        row: Row = {}
        for col, header in enumerate(headers):
            cell = cells[col] if col < len(cells) else ""
            row[header] = coerce_cell(cell)
        row[ROW_ID] = idx + FIRST_DATA_ROW
        rows.append(row)
    return rows


def get_rows_from_table(
    table: Sequence[Row],
    conditions: Any = None,
    column_names: Optional[Sequence[str]] = None,
    *,
    matcher: Optional[ConditionMatcher] = None,
) -> List[Row]:
    """Filter ``table`` by ``conditions`` and optionally keep only some columns.

    Args:
        table: Rows from ``rows_from_values`` or an earlier selection.
        conditions: Condition dict or parsed ``Condition``; None keeps all rows.
        column_names: Columns to project; missing columns come back as None.
        matcher: Matcher to use (defaults to a UTC ``ConditionMatcher``).

    Returns:
        Matching rows, projected when ``column_names`` is given.
    """
    matcher = matcher or ConditionMatcher()
    condition = parse_condition(conditions)
    selected = [row for row in table if matcher.evaluate(row, condition)]
    if column_names is None:
        return selected
    return [{name: row.get(name) for name in column_names} for row in selected]


def get_values_from_table(
    table: Sequence[Row],
    conditions: Any,
    column_name: str,
    *,
    matcher: Optional[ConditionMatcher] = None,
) -> List[Any]:
    """Return ``column_name`` from every row matching ``conditions``."""
    rows = get_rows_from_table(table, conditions, [column_name], matcher=matcher)
    return [row[column_name] for row in rows]
