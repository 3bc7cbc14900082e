"""Condition-driven reads and writes against one sheet.

Every call reloads the sheet. rowIDs returned here are sheet row numbers for
the snapshot that was just read; inserts and deletes shift them.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
import json
import logging
import uuid
from typing import Any, Dict, List, Optional, Sequence, Union

from .conditions import ROW_ID, ConditionMatcher, parse_condition
from .config import (
    DEFAULT_CLEAR_COLOR,
    DEFAULT_HIGHLIGHT_COLOR,
    Settings,
    load_settings,
    resolve_timezone,
)
from .formatting import format_timestamp
from .google_sheets import GoogleSheetsStore, SheetsError
from .store import SheetStore
from .table import (
    HEADER_ROW_COUNT,
    Row,
    get_rows_from_table,
    get_values_from_table,
    rows_from_values,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class HighlightSession:
    """Record of one ``highlight_rows`` call, used to undo it later."""

    id: str
    row_ids: List[int] = field(default_factory=list)
    color: str = DEFAULT_HIGHLIGHT_COLOR
    timestamp: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "rowIDs": list(self.row_ids),
            "color": self.color,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "HighlightSession":
        row_ids = data.get("rowIDs", data.get("row_ids"))
        if row_ids is None:
            raise ValueError("Highlight session has no row ids.")
        return cls(
            id=str(data.get("id", "")),
            row_ids=list(row_ids),
            color=data.get("color", DEFAULT_HIGHLIGHT_COLOR),
            timestamp=data.get("timestamp", ""),
        )


class SheetTable:
    """Query and modify a sheet with row conditions.

    Args:
        store: Backend holding the sheet.
        settings: Optional settings for colours and timezone.
        tz: Overrides the timezone from ``settings``.
    """

    def __init__(
        self,
        store: SheetStore,
        *,
        settings: Optional[Settings] = None,
        tz: Optional[tzinfo] = None,
    ) -> None:
        if store is None:
            raise ValueError("Sheet store is required.")
        self._store = store
        self.settings = settings
        self.tz = tz or resolve_timezone(settings.timezone if settings else None)
        self.highlight_color = settings.highlight_color if settings else DEFAULT_HIGHLIGHT_COLOR
        self.clear_color = settings.clear_color if settings else DEFAULT_CLEAR_COLOR
        self.matcher = ConditionMatcher(self.tz)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SheetTable":
        """Build a table over Google Sheets.

        When ``settings.timezone`` is unset the spreadsheet's own time zone
        is looked up once here; if that lookup fails the table uses UTC.
        """
        store = GoogleSheetsStore.from_settings(settings)
        tz_name = settings.timezone
        if not tz_name:
            try:
                tz_name = store.spreadsheet_timezone()
            except SheetsError as exc:
                logger.warning(f"Could not read the spreadsheet time zone, using UTC: {exc}")
        return cls(store, settings=settings, tz=resolve_timezone(tz_name))

    @classmethod
    def from_env(cls) -> "SheetTable":
        return cls.from_settings(load_settings())

    @property
    def store(self) -> SheetStore:
        return self._store

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_table(self) -> List[Row]:
        """Load every data row; an empty or header-only sheet gives []."""
        return rows_from_values(self._store.read_display_values())

    def get_headers(self) -> List[Any]:
        values = self._store.read_raw_values()
        if not values:
            return []
        return list(values[0][: self._store.column_count()])

    def get_rows(
        self,
        conditions: Any = None,
        column_names: Optional[Sequence[str]] = None,
    ) -> List[Row]:
        return get_rows_from_table(
            self.get_table(), conditions, column_names, matcher=self.matcher
        )

    def get_values(self, conditions: Any, column_name: str) -> List[Any]:
        return get_values_from_table(
            self.get_table(), conditions, column_name, matcher=self.matcher
        )

    def timestamp(self) -> str:
        return format_timestamp(tz=self.tz)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def set_values(self, conditions: Any, data: Mapping[str, Any]) -> List[int]:
        """Set ``data`` columns on every matching row in a single write.

        Columns in ``data`` that the sheet does not have are ignored.

        Returns:
            rowIDs of the rows that were updated.
        """
        values = self._store.read_raw_values()
        if not values:
            logger.info("Sheet is empty; nothing to update.")
            return []

        headers = list(values[0])
        width = len(headers)
        condition = parse_condition(conditions)
        updated: List[int] = []

        for idx, row in enumerate(self.get_table()):
            if not self.matcher.evaluate(row, condition):
                continue
            target = values[idx + HEADER_ROW_COUNT]
            target.extend([""] * (width - len(target)))
            for key, new_value in data.items():
                if key in headers:
                    target[headers.index(key)] = new_value
            updated.append(row[ROW_ID])

        if not updated:
            logger.info("No matching rows found to update.")
            return []

        self._store.write_block(1, 1, values)
        logger.info(f"Updated {len(updated)} row(s): {updated}")
        return updated

    def insert_row(self, data: Mapping[str, Any]) -> List[Any]:
        """Append a row in header order; columns missing from ``data`` are ''."""
        headers = self.get_headers()
        if not headers:
            raise ValueError("Cannot insert into a sheet without a header row.")

        unknown = [key for key in data if key not in headers]
        if unknown:
            logger.debug(f"Ignoring columns not in sheet: {unknown}")

        new_row = [data[header] if header in data else "" for header in headers]
        self._store.append_row(new_row)
        return new_row

    def delete_rows(self, conditions: Any) -> List[int]:
        """Delete matching rows, bottom first so earlier row numbers stay valid.

        Returns:
            Deleted rowIDs in the order they were removed.
        """
        row_ids = [row[ROW_ID] for row in self.get_rows(conditions)]
        if not row_ids:
            logger.info("No matching rows found to delete.")
            return []

        deleted = sorted(row_ids, reverse=True)
        for row_id in deleted:
            self._store.delete_row(row_id)
        logger.info(f"Deleted {len(deleted)} row(s): {deleted}")
        return deleted

    def highlight_rows(
        self,
        conditions: Any,
        color: Optional[str] = None,
    ) -> Optional[HighlightSession]:
        """Paint matching rows.

        Returns:
            A session for ``clear_highlight``, or None if nothing matched.
        """
        color = color or self.highlight_color
        row_ids = [row[ROW_ID] for row in self.get_rows(conditions)]
        if not row_ids:
            logger.info("No matching rows found to highlight.")
            return None

        self._store.set_backgrounds(row_ids, color)

        session = HighlightSession(
            id=str(uuid.uuid4()),
            row_ids=row_ids,
            color=color,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        logger.info(f"Highlighted {len(row_ids)} row(s): {json.dumps(session.to_dict())}")
        return session

    def clear_highlight(
        self,
        session: Union[HighlightSession, Mapping[str, Any], None],
    ) -> None:
        """Reset the rows recorded in ``session`` to the neutral background.

        The rows are not re-checked; if the sheet changed since the highlight
        the same row numbers are cleared regardless.

        Raises:
            ValueError: if ``session`` is missing or carries no row ids.
        """
        if session is None:
            raise ValueError("Invalid arguments passed to clear_highlight.")
        if isinstance(session, Mapping):
            session = HighlightSession.from_dict(session)
        if session.row_ids is None:
            raise ValueError("Invalid arguments passed to clear_highlight.")

        self._store.set_backgrounds(session.row_ids, self.clear_color)
        logger.info(f"Cleared highlight for rows: {', '.join(str(r) for r in session.row_ids)}")
