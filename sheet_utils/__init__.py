"""Row-level access to spreadsheet tabs with declarative conditions."""

from .conditions import Condition, ConditionMatcher, matches, parse_condition
from .config import ConfigError, Settings, load_settings, resolve_timezone
from .formatting import format_timestamp, log_rows, stringify_obj
from .google_sheets import GoogleSheetsStore, SheetsError
from .sheet_table import HighlightSession, SheetTable
from .store import InMemorySheetStore, SheetStore
from .table import get_rows_from_table, get_values_from_table, rows_from_values

__all__ = [
    "Condition",
    "ConditionMatcher",
    "ConfigError",
    "GoogleSheetsStore",
    "HighlightSession",
    "InMemorySheetStore",
    "Settings",
    "SheetStore",
    "SheetTable",
    "SheetsError",
    "format_timestamp",
    "get_rows_from_table",
    "get_values_from_table",
    "load_settings",
    "log_rows",
    "matches",
    "parse_condition",
    "resolve_timezone",
    "rows_from_values",
    "stringify_obj",
]
