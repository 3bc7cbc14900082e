"""Storage backends a ``SheetTable`` reads from and writes to."""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

from .values import string_form


class SheetStore(ABC):
    """A single sheet: a header row followed by data rows.

    Row and column indexes are 1-based, as in the sheet itself.
    """

    @abstractmethod
    def read_display_values(self) -> List[List[str]]:
        """All cells as the strings the sheet displays."""

    @abstractmethod
    def read_raw_values(self) -> List[List[Any]]:
        """All cells as their underlying values."""

    @abstractmethod
    def write_block(self, top_row: int, left_col: int, values: Sequence[Sequence[Any]]) -> None:
        """Overwrite a rectangle of cells starting at ``(top_row, left_col)``."""

    @abstractmethod
    def append_row(self, values: Sequence[Any]) -> None:
        """Add a row after the last row with content."""

    @abstractmethod
    def delete_row(self, row_index: int) -> None:
        """Remove a row; rows below it move up by one."""

    @abstractmethod
    def set_background(self, row_index: int, color: Optional[str]) -> None:
        """Paint a whole row. None resets it to the default background."""

    def set_backgrounds(self, row_indices: Sequence[int], color: Optional[str]) -> None:
        """Paint several rows with one colour."""
        for row_index in row_indices:
            self.set_background(row_index, color)

    @abstractmethod
    def column_count(self) -> int:
        """Index of the last column with content."""


def display_value(value: Any) -> str:
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    return string_form(value)


class InMemorySheetStore(SheetStore):
    """Sheet held in a list of lists, for tests and offline use."""

    def __init__(self, values: Optional[Sequence[Sequence[Any]]] = None) -> None:
        self._values: List[List[Any]] = [list(row) for row in values or []]
        self.backgrounds: Dict[int, Optional[str]] = {}

    @property
    def values(self) -> List[List[Any]]:
        return self._padded()

    def read_display_values(self) -> List[List[str]]:
        return [[display_value(cell) for cell in row] for row in self._padded()]

    def read_raw_values(self) -> List[List[Any]]:
        return self._padded()

    def write_block(self, top_row: int, left_col: int, values: Sequence[Sequence[Any]]) -> None:
        for offset, row_values in enumerate(values):
            row_idx = top_row - 1 + offset
            while len(self._values) <= row_idx:
                self._values.append([])
            target = self._values[row_idx]
            for col_offset, cell in enumerate(row_values):
                col_idx = left_col - 1 + col_offset
                while len(target) <= col_idx:
                    target.append("")
                target[col_idx] = cell

    def append_row(self, values: Sequence[Any]) -> None:
        self._values.append(list(values))

    def delete_row(self, row_index: int) -> None:
        if not 1 <= row_index <= len(self._values):
            raise IndexError(f"Row {row_index} is out of range")
        del self._values[row_index - 1]
        self.backgrounds = {
            (idx - 1 if idx > row_index else idx): color
            for idx, color in self.backgrounds.items()
            if idx != row_index
        }

    def set_background(self, row_index: int, color: Optional[str]) -> None:
        self.backgrounds[row_index] = color

    def column_count(self) -> int:
        return max((len(row) for row in self._values), default=0)

    def _padded(self) -> List[List[Any]]:
        width = self.column_count()
        return [list(row) + [""] * (width - len(row)) for row in self._values]
