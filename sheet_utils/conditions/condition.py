"""Typed condition tree used to select sheet rows.

Callers write conditions as plain dicts, e.g.::

    {"status": ["Open", "Pending"], "NOT": {"owner": re.compile("^bot")}}

``condition_parser.parse_condition`` turns that into a ``Condition``: an
ordered tuple of clauses combined with AND. The evaluator only ever sees
these classes.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from re import Pattern
from typing import Any, Callable, Tuple, Union

ROW_ID = "rowID"
AND_KEY = "AND"
OR_KEY = "OR"
NOT_KEY = "NOT"


@dataclass(frozen=True, slots=True)
class EqualityClause:
    """Strict equality with a literal.

    Also the arm every matcher of an unsupported type falls into.
    """

    column: str
    value: Any


@dataclass(frozen=True, slots=True)
class RegexClause:
    column: str
    pattern: Pattern


@dataclass(frozen=True, slots=True)
class PredicateClause:
    column: str
    predicate: Callable[[Any], Any]


@dataclass(frozen=True, slots=True)
class ListClause:
    """Matches when the cell equals any of ``options``."""

    column: str
    options: Tuple[Any, ...]


@dataclass(frozen=True, slots=True)
class DateClause:
    column: str
    value: date  # date or datetime


@dataclass(frozen=True, slots=True)
class RowIdClause:
    """Selects rows by sheet row number.

    A scalar selector is stored already coerced to a number, so both forms
    reduce to membership in ``row_ids``.
    """

    row_ids: Tuple[Any, ...]


@dataclass(frozen=True, slots=True)
class AndNode:
    condition: "Condition"


@dataclass(frozen=True, slots=True)
class OrNode:
    """Any one alternative must match; no alternatives never matches."""

    alternatives: Tuple["Condition", ...]


@dataclass(frozen=True, slots=True)
class NotNode:
    condition: "Condition"


Clause = Union[
    EqualityClause,
    RegexClause,
    PredicateClause,
    ListClause,
    DateClause,
    RowIdClause,
    AndNode,
    OrNode,
    NotNode,
]


@dataclass(frozen=True, slots=True)
class Condition:
    """Clauses that must all hold. An empty condition matches every row."""

    clauses: Tuple[Clause, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.clauses


EMPTY_CONDITION = Condition()
