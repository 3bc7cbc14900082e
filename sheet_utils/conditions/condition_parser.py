"""Parse the dict condition syntax into a typed ``Condition``."""
from __future__ import annotations

from collections.abc import Mapping
from datetime import date
import logging
from re import Pattern
from typing import Any

from ..values import to_number
from .condition import (
    AND_KEY,
    EMPTY_CONDITION,
    NOT_KEY,
    OR_KEY,
    ROW_ID,
    AndNode,
    Clause,
    Condition,
    DateClause,
    EqualityClause,
    ListClause,
    NotNode,
    OrNode,
    PredicateClause,
    RegexClause,
    RowIdClause,
)

logger = logging.getLogger(__name__)

_LIST_TYPES = (list, tuple, set, frozenset)


def parse_condition(raw: Any) -> Condition:
    """Build a ``Condition`` from a dict, a parsed ``Condition`` or None.

    A ``rowID`` key wins over every other key in the same dict, so the
    result holds only the ``RowIdClause`` in that case.

    Only the top-level argument is checked; a nested ``AND``, ``NOT`` or
    ``OR`` value that is not a mapping is logged and treated as having no
    keys.

    Raises:
        TypeError: if ``raw`` is neither a mapping, a ``Condition`` nor empty.
    """
    if isinstance(raw, Condition):
        return raw
    if raw is None:
        return EMPTY_CONDITION
    if not isinstance(raw, Mapping):
        raise TypeError(
            f"Condition must be a mapping or Condition, got {type(raw).__name__}"
        )
    if not raw:
        return EMPTY_CONDITION

    if ROW_ID in raw:
        return Condition((parse_row_id(raw[ROW_ID]),))

    return Condition(tuple(_parse_clause(key, value) for key, value in raw.items()))


def parse_row_id(selector: Any) -> RowIdClause:
    if isinstance(selector, _LIST_TYPES):
        return RowIdClause(tuple(selector))
    return RowIdClause((to_number(selector),))


def parse_matcher(column: str, matcher: Any) -> Clause:
    """Pick the clause variant for one ``{column: matcher}`` pair."""
    if isinstance(matcher, Pattern):
        return RegexClause(column, matcher)
    if callable(matcher):
        return PredicateClause(column, matcher)
    if isinstance(matcher, _LIST_TYPES):
        return ListClause(column, tuple(matcher))
    if isinstance(matcher, date):
        return DateClause(column, matcher)
    return EqualityClause(column, matcher)


def _parse_clause(key: str, value: Any) -> Clause:
    if key == AND_KEY:
        return AndNode(_parse_nested(key, value))
    if key == OR_KEY:
        return OrNode(_parse_alternatives(value))
    if key == NOT_KEY:
        return NotNode(_parse_nested(key, value))
    return parse_matcher(key, value)


def _parse_nested(key: str, value: Any) -> Condition:
    # A nested value with no keys is the empty condition, as for {}.
    if value is None or isinstance(value, (Mapping, Condition)):
        return parse_condition(value)
    logger.warning(f"{key} expects a mapping, got {type(value).__name__}; treating it as empty")
    return EMPTY_CONDITION


def _parse_alternatives(value: Any) -> tuple:
    # Each OR entry is tried as its own single-key condition.
    if isinstance(value, Condition):
        return tuple(Condition((clause,)) for clause in value.clauses)
    if not isinstance(value, Mapping):
        if value is not None:
            logger.warning(f"OR expects a mapping, got {type(value).__name__}; it never matches")
        return ()
    return tuple(parse_condition({key: matcher}) for key, matcher in value.items())
