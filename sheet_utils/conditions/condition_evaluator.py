"""Evaluate a condition tree against a single row."""
from __future__ import annotations

from datetime import date, timezone, tzinfo
from typing import Any, Callable, Dict, Mapping

from ..values import (
    DASHED_DATE_RE,
    parse_dashed_date,
    strict_equals,
    string_form,
    to_instant,
)
from .condition import (
    ROW_ID,
    AndNode,
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
from .condition_parser import parse_condition

Row = Mapping[str, Any]


class ConditionMatcher:
    """Matches rows against conditions.

    Args:
        tz: Timezone for naive datetimes and ``MM-DD-YYYY`` strings.
    """

    def __init__(self, tz: tzinfo = timezone.utc) -> None:
        self.tz = tz
        self._handlers: Dict[type, Callable[[Row, Any], bool]] = {
            EqualityClause: self._match_equality,
            RegexClause: self._match_regex,
            PredicateClause: self._match_predicate,
            ListClause: self._match_list,
            DateClause: self._match_date,
            RowIdClause: self._match_row_id,
            AndNode: self._match_and,
            OrNode: self._match_or,
            NotNode: self._match_not,
        }

    def matches(self, row: Row, condition: Any) -> bool:
        """Return True if ``row`` satisfies ``condition``.

        ``condition`` may be the dict syntax, a parsed ``Condition`` or None.
        """
        return self.evaluate(row, parse_condition(condition))

    def evaluate(self, row: Row, condition: Condition) -> bool:
        return all(self._evaluate_clause(row, clause) for clause in condition.clauses)

    def _evaluate_clause(self, row: Row, clause: Any) -> bool:
        handler = self._handlers[type(clause)]
        return handler(row, clause)

    # ------------------------------------------------------------------
    # Composite clauses
    # ------------------------------------------------------------------
    def _match_and(self, row: Row, clause: AndNode) -> bool:
        return self.evaluate(row, clause.condition)

    def _match_or(self, row: Row, clause: OrNode) -> bool:
        return any(self.evaluate(row, alternative) for alternative in clause.alternatives)

    def _match_not(self, row: Row, clause: NotNode) -> bool:
        return not self.evaluate(row, clause.condition)

    def _match_row_id(self, row: Row, clause: RowIdClause) -> bool:
        row_id = row.get(ROW_ID)
        return any(strict_equals(row_id, candidate) for candidate in clause.row_ids)

    # ------------------------------------------------------------------
    # Field clauses
    # ------------------------------------------------------------------
    def _match_equality(self, row: Row, clause: EqualityClause) -> bool:
        return strict_equals(row.get(clause.column), clause.value)

    def _match_regex(self, row: Row, clause: RegexClause) -> bool:
        return clause.pattern.search(string_form(row.get(clause.column))) is not None

    def _match_predicate(self, row: Row, clause: PredicateClause) -> bool:
        value = row.get(clause.column)
        if isinstance(value, str) and DASHED_DATE_RE.fullmatch(value):
            converted = parse_dashed_date(value, self.tz)
            if converted is not None:
                value = converted
        return bool(clause.predicate(value))

    def _match_list(self, row: Row, clause: ListClause) -> bool:
        value = row.get(clause.column)
        for option in clause.options:
            if isinstance(option, date):
                if self._same_instant(value, option):
                    return True
            elif strict_equals(value, option):
                return True
        return False

    def _match_date(self, row: Row, clause: DateClause) -> bool:
        return self._same_instant(row.get(clause.column), clause.value)

    def _same_instant(self, value: Any, expected: date) -> bool:
        actual = to_instant(value, self.tz)
        return actual is not None and actual == to_instant(expected, self.tz)


_default_matcher = ConditionMatcher()


def matches(row: Row, condition: Any, *, tz: tzinfo | None = None) -> bool:
    """Module-level shortcut for ``ConditionMatcher(tz).matches``."""
    matcher = _default_matcher if tz is None else ConditionMatcher(tz)
    return matcher.matches(row, condition)
