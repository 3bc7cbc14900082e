"""Row selection conditions."""

from .condition import (
    AND_KEY,
    EMPTY_CONDITION,
    NOT_KEY,
    OR_KEY,
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
from .condition_evaluator import ConditionMatcher, matches
from .condition_parser import parse_condition

__all__ = [
    "AND_KEY",
    "EMPTY_CONDITION",
    "NOT_KEY",
    "OR_KEY",
    "ROW_ID",
    "AndNode",
    "Condition",
    "ConditionMatcher",
    "DateClause",
    "EqualityClause",
    "ListClause",
    "NotNode",
    "OrNode",
    "PredicateClause",
    "RegexClause",
    "RowIdClause",
    "matches",
    "parse_condition",
]
