"""Tests for parsing the dict condition syntax."""
from __future__ import annotations

from datetime import date
import logging
import math
import re

import pytest

from sheet_utils.conditions import (
    EMPTY_CONDITION,
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
    parse_condition,
)


class TestParseCondition:
    def test_empty_inputs(self):
        assert parse_condition(None) is EMPTY_CONDITION
        assert parse_condition({}) is EMPTY_CONDITION
        assert EMPTY_CONDITION.is_empty

    def test_parsed_condition_passes_through(self):
        condition = Condition((EqualityClause("a", 1),))
        assert parse_condition(condition) is condition

    def test_non_mapping_is_rejected(self):
        with pytest.raises(TypeError, match="mapping"):
            parse_condition(["status", "Open"])

    def test_clause_variants(self):
        pattern = re.compile("x")
        predicate = len
        parsed = parse_condition({
            "a": "text",
            "b": pattern,
            "c": predicate,
            "d": [1, 2],
            "e": date(2024, 1, 1),
            "f": None,
        })

        assert parsed.clauses == (
            EqualityClause("a", "text"),
            RegexClause("b", pattern),
            PredicateClause("c", predicate),
            ListClause("d", (1, 2)),
            DateClause("e", date(2024, 1, 1)),
            EqualityClause("f", None),
        )

    def test_sets_and_tuples_are_lists(self):
        parsed = parse_condition({"a": ("x",), "b": {"y"}})
        assert parsed.clauses == (ListClause("a", ("x",)), ListClause("b", ("y",)))

    def test_key_order_is_kept(self):
        parsed = parse_condition({"z": 1, "a": 2, "m": 3})
        assert [clause.column for clause in parsed.clauses] == ["z", "a", "m"]


class TestRowIdSelector:
    def test_row_id_drops_other_clauses(self):
        parsed = parse_condition({"status": "Open", "rowID": [2, 3], "NOT": {"a": 1}})
        assert parsed.clauses == (RowIdClause((2, 3)),)

    def test_scalar_row_id_is_coerced(self):
        assert parse_condition({"rowID": "7"}).clauses == (RowIdClause((7,)),)

    def test_non_numeric_row_id_becomes_nan(self):
        (clause,) = parse_condition({"rowID": "seven"}).clauses
        assert math.isnan(clause.row_ids[0])


class TestComposites:
    def test_and_and_not_wrap_nested_conditions(self):
        parsed = parse_condition({"AND": {"a": 1}, "NOT": {"b": 2}})
        assert parsed.clauses == (
            AndNode(Condition((EqualityClause("a", 1),))),
            NotNode(Condition((EqualityClause("b", 2),))),
        )

    def test_or_splits_into_single_key_alternatives(self):
        parsed = parse_condition({"OR": {"a": 1, "rowID": [5]}})
        assert parsed.clauses == (
            OrNode((
                Condition((EqualityClause("a", 1),)),
                Condition((RowIdClause((5,)),)),
            )),
        )

    def test_empty_or(self):
        assert parse_condition({"OR": {}}).clauses == (OrNode(()),)
        assert parse_condition({"OR": None}).clauses == (OrNode(()),)

    def test_or_accepts_parsed_condition(self):
        inner = parse_condition({"a": 1, "b": 2})
        (or_node,) = parse_condition({"OR": inner}).clauses
        assert or_node.alternatives == (
            Condition((EqualityClause("a", 1),)),
            Condition((EqualityClause("b", 2),)),
        )

    def test_non_mapping_or_never_matches(self, caplog):
        with caplog.at_level(logging.WARNING):
            parsed = parse_condition({"OR": ["a", "b"]})

        assert parsed.clauses == (OrNode(()),)
        assert "OR expects a mapping" in caplog.text

    @pytest.mark.parametrize("value", [5, "text", ["a", 1]])
    def test_non_mapping_and_not_are_empty(self, value):
        parsed = parse_condition({"AND": value, "NOT": value})
        assert parsed.clauses == (AndNode(EMPTY_CONDITION), NotNode(EMPTY_CONDITION))

    def test_empty_and_is_universal(self):
        assert parse_condition({"AND": {}}).clauses == (AndNode(EMPTY_CONDITION),)
