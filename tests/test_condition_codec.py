"""Tests for the condition codec - parsing and formatting condition text."""

import pytest

from dialogue_forge.core.condition_codec import (
    format_condition,
    format_value,
    negate_condition,
    parse_clause,
    parse_condition,
    parse_condition_clauses,
    parse_value,
)
from dialogue_forge.schemas.dialogue import Condition, ConditionOperator


# --- Values ---

def test_parse_value_literals():
    """Bare literals become bool, int or float; quoted text stays a string."""
    assert parse_value("true") is True
    assert parse_value("false") is False
    assert parse_value("100") == 100
    assert isinstance(parse_value("100"), int)
    assert parse_value("2.5") == 2.5
    assert parse_value('"complete"') == "complete"
    assert parse_value("'single'") == "single"
    assert parse_value('"42"') == "42"


def test_format_value():
    assert format_value(True) == "true"
    assert format_value(False) == "false"
    assert format_value(5) == "5"
    assert format_value(2.5) == "2.5"
    assert format_value("complete") == '"complete"'


# --- Clauses ---

def test_parse_presence_clauses():
    """$flag is is_set; not/! prefix is is_not_set."""
    assert parse_clause("$met") == Condition(flag="met", operator=ConditionOperator.IS_SET)
    assert parse_clause("not $met") == Condition(flag="met", operator=ConditionOperator.IS_NOT_SET)
    assert parse_clause("!$met") == Condition(flag="met", operator=ConditionOperator.IS_NOT_SET)


@pytest.mark.parametrize("symbol, operator", [
    ("==", ConditionOperator.EQUALS),
    ("!=", ConditionOperator.NOT_EQUALS),
    (">", ConditionOperator.GREATER_THAN),
    ("<", ConditionOperator.LESS_THAN),
    (">=", ConditionOperator.GREATER_EQUAL),
    ("<=", ConditionOperator.LESS_EQUAL),
])
def test_parse_symbol_comparisons(symbol, operator):
    condition = parse_clause(f"$gold {symbol} 10")
    assert condition.flag == "gold"
    assert condition.operator is operator
    assert condition.value == 10


def test_parse_word_comparisons():
    """Word operators (gte, is, ...) read the same as symbols."""
    assert parse_clause("$gold gte 5").operator is ConditionOperator.GREATER_EQUAL
    assert parse_clause('$quest is "done"') == Condition(
        flag="quest", operator=ConditionOperator.EQUALS, value="done"
    )


def test_parse_reversed_comparison():
    """A literal on the left is mirrored so the flag comes first."""
    condition = parse_clause("5 < $gold")
    assert condition == Condition(flag="gold", operator=ConditionOperator.GREATER_THAN, value=5)


def test_unrecognized_clauses_are_rejected():
    assert parse_clause("5 > 3") is None
    assert parse_clause("visited(\"town\")") is None


# --- Whole conditions ---

def test_parse_conjunction():
    """Scenario: `$quest and $gold >= 100` is two conditions."""
    conditions = parse_condition("$quest and $gold >= 100")
    assert conditions == [
        Condition(flag="quest", operator=ConditionOperator.IS_SET),
        Condition(flag="gold", operator=ConditionOperator.GREATER_EQUAL, value=100),
    ]


def test_parse_ampersand_conjunction():
    conditions = parse_condition("$a && not $b")
    assert [c.operator for c in conditions] == [ConditionOperator.IS_SET, ConditionOperator.IS_NOT_SET]


def test_and_inside_quotes_is_not_a_separator():
    conditions = parse_condition('$name == "salt and pepper"')
    assert len(conditions) == 1
    assert conditions[0].value == "salt and pepper"


def test_true_literal_is_empty():
    assert parse_condition("true") == []


def test_rejected_clauses_are_returned():
    conditions, rejected = parse_condition_clauses("$a and 1 > 2")
    assert [c.flag for c in conditions] == ["a"]
    assert rejected == ["1 > 2"]


def test_format_condition():
    conditions = [
        Condition(flag="quest", operator=ConditionOperator.IS_SET),
        Condition(flag="gold", operator=ConditionOperator.GREATER_EQUAL, value=100),
        Condition(flag="cursed", operator=ConditionOperator.IS_NOT_SET),
    ]
    assert format_condition(conditions) == "$quest and $gold >= 100 and not $cursed"


def test_format_empty_condition():
    assert format_condition(None) == ""
    assert format_condition([]) == ""


def test_comparison_without_value_formats_as_flag():
    condition = Condition(flag="gold", operator=ConditionOperator.EQUALS)
    assert format_condition([condition]) == "$gold"


@pytest.mark.parametrize("conditions", [
    [Condition(flag="met", operator=ConditionOperator.IS_SET)],
    [Condition(flag="met", operator=ConditionOperator.IS_NOT_SET)],
    [Condition(flag="gold", operator=ConditionOperator.LESS_EQUAL, value=3)],
    [Condition(flag="ratio", operator=ConditionOperator.GREATER_THAN, value=0.5)],
    [Condition(flag="quest", operator=ConditionOperator.NOT_EQUALS, value="failed")],
    [Condition(flag="done", operator=ConditionOperator.EQUALS, value=True)],
    [
        Condition(flag="a", operator=ConditionOperator.IS_SET),
        Condition(flag="b", operator=ConditionOperator.EQUALS, value=2),
    ],
])
def test_format_then_parse_is_identity(conditions):
    """Parsing formatted conditions gives the same list back."""
    assert parse_condition(format_condition(conditions)) == conditions


# --- Negation ---

@pytest.mark.parametrize("text, negated", [
    ("$met", "not $met"),
    ("not $met", "$met"),
    ("$quest == \"done\"", "$quest != \"done\""),
    ("$gold > 10", "$gold <= 10"),
    ("$gold >= 10", "$gold < 10"),
])
def test_negate_condition(text, negated):
    assert format_condition([negate_condition(parse_clause(text))]) == negated
