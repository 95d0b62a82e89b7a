"""
Tests for condition parsing and evaluation
"""
import pytest

from ohmage.domain.campaign.response import NoResponse
from ohmage.domain.condition import (
    And,
    Clause,
    ConditionValuePair,
    Operator,
    Or,
    parse_condition,
)
from ohmage.domain.exceptions import ConditionParseError, DomainError


def test_parse_single_clause():
    expression = parse_condition("q1 == 1")

    assert isinstance(expression, Clause)
    assert expression.pair == ConditionValuePair("q1", Operator.EQUALS, "1")


def test_parse_without_spaces():
    expression = parse_condition("q1>=3")

    assert expression.pair == ConditionValuePair("q1", Operator.GREATER_THAN_OR_EQUALS, "3")


def test_and_binds_tighter_than_or():
    expression = parse_condition("a == 1 or b == 2 and c == 3")

    assert isinstance(expression, Or)
    assert isinstance(expression.operands[1], And)
    assert [str(pair) for pair in expression.pairs()] == ["a == 1", "b == 2", "c == 3"]


def test_parentheses_group():
    expression = parse_condition("(a == 1 or b == 2) and c == 3")

    assert isinstance(expression, And)
    assert isinstance(expression.operands[0], Or)


def test_prompt_ids_are_unique_and_ordered():
    expression = parse_condition("b == 1 or (a == 2 and b != 3)")

    assert expression.prompt_ids() == ["b", "a"]


@pytest.mark.parametrize("condition", [
    "",
    "   ",
    "q1",
    "q1 ==",
    "q1 == 1 and",
    "(q1 == 1",
    "q1 == 1)",
    "q1 = 1",
    "== 1",
    "q1 == 1 q2 == 2",
    "and == 1",
    "q1 == or",
])
def test_malformed_conditions_are_rejected(condition):
    with pytest.raises(ConditionParseError):
        parse_condition(condition)


def test_parse_error_is_a_domain_error():
    with pytest.raises(DomainError):
        parse_condition("q1 ! 1")


def test_numeric_comparisons():
    assert parse_condition("q == 2").evaluate({"q": 2})
    assert parse_condition("q < 2.5").evaluate({"q": 2})
    assert parse_condition("q >= 2").evaluate({"q": 2})
    assert not parse_condition("q > 2").evaluate({"q": 2})
    assert parse_condition("q != 3").evaluate({"q": 2})


def test_missing_prompt_counts_as_not_displayed():
    assert parse_condition("q == NOT_DISPLAYED").evaluate({})
    assert not parse_condition("q == 1").evaluate({})
    assert parse_condition("q != 1").evaluate({})


def test_no_response_literals():
    skipped = {"q": NoResponse.SKIPPED}

    assert parse_condition("q == SKIPPED").evaluate(skipped)
    assert not parse_condition("q != SKIPPED").evaluate(skipped)
    assert not parse_condition("q == NOT_DISPLAYED").evaluate(skipped)
    assert not parse_condition("q == SKIPPED").evaluate({"q": 4})


def test_no_response_only_satisfies_not_equals():
    skipped = {"q": NoResponse.SKIPPED}

    assert not parse_condition("q == 1").evaluate(skipped)
    assert not parse_condition("q > 1").evaluate(skipped)
    assert parse_condition("q != 1").evaluate(skipped)


def test_no_response_literal_with_relational_operator_fails():
    with pytest.raises(DomainError):
        parse_condition("q > SKIPPED").evaluate({"q": 1})


def test_list_responses():
    selected = {"q": [0, 2]}

    assert parse_condition("q == 2").evaluate(selected)
    assert not parse_condition("q == 1").evaluate(selected)
    assert parse_condition("q != 1").evaluate(selected)
    assert not parse_condition("q != 2").evaluate(selected)
    assert parse_condition("q > 1").evaluate(selected)


def test_string_responses_support_equality_only():
    assert parse_condition("q == Happy").evaluate({"q": "Happy"})
    assert parse_condition("q != Happy").evaluate({"q": "Sad"})

    with pytest.raises(DomainError):
        parse_condition("q < Happy").evaluate({"q": "Sad"})


def test_non_numeric_literal_for_number_fails():
    with pytest.raises(DomainError):
        parse_condition("q == abc").evaluate({"q": 1})


def test_compound_evaluation():
    expression = parse_condition("(a == 1 or b == 2) and c != SKIPPED")

    assert expression.evaluate({"a": 1, "b": 0, "c": 5})
    assert expression.evaluate({"a": 0, "b": 2, "c": 5})
    assert not expression.evaluate({"a": 0, "b": 0, "c": 5})
    assert not expression.evaluate({"a": 1, "b": 2, "c": NoResponse.SKIPPED})
