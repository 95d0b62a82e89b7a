"""
Survey item conditions

A condition decides whether a survey item is shown to the user, based on the
responses given earlier in the same survey. It is a boolean expression over
clauses of the form ``{prompt_id} {operator} {value}``::

    (q1 == 1) and (q2 > 3 or q3 == SKIPPED)

"and" binds tighter than "or"; parentheses group.
"""
import logging
import operator as _operator
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, List, Mapping, NamedTuple, Optional

from ohmage.domain.campaign.response import NoResponse
from ohmage.domain.exceptions import ConditionParseError, DomainError

logger = logging.getLogger(__name__)

CONJUNCTION_AND = "and"
CONJUNCTION_OR = "or"

_TOKEN_PATTERN = re.compile(
    r"\s*(?:(?P<operator>==|!=|<=|>=|<|>)|(?P<lparen>\()|(?P<rparen>\))|(?P<word>[^\s()=!<>]+))"
)


class Operator(Enum):
    EQUALS = "=="
    NOT_EQUALS = "!="
    LESS_THAN = "<"
    GREATER_THAN = ">"
    LESS_THAN_OR_EQUALS = "<="
    GREATER_THAN_OR_EQUALS = ">="

    def __str__(self) -> str:
        return self.value

    def is_equality(self) -> bool:
        return self in (Operator.EQUALS, Operator.NOT_EQUALS)


_COMPARATORS = {
    Operator.EQUALS: _operator.eq,
    Operator.NOT_EQUALS: _operator.ne,
    Operator.LESS_THAN: _operator.lt,
    Operator.GREATER_THAN: _operator.gt,
    Operator.LESS_THAN_OR_EQUALS: _operator.le,
    Operator.GREATER_THAN_OR_EQUALS: _operator.ge,
}


@dataclass(frozen=True)
class ConditionValuePair:
    """One ``prompt_id operator value`` clause of a condition"""
    prompt_id: str
    operator: Operator
    value: str

    def no_response(self) -> Optional[NoResponse]:
        return NoResponse.from_value(self.value)

    def numeric_value(self) -> Optional[Decimal]:
        """The literal as a number, or None if it is not one"""
        try:
            number = Decimal(self.value)
        except InvalidOperation:
            return None
        if not number.is_finite():
            return None
        return number

    def __str__(self) -> str:
        return f"{self.prompt_id} {self.operator} {self.value}"


class Expression:
    """A parsed condition"""

    def evaluate(self, responses: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def pairs(self) -> List[ConditionValuePair]:
        raise NotImplementedError

    def prompt_ids(self) -> List[str]:
        """Referenced prompt ids in order of first appearance"""
        seen = []
        for pair in self.pairs():
            if pair.prompt_id not in seen:
                seen.append(pair.prompt_id)
        return seen


class Clause(Expression):
    def __init__(self, pair: ConditionValuePair):
        self.pair = pair

    def evaluate(self, responses: Mapping[str, Any]) -> bool:
        pair = self.pair
        # Prompts that were never reached count as not displayed.
        response = responses.get(pair.prompt_id, NoResponse.NOT_DISPLAYED)

        literal = pair.no_response()
        if literal is not None:
            if pair.operator is Operator.EQUALS:
                return response is literal
            if pair.operator is Operator.NOT_EQUALS:
                return response is not literal
            raise DomainError(
                f"The value '{literal}' may only be compared with '==' or '!=': {pair}"
            )

        if isinstance(response, NoResponse):
            return pair.operator is Operator.NOT_EQUALS

        if isinstance(response, (list, tuple, set, frozenset)):
            if pair.operator is Operator.NOT_EQUALS:
                return not any(_compare(item, Operator.EQUALS, pair) for item in response)
            return any(_compare(item, pair.operator, pair) for item in response)

        return _compare(response, pair.operator, pair)

    def pairs(self) -> List[ConditionValuePair]:
        return [self.pair]

    def __repr__(self) -> str:
        return f"Clause({self.pair})"


class And(Expression):
    def __init__(self, operands: List[Expression]):
        self.operands = operands

    def evaluate(self, responses: Mapping[str, Any]) -> bool:
        return all(operand.evaluate(responses) for operand in self.operands)

    def pairs(self) -> List[ConditionValuePair]:
        return [pair for operand in self.operands for pair in operand.pairs()]

    def __repr__(self) -> str:
        return f"And({self.operands!r})"


class Or(Expression):
    def __init__(self, operands: List[Expression]):
        self.operands = operands

    def evaluate(self, responses: Mapping[str, Any]) -> bool:
        return any(operand.evaluate(responses) for operand in self.operands)

    def pairs(self) -> List[ConditionValuePair]:
        return [pair for operand in self.operands for pair in operand.pairs()]

    def __repr__(self) -> str:
        return f"Or({self.operands!r})"


def _compare(value: Any, operator: Operator, pair: ConditionValuePair) -> bool:
    if isinstance(value, bool):
        raise DomainError(f"Boolean responses cannot be used in conditions: {pair}")

    if isinstance(value, (int, float, Decimal)):
        literal = pair.numeric_value()
        if literal is None:
            raise DomainError(f"The value '{pair.value}' is not a number: {pair}")
        return _COMPARATORS[operator](Decimal(str(value)), literal)

    if isinstance(value, str) and operator.is_equality():
        return _COMPARATORS[operator](value, pair.value)

    raise DomainError(
        f"The response to '{pair.prompt_id}' cannot be compared with '{operator}': {pair}"
    )


class _Token(NamedTuple):
    kind: str
    text: str
    position: int


def _tokenize(condition: str) -> List[_Token]:
    tokens = []
    position = 0
    length = len(condition)
    while position < length:
        if condition[position:].strip() == "":
            break
        match = _TOKEN_PATTERN.match(condition, position)
        if match is None or match.end() == position:
            raise ConditionParseError(
                f"Unexpected character '{condition[position:].strip()[0]}' "
                f"at position {position} in condition: {condition}"
            )
        kind = match.lastgroup
        tokens.append(_Token(kind, match.group(kind), match.start(kind)))
        position = match.end()
    return tokens


class _Parser:
    def __init__(self, condition: str):
        self._condition = condition
        self._tokens = _tokenize(condition)
        self._position = 0

    def parse(self) -> Expression:
        if not self._tokens:
            raise ConditionParseError("The condition is empty.")
        expression = self._disjunction()
        if self._position < len(self._tokens):
            token = self._tokens[self._position]
            raise self._error(f"Unexpected '{token.text}'", token)
        return expression

    def _disjunction(self) -> Expression:
        operands = [self._conjunction()]
        while self._accept_word(CONJUNCTION_OR):
            operands.append(self._conjunction())
        return operands[0] if len(operands) == 1 else Or(operands)

    def _conjunction(self) -> Expression:
        operands = [self._sentence()]
        while self._accept_word(CONJUNCTION_AND):
            operands.append(self._sentence())
        return operands[0] if len(operands) == 1 else And(operands)

    def _sentence(self) -> Expression:
        token = self._next("a prompt id or '('")
        if token.kind == "lparen":
            expression = self._disjunction()
            closing = self._next("')'")
            if closing.kind != "rparen":
                raise self._error(f"Expected ')' but found '{closing.text}'", closing)
            return expression

        if token.kind != "word" or _is_conjunction(token):
            raise self._error(f"Expected a prompt id but found '{token.text}'", token)

        operator_token = self._next("an operator")
        if operator_token.kind != "operator":
            raise self._error(
                f"Expected an operator but found '{operator_token.text}'", operator_token
            )

        value_token = self._next("a value")
        if value_token.kind != "word" or _is_conjunction(value_token):
            raise self._error(f"Expected a value but found '{value_token.text}'", value_token)

        return Clause(ConditionValuePair(token.text, Operator(operator_token.text), value_token.text))

    def _accept_word(self, word: str) -> bool:
        if self._position < len(self._tokens):
            token = self._tokens[self._position]
            if token.kind == "word" and token.text == word:
                self._position += 1
                return True
        return False

    def _next(self, expected: str) -> _Token:
        if self._position >= len(self._tokens):
            raise ConditionParseError(
                f"Expected {expected} but the condition ended: {self._condition}"
            )
        token = self._tokens[self._position]
        self._position += 1
        return token

    def _error(self, message: str, token: _Token) -> ConditionParseError:
        return ConditionParseError(
            f"{message} at position {token.position} in condition: {self._condition}"
        )


def _is_conjunction(token: _Token) -> bool:
    return token.text in (CONJUNCTION_AND, CONJUNCTION_OR)


def parse_condition(condition: str) -> Expression:
    """
    Parse a condition string

    Args:
        condition: The condition text from the campaign configuration

    Returns:
        The parsed expression

    Raises:
        ConditionParseError: If the condition does not follow the grammar
    """
    if condition is None:
        raise ConditionParseError("The condition is empty.")
    logger.debug("Parsing condition: %s", condition)
    return _Parser(condition).parse()
