"""
Survey items: the entries of a survey's content list
"""
from typing import Any, Dict, Mapping, Optional

from ohmage.domain.condition import Expression, parse_condition
from ohmage.domain.exceptions import DomainError
from ohmage.domain.utils import is_blank


class SurveyItem:
    """
    Base class for anything that can appear in a survey

    Args:
        id: The item's unique identifier within its campaign
        condition: Condition deciding whether the item is displayed
        index: Position of the item inside its container
    """

    JSON_KEY_ID = "id"
    JSON_KEY_CONDITION = "condition"
    JSON_KEY_INDEX = "index"

    def __init__(self, id: str, condition: Optional[str], index: int):
        if is_blank(id):
            raise DomainError("The survey item ID cannot be empty.")
        if index is None or index < 0:
            raise DomainError(f"The index of survey item '{id}' must be non-negative.")

        self.id = id
        self.condition = None if is_blank(condition) else condition.strip()
        self.index = index
        self._expression: Optional[Expression] = None

    def parsed_condition(self) -> Optional[Expression]:
        """The parsed condition, or None if the item is always displayed"""
        if self.condition is None:
            return None
        if self._expression is None:
            self._expression = parse_condition(self.condition)
        return self._expression

    def is_displayed(self, responses: Mapping[str, Any]) -> bool:
        """
        Evaluate the condition against the responses given so far

        Args:
            responses: Prompt id to canonical value (or NoResponse)

        Returns:
            True if the item should have been shown to the user
        """
        expression = self.parsed_condition()
        if expression is None:
            return True
        return expression.evaluate(responses)

    def num_survey_items(self) -> int:
        return 1

    def num_prompts(self) -> int:
        return 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            self.JSON_KEY_ID: self.id,
            self.JSON_KEY_CONDITION: self.condition,
            self.JSON_KEY_INDEX: self.index,
        }

    def _key(self) -> tuple:
        return (type(self), self.id, self.condition, self.index)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SurveyItem):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash((type(self), self.id))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, index={self.index})"


class Message(SurveyItem):
    """Text shown to the user between prompts; it never has a response"""

    JSON_KEY_TEXT = "text"

    def __init__(self, id: str, condition: Optional[str], index: int, text: str):
        super().__init__(id, condition, index)
        if is_blank(text):
            raise DomainError(f"The message '{id}' has no text.")
        self.text = text

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["survey_item_type"] = "message"
        result[self.JSON_KEY_TEXT] = self.text
        return result

    def _key(self) -> tuple:
        return super()._key() + (self.text,)
