"""
Numeric prompts: number and hours-before-now
"""
import math
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Union

from ohmage.domain.campaign.prompt import DisplayType, Prompt, PromptType
from ohmage.domain.condition import ConditionValuePair
from ohmage.domain.exceptions import DomainError

Number = Union[int, Decimal]


def parse_number(value: Any, what: str) -> Decimal:
    """
    Decode a number from an int, float, Decimal, or string

    Args:
        value: The value to decode
        what: Description of the value for error messages

    Returns:
        The value as a Decimal

    Raises:
        DomainError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise DomainError(f"{what} is not a number: {value}")
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise DomainError(f"{what} is not a finite number: {value}")
        return Decimal(str(value))
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, str):
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            raise DomainError(f"{what} is not a number: {value}")
    else:
        raise DomainError(f"{what} is not a number: {value!r}")

    if not number.is_finite():
        raise DomainError(f"{what} is not a finite number: {value}")
    return number


def is_whole(number: Decimal) -> bool:
    return number == number.to_integral_value()


class NumberPrompt(Prompt):
    """
    A prompt whose response is a number between ``min`` and ``max``

    When ``whole_number`` is set (the default) responses are ints; otherwise
    they are Decimals.
    """

    prompt_type = PromptType.NUMBER

    def __init__(
        self,
        id: str,
        condition: Optional[str],
        unit: Optional[str],
        text: str,
        abbreviated_text: Optional[str],
        explanation_text: Optional[str],
        skippable: bool,
        skip_label: Optional[str],
        display_type: DisplayType,
        display_label: str,
        min: Any,
        max: Any,
        default: Any = None,
        index: int = 0,
        whole_number: bool = True,
    ):
        super().__init__(
            id, condition, unit, text, abbreviated_text, explanation_text,
            skippable, skip_label, display_type, display_label, index,
        )

        self.whole_number = bool(whole_number)
        self.min = self._bound(min, "minimum")
        self.max = self._bound(max, "maximum")
        if self.min > self.max:
            raise DomainError(
                f"The minimum of prompt '{id}' is greater than its maximum: {self.min} > {self.max}"
            )

        self.default = None
        if default is not None:
            try:
                self.default = self._check_number(parse_number(default, "The default"))
            except DomainError as e:
                raise DomainError(f"The default of prompt '{id}' is invalid: {e.message}")

    def _bound(self, value: Any, what: str) -> Number:
        if value is None:
            raise DomainError(f"The {what} of prompt '{self.id}' is missing.")
        number = parse_number(value, f"The {what} of prompt '{self.id}'")
        if self.whole_number:
            if not is_whole(number):
                raise DomainError(f"The {what} of prompt '{self.id}' must be a whole number.")
            return int(number)
        return number

    def _check_number(self, number: Decimal) -> Number:
        if self.whole_number and not is_whole(number):
            raise DomainError(f"The value must be a whole number: {number}")
        if number < self.min:
            raise DomainError(f"The value is less than the minimum ({self.min}): {number}")
        if number > self.max:
            raise DomainError(f"The value is greater than the maximum ({self.max}): {number}")
        return int(number) if self.whole_number else number

    def coerce_value(self, value: Any) -> Number:
        number = parse_number(value, f"The response to prompt '{self.id}'")
        try:
            return self._check_number(number)
        except DomainError as e:
            raise DomainError(f"The response to prompt '{self.id}' is invalid: {e.message}")

    def validate_condition_literal(self, pair: ConditionValuePair) -> None:
        number = pair.numeric_value()
        if number is None:
            raise DomainError(f"The value of the condition is not a number: {pair}")
        try:
            self._check_number(number)
        except DomainError as e:
            raise DomainError(f"The value of the condition is invalid for prompt '{self.id}': {e.message}")

    def properties(self) -> Dict[str, Any]:
        return {
            "min": _json_number(self.min),
            "max": _json_number(self.max),
            "default": _json_number(self.default),
            "whole_number": self.whole_number,
        }


class HoursBeforeNowPrompt(NumberPrompt):
    """A whole number of hours before the response was taken"""

    prompt_type = PromptType.HOURS_BEFORE_NOW

    def __init__(
        self,
        id: str,
        condition: Optional[str],
        unit: Optional[str],
        text: str,
        abbreviated_text: Optional[str],
        explanation_text: Optional[str],
        skippable: bool,
        skip_label: Optional[str],
        display_type: DisplayType,
        display_label: str,
        min: Any,
        max: Any,
        default: Any = None,
        index: int = 0,
    ):
        super().__init__(
            id, condition, unit, text, abbreviated_text, explanation_text,
            skippable, skip_label, display_type, display_label,
            min, max, default, index, whole_number=True,
        )

    def properties(self) -> Dict[str, Any]:
        return {"min": self.min, "max": self.max, "default": self.default}


def _json_number(value: Optional[Number]) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    return value
