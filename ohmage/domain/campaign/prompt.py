"""
Prompt configuration

A prompt is a survey item that asks the user for a value. Each prompt type
decides how raw uploaded values are coerced into its canonical type and which
literals a condition may compare its responses against.
"""
from enum import Enum
from typing import Any, Dict, Optional

from ohmage.domain.campaign.response import NoResponse, PromptResponse
from ohmage.domain.campaign.survey_item import SurveyItem
from ohmage.domain.condition import ConditionValuePair
from ohmage.domain.exceptions import DomainError
from ohmage.domain.utils import is_blank


class DisplayType(Enum):
    """Hints for data consumers about what the values represent"""
    MEASUREMENT = "measurement"
    EVENT = "event"
    COUNT = "count"
    CATEGORY = "category"
    METADATA = "metadata"

    def __str__(self) -> str:
        return self.value


class PromptType(Enum):
    TIMESTAMP = "timestamp"
    NUMBER = "number"
    HOURS_BEFORE_NOW = "hours_before_now"
    TEXT = "text"
    SINGLE_CHOICE = "single_choice"
    SINGLE_CHOICE_CUSTOM = "single_choice_custom"
    MULTI_CHOICE = "multi_choice"
    MULTI_CHOICE_CUSTOM = "multi_choice_custom"
    PHOTO = "photo"
    REMOTE_ACTIVITY = "remote_activity"

    def __str__(self) -> str:
        return self.value


class LabelValuePair:
    """A choice label with an optional numeric value"""

    JSON_KEY_LABEL = "label"
    JSON_KEY_VALUE = "value"

    def __init__(self, label: str, value: Optional[float] = None):
        if is_blank(label):
            raise DomainError("The label is null or whitespace only.")
        self.label = label
        self.value = value

    def to_dict(self) -> Dict[str, Any]:
        return {self.JSON_KEY_LABEL: self.label, self.JSON_KEY_VALUE: self.value}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LabelValuePair):
            return NotImplemented
        return self.label == other.label

    def __hash__(self) -> int:
        return hash(self.label)

    def __repr__(self) -> str:
        return f"LabelValuePair({self.label!r}, {self.value!r})"


class Prompt(SurveyItem):
    """
    Base class of every prompt type

    Subclasses set ``prompt_type`` and implement ``coerce_value``. Those whose
    responses may be compared against literals in a condition also override
    ``validate_condition_literal``.
    """

    JSON_KEY_UNIT = "unit"
    JSON_KEY_TEXT = "text"
    JSON_KEY_ABBREVIATED_TEXT = "abbreviated_text"
    JSON_KEY_EXPLANATION_TEXT = "explanation_text"
    JSON_KEY_SKIPPABLE = "skippable"
    JSON_KEY_SKIP_LABEL = "skip_label"
    JSON_KEY_PROMPT_TYPE = "prompt_type"
    JSON_KEY_DISPLAY_TYPE = "display_type"
    JSON_KEY_DISPLAY_LABEL = "display_label"

    prompt_type: PromptType

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
        index: int,
    ):
        super().__init__(id, condition, index)

        if is_blank(text):
            raise DomainError(f"The text of prompt '{id}' cannot be empty.")
        if skippable and is_blank(skip_label):
            raise DomainError(f"The prompt '{id}' is skippable, but the skip label is empty.")
        if display_type is None:
            raise DomainError(f"The display type of prompt '{id}' cannot be empty.")
        if not isinstance(display_type, DisplayType):
            raise DomainError(f"Unknown display type for prompt '{id}': {display_type}")
        if is_blank(display_label):
            raise DomainError(f"The display label of prompt '{id}' cannot be empty.")

        self.unit = unit
        self.text = text
        self.abbreviated_text = abbreviated_text
        self.explanation_text = explanation_text
        self.skippable = bool(skippable)
        self.skip_label = skip_label
        self.display_type = display_type
        self.display_label = display_label

    def num_prompts(self) -> int:
        return 1

    def validate_value(self, value: Any) -> Any:
        """
        Validate a raw response value for this prompt

        Args:
            value: The uploaded value, a NoResponse, or a string decoding to
                either

        Returns:
            The canonical value for this prompt type or a NoResponse

        Raises:
            DomainError: If the value cannot be coerced or breaks a constraint
        """
        if value is None:
            raise DomainError(f"The response to prompt '{self.id}' is missing.")

        no_response = NoResponse.from_value(value)
        if no_response is NoResponse.SKIPPED and not self.skippable:
            raise DomainError(f"The prompt '{self.id}' is not skippable, but it was skipped.")
        if no_response is not None:
            return no_response

        return self.coerce_value(value)

    def coerce_value(self, value: Any) -> Any:
        raise NotImplementedError

    def validate_condition_value_pair(self, pair: ConditionValuePair) -> None:
        """
        Check that a condition clause referencing this prompt is legal

        Raises:
            DomainError: If the clause's value can never be a response to this
                prompt
        """
        if self.check_no_response_condition_value_pair(pair):
            return
        self.validate_condition_literal(pair)

    def validate_condition_literal(self, pair: ConditionValuePair) -> None:
        raise DomainError(
            f"Conditions on {self.prompt_type} prompts may only use "
            f"{NoResponse.SKIPPED} or {NoResponse.NOT_DISPLAYED}: {pair}"
        )

    def check_no_response_condition_value_pair(self, pair: ConditionValuePair) -> bool:
        """
        Returns True if the clause compares against a NoResponse value that is
        legal for this prompt, False if it compares against something else
        """
        no_response = pair.no_response()
        if no_response is None:
            return False

        if not pair.operator.is_equality():
            raise DomainError(
                f"The value '{no_response}' may only be compared with '==' or '!=': {pair}"
            )
        if no_response is NoResponse.SKIPPED and not self.skippable:
            raise DomainError(
                f"The prompt '{self.id}' cannot be skipped, so the condition is invalid: {pair}"
            )
        return True

    def create_response(self, repeatable_set_iteration: Optional[int], value: Any) -> PromptResponse:
        return PromptResponse(self, repeatable_set_iteration, self.validate_value(value))

    def properties(self) -> Dict[str, Any]:
        """Type-specific configuration included in to_dict()"""
        return {}

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result.update({
            "survey_item_type": "prompt",
            self.JSON_KEY_UNIT: self.unit,
            self.JSON_KEY_TEXT: self.text,
            self.JSON_KEY_ABBREVIATED_TEXT: self.abbreviated_text,
            self.JSON_KEY_EXPLANATION_TEXT: self.explanation_text,
            self.JSON_KEY_SKIPPABLE: self.skippable,
            self.JSON_KEY_SKIP_LABEL: self.skip_label,
            self.JSON_KEY_PROMPT_TYPE: str(self.prompt_type),
            self.JSON_KEY_DISPLAY_TYPE: str(self.display_type),
            self.JSON_KEY_DISPLAY_LABEL: self.display_label,
        })
        properties = self.properties()
        if properties:
            result["properties"] = properties
        return result

    def _key(self) -> tuple:
        return super()._key() + (
            self.unit,
            self.text,
            self.abbreviated_text,
            self.explanation_text,
            self.skippable,
            self.skip_label,
            self.display_type,
            self.display_label,
            repr(self.properties()),
        )
