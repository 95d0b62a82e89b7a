"""
Response values attached to survey items
"""
import json
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union
from uuid import UUID

from ohmage.domain.exceptions import DomainError

if TYPE_CHECKING:
    from ohmage.domain.campaign.prompt import Prompt
    from ohmage.domain.campaign.repeatable_set import RepeatableSet


class NoResponse(Enum):
    """Sentinel values for prompts that carry no real answer"""
    SKIPPED = "SKIPPED"
    NOT_DISPLAYED = "NOT_DISPLAYED"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_value(cls, value: Any) -> Optional["NoResponse"]:
        """
        Decode a NoResponse from a sentinel or its name

        Args:
            value: Anything submitted as a response value

        Returns:
            The matching NoResponse, or None if the value is not one
        """
        if isinstance(value, NoResponse):
            return value
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                return None
        return None


def value_to_string(value: Any) -> str:
    """Render a canonical response value the way it is stored"""
    if isinstance(value, NoResponse):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, dict)):
        return json.dumps(value, default=str, separators=(",", ":"))
    if isinstance(value, UUID):
        return str(value)
    return str(value)


def value_to_json(value: Any) -> Any:
    """Render a canonical response value for a JSON document"""
    if isinstance(value, (NoResponse, datetime, UUID)):
        return value_to_string(value)
    if isinstance(value, list):
        return [value_to_json(item) for item in value]
    if isinstance(value, (int, float, str, dict)) or value is None:
        return value
    return str(value)


class PromptResponse:
    """A validated value for one prompt"""

    def __init__(
        self,
        prompt: "Prompt",
        repeatable_set_iteration: Optional[int],
        value: Any,
    ):
        if prompt is None:
            raise DomainError("The prompt is required.")
        if repeatable_set_iteration is not None and repeatable_set_iteration < 0:
            raise DomainError("The repeatable set iteration cannot be negative.")

        self.prompt = prompt
        self.repeatable_set_iteration = repeatable_set_iteration
        self.value = value

    @property
    def prompt_id(self) -> str:
        return self.prompt.id

    def response_value_string(self) -> str:
        return value_to_string(self.value)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "prompt_id": self.prompt.id,
            "prompt_type": str(self.prompt.prompt_type),
            "value": value_to_json(self.value),
        }
        if self.repeatable_set_iteration is not None:
            result["repeatable_set_iteration"] = self.repeatable_set_iteration
        return result

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PromptResponse):
            return NotImplemented
        return (
            self.prompt == other.prompt
            and self.repeatable_set_iteration == other.repeatable_set_iteration
            and self.value == other.value
        )

    def __repr__(self) -> str:
        return f"PromptResponse({self.prompt.id!r}, {self.repeatable_set_iteration!r}, {self.value!r})"


class RepeatableSetResponse:
    """
    Responses for a repeatable set

    Either the whole set carries a NoResponse or it holds one or more
    iterations, each an ordered mapping of prompt id to PromptResponse.
    """

    def __init__(
        self,
        repeatable_set: "RepeatableSet",
        no_response: Optional[NoResponse] = None,
        iterations: Optional[List[Dict[str, PromptResponse]]] = None,
    ):
        iterations = iterations or []
        if no_response is None and not iterations:
            raise DomainError(
                f"The repeatable set '{repeatable_set.id}' was displayed but has no iterations."
            )
        if no_response is not None and iterations:
            raise DomainError(
                f"The repeatable set '{repeatable_set.id}' has iterations but is marked as {no_response}."
            )

        self.repeatable_set = repeatable_set
        self.no_response = no_response
        self.iterations = iterations

    @property
    def repeatable_set_id(self) -> str:
        return self.repeatable_set.id

    def prompt_responses(self) -> List[PromptResponse]:
        """All prompt responses across every iteration, in order"""
        return [
            response
            for iteration in self.iterations
            for response in iteration.values()
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "repeatable_set_id": self.repeatable_set.id,
            "skipped": self.no_response is NoResponse.SKIPPED,
            "not_displayed": self.no_response is NoResponse.NOT_DISPLAYED,
            "responses": [
                [response.to_dict() for response in iteration.values()]
                for iteration in self.iterations
            ],
        }


Response = Union[PromptResponse, RepeatableSetResponse]
