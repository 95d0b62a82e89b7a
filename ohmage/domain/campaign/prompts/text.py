"""
Free-text prompt
"""
from typing import Any, Dict, Optional

from ohmage.domain.campaign.prompt import DisplayType, Prompt, PromptType
from ohmage.domain.exceptions import DomainError


class TextPrompt(Prompt):
    """A prompt whose response is text between ``min`` and ``max`` characters long"""

    prompt_type = PromptType.TEXT

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
        min: int,
        max: int,
        index: int = 0,
    ):
        super().__init__(
            id, condition, unit, text, abbreviated_text, explanation_text,
            skippable, skip_label, display_type, display_label, index,
        )

        if isinstance(min, bool) or not isinstance(min, int) or min < 0:
            raise DomainError(f"The minimum length of prompt '{id}' must be a non-negative integer.")
        if isinstance(max, bool) or not isinstance(max, int) or max < 0:
            raise DomainError(f"The maximum length of prompt '{id}' must be a non-negative integer.")
        if min > max:
            raise DomainError(f"The minimum length of prompt '{id}' is greater than its maximum.")

        self.min = min
        self.max = max

    def coerce_value(self, value: Any) -> str:
        if not isinstance(value, str):
            raise DomainError(f"The response to prompt '{self.id}' is not text: {value!r}")
        if len(value) < self.min:
            raise DomainError(
                f"The response to prompt '{self.id}' is shorter than {self.min} characters."
            )
        if len(value) > self.max:
            raise DomainError(
                f"The response to prompt '{self.id}' is longer than {self.max} characters."
            )
        return value

    def properties(self) -> Dict[str, Any]:
        return {"min": self.min, "max": self.max}
