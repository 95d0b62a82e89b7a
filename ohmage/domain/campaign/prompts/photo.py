"""
Photo prompt
"""
from typing import Any, Dict, Optional
from uuid import UUID

from ohmage.domain.campaign.prompt import DisplayType, Prompt, PromptType
from ohmage.domain.exceptions import DomainError


class PhotoPrompt(Prompt):
    """
    A prompt whose response is the UUID of an image uploaded alongside the
    survey; ``resolution`` is the maximum edge length the client should use
    """

    prompt_type = PromptType.PHOTO

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
        resolution: int,
        index: int = 0,
    ):
        super().__init__(
            id, condition, unit, text, abbreviated_text, explanation_text,
            skippable, skip_label, display_type, display_label, index,
        )
        if isinstance(resolution, bool) or not isinstance(resolution, int) or resolution <= 0:
            raise DomainError(f"The resolution of prompt '{id}' must be a positive integer.")
        self.resolution = resolution

    def coerce_value(self, value: Any) -> UUID:
        if isinstance(value, UUID):
            return value
        if isinstance(value, str):
            try:
                return UUID(value.strip())
            except ValueError:
                pass
        raise DomainError(f"The response to prompt '{self.id}' is not an image ID: {value!r}")

    def properties(self) -> Dict[str, Any]:
        return {"res": self.resolution}
