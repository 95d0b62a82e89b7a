"""
Timestamp prompt
"""
from datetime import datetime
from typing import Any

from ohmage.domain.campaign.prompt import Prompt, PromptType
from ohmage.domain.exceptions import DomainError


def parse_timestamp(value: str) -> datetime:
    """
    Decode an ISO-8601 timestamp such as ``2012-03-14T09:30:00``

    A trailing ``Z`` is read as UTC.
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


class TimestampPrompt(Prompt):
    """A prompt whose response is a point in time"""

    prompt_type = PromptType.TIMESTAMP

    def coerce_value(self, value: Any) -> datetime:
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                return parse_timestamp(value)
            except ValueError:
                raise DomainError(
                    f"The response to prompt '{self.id}' is not an ISO-8601 timestamp: {value}"
                )
        raise DomainError(f"The response to prompt '{self.id}' is not a timestamp: {value!r}")
