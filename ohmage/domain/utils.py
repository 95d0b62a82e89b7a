"""
Small parsing helpers shared by the domain model
"""
from typing import Any, Optional

from ohmage.domain.exceptions import DomainError


def is_blank(value: Optional[str]) -> bool:
    return value is None or value.strip() == ""


def parse_bool(value: Any, what: str) -> bool:
    """Decode a boolean from a bool or the strings 'true' / 'false'"""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text == "true":
        return True
    if text == "false":
        return False
    raise DomainError(f"{what} is not 'true' or 'false': {value}")
