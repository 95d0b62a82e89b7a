"""
Request parameter validation utilities
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple
from fastapi import HTTPException

from ohmage.domain.campaign.campaign import validate_urn
from ohmage.domain.exceptions import DomainError

MAX_CLIENT_LENGTH = 255
MAX_PROMPT_ID_LENGTH = 255
MAX_DATE_RANGE_DAYS = 366


def validate_client(client: Optional[str]) -> str:
    """
    Validate the client identifier every request must carry

    Args:
        client: Free-form client name, e.g. "android" or "dashboard"

    Returns:
        Stripped client name

    Raises:
        HTTPException: If the client is missing or too long
    """
    if client is None or not client.strip():
        raise HTTPException(status_code=400, detail="Missing client")

    client = client.strip()
    if len(client) > MAX_CLIENT_LENGTH:
        raise HTTPException(status_code=400, detail="client is too long")

    return client


def validate_campaign_urn(campaign_urn: Optional[str]) -> str:
    """
    Validate a campaign URN parameter

    Raises:
        HTTPException: If the URN is missing, longer than 255 characters, or
            not a URN
    """
    try:
        return validate_urn(campaign_urn)
    except DomainError as e:
        raise HTTPException(status_code=400, detail=e.message)


def validate_prompt_id(prompt_id: Optional[str]) -> str:
    """
    Validate a prompt id parameter

    Raises:
        HTTPException: If the prompt id is missing or too long
    """
    if prompt_id is None or not prompt_id.strip():
        raise HTTPException(status_code=400, detail="Missing required parameter: prompt_id")

    prompt_id = prompt_id.strip()
    if len(prompt_id) > MAX_PROMPT_ID_LENGTH:
        raise HTTPException(status_code=400, detail="prompt_id is too long")

    return prompt_id


def parse_date(value: Optional[str], name: str) -> date:
    """
    Parse a YYYY-MM-DD parameter

    Raises:
        HTTPException: If the value is missing or not a date
    """
    if value is None or not value.strip():
        raise HTTPException(status_code=400, detail=f"Missing required parameter: {name}")
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {name}. Must be YYYY-MM-DD")


def validate_date_range(start_date: Optional[str], end_date: Optional[str]) -> Tuple[datetime, datetime]:
    """
    Validate a start/end date pair

    Args:
        start_date: First day, inclusive
        end_date: Last day, inclusive

    Returns:
        UTC datetimes covering the start of the first day up to the start of
        the day after the last

    Raises:
        HTTPException: If either date is invalid, the range is reversed, or it
            spans more than a year
    """
    start = parse_date(start_date, "start_date")
    end = parse_date(end_date, "end_date")

    if start > end:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")
    if (end - start).days > MAX_DATE_RANGE_DAYS:
        raise HTTPException(
            status_code=400,
            detail=f"The date range cannot exceed {MAX_DATE_RANGE_DAYS} days"
        )

    return (
        datetime.combine(start, time.min, tzinfo=timezone.utc),
        datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc),
    )
