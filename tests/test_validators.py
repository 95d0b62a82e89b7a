"""
Tests for request parameter validation
"""
from datetime import datetime, timezone

import pytest
from fastapi import HTTPException

from ohmage.utils.validators import (
    parse_date,
    validate_campaign_urn,
    validate_client,
    validate_date_range,
    validate_prompt_id,
)


def status_of(call, *args):
    with pytest.raises(HTTPException) as error:
        call(*args)
    return error.value.status_code, error.value.detail


def test_validate_client():
    assert validate_client(" android ") == "android"
    assert status_of(validate_client, None) == (400, "Missing client")
    assert status_of(validate_client, "   ")[0] == 400
    assert status_of(validate_client, "x" * 256)[0] == 400


def test_validate_campaign_urn():
    assert validate_campaign_urn("urn:campaign:x") == "urn:campaign:x"
    assert status_of(validate_campaign_urn, None)[0] == 400
    assert status_of(validate_campaign_urn, "campaign")[0] == 400
    assert status_of(validate_campaign_urn, "urn:" + "x" * 255)[0] == 400


def test_validate_prompt_id():
    assert validate_prompt_id(" hours ") == "hours"
    assert status_of(validate_prompt_id, "") == (400, "Missing required parameter: prompt_id")


def test_parse_date():
    assert parse_date("2012-03-14", "start_date").isoformat() == "2012-03-14"
    assert status_of(parse_date, "14/03/2012", "start_date") == (
        400, "Invalid start_date. Must be YYYY-MM-DD"
    )


def test_validate_date_range():
    start, end = validate_date_range("2012-03-14", "2012-03-15")

    assert start == datetime(2012, 3, 14, tzinfo=timezone.utc)
    assert end == datetime(2012, 3, 16, tzinfo=timezone.utc)


def test_single_day_range():
    start, end = validate_date_range("2012-03-14", "2012-03-14")

    assert (end - start).days == 1


def test_invalid_date_ranges():
    assert status_of(validate_date_range, "2012-03-15", "2012-03-14")[0] == 400
    assert status_of(validate_date_range, "2012-01-01", "2013-06-01")[0] == 400
    assert status_of(validate_date_range, None, "2012-03-14")[1] == "Missing required parameter: start_date"
