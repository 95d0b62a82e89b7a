"""
Tests for uploaded survey responses
"""
from datetime import datetime, timezone
from uuid import UUID

import pytest

from ohmage.domain.exceptions import DomainError
from ohmage.domain.survey_response import (
    Location,
    LocationStatus,
    SurveyResponse,
    parse_epoch_millis,
    parse_location,
)

SURVEY_KEY = "0b4f6f5e-3f5c-4a3f-9b4e-2a6f8d9c1e21"


def upload(**overrides):
    data = {
        "survey_key": SURVEY_KEY,
        "survey_id": "sleep",
        "time": 1331717400000,
        "timezone": "America/Los_Angeles",
        "location_status": "valid",
        "location": {
            "latitude": 34.07,
            "longitude": -118.44,
            "accuracy": 12.5,
            "provider": "gps",
            "time": 1331717390000,
        },
        "survey_launch_context": {"launch_time": 1331717300000, "active_triggers": []},
        "responses": [
            {"prompt_id": "hours", "value": 9},
            {"prompt_id": "quality", "value": 1},
            {"prompt_id": "notes", "value": "Late dinner"},
            {"repeatable_set_id": "naps", "not_displayed": True},
        ],
    }
    data.update(overrides)
    return data


def test_from_dict(campaign):
    response = SurveyResponse.from_dict(campaign, upload())

    assert response.survey_key == UUID(SURVEY_KEY)
    assert response.survey_id == "sleep"
    assert response.timezone == "America/Los_Angeles"
    assert response.location_status is LocationStatus.VALID
    assert response.location.provider == "gps"
    assert response.date == datetime(2012, 3, 14, 9, 30, tzinfo=timezone.utc)
    assert response.launch_context["launch_time"] == 1331717300000
    assert [r.prompt_id for r in response.prompt_responses()] == ["hours", "quality", "notes"]


def test_to_dict(campaign):
    result = SurveyResponse.from_dict(campaign, upload()).to_dict()

    assert result["survey_key"] == SURVEY_KEY
    assert result["location_status"] == "valid"
    assert result["location"]["latitude"] == 34.07
    assert result["responses"][3] == {
        "repeatable_set_id": "naps",
        "skipped": False,
        "not_displayed": True,
        "responses": [],
    }


def test_repeatable_set_responses_are_flattened(campaign):
    data = upload(responses=[
        {"prompt_id": "hours", "value": 6},
        {"prompt_id": "quality", "value": 2},
        {"prompt_id": "notes", "value": "NOT_DISPLAYED"},
        {"repeatable_set_id": "naps", "responses": [[
            {"prompt_id": "nap_length", "value": 20},
            {"prompt_id": "nap_place", "value": "NOT_DISPLAYED"},
        ]]},
    ])

    response = SurveyResponse.from_dict(campaign, data)

    assert [r.prompt_id for r in response.prompt_responses()] == [
        "hours", "quality", "notes", "nap_length", "nap_place",
    ]


def test_unavailable_location(campaign):
    response = SurveyResponse.from_dict(
        campaign, upload(location_status="unavailable", location=None)
    )

    assert response.location is None
    assert response.to_dict()["location"] is None


@pytest.mark.parametrize("overrides", [
    {"survey_key": "abc"},
    {"survey_key": None},
    {"survey_id": "missing"},
    {"survey_id": None},
    {"timezone": " "},
    {"time": "yesterday"},
    {"time": -5},
    {"time": True},
    {"time": 1331717400000.5},
    {"time": 10 ** 17},
    {"time": float("inf")},
    {"location_status": "lost"},
    {"location": None},
    {"location_status": "unavailable"},
    {"location": {"latitude": 95, "longitude": 0}},
    {"location": {"latitude": 10}},
    {"location": {"latitude": 10, "longitude": 20, "accuracy": "nan"}},
    {"location": {"latitude": "inf", "longitude": 20}},
    {"survey_launch_context": "launched"},
    {"responses": None},
])
def test_invalid_uploads(campaign, overrides):
    with pytest.raises(DomainError):
        SurveyResponse.from_dict(campaign, upload(**overrides))


def test_upload_must_be_an_object(campaign):
    with pytest.raises(DomainError):
        SurveyResponse.from_dict(campaign, ["sleep"])


def test_parse_epoch_millis():
    assert parse_epoch_millis("1331717400000", "time") == 1331717400000
    assert parse_epoch_millis(1331717400000.0, "time") == 1331717400000
    with pytest.raises(DomainError, match="out of range"):
        parse_epoch_millis(10 ** 17, "time")
    with pytest.raises(DomainError, match="whole number"):
        parse_epoch_millis(1.5, "time")
    with pytest.raises(DomainError):
        parse_epoch_millis(None, "time")


def test_parse_location():
    location = parse_location(LocationStatus.STALE, {"latitude": "1.5", "longitude": 2})

    assert isinstance(location, Location)
    assert location.latitude == 1.5
    assert location.accuracy is None
    with pytest.raises(DomainError):
        Location(0, 0, -1, None, None)


def test_response_value_strings(campaign):
    response = SurveyResponse.from_dict(campaign, upload(responses=[
        {"prompt_id": "hours", "value": 6},
        {"prompt_id": "quality", "value": 2},
        {"prompt_id": "notes", "value": "NOT_DISPLAYED"},
        {"repeatable_set_id": "naps", "responses": [[
            {"prompt_id": "nap_length", "value": 40},
            {"prompt_id": "nap_place", "value": [2, 0]},
        ]]},
    ]))

    assert [r.response_value_string() for r in response.prompt_responses()] == [
        "6", "2", "NOT_DISPLAYED", "40", "[0,2]",
    ]
