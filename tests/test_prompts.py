"""
Tests for value coercion and condition validation of each prompt type
"""
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID

import pytest

from conftest import prompt_args
from ohmage.domain.campaign.prompt import LabelValuePair, PromptType
from ohmage.domain.campaign.prompts.choice import (
    MultiChoiceCustomPrompt,
    MultiChoicePrompt,
    SingleChoiceCustomPrompt,
    SingleChoicePrompt,
    parse_list,
)
from ohmage.domain.campaign.prompts.number import HoursBeforeNowPrompt, NumberPrompt
from ohmage.domain.campaign.prompts.photo import PhotoPrompt
from ohmage.domain.campaign.prompts.remote_activity import RemoteActivityPrompt
from ohmage.domain.campaign.prompts.text import TextPrompt
from ohmage.domain.campaign.prompts.timestamp import TimestampPrompt
from ohmage.domain.campaign.response import NoResponse
from ohmage.domain.condition import ConditionValuePair, Operator
from ohmage.domain.exceptions import DomainError

CHOICES = {
    0: LabelValuePair("Bad", 0),
    1: LabelValuePair("OK", 1),
    2: LabelValuePair("Good", 2),
}


def pair(value, operator=Operator.EQUALS, prompt_id="q"):
    return ConditionValuePair(prompt_id, operator, value)


def number_prompt(**overrides):
    args = prompt_args(min=0, max=10)
    args.update(overrides)
    return NumberPrompt(**args)


# Shared behaviour

def test_missing_value_is_rejected():
    with pytest.raises(DomainError):
        number_prompt().validate_value(None)


def test_skipped_requires_skippable():
    with pytest.raises(DomainError):
        number_prompt().validate_value("SKIPPED")

    prompt = number_prompt(skippable=True, skip_label="Skip")
    assert prompt.validate_value("SKIPPED") is NoResponse.SKIPPED
    assert prompt.validate_value(NoResponse.SKIPPED) is NoResponse.SKIPPED


def test_not_displayed_is_always_a_valid_value():
    assert number_prompt().validate_value("NOT_DISPLAYED") is NoResponse.NOT_DISPLAYED


def test_skippable_prompt_needs_skip_label():
    with pytest.raises(DomainError):
        number_prompt(skippable=True, skip_label=" ")


def test_prompt_requires_text_and_display_label():
    with pytest.raises(DomainError):
        number_prompt(text="")
    with pytest.raises(DomainError):
        number_prompt(display_label=None)


def test_no_response_condition_literals():
    prompt = number_prompt()

    prompt.validate_condition_value_pair(pair("NOT_DISPLAYED"))
    prompt.validate_condition_value_pair(pair("NOT_DISPLAYED", Operator.NOT_EQUALS))
    with pytest.raises(DomainError):
        prompt.validate_condition_value_pair(pair("NOT_DISPLAYED", Operator.LESS_THAN))
    with pytest.raises(DomainError):
        prompt.validate_condition_value_pair(pair("SKIPPED"))

    number_prompt(skippable=True, skip_label="Skip").validate_condition_value_pair(pair("SKIPPED"))


def test_prompt_equality():
    assert number_prompt() == number_prompt()
    assert number_prompt() != number_prompt(max=11)
    assert number_prompt() != number_prompt(id="other")


# Number

def test_number_coercion():
    prompt = number_prompt()

    assert prompt.validate_value(3) == 3
    assert prompt.validate_value("4") == 4
    assert prompt.validate_value(5.0) == 5
    assert isinstance(prompt.validate_value("4"), int)


@pytest.mark.parametrize("value", [-1, 11, "2.5", 2.5, "abc", True, [], "NaN", float("inf")])
def test_number_rejects_invalid_values(value):
    with pytest.raises(DomainError):
        number_prompt().validate_value(value)


def test_decimal_number_prompt():
    prompt = number_prompt(min="0.5", max="9.5", whole_number=False)

    assert prompt.validate_value("2.25") == Decimal("2.25")
    with pytest.raises(DomainError):
        prompt.validate_value("9.75")


def test_number_configuration_errors():
    with pytest.raises(DomainError):
        number_prompt(min=5, max=1)
    with pytest.raises(DomainError):
        number_prompt(min="0.5")
    with pytest.raises(DomainError):
        number_prompt(max=None)
    with pytest.raises(DomainError):
        number_prompt(default=11)


def test_number_default():
    assert number_prompt(default="7").default == 7


def test_number_condition_literals():
    prompt = number_prompt()

    prompt.validate_condition_value_pair(pair("5", Operator.GREATER_THAN))
    with pytest.raises(DomainError):
        prompt.validate_condition_value_pair(pair("11"))
    with pytest.raises(DomainError):
        prompt.validate_condition_value_pair(pair("five"))
    with pytest.raises(DomainError):
        prompt.validate_condition_value_pair(pair("2.5"))


def test_hours_before_now_is_always_whole():
    args = prompt_args(min=0, max=48)
    prompt = HoursBeforeNowPrompt(**args)

    assert prompt.prompt_type is PromptType.HOURS_BEFORE_NOW
    assert prompt.validate_value("12") == 12
    with pytest.raises(DomainError):
        prompt.validate_value("1.5")


# Text

def test_text_length_bounds():
    prompt = TextPrompt(**prompt_args(min=2, max=5))

    assert prompt.validate_value("abc") == "abc"
    with pytest.raises(DomainError):
        prompt.validate_value("a")
    with pytest.raises(DomainError):
        prompt.validate_value("abcdef")
    with pytest.raises(DomainError):
        prompt.validate_value(123)


def test_text_conditions_allow_only_no_response():
    prompt = TextPrompt(**prompt_args(min=0, max=5))

    prompt.validate_condition_value_pair(pair("NOT_DISPLAYED"))
    with pytest.raises(DomainError):
        prompt.validate_condition_value_pair(pair("hello"))


def test_text_configuration_errors():
    with pytest.raises(DomainError):
        TextPrompt(**prompt_args(min=5, max=2))
    with pytest.raises(DomainError):
        TextPrompt(**prompt_args(min=-1, max=2))


# Timestamp

def test_timestamp_coercion():
    prompt = TimestampPrompt(**prompt_args())

    assert prompt.validate_value("2012-03-14T09:30:00") == datetime(2012, 3, 14, 9, 30)
    assert prompt.validate_value("2012-03-14T09:30:00Z") == datetime(2012, 3, 14, 9, 30, tzinfo=timezone.utc)
    with pytest.raises(DomainError):
        prompt.validate_value("yesterday")
    with pytest.raises(DomainError):
        prompt.validate_value(1331717400)


# Photo

def test_photo_coercion():
    prompt = PhotoPrompt(**prompt_args(resolution=800))
    image_id = "6f1ed002-ab5a-4dd1-9d3e-5a4a5f4e6c6d"

    assert prompt.validate_value(image_id) == UUID(image_id)
    with pytest.raises(DomainError):
        prompt.validate_value("not-a-uuid")


def test_photo_requires_positive_resolution():
    with pytest.raises(DomainError):
        PhotoPrompt(**prompt_args(resolution=0))


# Choices

def test_single_choice():
    prompt = SingleChoicePrompt(**prompt_args(choices=CHOICES))

    assert prompt.validate_value(1) == 1
    assert prompt.validate_value("2") == 2
    with pytest.raises(DomainError):
        prompt.validate_value(3)
    with pytest.raises(DomainError):
        prompt.validate_value("Good")


def test_single_choice_condition_literals():
    prompt = SingleChoicePrompt(**prompt_args(choices=CHOICES))

    prompt.validate_condition_value_pair(pair("2"))
    prompt.validate_condition_value_pair(pair("1", Operator.LESS_THAN_OR_EQUALS))
    with pytest.raises(DomainError):
        prompt.validate_condition_value_pair(pair("7"))


def test_choice_configuration_errors():
    with pytest.raises(DomainError):
        SingleChoicePrompt(**prompt_args(choices={}))
    with pytest.raises(DomainError):
        SingleChoicePrompt(**prompt_args(choices={0: LabelValuePair("A"), 1: LabelValuePair("A")}))
    with pytest.raises(DomainError):
        SingleChoicePrompt(**prompt_args(choices=CHOICES, default=9))


def test_single_choice_custom_resolves_labels():
    prompt = SingleChoiceCustomPrompt(**prompt_args(choices=CHOICES))

    assert prompt.validate_value(2) == "Good"
    assert prompt.validate_value("OK") == "OK"
    assert prompt.validate_value("Terrible") == "Terrible"
    with pytest.raises(DomainError):
        prompt.validate_value("")


def test_custom_choice_conditions_allow_only_no_response():
    prompt = SingleChoiceCustomPrompt(**prompt_args(choices=CHOICES))

    prompt.validate_condition_value_pair(pair("NOT_DISPLAYED"))
    with pytest.raises(DomainError):
        prompt.validate_condition_value_pair(pair("1"))


def test_multi_choice():
    prompt = MultiChoicePrompt(**prompt_args(choices=CHOICES))

    assert prompt.validate_value([2, 0]) == [0, 2]
    assert prompt.validate_value("[1, 2]") == [1, 2]
    assert prompt.validate_value("2,1") == [1, 2]
    for value in ([], "", [1, 1], [1, 5], "[1,"):
        with pytest.raises(DomainError):
            prompt.validate_value(value)


def test_multi_choice_custom():
    prompt = MultiChoiceCustomPrompt(**prompt_args(choices=CHOICES))

    assert prompt.validate_value(["Good", 0, "Nap"]) == ["Bad", "Good", "Nap"]
    with pytest.raises(DomainError):
        prompt.validate_value(["Good", 2])


def test_parse_list():
    assert parse_list(["a"], "x") == ["a"]
    assert parse_list(" a, b ", "x") == ["a", "b"]
    with pytest.raises(DomainError):
        parse_list("[1,", "x")
    with pytest.raises(DomainError):
        parse_list(5, "x")


# Remote activity

def remote_activity_prompt(**overrides):
    args = prompt_args(
        package="org.ohmage.game",
        activity="org.ohmage.game.Play",
        action="PLAY",
        autolaunch=True,
        retries=1,
        min_runs=1,
    )
    args.update(overrides)
    return RemoteActivityPrompt(**args)


def test_remote_activity_runs():
    prompt = remote_activity_prompt()

    assert prompt.validate_value({"score": 3}) == [{"score": 3}]
    assert prompt.validate_value('[{"score": 3}, {"score": 4}]') == [{"score": 3}, {"score": 4}]
    with pytest.raises(DomainError):
        prompt.validate_value([])
    with pytest.raises(DomainError):
        prompt.validate_value([{}, {}, {}])
    with pytest.raises(DomainError):
        prompt.validate_value([1])
    with pytest.raises(DomainError):
        prompt.validate_value("{not json")


def test_remote_activity_configuration_errors():
    with pytest.raises(DomainError):
        remote_activity_prompt(package="")
    with pytest.raises(DomainError):
        remote_activity_prompt(retries=0, min_runs=2)


def test_to_dict_includes_properties():
    result = number_prompt().to_dict()

    assert result["prompt_type"] == "number"
    assert result["properties"] == {"min": 0, "max": 10, "default": None, "whole_number": True}
    assert "properties" not in TimestampPrompt(**prompt_args()).to_dict()


# Round trips

ROUND_TRIPS = [
    ("number", lambda: number_prompt(), "7", 7),
    ("decimal", lambda: number_prompt(min="0.5", max="9.5", whole_number=False), "2.25", Decimal("2.25")),
    ("hours_before_now", lambda: HoursBeforeNowPrompt(**prompt_args(min=0, max=48)), 12, 12),
    ("text", lambda: TextPrompt(**prompt_args(min=1, max=20)), "Slept well", "Slept well"),
    (
        "timestamp",
        lambda: TimestampPrompt(**prompt_args()),
        "2012-03-14T09:30:00Z",
        datetime(2012, 3, 14, 9, 30, tzinfo=timezone.utc),
    ),
    ("single_choice", lambda: SingleChoicePrompt(**prompt_args(choices=CHOICES)), "2", 2),
    ("multi_choice", lambda: MultiChoicePrompt(**prompt_args(choices=CHOICES)), "2,0", [0, 2]),
    ("single_choice_custom", lambda: SingleChoiceCustomPrompt(**prompt_args(choices=CHOICES)), 1, "OK"),
    ("single_choice_custom_label", lambda: SingleChoiceCustomPrompt(**prompt_args(choices=CHOICES)), "Nap", "Nap"),
    (
        "multi_choice_custom",
        lambda: MultiChoiceCustomPrompt(**prompt_args(choices=CHOICES)),
        ["Nap", 2],
        ["Good", "Nap"],
    ),
    (
        "photo",
        lambda: PhotoPrompt(**prompt_args(resolution=800)),
        "6f1ed002-ab5a-4dd1-9d3e-5a4a5f4e6c6d",
        UUID("6f1ed002-ab5a-4dd1-9d3e-5a4a5f4e6c6d"),
    ),
    ("remote_activity", lambda: remote_activity_prompt(), '{"score": 3}', [{"score": 3}]),
    ("not_displayed", lambda: TextPrompt(**prompt_args(min=1, max=20)), "NOT_DISPLAYED", NoResponse.NOT_DISPLAYED),
]


@pytest.mark.parametrize(
    "make_prompt, raw, value",
    [case[1:] for case in ROUND_TRIPS],
    ids=[case[0] for case in ROUND_TRIPS],
)
def test_create_response_round_trip(make_prompt, raw, value):
    prompt = make_prompt()
    response = prompt.create_response(None, raw)

    assert response.value == value
    assert prompt.validate_value(response.value) == value


INVALID_VALUES = [
    ("number", lambda: number_prompt(), "eleven"),
    ("text", lambda: TextPrompt(**prompt_args(min=2, max=5)), "a"),
    ("timestamp", lambda: TimestampPrompt(**prompt_args()), "yesterday"),
    ("multi_choice", lambda: MultiChoicePrompt(**prompt_args(choices=CHOICES)), [1, 1]),
    ("photo", lambda: PhotoPrompt(**prompt_args(resolution=800)), "not-a-uuid"),
    ("remote_activity", lambda: remote_activity_prompt(), "[]"),
]


@pytest.mark.parametrize(
    "make_prompt, raw",
    [case[1:] for case in INVALID_VALUES],
    ids=[case[0] for case in INVALID_VALUES],
)
def test_coercion_errors_are_deterministic(make_prompt, raw):
    prompt = make_prompt()
    messages = []
    for _ in range(2):
        with pytest.raises(DomainError) as error:
            prompt.validate_value(raw)
        messages.append(error.value.message)

    assert messages[0] == messages[1]


def test_padded_sentinel_is_text():
    prompt = TextPrompt(**prompt_args(min=1, max=20))

    assert prompt.validate_value(" SKIPPED ") == " SKIPPED "
    assert NoResponse.from_value(" SKIPPED ") is None
    assert NoResponse.from_value("SKIPPED") is NoResponse.SKIPPED
