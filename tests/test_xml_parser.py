"""
Tests for campaign XML parsing
"""
from xml.sax.saxutils import escape

import pytest

from ohmage.domain.campaign.campaign import PrivacyState, RunningState, validate_urn
from ohmage.domain.campaign.prompt import DisplayType, PromptType
from ohmage.domain.campaign.prompts.number import NumberPrompt
from ohmage.domain.campaign.repeatable_set import RepeatableSet
from ohmage.domain.campaign.survey_item import Message
from ohmage.domain.campaign.xml_parser import parse_campaign
from ohmage.domain.exceptions import DomainError


def single_prompt_campaign(condition="", extra_items="", prompt_type="number", properties=None):
    if properties is None:
        properties = (
            "<property><key>min</key><label>0</label></property>"
            "<property><key>max</key><label>10</label></property>"
        )
    return f"""
    <campaign>
      <campaignUrn>urn:campaign:test</campaignUrn>
      <campaignName>Test</campaignName>
      <surveys>
        <survey>
          <id>s</id>
          <title>S</title>
          <submitText>Done</submitText>
          <showSummary>false</showSummary>
          <anytime>true</anytime>
          <contentList>
            <prompt>
              <id>a</id>
              <displayType>measurement</displayType>
              <displayLabel>A</displayLabel>
              <promptText>A?</promptText>
              <promptType>{prompt_type}</promptType>
              <properties>{properties}</properties>
              <skippable>false</skippable>
            </prompt>
            <prompt>
              <id>b</id>
              <displayType>measurement</displayType>
              <displayLabel>B</displayLabel>
              <promptText>B?</promptText>
              <promptType>number</promptType>
              <condition>{escape(condition)}</condition>
              <properties>
                <property><key>min</key><label>0</label></property>
                <property><key>max</key><label>10</label></property>
              </properties>
              <skippable>false</skippable>
            </prompt>
            {extra_items}
          </contentList>
        </survey>
      </surveys>
    </campaign>
    """


def test_parse_fixture_campaign(campaign, campaign_xml):
    assert campaign.urn == "urn:campaign:ca:ucla:sleep"
    assert campaign.name == "Sleep study"
    assert campaign.description == "Nightly sleep diary"
    assert campaign.server_url == "https://ohmage.example.org"
    assert campaign.running_state is RunningState.RUNNING
    assert campaign.privacy_state is PrivacyState.PRIVATE
    assert campaign.xml == campaign_xml
    assert list(campaign.surveys) == ["sleep", "mood"]


def test_parse_survey_structure(sleep_survey):
    assert sleep_survey.title == "Sleep"
    assert sleep_survey.show_summary
    assert not sleep_survey.edit_summary
    assert sleep_survey.anytime
    assert [item.id for item in sleep_survey.survey_items] == [
        "hours", "quality", "well_done", "notes", "naps",
    ]
    assert isinstance(sleep_survey.get_item("well_done"), Message)
    assert sleep_survey.num_prompts() == 5
    assert sleep_survey.num_survey_items() == 7


def test_parse_prompt_details(sleep_survey):
    hours = sleep_survey.get_prompt("hours")

    assert isinstance(hours, NumberPrompt)
    assert hours.unit == "hours"
    assert hours.abbreviated_text == "Hours"
    assert hours.display_type is DisplayType.MEASUREMENT
    assert hours.skippable
    assert hours.default == 7
    assert (hours.min, hours.max) == (0, 24)

    quality = sleep_survey.get_prompt("quality")
    assert quality.prompt_type is PromptType.SINGLE_CHOICE
    assert quality.condition == "hours > 0"
    assert quality.choices[2].label == "Good"
    assert quality.choices[2].value == 2


def test_parse_repeatable_set(sleep_survey):
    naps = sleep_survey.get_item("naps")

    assert isinstance(naps, RepeatableSet)
    assert naps.termination_skip_enabled
    assert naps.termination_skip_label == "No naps"
    assert [prompt.id for prompt in naps.prompts()] == ["nap_length", "nap_place"]
    assert sleep_survey.get_prompt("nap_place").condition == "nap_length >= 30"


def test_parse_other_prompt_types(campaign):
    mood = campaign.get_survey("mood")

    types = [prompt.prompt_type for prompt in mood.prompts()]
    assert types == [
        PromptType.SINGLE_CHOICE_CUSTOM,
        PromptType.TIMESTAMP,
        PromptType.HOURS_BEFORE_NOW,
        PromptType.PHOTO,
        PromptType.REMOTE_ACTIVITY,
    ]
    reaction = mood.get_prompt("reaction")
    assert reaction.autolaunch
    assert reaction.max_runs == 3
    assert mood.get_prompt("selfie").resolution == 800


def test_states_and_description_override(campaign_xml):
    campaign = parse_campaign(campaign_xml, "stopped", "shared", description="Override")

    assert campaign.running_state is RunningState.STOPPED
    assert not campaign.is_running()
    assert campaign.privacy_state is PrivacyState.SHARED
    assert campaign.description == "Override"


def test_unknown_state_is_rejected(campaign_xml):
    with pytest.raises(DomainError):
        parse_campaign(campaign_xml, running_state="paused")


def test_find_prompts(campaign):
    assert [prompt.id for prompt in campaign.find_prompts("hours")] == ["hours"]
    assert campaign.find_prompts("missing") == []
    assert campaign.get_prompt("mood", "feeling").id == "feeling"


def test_to_dict(campaign):
    result = campaign.to_dict()

    assert result["urn"] == "urn:campaign:ca:ucla:sleep"
    assert result["survey_ids"] == ["sleep", "mood"]
    assert result["surveys"][0]["contents"][4]["survey_item_type"] == "repeatable_set"
    assert "surveys" not in campaign.to_dict(include_surveys=False)


def test_valid_condition():
    campaign = parse_campaign(single_prompt_campaign("a > 3"))

    assert campaign.get_prompt("s", "b").condition == "a > 3"


@pytest.mark.parametrize("condition", [
    "b == 1",
    "c == 1",
    "a == 11",
    "a == SKIPPED",
    "a < NOT_DISPLAYED",
    "a ==",
])
def test_invalid_conditions(condition):
    with pytest.raises(DomainError):
        parse_campaign(single_prompt_campaign(condition))


def test_condition_may_not_reference_later_prompt():
    later = """
        <prompt>
          <id>c</id>
          <displayType>measurement</displayType>
          <displayLabel>C</displayLabel>
          <promptText>C?</promptText>
          <promptType>timestamp</promptType>
          <skippable>false</skippable>
        </prompt>
    """
    with pytest.raises(DomainError, match="not a prompt that comes before it"):
        parse_campaign(single_prompt_campaign("c == NOT_DISPLAYED", extra_items=later))


def test_message_condition_may_not_reference_itself():
    message = """
        <message>
          <id>m</id>
          <condition>b == 5</condition>
          <messageText>Hello</messageText>
        </message>
    """
    parse_campaign(single_prompt_campaign(extra_items=message))

    with pytest.raises(DomainError):
        parse_campaign(single_prompt_campaign(extra_items=message.replace("b == 5", "m == 5")))


def test_duplicate_ids_are_rejected():
    duplicate = """
        <message>
          <id>a</id>
          <messageText>Hello</messageText>
        </message>
    """
    with pytest.raises(DomainError):
        parse_campaign(single_prompt_campaign(extra_items=duplicate))


def test_unknown_prompt_type_is_rejected():
    with pytest.raises(DomainError):
        parse_campaign(single_prompt_campaign(prompt_type="slider"))


def test_missing_property_is_rejected():
    with pytest.raises(DomainError):
        parse_campaign(single_prompt_campaign(
            properties="<property><key>min</key><label>0</label></property>"
        ))


@pytest.mark.parametrize("xml", [
    "",
    "<campaign>",
    "<survey/>",
    "<campaign><campaignName>x</campaignName></campaign>",
    "<campaign><campaignUrn>urn:x</campaignUrn><campaignName>x</campaignName></campaign>",
    "<campaign><campaignUrn>urn:x</campaignUrn><campaignName>x</campaignName><surveys/></campaign>",
])
def test_malformed_campaigns(xml):
    with pytest.raises(DomainError):
        parse_campaign(xml)


def test_entity_expansion_is_refused():
    xml = """<?xml version="1.0"?>
    <!DOCTYPE campaign [<!ENTITY boom "boom">]>
    <campaign><campaignUrn>&boom;</campaignUrn></campaign>
    """
    with pytest.raises(DomainError):
        parse_campaign(xml)


@pytest.mark.parametrize("urn", [None, "", "campaign:x", "urn:", "urn:" + "x" * 252])
def test_invalid_urns(urn):
    with pytest.raises(DomainError):
        validate_urn(urn)


def test_valid_urn_is_stripped():
    assert validate_urn(" urn:campaign:x ") == "urn:campaign:x"
