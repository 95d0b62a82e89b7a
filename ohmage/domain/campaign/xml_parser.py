"""
Campaign XML parsing

A campaign configuration looks like::

    <campaign>
      <campaignUrn>urn:campaign:ca:ucla:sleep</campaignUrn>
      <campaignName>Sleep</campaignName>
      <surveys>
        <survey>
          <id>sleep</id>
          <title>Sleep</title>
          <submitText>Thanks!</submitText>
          <showSummary>false</showSummary>
          <anytime>true</anytime>
          <contentList>
            <prompt>...</prompt>
            <message>...</message>
            <repeatableSet>...</repeatableSet>
          </contentList>
        </survey>
      </surveys>
    </campaign>
"""
import logging
from typing import Any, List, Optional, Union
from xml.etree.ElementTree import Element, ParseError

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import fromstring

from ohmage.domain.campaign.campaign import (
    Campaign,
    PrivacyState,
    RunningState,
)
from ohmage.domain.campaign.prompt import LabelValuePair, Prompt
from ohmage.domain.campaign.prompt_factory import create_prompt
from ohmage.domain.campaign.repeatable_set import RepeatableSet
from ohmage.domain.campaign.survey import Survey
from ohmage.domain.campaign.survey_item import Message, SurveyItem
from ohmage.domain.exceptions import DomainError
from ohmage.domain.utils import parse_bool

logger = logging.getLogger(__name__)

TAG_PROMPT = "prompt"
TAG_MESSAGE = "message"
TAG_REPEATABLE_SET = "repeatableSet"


def _text(element: Element, tag: str, required: bool = False, where: str = "") -> Optional[str]:
    child = element.find(tag)
    value = None
    if child is not None and child.text is not None and child.text.strip() != "":
        value = child.text.strip()
    if value is None and required:
        raise DomainError(f"Missing <{tag}>{' in ' + where if where else ''}.")
    return value


def _bool(element: Element, tag: str, where: str, default: Optional[bool] = None) -> bool:
    value = _text(element, tag, required=default is None, where=where)
    if value is None:
        return default
    return parse_bool(value, f"<{tag}> in {where}")


def _properties(element: Element, prompt_id: str) -> dict:
    properties = {}
    container = element.find("properties")
    if container is None:
        return properties

    for prop in container.findall("property"):
        key = _text(prop, "key", required=True, where=f"a property of prompt '{prompt_id}'")
        label = _text(prop, "label", required=True, where=f"property '{key}' of prompt '{prompt_id}'")
        raw_value = _text(prop, "value")
        value = None
        if raw_value is not None:
            try:
                value = float(raw_value)
            except ValueError:
                raise DomainError(
                    f"The value of property '{key}' of prompt '{prompt_id}' is not a number: {raw_value}"
                )
            if value.is_integer():
                value = int(value)
        if key in properties:
            raise DomainError(f"The prompt '{prompt_id}' has the property '{key}' twice.")
        properties[key] = LabelValuePair(label, value)
    return properties


def parse_prompt(element: Element, index: int) -> Prompt:
    prompt_id = _text(element, "id", required=True, where=f"prompt {index}")
    where = f"prompt '{prompt_id}'"
    return create_prompt(
        prompt_type=_text(element, "promptType", required=True, where=where),
        id=prompt_id,
        condition=_text(element, "condition"),
        unit=_text(element, "unit"),
        text=_text(element, "promptText", required=True, where=where),
        abbreviated_text=_text(element, "abbreviatedText"),
        explanation_text=_text(element, "explanationText"),
        skippable=_bool(element, "skippable", where),
        skip_label=_text(element, "skipLabel"),
        display_type=_text(element, "displayType", required=True, where=where),
        display_label=_text(element, "displayLabel", required=True, where=where),
        index=index,
        properties=_properties(element, prompt_id),
        default=_text(element, "default"),
    )


def parse_message(element: Element, index: int) -> Message:
    message_id = _text(element, "id", required=True, where=f"message {index}")
    return Message(
        id=message_id,
        condition=_text(element, "condition"),
        index=index,
        text=_text(element, "messageText", required=True, where=f"message '{message_id}'"),
    )


def parse_repeatable_set(element: Element, index: int) -> RepeatableSet:
    set_id = _text(element, "id", required=True, where=f"repeatable set {index}")
    where = f"repeatable set '{set_id}'"

    prompts_element = element.find("prompts")
    if prompts_element is None:
        raise DomainError(f"Missing <prompts> in {where}.")
    items = _parse_items(prompts_element, allow_repeatable_sets=False, where=where)

    return RepeatableSet(
        id=set_id,
        condition=_text(element, "condition"),
        index=index,
        termination_question=_text(element, "terminationQuestion", required=True, where=where),
        termination_true_label=_text(element, "terminationTrueLabel", required=True, where=where),
        termination_false_label=_text(element, "terminationFalseLabel", required=True, where=where),
        termination_skip_enabled=_bool(element, "terminationSkipEnabled", where, default=False),
        termination_skip_label=_text(element, "terminationSkipLabel"),
        survey_items=items,
    )


def _parse_items(container: Element, allow_repeatable_sets: bool, where: str) -> List[SurveyItem]:
    items = []
    for index, child in enumerate(container):
        if child.tag == TAG_PROMPT:
            items.append(parse_prompt(child, index))
        elif child.tag == TAG_MESSAGE:
            items.append(parse_message(child, index))
        elif child.tag == TAG_REPEATABLE_SET and allow_repeatable_sets:
            items.append(parse_repeatable_set(child, index))
        else:
            raise DomainError(f"Unexpected <{child.tag}> in {where}.")
    return items


def parse_survey(element: Element) -> Survey:
    survey_id = _text(element, "id", required=True, where="a survey")
    where = f"survey '{survey_id}'"

    content = element.find("contentList")
    if content is None:
        raise DomainError(f"Missing <contentList> in {where}.")

    show_summary = _bool(element, "showSummary", where)
    survey = Survey(
        id=survey_id,
        title=_text(element, "title", required=True, where=where),
        description=_text(element, "description"),
        intro_text=_text(element, "introText"),
        submit_text=_text(element, "submitText", required=True, where=where),
        show_summary=show_summary,
        edit_summary=_bool(element, "editSummary", where, default=False),
        summary_text=_text(element, "summaryText"),
        anytime=_bool(element, "anytime", where),
        survey_items=_parse_items(content, allow_repeatable_sets=True, where=where),
    )
    survey.validate_conditions()
    return survey


def parse_campaign(
    xml: Union[str, bytes],
    running_state: Any = RunningState.RUNNING,
    privacy_state: Any = PrivacyState.PRIVATE,
    description: Optional[str] = None,
) -> Campaign:
    """
    Parse and validate a campaign configuration

    Args:
        xml: The campaign XML document
        running_state: Whether the campaign accepts uploads
        privacy_state: Whether uploaded responses are shared
        description: Overrides the <description> in the XML, if given

    Returns:
        The validated campaign

    Raises:
        DomainError: If the XML is malformed or the configuration is invalid
    """
    if xml is None or (isinstance(xml, (str, bytes)) and not xml.strip()):
        raise DomainError("The campaign XML is missing.")

    try:
        root = fromstring(xml)
    except (ParseError, DefusedXmlException) as e:
        raise DomainError(f"The campaign XML could not be parsed: {e}")

    if root.tag != "campaign":
        raise DomainError(f"The root element must be <campaign>, not <{root.tag}>.")

    urn = _text(root, "campaignUrn", required=True, where="the campaign")
    surveys_element = root.find("surveys")
    if surveys_element is None:
        raise DomainError(f"Missing <surveys> in campaign '{urn}'.")

    surveys = [parse_survey(element) for element in surveys_element.findall("survey")]

    campaign = Campaign(
        urn=urn,
        name=_text(root, "campaignName", required=True, where=f"campaign '{urn}'"),
        description=description if description is not None else _text(root, "description"),
        server_url=_text(root, "serverUrl"),
        running_state=running_state,
        privacy_state=privacy_state,
        surveys=surveys,
        xml=xml.decode("utf-8") if isinstance(xml, bytes) else xml,
    )
    logger.info(
        "Parsed campaign %s with %d surveys", campaign.urn, len(campaign.surveys)
    )
    return campaign
