"""
Build prompts from their configured type and properties
"""
from typing import Any, Callable, Dict, Optional, Union

from ohmage.domain.campaign.prompt import DisplayType, LabelValuePair, Prompt, PromptType
from ohmage.domain.campaign.prompts.choice import (
    MultiChoiceCustomPrompt,
    MultiChoicePrompt,
    SingleChoiceCustomPrompt,
    SingleChoicePrompt,
    parse_key,
)
from ohmage.domain.campaign.prompts.number import HoursBeforeNowPrompt, NumberPrompt
from ohmage.domain.campaign.prompts.photo import PhotoPrompt
from ohmage.domain.campaign.prompts.remote_activity import RemoteActivityPrompt
from ohmage.domain.campaign.prompts.text import TextPrompt
from ohmage.domain.campaign.prompts.timestamp import TimestampPrompt
from ohmage.domain.exceptions import DomainError
from ohmage.domain.utils import parse_bool

Properties = Dict[str, LabelValuePair]


def parse_prompt_type(value: Union[str, PromptType]) -> PromptType:
    if isinstance(value, PromptType):
        return value
    try:
        return PromptType((value or "").strip().lower())
    except ValueError:
        raise DomainError(f"Unknown prompt type: {value}")


def parse_display_type(value: Union[str, DisplayType, None]) -> DisplayType:
    if isinstance(value, DisplayType):
        return value
    try:
        return DisplayType((value or "").strip().lower())
    except ValueError:
        raise DomainError(f"Unknown display type: {value}")


def _label(properties: Properties, key: str, prompt_id: str, required: bool = True) -> Optional[str]:
    pair = properties.get(key)
    if pair is None:
        if required:
            raise DomainError(f"The prompt '{prompt_id}' is missing the property '{key}'.")
        return None
    return pair.label


def _int(properties: Properties, key: str, prompt_id: str) -> int:
    label = _label(properties, key, prompt_id)
    try:
        return int(label.strip())
    except ValueError:
        raise DomainError(f"The property '{key}' of prompt '{prompt_id}' is not an integer: {label}")


def _choices(properties: Properties, prompt_id: str) -> Dict[int, LabelValuePair]:
    choices = {}
    for key, pair in properties.items():
        choices[parse_key(key, f"The property key '{key}' of prompt '{prompt_id}'")] = pair
    return choices


def _no_default(prompt_type: PromptType, default: Any, prompt_id: str) -> None:
    if default is not None:
        raise DomainError(f"The prompt '{prompt_id}' of type {prompt_type} cannot have a default.")


def _build_timestamp(common: Dict[str, Any], properties: Properties, default: Any) -> Prompt:
    _no_default(PromptType.TIMESTAMP, default, common["id"])
    return TimestampPrompt(**common)


def _build_number(common: Dict[str, Any], properties: Properties, default: Any) -> Prompt:
    prompt_id = common["id"]
    whole_number = True
    if "wholeNumber" in properties:
        whole_number = parse_bool(properties["wholeNumber"].label, "wholeNumber")
    return NumberPrompt(
        min=_label(properties, "min", prompt_id),
        max=_label(properties, "max", prompt_id),
        default=default,
        whole_number=whole_number,
        **common,
    )


def _build_hours_before_now(common: Dict[str, Any], properties: Properties, default: Any) -> Prompt:
    prompt_id = common["id"]
    return HoursBeforeNowPrompt(
        min=_label(properties, "min", prompt_id),
        max=_label(properties, "max", prompt_id),
        default=default,
        **common,
    )


def _build_text(common: Dict[str, Any], properties: Properties, default: Any) -> Prompt:
    prompt_id = common["id"]
    _no_default(PromptType.TEXT, default, prompt_id)
    return TextPrompt(
        min=_int(properties, "min", prompt_id),
        max=_int(properties, "max", prompt_id),
        **common,
    )


def _choice_builder(prompt_class) -> Callable[[Dict[str, Any], Properties, Any], Prompt]:
    def build(common: Dict[str, Any], properties: Properties, default: Any) -> Prompt:
        return prompt_class(
            choices=_choices(properties, common["id"]),
            default=default,
            **common,
        )
    return build


def _build_photo(common: Dict[str, Any], properties: Properties, default: Any) -> Prompt:
    prompt_id = common["id"]
    _no_default(PromptType.PHOTO, default, prompt_id)
    return PhotoPrompt(resolution=_int(properties, "res", prompt_id), **common)


def _build_remote_activity(common: Dict[str, Any], properties: Properties, default: Any) -> Prompt:
    prompt_id = common["id"]
    _no_default(PromptType.REMOTE_ACTIVITY, default, prompt_id)
    autolaunch = _label(properties, "autolaunch", prompt_id, required=False)
    return RemoteActivityPrompt(
        package=_label(properties, "package", prompt_id),
        activity=_label(properties, "activity", prompt_id),
        action=_label(properties, "action", prompt_id),
        autolaunch=parse_bool(autolaunch, "autolaunch") if autolaunch is not None else False,
        retries=_int(properties, "retries", prompt_id),
        min_runs=_int(properties, "min_runs", prompt_id),
        input=_label(properties, "input", prompt_id, required=False),
        **common,
    )


_BUILDERS = {
    PromptType.TIMESTAMP: _build_timestamp,
    PromptType.NUMBER: _build_number,
    PromptType.HOURS_BEFORE_NOW: _build_hours_before_now,
    PromptType.TEXT: _build_text,
    PromptType.SINGLE_CHOICE: _choice_builder(SingleChoicePrompt),
    PromptType.SINGLE_CHOICE_CUSTOM: _choice_builder(SingleChoiceCustomPrompt),
    PromptType.MULTI_CHOICE: _choice_builder(MultiChoicePrompt),
    PromptType.MULTI_CHOICE_CUSTOM: _choice_builder(MultiChoiceCustomPrompt),
    PromptType.PHOTO: _build_photo,
    PromptType.REMOTE_ACTIVITY: _build_remote_activity,
}


def create_prompt(
    prompt_type: Union[str, PromptType],
    id: str,
    condition: Optional[str],
    unit: Optional[str],
    text: str,
    abbreviated_text: Optional[str],
    explanation_text: Optional[str],
    skippable: bool,
    skip_label: Optional[str],
    display_type: Union[str, DisplayType],
    display_label: str,
    index: int,
    properties: Optional[Properties] = None,
    default: Any = None,
) -> Prompt:
    """
    Create the prompt subclass for a prompt type

    Args:
        prompt_type: The type name, e.g. "single_choice"
        properties: The prompt's configured properties keyed by property key
        default: The configured default response, if any

    Returns:
        The configured prompt

    Raises:
        DomainError: If the type is unknown or the configuration is invalid
    """
    common = {
        "id": id,
        "condition": condition,
        "unit": unit,
        "text": text,
        "abbreviated_text": abbreviated_text,
        "explanation_text": explanation_text,
        "skippable": skippable,
        "skip_label": skip_label,
        "display_type": parse_display_type(display_type),
        "display_label": display_label,
        "index": index,
    }
    builder = _BUILDERS[parse_prompt_type(prompt_type)]
    return builder(common, properties or {}, default)
