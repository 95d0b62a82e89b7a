"""
Choice prompts

Single- and multi-choice prompts answer with the integer keys of their
configured choices. The "custom" variants let the user add their own choices,
so their responses are labels rather than keys.
"""
import json
from typing import Any, Dict, Iterable, List, Optional

from ohmage.domain.campaign.prompt import DisplayType, LabelValuePair, Prompt, PromptType
from ohmage.domain.condition import ConditionValuePair
from ohmage.domain.exceptions import DomainError


def parse_key(value: Any, what: str) -> int:
    """Decode a choice key from an int or a string of digits"""
    if isinstance(value, bool):
        raise DomainError(f"{what} is not a choice key: {value}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise DomainError(f"{what} is not a choice key: {value!r}")


def parse_list(value: Any, what: str) -> List[Any]:
    """
    Decode a list of values

    Accepts a list or tuple, a JSON array string, or a comma-separated string.
    """
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("["):
            try:
                decoded = json.loads(text)
            except ValueError:
                raise DomainError(f"{what} is not a valid JSON array: {value}")
            if not isinstance(decoded, list):
                raise DomainError(f"{what} is not a list: {value}")
            return decoded
        if text == "":
            return []
        return [item.strip() for item in text.split(",")]
    raise DomainError(f"{what} is not a list: {value!r}")


class ChoicePrompt(Prompt):
    """Shared configuration of the choice prompts"""

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
        choices: Dict[int, LabelValuePair],
        index: int = 0,
    ):
        super().__init__(
            id, condition, unit, text, abbreviated_text, explanation_text,
            skippable, skip_label, display_type, display_label, index,
        )

        if not choices and not self.allows_custom_choices():
            raise DomainError(f"The prompt '{id}' has no choices.")

        labels = set()
        for key, choice in (choices or {}).items():
            if isinstance(key, bool) or not isinstance(key, int):
                raise DomainError(f"The choice key of prompt '{id}' is not an integer: {key!r}")
            if not isinstance(choice, LabelValuePair):
                raise DomainError(f"The choice '{key}' of prompt '{id}' has no label.")
            if choice.label in labels:
                raise DomainError(f"The prompt '{id}' has a duplicate choice label: {choice.label}")
            labels.add(choice.label)

        self.choices = dict(sorted((choices or {}).items()))

    def allows_custom_choices(self) -> bool:
        return False

    def label_for_key(self, key: int) -> str:
        try:
            return self.choices[key].label
        except KeyError:
            raise DomainError(f"The key '{key}' is not a choice of prompt '{self.id}'.")

    def _check_key(self, value: Any, what: str) -> int:
        key = parse_key(value, what)
        if key not in self.choices:
            raise DomainError(f"{what} is not a choice of prompt '{self.id}': {key}")
        return key

    def _resolve_label(self, value: Any) -> str:
        """Map a key or label to a label, accepting new labels"""
        what = f"The response to prompt '{self.id}'"
        if isinstance(value, bool):
            raise DomainError(f"{what} is not a choice: {value}")
        if isinstance(value, int):
            return self.label_for_key(self._check_key(value, what))
        if not isinstance(value, str) or value.strip() == "":
            raise DomainError(f"{what} is not a choice: {value!r}")

        label = value.strip()
        for choice in self.choices.values():
            if choice.label == label:
                return label
        try:
            key = int(label)
        except ValueError:
            return label
        return self.label_for_key(key) if key in self.choices else label

    def validate_condition_literal(self, pair: ConditionValuePair) -> None:
        if self.allows_custom_choices():
            super().validate_condition_literal(pair)
            return
        self._check_key(pair.value, "The value of the condition")

    def properties(self) -> Dict[str, Any]:
        return {str(key): choice.to_dict() for key, choice in self.choices.items()}


class SingleChoicePrompt(ChoicePrompt):
    """One key out of the configured choices"""

    prompt_type = PromptType.SINGLE_CHOICE

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
        choices: Dict[int, LabelValuePair],
        default: Optional[int] = None,
        index: int = 0,
    ):
        super().__init__(
            id, condition, unit, text, abbreviated_text, explanation_text,
            skippable, skip_label, display_type, display_label, choices, index,
        )
        self.default = None
        if default is not None:
            self.default = self._check_key(default, "The default")

    def coerce_value(self, value: Any) -> int:
        return self._check_key(value, f"The response to prompt '{self.id}'")


class SingleChoiceCustomPrompt(ChoicePrompt):
    """One choice, which may be a label the user added"""

    prompt_type = PromptType.SINGLE_CHOICE_CUSTOM

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
        choices: Dict[int, LabelValuePair],
        default: Optional[int] = None,
        index: int = 0,
    ):
        super().__init__(
            id, condition, unit, text, abbreviated_text, explanation_text,
            skippable, skip_label, display_type, display_label, choices, index,
        )
        self.default = None
        if default is not None:
            self.default = self._check_key(default, "The default")

    def allows_custom_choices(self) -> bool:
        return True

    def coerce_value(self, value: Any) -> str:
        return self._resolve_label(value)


class MultiChoicePrompt(ChoicePrompt):
    """Any number of distinct keys out of the configured choices"""

    prompt_type = PromptType.MULTI_CHOICE

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
        choices: Dict[int, LabelValuePair],
        default: Optional[Iterable[int]] = None,
        index: int = 0,
    ):
        super().__init__(
            id, condition, unit, text, abbreviated_text, explanation_text,
            skippable, skip_label, display_type, display_label, choices, index,
        )
        self.default = None
        if default is not None:
            self.default = sorted({
                self._check_key(key, "The default")
                for key in parse_list(default, "The default")
            })

    def coerce_value(self, value: Any) -> List[int]:
        what = f"The response to prompt '{self.id}'"
        keys = [self._check_key(item, what) for item in parse_list(value, what)]
        if not keys:
            raise DomainError(f"{what} has no choices selected.")
        if len(set(keys)) != len(keys):
            raise DomainError(f"{what} contains duplicate choices.")
        return sorted(keys)


class MultiChoiceCustomPrompt(ChoicePrompt):
    """Any number of distinct choices, which may include labels the user added"""

    prompt_type = PromptType.MULTI_CHOICE_CUSTOM

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
        choices: Dict[int, LabelValuePair],
        default: Optional[Iterable[int]] = None,
        index: int = 0,
    ):
        super().__init__(
            id, condition, unit, text, abbreviated_text, explanation_text,
            skippable, skip_label, display_type, display_label, choices, index,
        )
        self.default = None
        if default is not None:
            self.default = sorted({
                self._check_key(key, "The default")
                for key in parse_list(default, "The default")
            })

    def allows_custom_choices(self) -> bool:
        return True

    def coerce_value(self, value: Any) -> List[str]:
        what = f"The response to prompt '{self.id}'"
        labels = [self._resolve_label(item) for item in parse_list(value, what)]
        if not labels:
            raise DomainError(f"{what} has no choices selected.")
        if len(set(labels)) != len(labels):
            raise DomainError(f"{what} contains duplicate choices.")
        return sorted(labels)
