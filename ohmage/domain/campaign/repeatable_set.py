"""
Repeatable sets: groups of prompts the user may answer several times
"""
from typing import Any, Dict, List, Optional

from ohmage.domain.campaign.prompt import Prompt
from ohmage.domain.campaign.survey_item import Message, SurveyItem
from ohmage.domain.exceptions import DomainError
from ohmage.domain.utils import is_blank


class RepeatableSet(SurveyItem):
    """
    A group of prompts and messages repeated until the user answers the
    termination question with the "false" label
    """

    def __init__(
        self,
        id: str,
        condition: Optional[str],
        index: int,
        termination_question: str,
        termination_true_label: str,
        termination_false_label: str,
        termination_skip_enabled: bool,
        termination_skip_label: Optional[str],
        survey_items: List[SurveyItem],
    ):
        super().__init__(id, condition, index)

        if is_blank(termination_question):
            raise DomainError(f"The repeatable set '{id}' has no termination question.")
        if is_blank(termination_true_label):
            raise DomainError(f"The repeatable set '{id}' has no termination true label.")
        if is_blank(termination_false_label):
            raise DomainError(f"The repeatable set '{id}' has no termination false label.")
        if termination_skip_enabled and is_blank(termination_skip_label):
            raise DomainError(
                f"The repeatable set '{id}' may be skipped, but it has no termination skip label."
            )

        if not survey_items:
            raise DomainError(f"The repeatable set '{id}' has no survey items.")
        seen = set()
        for item in survey_items:
            if not isinstance(item, (Prompt, Message)):
                raise DomainError(
                    f"The repeatable set '{id}' may only contain prompts and messages: {item.id}"
                )
            if item.id in seen:
                raise DomainError(f"The repeatable set '{id}' contains the ID '{item.id}' twice.")
            seen.add(item.id)
        if not any(isinstance(item, Prompt) for item in survey_items):
            raise DomainError(f"The repeatable set '{id}' has no prompts.")

        self.termination_question = termination_question
        self.termination_true_label = termination_true_label
        self.termination_false_label = termination_false_label
        self.termination_skip_enabled = bool(termination_skip_enabled)
        self.termination_skip_label = termination_skip_label
        self.survey_items = sorted(survey_items, key=lambda item: item.index)

    def prompts(self) -> List[Prompt]:
        return [item for item in self.survey_items if isinstance(item, Prompt)]

    def get_item(self, item_id: str) -> Optional[SurveyItem]:
        for item in self.survey_items:
            if item.id == item_id:
                return item
        return None

    def num_survey_items(self) -> int:
        return 1 + sum(item.num_survey_items() for item in self.survey_items)

    def num_prompts(self) -> int:
        return sum(item.num_prompts() for item in self.survey_items)

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result.update({
            "survey_item_type": "repeatable_set",
            "termination_question": self.termination_question,
            "termination_true_label": self.termination_true_label,
            "termination_false_label": self.termination_false_label,
            "termination_skip_enabled": self.termination_skip_enabled,
            "termination_skip_label": self.termination_skip_label,
            "prompts": [item.to_dict() for item in self.survey_items],
        })
        return result

    def _key(self) -> tuple:
        return super()._key() + (
            self.termination_question,
            self.termination_true_label,
            self.termination_false_label,
            self.termination_skip_enabled,
            self.termination_skip_label,
            tuple(item._key() for item in self.survey_items),
        )
