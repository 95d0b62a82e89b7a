"""
Survey configuration and response validation

``Survey.create_responses`` walks the survey's content list in order,
validating each uploaded value against its prompt and replaying every
condition against the responses that came before it. A prompt whose
condition held must carry a real value (or SKIPPED when skippable); a prompt
whose condition failed must carry NOT_DISPLAYED.
"""
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ohmage.domain.campaign.prompt import Prompt
from ohmage.domain.campaign.repeatable_set import RepeatableSet
from ohmage.domain.campaign.response import (
    NoResponse,
    PromptResponse,
    RepeatableSetResponse,
    Response,
)
from ohmage.domain.campaign.survey_item import Message, SurveyItem
from ohmage.domain.exceptions import DomainError
from ohmage.domain.utils import is_blank, parse_bool

logger = logging.getLogger(__name__)

KEY_PROMPT_ID = "prompt_id"
KEY_REPEATABLE_SET_ID = "repeatable_set_id"
KEY_VALUE = "value"
KEY_SKIPPED = "skipped"
KEY_NOT_DISPLAYED = "not_displayed"
KEY_RESPONSES = "responses"


class Survey:
    """An ordered list of survey items with the text around them"""

    def __init__(
        self,
        id: str,
        title: str,
        description: Optional[str],
        intro_text: Optional[str],
        submit_text: str,
        show_summary: bool,
        edit_summary: bool,
        summary_text: Optional[str],
        anytime: bool,
        survey_items: List[SurveyItem],
    ):
        if is_blank(id):
            raise DomainError("The survey ID cannot be empty.")
        if is_blank(title):
            raise DomainError(f"The survey '{id}' has no title.")
        if is_blank(submit_text):
            raise DomainError(f"The survey '{id}' has no submit text.")
        if show_summary and is_blank(summary_text):
            raise DomainError(f"The survey '{id}' shows a summary, but has no summary text.")
        if edit_summary and not show_summary:
            raise DomainError(f"The survey '{id}' allows editing a summary it does not show.")
        if not survey_items:
            raise DomainError(f"The survey '{id}' has no survey items.")

        self.id = id
        self.title = title
        self.description = description
        self.intro_text = intro_text
        self.submit_text = submit_text
        self.show_summary = bool(show_summary)
        self.edit_summary = bool(edit_summary)
        self.summary_text = summary_text
        self.anytime = bool(anytime)
        self.survey_items = sorted(survey_items, key=lambda item: item.index)

        self._items_by_id: Dict[str, SurveyItem] = {}
        for item in self._all_items():
            if item.id in self._items_by_id:
                raise DomainError(f"The survey '{id}' contains the ID '{item.id}' twice.")
            self._items_by_id[item.id] = item

    def _all_items(self) -> Iterable[SurveyItem]:
        for item in self.survey_items:
            yield item
            if isinstance(item, RepeatableSet):
                yield from item.survey_items

    def get_item(self, item_id: str) -> Optional[SurveyItem]:
        return self._items_by_id.get(item_id)

    def get_prompt(self, prompt_id: str) -> Optional[Prompt]:
        item = self._items_by_id.get(prompt_id)
        return item if isinstance(item, Prompt) else None

    def prompts(self) -> List[Prompt]:
        """Every prompt in the survey, including those inside repeatable sets"""
        return [item for item in self._all_items() if isinstance(item, Prompt)]

    def num_survey_items(self) -> int:
        return sum(item.num_survey_items() for item in self.survey_items)

    def num_prompts(self) -> int:
        return sum(item.num_prompts() for item in self.survey_items)

    def validate_conditions(self) -> None:
        """
        Check every condition in the survey

        A condition may only reference prompts that come before its item: in
        the survey itself, or, for items inside a repeatable set, earlier in
        the same set. Each clause must also be legal for the referenced prompt.

        Raises:
            DomainError: If a condition is malformed or refers to a prompt it
                cannot see
        """
        visible: Dict[str, Prompt] = {}
        for item in self.survey_items:
            self._validate_condition(item, visible)
            if isinstance(item, RepeatableSet):
                inner = dict(visible)
                for set_item in item.survey_items:
                    self._validate_condition(set_item, inner)
                    if isinstance(set_item, Prompt):
                        inner[set_item.id] = set_item
            elif isinstance(item, Prompt):
                visible[item.id] = item

    def _validate_condition(self, item: SurveyItem, visible: Mapping[str, Prompt]) -> None:
        expression = item.parsed_condition()
        if expression is None:
            return
        for pair in expression.pairs():
            prompt = visible.get(pair.prompt_id)
            if prompt is None:
                if pair.prompt_id == item.id:
                    raise DomainError(f"The condition of '{item.id}' refers to itself: {pair}")
                if pair.prompt_id in self._items_by_id:
                    raise DomainError(
                        f"The condition of '{item.id}' refers to '{pair.prompt_id}', "
                        f"which is not a prompt that comes before it."
                    )
                raise DomainError(
                    f"The condition of '{item.id}' refers to an unknown prompt: {pair.prompt_id}"
                )
            prompt.validate_condition_value_pair(pair)

    def create_responses(self, raw_responses: List[Mapping[str, Any]]) -> Dict[str, Response]:
        """
        Validate the responses uploaded for one run of this survey

        Args:
            raw_responses: The uploaded entries, each either
                ``{"prompt_id", "value"}`` or ``{"repeatable_set_id",
                "skipped", "not_displayed", "responses"}`` where "responses"
                is a list of iterations, each a list of prompt entries

        Returns:
            Survey item id to PromptResponse or RepeatableSetResponse, in
            survey order

        Raises:
            DomainError: If any response is missing, unknown, or invalid
        """
        if not isinstance(raw_responses, list):
            raise DomainError(f"The responses for survey '{self.id}' are not a list.")

        remaining = self._index_entries(raw_responses, self.survey_items, self.id)
        context: Dict[str, Any] = {}
        results: Dict[str, Response] = {}

        for item in self.survey_items:
            if isinstance(item, Prompt):
                response = _validate_prompt(item, remaining.pop(item.id, None), context, None)
                context[item.id] = response.value
                results[item.id] = response
            elif isinstance(item, RepeatableSet):
                results[item.id] = self._validate_repeatable_set(
                    item, remaining.pop(item.id, None), context
                )

        logger.debug("Validated %d responses for survey '%s'", len(results), self.id)
        return results

    def _validate_repeatable_set(
        self,
        repeatable_set: RepeatableSet,
        entry: Optional[Mapping[str, Any]],
        context: Mapping[str, Any],
    ) -> RepeatableSetResponse:
        set_id = repeatable_set.id
        if entry is None:
            raise DomainError(f"The response for repeatable set '{set_id}' is missing.")

        skipped = parse_bool(entry.get(KEY_SKIPPED, False), f"'{KEY_SKIPPED}' of '{set_id}'")
        not_displayed = parse_bool(
            entry.get(KEY_NOT_DISPLAYED, False), f"'{KEY_NOT_DISPLAYED}' of '{set_id}'"
        )
        if skipped and not_displayed:
            raise DomainError(f"The repeatable set '{set_id}' cannot be both skipped and not displayed.")

        if not repeatable_set.is_displayed(context):
            if not not_displayed:
                raise DomainError(
                    f"The repeatable set '{set_id}' should not have been displayed, "
                    f"but it is not marked as not displayed."
                )
            return RepeatableSetResponse(repeatable_set, NoResponse.NOT_DISPLAYED)

        if not_displayed:
            raise DomainError(
                f"The repeatable set '{set_id}' should have been displayed, "
                f"but it is marked as not displayed."
            )
        if skipped:
            if not repeatable_set.termination_skip_enabled:
                raise DomainError(f"The repeatable set '{set_id}' cannot be skipped.")
            return RepeatableSetResponse(repeatable_set, NoResponse.SKIPPED)

        raw_iterations = entry.get(KEY_RESPONSES)
        if not isinstance(raw_iterations, list) or not raw_iterations:
            raise DomainError(f"The repeatable set '{set_id}' has no iterations.")

        iterations = []
        for iteration, raw_iteration in enumerate(raw_iterations):
            if not isinstance(raw_iteration, list):
                raise DomainError(
                    f"Iteration {iteration} of repeatable set '{set_id}' is not a list of responses."
                )
            remaining = self._index_entries(raw_iteration, repeatable_set.survey_items, set_id)
            iteration_context = dict(context)
            iteration_responses: Dict[str, PromptResponse] = {}
            for item in repeatable_set.prompts():
                response = _validate_prompt(
                    item, remaining.pop(item.id, None), iteration_context, iteration
                )
                iteration_context[item.id] = response.value
                iteration_responses[item.id] = response
            iterations.append(iteration_responses)

        return RepeatableSetResponse(repeatable_set, iterations=iterations)

    def _index_entries(
        self,
        entries: List[Mapping[str, Any]],
        items: List[SurveyItem],
        container_id: str,
    ) -> Dict[str, Mapping[str, Any]]:
        items_by_id = {item.id: item for item in items}
        indexed: Dict[str, Mapping[str, Any]] = {}

        for entry in entries:
            if not isinstance(entry, Mapping):
                raise DomainError(f"A response in '{container_id}' is not a JSON object.")

            if KEY_PROMPT_ID in entry:
                item_id = entry[KEY_PROMPT_ID]
                if not isinstance(item_id, str):
                    raise DomainError(f"A prompt ID in '{container_id}' is not a string: {item_id}")
                item = items_by_id.get(item_id)
                if isinstance(item, Message):
                    raise DomainError(f"The message '{item_id}' cannot have a response.")
                if not isinstance(item, Prompt):
                    raise DomainError(f"Unknown prompt ID in '{container_id}': {item_id}")
            elif KEY_REPEATABLE_SET_ID in entry:
                item_id = entry[KEY_REPEATABLE_SET_ID]
                if not isinstance(item_id, str):
                    raise DomainError(f"A repeatable set ID in '{container_id}' is not a string: {item_id}")
                if not isinstance(items_by_id.get(item_id), RepeatableSet):
                    raise DomainError(f"Unknown repeatable set ID in '{container_id}': {item_id}")
            else:
                raise DomainError(
                    f"A response in '{container_id}' has neither a '{KEY_PROMPT_ID}' "
                    f"nor a '{KEY_REPEATABLE_SET_ID}'."
                )

            if item_id in indexed:
                raise DomainError(f"There are multiple responses for '{item_id}' in '{container_id}'.")
            indexed[item_id] = entry

        return indexed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "intro_text": self.intro_text,
            "submit_text": self.submit_text,
            "show_summary": self.show_summary,
            "edit_summary": self.edit_summary,
            "summary_text": self.summary_text,
            "anytime": self.anytime,
            "contents": [item.to_dict() for item in self.survey_items],
        }

    def __repr__(self) -> str:
        return f"Survey(id={self.id!r}, items={len(self.survey_items)})"


def _validate_prompt(
    prompt: Prompt,
    entry: Optional[Mapping[str, Any]],
    context: Mapping[str, Any],
    iteration: Optional[int],
) -> PromptResponse:
    if entry is None or KEY_VALUE not in entry:
        raise DomainError(f"The response for prompt '{prompt.id}' is missing.")

    response = prompt.create_response(iteration, entry[KEY_VALUE])
    displayed = prompt.is_displayed(context)

    if not displayed and response.value is not NoResponse.NOT_DISPLAYED:
        raise DomainError(
            f"The prompt '{prompt.id}' should not have been displayed, "
            f"but its response is not {NoResponse.NOT_DISPLAYED}."
        )
    if displayed and response.value is NoResponse.NOT_DISPLAYED:
        raise DomainError(
            f"The prompt '{prompt.id}' should have been displayed, "
            f"but its response is {NoResponse.NOT_DISPLAYED}."
        )
    return response
