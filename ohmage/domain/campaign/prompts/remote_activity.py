"""
Remote activity prompt

The client launches an external application, which reports back one JSON
object per run. The prompt's response is the list of those objects.
"""
import json
from typing import Any, Dict, List, Optional

from ohmage.domain.campaign.prompt import DisplayType, Prompt, PromptType
from ohmage.domain.exceptions import DomainError
from ohmage.domain.utils import is_blank


class RemoteActivityPrompt(Prompt):

    prompt_type = PromptType.REMOTE_ACTIVITY

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
        package: str,
        activity: str,
        action: str,
        autolaunch: bool,
        retries: int,
        min_runs: int,
        input: Optional[str] = None,
        index: int = 0,
    ):
        super().__init__(
            id, condition, unit, text, abbreviated_text, explanation_text,
            skippable, skip_label, display_type, display_label, index,
        )

        if is_blank(package):
            raise DomainError(f"The package of prompt '{id}' cannot be empty.")
        if is_blank(activity):
            raise DomainError(f"The activity of prompt '{id}' cannot be empty.")
        if is_blank(action):
            raise DomainError(f"The action of prompt '{id}' cannot be empty.")
        if isinstance(retries, bool) or not isinstance(retries, int) or retries < 0:
            raise DomainError(f"The retries of prompt '{id}' must be a non-negative integer.")
        if isinstance(min_runs, bool) or not isinstance(min_runs, int) or min_runs < 0:
            raise DomainError(f"The minimum runs of prompt '{id}' must be a non-negative integer.")
        if min_runs > retries + 1:
            raise DomainError(
                f"The prompt '{id}' requires {min_runs} runs but only allows {retries + 1}."
            )

        self.package = package
        self.activity = activity
        self.action = action
        self.autolaunch = bool(autolaunch)
        self.retries = retries
        self.min_runs = min_runs
        self.input = input

    @property
    def max_runs(self) -> int:
        return self.retries + 1

    def coerce_value(self, value: Any) -> List[Dict[str, Any]]:
        what = f"The response to prompt '{self.id}'"
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except ValueError:
                raise DomainError(f"{what} is not valid JSON.")
        if isinstance(value, dict):
            value = [value]
        if not isinstance(value, (list, tuple)):
            raise DomainError(f"{what} is not a list of runs: {value!r}")

        runs = list(value)
        for run in runs:
            if not isinstance(run, dict):
                raise DomainError(f"{what} contains a run that is not a JSON object: {run!r}")
        if len(runs) < self.min_runs:
            raise DomainError(f"{what} has {len(runs)} runs but requires at least {self.min_runs}.")
        if len(runs) > self.max_runs:
            raise DomainError(f"{what} has {len(runs)} runs but allows at most {self.max_runs}.")
        return runs

    def properties(self) -> Dict[str, Any]:
        return {
            "package": self.package,
            "activity": self.activity,
            "action": self.action,
            "autolaunch": self.autolaunch,
            "retries": self.retries,
            "min_runs": self.min_runs,
            "input": self.input,
        }
