"""
Campaign configuration
"""
from enum import Enum
from typing import Any, Dict, List, Optional

from ohmage.domain.campaign.prompt import Prompt
from ohmage.domain.campaign.survey import Survey
from ohmage.domain.exceptions import DomainError
from ohmage.domain.utils import is_blank

MAX_URN_LENGTH = 255


class RunningState(Enum):
    RUNNING = "running"
    STOPPED = "stopped"

    def __str__(self) -> str:
        return self.value


class PrivacyState(Enum):
    PRIVATE = "private"
    SHARED = "shared"

    def __str__(self) -> str:
        return self.value


def parse_running_state(value: Any) -> RunningState:
    if isinstance(value, RunningState):
        return value
    try:
        return RunningState(str(value).strip().lower())
    except ValueError:
        raise DomainError(f"Unknown running state: {value}")


def parse_privacy_state(value: Any) -> PrivacyState:
    if isinstance(value, PrivacyState):
        return value
    try:
        return PrivacyState(str(value).strip().lower())
    except ValueError:
        raise DomainError(f"Unknown privacy state: {value}")


def validate_urn(urn: Optional[str]) -> str:
    """
    Validate a campaign URN

    Returns:
        The URN without surrounding whitespace

    Raises:
        DomainError: If the URN is empty, too long, or not a URN
    """
    if is_blank(urn):
        raise DomainError("The campaign URN is missing.")
    urn = urn.strip()
    if len(urn) > MAX_URN_LENGTH:
        raise DomainError(f"The campaign URN is longer than {MAX_URN_LENGTH} characters.")
    if not urn.lower().startswith("urn:") or len(urn) == len("urn:"):
        raise DomainError(f"The campaign URN is not a valid URN: {urn}")
    return urn


class Campaign:
    """A named set of surveys that participants upload responses to"""

    def __init__(
        self,
        urn: str,
        name: str,
        description: Optional[str],
        server_url: Optional[str],
        running_state: RunningState,
        privacy_state: PrivacyState,
        surveys: List[Survey],
        xml: Optional[str] = None,
    ):
        urn = validate_urn(urn)
        if is_blank(name):
            raise DomainError(f"The campaign '{urn}' has no name.")
        if not surveys:
            raise DomainError(f"The campaign '{urn}' has no surveys.")

        self.urn = urn
        self.name = name
        self.description = description
        self.server_url = server_url
        self.running_state = parse_running_state(running_state)
        self.privacy_state = parse_privacy_state(privacy_state)
        self.xml = xml

        self.surveys: Dict[str, Survey] = {}
        for survey in surveys:
            if survey.id in self.surveys:
                raise DomainError(f"The campaign '{urn}' contains the survey ID '{survey.id}' twice.")
            self.surveys[survey.id] = survey

    def is_running(self) -> bool:
        return self.running_state is RunningState.RUNNING

    def get_survey(self, survey_id: str) -> Optional[Survey]:
        return self.surveys.get(survey_id)

    def get_prompt(self, survey_id: str, prompt_id: str) -> Optional[Prompt]:
        survey = self.surveys.get(survey_id)
        return survey.get_prompt(prompt_id) if survey else None

    def find_prompts(self, prompt_id: str) -> List[Prompt]:
        """Every prompt with this id across all surveys"""
        prompts = []
        for survey in self.surveys.values():
            prompt = survey.get_prompt(prompt_id)
            if prompt is not None:
                prompts.append(prompt)
        return prompts

    def to_dict(self, include_surveys: bool = True) -> Dict[str, Any]:
        result = {
            "urn": self.urn,
            "name": self.name,
            "description": self.description,
            "server_url": self.server_url,
            "running_state": str(self.running_state),
            "privacy_state": str(self.privacy_state),
            "survey_ids": list(self.surveys),
        }
        if include_surveys:
            result["surveys"] = [survey.to_dict() for survey in self.surveys.values()]
        return result

    def __repr__(self) -> str:
        return f"Campaign(urn={self.urn!r}, surveys={list(self.surveys)!r})"
