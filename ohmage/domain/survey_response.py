"""
Uploaded survey responses

One upload from a client contains one or more survey responses. Each carries
its own context (when and where the survey was taken) and the list of prompt
and repeatable set responses, which are validated by the survey they belong to.
"""
import logging
import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional
from uuid import UUID

from ohmage.domain.campaign.campaign import Campaign
from ohmage.domain.campaign.response import PromptResponse, RepeatableSetResponse, Response
from ohmage.domain.campaign.survey import Survey
from ohmage.domain.exceptions import DomainError
from ohmage.domain.utils import is_blank

logger = logging.getLogger(__name__)


class LocationStatus(Enum):
    VALID = "valid"
    INACCURATE = "inaccurate"
    STALE = "stale"
    UNAVAILABLE = "unavailable"

    def __str__(self) -> str:
        return self.value


def parse_location_status(value: Any) -> LocationStatus:
    try:
        return LocationStatus(str(value).strip().lower())
    except ValueError:
        raise DomainError(f"Unknown location status: {value}")


def _number(data: Mapping[str, Any], key: str, what: str, required: bool = True) -> Optional[float]:
    value = data.get(key)
    if value is None:
        if required:
            raise DomainError(f"The {what} is missing '{key}'.")
        return None
    if isinstance(value, bool):
        raise DomainError(f"The {what} '{key}' is not a number: {value}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise DomainError(f"The {what} '{key}' is not a number: {value}")
    if not math.isfinite(number):
        raise DomainError(f"The {what} '{key}' is not a finite number: {value}")
    return number


def parse_epoch_millis(value: Any, what: str) -> int:
    if isinstance(value, bool) or value is None:
        raise DomainError(f"The {what} is missing or invalid: {value}")
    if isinstance(value, float) and not value.is_integer():
        raise DomainError(f"The {what} is not a whole number of milliseconds: {value}")
    try:
        millis = int(value)
    except (TypeError, ValueError, OverflowError):
        raise DomainError(f"The {what} is not a number of milliseconds: {value}")
    if millis < 0:
        raise DomainError(f"The {what} cannot be negative: {value}")
    try:
        datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
    except (OverflowError, ValueError, OSError):
        raise DomainError(f"The {what} is out of range: {value}")
    return millis


class Location:
    """Where a survey or mobility point was recorded"""

    def __init__(
        self,
        latitude: float,
        longitude: float,
        accuracy: Optional[float],
        provider: Optional[str],
        time: Optional[int],
    ):
        if not -90 <= latitude <= 90:
            raise DomainError(f"The latitude is out of range: {latitude}")
        if not -180 <= longitude <= 180:
            raise DomainError(f"The longitude is out of range: {longitude}")
        if accuracy is not None and accuracy < 0:
            raise DomainError(f"The accuracy cannot be negative: {accuracy}")

        self.latitude = latitude
        self.longitude = longitude
        self.accuracy = accuracy
        self.provider = provider
        self.time = time

    @classmethod
    def from_dict(cls, data: Any) -> "Location":
        if not isinstance(data, Mapping):
            raise DomainError("The location is not a JSON object.")
        time = data.get("time")
        return cls(
            latitude=_number(data, "latitude", "location"),
            longitude=_number(data, "longitude", "location"),
            accuracy=_number(data, "accuracy", "location", required=False),
            provider=data.get("provider"),
            time=parse_epoch_millis(time, "location time") if time is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "accuracy": self.accuracy,
            "provider": self.provider,
            "time": self.time,
        }


def parse_location(status: LocationStatus, data: Any) -> Optional[Location]:
    """A location is required for every status except 'unavailable'"""
    if status is LocationStatus.UNAVAILABLE:
        if data is not None:
            raise DomainError("The location status is 'unavailable', but a location was given.")
        return None
    if data is None:
        raise DomainError(f"The location status is '{status}', but the location is missing.")
    return Location.from_dict(data)


class SurveyResponse:
    """One validated run of a survey"""

    def __init__(
        self,
        survey_key: UUID,
        survey: Survey,
        time: int,
        timezone_name: str,
        location_status: LocationStatus,
        location: Optional[Location],
        launch_context: Optional[Dict[str, Any]],
        responses: Dict[str, Response],
    ):
        self.survey_key = survey_key
        self.survey = survey
        self.time = time
        self.timezone = timezone_name
        self.location_status = location_status
        self.location = location
        self.launch_context = launch_context
        self.responses = responses

    @property
    def survey_id(self) -> str:
        return self.survey.id

    @property
    def date(self) -> datetime:
        return datetime.fromtimestamp(self.time / 1000, tz=timezone.utc)

    def prompt_responses(self) -> List[PromptResponse]:
        """Every prompt response, flattening repeatable sets"""
        flattened = []
        for response in self.responses.values():
            if isinstance(response, RepeatableSetResponse):
                flattened.extend(response.prompt_responses())
            else:
                flattened.append(response)
        return flattened

    @classmethod
    def from_dict(cls, campaign: Campaign, data: Any) -> "SurveyResponse":
        """
        Validate one uploaded survey response against its campaign

        Args:
            campaign: The campaign the response was uploaded to
            data: The uploaded JSON object

        Returns:
            The validated survey response

        Raises:
            DomainError: If any part of the upload is invalid
        """
        if not isinstance(data, Mapping):
            raise DomainError("The survey response is not a JSON object.")

        raw_key = data.get("survey_key")
        try:
            survey_key = UUID(str(raw_key))
        except ValueError:
            raise DomainError(f"The survey key is not a UUID: {raw_key}")

        survey_id = data.get("survey_id")
        survey = campaign.get_survey(survey_id) if isinstance(survey_id, str) else None
        if survey is None:
            raise DomainError(f"The campaign '{campaign.urn}' has no survey '{survey_id}'.")

        timezone_name = data.get("timezone")
        if not isinstance(timezone_name, str) or is_blank(timezone_name):
            raise DomainError(f"The survey response '{survey_key}' has no timezone.")

        location_status = parse_location_status(data.get("location_status"))
        location = parse_location(location_status, data.get("location"))

        launch_context = data.get("survey_launch_context")
        if launch_context is not None and not isinstance(launch_context, Mapping):
            raise DomainError("The survey launch context is not a JSON object.")

        responses = survey.create_responses(data.get("responses"))

        logger.debug("Validated survey response %s for survey %s", survey_key, survey.id)
        return cls(
            survey_key=survey_key,
            survey=survey,
            time=parse_epoch_millis(data.get("time"), "survey response time"),
            timezone_name=timezone_name.strip(),
            location_status=location_status,
            location=location,
            launch_context=dict(launch_context) if launch_context is not None else None,
            responses=responses,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "survey_key": str(self.survey_key),
            "survey_id": self.survey.id,
            "time": self.time,
            "timezone": self.timezone,
            "location_status": str(self.location_status),
            "location": self.location.to_dict() if self.location else None,
            "survey_launch_context": self.launch_context,
            "responses": [response.to_dict() for response in self.responses.values()],
        }
