"""
Mobility data points

Clients periodically classify the user's mode of transport. A point is either
just the classified mode ("mode_only") or the mode plus the raw sensor data the
classifier used ("sensor_data").
"""
from enum import Enum
from typing import Any, Dict, Mapping, Optional
from uuid import UUID, uuid4

from ohmage.domain.exceptions import DomainError
from ohmage.domain.survey_response import (
    Location,
    LocationStatus,
    parse_epoch_millis,
    parse_location,
    parse_location_status,
)
from ohmage.domain.utils import is_blank


class Mode(Enum):
    STILL = "still"
    WALK = "walk"
    RUN = "run"
    BIKE = "bike"
    DRIVE = "drive"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


class SubType(Enum):
    MODE_ONLY = "mode_only"
    SENSOR_DATA = "sensor_data"

    def __str__(self) -> str:
        return self.value


class MobilityPoint:

    def __init__(
        self,
        id: UUID,
        time: int,
        timezone_name: str,
        location_status: LocationStatus,
        location: Optional[Location],
        mode: Mode,
        sub_type: SubType,
        sensor_data: Optional[Dict[str, Any]] = None,
    ):
        if sub_type is SubType.SENSOR_DATA and sensor_data is None:
            raise DomainError("The mobility point is of type 'sensor_data' but has no sensor data.")
        if sub_type is SubType.MODE_ONLY and sensor_data is not None:
            raise DomainError("The mobility point is of type 'mode_only' but has sensor data.")

        self.id = id
        self.time = time
        self.timezone = timezone_name
        self.location_status = location_status
        self.location = location
        self.mode = mode
        self.sub_type = sub_type
        self.sensor_data = sensor_data

    @classmethod
    def from_dict(cls, data: Any) -> "MobilityPoint":
        """
        Validate one uploaded mobility point

        Raises:
            DomainError: If the point is malformed
        """
        if not isinstance(data, Mapping):
            raise DomainError("The mobility point is not a JSON object.")

        raw_id = data.get("id")
        if raw_id is None:
            point_id = uuid4()
        else:
            try:
                point_id = UUID(str(raw_id))
            except ValueError:
                raise DomainError(f"The mobility point ID is not a UUID: {raw_id}")

        timezone_name = data.get("timezone")
        if not isinstance(timezone_name, str) or is_blank(timezone_name):
            raise DomainError("The mobility point has no timezone.")

        try:
            mode = Mode(str(data.get("mode")).strip().lower())
        except ValueError:
            raise DomainError(f"Unknown mobility mode: {data.get('mode')}")

        try:
            sub_type = SubType(str(data.get("subtype", SubType.MODE_ONLY.value)).strip().lower())
        except ValueError:
            raise DomainError(f"Unknown mobility subtype: {data.get('subtype')}")

        sensor_data = data.get("data")
        if sensor_data is not None and not isinstance(sensor_data, Mapping):
            raise DomainError("The mobility sensor data is not a JSON object.")

        location_status = parse_location_status(data.get("location_status"))
        return cls(
            id=point_id,
            time=parse_epoch_millis(data.get("time"), "mobility point time"),
            timezone_name=timezone_name.strip(),
            location_status=location_status,
            location=parse_location(location_status, data.get("location")),
            mode=mode,
            sub_type=sub_type,
            sensor_data=dict(sensor_data) if sensor_data is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "time": self.time,
            "timezone": self.timezone,
            "location_status": str(self.location_status),
            "location": self.location.to_dict() if self.location else None,
            "mode": str(self.mode),
            "subtype": str(self.sub_type),
            "data": self.sensor_data,
        }
