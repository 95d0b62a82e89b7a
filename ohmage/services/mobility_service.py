"""
Mobility service - storing and reading mobility points
"""
import json
from datetime import datetime, timezone
from typing import Any, Dict, List
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from ohmage.database.queries import execute_with_retry
from ohmage.domain.mobility import MobilityPoint


class MobilityService:
    """Service for mobility point operations"""

    @staticmethod
    async def store(
        session: AsyncSession,
        user_id: str,
        client: str,
        points: List[MobilityPoint],
    ) -> int:
        """
        Store validated mobility points

        Points whose id was already uploaded are ignored.

        Returns:
            Number of points stored
        """
        stored = 0
        for point in points:
            location = point.location
            result = await execute_with_retry(
                session,
                text("""
                    INSERT INTO mobility_points (
                        id, user_id, client, msg_timestamp, phone_timezone,
                        location_status, latitude, longitude, accuracy, provider,
                        mode, subtype, sensor_data
                    ) VALUES (
                        CAST(:id AS UUID), CAST(:user_id AS UUID), :client, :msg_timestamp, :phone_timezone,
                        :location_status, :latitude, :longitude, :accuracy, :provider,
                        :mode, :subtype, CAST(:sensor_data AS JSONB)
                    )
                    ON CONFLICT (id) DO NOTHING
                    RETURNING id
                """).bindparams(
                    id=str(point.id),
                    user_id=user_id,
                    client=client,
                    msg_timestamp=datetime.fromtimestamp(point.time / 1000, tz=timezone.utc),
                    phone_timezone=point.timezone,
                    location_status=str(point.location_status),
                    latitude=location.latitude if location else None,
                    longitude=location.longitude if location else None,
                    accuracy=location.accuracy if location else None,
                    provider=location.provider if location else None,
                    mode=str(point.mode),
                    subtype=str(point.sub_type),
                    sensor_data=json.dumps(point.sensor_data) if point.sensor_data is not None else None,
                )
            )
            if result.first():
                stored += 1

        if stored < len(points):
            print(f"Skipped {len(points) - stored} already uploaded mobility point(s)")
        return stored

    @staticmethod
    async def read(
        session: AsyncSession,
        user_id: str,
        start: datetime,
        end: datetime,
        include_sensor_data: bool = False,
    ) -> List[Dict[str, Any]]:
        """
        Read one user's mobility points in a time range

        Args:
            start: Inclusive lower bound
            end: Exclusive upper bound
            include_sensor_data: Return the raw sensor data as well

        Returns:
            List of point dicts, oldest first
        """
        result = await execute_with_retry(
            session,
            text("""
                SELECT id, msg_timestamp, phone_timezone, location_status,
                       latitude, longitude, accuracy, provider, mode, subtype, sensor_data
                FROM mobility_points
                WHERE user_id = CAST(:user_id AS UUID)
                    AND msg_timestamp >= :start
                    AND msg_timestamp < :end
                ORDER BY msg_timestamp ASC
            """).bindparams(user_id=user_id, start=start, end=end)
        )

        points = []
        for row in result.fetchall():
            point = {
                "id": str(row[0]),
                "timestamp": row[1].isoformat() if row[1] else None,
                "timezone": row[2],
                "location_status": row[3],
                "location": None,
                "mode": row[8],
                "subtype": row[9],
            }
            if row[4] is not None and row[5] is not None:
                point["location"] = {
                    "latitude": row[4],
                    "longitude": row[5],
                    "accuracy": row[6],
                    "provider": row[7],
                }
            if include_sensor_data:
                point["data"] = row[10]
            points.append(point)
        return points
