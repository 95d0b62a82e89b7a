"""
Survey response service - storing uploads and reading them back as data points
"""
import json
from collections import OrderedDict
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from ohmage.database.queries import execute_with_retry
from ohmage.domain.campaign.prompt import PromptType
from ohmage.domain.campaign.response import RepeatableSetResponse, value_to_json
from ohmage.domain.survey_response import SurveyResponse

NUMERIC_PROMPT_TYPES = (PromptType.NUMBER.value, PromptType.HOURS_BEFORE_NOW.value)


def _numeric(response: Any) -> Optional[Decimal]:
    # Whole numbers are stored as JSON numbers, decimals as strings
    if isinstance(response, bool) or response is None:
        return None
    try:
        value = Decimal(str(response))
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def _rows_for(survey_response: SurveyResponse) -> List[Dict[str, Any]]:
    """Flatten a survey response into one row per prompt response"""
    rows = []
    for response in survey_response.responses.values():
        if isinstance(response, RepeatableSetResponse):
            set_id = response.repeatable_set_id
            if response.no_response is not None:
                for prompt in response.repeatable_set.prompts():
                    rows.append({
                        "prompt_id": prompt.id,
                        "prompt_type": str(prompt.prompt_type),
                        "response": json.dumps(value_to_json(response.no_response)),
                        "repeatable_set_id": set_id,
                        "repeatable_set_iteration": None,
                    })
                continue
            prompt_responses = response.prompt_responses()
        else:
            set_id = None
            prompt_responses = [response]

        for prompt_response in prompt_responses:
            rows.append({
                "prompt_id": prompt_response.prompt_id,
                "prompt_type": str(prompt_response.prompt.prompt_type),
                "response": json.dumps(value_to_json(prompt_response.value)),
                "repeatable_set_id": set_id,
                "repeatable_set_iteration": prompt_response.repeatable_set_iteration,
            })
    return rows


class SurveyResponseService:
    """Service for survey response operations"""

    @staticmethod
    async def store(
        session: AsyncSession,
        user_id: str,
        campaign_id: str,
        client: str,
        survey_responses: List[SurveyResponse],
    ) -> Dict[str, List[str]]:
        """
        Store validated survey responses

        A survey key that was already uploaded is skipped, so clients may
        safely retry an upload.

        Returns:
            Dict with the "stored" and "duplicate" survey keys
        """
        stored = []
        duplicates = []
        for survey_response in survey_responses:
            location = survey_response.location
            result = await execute_with_retry(
                session,
                text("""
                    INSERT INTO survey_responses (
                        survey_key, user_id, campaign_id, client, survey_id,
                        msg_timestamp, phone_timezone, location_status,
                        latitude, longitude, accuracy, provider,
                        launch_context, response_json
                    ) VALUES (
                        CAST(:survey_key AS UUID), CAST(:user_id AS UUID), CAST(:campaign_id AS UUID),
                        :client, :survey_id,
                        :msg_timestamp, :phone_timezone, :location_status,
                        :latitude, :longitude, :accuracy, :provider,
                        CAST(:launch_context AS JSONB), CAST(:response_json AS JSONB)
                    )
                    ON CONFLICT (survey_key) DO NOTHING
                    RETURNING id
                """).bindparams(
                    survey_key=str(survey_response.survey_key),
                    user_id=user_id,
                    campaign_id=campaign_id,
                    client=client,
                    survey_id=survey_response.survey_id,
                    msg_timestamp=survey_response.date,
                    phone_timezone=survey_response.timezone,
                    location_status=str(survey_response.location_status),
                    latitude=location.latitude if location else None,
                    longitude=location.longitude if location else None,
                    accuracy=location.accuracy if location else None,
                    provider=location.provider if location else None,
                    launch_context=json.dumps(survey_response.launch_context)
                    if survey_response.launch_context is not None else None,
                    response_json=json.dumps(survey_response.to_dict()),
                )
            )
            row = result.first()
            if not row:
                duplicates.append(str(survey_response.survey_key))
                continue

            for prompt_row in _rows_for(survey_response):
                await execute_with_retry(
                    session,
                    text("""
                        INSERT INTO prompt_responses (
                            survey_response_id, prompt_id, prompt_type, response,
                            repeatable_set_id, repeatable_set_iteration
                        ) VALUES (
                            :survey_response_id, :prompt_id, :prompt_type, CAST(:response AS JSONB),
                            :repeatable_set_id, :repeatable_set_iteration
                        )
                    """).bindparams(survey_response_id=row[0], **prompt_row)
                )
            stored.append(str(survey_response.survey_key))

        if duplicates:
            print(f"Skipped {len(duplicates)} already uploaded survey response(s)")
        return {"stored": stored, "duplicate": duplicates}

    @staticmethod
    async def query_data_points(
        session: AsyncSession,
        user_id: str,
        campaign_id: str,
        start: datetime,
        end: datetime,
        prompt_id: str,
        metadata_prompt_ids: Optional[List[str]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Read one user's responses to a prompt, plus any metadata prompts

        Args:
            start: Inclusive lower bound on the survey time
            end: Exclusive upper bound on the survey time
            prompt_id: The data point to read
            metadata_prompt_ids: Other prompts to return alongside it, e.g. a
                "where were you" prompt shown next to a mood rating

        Returns:
            List of data point dicts, oldest first
        """
        prompt_ids = [prompt_id] + [p for p in (metadata_prompt_ids or []) if p != prompt_id]
        result = await execute_with_retry(
            session,
            text("""
                SELECT pr.prompt_id, pr.prompt_type, pr.response, pr.repeatable_set_iteration,
                       pr.repeatable_set_id, sr.msg_timestamp, sr.phone_timezone,
                       sr.latitude, sr.longitude, sr.survey_id
                FROM prompt_responses pr
                INNER JOIN survey_responses sr ON sr.id = pr.survey_response_id
                WHERE sr.user_id = CAST(:user_id AS UUID)
                    AND sr.campaign_id = CAST(:campaign_id AS UUID)
                    AND sr.msg_timestamp >= :start
                    AND sr.msg_timestamp < :end
                    AND pr.prompt_id = ANY(:prompt_ids)
                ORDER BY sr.msg_timestamp ASC, pr.id ASC
            """).bindparams(
                user_id=user_id,
                campaign_id=campaign_id,
                start=start,
                end=end,
                prompt_ids=prompt_ids,
            )
        )
        rows = result.fetchall()
        print(f"Found {len(rows)} data point(s) for prompt {prompt_id}")

        data = []
        for row in rows:
            data.append({
                "prompt_id": row[0],
                "prompt_type": row[1],
                "response": row[2],
                "repeatable_set_iteration": row[3],
                "repeatable_set_id": row[4],
                "timestamp": row[5].isoformat() if row[5] else None,
                "timezone": row[6],
                "latitude": row[7],
                "longitude": row[8],
                "survey_id": row[9],
            })
        return data

    @staticmethod
    async def prompt_timeseries(
        session: AsyncSession,
        campaign_id: str,
        prompt_id: str,
        start: datetime,
        end: datetime,
        user_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Per-day summary of the responses to one prompt

        Numeric prompts report the day's mean, every other prompt type the
        number of responses. Skipped and not displayed responses only count
        towards "count".

        Returns:
            List of {"date", "count", "mean"} dicts in date order
        """
        result = await execute_with_retry(
            session,
            text("""
                SELECT sr.msg_timestamp, pr.prompt_type, pr.response
                FROM prompt_responses pr
                INNER JOIN survey_responses sr ON sr.id = pr.survey_response_id
                WHERE sr.campaign_id = CAST(:campaign_id AS UUID)
                    AND pr.prompt_id = :prompt_id
                    AND sr.msg_timestamp >= :start
                    AND sr.msg_timestamp < :end
                    AND (CAST(:user_id AS UUID) IS NULL OR sr.user_id = CAST(:user_id AS UUID))
                ORDER BY sr.msg_timestamp ASC
            """).bindparams(
                campaign_id=campaign_id,
                prompt_id=prompt_id,
                start=start,
                end=end,
                user_id=user_id,
            )
        )
        return summarize_by_day(result.fetchall())


def summarize_by_day(rows) -> List[Dict[str, Any]]:
    """
    Group (timestamp, prompt_type, response) rows by UTC day

    Returns:
        List of {"date", "count", "mean"} dicts; "mean" is None for
        non-numeric prompts and for days without a numeric value
    """
    days: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
    for timestamp, prompt_type, response in rows:
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        day = timestamp.astimezone(timezone.utc).date().isoformat()
        summary = days.setdefault(day, {"count": 0, "values": []})
        summary["count"] += 1
        if prompt_type in NUMERIC_PROMPT_TYPES:
            value = _numeric(response)
            if value is not None:
                summary["values"].append(value)

    series = []
    for day, summary in days.items():
        values = summary["values"]
        mean = float(sum(values) / len(values)) if values else None
        series.append({"date": day, "count": summary["count"], "mean": mean})
    return series
