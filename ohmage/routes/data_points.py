"""
Data point endpoints
"""
from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.responses import JSONResponse
from typing import Optional, List

from ohmage.database.connection import require_session
from ohmage.domain.exceptions import DomainError
from ohmage.services.campaign_service import CampaignService
from ohmage.services.firebase_auth import get_current_user
from ohmage.services.survey_service import SurveyResponseService
from ohmage.services.user_service import UserService
from ohmage.utils.validators import (
    validate_client,
    validate_campaign_urn,
    validate_date_range,
    validate_prompt_id,
)

router = APIRouter()


def parse_metadata_prompt_ids(value: Optional[str]) -> List[str]:
    """Split a comma separated list of prompt ids, dropping blanks"""
    if not value:
        return []
    return [validate_prompt_id(part) for part in value.split(",") if part.strip()]


@router.get("/data_point/read")
async def read_data_points(
    campaign_urn: Optional[str] = None,
    prompt_id: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    metadata_prompt_ids: Optional[str] = None,
    x_client: Optional[str] = Header(None),
    user: dict = Depends(get_current_user)
):
    """
    Get the current user's responses to one prompt between two dates.
    Responses to the metadata prompts are returned alongside.
    """
    validate_client(x_client)
    campaign_urn = validate_campaign_urn(campaign_urn)
    prompt_id = validate_prompt_id(prompt_id)
    start, end = validate_date_range(start_date, end_date)
    metadata_ids = parse_metadata_prompt_ids(metadata_prompt_ids)
    session_maker = require_session()

    try:
        async with session_maker() as session:
            async with session.begin():
                user_id = await UserService.get_or_create_user(session, user["uid"], user.get("email"))
                row = await CampaignService.get_campaign_row(session, campaign_urn)
                if row is None:
                    raise HTTPException(status_code=404, detail=f"Unknown campaign: {campaign_urn}")

                campaign = CampaignService.campaign_from_row(row)
                for requested in [prompt_id] + metadata_ids:
                    if not campaign.find_prompts(requested):
                        raise HTTPException(
                            status_code=400,
                            detail=f"The campaign has no prompt '{requested}'"
                        )

                data = await SurveyResponseService.query_data_points(
                    session, user_id, row["id"], start, end, prompt_id, metadata_ids
                )
        return {"status": "ok", "data": data}
    except HTTPException:
        raise
    except DomainError as e:
        return JSONResponse(status_code=400, content={"status": "error", "detail": e.message})
    except Exception as e:
        import traceback
        error_msg = str(e)
        error_type = type(e).__name__
        print(f"Error in readDataPoints: {error_type}: {error_msg}")
        traceback.print_exc()
        return JSONResponse(
            status_code=500,
            content={"status": "error", "detail": error_msg, "error_type": error_type}
        )
