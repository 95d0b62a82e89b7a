"""
Visualization endpoints
"""
from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.responses import JSONResponse
from typing import Optional

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


@router.get("/viz/prompt_timeseries")
async def prompt_timeseries(
    campaign_urn: Optional[str] = None,
    prompt_id: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    x_client: Optional[str] = Header(None),
    user: dict = Depends(get_current_user)
):
    """
    Get a per-day series of the responses to one prompt.
    The campaign's creator sees every participant, everybody else only
    their own responses.
    """
    validate_client(x_client)
    campaign_urn = validate_campaign_urn(campaign_urn)
    prompt_id = validate_prompt_id(prompt_id)
    start, end = validate_date_range(start_date, end_date)
    session_maker = require_session()

    try:
        async with session_maker() as session:
            async with session.begin():
                user_id = await UserService.get_or_create_user(session, user["uid"], user.get("email"))
                row = await CampaignService.get_campaign_row(session, campaign_urn)
                if row is None:
                    raise HTTPException(status_code=404, detail=f"Unknown campaign: {campaign_urn}")

                campaign = CampaignService.campaign_from_row(row)
                prompts = campaign.find_prompts(prompt_id)
                if not prompts:
                    raise HTTPException(status_code=400, detail=f"The campaign has no prompt '{prompt_id}'")

                series = await SurveyResponseService.prompt_timeseries(
                    session,
                    row["id"],
                    prompt_id,
                    start,
                    end,
                    user_id=None if row["created_by"] == user_id else user_id,
                )
        return {
            "status": "ok",
            "prompt_id": prompt_id,
            "prompt_type": str(prompts[0].prompt_type),
            "data": series,
        }
    except HTTPException:
        raise
    except DomainError as e:
        return JSONResponse(status_code=400, content={"status": "error", "detail": e.message})
    except Exception as e:
        import traceback
        error_msg = str(e)
        error_type = type(e).__name__
        print(f"Error in promptTimeseries: {error_type}: {error_msg}")
        traceback.print_exc()
        return JSONResponse(
            status_code=500,
            content={"status": "error", "detail": error_msg, "error_type": error_type}
        )
