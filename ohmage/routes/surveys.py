"""
Survey upload endpoints
"""
from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.responses import JSONResponse
from typing import Optional

from ohmage.config import settings
from ohmage.models.schemas import SurveyUploadPayload
from ohmage.database.connection import require_session
from ohmage.domain.exceptions import DomainError
from ohmage.domain.survey_response import SurveyResponse
from ohmage.services.campaign_service import CampaignService
from ohmage.services.firebase_auth import get_current_user
from ohmage.services.survey_service import SurveyResponseService
from ohmage.services.user_service import UserService
from ohmage.utils.validators import validate_client, validate_campaign_urn

router = APIRouter()


@router.post("/survey/upload")
async def upload_surveys(
    payload: SurveyUploadPayload,
    x_client: Optional[str] = Header(None),
    user: dict = Depends(get_current_user)
):
    """
    Validate and store survey responses for a running campaign.
    The whole upload is rejected if any survey response is invalid.
    """
    client = validate_client(x_client)
    campaign_urn = validate_campaign_urn(payload.campaign_urn)

    if not payload.surveys:
        raise HTTPException(status_code=400, detail="No survey responses in the upload")
    if len(payload.surveys) > settings.MAX_SURVEY_UPLOAD:
        raise HTTPException(
            status_code=400,
            detail=f"Too many survey responses in one upload (max {settings.MAX_SURVEY_UPLOAD})"
        )

    session_maker = require_session()

    try:
        async with session_maker() as session:
            async with session.begin():
                user_id = await UserService.get_or_create_user(session, user["uid"], user.get("email"))
                row = await CampaignService.get_campaign_row(session, campaign_urn)
                if row is None:
                    raise HTTPException(status_code=404, detail=f"Unknown campaign: {campaign_urn}")

                campaign = CampaignService.campaign_from_row(row)
                if not campaign.is_running():
                    raise DomainError(f"The campaign '{campaign_urn}' is not running.")

                survey_responses = [SurveyResponse.from_dict(campaign, data) for data in payload.surveys]
                keys = [response.survey_key for response in survey_responses]
                if len(set(keys)) != len(keys):
                    raise DomainError("The upload contains the same survey key more than once.")

                result = await SurveyResponseService.store(
                    session, user_id, row["id"], client, survey_responses
                )
        print(f"Stored {len(result['stored'])} survey response(s) for campaign {campaign_urn}")
        return {"status": "ok", **result}
    except HTTPException:
        raise
    except DomainError as e:
        print(f"Rejected survey upload for {campaign_urn}: {e.message}")
        return JSONResponse(status_code=400, content={"status": "error", "detail": e.message})
    except Exception as e:
        import traceback
        error_msg = str(e)
        error_type = type(e).__name__
        print(f"Error in uploadSurveys: {error_type}: {error_msg}")
        traceback.print_exc()
        return JSONResponse(
            status_code=500,
            content={"status": "error", "detail": error_msg, "error_type": error_type}
        )
