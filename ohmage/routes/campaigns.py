"""
Campaign endpoints
"""
from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.responses import JSONResponse
from typing import Optional

from ohmage.models.schemas import CampaignCreatePayload, CampaignUpdatePayload, CampaignDeletePayload
from ohmage.database.connection import require_session
from ohmage.domain.campaign.campaign import PrivacyState
from ohmage.domain.campaign.xml_parser import parse_campaign
from ohmage.domain.exceptions import DomainError
from ohmage.services.campaign_service import CampaignService
from ohmage.services.firebase_auth import get_current_user
from ohmage.services.user_service import UserService
from ohmage.utils.validators import validate_client, validate_campaign_urn

router = APIRouter()


@router.post("/campaign/create")
async def create_campaign(
    payload: CampaignCreatePayload,
    x_client: Optional[str] = Header(None),
    user: dict = Depends(get_current_user)
):
    """Create a campaign from its XML configuration"""
    validate_client(x_client)

    try:
        campaign = parse_campaign(
            payload.xml,
            running_state=payload.running_state,
            privacy_state=payload.privacy_state,
            description=payload.description,
        )
    except DomainError as e:
        return JSONResponse(status_code=400, content={"status": "error", "detail": e.message})

    session_maker = require_session()

    try:
        async with session_maker() as session:
            async with session.begin():
                user_id = await UserService.get_or_create_user(session, user["uid"], user.get("email"))
                campaign_id = await CampaignService.insert_campaign(session, campaign, user_id)
        if campaign_id is None:
            return JSONResponse(
                status_code=409,
                content={"status": "error", "detail": f"The campaign '{campaign.urn}' already exists."}
            )
        print(f"Campaign {campaign.urn} created by user {user_id}")
        return {"status": "ok", "id": campaign_id, "campaign": campaign.to_dict(include_surveys=False)}
    except HTTPException:
        raise
    except Exception as e:
        import traceback
        error_msg = str(e)
        error_type = type(e).__name__
        print(f"Error in createCampaign: {error_type}: {error_msg}")
        traceback.print_exc()
        return JSONResponse(
            status_code=500,
            content={"status": "error", "detail": error_msg, "error_type": error_type}
        )


@router.get("/campaign/read")
async def read_campaign(
    campaign_urn: Optional[str] = None,
    x_client: Optional[str] = Header(None),
    user: dict = Depends(get_current_user)
):
    """
    Read a campaign's configuration.
    Private campaigns are only visible to the user who created them.
    """
    validate_client(x_client)
    campaign_urn = validate_campaign_urn(campaign_urn)
    session_maker = require_session()

    try:
        async with session_maker() as session:
            async with session.begin():
                user_id = await UserService.get_or_create_user(session, user["uid"], user.get("email"))
                row = await CampaignService.get_campaign_row(session, campaign_urn)

        if row is None:
            raise HTTPException(status_code=404, detail=f"Unknown campaign: {campaign_urn}")
        if row["privacy_state"] == PrivacyState.PRIVATE.value and row["created_by"] != user_id:
            raise HTTPException(status_code=403, detail="The campaign is private")

        campaign = CampaignService.campaign_from_row(row)
        return {
            "status": "ok",
            "campaign": campaign.to_dict(),
            "xml": row["xml"],
            "created_at": row["created_at"].isoformat() if row["created_at"] else None,
        }
    except HTTPException:
        raise
    except DomainError as e:
        return JSONResponse(status_code=400, content={"status": "error", "detail": e.message})
    except Exception as e:
        import traceback
        error_msg = str(e)
        error_type = type(e).__name__
        print(f"Error in readCampaign: {error_type}: {error_msg}")
        traceback.print_exc()
        return JSONResponse(
            status_code=500,
            content={"status": "error", "detail": error_msg, "error_type": error_type}
        )


@router.post("/campaign/update")
async def update_campaign(
    payload: CampaignUpdatePayload,
    x_client: Optional[str] = Header(None),
    user: dict = Depends(get_current_user)
):
    """
    Update a campaign's XML, states or description.
    Only the creator may update a campaign, and the XML is frozen once
    responses exist.
    """
    validate_client(x_client)
    campaign_urn = validate_campaign_urn(payload.campaign_urn)
    if payload.xml is None and payload.running_state is None \
            and payload.privacy_state is None and payload.description is None:
        raise HTTPException(status_code=400, detail="Nothing to update")
    session_maker = require_session()

    try:
        async with session_maker() as session:
            async with session.begin():
                user_id = await UserService.get_or_create_user(session, user["uid"], user.get("email"))
                row = await CampaignService.get_campaign_row(session, campaign_urn)
                if row is None:
                    raise HTTPException(status_code=404, detail=f"Unknown campaign: {campaign_urn}")
                if row["created_by"] != user_id:
                    raise HTTPException(status_code=403, detail="Only the campaign's creator may update it")

                campaign = await CampaignService.update_campaign(
                    session,
                    row,
                    xml=payload.xml,
                    running_state=payload.running_state,
                    privacy_state=payload.privacy_state,
                    description=payload.description,
                )
        return {"status": "ok", "campaign": campaign.to_dict(include_surveys=False)}
    except HTTPException:
        raise
    except DomainError as e:
        return JSONResponse(status_code=400, content={"status": "error", "detail": e.message})
    except Exception as e:
        import traceback
        error_msg = str(e)
        error_type = type(e).__name__
        print(f"Error in updateCampaign: {error_type}: {error_msg}")
        traceback.print_exc()
        return JSONResponse(
            status_code=500,
            content={"status": "error", "detail": error_msg, "error_type": error_type}
        )


@router.post("/campaign/delete")
async def delete_campaign(
    payload: CampaignDeletePayload,
    x_client: Optional[str] = Header(None),
    user: dict = Depends(get_current_user)
):
    """Delete a campaign and every response uploaded to it (creator only)"""
    validate_client(x_client)
    campaign_urn = validate_campaign_urn(payload.campaign_urn)
    session_maker = require_session()

    try:
        async with session_maker() as session:
            async with session.begin():
                user_id = await UserService.get_or_create_user(session, user["uid"], user.get("email"))
                row = await CampaignService.get_campaign_row(session, campaign_urn)
                if row is None:
                    raise HTTPException(status_code=404, detail=f"Unknown campaign: {campaign_urn}")
                if row["created_by"] != user_id:
                    raise HTTPException(status_code=403, detail="Only the campaign's creator may delete it")
                await CampaignService.delete_campaign(session, row["id"])
        print(f"Campaign {campaign_urn} deleted by user {user_id}")
        return {"status": "ok"}
    except HTTPException:
        raise
    except Exception as e:
        import traceback
        error_msg = str(e)
        error_type = type(e).__name__
        print(f"Error in deleteCampaign: {error_type}: {error_msg}")
        traceback.print_exc()
        return JSONResponse(
            status_code=500,
            content={"status": "error", "detail": error_msg, "error_type": error_type}
        )
