"""
Mobility endpoints
"""
from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.responses import JSONResponse
from typing import Optional

from ohmage.config import settings
from ohmage.models.schemas import MobilityUploadPayload
from ohmage.database.connection import require_session
from ohmage.domain.exceptions import DomainError
from ohmage.domain.mobility import MobilityPoint
from ohmage.domain.utils import parse_bool
from ohmage.services.firebase_auth import get_current_user
from ohmage.services.mobility_service import MobilityService
from ohmage.services.user_service import UserService
from ohmage.utils.validators import validate_client, validate_date_range

router = APIRouter()


@router.post("/mobility/upload")
async def upload_mobility(
    payload: MobilityUploadPayload,
    x_client: Optional[str] = Header(None),
    user: dict = Depends(get_current_user)
):
    """Validate and store mobility points; one invalid point rejects the upload"""
    client = validate_client(x_client)
    if not payload.data:
        raise HTTPException(status_code=400, detail="No mobility points in the upload")
    if len(payload.data) > settings.MAX_MOBILITY_UPLOAD:
        raise HTTPException(
            status_code=400,
            detail=f"Too many mobility points in one upload (max {settings.MAX_MOBILITY_UPLOAD})"
        )

    try:
        points = [MobilityPoint.from_dict(data) for data in payload.data]
    except DomainError as e:
        return JSONResponse(status_code=400, content={"status": "error", "detail": e.message})

    session_maker = require_session()

    try:
        async with session_maker() as session:
            async with session.begin():
                user_id = await UserService.get_or_create_user(session, user["uid"], user.get("email"))
                stored = await MobilityService.store(session, user_id, client, points)
        return {"status": "ok", "stored": stored, "duplicate": len(points) - stored}
    except HTTPException:
        raise
    except Exception as e:
        import traceback
        error_msg = str(e)
        error_type = type(e).__name__
        print(f"Error in uploadMobility: {error_type}: {error_msg}")
        traceback.print_exc()
        return JSONResponse(
            status_code=500,
            content={"status": "error", "detail": error_msg, "error_type": error_type}
        )


@router.get("/mobility/read")
async def read_mobility(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    with_sensor_data: Optional[str] = None,
    x_client: Optional[str] = Header(None),
    user: dict = Depends(get_current_user)
):
    """Get the current user's mobility points between two dates"""
    validate_client(x_client)
    start, end = validate_date_range(start_date, end_date)
    try:
        include_sensor_data = parse_bool(with_sensor_data, "with_sensor_data") if with_sensor_data else False
    except DomainError as e:
        raise HTTPException(status_code=400, detail=e.message)
    session_maker = require_session()

    try:
        async with session_maker() as session:
            async with session.begin():
                user_id = await UserService.get_or_create_user(session, user["uid"], user.get("email"))
                points = await MobilityService.read(session, user_id, start, end, include_sensor_data)
        return {"status": "ok", "data": points}
    except HTTPException:
        raise
    except Exception as e:
        import traceback
        error_msg = str(e)
        error_type = type(e).__name__
        print(f"Error in readMobility: {error_type}: {error_msg}")
        traceback.print_exc()
        return JSONResponse(
            status_code=500,
            content={"status": "error", "detail": error_msg, "error_type": error_type}
        )
