"""
Pydantic models for request/response validation
"""
from typing import Optional, List
from pydantic import BaseModel


class CampaignCreatePayload(BaseModel):
    """New campaign: the XML configuration plus its initial states"""
    xml: str
    running_state: str = "running"
    privacy_state: str = "private"
    description: Optional[str] = None


class CampaignUpdatePayload(BaseModel):
    """Campaign update; omitted fields keep their stored value"""
    campaign_urn: str
    xml: Optional[str] = None
    running_state: Optional[str] = None
    privacy_state: Optional[str] = None
    description: Optional[str] = None


class CampaignDeletePayload(BaseModel):
    """Campaign deletion"""
    campaign_urn: str


class SurveyUploadPayload(BaseModel):
    """Survey responses uploaded by a client"""
    campaign_urn: str
    surveys: List[dict]  # Validated by SurveyResponse.from_dict


class MobilityUploadPayload(BaseModel):
    """Mobility points uploaded by a client"""
    data: List[dict]  # Validated by MobilityPoint.from_dict
