# maladireta/api/campaigns.py
"""
Direct-mail campaign endpoints. Requires the direct-mail capability.
"""

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from maladireta.auth.permissions import AuthContext, require_direct_mail
from maladireta.core.db import get_db
from maladireta.core.errors import NotFound
from maladireta.models.schemas import (
    CampaignCreate,
    CampaignUpdate,
    CampaignResponse,
    CampaignSendRequest,
    CampaignSendResponse,
)
from maladireta.services import campaigns_repo

router = APIRouter(prefix="/api/campaigns", tags=["campaigns"])


@router.get("", response_model=List[CampaignResponse])
def list_campaigns(
    auth: AuthContext = Depends(require_direct_mail),
    db: Session = Depends(get_db)
):
    return campaigns_repo.list_campaigns(db, auth.user_id)


@router.post("", response_model=CampaignResponse, status_code=201)
def create_campaign(
    payload: CampaignCreate,
    auth: AuthContext = Depends(require_direct_mail),
    db: Session = Depends(get_db)
):
    return campaigns_repo.create_campaign(db, owner_id=auth.user_id, **payload.model_dump())


@router.get("/{campaign_id}", response_model=CampaignResponse)
def get_campaign(
    campaign_id: int,
    auth: AuthContext = Depends(require_direct_mail),
    db: Session = Depends(get_db)
):
    return campaigns_repo.get_campaign(db, campaign_id, auth.user_id)


@router.put("/{campaign_id}", response_model=CampaignResponse)
def update_campaign(
    campaign_id: int,
    payload: CampaignUpdate,
    auth: AuthContext = Depends(require_direct_mail),
    db: Session = Depends(get_db)
):
    return campaigns_repo.update_campaign(
        db, campaign_id, auth.user_id, **payload.model_dump(exclude_unset=True, exclude_none=True)
    )


@router.delete("/{campaign_id}", status_code=204)
def delete_campaign(
    campaign_id: int,
    auth: AuthContext = Depends(require_direct_mail),
    db: Session = Depends(get_db)
):
    if not campaigns_repo.delete_campaign(db, campaign_id, auth.user_id):
        raise NotFound("Campaign not found")
    return None


@router.post("/{campaign_id}/send", response_model=CampaignSendResponse)
def send_campaign(
    campaign_id: int,
    payload: CampaignSendRequest,
    auth: AuthContext = Depends(require_direct_mail),
    db: Session = Depends(get_db)
):
    """
    Acknowledge a send request. Messages are not dispatched yet; the
    response only confirms the campaign and recipients were accepted.
    """
    count = campaigns_repo.request_send(db, campaign_id, auth.user_id, payload.client_ids)
    return CampaignSendResponse(
        message="Campaign scheduled for sending",
        campaign_id=campaign_id,
        recipient_count=count,
    )
