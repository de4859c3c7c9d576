# maladireta/services/campaigns_repo.py
import logging

from sqlalchemy import select, delete
from sqlalchemy.orm import Session

from maladireta.core.db import BULK
from maladireta.core.errors import NotFound, ValidationError
from maladireta.models.orm import Campaign, CampaignAttachment, CampaignSend
from maladireta.services import clients_repo

logger = logging.getLogger("maladireta.campaigns")


def list_campaigns(db: Session, owner_id: int) -> list[Campaign]:
    stmt = (
        select(Campaign)
        .where(Campaign.owner_id == owner_id)
        .order_by(Campaign.created_at.desc(), Campaign.id.desc())
    )
    return list(db.scalars(stmt))


def get_campaign(db: Session, campaign_id: int, owner_id: int) -> Campaign:
    stmt = select(Campaign).where(Campaign.id == campaign_id, Campaign.owner_id == owner_id)
    obj = db.scalars(stmt).first()
    if obj is None:
        raise NotFound("Campaign not found")
    return obj


def create_campaign(db: Session, *, owner_id: int, **fields) -> Campaign:
    obj = Campaign(**fields, owner_id=owner_id)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def update_campaign(db: Session, campaign_id: int, owner_id: int, **fields) -> Campaign:
    obj = get_campaign(db, campaign_id, owner_id)
    for k, v in fields.items():
        setattr(obj, k, v)
    db.commit()
    db.refresh(obj)
    return obj


def delete_campaign(db: Session, campaign_id: int, owner_id: int) -> bool:
    owned = select(Campaign.id).where(Campaign.id == campaign_id, Campaign.owner_id == owner_id)
    db.execute(
        delete(CampaignAttachment).where(CampaignAttachment.campaign_id.in_(owned)),
        execution_options=BULK,
    )
    db.execute(
        delete(CampaignSend).where(CampaignSend.campaign_id.in_(owned)),
        execution_options=BULK,
    )
    result = db.execute(
        delete(Campaign).where(Campaign.id == campaign_id, Campaign.owner_id == owner_id),
        execution_options=BULK,
    )
    db.commit()
    return result.rowcount > 0


def request_send(db: Session, campaign_id: int, owner_id: int, client_ids: list[int]) -> int:
    """
    Accept a send request for an owned campaign and return the recipient count.

    Delivery itself is not performed. Every recipient must be one of the
    owner's clients; foreign or unknown ids are rejected as a whole.
    """
    campaign = get_campaign(db, campaign_id, owner_id)
    wanted = set(client_ids)
    if not wanted:
        raise ValidationError("Client ids are required", fields={"client_ids": "empty"})

    owned = clients_repo.owned_client_ids(db, owner_id, list(wanted))
    missing = wanted - owned
    if missing:
        raise ValidationError(
            "Some clients were not found",
            fields={"client_ids": sorted(missing)},
        )

    logger.info(
        "Campaign %s (%s) queued for %d recipients by owner %s",
        campaign.id, campaign.channel, len(owned), owner_id,
    )
    return len(owned)
