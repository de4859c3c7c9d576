# maladireta/api/email_config.py
"""
Per-account SMTP configuration. Requires the email-config capability.
"""

from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from maladireta.auth.permissions import AuthContext, require_email_config
from maladireta.core.db import get_db
from maladireta.core.errors import NotFound, ValidationError
from maladireta.models.schemas import (
    EmailConfigCreate,
    EmailConfigUpdate,
    EmailConfigResponse,
    EmailConfigTestRequest,
    MessageResponse,
)
from maladireta.services import email_config_repo, mailer

router = APIRouter(prefix="/api/email-config", tags=["email-config"])


@router.get("", response_model=Optional[EmailConfigResponse])
def get_active_config(
    auth: AuthContext = Depends(require_email_config),
    db: Session = Depends(get_db)
):
    """Active configuration of the caller, or null."""
    return email_config_repo.get_active_configuration(db, auth.user_id)


@router.post("", response_model=EmailConfigResponse, status_code=201)
def create_config(
    payload: EmailConfigCreate,
    auth: AuthContext = Depends(require_email_config),
    db: Session = Depends(get_db)
):
    return email_config_repo.create_configuration(db, owner_id=auth.user_id, **payload.model_dump())


@router.post("/test", response_model=MessageResponse)
def test_config(
    payload: EmailConfigTestRequest,
    auth: AuthContext = Depends(require_email_config),
):
    settings = mailer.SmtpSettings(**payload.model_dump(exclude={"to", "is_active"}))
    try:
        if payload.to:
            mailer.send_mail(
                settings,
                payload.to,
                "Teste de configuração",
                "Sua configuração de e-mail está funcionando.",
            )
        else:
            mailer.check_connection(settings)
    except mailer.MailDeliveryError as e:
        raise ValidationError(f"SMTP test failed: {e}")
    return MessageResponse(message="SMTP configuration OK")


@router.put("/{config_id}", response_model=EmailConfigResponse)
def update_config(
    config_id: int,
    payload: EmailConfigUpdate,
    auth: AuthContext = Depends(require_email_config),
    db: Session = Depends(get_db)
):
    return email_config_repo.update_configuration(
        db, config_id, auth.user_id, **payload.model_dump(exclude_unset=True, exclude_none=True)
    )


@router.delete("/{config_id}", status_code=204)
def delete_config(
    config_id: int,
    auth: AuthContext = Depends(require_email_config),
    db: Session = Depends(get_db)
):
    if not email_config_repo.delete_configuration(db, config_id, auth.user_id):
        raise NotFound("Email configuration not found")
    return None
