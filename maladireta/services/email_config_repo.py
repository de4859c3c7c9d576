# maladireta/services/email_config_repo.py
"""
Per-account SMTP settings.

An account has at most one active configuration. Activating a row (on create
or update) deactivates the owner's other rows in the same transaction, so a
concurrent reader sees either the old active row or the new one.
"""
import logging
from typing import Optional

from sqlalchemy import select, update, delete
from sqlalchemy.orm import Session

from maladireta.core.db import BULK
from maladireta.core.errors import NotFound
from maladireta.models.orm import EmailConfiguration

logger = logging.getLogger("maladireta.email_config")


def _deactivate_others(db: Session, owner_id: int, keep_id: Optional[int] = None) -> None:
    stmt = (
        update(EmailConfiguration)
        .where(EmailConfiguration.owner_id == owner_id, EmailConfiguration.is_active.is_(True))
        .values(is_active=False)
    )
    if keep_id is not None:
        stmt = stmt.where(EmailConfiguration.id != keep_id)
    db.execute(stmt, execution_options=BULK)


def list_configurations(db: Session, owner_id: int) -> list[EmailConfiguration]:
    stmt = (
        select(EmailConfiguration)
        .where(EmailConfiguration.owner_id == owner_id)
        .order_by(EmailConfiguration.created_at.desc(), EmailConfiguration.id.desc())
    )
    return list(db.scalars(stmt))


def get_active_configuration(db: Session, owner_id: int) -> Optional[EmailConfiguration]:
    stmt = (
        select(EmailConfiguration)
        .where(EmailConfiguration.owner_id == owner_id, EmailConfiguration.is_active.is_(True))
        .order_by(EmailConfiguration.id.desc())
        .limit(1)
    )
    return db.scalars(stmt).first()


def get_configuration(db: Session, config_id: int, owner_id: int) -> EmailConfiguration:
    stmt = select(EmailConfiguration).where(
        EmailConfiguration.id == config_id, EmailConfiguration.owner_id == owner_id
    )
    obj = db.scalars(stmt).first()
    if obj is None:
        raise NotFound("Email configuration not found")
    return obj


def create_configuration(db: Session, *, owner_id: int, **fields) -> EmailConfiguration:
    obj = EmailConfiguration(**fields, owner_id=owner_id)
    try:
        if obj.is_active is not False:
            obj.is_active = True
            _deactivate_others(db, owner_id)
        db.add(obj)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(obj)
    logger.info("Email configuration %s created for owner %s (active=%s)", obj.id, owner_id, obj.is_active)
    return obj


def update_configuration(db: Session, config_id: int, owner_id: int, **fields) -> EmailConfiguration:
    obj = get_configuration(db, config_id, owner_id)
    # Blank password means "keep the stored one"
    if not fields.get("smtp_pass"):
        fields.pop("smtp_pass", None)
    try:
        for k, v in fields.items():
            setattr(obj, k, v)
        if fields.get("is_active"):
            _deactivate_others(db, owner_id, keep_id=obj.id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(obj)
    return obj


def delete_configuration(db: Session, config_id: int, owner_id: int) -> bool:
    result = db.execute(
        delete(EmailConfiguration).where(
            EmailConfiguration.id == config_id, EmailConfiguration.owner_id == owner_id
        ),
        execution_options=BULK,
    )
    db.commit()
    return result.rowcount > 0
