# maladireta/services/accounts.py
"""
Account lifecycle: self-registration, login, password reset and the
administrator operations (create/update/delete other accounts).

Deleting an account removes everything it owns in the same transaction.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional

from sqlalchemy import select, delete, update, or_, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from maladireta.auth.security import (
    DUMMY_HASH,
    generate_reset_token,
    hash_password,
    verify_password,
)
from maladireta.core import config
from maladireta.core.db import BULK
from maladireta.core.errors import Conflict, InvalidOrExpiredToken, NotFound, Unauthorized, ValidationError
from maladireta.models.orm import (
    Campaign,
    CampaignAttachment,
    CampaignSend,
    Client,
    EmailConfiguration,
    User,
)
from maladireta.services import email_config_repo, mailer

logger = logging.getLogger("maladireta.accounts")


# ---------- lookups ----------
def normalize_email(email: Optional[str]) -> Optional[str]:
    """Emails are stored and compared lowercased."""
    return email.strip().lower() if email is not None else None


def get_account(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def _ensure_unique(db: Session, username: Optional[str], email: Optional[str], exclude_id: Optional[int] = None):
    if username is not None:
        stmt = select(User.id).where(User.username == username)
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        if db.scalars(stmt).first() is not None:
            raise Conflict(f"Username '{username}' already exists")
    if email is not None:
        stmt = select(User.id).where(func.lower(User.email) == normalize_email(email))
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        if db.scalars(stmt).first() is not None:
            raise Conflict(f"Email '{email}' already exists")


def _commit_account(db: Session, user: User) -> User:
    try:
        db.commit()
    except IntegrityError as e:
        # Lost a race against another registration with the same handle/email
        db.rollback()
        raise Conflict("Username or email already exists") from e
    db.refresh(user)
    return user


# ---------- self-service ----------
def register_self(db: Session, username: str, email: str, password: str) -> User:
    email = normalize_email(email)
    _ensure_unique(db, username, email)
    user = User(
        username=username,
        email=email,
        hashed_password=hash_password(password),
        role="user",
        status="active",
        can_access_direct_mail=config.SELF_REGISTER_DIRECT_MAIL,
        can_access_email_config=config.SELF_REGISTER_EMAIL_CONFIG,
    )
    db.add(user)
    user = _commit_account(db, user)
    logger.info("Registered user '%s' (id=%s)", user.username, user.id)
    return user


def authenticate(db: Session, username: str, password: str) -> User:
    """
    Return the account for valid credentials.

    Unknown usernames, wrong passwords and inactive accounts all raise the
    same Unauthorized error.
    """
    user = db.scalars(select(User).where(User.username == username)).first()
    if user is None:
        verify_password(password, DUMMY_HASH)
        logger.info("Login failed for user '%s'", username)
        raise Unauthorized("Invalid credentials")

    if not verify_password(password, user.hashed_password) or not user.is_active:
        logger.info("Login failed for user '%s'", username)
        raise Unauthorized("Invalid credentials")

    user.last_login = datetime.utcnow()
    db.commit()
    db.refresh(user)
    logger.info("Login success for user '%s' (role=%s)", user.username, user.role)
    return user


@dataclass
class ResetRequestOutcome:
    account_found: bool
    email_sent: bool


def _reset_mail_settings(db: Session, user: User):
    own = email_config_repo.get_active_configuration(db, user.id)
    return own if own is not None else mailer.system_settings()


def request_password_reset(db: Session, email: str) -> ResetRequestOutcome:
    """
    Issue a reset token for the account registered under ``email`` and mail
    the reset link. The caller must answer identically for every outcome.
    """
    user = db.scalars(
        select(User).where(func.lower(User.email) == normalize_email(email))
    ).first()
    if user is None:
        logger.info("Password reset requested for unknown email")
        return ResetRequestOutcome(account_found=False, email_sent=False)

    token = generate_reset_token()
    user.reset_token = token
    user.reset_token_expiry = datetime.utcnow() + timedelta(minutes=config.RESET_TOKEN_TTL_MIN)
    db.commit()

    settings = _reset_mail_settings(db, user)
    if settings is None:
        logger.warning("No SMTP server configured; reset link for user %s not sent", user.id)
        return ResetRequestOutcome(account_found=True, email_sent=False)

    link = f"{config.APP_URL}/reset-password?token={token}"
    body = (
        f"Olá {user.username},\n\n"
        "Recebemos uma solicitação para redefinir a sua senha.\n"
        f"Acesse o link abaixo em até {config.RESET_TOKEN_TTL_MIN} minutos:\n\n"
        f"{link}\n\n"
        "Se você não fez esta solicitação, ignore este e-mail.\n"
    )
    try:
        mailer.send_mail(settings, user.email, "Redefinição de senha", body)
    except mailer.MailDeliveryError as e:
        logger.error("Reset mail for user %s failed: %s", user.id, e)
        return ResetRequestOutcome(account_found=True, email_sent=False)
    return ResetRequestOutcome(account_found=True, email_sent=True)


def consume_password_reset(db: Session, token: str, new_password: str) -> None:
    """
    Set a new password for the holder of a valid, unexpired reset token.

    The token match, expiry check, password change and token removal are a
    single conditional UPDATE, so a token can only be consumed once.
    """
    if not token:
        raise InvalidOrExpiredToken()

    result = db.execute(
        update(User)
        .where(
            User.reset_token == token,
            User.reset_token_expiry.is_not(None),
            User.reset_token_expiry > datetime.utcnow(),
        )
        .values(
            hashed_password=hash_password(new_password),
            reset_token=None,
            reset_token_expiry=None,
            updated_at=datetime.utcnow(),
        ),
        execution_options=BULK,
    )
    if result.rowcount != 1:
        db.rollback()
        raise InvalidOrExpiredToken()
    db.commit()
    logger.info("Password reset completed")


# ---------- administration ----------
def list_all_accounts(db: Session, excluding_id: Optional[int] = None) -> list[User]:
    stmt = select(User).order_by(User.created_at.desc(), User.id.desc())
    if excluding_id is not None:
        stmt = stmt.where(User.id != excluding_id)
    return list(db.scalars(stmt))


def create_account_as_admin(
    db: Session,
    *,
    username: str,
    email: str,
    password: str,
    role: str = "user",
    status: str = "active",
    can_access_direct_mail: bool = False,
    can_access_email_config: bool = False,
) -> User:
    email = normalize_email(email)
    _ensure_unique(db, username, email)
    user = User(
        username=username,
        email=email,
        hashed_password=hash_password(password),
        role=role,
        status=status,
        can_access_direct_mail=can_access_direct_mail,
        can_access_email_config=can_access_email_config,
    )
    db.add(user)
    user = _commit_account(db, user)
    logger.info("Admin created user '%s' (id=%s, role=%s)", user.username, user.id, user.role)
    return user


def update_account_as_admin(db: Session, user_id: int, acting_admin_id: int, **fields) -> User:
    user = get_account(db, user_id)

    if user_id == acting_admin_id:
        if fields.get("role") == "user":
            raise ValidationError("Cannot remove your own admin role")
        if fields.get("status") == "inactive":
            raise ValidationError("Cannot deactivate your own account")

    if fields.get("email") is not None:
        fields["email"] = normalize_email(fields["email"])
    _ensure_unique(db, fields.get("username"), fields.get("email"), exclude_id=user_id)

    password = fields.pop("password", None)
    if password:
        user.hashed_password = hash_password(password)
    for k, v in fields.items():
        if v is not None:
            setattr(user, k, v)
    return _commit_account(db, user)


def _purge_owned(db: Session, owner_ids: Iterable[int]) -> None:
    """Delete every row owned by ``owner_ids`` (caller commits)."""
    owner_ids = list(owner_ids)
    campaign_ids = select(Campaign.id).where(Campaign.owner_id.in_(owner_ids))
    client_ids = select(Client.id).where(Client.owner_id.in_(owner_ids))

    db.execute(
        delete(CampaignSend).where(
            or_(CampaignSend.campaign_id.in_(campaign_ids), CampaignSend.client_id.in_(client_ids))
        ),
        execution_options=BULK,
    )
    db.execute(
        delete(CampaignAttachment).where(CampaignAttachment.campaign_id.in_(campaign_ids)),
        execution_options=BULK,
    )
    db.execute(delete(Campaign).where(Campaign.owner_id.in_(owner_ids)), execution_options=BULK)
    db.execute(delete(Client).where(Client.owner_id.in_(owner_ids)), execution_options=BULK)
    db.execute(
        delete(EmailConfiguration).where(EmailConfiguration.owner_id.in_(owner_ids)),
        execution_options=BULK,
    )


def delete_account(db: Session, user_id: int, acting_admin_id: int) -> bool:
    """Delete an account and all of its data atomically."""
    if user_id == acting_admin_id:
        raise ValidationError("Cannot delete your own account")

    try:
        _purge_owned(db, [user_id])
        result = db.execute(delete(User).where(User.id == user_id), execution_options=BULK)
        if result.rowcount == 0:
            db.rollback()
            return False
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Cascade delete of user %s failed; rolled back", user_id)
        raise
    logger.info("Deleted user %s and owned data", user_id)
    return True


def delete_all_accounts_except(db: Session, admin_id: int) -> int:
    """Delete every account but ``admin_id`` (and their data); return how many went."""
    doomed = list(db.scalars(select(User.id).where(User.id != admin_id)))
    if not doomed:
        return 0

    try:
        _purge_owned(db, doomed)
        result = db.execute(delete(User).where(User.id.in_(doomed)), execution_options=BULK)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Bulk delete of %d users failed; rolled back", len(doomed))
        raise
    logger.info("Admin %s cleared %d users", admin_id, result.rowcount)
    return result.rowcount
