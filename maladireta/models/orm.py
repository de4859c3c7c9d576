# maladireta/models/orm.py
from __future__ import annotations

from datetime import datetime, date
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    Index,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from maladireta.core.db import Base


# ---------- Accounts (Authentication) ----------
class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    username: Mapped[str] = mapped_column(String(80), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(160), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))

    # Role: 'admin' (manages other accounts) or 'user' (own data only)
    role: Mapped[str] = mapped_column(String(20), default="user")
    # Account status, distinct from Client.status
    status: Mapped[str] = mapped_column(String(20), default="active")

    # Capability flags, only consulted for role='user'
    can_access_direct_mail: Mapped[bool] = mapped_column(Boolean, default=True)
    can_access_email_config: Mapped[bool] = mapped_column(Boolean, default=True)

    # Single-use password reset token
    reset_token: Mapped[Optional[str]] = mapped_column(String(128), nullable=True, index=True)
    reset_token_expiry: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Relationships (deletes are issued explicitly by services.accounts)
    clients: Mapped[list["Client"]] = relationship("Client", back_populates="owner")
    campaigns: Mapped[list["Campaign"]] = relationship("Campaign", back_populates="owner")
    email_configurations: Mapped[list["EmailConfiguration"]] = relationship(
        "EmailConfiguration", back_populates="owner"
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'user')", name="chk_users_role"),
        CheckConstraint("status IN ('active', 'inactive')", name="chk_users_status"),
        Index("ix_users_role_status", "role", "status"),
    )


# ---------- Clients (contacts / organizations) ----------
class Client(Base):
    __tablename__ = "clients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )

    # Identity
    name: Mapped[str] = mapped_column(String(160), index=True)
    # 'PF' (person) or 'PJ' (organization)
    client_type: Mapped[str] = mapped_column(String(2), default="PF")
    tax_id: Mapped[Optional[str]] = mapped_column(String(32))  # CPF/CNPJ
    registration_id: Mapped[Optional[str]] = mapped_column(String(32))  # RG/IE
    birth_date: Mapped[Optional[date]] = mapped_column(Date)
    gender: Mapped[Optional[str]] = mapped_column(String(40))

    # Contact
    email: Mapped[str] = mapped_column(String(160))
    landline_phone: Mapped[Optional[str]] = mapped_column(String(40))
    mobile_phone: Mapped[Optional[str]] = mapped_column(String(40))
    website: Mapped[Optional[str]] = mapped_column(String(255))

    # Address
    zip_code: Mapped[Optional[str]] = mapped_column(String(20))
    street: Mapped[Optional[str]] = mapped_column(String(160))
    number: Mapped[Optional[str]] = mapped_column(String(20))
    complement: Mapped[Optional[str]] = mapped_column(String(120))
    neighborhood: Mapped[Optional[str]] = mapped_column(String(120))
    city: Mapped[Optional[str]] = mapped_column(String(120))
    state: Mapped[Optional[str]] = mapped_column(String(60))
    country: Mapped[Optional[str]] = mapped_column(String(60), default="Brasil")

    # Main contact person
    contact_name: Mapped[Optional[str]] = mapped_column(String(160))
    contact_position: Mapped[Optional[str]] = mapped_column(String(120))
    contact_phone: Mapped[Optional[str]] = mapped_column(String(40))
    contact_email: Mapped[Optional[str]] = mapped_column(String(160))

    # Commercial data
    business_area: Mapped[Optional[str]] = mapped_column(String(120))
    classification: Mapped[str] = mapped_column(String(20), default="potential")
    client_origin: Mapped[Optional[str]] = mapped_column(String(120))
    status: Mapped[str] = mapped_column(String(20), default="active")

    # Notes
    notes: Mapped[Optional[str]] = mapped_column(Text)
    preferences: Mapped[Optional[str]] = mapped_column(Text)
    service_history: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    owner: Mapped[User] = relationship("User", back_populates="clients")
    sends: Mapped[list["CampaignSend"]] = relationship(
        "CampaignSend", back_populates="client", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint("client_type IN ('PF', 'PJ')", name="chk_clients_type"),
        CheckConstraint(
            "classification IN ('potential', 'active', 'inactive')",
            name="chk_clients_classification",
        ),
        CheckConstraint("status IN ('active', 'inactive')", name="chk_clients_status"),
        Index("ix_clients_owner_created", "owner_id", "created_at"),
    )


# ---------- Campaigns (mala direta) ----------
class Campaign(Base):
    __tablename__ = "campaigns"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(160))
    # 'email' or 'whatsapp'
    channel: Mapped[str] = mapped_column(String(20), default="email")
    subject: Mapped[Optional[str]] = mapped_column(String(255))
    body: Mapped[str] = mapped_column(Text)
    # 'draft', 'scheduled', 'sent'
    status: Mapped[str] = mapped_column(String(20), default="draft")

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    owner: Mapped[User] = relationship("User", back_populates="campaigns")
    attachments: Mapped[list["CampaignAttachment"]] = relationship(
        "CampaignAttachment", back_populates="campaign", cascade="all, delete-orphan"
    )
    sends: Mapped[list["CampaignSend"]] = relationship(
        "CampaignSend", back_populates="campaign", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint("channel IN ('email', 'whatsapp')", name="chk_campaigns_channel"),
        CheckConstraint("status IN ('draft', 'scheduled', 'sent')", name="chk_campaigns_status"),
        Index("ix_campaigns_owner_created", "owner_id", "created_at"),
    )


class CampaignAttachment(Base):
    __tablename__ = "campaign_attachments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    campaign_id: Mapped[int] = mapped_column(
        ForeignKey("campaigns.id", ondelete="CASCADE"), index=True
    )
    file_name: Mapped[str] = mapped_column(String(255))
    file_path: Mapped[str] = mapped_column(String(512))
    file_size: Mapped[int] = mapped_column(Integer, default=0)
    mime_type: Mapped[Optional[str]] = mapped_column(String(120))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    campaign: Mapped[Campaign] = relationship("Campaign", back_populates="attachments")


class CampaignSend(Base):
    __tablename__ = "campaign_sends"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    campaign_id: Mapped[int] = mapped_column(
        ForeignKey("campaigns.id", ondelete="CASCADE"), index=True
    )
    client_id: Mapped[int] = mapped_column(
        ForeignKey("clients.id", ondelete="CASCADE"), index=True
    )
    # 'pending', 'sent', 'failed'
    status: Mapped[str] = mapped_column(String(20), default="pending")
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    campaign: Mapped[Campaign] = relationship("Campaign", back_populates="sends")
    client: Mapped[Client] = relationship("Client", back_populates="sends")

    __table_args__ = (
        CheckConstraint("status IN ('pending', 'sent', 'failed')", name="chk_sends_status"),
    )


# ---------- Email configuration (per-account SMTP) ----------
class EmailConfiguration(Base):
    __tablename__ = "email_configurations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    smtp_host: Mapped[str] = mapped_column(String(255))
    smtp_port: Mapped[int] = mapped_column(Integer, default=587)
    smtp_secure: Mapped[bool] = mapped_column(Boolean, default=False)
    smtp_user: Mapped[str] = mapped_column(String(255))
    smtp_pass: Mapped[str] = mapped_column(String(255))
    from_email: Mapped[str] = mapped_column(String(160))
    from_name: Mapped[Optional[str]] = mapped_column(String(160))
    # At most one active row per owner (enforced by services.email_config_repo)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    owner: Mapped[User] = relationship("User", back_populates="email_configurations")

    @property
    def has_password(self) -> bool:
        return bool(self.smtp_pass)

    __table_args__ = (
        Index("ix_email_configurations_owner_active", "owner_id", "is_active"),
    )
