# maladireta/models/schemas.py
from datetime import datetime, date
from typing import Optional, List, Literal
from pydantic import BaseModel, Field, field_validator

EMAIL_PATTERN = r"^[\w\.\+-]+@[\w\.-]+\.\w+$"  # Basic email validation

# bcrypt only hashes the first 72 bytes and newer releases reject anything longer
PASSWORD_MAX_BYTES = 72


def _password_fits_bcrypt(v: Optional[str]) -> Optional[str]:
    if v is not None and len(v.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"password must be at most {PASSWORD_MAX_BYTES} bytes")
    return v


# ---------- Account Schemas ----------
class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=80)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=6, max_length=72)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v):
        return _password_fits_bcrypt(v)


class LoginRequest(BaseModel):
    username: str
    password: str


class ForgotPasswordRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6, max_length=72)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v):
        return _password_fits_bcrypt(v)


class UserBase(BaseModel):
    username: str = Field(..., min_length=3, max_length=80)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    role: Literal["admin", "user"] = "user"
    status: Literal["active", "inactive"] = "active"
    can_access_direct_mail: bool = False
    can_access_email_config: bool = False


class UserCreate(UserBase):
    password: str = Field(..., min_length=6, max_length=72)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v):
        return _password_fits_bcrypt(v)


class UserUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=3, max_length=80)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    password: Optional[str] = Field(None, min_length=6, max_length=72)
    role: Optional[Literal["admin", "user"]] = None
    status: Optional[Literal["active", "inactive"]] = None
    can_access_direct_mail: Optional[bool] = None
    can_access_email_config: Optional[bool] = None

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v):
        return _password_fits_bcrypt(v)


class UserResponse(BaseModel):
    """Stored account as returned to clients; input rules are not re-applied."""
    id: int
    username: str
    email: str
    role: str
    status: str
    can_access_direct_mail: bool
    can_access_email_config: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserResponse


class ClearAllResponse(BaseModel):
    deleted: int


# ---------- Client Schemas ----------
class ClientBase(BaseModel):
    # Identity
    name: str = Field(..., min_length=1, max_length=160)
    client_type: Literal["PF", "PJ"] = "PF"
    tax_id: Optional[str] = Field(None, max_length=32)
    registration_id: Optional[str] = Field(None, max_length=32)
    birth_date: Optional[date] = None
    gender: Optional[Literal["M", "F", "Outro", "Prefiro não informar"]] = None

    # Contact
    email: str = Field(..., pattern=EMAIL_PATTERN)
    landline_phone: Optional[str] = Field(None, max_length=40)
    mobile_phone: Optional[str] = Field(None, max_length=40)
    website: Optional[str] = Field(None, pattern=r"^https?://\S+$", max_length=255)

    # Address
    zip_code: Optional[str] = Field(None, max_length=20)
    street: Optional[str] = Field(None, max_length=160)
    number: Optional[str] = Field(None, max_length=20)
    complement: Optional[str] = Field(None, max_length=120)
    neighborhood: Optional[str] = Field(None, max_length=120)
    city: Optional[str] = Field(None, max_length=120)
    state: Optional[str] = Field(None, max_length=60)
    country: Optional[str] = Field("Brasil", max_length=60)

    # Main contact person
    contact_name: Optional[str] = Field(None, max_length=160)
    contact_position: Optional[str] = Field(None, max_length=120)
    contact_phone: Optional[str] = Field(None, max_length=40)
    contact_email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)

    # Commercial data
    business_area: Optional[str] = Field(None, max_length=120)
    classification: Literal["potential", "active", "inactive"] = "potential"
    client_origin: Optional[str] = Field(None, max_length=120)
    status: Literal["active", "inactive"] = "active"

    # Notes
    notes: Optional[str] = None
    preferences: Optional[str] = None
    service_history: Optional[str] = None


class ClientCreate(ClientBase):
    pass


class ClientUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=160)
    client_type: Optional[Literal["PF", "PJ"]] = None
    tax_id: Optional[str] = Field(None, max_length=32)
    registration_id: Optional[str] = Field(None, max_length=32)
    birth_date: Optional[date] = None
    gender: Optional[Literal["M", "F", "Outro", "Prefiro não informar"]] = None
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    landline_phone: Optional[str] = Field(None, max_length=40)
    mobile_phone: Optional[str] = Field(None, max_length=40)
    website: Optional[str] = Field(None, pattern=r"^https?://\S+$", max_length=255)
    zip_code: Optional[str] = Field(None, max_length=20)
    street: Optional[str] = Field(None, max_length=160)
    number: Optional[str] = Field(None, max_length=20)
    complement: Optional[str] = Field(None, max_length=120)
    neighborhood: Optional[str] = Field(None, max_length=120)
    city: Optional[str] = Field(None, max_length=120)
    state: Optional[str] = Field(None, max_length=60)
    country: Optional[str] = Field(None, max_length=60)
    contact_name: Optional[str] = Field(None, max_length=160)
    contact_position: Optional[str] = Field(None, max_length=120)
    contact_phone: Optional[str] = Field(None, max_length=40)
    contact_email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    business_area: Optional[str] = Field(None, max_length=120)
    classification: Optional[Literal["potential", "active", "inactive"]] = None
    client_origin: Optional[str] = Field(None, max_length=120)
    status: Optional[Literal["active", "inactive"]] = None
    notes: Optional[str] = None
    preferences: Optional[str] = None
    service_history: Optional[str] = None


class ClientResponse(ClientBase):
    id: int
    owner_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ---------- Campaign Schemas ----------
class CampaignBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=160)
    channel: Literal["email", "whatsapp"] = "email"
    subject: Optional[str] = Field(None, max_length=255)
    body: str = Field(..., min_length=1)
    status: Literal["draft", "scheduled", "sent"] = "draft"


class CampaignCreate(CampaignBase):
    pass


class CampaignUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=160)
    channel: Optional[Literal["email", "whatsapp"]] = None
    subject: Optional[str] = Field(None, max_length=255)
    body: Optional[str] = Field(None, min_length=1)
    status: Optional[Literal["draft", "scheduled", "sent"]] = None


class CampaignResponse(CampaignBase):
    id: int
    owner_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CampaignSendRequest(BaseModel):
    client_ids: List[int] = Field(..., min_length=1)


class CampaignSendResponse(BaseModel):
    message: str
    campaign_id: int
    recipient_count: int


# ---------- Email Configuration Schemas ----------
class EmailConfigBase(BaseModel):
    smtp_host: str = Field(..., min_length=1, max_length=255)
    smtp_port: int = Field(587, ge=1, le=65535)
    smtp_secure: bool = False
    smtp_user: str = Field(..., min_length=1, max_length=255)
    from_email: str = Field(..., pattern=EMAIL_PATTERN)
    from_name: Optional[str] = Field(None, max_length=160)
    is_active: bool = True


class EmailConfigCreate(EmailConfigBase):
    smtp_pass: str = Field(..., min_length=1, max_length=255)


class EmailConfigUpdate(BaseModel):
    smtp_host: Optional[str] = Field(None, min_length=1, max_length=255)
    smtp_port: Optional[int] = Field(None, ge=1, le=65535)
    smtp_secure: Optional[bool] = None
    smtp_user: Optional[str] = Field(None, min_length=1, max_length=255)
    # Empty password keeps the stored one (the UI never receives it back)
    smtp_pass: Optional[str] = Field(None, max_length=255)
    from_email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    from_name: Optional[str] = Field(None, max_length=160)
    is_active: Optional[bool] = None


class EmailConfigResponse(EmailConfigBase):
    """SMTP settings as shown to their owner; the password is never returned."""
    id: int
    owner_id: int
    has_password: bool = False
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class EmailConfigTestRequest(EmailConfigCreate):
    to: Optional[str] = Field(None, pattern=EMAIL_PATTERN)


class MessageResponse(BaseModel):
    message: str
