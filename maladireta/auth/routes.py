import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .permissions import AuthContext, get_auth_context
from .security import create_token
from maladireta.core.db import get_db
from maladireta.models.orm import User
from maladireta.models.schemas import (
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
    UserResponse,
)
from maladireta.services import accounts

router = APIRouter(prefix="/api", tags=["auth"])
logger = logging.getLogger("maladireta.auth.routes")

RESET_REQUESTED = "If the email is registered, a reset link has been sent."


def _issue(user: User) -> LoginResponse:
    token = create_token(
        {
            "sub": user.username,
            "user_id": user.id,
            "role": user.role,
        }
    )
    return LoginResponse(token=token, user=UserResponse.model_validate(user))


@router.post("/register", response_model=LoginResponse, status_code=201)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    user = accounts.register_self(db, payload.username, payload.email, payload.password)
    return _issue(user)


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = accounts.authenticate(db, payload.username, payload.password)
    return _issue(user)


@router.post("/logout", response_model=MessageResponse)
def logout(auth: AuthContext = Depends(get_auth_context)):
    # Tokens are stateless; the client drops it
    logger.info("Logout for user '%s'", auth.username)
    return MessageResponse(message="Logged out")


@router.get("/user", response_model=UserResponse)
def me(auth: AuthContext = Depends(get_auth_context)):
    return auth.user


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(payload: ForgotPasswordRequest, db: Session = Depends(get_db)):
    outcome = accounts.request_password_reset(db, payload.email)
    if outcome.account_found and not outcome.email_sent:
        logger.warning("Reset link could not be delivered")
    # Same answer whether or not the address exists
    return MessageResponse(message=RESET_REQUESTED)


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    accounts.consume_password_reset(db, payload.token, payload.password)
    return MessageResponse(message="Password updated")
