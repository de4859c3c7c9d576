# maladireta/auth/permissions.py
"""
Authentication and authorization dependencies for protected routes.

Ownership (which rows an account may touch) is enforced by the repositories;
this module only decides *whether* an account may reach a feature area.
"""

import enum
import logging
from typing import Callable, Union

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from .security import verify_token
from maladireta.core.db import get_db
from maladireta.core.errors import Forbidden, Unauthorized
from maladireta.models.orm import User

logger = logging.getLogger("maladireta.auth.permissions")


class Capability(str, enum.Enum):
    DIRECT_MAIL = "directMail"
    EMAIL_CONFIG = "emailConfig"
    ACCOUNT_MANAGEMENT = "accountManagement"


def has_permission(account: User, capability: Union[Capability, str]) -> bool:
    """
    Decide whether ``account`` may use ``capability``.

    Admins hold every capability. Regular users are gated by their flags and
    never hold ACCOUNT_MANAGEMENT. Anything outside the Capability enum is
    refused.
    """
    if not isinstance(capability, Capability):
        try:
            capability = Capability(capability)
        except ValueError:
            logger.warning("Unknown capability requested: %r", capability)
            return False

    if account.role == "admin":
        return True

    if capability is Capability.DIRECT_MAIL:
        return bool(account.can_access_direct_mail)
    if capability is Capability.EMAIL_CONFIG:
        return bool(account.can_access_email_config)
    return False


class AuthContext:
    """Authenticated account for the current request"""
    def __init__(self, user: User, db: Session):
        self.user = user
        self.db = db

    @property
    def user_id(self) -> int:
        return self.user.id

    @property
    def username(self) -> str:
        return self.user.username

    @property
    def role(self) -> str:
        return self.user.role

    def is_admin(self) -> bool:
        return self.user.role == "admin"

    def can(self, capability: Capability) -> bool:
        return has_permission(self.user, capability)

    def require(self, capability: Capability):
        """Raise Forbidden if the account lacks ``capability``"""
        if not self.can(capability):
            logger.info(
                "Denied %s to user '%s' (role=%s)", capability.value, self.username, self.role
            )
            raise Forbidden("You do not have permission to access this feature")


def get_auth_context(
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db)
) -> AuthContext:
    """
    Dependency to get the authenticated account.
    Validates the bearer token and reloads the account, so role, status and
    capability changes made by an admin apply to tokens already issued.

    Usage:
        @router.get("/protected")
        def protected_route(auth: AuthContext = Depends(get_auth_context)):
            print(f"User: {auth.username}")
    """
    if not authorization or not authorization.lower().startswith("bearer "):
        raise Unauthorized("Missing authorization token")

    token = authorization.split(" ", 1)[1]
    token_data = verify_token(token)

    if not token_data:
        raise Unauthorized("Invalid or expired token")

    user_id = token_data.get("user_id")
    if not user_id:
        raise Unauthorized("Invalid token payload")

    user = db.get(User, user_id)
    if not user or not user.is_active:
        raise Unauthorized("User not found or inactive")

    return AuthContext(user=user, db=db)


def require_capability(capability: Capability) -> Callable[..., AuthContext]:
    """
    Build a dependency that rejects accounts lacking ``capability`` before
    the route body runs.

    Usage:
        @router.get("/campaigns")
        def list_campaigns(auth: AuthContext = Depends(require_capability(Capability.DIRECT_MAIL))):
            ...
    """
    def _dependency(auth: AuthContext = Depends(get_auth_context)) -> AuthContext:
        auth.require(capability)
        return auth

    return _dependency


require_direct_mail = require_capability(Capability.DIRECT_MAIL)
require_email_config = require_capability(Capability.EMAIL_CONFIG)
require_admin = require_capability(Capability.ACCOUNT_MANAGEMENT)
