import time
import secrets
import logging
from typing import Optional

import bcrypt
import jwt

from maladireta.core.config import SECRET_KEY, TOKEN_EXPIRE_MIN

ALGO = "HS256"

logger = logging.getLogger("maladireta.auth")


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.
    """
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash. bcrypt.checkpw compares in constant time.
    """
    try:
        return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))
    except ValueError as e:
        logger.warning("Password verification failed: %s", e)
        return False


# Verified against unknown usernames so both login failures cost the same
DUMMY_HASH = hash_password(secrets.token_hex(16))


def create_token(payload: dict) -> str:
    now = int(time.time())
    exp = now + TOKEN_EXPIRE_MIN * 60
    to_encode = {**payload, "iat": now, "exp": exp}
    token = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGO)
    return token


def verify_token(token: str) -> Optional[dict]:
    try:
        data = jwt.decode(token, SECRET_KEY, algorithms=[ALGO])
        return data
    except jwt.PyJWTError as e:
        logger.warning("Token verification failed: %s", e)
        return None


def generate_reset_token() -> str:
    return secrets.token_hex(32)
