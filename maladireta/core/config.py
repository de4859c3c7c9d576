import os


def _flag(name: str, default: str = "1") -> bool:
    return os.getenv(name, default) not in ("0", "false", "False")


# Runtime
ENV = os.getenv("MALADIRETA_ENV", "development")
PORT = int(os.getenv("PORT", "5000"))
LOG_LEVEL = os.getenv("MALADIRETA_LOG_LEVEL", "INFO").upper()

# Database (see core/db.py for the dev fallback)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./maladireta_dev.db")

# Auth tokens
SECRET_KEY = os.getenv("MALADIRETA_SECRET", "dev-secret-change-me")  # override in prod
TOKEN_EXPIRE_MIN = int(os.getenv("MALADIRETA_TOKEN_EXPIRE_MIN", "1440"))  # 1 day
RESET_TOKEN_TTL_MIN = int(os.getenv("MALADIRETA_RESET_TOKEN_TTL_MIN", "60"))

# Public URL used to build password reset links
APP_URL = os.getenv("MALADIRETA_APP_URL", "http://localhost:5000").rstrip("/")

# Capability flags granted on self-registration (admin-created accounts set them explicitly)
SELF_REGISTER_DIRECT_MAIL = _flag("MALADIRETA_SELF_REGISTER_DIRECT_MAIL")
SELF_REGISTER_EMAIL_CONFIG = _flag("MALADIRETA_SELF_REGISTER_EMAIL_CONFIG")

# Fallback SMTP server for system mail (password reset) when the account has none
SMTP_HOST = os.getenv("SMTP_HOST", "")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_SECURE = _flag("SMTP_SECURE", "0")
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASS = os.getenv("SMTP_PASS", "")
SMTP_FROM = os.getenv("SMTP_FROM", "no-reply@maladireta.local")
SMTP_TIMEOUT = int(os.getenv("SMTP_TIMEOUT", "15"))

CORS_ORIGINS = [
    o.strip()
    for o in os.getenv(
        "MALADIRETA_CORS_ORIGINS",
        "http://localhost:5000,http://127.0.0.1:5000,http://localhost:5173",
    ).split(",")
    if o.strip()
]
