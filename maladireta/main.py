from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from maladireta.core import config
from maladireta.core.errors import AppError
from maladireta.api import clients, campaigns, email_config, health, users
from maladireta.auth import routes as auth_routes
from maladireta.middleware.request_logger import RequestLoggerMiddleware
from maladireta.services.bootstrap_db import create_all

# ---- Logging config ---------------------------------------------------------
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s:%(lineno)d - %(message)s",
)
logger = logging.getLogger("maladireta.main")
logger.info("Starting Mala Direta backend env=%s LOG_LEVEL=%s", config.ENV, config.LOG_LEVEL)

# ---- FastAPI app ------------------------------------------------------------
app = FastAPI(title="Mala Direta")
app.add_middleware(RequestLoggerMiddleware)

# ---- CORS -------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---- Errors -----------------------------------------------------------------
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    content = {"detail": exc.message}
    if exc.fields:
        content["fields"] = exc.fields
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ---- Routers ----------------------------------------------------------------
# Auth (register, login, logout, current user, password reset)
app.include_router(auth_routes.router)     # /api/*
# Tenant data
app.include_router(clients.router)         # /api/clients
app.include_router(campaigns.router)       # /api/campaigns
app.include_router(email_config.router)    # /api/email-config
# Account management
app.include_router(users.router)           # /api/admin/users
# Health + introspection
app.include_router(health.router, prefix="/health", tags=["Health"])

logger.info("Routers registered.")


# ---- Startup ----------------------------------------------------------------
@app.on_event("startup")
def _startup() -> None:
    # Auto-create tables (safe to run repeatedly)
    create_all()
    logger.info("Startup completed.")
