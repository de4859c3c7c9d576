from __future__ import annotations

import sys
import logging
from typing import List, Dict, Any
from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.orm import Session

from maladireta.core import config
from maladireta.core.db import get_db

logger = logging.getLogger("maladireta.api.health")
router = APIRouter()


@router.get("/ping")
def ping():
    logger.debug("GET /health/ping")
    return {"ok": True}


@router.get("/db")
def db_health(db: Session = Depends(get_db)):
    db.execute(text("SELECT 1"))
    return {"ok": True, "env": config.ENV, "python": sys.version.split()[0]}


@router.get("/routes")
def list_routes(request: Request):
    """
    Introspect all registered routes to verify there are no collisions.
    """
    app = request.app
    out: List[Dict[str, Any]] = []
    for r in app.routes:
        path = getattr(r, "path", None)
        methods = getattr(r, "methods", None)
        name = getattr(r, "name", None)
        if path and methods:
            out.append({"path": path, "methods": sorted(list(methods)), "name": name})
    out.sort(key=lambda x: (x["path"], ",".join(x["methods"])))
    logger.info("GET /health/routes count=%d", len(out))
    return {"ok": True, "routes": out}
