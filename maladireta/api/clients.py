# maladireta/api/clients.py
"""
Client (contact) endpoints. Every query is scoped to the authenticated
account; ids owned by someone else answer 404.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from maladireta.auth.permissions import AuthContext, get_auth_context
from maladireta.core.db import get_db
from maladireta.core.errors import NotFound
from maladireta.models.schemas import ClientCreate, ClientUpdate, ClientResponse
from maladireta.services import clients_repo

router = APIRouter(prefix="/api/clients", tags=["clients"])


@router.get("", response_model=List[ClientResponse])
def list_clients(
    search: Optional[str] = Query(None, max_length=160),
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db)
):
    return clients_repo.list_clients(db, auth.user_id, search)


@router.post("", response_model=ClientResponse, status_code=201)
def create_client(
    payload: ClientCreate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db)
):
    return clients_repo.create_client(db, owner_id=auth.user_id, **payload.model_dump())


@router.get("/{client_id}", response_model=ClientResponse)
def get_client(
    client_id: int,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db)
):
    return clients_repo.get_client(db, client_id, auth.user_id)


@router.put("/{client_id}", response_model=ClientResponse)
def update_client(
    client_id: int,
    payload: ClientUpdate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db)
):
    return clients_repo.update_client(
        db, client_id, auth.user_id, **payload.model_dump(exclude_unset=True, exclude_none=True)
    )


@router.delete("/{client_id}", status_code=204)
def delete_client(
    client_id: int,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db)
):
    if not clients_repo.delete_client(db, client_id, auth.user_id):
        raise NotFound("Client not found")
    return None
