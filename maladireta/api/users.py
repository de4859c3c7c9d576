# maladireta/api/users.py
"""
Account management API endpoints.
Admins can list, create, edit and delete any account; deleting an account
also deletes its clients, campaigns and email configurations.
"""

from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from maladireta.core.db import get_db
from maladireta.core.errors import NotFound
from maladireta.models.schemas import ClearAllResponse, UserCreate, UserUpdate, UserResponse
from maladireta.auth.permissions import AuthContext, require_admin
from maladireta.services import accounts

router = APIRouter(prefix="/api/admin/users", tags=["admin"])


@router.get("", response_model=List[UserResponse])
def list_users(
    include_self: bool = Query(False),
    auth: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """List all accounts, by default without the calling admin."""
    return accounts.list_all_accounts(db, excluding_id=None if include_self else auth.user_id)


@router.post("", response_model=UserResponse, status_code=201)
def create_user(
    payload: UserCreate,
    auth: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Create an account. This is the only way to create another admin.
    Capability flags default to off unless set in the payload.
    """
    return accounts.create_account_as_admin(db, **payload.model_dump())


@router.delete("/clear-all", response_model=ClearAllResponse)
def clear_all_users(
    auth: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete every account except the caller's."""
    deleted = accounts.delete_all_accounts_except(db, auth.user_id)
    return ClearAllResponse(deleted=deleted)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    auth: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return accounts.get_account(db, user_id)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    payload: UserUpdate,
    auth: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return accounts.update_account_as_admin(
        db, user_id, auth.user_id, **payload.model_dump(exclude_unset=True)
    )


@router.delete("/{user_id}", status_code=204)
def delete_user(
    user_id: int,
    auth: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db)
):
    if not accounts.delete_account(db, user_id, auth.user_id):
        raise NotFound("User not found")
    return None
