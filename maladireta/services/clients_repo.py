# maladireta/services/clients_repo.py
from typing import Optional

from sqlalchemy import select, delete, or_
from sqlalchemy.orm import Session

from maladireta.core.db import BULK
from maladireta.core.errors import NotFound
from maladireta.models.orm import Client, CampaignSend

# Columns matched by the ?search= filter (OR semantics, case-insensitive)
SEARCH_FIELDS = (
    Client.name,
    Client.email,
    Client.tax_id,
    Client.mobile_phone,
    Client.landline_phone,
    Client.city,
    Client.business_area,
)


def list_clients(db: Session, owner_id: int, search: Optional[str] = None) -> list[Client]:
    stmt = select(Client).where(Client.owner_id == owner_id)
    search = (search or "").strip()
    if search:
        # % and _ in the query are literal characters
        escaped = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        pattern = f"%{escaped}%"
        stmt = stmt.where(or_(*(col.ilike(pattern, escape="\\") for col in SEARCH_FIELDS)))
    stmt = stmt.order_by(Client.created_at.desc(), Client.id.desc())
    return list(db.scalars(stmt))


def get_client(db: Session, client_id: int, owner_id: int) -> Client:
    stmt = select(Client).where(Client.id == client_id, Client.owner_id == owner_id)
    obj = db.scalars(stmt).first()
    if obj is None:
        raise NotFound("Client not found")
    return obj


def create_client(db: Session, *, owner_id: int, **fields) -> Client:
    obj = Client(**fields, owner_id=owner_id)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def update_client(db: Session, client_id: int, owner_id: int, **fields) -> Client:
    obj = get_client(db, client_id, owner_id)
    for k, v in fields.items():
        setattr(obj, k, v)
    db.commit()
    db.refresh(obj)
    return obj


def delete_client(db: Session, client_id: int, owner_id: int) -> bool:
    owned = select(Client.id).where(Client.id == client_id, Client.owner_id == owner_id)
    db.execute(
        delete(CampaignSend).where(CampaignSend.client_id.in_(owned)),
        execution_options=BULK,
    )
    result = db.execute(
        delete(Client).where(Client.id == client_id, Client.owner_id == owner_id),
        execution_options=BULK,
    )
    db.commit()
    return result.rowcount > 0


def owned_client_ids(db: Session, owner_id: int, client_ids: list[int]) -> set[int]:
    """Subset of ``client_ids`` that belong to ``owner_id``."""
    if not client_ids:
        return set()
    stmt = select(Client.id).where(Client.owner_id == owner_id, Client.id.in_(client_ids))
    return set(db.scalars(stmt))
