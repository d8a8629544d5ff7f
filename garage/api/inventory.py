"""Routes stock de pièces / Parts inventory routes."""

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from garage.database import get_db
from garage.errors import NotFoundError
from garage.models.inventory import InventoryItem
from garage.schemas.inventory import (
    InventoryItemCreate,
    InventoryItemRead,
    InventoryItemUpdate,
    InventoryStats,
)
from garage.services.auth_gate import SessionContext
from garage.api.deps import require_verified

router = APIRouter()


async def _get_item(db: AsyncSession, item_id: int) -> InventoryItem:
    item = await db.get(InventoryItem, item_id)
    if not item:
        raise NotFoundError(f"Inventory item {item_id} not found")
    return item


@router.get("/", response_model=list[InventoryItemRead])
async def list_items(
    q: str | None = None,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(require_verified),
):
    """Lister le stock, recherche par nom / List stock, optional name search."""
    query = select(InventoryItem).order_by(InventoryItem.name)
    if q:
        query = query.where(func.lower(InventoryItem.name).contains(q.strip().lower()))
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/stats", response_model=InventoryStats)
async def inventory_stats(
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(require_verified),
):
    """Nombre de lignes et quantité totale / Line count and total quantity."""
    row = (await db.execute(
        select(func.count(InventoryItem.id), func.coalesce(func.sum(InventoryItem.quantity), 0))
    )).one()
    return InventoryStats(item_count=row[0], total_quantity=row[1])


@router.get("/{item_id}", response_model=InventoryItemRead)
async def get_item(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(require_verified),
):
    return await _get_item(db, item_id)


@router.post("/", response_model=InventoryItemRead, status_code=201)
async def create_item(
    data: InventoryItemCreate,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(require_verified),
):
    item = InventoryItem(**data.model_dump())
    db.add(item)
    await db.flush()
    await db.refresh(item)
    return item


@router.put("/{item_id}", response_model=InventoryItemRead)
async def update_item(
    item_id: int,
    data: InventoryItemUpdate,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(require_verified),
):
    item = await _get_item(db, item_id)
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(item, key, value)
    await db.flush()
    await db.refresh(item)
    return item


@router.delete("/{item_id}", status_code=204)
async def delete_item(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(require_verified),
):
    item = await _get_item(db, item_id)
    await db.delete(item)
