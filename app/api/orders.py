"""Order management API endpoints"""

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User
from app.schemas.order import OrderItemResponse, OrderResponse, OrderStatusUpdate
from app.services import ordering
from app.api.auth import get_current_active_user, verify_organization_access

router = APIRouter()


@router.get("", response_model=List[OrderResponse])
async def list_orders(
    organization_id: UUID,
    status: Optional[str] = None,
    on_date: Optional[date] = Query(None, alias="date"),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """List orders, most recent first; status "all" disables the status filter"""
    await verify_organization_access(organization_id, current_user, db)
    return await ordering.list_orders(db, organization_id, status=status, on_date=on_date)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    organization_id: UUID,
    order_id: str,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Get a specific order"""
    await verify_organization_access(organization_id, current_user, db)
    return await ordering.get_order(db, organization_id, order_id)


@router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    organization_id: UUID,
    order_id: str,
    status_data: OrderStatusUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Move an order through the kitchen pipeline"""
    await verify_organization_access(organization_id, current_user, db)
    return await ordering.update_order_status(db, organization_id, order_id, status_data.status)


@router.put("/{order_id}/items/{item_id}/status", response_model=OrderItemResponse)
async def update_order_item_status(
    organization_id: UUID,
    order_id: str,
    item_id: UUID,
    status_data: OrderStatusUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Move a single order line through the kitchen pipeline"""
    await verify_organization_access(organization_id, current_user, db)
    return await ordering.update_order_item_status(
        db, organization_id, order_id, item_id, status_data.status
    )
