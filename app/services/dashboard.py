"""Dashboard aggregation"""

from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.order import Order, OrderStatus, PENDING_STATUSES
from app.schemas.dashboard import DashboardStats
from app.services.menu import count_items
from app.services.ordering import day_window


def _as_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    return Decimal(str(value))


async def get_stats(
    db: AsyncSession,
    organization_id: Optional[UUID],
    today: Optional[date] = None,
) -> DashboardStats:
    """
    Order and menu counters for one organization.

    Revenue only counts completed orders. Returns zeros when there is no
    organization to report on.
    """
    if organization_id is None:
        return DashboardStats()

    start, end = day_window(today or date.today())
    scoped = Order.organization_id == organization_id
    completed = Order.status == OrderStatus.COMPLETED.value
    created_today = Order.created_at.between(start, end)

    total_orders = await db.scalar(select(func.count(Order.id)).where(scoped))
    total_revenue = await db.scalar(select(func.sum(Order.total)).where(scoped, completed))
    today_orders = await db.scalar(select(func.count(Order.id)).where(scoped, created_today))
    today_revenue = await db.scalar(
        select(func.sum(Order.total)).where(scoped, completed, created_today)
    )
    pending_orders = await db.scalar(
        select(func.count(Order.id)).where(
            scoped,
            Order.status.in_([status.value for status in PENDING_STATUSES]),
        )
    )

    return DashboardStats(
        total_orders=total_orders or 0,
        total_revenue=_as_decimal(total_revenue),
        today_orders=today_orders or 0,
        today_revenue=_as_decimal(today_revenue),
        pending_orders=pending_orders or 0,
        menu_items_count=await count_items(db, organization_id),
    )
