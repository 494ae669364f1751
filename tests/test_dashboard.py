"""Tests for dashboard statistics"""

import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from httpx import AsyncClient
from sqlalchemy import delete

from app.models.organization import Member
from app.services.dashboard import get_stats


ZERO_STATS = {
    "total_orders": 0,
    "total_revenue": Decimal("0"),
    "today_orders": 0,
    "today_revenue": Decimal("0"),
    "pending_orders": 0,
    "menu_items_count": 0,
}


@pytest.mark.asyncio
async def test_zero_state_for_new_organization(test_db, test_org):
    """Test stats of a restaurant with no activity"""
    stats = await get_stats(test_db, test_org.id)
    assert stats.model_dump() == ZERO_STATS


@pytest.mark.asyncio
async def test_zero_state_without_organization(test_db):
    """Test stats without a restaurant are all zero"""
    stats = await get_stats(test_db, None)
    assert stats.model_dump() == ZERO_STATS


@pytest.mark.asyncio
async def test_revenue_counts_completed_orders_only(make_order, test_db, test_org, other_org, test_menu_items):
    """Test revenue sums completed orders only"""
    yesterday = datetime.now() - timedelta(days=1)

    await make_order(test_db, test_org, "DASH2345", status="completed",
                     items=[("Caramel Cloud Latte", 2, Decimal("8.00"))])
    await make_order(test_db, test_org, "DASH2346", status="cooking",
                     items=[("Butter Croissant", 3, Decimal("3.50"))])
    await make_order(test_db, test_org, "DASH2347", status="completed", created_at=yesterday,
                     items=[("Espresso Bliss", 1, Decimal("2.50"))])
    await make_order(test_db, test_org, "DASH2348", status="new", created_at=yesterday)
    await make_order(test_db, other_org, "DASH2349", status="completed",
                     items=[("Pancakes", 1, Decimal("99.00"))])

    stats = await get_stats(test_db, test_org.id)

    assert stats.total_orders == 4
    assert stats.total_revenue == Decimal("18.50")
    assert stats.today_orders == 2
    assert stats.today_revenue == Decimal("16.00")
    assert stats.pending_orders == 2
    assert stats.menu_items_count == 4


@pytest.mark.asyncio
async def test_dashboard_endpoints(make_order, test_db, test_org, test_menu_items, authenticated_client: AsyncClient):
    """Test the per-restaurant and active dashboards"""
    await make_order(test_db, test_org, "DASH3456", status="ready")

    response = await authenticated_client.get(f"/organizations/{test_org.id}/dashboard")
    assert response.status_code == 200
    assert response.json()["pending_orders"] == 1
    assert response.json()["menu_items_count"] == 4

    response = await authenticated_client.get("/dashboard")
    assert response.status_code == 200
    assert response.json()["total_orders"] == 1


@pytest.mark.asyncio
async def test_active_dashboard_without_organization(test_admin_user, admin_client: AsyncClient):
    """Test the active dashboard with no restaurant selected"""
    response = await admin_client.get("/dashboard")

    assert response.status_code == 200
    data = response.json()
    assert data["total_orders"] == 0
    assert Decimal(data["total_revenue"]) == Decimal("0")


@pytest.mark.asyncio
async def test_active_dashboard_after_membership_removed(test_db, test_org, test_user, authenticated_client: AsyncClient):
    """Test a user removed from their active restaurant can no longer read its stats"""
    await test_db.execute(delete(Member).where(Member.user_id == test_user.id))
    await test_db.commit()

    response = await authenticated_client.get("/dashboard")

    assert response.status_code == 403
