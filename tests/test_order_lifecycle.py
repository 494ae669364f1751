"""Tests for order status transitions and listing"""

import pytest
from datetime import date, datetime, timedelta
from decimal import Decimal
from httpx import AsyncClient

from app.exceptions import InvalidStatusError, NotFoundError
from app.services.ordering import list_orders, update_order_status


@pytest.mark.asyncio
async def test_status_round_trip(make_order, test_db, test_org):
    """new -> completed -> cooking is allowed and keeps completed_at consistent"""
    await make_order(test_db, test_org, "ABCD2345")

    order = await update_order_status(test_db, test_org.id, "ABCD2345", "completed")
    assert order.status == "completed"
    assert order.completed_at is not None

    order = await update_order_status(test_db, test_org.id, "ABCD2345", "cooking")
    assert order.status == "cooking"
    assert order.completed_at is None


@pytest.mark.asyncio
async def test_completed_at_cleared_between_pending_statuses(make_order, test_db, test_org):
    """Test completion time is cleared when an order reopens"""
    await make_order(test_db, test_org, "ABCD2346")

    for status in ("cooking", "ready", "new"):
        order = await update_order_status(test_db, test_org.id, "ABCD2346", status)
        assert order.status == status
        assert order.completed_at is None


@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["done", "COMPLETED", "", "cancelled"])
async def test_invalid_status_rejected_before_mutation(make_order, test_db, test_org, status):
    """Test invalid statuses leave the order unchanged"""
    await make_order(test_db, test_org, "ABCD2347")

    with pytest.raises(InvalidStatusError):
        await update_order_status(test_db, test_org.id, "ABCD2347", status)

    orders = await list_orders(test_db, test_org.id)
    assert orders[0].status == "new"


@pytest.mark.asyncio
async def test_cannot_update_other_tenants_order(make_order, test_db, test_org, other_org):
    """Test orders of another restaurant are not found"""
    await make_order(test_db, other_org, "ZZZZ2345")

    with pytest.raises(NotFoundError):
        await update_order_status(test_db, test_org.id, "ZZZZ2345", "cooking")

    orders = await list_orders(test_db, other_org.id)
    assert orders[0].status == "new"


@pytest.mark.asyncio
async def test_date_filter_boundary(make_order, test_db, test_org):
    """An order at 23:59:59.900 belongs to its own day only"""
    await make_order(test_db, test_org, "LATE2345", created_at=datetime(2024, 1, 15, 23, 59, 59, 900000))

    on_day = await list_orders(test_db, test_org.id, on_date=date(2024, 1, 15))
    next_day = await list_orders(test_db, test_org.id, on_date=date(2024, 1, 16))

    assert [order.id for order in on_day] == ["LATE2345"]
    assert next_day == []


@pytest.mark.asyncio
async def test_list_filters_and_ordering(make_order, test_db, test_org, other_org):
    """Test status and date filters with newest first"""
    now = datetime.now()
    await make_order(test_db, test_org, "OLD23456", created_at=now - timedelta(hours=2))
    await make_order(test_db, test_org, "NEW23456", created_at=now - timedelta(minutes=5), status="ready")
    await make_order(test_db, other_org, "XXX23456", created_at=now)

    all_orders = await list_orders(test_db, test_org.id)
    assert [order.id for order in all_orders] == ["NEW23456", "OLD23456"]

    assert [order.id for order in await list_orders(test_db, test_org.id, status="all")] == ["NEW23456", "OLD23456"]
    assert [order.id for order in await list_orders(test_db, test_org.id, status="ready")] == ["NEW23456"]

    with pytest.raises(InvalidStatusError):
        await list_orders(test_db, test_org.id, status="bogus")


@pytest.mark.asyncio
async def test_list_orders_endpoint(make_order, test_db, test_org, authenticated_client: AsyncClient):
    """Test listing orders over HTTP"""
    await make_order(
        test_db,
        test_org,
        "API23456",
        items=[("Caramel Cloud Latte", 2, Decimal("4.50")), ("Butter Croissant", 1, Decimal("3.50"))],
    )

    response = await authenticated_client.get(f"/organizations/{test_org.id}/orders")

    assert response.status_code == 200
    data = response.json()
    assert len(data) == 1
    assert data[0]["id"] == "API23456"
    assert data[0]["item_count"] == 2
    assert data[0]["items_summary"] == "2x Caramel Cloud Latte, 1x Butter Croissant"
    assert Decimal(data[0]["total"]) == Decimal("12.50")


@pytest.mark.asyncio
async def test_update_status_endpoint(make_order, test_db, test_org, authenticated_client: AsyncClient):
    """Test updating order status over HTTP"""
    await make_order(test_db, test_org, "PUT23456")

    response = await authenticated_client.put(
        f"/organizations/{test_org.id}/orders/PUT23456/status",
        json={"status": "completed"},
    )
    assert response.status_code == 200
    assert response.json()["status"] == "completed"
    assert response.json()["completed_at"] is not None

    response = await authenticated_client.put(
        f"/organizations/{test_org.id}/orders/PUT23456/status",
        json={"status": "archived"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid status: archived"


@pytest.mark.asyncio
async def test_update_item_status_endpoint(make_order, test_db, test_org, authenticated_client: AsyncClient):
    """Test updating a line status over HTTP"""
    order = await make_order(test_db, test_org, "ITM23456")
    item_id = order.items[0].id

    response = await authenticated_client.put(
        f"/organizations/{test_org.id}/orders/ITM23456/items/{item_id}/status",
        json={"status": "ready"},
    )

    assert response.status_code == 200
    assert response.json()["status"] == "ready"

    response = await authenticated_client.get(f"/organizations/{test_org.id}/orders/ITM23456")
    assert response.json()["status"] == "new"
    assert response.json()["items"][0]["status"] == "ready"


@pytest.mark.asyncio
async def test_other_tenants_order_is_forbidden(make_order, test_db, other_org, authenticated_client: AsyncClient):
    """Test non-members cannot read another restaurant's orders"""
    await make_order(test_db, other_org, "FOR23456")

    response = await authenticated_client.get(f"/organizations/{other_org.id}/orders")
    assert response.status_code == 403

    response = await authenticated_client.put(
        f"/organizations/{other_org.id}/orders/FOR23456/status",
        json={"status": "cooking"},
    )
    assert response.status_code == 403
