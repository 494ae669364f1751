"""
Order ingestion and lifecycle.

Ingestion turns the loosely structured field bag collected by the voice agent
into a priced order with one line per requested item. Lifecycle covers the
kitchen status pipeline and the listing surface used by the order board.
"""

import json
import secrets
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple
from uuid import UUID

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.config import settings
from app.exceptions import (
    InvalidPayloadError,
    InvalidStatusError,
    MenuItemUnavailableError,
    NotFoundError,
    OrderIdGenerationError,
    UnknownMenuItemError,
)
from app.models.menu import MenuItem
from app.models.order import Order, OrderItem, OrderStatus, OrderType
from app.schemas.order import RequestedOrderItem
from app.services.organizations import get_organization_by_agent_id

logger = structlog.get_logger()

# Uppercase letters and digits without I, L, O, 0 and 1
ORDER_ID_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"
ORDER_ID_LENGTH = 8

DEFAULT_CUSTOMER_NAME = "Guest"
STATUS_FILTER_ALL = "all"

_requested_items = TypeAdapter(List[RequestedOrderItem])


@dataclass
class PricedLine:
    menu_item: MenuItem
    quantity: int
    price: Decimal
    total: Decimal
    notes: Optional[str]


# =============================================================================
# Ingestion helpers
# =============================================================================

def generate_order_id() -> str:
    """Sample ORDER_ID_LENGTH symbols independently and uniformly"""
    return "".join(secrets.choice(ORDER_ID_ALPHABET) for _ in range(ORDER_ID_LENGTH))


def collected_value(fields: Mapping[str, Any], key: str) -> Any:
    """
    Read one data-collection field.

    The voice platform wraps each collected field as {"value": ..., "rationale": ...};
    plain values are accepted too.
    """
    entry = fields.get(key)
    if isinstance(entry, Mapping):
        return entry.get("value")
    return entry


def normalize_order_type(value: Any) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        return OrderType.TAKEAWAY.value

    normalized = str(value).strip().lower().replace("_", "-").replace(" ", "-")
    if normalized == "dinein":
        normalized = OrderType.DINE_IN.value
    if normalized in ("take-away", "takeout", "take-out"):
        normalized = OrderType.TAKEAWAY.value

    try:
        return OrderType(normalized).value
    except ValueError:
        raise InvalidPayloadError(f"Invalid order type: {value}") from None


def parse_requested_items(raw: Any) -> List[RequestedOrderItem]:
    """Parse the JSON-encoded item list into validated entries"""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise InvalidPayloadError("No items found in data collection results")

    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InvalidPayloadError(f"Invalid items JSON: {e.msg}") from e

    if not isinstance(raw, list) or len(raw) == 0:
        raise InvalidPayloadError("Items must be a non-empty array")

    try:
        return _requested_items.validate_python(raw)
    except ValidationError as e:
        error = e.errors()[0]
        location = ".".join(str(part) for part in error["loc"])
        raise InvalidPayloadError(f"Invalid order item at {location}: {error['msg']}") from e


def price_order_lines(
    requested: List[RequestedOrderItem],
    menu_items: Dict[str, MenuItem],
) -> Tuple[List[PricedLine], Decimal]:
    """
    Price every requested entry against the current menu.

    All arithmetic stays in Decimal. Raises UnknownMenuItemError for an id
    missing from ``menu_items`` and MenuItemUnavailableError for items that
    are switched off.
    """
    lines = []
    order_total = Decimal("0")

    for entry in requested:
        menu_item = menu_items.get(entry.id)
        if menu_item is None:
            raise UnknownMenuItemError(entry.id)
        if not menu_item.is_available:
            raise MenuItemUnavailableError(entry.id)

        price = Decimal(menu_item.price)
        line_total = price * entry.quantity
        order_total += line_total

        lines.append(
            PricedLine(
                menu_item=menu_item,
                quantity=entry.quantity,
                price=price,
                total=line_total,
                notes=entry.notes or None,
            )
        )

    return lines, order_total


async def _fetch_menu_items(
    db: AsyncSession,
    organization_id: UUID,
    requested: List[RequestedOrderItem],
) -> Dict[str, MenuItem]:
    """Batch-fetch requested menu items of one organization, keyed by the requested id string"""
    ids_by_key = {}
    for entry in requested:
        try:
            ids_by_key[entry.id] = UUID(entry.id)
        except ValueError:
            raise UnknownMenuItemError(entry.id) from None

    result = await db.execute(
        select(MenuItem).where(
            MenuItem.id.in_(set(ids_by_key.values())),
            MenuItem.organization_id == organization_id,
        )
    )
    by_id = {item.id: item for item in result.scalars().all()}

    return {key: by_id[item_id] for key, item_id in ids_by_key.items() if item_id in by_id}


async def allocate_order_id(db: AsyncSession) -> str:
    """Generate an order id not yet in use, with a bounded number of attempts"""
    attempts = settings.order_id_max_attempts

    for _ in range(attempts):
        candidate = generate_order_id()
        existing = await db.execute(select(Order.id).where(Order.id == candidate))
        if existing.first() is None:
            return candidate
        logger.warning("Order id collision", order_id=candidate)

    raise OrderIdGenerationError(attempts)


# =============================================================================
# Ingestion
# =============================================================================

async def create_order(
    db: AsyncSession,
    agent_id: str,
    collected_fields: Mapping[str, Any],
) -> Order:
    """
    Create a priced order from the fields collected by a voice agent.

    The order and all its lines are written in one transaction; nothing is
    persisted when any requested item fails to resolve.
    """
    organization = await get_organization_by_agent_id(db, agent_id)

    customer_name = collected_value(collected_fields, "name") or DEFAULT_CUSTOMER_NAME
    order_type = normalize_order_type(collected_value(collected_fields, "orderType"))
    requested = parse_requested_items(collected_value(collected_fields, "items"))

    table_number = None
    if order_type == OrderType.DINE_IN.value:
        table_number = collected_value(collected_fields, "tableNumber") or None

    menu_items = await _fetch_menu_items(db, organization.id, requested)
    lines, order_total = price_order_lines(requested, menu_items)

    order = Order(
        id=await allocate_order_id(db),
        organization_id=organization.id,
        type=order_type,
        customer_name=str(customer_name),
        table_number=str(table_number) if table_number is not None else None,
        payment_type=settings.default_payment_type,
        total=order_total,
        status=OrderStatus.NEW.value,
        notes=collected_value(collected_fields, "notes") or None,
        items=[
            OrderItem(
                position=position,
                menu_item_id=line.menu_item.id,
                name=line.menu_item.name,
                quantity=line.quantity,
                price=line.price,
                total=line.total,
                notes=line.notes,
                status=OrderStatus.NEW.value,
            )
            for position, line in enumerate(lines)
        ],
    )

    try:
        db.add(order)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Order created",
        order_id=order.id,
        organization_id=str(organization.id),
        agent_id=agent_id,
        total=str(order_total),
        line_count=len(lines),
    )
    return order


# =============================================================================
# Lifecycle
# =============================================================================

def parse_status(value: Any) -> OrderStatus:
    """Accept exactly the four wire strings"""
    try:
        return OrderStatus(value)
    except ValueError:
        raise InvalidStatusError(value) from None


def day_window(day: date) -> Tuple[datetime, datetime]:
    """Inclusive [00:00:00.000, 23:59:59.999] window of a server-local calendar day"""
    start = datetime.combine(day, time.min)
    end = datetime.combine(day, time(23, 59, 59, 999000))
    return start, end


async def list_orders(
    db: AsyncSession,
    organization_id: UUID,
    status: Optional[str] = None,
    on_date: Optional[date] = None,
) -> List[Order]:
    """List orders with their lines, most recent first"""
    query = select(Order).where(Order.organization_id == organization_id)

    if status and status != STATUS_FILTER_ALL:
        query = query.where(Order.status == parse_status(status).value)

    if on_date:
        start, end = day_window(on_date)
        query = query.where(Order.created_at >= start, Order.created_at <= end)

    query = query.order_by(Order.created_at.desc())

    result = await db.execute(query)
    return list(result.scalars().all())


async def get_order(db: AsyncSession, organization_id: UUID, order_id: str) -> Order:
    result = await db.execute(
        select(Order).where(Order.id == order_id, Order.organization_id == organization_id)
    )
    order = result.scalar_one_or_none()

    if not order:
        raise NotFoundError("Order", order_id)

    return order


async def update_order_status(
    db: AsyncSession,
    organization_id: UUID,
    order_id: str,
    new_status: Any,
) -> Order:
    """
    Move an order to any of the four statuses.

    Any status may follow any other so staff can correct mistakes.
    completed_at is set when the new status is completed and cleared otherwise.
    """
    status = parse_status(new_status)
    order = await get_order(db, organization_id, order_id)

    previous = order.status
    order.status = status.value
    order.completed_at = datetime.now() if status == OrderStatus.COMPLETED else None

    await db.commit()

    logger.info(
        "Order status updated",
        order_id=order.id,
        organization_id=str(organization_id),
        previous_status=previous,
        status=order.status,
    )
    return order


async def update_order_item_status(
    db: AsyncSession,
    organization_id: UUID,
    order_id: str,
    item_id: UUID,
    new_status: Any,
) -> OrderItem:
    """Track a single line through the kitchen independently of its order"""
    status = parse_status(new_status)
    order = await get_order(db, organization_id, order_id)

    item = next((line for line in order.items if line.id == item_id), None)
    if item is None:
        raise NotFoundError("Order item", item_id)

    item.status = status.value
    await db.commit()

    logger.info(
        "Order item status updated",
        order_id=order.id,
        order_item_id=str(item.id),
        status=item.status,
    )
    return item
