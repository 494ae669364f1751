"""Menu categories and items scoped to one organization"""

from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.exceptions import InvalidPayloadError, NotFoundError
from app.models.menu import MenuCategory, MenuItem
from app.schemas.menu import MenuItemCreate, MenuItemUpdate

logger = structlog.get_logger()


# =============================================================================
# Categories
# =============================================================================

async def list_categories(db: AsyncSession, organization_id: UUID) -> List[MenuCategory]:
    result = await db.execute(
        select(MenuCategory)
        .where(MenuCategory.organization_id == organization_id)
        .order_by(MenuCategory.order_column, MenuCategory.created_at)
    )
    return list(result.scalars().all())


async def get_category(db: AsyncSession, organization_id: UUID, category_id: UUID) -> MenuCategory:
    result = await db.execute(
        select(MenuCategory).where(
            MenuCategory.id == category_id,
            MenuCategory.organization_id == organization_id,
        )
    )
    category = result.scalar_one_or_none()

    if not category:
        raise NotFoundError("Menu category", category_id)

    return category


async def create_category(db: AsyncSession, organization_id: UUID, name: str) -> MenuCategory:
    """New categories are appended after the current highest rank"""
    result = await db.execute(
        select(func.max(MenuCategory.order_column)).where(
            MenuCategory.organization_id == organization_id
        )
    )
    highest = result.scalar() or 0

    category = MenuCategory(
        organization_id=organization_id,
        name=name,
        order_column=highest + 1,
    )
    db.add(category)
    await db.commit()

    logger.info("Menu category created", category_id=str(category.id), organization_id=str(organization_id))
    return category


async def rename_category(
    db: AsyncSession,
    organization_id: UUID,
    category_id: UUID,
    name: str,
) -> MenuCategory:
    category = await get_category(db, organization_id, category_id)
    category.name = name
    await db.commit()
    return category


async def reorder_categories(
    db: AsyncSession,
    organization_id: UUID,
    category_ids: List[UUID],
) -> List[MenuCategory]:
    """
    Assign ranks 1..N following the given order.

    Every id must belong to the organization; otherwise nothing changes.
    """
    if len(set(category_ids)) != len(category_ids):
        raise InvalidPayloadError("Category ids must be unique")

    result = await db.execute(
        select(MenuCategory).where(
            MenuCategory.id.in_(category_ids),
            MenuCategory.organization_id == organization_id,
        )
    )
    by_id = {category.id: category for category in result.scalars().all()}

    for category_id in category_ids:
        if category_id not in by_id:
            raise NotFoundError("Menu category", category_id)

    for rank, category_id in enumerate(category_ids, start=1):
        by_id[category_id].order_column = rank

    await db.commit()

    logger.info("Menu categories reordered", organization_id=str(organization_id), count=len(category_ids))
    return await list_categories(db, organization_id)


async def delete_category(db: AsyncSession, organization_id: UUID, category_id: UUID) -> None:
    """Delete a category together with its items"""
    category = await get_category(db, organization_id, category_id)

    try:
        await db.execute(delete(MenuItem).where(MenuItem.category_id == category.id))
        await db.delete(category)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("Menu category deleted", category_id=str(category_id), organization_id=str(organization_id))


# =============================================================================
# Items
# =============================================================================

async def list_items(
    db: AsyncSession,
    organization_id: UUID,
    category_id: Optional[UUID] = None,
    available_only: bool = False,
) -> List[Tuple[MenuItem, str]]:
    """Items joined with their category name, in menu order"""
    query = (
        select(MenuItem, MenuCategory.name)
        .join(MenuCategory, MenuItem.category_id == MenuCategory.id)
        .where(MenuItem.organization_id == organization_id)
    )

    if category_id:
        query = query.where(MenuItem.category_id == category_id)

    if available_only:
        query = query.where(MenuItem.is_available.is_(True))

    query = query.order_by(MenuCategory.order_column, MenuItem.created_at)

    result = await db.execute(query)
    return [(item, category_name) for item, category_name in result.all()]


async def get_item(db: AsyncSession, organization_id: UUID, item_id: UUID) -> MenuItem:
    result = await db.execute(
        select(MenuItem).where(
            MenuItem.id == item_id,
            MenuItem.organization_id == organization_id,
        )
    )
    item = result.scalar_one_or_none()

    if not item:
        raise NotFoundError("Menu item", item_id)

    return item


async def _require_category(db: AsyncSession, organization_id: UUID, category_id: UUID) -> MenuCategory:
    """A menu item may only reference a category of the same organization"""
    try:
        return await get_category(db, organization_id, category_id)
    except NotFoundError:
        raise InvalidPayloadError(f"Invalid category: {category_id}") from None


async def create_item(
    db: AsyncSession,
    organization_id: UUID,
    data: MenuItemCreate,
) -> Tuple[MenuItem, str]:
    category = await _require_category(db, organization_id, data.category_id)

    item = MenuItem(organization_id=organization_id, **data.model_dump())
    db.add(item)
    await db.commit()

    logger.info("Menu item created", menu_item_id=str(item.id), organization_id=str(organization_id))
    return item, category.name


async def update_item(
    db: AsyncSession,
    organization_id: UUID,
    item_id: UUID,
    data: MenuItemUpdate,
) -> Tuple[MenuItem, str]:
    item = await get_item(db, organization_id, item_id)

    changes = data.model_dump(exclude_unset=True, exclude={"remove_image"})
    if changes.get("category_id") is not None:
        await _require_category(db, organization_id, changes["category_id"])

    for field, value in changes.items():
        if value is None and field in ("name", "price", "is_available", "category_id"):
            continue
        setattr(item, field, value)

    if data.remove_image:
        item.image_url = None

    await db.commit()

    category = await get_category(db, organization_id, item.category_id)
    return item, category.name


async def set_item_image(
    db: AsyncSession,
    organization_id: UUID,
    item_id: UUID,
    image_url: str,
) -> MenuItem:
    item = await get_item(db, organization_id, item_id)
    item.image_url = image_url
    await db.commit()
    return item


async def delete_item(db: AsyncSession, organization_id: UUID, item_id: UUID) -> None:
    item = await get_item(db, organization_id, item_id)
    await db.delete(item)
    await db.commit()

    logger.info("Menu item deleted", menu_item_id=str(item_id), organization_id=str(organization_id))


async def count_items(db: AsyncSession, organization_id: UUID) -> int:
    result = await db.execute(
        select(func.count(MenuItem.id)).where(MenuItem.organization_id == organization_id)
    )
    return result.scalar() or 0
