"""Menu item API endpoints"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.exceptions import InvalidPayloadError
from app.models.menu import MenuItem
from app.models.user import User
from app.schemas.menu import MenuItemCreate, MenuItemUpdate, MenuItemResponse
from app.services import menu as menu_service
from app.services.storage import LocalStorage, get_storage
from app.api.auth import get_current_active_user, require_admin, verify_organization_access

router = APIRouter()

IMAGE_MIME_TYPES = ("image/jpeg", "image/png", "image/webp", "image/gif")


def to_response(item: MenuItem, category_name: Optional[str]) -> MenuItemResponse:
    response = MenuItemResponse.model_validate(item)
    response.category_name = category_name
    return response


@router.get("", response_model=List[MenuItemResponse])
async def list_menu_items(
    organization_id: UUID,
    category_id: Optional[UUID] = None,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """List menu items with their category names"""
    await verify_organization_access(organization_id, current_user, db)

    rows = await menu_service.list_items(db, organization_id, category_id=category_id)
    return [to_response(item, category_name) for item, category_name in rows]


@router.post("", response_model=MenuItemResponse, status_code=201)
async def create_menu_item(
    organization_id: UUID,
    item_data: MenuItemCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a new menu item"""
    await verify_organization_access(organization_id, current_user, db)
    require_admin(current_user)

    item, category_name = await menu_service.create_item(db, organization_id, item_data)
    return to_response(item, category_name)


@router.get("/{item_id}", response_model=MenuItemResponse)
async def get_menu_item(
    organization_id: UUID,
    item_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Get a specific menu item"""
    await verify_organization_access(organization_id, current_user, db)

    item = await menu_service.get_item(db, organization_id, item_id)
    category = await menu_service.get_category(db, organization_id, item.category_id)
    return to_response(item, category.name)


@router.put("/{item_id}", response_model=MenuItemResponse)
async def update_menu_item(
    organization_id: UUID,
    item_id: UUID,
    item_data: MenuItemUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Update a menu item"""
    await verify_organization_access(organization_id, current_user, db)
    require_admin(current_user)

    item, category_name = await menu_service.update_item(db, organization_id, item_id, item_data)
    return to_response(item, category_name)


@router.post("/{item_id}/image", response_model=MenuItemResponse)
async def upload_menu_item_image(
    organization_id: UUID,
    item_id: UUID,
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    storage: LocalStorage = Depends(get_storage),
):
    """Upload the cover image of a menu item"""
    await verify_organization_access(organization_id, current_user, db)
    require_admin(current_user)

    if file.content_type not in IMAGE_MIME_TYPES:
        raise InvalidPayloadError(f"Unsupported image type: {file.content_type}")

    # Resolve first so a foreign item never gets a stored file
    await menu_service.get_item(db, organization_id, item_id)

    key = await storage.upload(storage.build_key(f"menu/{organization_id}", file.filename), await file.read())
    item = await menu_service.set_item_image(db, organization_id, item_id, storage.public_url_for(key))

    category = await menu_service.get_category(db, organization_id, item.category_id)
    return to_response(item, category.name)


@router.delete("/{item_id}", status_code=204)
async def delete_menu_item(
    organization_id: UUID,
    item_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a menu item; past orders keep their line snapshots"""
    await verify_organization_access(organization_id, current_user, db)
    require_admin(current_user)
    await menu_service.delete_item(db, organization_id, item_id)
