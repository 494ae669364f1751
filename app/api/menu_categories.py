"""Menu category API endpoints"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User
from app.schemas.menu import (
    MenuCategoryCreate,
    MenuCategoryUpdate,
    MenuCategoryOrderUpdate,
    MenuCategoryResponse,
)
from app.services import menu as menu_service
from app.api.auth import get_current_active_user, require_admin, verify_organization_access

router = APIRouter()


@router.get("", response_model=List[MenuCategoryResponse])
async def list_categories(
    organization_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """List categories in menu order"""
    await verify_organization_access(organization_id, current_user, db)
    return await menu_service.list_categories(db, organization_id)


@router.post("", response_model=MenuCategoryResponse, status_code=201)
async def create_category(
    organization_id: UUID,
    category_data: MenuCategoryCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a category at the end of the menu"""
    await verify_organization_access(organization_id, current_user, db)
    require_admin(current_user)
    return await menu_service.create_category(db, organization_id, category_data.name)


# Registered before /{category_id} so "order" is not parsed as an id
@router.put("/order", response_model=List[MenuCategoryResponse])
async def reorder_categories(
    organization_id: UUID,
    order_data: MenuCategoryOrderUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Rank categories 1..N following the given id order"""
    await verify_organization_access(organization_id, current_user, db)
    require_admin(current_user)
    return await menu_service.reorder_categories(db, organization_id, order_data.category_ids)


@router.put("/{category_id}", response_model=MenuCategoryResponse)
async def rename_category(
    organization_id: UUID,
    category_id: UUID,
    category_data: MenuCategoryUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Rename a category"""
    await verify_organization_access(organization_id, current_user, db)
    require_admin(current_user)
    return await menu_service.rename_category(db, organization_id, category_id, category_data.name)


@router.delete("/{category_id}", status_code=204)
async def delete_category(
    organization_id: UUID,
    category_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a category and all of its items"""
    await verify_organization_access(organization_id, current_user, db)
    require_admin(current_user)
    await menu_service.delete_category(db, organization_id, category_id)
