"""Organization (restaurant) management API endpoints"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.organization import Organization
from app.models.user import User, UserRole
from app.schemas.organization import (
    OrganizationCreate,
    OrganizationUpdate,
    OrganizationResponse,
)
from app.services import organizations as organization_service
from app.api.auth import get_current_active_user, require_admin, verify_organization_access

router = APIRouter()


@router.get("", response_model=List[OrganizationResponse])
async def list_organizations(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """List restaurants the user belongs to (all of them for SuperAdmin)"""
    if current_user.role == UserRole.SUPER_ADMIN:
        result = await db.execute(
            select(Organization)
            .where(Organization.is_active == True)
            .order_by(Organization.created_at)
        )
        return result.scalars().all()

    return await organization_service.list_user_organizations(db, current_user)


@router.post("", response_model=OrganizationResponse, status_code=status.HTTP_201_CREATED)
async def create_organization(
    organization_data: OrganizationCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a restaurant owned by the current user and make it active"""
    require_admin(current_user)
    return await organization_service.create_organization(db, current_user, organization_data)


@router.get("/{organization_id}", response_model=OrganizationResponse)
async def get_organization(
    organization_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Get restaurant details"""
    await verify_organization_access(organization_id, current_user, db)
    return await organization_service.get_organization(db, organization_id)


@router.put("/{organization_id}", response_model=OrganizationResponse)
async def update_organization(
    organization_id: UUID,
    organization_data: OrganizationUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Update restaurant details"""
    await verify_organization_access(organization_id, current_user, db)
    require_admin(current_user)
    return await organization_service.update_organization(db, organization_id, organization_data)
