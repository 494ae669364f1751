"""Dashboard statistics API endpoints"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User
from app.schemas.dashboard import DashboardStats
from app.services.dashboard import get_stats
from app.api.auth import get_current_active_user, verify_organization_access

router = APIRouter()


@router.get("/organizations/{organization_id}/dashboard", response_model=DashboardStats)
async def get_organization_dashboard(
    organization_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Statistics for one restaurant"""
    await verify_organization_access(organization_id, current_user, db)
    return await get_stats(db, organization_id)


@router.get("/dashboard", response_model=DashboardStats)
async def get_active_dashboard(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Statistics for the active restaurant; zeros when none is selected"""
    organization_id = current_user.active_organization_id
    if organization_id is not None:
        await verify_organization_access(organization_id, current_user, db)
    return await get_stats(db, organization_id)
