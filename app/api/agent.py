"""Voice agent configuration API endpoints"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.exceptions import ConflictError, NotFoundError
from app.models.user import User
from app.schemas.organization import (
    AgentSettingsResponse,
    AgentSettingsUpdate,
    OrganizationResponse,
)
from app.services.agent import VoiceAgentClient, get_agent_client
from app.services.organizations import get_organization, set_agent_id
from app.api.auth import get_current_active_user, require_admin, verify_organization_access

router = APIRouter()


@router.post("", response_model=OrganizationResponse, status_code=status.HTTP_201_CREATED)
async def provision_agent(
    organization_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    agent_client: VoiceAgentClient = Depends(get_agent_client),
):
    """Create the voice agent for a restaurant and bind it"""
    await verify_organization_access(organization_id, current_user, db)
    require_admin(current_user)

    organization = await get_organization(db, organization_id)
    if organization.agent_id:
        raise ConflictError("Organization already has a voice agent")

    agent_id = await agent_client.create_agent(organization)
    return await set_agent_id(db, organization, agent_id)


@router.get("", response_model=AgentSettingsResponse)
async def get_agent_settings(
    organization_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    agent_client: VoiceAgentClient = Depends(get_agent_client),
):
    """Get the voice agent settings"""
    await verify_organization_access(organization_id, current_user, db)

    organization = await get_organization(db, organization_id)
    if not organization.agent_id:
        raise NotFoundError("Voice agent")

    return await agent_client.get_settings(organization.agent_id)


@router.put("", response_model=AgentSettingsResponse)
async def update_agent_settings(
    organization_id: UUID,
    updates: AgentSettingsUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    agent_client: VoiceAgentClient = Depends(get_agent_client),
):
    """Update voice, language, LLM model or first message of the agent"""
    await verify_organization_access(organization_id, current_user, db)
    require_admin(current_user)

    organization = await get_organization(db, organization_id)
    if not organization.agent_id:
        raise NotFoundError("Voice agent")

    return await agent_client.update_settings(organization.agent_id, updates)
