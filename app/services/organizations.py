"""Organization (restaurant) services"""

import secrets
import string
from typing import List, Optional
from uuid import UUID

from slugify import slugify
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.exceptions import NotFoundError
from app.models.organization import Organization, Member
from app.models.user import User
from app.schemas.organization import OrganizationCreate, OrganizationUpdate

logger = structlog.get_logger()

SLUG_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def build_slug(name: str) -> str:
    """Slugified name plus a random suffix so equal names never collide"""
    suffix = "".join(secrets.choice(SLUG_SUFFIX_ALPHABET) for _ in range(6))
    base = slugify(name) or "restaurant"
    return f"{base}-{suffix}"


def parse_organization_id(value) -> Optional[UUID]:
    """Parse an organization id from an untrusted path segment; None if malformed"""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


async def get_organization(db: AsyncSession, organization_id) -> Organization:
    parsed = parse_organization_id(organization_id)
    if parsed is None:
        raise NotFoundError("Organization", organization_id)

    result = await db.execute(select(Organization).where(Organization.id == parsed))
    organization = result.scalar_one_or_none()

    if not organization:
        raise NotFoundError("Organization", organization_id)

    return organization


async def get_organization_by_agent_id(db: AsyncSession, agent_id: str) -> Organization:
    """Resolve the restaurant bound to a voice agent"""
    if not agent_id:
        raise NotFoundError("Organization for agent", agent_id)

    result = await db.execute(
        select(Organization).where(
            Organization.agent_id == agent_id,
            Organization.is_active == True,
        )
    )
    organization = result.scalar_one_or_none()

    if not organization:
        raise NotFoundError("Organization for agent", agent_id)

    return organization


async def list_user_organizations(db: AsyncSession, user: User) -> List[Organization]:
    result = await db.execute(
        select(Organization)
        .join(Member, Member.organization_id == Organization.id)
        .where(Member.user_id == user.id, Organization.is_active == True)
        .order_by(Organization.created_at)
    )
    return list(result.scalars().all())


async def is_member(db: AsyncSession, organization_id: UUID, user: User) -> bool:
    result = await db.execute(
        select(Member.id).where(
            Member.organization_id == organization_id,
            Member.user_id == user.id,
        )
    )
    return result.first() is not None


async def create_organization(
    db: AsyncSession,
    owner: User,
    data: OrganizationCreate,
) -> Organization:
    """Create a restaurant, make the creator its owner and select it"""
    organization = Organization(
        name=data.name,
        slug=build_slug(data.name),
        description=data.description,
        metadata_json={},
    )
    db.add(organization)

    try:
        await db.flush()
        db.add(Member(organization_id=organization.id, user_id=owner.id, role="owner"))
        owner.active_organization_id = organization.id
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Organization created",
        organization_id=str(organization.id),
        slug=organization.slug,
        owner_id=str(owner.id),
    )
    return organization


async def update_organization(
    db: AsyncSession,
    organization_id: UUID,
    data: OrganizationUpdate,
) -> Organization:
    organization = await get_organization(db, organization_id)

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(organization, field, value)

    await db.commit()
    await db.refresh(organization)

    return organization


async def set_agent_id(db: AsyncSession, organization: Organization, agent_id: str) -> Organization:
    organization.agent_id = agent_id
    await db.commit()
    await db.refresh(organization)

    logger.info(
        "Voice agent linked",
        organization_id=str(organization.id),
        agent_id=agent_id,
    )
    return organization
