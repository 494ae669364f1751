"""Tool endpoints called by the voice agent during a conversation"""

from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.database import get_db
from app.exceptions import InvalidPayloadError
from app.models.organization import Organization
from app.services.embeddings import EmbeddingsClient, get_embeddings_client
from app.services.knowledge import retrieve_knowledge
from app.services.menu import list_items
from app.services.organizations import get_organization

router = APIRouter()
logger = structlog.get_logger()


# Response schemas for tools
class MenuItemResult(BaseModel):
    id: str
    name: str
    description: Optional[str]
    price: Decimal
    category_id: str
    category_name: str
    image_url: Optional[str]


class MenuToolResponse(BaseModel):
    success: bool = True
    data: List[MenuItemResult]


class KnowledgeToolResponse(BaseModel):
    success: bool = True
    data: str


async def resolve_organization(organization_id: str, db: AsyncSession) -> Organization:
    """Organization named by an untrusted path segment"""
    if not organization_id or not organization_id.strip():
        raise InvalidPayloadError("Restaurant ID is required")

    return await get_organization(db, organization_id.strip())


@router.get("/{organization_id}/menu", response_model=MenuToolResponse)
async def get_menu(
    organization_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Available menu items joined with their category, in menu order"""
    organization = await resolve_organization(organization_id, db)

    rows = await list_items(db, organization.id, available_only=True)

    logger.info("Tool: get_menu", organization_id=str(organization.id), items=len(rows))

    return MenuToolResponse(
        data=[
            MenuItemResult(
                id=str(item.id),
                name=item.name,
                description=item.description,
                price=item.price,
                category_id=str(item.category_id),
                category_name=category_name,
                image_url=item.image_url,
            )
            for item, category_name in rows
        ]
    )


@router.get("/{organization_id}/knowledge", response_model=KnowledgeToolResponse)
async def get_knowledge(
    organization_id: str,
    query: str = "",
    db: AsyncSession = Depends(get_db),
    embeddings: EmbeddingsClient = Depends(get_embeddings_client),
):
    """Knowledge base passages relevant to the caller's question"""
    organization = await resolve_organization(organization_id, db)

    data = await retrieve_knowledge(db, embeddings, organization.id, query)

    logger.info("Tool: get_knowledge", organization_id=str(organization.id), query=query)

    return KnowledgeToolResponse(data=data)
