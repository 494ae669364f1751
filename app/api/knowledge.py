"""Knowledge base source API endpoints"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User
from app.schemas.knowledge import (
    FileSourceResponse,
    Pagination,
    SourceResponse,
    TextSourceCreate,
    TextSourcePage,
)
from app.services import knowledge as knowledge_service
from app.services.embeddings import EmbeddingsClient, get_embeddings_client
from app.services.storage import LocalStorage, get_storage
from app.api.auth import get_current_active_user, require_admin, verify_organization_access

router = APIRouter()


@router.post("/text", response_model=SourceResponse, status_code=201)
async def create_text_source(
    organization_id: UUID,
    source_data: TextSourceCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    embeddings: EmbeddingsClient = Depends(get_embeddings_client),
):
    """Add raw text to the knowledge base"""
    await verify_organization_access(organization_id, current_user, db)
    require_admin(current_user)

    return await knowledge_service.create_text_source(
        db, embeddings, organization_id, source_data.title, source_data.content
    )


@router.get("/text", response_model=TextSourcePage)
async def list_text_sources(
    organization_id: UUID,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """List text sources, newest first"""
    await verify_organization_access(organization_id, current_user, db)

    sources, total, total_pages = await knowledge_service.list_text_sources(
        db, organization_id, page=page, page_size=page_size
    )
    return TextSourcePage(
        data=[SourceResponse.model_validate(source) for source in sources],
        pagination=Pagination(page=page, page_size=page_size, total=total, total_pages=total_pages),
    )


@router.post("/files", response_model=SourceResponse, status_code=201)
async def upload_file_source(
    organization_id: UUID,
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    embeddings: EmbeddingsClient = Depends(get_embeddings_client),
    storage: LocalStorage = Depends(get_storage),
):
    """Upload a PDF, DOCX, text or markdown file to the knowledge base"""
    await verify_organization_access(organization_id, current_user, db)
    require_admin(current_user)

    return await knowledge_service.create_file_source(
        db,
        embeddings,
        storage,
        organization_id,
        file.filename,
        file.content_type,
        await file.read(),
    )


@router.get("/files", response_model=List[FileSourceResponse])
async def list_file_sources(
    organization_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    storage: LocalStorage = Depends(get_storage),
):
    """List uploaded files with their public URLs"""
    await verify_organization_access(organization_id, current_user, db)

    sources = await knowledge_service.list_file_sources(db, organization_id)
    return [
        FileSourceResponse(
            id=source.id,
            name=source.name,
            size=source.size or 0,
            type=source.mime_type or "",
            url=storage.public_url_for(source.file_path),
            created_at=source.created_at,
        )
        for source in sources
    ]


@router.delete("/{source_id}", status_code=204)
async def delete_source(
    organization_id: UUID,
    source_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    storage: LocalStorage = Depends(get_storage),
):
    """Delete a source with its chunks and stored file"""
    await verify_organization_access(organization_id, current_user, db)
    require_admin(current_user)
    await knowledge_service.delete_source(db, storage, organization_id, source_id)
