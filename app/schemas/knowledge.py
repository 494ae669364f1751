"""Knowledge base schemas"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, Field


class TextSourceCreate(BaseModel):
    """Create raw text source"""
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)


class SourceResponse(BaseModel):
    """Knowledge source response"""
    id: UUID
    organization_id: UUID
    type: str
    name: str
    content: Optional[str]
    file_name: Optional[str]
    mime_type: Optional[str]
    size: Optional[int]
    created_at: datetime

    class Config:
        from_attributes = True


class FileSourceResponse(BaseModel):
    """Uploaded file with its public URL"""
    id: UUID
    name: str
    size: int
    type: str
    url: str
    created_at: datetime


class Pagination(BaseModel):
    page: int
    page_size: int
    total: int
    total_pages: int


class TextSourcePage(BaseModel):
    """Paginated text sources"""
    data: List[SourceResponse]
    pagination: Pagination
