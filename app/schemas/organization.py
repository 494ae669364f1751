"""Organization schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field


class OrganizationCreate(BaseModel):
    """Create restaurant request"""
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None


class OrganizationUpdate(BaseModel):
    """Update restaurant request"""
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    logo: Optional[str] = None


class OrganizationResponse(BaseModel):
    """Restaurant response"""
    id: UUID
    name: str
    slug: str
    logo: Optional[str]
    description: Optional[str]
    agent_id: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class AgentSettingsResponse(BaseModel):
    """Voice agent settings as held by the voice platform"""
    agent_id: str
    voice: Optional[str] = None
    language: Optional[str] = None
    llm_model: Optional[str] = None
    system_prompt: Optional[str] = None
    first_message: Optional[str] = None


class AgentSettingsUpdate(BaseModel):
    """Update voice agent settings"""
    voice: Optional[str] = None
    language: Optional[str] = None
    llm_model: Optional[str] = None
    first_message: Optional[str] = None
