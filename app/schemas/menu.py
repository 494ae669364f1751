"""Menu schemas"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, Field


class MenuCategoryCreate(BaseModel):
    """Create menu category"""
    name: str = Field(min_length=1, max_length=255)


class MenuCategoryUpdate(BaseModel):
    """Rename menu category"""
    name: str = Field(min_length=1, max_length=255)


class MenuCategoryOrderUpdate(BaseModel):
    """Full ordered list of category ids; ranks become 1..N"""
    category_ids: List[UUID]


class MenuCategoryResponse(BaseModel):
    """Menu category response"""
    id: UUID
    organization_id: UUID
    name: str
    order_column: int
    created_at: datetime

    class Config:
        from_attributes = True


class MenuItemCreate(BaseModel):
    """Create menu item request"""
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    category_id: UUID
    price: Decimal = Field(ge=0, decimal_places=2)
    is_available: bool = True
    image_url: Optional[str] = None


class MenuItemUpdate(BaseModel):
    """Update menu item request"""
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    category_id: Optional[UUID] = None
    price: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    is_available: Optional[bool] = None
    image_url: Optional[str] = None
    remove_image: bool = False


class MenuItemResponse(BaseModel):
    """Menu item response"""
    id: UUID
    organization_id: UUID
    category_id: UUID
    category_name: Optional[str] = None
    name: str
    description: Optional[str]
    image_url: Optional[str]
    price: Decimal
    is_available: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
