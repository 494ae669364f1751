"""Order schemas"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from pydantic import AliasChoices, BaseModel, Field


class RequestedOrderItem(BaseModel):
    """One entry of the item list collected by the voice agent"""
    id: str = Field(min_length=1)
    name: Optional[str] = None
    quantity: int = Field(gt=0)
    notes: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("notes", "customizations"),
    )


class OrderStatusUpdate(BaseModel):
    """Update order status request"""
    status: str


class OrderItemResponse(BaseModel):
    """Order line in response"""
    id: UUID
    menu_item_id: Optional[UUID]
    name: str
    quantity: int
    price: Decimal
    total: Decimal
    notes: Optional[str]
    status: str

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    """Order response"""
    id: str
    organization_id: UUID
    type: str
    customer_name: Optional[str]
    table_number: Optional[str]
    payment_type: str
    total: Decimal
    status: str
    notes: Optional[str]
    completed_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime
    item_count: int
    items_summary: str
    items: List[OrderItemResponse]

    class Config:
        from_attributes = True
