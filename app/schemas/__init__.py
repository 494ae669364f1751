"""Pydantic schemas for request/response validation"""

from app.schemas.auth import (
    Token,
    RefreshRequest,
    UserCreate,
    UserResponse,
    ActiveOrganizationUpdate,
)
from app.schemas.organization import (
    OrganizationCreate,
    OrganizationUpdate,
    OrganizationResponse,
    AgentSettingsResponse,
    AgentSettingsUpdate,
)
from app.schemas.menu import (
    MenuCategoryCreate,
    MenuCategoryUpdate,
    MenuCategoryOrderUpdate,
    MenuCategoryResponse,
    MenuItemCreate,
    MenuItemUpdate,
    MenuItemResponse,
)
from app.schemas.order import (
    RequestedOrderItem,
    OrderStatusUpdate,
    OrderItemResponse,
    OrderResponse,
)
from app.schemas.dashboard import DashboardStats
from app.schemas.knowledge import (
    TextSourceCreate,
    SourceResponse,
    FileSourceResponse,
    Pagination,
    TextSourcePage,
)
from app.schemas.webhook import WebhookEvent, WebhookEventData

__all__ = [
    "Token",
    "RefreshRequest",
    "UserCreate",
    "UserResponse",
    "ActiveOrganizationUpdate",
    "OrganizationCreate",
    "OrganizationUpdate",
    "OrganizationResponse",
    "AgentSettingsResponse",
    "AgentSettingsUpdate",
    "MenuCategoryCreate",
    "MenuCategoryUpdate",
    "MenuCategoryOrderUpdate",
    "MenuCategoryResponse",
    "MenuItemCreate",
    "MenuItemUpdate",
    "MenuItemResponse",
    "RequestedOrderItem",
    "OrderStatusUpdate",
    "OrderItemResponse",
    "OrderResponse",
    "DashboardStats",
    "TextSourceCreate",
    "SourceResponse",
    "FileSourceResponse",
    "Pagination",
    "TextSourcePage",
    "WebhookEvent",
    "WebhookEventData",
]
