"""Database models"""

from app.models.organization import Organization, Member
from app.models.user import User, UserRole
from app.models.menu import MenuCategory, MenuItem
from app.models.order import Order, OrderItem, OrderStatus, OrderType
from app.models.knowledge import Source, SourceType, Document

__all__ = [
    "Organization",
    "Member",
    "User",
    "UserRole",
    "MenuCategory",
    "MenuItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderType",
    "Source",
    "SourceType",
    "Document",
]
