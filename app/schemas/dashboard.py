"""Dashboard schemas"""

from decimal import Decimal
from pydantic import BaseModel


class DashboardStats(BaseModel):
    """Summary statistics for one organization"""
    total_orders: int = 0
    total_revenue: Decimal = Decimal("0")
    today_orders: int = 0
    today_revenue: Decimal = Decimal("0")
    pending_orders: int = 0
    menu_items_count: int = 0
