"""Order models"""

import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, Numeric, Text, Uuid, Index
from sqlalchemy.orm import relationship

from app.database import Base


class OrderStatus(str, enum.Enum):
    """Kitchen pipeline statuses (wire and storage representation)"""
    NEW = "new"
    COOKING = "cooking"
    READY = "ready"
    COMPLETED = "completed"


PENDING_STATUSES = (OrderStatus.NEW, OrderStatus.COOKING, OrderStatus.READY)


class OrderType(str, enum.Enum):
    DINE_IN = "dine-in"
    TAKEAWAY = "takeaway"


class Order(Base):
    """Customer orders"""
    __tablename__ = "orders"
    __table_args__ = (
        Index("orders_organization_status_idx", "organization_id", "status"),
    )

    # Short human-presentable code read aloud by staff
    id = Column(String(8), primary_key=True)
    organization_id = Column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)

    type = Column(String(20), nullable=False, default=OrderType.TAKEAWAY.value)
    customer_name = Column(String(255))
    table_number = Column(String(20))  # dine-in only
    payment_type = Column(String(20), nullable=False, default="cash")

    total = Column(Numeric(12, 2), nullable=False)
    status = Column(String(20), nullable=False, default=OrderStatus.NEW.value, index=True)
    notes = Column(Text)

    # Set exactly when status is completed
    completed_at = Column(DateTime)

    created_at = Column(DateTime, default=datetime.now, index=True)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    # Relationships
    organization = relationship("Organization", back_populates="orders")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
        lazy="selectin",
    )

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def items_summary(self) -> str:
        return ", ".join(f"{item.quantity}x {item.name}" for item in self.items)


class OrderItem(Base):
    """Priced order lines; unit price is a snapshot of the menu price at order time"""
    __tablename__ = "order_items"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id = Column(String(8), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    menu_item_id = Column(Uuid, ForeignKey("menu_items.id", ondelete="SET NULL"), index=True)
    position = Column(Integer, nullable=False, default=0)

    name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    total = Column(Numeric(12, 2), nullable=False)
    notes = Column(Text)
    status = Column(String(20), nullable=False, default=OrderStatus.NEW.value)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    # Relationships
    order = relationship("Order", back_populates="items")
