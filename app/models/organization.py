"""Organization (restaurant tenant) models"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, JSON, Text, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship

from app.database import Base


class Organization(Base):
    """Restaurant tenant"""
    __tablename__ = "organizations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    logo = Column(String(500))
    description = Column(Text)

    # Voice agent bound 1:1 to this restaurant
    agent_id = Column(String(100), unique=True, index=True)

    # Free-form attributes with no fixed shape
    metadata_json = Column(JSON, default=dict)

    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    # Relationships
    members = relationship("Member", back_populates="organization", cascade="all, delete-orphan")
    menu_categories = relationship("MenuCategory", back_populates="organization", cascade="all, delete-orphan")
    menu_items = relationship("MenuItem", back_populates="organization", cascade="all, delete-orphan")
    orders = relationship("Order", back_populates="organization", cascade="all, delete-orphan")
    sources = relationship("Source", back_populates="organization", cascade="all, delete-orphan")


class Member(Base):
    """Membership of a user in an organization"""
    __tablename__ = "members"
    __table_args__ = (UniqueConstraint("organization_id", "user_id", name="members_org_user_uq"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id = Column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(50), default="member", nullable=False)  # owner, member
    created_at = Column(DateTime, default=datetime.now)

    # Relationships
    organization = relationship("Organization", back_populates="members")
    user = relationship("User", back_populates="memberships")
