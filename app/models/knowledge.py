"""Knowledge base models"""

import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, JSON, Text, Uuid
from sqlalchemy.orm import relationship
from pgvector.sqlalchemy import Vector

from app.config import settings
from app.database import Base


class SourceType(str, enum.Enum):
    TEXT = "text"
    FILE = "file"


class Source(Base):
    """Knowledge base input document (raw text or uploaded file)"""
    __tablename__ = "sources"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id = Column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(10), nullable=False)
    name = Column(String(255), nullable=False)

    # Raw text, or text extracted from the uploaded file
    content = Column(Text)

    # File sources only
    file_name = Column(String(255))
    file_path = Column(String(500))
    mime_type = Column(String(150))
    size = Column(Integer)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    # Relationships
    organization = relationship("Organization", back_populates="sources")
    documents = relationship("Document", back_populates="source", cascade="all, delete-orphan", passive_deletes=True)


class Document(Base):
    """Embedded chunk of a source"""
    __tablename__ = "documents"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    source_id = Column(Uuid, ForeignKey("sources.id", ondelete="CASCADE"), nullable=False, index=True)
    organization_id = Column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    metadata_json = Column(JSON, default=dict)
    embedding = Column(Vector(settings.embedding_dimensions))
    created_at = Column(DateTime, default=datetime.now)

    # Relationships
    source = relationship("Source", back_populates="documents")
