from sqlalchemy import Column, String, Text, Integer, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship

from green_essays.db.base import BaseModel


class Essay(BaseModel):
    __tablename__ = "green_essays"
    __table_args__ = (
        UniqueConstraint("section", "slug", name="uq_green_essays_section_slug"),
    )
    
    slug = Column(String(255), nullable=False)
    section = Column(String(100), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    subtitle = Column(Text, default="")
    author_name = Column(String(255), nullable=False)
    cover_image_url = Column(String(1024), nullable=True)
    content_html = Column(Text, nullable=True)
    content_json = Column(JSON, nullable=True)
    status = Column(String(20), nullable=False, default="draft")
    version = Column(Integer, nullable=False, default=1)
    reading_time = Column(Integer, nullable=False, default=1)
    updated_by = Column(String(255), nullable=True)
    
    # Relationships
    versions = relationship("EssayVersion", back_populates="essay", cascade="all, delete-orphan")


class EssayVersion(BaseModel):
    __tablename__ = "green_essays_versions"
    
    essay_id = Column(String(36), ForeignKey("green_essays.id"), nullable=False, index=True)
    version = Column(Integer, nullable=False)
    title = Column(String(255), nullable=False)
    subtitle = Column(Text, nullable=True)
    content_html = Column(Text, nullable=True)
    content_json = Column(JSON, nullable=True)
    created_by = Column(String(255), nullable=True)
    
    # Relationships
    essay = relationship("Essay", back_populates="versions")


class EditLogEntry(BaseModel):
    __tablename__ = "ops_edit_log"
    
    essay_id = Column(String(36), nullable=False, index=True)
    user_email = Column(String(255), nullable=False, default="")
    action = Column(String(50), nullable=False)
