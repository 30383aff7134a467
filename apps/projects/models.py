"""
Projects database models.

Stores project information including metadata, images, and links.
"""
from uuid import uuid4

from sqlalchemy import Column, String, Text, Boolean, DateTime, Integer, JSON
from sqlalchemy.dialects.postgresql import JSONB

from apps.shared.database import Base, utcnow

PROJECT_STATUSES = ("DRAFT", "PUBLISHED", "ARCHIVED")

# JSONB on PostgreSQL, plain JSON elsewhere
JSONList = JSON().with_variant(JSONB(), "postgresql")


class Project(Base):
    """
    Project model for portfolio projects.

    Stores all project data including:
    - Basic info (title, description, long description, category)
    - Media (thumbnail URL and gallery image URLs)
    - Metadata (technologies, live/github links)
    - Display settings (featured, order, status)

    The project owns every image URL it references: deleting the project
    or dropping an image from it removes the file from storage.
    """
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    slug = Column(Text, unique=True, index=True, nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    long_description = Column(Text)
    category = Column(Text, nullable=False, default="Other")
    technologies = Column(JSONList, nullable=False, default=list)  # ["React", "Python", "PostgreSQL"]
    thumbnail = Column(Text, nullable=False)
    images = Column(JSONList, nullable=False, default=list)
    live_url = Column(Text)
    github_url = Column(Text)
    featured = Column(Boolean, nullable=False, default=False)
    order = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="DRAFT", index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def image_urls(self) -> list[str]:
        """Thumbnail followed by gallery images, without duplicates."""
        urls = [self.thumbnail] if self.thumbnail else []
        urls.extend(self.images or [])
        return list(dict.fromkeys(urls))
