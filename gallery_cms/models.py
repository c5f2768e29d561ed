"""
SQLAlchemy models for the application.
All database models inherit from Base (declarative base).
"""
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    false,
    text,
    true,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from gallery_cms.database import Base
from gallery_cms.services.file_manager import image_url


class Gallery(Base):
    """
    Gallery model.
    Each gallery owns a folder under the upload root holding originals and thumbnails.
    """
    __tablename__ = "galleries"
    __table_args__ = (
        # At most one row may carry is_main; the service keeps it at exactly one
        Index(
            "uq_galleries_single_main",
            "is_main",
            unique=True,
            sqlite_where=text("is_main = 1"),
            postgresql_where=text("is_main"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String, nullable=False, unique=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    is_main = Column(Boolean, nullable=False, default=False, server_default=false())
    folder_name = Column(String, nullable=False, unique=True)
    display_order = Column(Integer, nullable=False, default=0, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class Painting(Base):
    """
    Painting model.
    Stores artwork metadata and the filenames of its original image and thumbnail.
    """
    __tablename__ = "paintings"

    id = Column(Integer, primary_key=True, index=True)
    gallery_id = Column(
        Integer,
        ForeignKey("galleries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String, nullable=False)
    technique = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    dimensions = Column(String, nullable=True)
    medium = Column(String, nullable=True)
    image_filename = Column(String, nullable=False)
    thumbnail_filename = Column(String, nullable=False)
    display_order = Column(Integer, nullable=False, default=0, index=True)
    is_visible = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Loaded with every painting so responses can build public image URLs
    gallery = relationship("Gallery", lazy="joined", innerjoin=True)

    @property
    def image_url(self) -> str:
        return image_url(self.gallery.folder_name, self.image_filename, "original")

    @property
    def thumbnail_url(self) -> str:
        return image_url(self.gallery.folder_name, self.thumbnail_filename, "thumbnail")


class User(Base):
    """
    User model.
    password_hash is an empty string for accounts that only sign in through Google.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False, default="")
    google_id = Column(String, nullable=True)
    reset_token = Column(String, nullable=True)
    reset_token_expires = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class ResumeContent(Base):
    """Free-text resume section keyed by name, e.g. artist_statement_en."""
    __tablename__ = "resume_content"

    id = Column(Integer, primary_key=True, index=True)
    section_key = Column(String, nullable=False, unique=True, index=True)
    content = Column(Text, nullable=False)
    section_order = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class TimelineEntry(Base):
    """
    Resume timeline entry.
    items holds a JSON-encoded list of strings, or NULL when the entry has no list.
    """
    __tablename__ = "timeline_entries"

    id = Column(Integer, primary_key=True, index=True)
    date_range = Column(String, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    items = Column(Text, nullable=True)
    display_order = Column(Integer, nullable=False, default=0, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class ExpertiseArea(Base):
    __tablename__ = "expertise_areas"

    id = Column(Integer, primary_key=True, index=True)
    icon = Column(String, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    display_order = Column(Integer, nullable=False, default=0, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
