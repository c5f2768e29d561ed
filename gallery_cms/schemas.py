"""
Pydantic schemas for request and response data validation.
Defines data structures for API endpoints with automatic validation and serialization.
"""
from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, field_validator
from datetime import datetime
from typing import Annotated, Dict, Optional, List

from gallery_cms.services.resume_service import decode_items


def _unique_ids(v: List[int]) -> List[int]:
    if not v:
        raise ValueError('At least one ID is required')
    if len(v) != len(set(v)):
        raise ValueError('Duplicate IDs are not allowed')
    return v


# ---------------------------------------------------------------------------
# Galleries
# ---------------------------------------------------------------------------

class GalleryResponse(BaseModel):
    """
    Response schema for gallery data.
    painting_count is only filled in by the gallery listing.
    """
    id: int
    slug: str
    name: str
    description: Optional[str] = None
    is_main: bool
    folder_name: str
    display_order: int
    painting_count: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaintingResponse(BaseModel):
    """Response schema for painting data, including public image URLs."""
    id: int
    gallery_id: int
    title: str
    technique: Optional[str] = None
    description: Optional[str] = None
    dimensions: Optional[str] = None
    medium: Optional[str] = None
    image_filename: str
    thumbnail_filename: str
    image_url: str
    thumbnail_url: str
    display_order: int
    is_visible: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class GalleryDetailResponse(GalleryResponse):
    """Gallery with its visible paintings in display order."""
    paintings: List[PaintingResponse]


class GalleryCreate(BaseModel):
    """
    Request schema for creating galleries.
    Used by POST /api/galleries endpoint.
    """
    name: str = Field(min_length=1)
    slug: str = Field(min_length=1)
    description: Optional[str] = None
    is_main: bool = False


class GalleryUpdate(BaseModel):
    """
    Request schema for partial gallery updates.
    Used by PUT /api/galleries/{id} endpoint. Omitted fields are left unchanged.
    """
    name: Optional[str] = Field(default=None, min_length=1)
    slug: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    is_main: Optional[bool] = None


class GalleryReorderRequest(BaseModel):
    """
    Request schema for reordering galleries.
    Contains array of gallery IDs in the desired display order.
    """
    gallery_ids: List[int] = Field(alias="galleryIds")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('gallery_ids')
    @classmethod
    def validate_unique_ids(cls, v):
        return _unique_ids(v)


# ---------------------------------------------------------------------------
# Paintings
# ---------------------------------------------------------------------------

class PaintingMoveRequest(BaseModel):
    gallery_id: int = Field(gt=0)


class PaintingReorderRequest(BaseModel):
    """
    Request schema for reordering paintings within one gallery.
    Contains array of painting IDs in the desired display order.
    """
    painting_ids: List[int] = Field(alias="paintingIds")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('painting_ids')
    @classmethod
    def validate_unique_ids(cls, v):
        return _unique_ids(v)


# ---------------------------------------------------------------------------
# Resume
# ---------------------------------------------------------------------------

class ResumeContentResponse(BaseModel):
    section_key: str
    content: str
    section_order: int
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ResumeContentUpdate(BaseModel):
    content: str


class TimelineEntryResponse(BaseModel):
    id: int
    date_range: str
    title: str
    description: Optional[str] = None
    items: Optional[List[str]] = None
    display_order: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator('items', mode='before')
    @classmethod
    def decode_stored_items(cls, v):
        # Stored as JSON text in the database
        if isinstance(v, str):
            return decode_items(v)
        return v


class TimelineEntryCreate(BaseModel):
    date_range: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: Optional[str] = None
    items: Optional[List[str]] = None


class TimelineEntryUpdate(BaseModel):
    """Partial update; send "items": null to clear the list, omit it to keep it."""
    date_range: Optional[str] = Field(default=None, min_length=1)
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    items: Optional[List[str]] = None


class ExpertiseAreaResponse(BaseModel):
    id: int
    icon: str
    title: str
    description: Optional[str] = None
    display_order: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ExpertiseAreaCreate(BaseModel):
    icon: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: Optional[str] = None


class ExpertiseAreaUpdate(BaseModel):
    icon: Optional[str] = Field(default=None, min_length=1)
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None


class ReorderRequest(BaseModel):
    """Ordered list of IDs for timeline entries or expertise areas."""
    ids: List[int]

    @field_validator('ids')
    @classmethod
    def validate_unique_ids(cls, v):
        return _unique_ids(v)


class ResumeResponse(BaseModel):
    content: Dict[str, str]
    timeline: List[TimelineEntryResponse]
    expertise: List[ExpertiseAreaResponse]


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

def _fits_bcrypt(v: str) -> str:
    # bcrypt only uses the first 72 bytes of a password
    if len(v.encode("utf-8")) > 72:
        raise ValueError("Password must be at most 72 bytes")
    return v


PasswordStr = Annotated[str, Field(min_length=6), AfterValidator(_fits_bcrypt)]


class LoginRequest(BaseModel):
    email: EmailStr
    password: PasswordStr


class GoogleLoginRequest(BaseModel):
    credential: str = Field(min_length=1)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(alias="currentPassword", min_length=1, max_length=72)
    new_password: PasswordStr = Field(alias="newPassword")

    model_config = ConfigDict(populate_by_name=True)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1)
    password: PasswordStr


class UserResponse(BaseModel):
    id: int
    email: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthUser(BaseModel):
    id: int
    email: str


class TokenResponse(BaseModel):
    token: str
    user: AuthUser


class MessageResponse(BaseModel):
    message: str
