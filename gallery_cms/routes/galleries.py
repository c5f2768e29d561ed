"""
Gallery routes.
Public reads for the site, admin-only writes for the CMS console.
"""
from fastapi import APIRouter, Depends, status
from typing import List
import logging

from gallery_cms.models import Gallery
from gallery_cms.schemas import (
    GalleryCreate,
    GalleryDetailResponse,
    GalleryReorderRequest,
    GalleryResponse,
    GalleryUpdate,
    MessageResponse,
    PaintingResponse,
)
from gallery_cms.services.gallery_service import GalleryService, get_gallery_service
from gallery_cms.utils.jwt_auth import require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/galleries", tags=["galleries"])


def _with_paintings(gallery: Gallery, paintings) -> GalleryDetailResponse:
    return GalleryDetailResponse(
        **GalleryResponse.model_validate(gallery).model_dump(),
        paintings=[PaintingResponse.model_validate(p) for p in paintings],
    )


def _with_count(gallery: Gallery, painting_count: int) -> GalleryResponse:
    return GalleryResponse.model_validate(gallery).model_copy(update={"painting_count": painting_count})


@router.get("", response_model=List[GalleryResponse])
async def list_galleries(service: GalleryService = Depends(get_gallery_service)):
    """
    List all galleries in display order.
    Each entry carries the number of visible paintings it holds.
    """
    rows = await service.list_all()
    logger.info(f"Retrieved {len(rows)} galleries")
    return [_with_count(gallery, count) for gallery, count in rows]


@router.get("/main", response_model=GalleryDetailResponse)
async def get_main_gallery(service: GalleryService = Depends(get_gallery_service)):
    """Get the main gallery with its visible paintings."""
    gallery, paintings = await service.get_main()
    return _with_paintings(gallery, paintings)


@router.get("/{slug}", response_model=GalleryDetailResponse)
async def get_gallery(slug: str, service: GalleryService = Depends(get_gallery_service)):
    """Get a gallery by slug with its visible paintings in display order."""
    gallery, paintings = await service.get_by_slug(slug)
    return _with_paintings(gallery, paintings)


@router.post("", response_model=GalleryResponse, status_code=status.HTTP_201_CREATED)
async def create_gallery(
    payload: GalleryCreate,
    service: GalleryService = Depends(get_gallery_service),
    admin: dict = Depends(require_admin),
):
    """
    Create a gallery and its image folders.

    Raises:
        ValidationError: 400 if the slug is unusable
        ConflictError: 409 if the slug is taken
    """
    gallery = await service.create(
        name=payload.name,
        slug=payload.slug,
        description=payload.description,
        is_main=payload.is_main,
    )
    return _with_count(gallery, 0)


@router.put("/reorder", response_model=List[GalleryResponse])
async def reorder_galleries(
    payload: GalleryReorderRequest,
    service: GalleryService = Depends(get_gallery_service),
    admin: dict = Depends(require_admin),
):
    """
    Reorder galleries by providing IDs in the desired display order.
    Unlisted galleries keep their relative order after the listed ones.
    """
    rows = await service.reorder(payload.gallery_ids)
    return [_with_count(gallery, count) for gallery, count in rows]


@router.put("/{gallery_id}", response_model=GalleryResponse)
async def update_gallery(
    gallery_id: int,
    payload: GalleryUpdate,
    service: GalleryService = Depends(get_gallery_service),
    admin: dict = Depends(require_admin),
):
    """Partially update a gallery. Only fields present in the body are changed."""
    gallery = await service.update(gallery_id, **payload.model_dump(exclude_unset=True))
    return GalleryResponse.model_validate(gallery)


@router.delete("/{gallery_id}", response_model=MessageResponse)
async def delete_gallery(
    gallery_id: int,
    service: GalleryService = Depends(get_gallery_service),
    admin: dict = Depends(require_admin),
):
    """
    Delete a gallery, its paintings and its folder.

    Raises:
        ConflictError: 409 for the main gallery
    """
    await service.delete(gallery_id)
    return MessageResponse(message="Gallery deleted successfully")
