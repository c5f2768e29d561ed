"""
Painting routes.
Create and update take multipart form data with an optional `image` file field.
"""
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from typing import List, Optional, Tuple
import logging

from gallery_cms.config import settings
from gallery_cms.errors import ValidationError
from gallery_cms.schemas import (
    MessageResponse,
    PaintingMoveRequest,
    PaintingReorderRequest,
    PaintingResponse,
)
from gallery_cms.services.painting_service import PaintingService, get_painting_service
from gallery_cms.utils.jwt_auth import require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/paintings", tags=["paintings"])


async def read_upload(image: Optional[UploadFile]) -> Tuple[Optional[bytes], Optional[str]]:
    """
    Read an uploaded image, enforcing the allowed types and size limit.

    Returns:
        tuple: (bytes, original filename), or (None, None) when no file was sent
    """
    if image is None or not image.filename:
        return None, None

    if image.content_type not in settings.ALLOWED_IMAGE_TYPES:
        raise ValidationError(
            "Invalid file type",
            {"image": [f"'{image.filename}' is not an allowed image type ({image.content_type})"]},
        )

    data = await image.read()
    if len(data) > settings.MAX_UPLOAD_SIZE:
        max_mb = settings.MAX_UPLOAD_SIZE // (1024 * 1024)
        raise ValidationError("File too large", {"image": [f"Images must be at most {max_mb}MB"]})

    return data, image.filename


@router.get("", response_model=List[PaintingResponse])
async def list_paintings(
    gallery_id: Optional[int] = None,
    service: PaintingService = Depends(get_painting_service),
):
    """List paintings, optionally filtered by gallery, in display order."""
    paintings = await service.list(gallery_id)
    logger.info(f"Retrieved {len(paintings)} paintings (gallery_id={gallery_id})")
    return [PaintingResponse.model_validate(p) for p in paintings]


@router.put("/reorder", response_model=List[PaintingResponse])
async def reorder_paintings(
    payload: PaintingReorderRequest,
    service: PaintingService = Depends(get_painting_service),
    admin: dict = Depends(require_admin),
):
    """
    Reorder the paintings of one gallery.

    Raises:
        NotFoundError: 404 if any ID does not exist
        ValidationError: 400 if the IDs belong to more than one gallery
    """
    paintings = await service.reorder(payload.painting_ids)
    return [PaintingResponse.model_validate(p) for p in paintings]


@router.get("/{painting_id}", response_model=PaintingResponse)
async def get_painting(painting_id: int, service: PaintingService = Depends(get_painting_service)):
    return PaintingResponse.model_validate(await service.get_by_id(painting_id))


@router.post("", response_model=PaintingResponse, status_code=status.HTTP_201_CREATED)
async def create_painting(
    gallery_id: int = Form(..., gt=0),
    title: str = Form(..., min_length=1),
    technique: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    dimensions: Optional[str] = Form(None),
    medium: Optional[str] = Form(None),
    is_visible: bool = Form(True),
    image: Optional[UploadFile] = File(None),
    service: PaintingService = Depends(get_painting_service),
    admin: dict = Depends(require_admin),
):
    """
    Upload a painting image and create its record at the end of the gallery.

    Raises:
        ValidationError: 400 if the image is missing, too large or not an image
        NotFoundError: 404 if the gallery does not exist
    """
    data, filename = await read_upload(image)
    painting = await service.create(
        gallery_id=gallery_id,
        title=title,
        image=data,
        image_name=filename,
        technique=technique,
        description=description,
        dimensions=dimensions,
        medium=medium,
        is_visible=is_visible,
    )
    return PaintingResponse.model_validate(painting)


@router.put("/{painting_id}", response_model=PaintingResponse)
async def update_painting(
    painting_id: int,
    gallery_id: Optional[int] = Form(None, gt=0),
    title: Optional[str] = Form(None, min_length=1),
    technique: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    dimensions: Optional[str] = Form(None),
    medium: Optional[str] = Form(None),
    is_visible: Optional[bool] = Form(None),
    image: Optional[UploadFile] = File(None),
    service: PaintingService = Depends(get_painting_service),
    admin: dict = Depends(require_admin),
):
    """
    Update painting metadata, optionally replacing the image or changing gallery.
    Form fields that are not sent are left unchanged.
    """
    data, filename = await read_upload(image)

    fields = {
        "gallery_id": gallery_id,
        "title": title,
        "is_visible": is_visible,
    }
    # Optional text fields are only written when sent; whitespace clears them
    for key, value in (
        ("technique", technique),
        ("description", description),
        ("dimensions", dimensions),
        ("medium", medium),
    ):
        if value is not None:
            fields[key] = value

    painting = await service.update(painting_id, image=data, image_name=filename, **fields)
    return PaintingResponse.model_validate(painting)


@router.put("/{painting_id}/visibility", response_model=PaintingResponse)
async def toggle_painting_visibility(
    painting_id: int,
    service: PaintingService = Depends(get_painting_service),
    admin: dict = Depends(require_admin),
):
    """Flip a painting between visible and hidden."""
    return PaintingResponse.model_validate(await service.toggle_visibility(painting_id))


@router.put("/{painting_id}/move", response_model=PaintingResponse)
async def move_painting(
    painting_id: int,
    payload: PaintingMoveRequest,
    service: PaintingService = Depends(get_painting_service),
    admin: dict = Depends(require_admin),
):
    """Move a painting and its files to the end of another gallery."""
    return PaintingResponse.model_validate(await service.move(painting_id, payload.gallery_id))


@router.delete("/{painting_id}", response_model=MessageResponse)
async def delete_painting(
    painting_id: int,
    service: PaintingService = Depends(get_painting_service),
    admin: dict = Depends(require_admin),
):
    """Delete a painting and its image files."""
    await service.delete(painting_id)
    return MessageResponse(message="Painting deleted successfully")
