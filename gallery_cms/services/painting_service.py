"""
Painting service: CRUD over paintings and their image files.

Files are written before the row that references them, and replaced files are
only deleted once the new row state is committed. There is no transaction
spanning both stores, so a crash between steps can leave orphaned files.
"""
import logging
from typing import List, Optional, Tuple

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gallery_cms.database import get_db
from gallery_cms.errors import NotFoundError, ValidationError
from gallery_cms.models import Gallery, Painting
from gallery_cms.services.file_manager import FileManager, get_file_manager
from gallery_cms.services.ordering import apply_order, compact, next_display_order

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("technique", "description", "dimensions", "medium")


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class PaintingService:
    def __init__(self, db: AsyncSession, files: FileManager):
        self.db = db
        self.files = files

    async def list(self, gallery_id: Optional[int] = None) -> List[Painting]:
        """Paintings (visible or not) ordered by gallery and display order."""
        query = select(Painting)
        if gallery_id is not None:
            query = query.where(Painting.gallery_id == gallery_id)
        query = query.order_by(
            Painting.gallery_id.asc(),
            Painting.display_order.asc(),
            Painting.id.asc(),
        ).execution_options(populate_existing=True)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_by_id(self, painting_id: int) -> Painting:
        result = await self.db.execute(select(Painting).where(Painting.id == painting_id))
        painting = result.scalar_one_or_none()
        if painting is None:
            raise NotFoundError(f"Painting {painting_id} not found")
        return painting

    async def create(
        self,
        gallery_id: int,
        title: str,
        image: Optional[bytes],
        image_name: Optional[str] = None,
        **fields,
    ) -> Painting:
        """
        Store the image and thumbnail, then insert the painting at the end of its gallery.

        Raises:
            ValidationError: If no image is given or it cannot be decoded
            NotFoundError: If the gallery does not exist
        """
        if not image:
            raise ValidationError("Image is required", {"image": ["Image is required"]})

        gallery = await self._get_gallery(gallery_id)
        # Plain values stay readable after a rollback expires the ORM objects
        folder = gallery.folder_name
        original, thumbnail = self.files.save_image(image, image_name or "", folder)

        try:
            painting = Painting(
                gallery_id=gallery.id,
                title=title.strip(),
                image_filename=original,
                thumbnail_filename=thumbnail,
                display_order=await next_display_order(
                    self.db, Painting, Painting.gallery_id == gallery.id
                ),
                is_visible=fields.get("is_visible", True) is not False,
                **{key: _clean_text(fields.get(key)) for key in TEXT_FIELDS},
            )
            self.db.add(painting)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            self.files.delete_image(folder, original, thumbnail)
            raise

        await self.db.refresh(painting)
        logger.info(
            f"Created painting {painting.id} '{painting.title}' in gallery {gallery.id} "
            f"(display_order={painting.display_order})"
        )
        return painting

    async def update(
        self,
        painting_id: int,
        image: Optional[bytes] = None,
        image_name: Optional[str] = None,
        **fields,
    ) -> Painting:
        """
        Patch a painting, optionally replacing its image and/or moving it to another gallery.

        A new image is written straight into the destination gallery; the previous files are
        deleted only after the update is committed. Without a new image, a gallery change
        moves the existing files before the row is updated.
        """
        painting = await self.get_by_id(painting_id)
        source = painting.gallery
        target = source

        new_gallery_id = fields.pop("gallery_id", None)
        if new_gallery_id is not None and new_gallery_id != painting.gallery_id:
            target = await self._get_gallery(new_gallery_id)

        old_files = (painting.image_filename, painting.thumbnail_filename)
        source_folder, target_folder = source.folder_name, target.folder_name
        changes_gallery = target.id != source.id
        new_files: Optional[Tuple[str, str]] = None
        moved = False

        if image:
            new_files = self.files.save_image(image, image_name or "", target_folder)
        elif changes_gallery:
            self.files.move_image(*old_files, source_folder, target_folder)
            moved = True

        try:
            if fields.get("title") is not None:
                painting.title = fields["title"].strip()
            for key in TEXT_FIELDS:
                if key in fields:
                    setattr(painting, key, _clean_text(fields[key]))
            if fields.get("is_visible") is not None:
                painting.is_visible = fields["is_visible"]
            if new_files:
                painting.image_filename, painting.thumbnail_filename = new_files
            if changes_gallery:
                await self._attach_to(painting, target)
                await compact(self.db, Painting, Painting.gallery_id == source.id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            if new_files:
                self.files.delete_image(target_folder, *new_files)
            elif moved:
                self.files.move_image(*old_files, target_folder, source_folder)
            raise

        if new_files:
            self.files.delete_image(source_folder, *old_files)

        await self.db.refresh(painting)
        logger.info(f"Updated painting {painting.id}: {sorted(fields) + (['image'] if new_files else [])}")
        return painting

    async def delete(self, painting_id: int) -> None:
        """Remove the image files, then the row, then close the gap in the gallery order."""
        painting = await self.get_by_id(painting_id)
        gallery_id = painting.gallery_id

        self.files.delete_image(
            painting.gallery.folder_name,
            painting.image_filename,
            painting.thumbnail_filename,
        )

        await self.db.delete(painting)
        await self.db.flush()
        await compact(self.db, Painting, Painting.gallery_id == gallery_id)
        await self.db.commit()

        logger.info(f"Deleted painting {painting_id} from gallery {gallery_id}")

    async def toggle_visibility(self, painting_id: int) -> Painting:
        painting = await self.get_by_id(painting_id)
        painting.is_visible = not painting.is_visible
        await self.db.commit()
        await self.db.refresh(painting)

        logger.info(f"Painting {painting_id} visibility set to {painting.is_visible}")
        return painting

    async def move(self, painting_id: int, gallery_id: int) -> Painting:
        """Relocate a painting's files to another gallery, then repoint the row."""
        return await self.update(painting_id, gallery_id=gallery_id)

    async def reorder(self, painting_ids: List[int]) -> List[Painting]:
        """
        Assign display orders within one gallery from the given id sequence.
        Paintings of that gallery that were not listed keep their relative order after them.

        Raises:
            NotFoundError: If any id does not exist
            ValidationError: If the ids span more than one gallery
        """
        result = await self.db.execute(
            select(Painting.id, Painting.gallery_id).where(Painting.id.in_(painting_ids))
        )
        rows = result.all()
        missing = sorted(set(painting_ids) - {row.id for row in rows})
        if missing:
            raise NotFoundError(f"Painting IDs not found: {missing}")

        gallery_ids = {row.gallery_id for row in rows}
        if len(gallery_ids) > 1:
            raise ValidationError(
                "Paintings can only be reordered within a single gallery",
                {"painting_ids": [f"IDs span galleries {sorted(gallery_ids)}"]},
            )
        gallery_id = gallery_ids.pop()

        try:
            await apply_order(self.db, Painting, painting_ids, Painting.gallery_id == gallery_id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Reordered paintings in gallery {gallery_id}: {painting_ids}")
        return await self.list(gallery_id)

    async def _get_gallery(self, gallery_id: int) -> Gallery:
        result = await self.db.execute(select(Gallery).where(Gallery.id == gallery_id))
        gallery = result.scalar_one_or_none()
        if gallery is None:
            raise NotFoundError(f"Gallery {gallery_id} not found")
        return gallery

    async def _attach_to(self, painting: Painting, gallery: Gallery) -> None:
        painting.display_order = await next_display_order(
            self.db, Painting, Painting.gallery_id == gallery.id
        )
        painting.gallery = gallery
        await self.db.flush()


def get_painting_service(
    db: AsyncSession = Depends(get_db),
    files: FileManager = Depends(get_file_manager),
) -> PaintingService:
    """FastAPI dependency building a PaintingService for the request session."""
    return PaintingService(db, files)
