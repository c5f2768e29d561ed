"""
Gallery service: CRUD, ordering and the single-main-gallery invariant.
"""
import logging
from typing import List, Optional, Tuple

from fastapi import Depends
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from gallery_cms.database import get_db
from gallery_cms.errors import ConflictError, NotFoundError, ValidationError
from gallery_cms.models import Gallery, Painting
from gallery_cms.services.file_manager import FileManager, get_file_manager, sanitize_name
from gallery_cms.services.ordering import apply_order, compact, next_display_order

logger = logging.getLogger(__name__)


def _clean_slug(slug: str) -> str:
    clean = sanitize_name(slug)
    if not clean:
        raise ValidationError(
            "Slug must contain at least one letter or digit",
            {"slug": ["Slug must contain at least one letter or digit"]},
        )
    return clean


class GalleryService:
    def __init__(self, db: AsyncSession, files: FileManager):
        self.db = db
        self.files = files

    async def list_all(self) -> List[Tuple[Gallery, int]]:
        """All galleries in display order, each with its number of visible paintings."""
        visible_count = (
            select(func.count(Painting.id))
            .where(Painting.gallery_id == Gallery.id, Painting.is_visible.is_(True))
            .correlate(Gallery)
            .scalar_subquery()
        )
        result = await self.db.execute(
            select(Gallery, visible_count)
            .order_by(Gallery.display_order.asc(), Gallery.id.asc())
            .execution_options(populate_existing=True)
        )
        return [(gallery, count) for gallery, count in result.all()]

    async def get_by_id(self, gallery_id: int) -> Gallery:
        result = await self.db.execute(select(Gallery).where(Gallery.id == gallery_id))
        gallery = result.scalar_one_or_none()
        if gallery is None:
            raise NotFoundError(f"Gallery {gallery_id} not found")
        return gallery

    async def get_by_slug(self, slug: str) -> Tuple[Gallery, List[Painting]]:
        result = await self.db.execute(select(Gallery).where(Gallery.slug == slug))
        gallery = result.scalar_one_or_none()
        if gallery is None:
            raise NotFoundError(f"Gallery '{slug}' not found")
        return gallery, await self._visible_paintings(gallery.id)

    async def get_main(self) -> Tuple[Gallery, List[Painting]]:
        result = await self.db.execute(select(Gallery).where(Gallery.is_main.is_(True)))
        gallery = result.scalar_one_or_none()
        if gallery is None:
            raise NotFoundError("Main gallery not found")
        return gallery, await self._visible_paintings(gallery.id)

    async def create(
        self,
        name: str,
        slug: str,
        description: Optional[str] = None,
        is_main: bool = False,
    ) -> Gallery:
        """
        Create a gallery and provision its folder.

        The first gallery always becomes main. Requesting is_main demotes the
        current main gallery inside the same transaction.

        Raises:
            ValidationError: If the slug has no usable characters
            ConflictError: If the slug is already taken
        """
        clean_slug = _clean_slug(slug)
        if await self._slug_owner(clean_slug) is not None:
            raise ConflictError(f"A gallery with slug '{clean_slug}' already exists")

        has_main = await self._count_main() > 0
        make_main = is_main or not has_main
        if make_main and has_main:
            await self._demote_main()

        folder_name = await self._allocate_folder(clean_slug)
        gallery = Gallery(
            slug=clean_slug,
            name=name.strip(),
            description=description or None,
            is_main=make_main,
            folder_name=folder_name,
            display_order=await next_display_order(self.db, Gallery),
        )
        self.db.add(gallery)
        await self.db.flush()
        await self._check_single_main()

        self.files.ensure_gallery_folders(folder_name)
        await self.db.commit()
        await self.db.refresh(gallery)

        logger.info(
            f"Created gallery {gallery.id} '{gallery.slug}' "
            f"(folder={folder_name}, display_order={gallery.display_order}, is_main={gallery.is_main})"
        )
        return gallery

    async def update(self, gallery_id: int, **fields) -> Gallery:
        """
        Patch name, slug, description or is_main. Omitted fields are left unchanged.
        The folder keeps its original name when the slug changes.

        Raises:
            NotFoundError: If the gallery does not exist
            ConflictError: If the slug is taken or is_main would be cleared on the main gallery
        """
        gallery = await self.get_by_id(gallery_id)

        if "slug" in fields and fields["slug"] is not None:
            clean_slug = _clean_slug(fields["slug"])
            owner = await self._slug_owner(clean_slug)
            if owner is not None and owner != gallery.id:
                raise ConflictError(f"A gallery with slug '{clean_slug}' already exists")
            gallery.slug = clean_slug

        if fields.get("name") is not None:
            gallery.name = fields["name"].strip()

        if "description" in fields:
            gallery.description = fields["description"] or None

        if fields.get("is_main") is True and not gallery.is_main:
            await self._demote_main(except_id=gallery.id)
            gallery.is_main = True
        elif fields.get("is_main") is False and gallery.is_main:
            raise ConflictError(
                "The main gallery cannot be unset; mark another gallery as main instead"
            )

        await self.db.flush()
        await self._check_single_main()
        await self.db.commit()
        await self.db.refresh(gallery)

        logger.info(f"Updated gallery {gallery.id}: {sorted(fields)}")
        return gallery

    async def delete(self, gallery_id: int) -> None:
        """
        Delete a non-main gallery. Its paintings go with it through ON DELETE CASCADE,
        then its folder is removed.
        """
        gallery = await self.get_by_id(gallery_id)
        if gallery.is_main:
            raise ConflictError("Cannot delete the main gallery")

        folder_name = gallery.folder_name
        await self.db.execute(delete(Gallery).where(Gallery.id == gallery_id))
        await compact(self.db, Gallery)
        await self.db.commit()

        self.files.delete_gallery_folder(folder_name)
        logger.info(f"Deleted gallery {gallery_id} and folder {folder_name}")

    async def reorder(self, gallery_ids: List[int]) -> List[Tuple[Gallery, int]]:
        """Assign display orders from the given id sequence in one transaction."""
        try:
            await apply_order(self.db, Gallery, gallery_ids)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Reordered galleries: {gallery_ids}")
        return await self.list_all()

    async def _visible_paintings(self, gallery_id: int) -> List[Painting]:
        result = await self.db.execute(
            select(Painting)
            .where(Painting.gallery_id == gallery_id, Painting.is_visible.is_(True))
            .order_by(Painting.display_order.asc(), Painting.id.asc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def _slug_owner(self, slug: str) -> Optional[int]:
        result = await self.db.execute(select(Gallery.id).where(Gallery.slug == slug))
        return result.scalar_one_or_none()

    async def _count_main(self) -> int:
        result = await self.db.execute(
            select(func.count(Gallery.id)).where(Gallery.is_main.is_(True))
        )
        return result.scalar_one()

    async def _demote_main(self, except_id: Optional[int] = None) -> None:
        stmt = update(Gallery).where(Gallery.is_main.is_(True))
        if except_id is not None:
            stmt = stmt.where(Gallery.id != except_id)
        await self.db.execute(stmt.values(is_main=False))

    async def _check_single_main(self) -> None:
        main_count = await self._count_main()
        if main_count != 1:
            await self.db.rollback()
            raise ConflictError(f"Exactly one gallery must be main (found {main_count})")

    async def _allocate_folder(self, slug: str) -> str:
        """Folder named after the slug, suffixed when a gallery or directory already uses it."""
        candidate = slug
        suffix = 2
        while True:
            result = await self.db.execute(
                select(Gallery.id).where(Gallery.folder_name == candidate)
            )
            if result.scalar_one_or_none() is None and not self.files.folder_exists(candidate):
                return candidate
            candidate = f"{slug}-{suffix}"
            suffix += 1


def get_gallery_service(
    db: AsyncSession = Depends(get_db),
    files: FileManager = Depends(get_file_manager),
) -> GalleryService:
    """FastAPI dependency building a GalleryService for the request session."""
    return GalleryService(db, files)
