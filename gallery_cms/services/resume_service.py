"""
Resume service: keyed content sections, timeline entries and expertise areas.
"""
import json
import logging
from typing import Dict, List, Optional

from fastapi import Depends
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gallery_cms.database import get_db
from gallery_cms.errors import NotFoundError
from gallery_cms.models import ExpertiseArea, ResumeContent, TimelineEntry
from gallery_cms.services.ordering import apply_order, compact, next_display_order

logger = logging.getLogger(__name__)


def encode_items(items: Optional[List[str]]) -> Optional[str]:
    """Serialize a timeline item list. None stays None so it is distinguishable from []."""
    if items is None:
        return None
    return json.dumps(list(items), ensure_ascii=False)


def decode_items(raw: Optional[str]) -> Optional[List[str]]:
    if raw is None:
        return None
    return json.loads(raw)


class ResumeService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_all(self) -> dict:
        return {
            "content": await self.get_content_map(),
            "timeline": await self.list_timeline(),
            "expertise": await self.list_expertise(),
        }

    # Content sections

    async def get_content_map(self) -> Dict[str, str]:
        result = await self.db.execute(
            select(ResumeContent).order_by(ResumeContent.section_order.asc(), ResumeContent.id.asc())
        )
        return {row.section_key: row.content for row in result.scalars().all()}

    async def get_content(self, key: str):
        result = await self.db.execute(
            select(ResumeContent).where(ResumeContent.section_key == key)
        )
        section = result.scalar_one_or_none()
        if section is None:
            raise NotFoundError(f"Resume section '{key}' not found")
        return section

    async def update_content(self, key: str, content: str):
        """Create the section if the key is new, otherwise replace its content."""
        result = await self.db.execute(
            select(ResumeContent).where(ResumeContent.section_key == key)
        )
        section = result.scalar_one_or_none()

        if section is None:
            max_order = await self.db.execute(select(func.max(ResumeContent.section_order)))
            current_max = max_order.scalar()
            section = ResumeContent(
                section_key=key,
                content=content,
                section_order=0 if current_max is None else current_max + 1,
            )
            self.db.add(section)
            logger.info(f"Created resume section '{key}'")
        else:
            section.content = content
            logger.info(f"Updated resume section '{key}'")

        await self.db.commit()
        await self.db.refresh(section)
        return section

    # Timeline

    async def list_timeline(self) -> list:
        return await self._list(TimelineEntry)

    async def get_timeline_entry(self, entry_id: int):
        return await self._get(TimelineEntry, entry_id, "Timeline entry")

    async def create_timeline_entry(
        self,
        date_range: str,
        title: str,
        description: Optional[str] = None,
        items: Optional[List[str]] = None,
    ):
        entry = TimelineEntry(
            date_range=date_range,
            title=title,
            description=description or None,
            items=encode_items(items),
            display_order=await next_display_order(self.db, TimelineEntry),
        )
        return await self._insert(entry)

    async def update_timeline_entry(self, entry_id: int, **fields):
        """Only keys present in fields are written; items=None clears the list."""
        entry = await self.get_timeline_entry(entry_id)

        for key in ("date_range", "title"):
            if fields.get(key) is not None:
                setattr(entry, key, fields[key])
        if "description" in fields:
            entry.description = fields["description"] or None
        if "items" in fields:
            entry.items = encode_items(fields["items"])

        return await self._save(entry)

    async def delete_timeline_entry(self, entry_id: int) -> None:
        await self._delete(TimelineEntry, await self.get_timeline_entry(entry_id))

    async def reorder_timeline(self, entry_ids: List[int]) -> list:
        return await self._reorder(TimelineEntry, entry_ids)

    # Expertise areas

    async def list_expertise(self) -> list:
        return await self._list(ExpertiseArea)

    async def get_expertise_area(self, area_id: int):
        return await self._get(ExpertiseArea, area_id, "Expertise area")

    async def create_expertise_area(self, icon: str, title: str, description: Optional[str] = None):
        area = ExpertiseArea(
            icon=icon,
            title=title,
            description=description or None,
            display_order=await next_display_order(self.db, ExpertiseArea),
        )
        return await self._insert(area)

    async def update_expertise_area(self, area_id: int, **fields):
        area = await self.get_expertise_area(area_id)

        for key in ("icon", "title"):
            if fields.get(key) is not None:
                setattr(area, key, fields[key])
        if "description" in fields:
            area.description = fields["description"] or None

        return await self._save(area)

    async def delete_expertise_area(self, area_id: int) -> None:
        await self._delete(ExpertiseArea, await self.get_expertise_area(area_id))

    async def reorder_expertise(self, area_ids: List[int]) -> list:
        return await self._reorder(ExpertiseArea, area_ids)

    # Shared helpers for the ordered lists

    async def _list(self, model) -> list:
        result = await self.db.execute(
            select(model)
            .order_by(model.display_order.asc(), model.id.asc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def _get(self, model, row_id: int, label: str):
        result = await self.db.execute(select(model).where(model.id == row_id))
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundError(f"{label} {row_id} not found")
        return row

    async def _insert(self, row):
        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)
        logger.info(f"Created {type(row).__name__} {row.id} (display_order={row.display_order})")
        return row

    async def _save(self, row):
        await self.db.commit()
        await self.db.refresh(row)
        logger.info(f"Updated {type(row).__name__} {row.id}")
        return row

    async def _delete(self, model, row) -> None:
        row_id = row.id
        await self.db.execute(delete(model).where(model.id == row_id))
        await compact(self.db, model)
        await self.db.commit()
        logger.info(f"Deleted {model.__name__} {row_id}")

    async def _reorder(self, model, ids: List[int]) -> list:
        try:
            await apply_order(self.db, model, ids)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        logger.info(f"Reordered {model.__name__}: {ids}")
        return await self._list(model)


def get_resume_service(db: AsyncSession = Depends(get_db)) -> ResumeService:
    """FastAPI dependency building a ResumeService for the request session."""
    return ResumeService(db)
