"""
Resume routes: free-text sections, timeline entries and expertise areas.
"""
from fastapi import APIRouter, Depends, status
from typing import List
import logging

from gallery_cms.schemas import (
    ExpertiseAreaCreate,
    ExpertiseAreaResponse,
    ExpertiseAreaUpdate,
    MessageResponse,
    ReorderRequest,
    ResumeContentResponse,
    ResumeContentUpdate,
    ResumeResponse,
    TimelineEntryCreate,
    TimelineEntryResponse,
    TimelineEntryUpdate,
)
from gallery_cms.services.resume_service import ResumeService, get_resume_service
from gallery_cms.utils.jwt_auth import require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/resume", tags=["resume"])


@router.get("", response_model=ResumeResponse)
async def get_resume(service: ResumeService = Depends(get_resume_service)):
    """Get all resume content, timeline entries and expertise areas in display order."""
    return await service.get_all()


# Content sections

@router.get("/content/{key}", response_model=ResumeContentResponse)
async def get_resume_content(key: str, service: ResumeService = Depends(get_resume_service)):
    return await service.get_content(key)


@router.put("/content/{key}", response_model=ResumeContentResponse)
async def update_resume_content(
    key: str,
    payload: ResumeContentUpdate,
    service: ResumeService = Depends(get_resume_service),
    admin: dict = Depends(require_admin),
):
    """Create or replace a content section by key."""
    return await service.update_content(key, payload.content)


# Timeline

@router.get("/timeline", response_model=List[TimelineEntryResponse])
async def list_timeline(service: ResumeService = Depends(get_resume_service)):
    return await service.list_timeline()


@router.post("/timeline", response_model=TimelineEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_timeline_entry(
    payload: TimelineEntryCreate,
    service: ResumeService = Depends(get_resume_service),
    admin: dict = Depends(require_admin),
):
    return await service.create_timeline_entry(
        date_range=payload.date_range,
        title=payload.title,
        description=payload.description,
        items=payload.items,
    )


@router.put("/timeline/reorder", response_model=List[TimelineEntryResponse])
async def reorder_timeline(
    payload: ReorderRequest,
    service: ResumeService = Depends(get_resume_service),
    admin: dict = Depends(require_admin),
):
    return await service.reorder_timeline(payload.ids)


@router.put("/timeline/{entry_id}", response_model=TimelineEntryResponse)
async def update_timeline_entry(
    entry_id: int,
    payload: TimelineEntryUpdate,
    service: ResumeService = Depends(get_resume_service),
    admin: dict = Depends(require_admin),
):
    """Partially update a timeline entry. "items": null clears the list; omitting it keeps it."""
    return await service.update_timeline_entry(entry_id, **payload.model_dump(exclude_unset=True))


@router.delete("/timeline/{entry_id}", response_model=MessageResponse)
async def delete_timeline_entry(
    entry_id: int,
    service: ResumeService = Depends(get_resume_service),
    admin: dict = Depends(require_admin),
):
    await service.delete_timeline_entry(entry_id)
    return MessageResponse(message="Timeline entry deleted successfully")


# Expertise

@router.get("/expertise", response_model=List[ExpertiseAreaResponse])
async def list_expertise(service: ResumeService = Depends(get_resume_service)):
    return await service.list_expertise()


@router.post("/expertise", response_model=ExpertiseAreaResponse, status_code=status.HTTP_201_CREATED)
async def create_expertise_area(
    payload: ExpertiseAreaCreate,
    service: ResumeService = Depends(get_resume_service),
    admin: dict = Depends(require_admin),
):
    return await service.create_expertise_area(
        icon=payload.icon,
        title=payload.title,
        description=payload.description,
    )


@router.put("/expertise/reorder", response_model=List[ExpertiseAreaResponse])
async def reorder_expertise(
    payload: ReorderRequest,
    service: ResumeService = Depends(get_resume_service),
    admin: dict = Depends(require_admin),
):
    return await service.reorder_expertise(payload.ids)


@router.put("/expertise/{area_id}", response_model=ExpertiseAreaResponse)
async def update_expertise_area(
    area_id: int,
    payload: ExpertiseAreaUpdate,
    service: ResumeService = Depends(get_resume_service),
    admin: dict = Depends(require_admin),
):
    return await service.update_expertise_area(area_id, **payload.model_dump(exclude_unset=True))


@router.delete("/expertise/{area_id}", response_model=MessageResponse)
async def delete_expertise_area(
    area_id: int,
    service: ResumeService = Depends(get_resume_service),
    admin: dict = Depends(require_admin),
):
    await service.delete_expertise_area(area_id)
    return MessageResponse(message="Expertise area deleted successfully")
