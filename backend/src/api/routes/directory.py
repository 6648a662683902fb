"""HTTP API routes for directory browsing."""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from ...models.directory import DirectoryResult
from ...services.directory import build_directory
from ...services.profiles import ProfileService, get_profile_service

router = APIRouter()


@router.get("/api/directory", response_model=DirectoryResult)
async def browse_directory(
    service: Annotated[ProfileService, Depends(get_profile_service)],
    q: str = Query("", max_length=256, description="Name, major, year, or what they're building"),
    year: Optional[str] = Query(None, description="Exact class year"),
    major: Optional[str] = Query(None, description="Exact major"),
) -> DirectoryResult:
    """Filter approved profiles and return the quick-filter options."""
    profiles = await service.list_public()
    return build_directory(profiles, query=q, year=year, major=major)
