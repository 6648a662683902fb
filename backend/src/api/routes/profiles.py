"""HTTP API routes for profile submission and retrieval."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from ...models.profile import Profile, ProfileSubmission, SubmitResponse
from ...services.profiles import (
    GENERIC_FAILURE_MESSAGE,
    ProfileService,
    ProfileValidationError,
    get_profile_service,
)
from ...services.sheets import ProfileStoreError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/profiles", response_model=list[Profile])
async def list_profiles(
    service: Annotated[ProfileService, Depends(get_profile_service)],
) -> list[Profile]:
    """List approved profiles; an unavailable store yields an empty list."""
    return await service.list_public()


@router.post("/api/submit", response_model=SubmitResponse)
async def submit_profile(
    submission: ProfileSubmission,
    service: Annotated[ProfileService, Depends(get_profile_service)],
) -> SubmitResponse:
    """
    Add a profile to the directory.

    Name, major, class year and building are required. The row is stored
    as approved with a server-side timestamp; no identifier is returned.
    """
    try:
        await service.submit(submission)
    except ProfileValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "validation_error",
                "message": e.message,
                "detail": {"missing": e.missing},
            },
        )
    except ProfileStoreError as e:
        logger.exception("Submit error: %s", e.message)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "internal_error", "message": GENERIC_FAILURE_MESSAGE},
        )
    return SubmitResponse(success=True)
