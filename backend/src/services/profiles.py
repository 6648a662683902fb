"""Submission and retrieval of directory profiles."""

from __future__ import annotations

import logging
from typing import List, Optional

from ..models.profile import Profile, ProfileSubmission
from .sheets import ProfileStore, ProfileStoreError, StoreNotConfiguredError, get_profile_store

logger = logging.getLogger(__name__)

REQUIRED_MESSAGE = "Name, major, class year, and building description are required."
GENERIC_FAILURE_MESSAGE = "Something went wrong. Try again."


class ProfileValidationError(Exception):
    """Raised when a submission is missing required fields."""

    def __init__(self, missing: List[str], message: str = REQUIRED_MESSAGE):
        self.missing = missing
        self.message = message
        super().__init__(self.message)


def validate_submission(submission: ProfileSubmission) -> Profile:
    """Return the profile to store, or raise if a required field is blank."""
    missing = submission.missing_fields()
    if missing:
        raise ProfileValidationError(missing)
    return submission.to_profile()


class ProfileService:
    """Thin layer between the HTTP routes and the profile store."""

    def __init__(self, store: Optional[ProfileStore] = None):
        self.store = store or get_profile_store()

    async def submit(self, submission: ProfileSubmission) -> None:
        """Validate and append a profile; nothing is written when validation fails."""
        profile = validate_submission(submission)
        await self.store.add_profile(profile)

    async def list_public(self) -> List[Profile]:
        """
        Approved profiles for page rendering.

        A missing or failing store is treated as an empty directory rather
        than an error for visitors.
        """
        try:
            return await self.store.list_profiles()
        except StoreNotConfiguredError:
            logger.info("Profile store not configured; serving an empty directory")
            return []
        except ProfileStoreError as exc:
            logger.warning("Profile store unavailable: %s", exc.message)
            return []


def get_profile_service() -> ProfileService:
    return ProfileService()


__all__ = [
    "ProfileService",
    "ProfileValidationError",
    "validate_submission",
    "get_profile_service",
    "REQUIRED_MESSAGE",
    "GENERIC_FAILURE_MESSAGE",
]
