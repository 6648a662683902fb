"""Unit tests for profile models and the submission service."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from backend.src.models.profile import ApprovalStatus, Profile, ProfileSubmission
from backend.src.services.profiles import (
    REQUIRED_MESSAGE,
    ProfileService,
    ProfileValidationError,
    validate_submission,
)
from backend.src.services.sheets import ProfileStoreError, StoreNotConfiguredError

VALID = {
    "name": "Jane Smith",
    "major": "Computer Science",
    "gradYear": "2027",
    "building": "learning Rust",
}


@pytest.fixture
def store() -> MagicMock:
    mock = MagicMock()
    mock.add_profile = AsyncMock()
    mock.list_profiles = AsyncMock(return_value=[Profile(**VALID)])
    return mock


class TestSubmissionValidation:
    def test_blank_building_rejected(self) -> None:
        with pytest.raises(ProfileValidationError) as info:
            validate_submission(ProfileSubmission(**{**VALID, "building": ""}))

        assert info.value.missing == ["building"]
        assert info.value.message == REQUIRED_MESSAGE

    def test_whitespace_only_counts_as_blank(self) -> None:
        with pytest.raises(ProfileValidationError) as info:
            validate_submission(ProfileSubmission(name="  ", major="\t", gradYear="2027", building="x"))

        assert info.value.missing == ["name", "major"]

    def test_missing_and_null_fields_reported(self) -> None:
        with pytest.raises(ProfileValidationError) as info:
            validate_submission(ProfileSubmission(name="Jane", major=None))

        assert info.value.missing == ["major", "gradYear", "building"]

    def test_valid_submission_is_trimmed(self) -> None:
        profile = validate_submission(
            ProfileSubmission(**{**VALID, "name": "  Jane Smith ", "twitter": None})
        )

        assert profile.name == "Jane Smith"
        assert profile.building == "learning Rust"
        assert profile.twitter == ""


class TestProfileService:
    @pytest.mark.asyncio
    async def test_submit_appends_valid_profile(self, store: MagicMock) -> None:
        service = ProfileService(store=store)

        await service.submit(ProfileSubmission(**VALID))

        store.add_profile.assert_awaited_once()
        stored = store.add_profile.await_args.args[0]
        assert stored.building == "learning Rust"

    @pytest.mark.asyncio
    async def test_invalid_submission_writes_nothing(self, store: MagicMock) -> None:
        service = ProfileService(store=store)

        with pytest.raises(ProfileValidationError):
            await service.submit(ProfileSubmission(**{**VALID, "building": ""}))

        store.add_profile.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_store_failure_propagates_on_submit(self, store: MagicMock) -> None:
        store.add_profile.side_effect = ProfileStoreError("quota exceeded")
        service = ProfileService(store=store)

        with pytest.raises(ProfileStoreError):
            await service.submit(ProfileSubmission(**VALID))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [StoreNotConfiguredError(), ProfileStoreError("timeout")])
    async def test_retrieval_failure_degrades_to_empty(self, store: MagicMock, error) -> None:
        store.list_profiles.side_effect = error
        service = ProfileService(store=store)

        assert await service.list_public() == []


class TestProfileModel:
    def test_social_links(self) -> None:
        profile = Profile(
            name="jane q smith",
            github="@jane",
            twitter="@janeq",
            linkedin="in-handle",
            website="https://jane.dev/",
        )

        assert profile.initials == "JQ"
        assert profile.github_url == "https://github.com/jane"
        assert profile.twitter_url == "https://twitter.com/janeq"
        assert profile.linkedin_url == "https://linkedin.com/in/in-handle"
        assert profile.website_label == "jane.dev"

    def test_linkedin_url_kept_when_absolute(self) -> None:
        profile = Profile(linkedin="https://www.linkedin.com/in/jane")

        assert profile.linkedin_url == "https://www.linkedin.com/in/jane"
        assert profile.github_url == ""

    def test_approval_status_wire_values(self) -> None:
        assert ApprovalStatus.from_sheet_value("TRUE") is ApprovalStatus.APPROVED
        assert ApprovalStatus.from_sheet_value("FALSE") is ApprovalStatus.REJECTED
        assert ApprovalStatus.from_sheet_value("true") is ApprovalStatus.PENDING
        assert ApprovalStatus.from_sheet_value("") is ApprovalStatus.PENDING
