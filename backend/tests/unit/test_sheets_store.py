"""Unit tests for the Google Sheets profile store."""

import json
from datetime import datetime

import httpx
import pytest

from backend.src.models.profile import ApprovalStatus, Profile
from backend.src.services.config import AppConfig
from backend.src.services.profiles import ProfileService
from backend.src.services.sheets import (
    SHEET_COLUMNS,
    ProfileStore,
    ProfileStoreError,
    SheetsClient,
    StoreNotConfiguredError,
    _values_from_payload,
    is_approved,
    profile_to_row,
    row_to_profile,
)


class StaticTokenProvider:
    async def token(self) -> str:
        return "test-token"


def _row(name: str, flag: str, **cells: str) -> list[str]:
    row = [
        name,
        cells.get("major", "cs"),
        cells.get("gradYear", "2026"),
        cells.get("website", ""),
        cells.get("building", "a thing"),
        "",
        "",
        "",
        "",
        flag,
        "2025-01-01T00:00:00.000Z",
    ]
    return row


class FakeSheet:
    """Records requests and serves canned values."""

    def __init__(self, rows=None, status_code: int = 200, raw_body=None):
        self.rows = rows or []
        self.status_code = status_code
        self.raw_body = raw_body
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"error": {"message": "nope"}})
        if self.raw_body is not None:
            return httpx.Response(200, content=self.raw_body)
        if request.method == "GET":
            body = {"range": "Sheet1!A2:K", "majorDimension": "ROWS"}
            if self.rows:
                body["values"] = self.rows
            return httpx.Response(200, json=body)
        return httpx.Response(200, json={"updates": {"updatedRows": 1}})


class Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(
        google_sheet_id="sheet-123",
        google_client_email="bot@example.iam.gserviceaccount.com",
        google_private_key="unused",
        profile_cache_seconds=60,
    )


def _store(config: AppConfig, sheet: FakeSheet, clock=None) -> ProfileStore:
    client = SheetsClient(
        config.google_sheet_id,
        StaticTokenProvider(),
        transport=httpx.MockTransport(sheet.handler),
    )
    return ProfileStore(config=config, client=client, clock=clock or Clock())


class TestRowCodec:
    def test_column_order_is_fixed(self) -> None:
        assert SHEET_COLUMNS == (
            "name",
            "major",
            "gradYear",
            "website",
            "building",
            "photoUrl",
            "linkedin",
            "github",
            "twitter",
            "approvedFlag",
            "createdAt",
        )

    @pytest.mark.parametrize("flag", ["true", "", "FALSE", "True", " TRUE", "yes"])
    def test_only_literal_true_is_approved(self, flag: str) -> None:
        assert is_approved(_row("a", flag)) is False

    def test_literal_true_is_approved(self) -> None:
        assert is_approved(_row("a", "TRUE")) is True

    def test_short_rows_are_not_approved(self) -> None:
        assert is_approved(["a", "cs", "2026"]) is False

    def test_missing_trailing_cells_read_as_empty(self) -> None:
        profile = row_to_profile(["Ada", "math", "2026", "", "engines"])

        assert profile.name == "Ada"
        assert profile.building == "engines"
        assert profile.twitter == ""

    def test_profile_to_row_appends_flag_and_timestamp(self) -> None:
        profile = Profile(
            name="Ada", major="math", gradYear="2026", building="engines", github="@ada"
        )

        row = profile_to_row(profile)

        assert len(row) == 11
        assert row[:5] == ["Ada", "math", "2026", "", "engines"]
        assert row[7] == "@ada"
        assert row[9] == ApprovalStatus.APPROVED.sheet_value == "TRUE"
        assert datetime.fromisoformat(row[10].replace("Z", "+00:00")).tzinfo is not None


class TestProfileStore:
    @pytest.mark.asyncio
    async def test_list_profiles_filters_unapproved_rows(self, config: AppConfig) -> None:
        sheet = FakeSheet(
            rows=[
                _row("approved", "TRUE"),
                _row("lowercase", "true"),
                _row("blank", ""),
                _row("rejected", "FALSE"),
                ["truncated", "cs"],
            ]
        )
        store = _store(config, sheet)

        profiles = await store.list_profiles()

        assert [p.name for p in profiles] == ["approved"]
        request = sheet.requests[0]
        assert request.headers["Authorization"] == "Bearer test-token"
        assert "/spreadsheets/sheet-123/values/" in request.url.path
        assert "A2" in request.url.path

    @pytest.mark.asyncio
    async def test_empty_sheet_returns_no_profiles(self, config: AppConfig) -> None:
        store = _store(config, FakeSheet())

        assert await store.list_profiles() == []

    @pytest.mark.asyncio
    async def test_reads_are_cached_until_expiry(self, config: AppConfig) -> None:
        sheet = FakeSheet(rows=[_row("a", "TRUE")])
        clock = Clock()
        store = _store(config, sheet, clock)

        await store.list_profiles()
        clock.now = 30
        await store.list_profiles()
        assert len(sheet.requests) == 1

        clock.now = 61
        await store.list_profiles()
        assert len(sheet.requests) == 2

    @pytest.mark.asyncio
    async def test_add_profile_appends_raw_row_and_invalidates(self, config: AppConfig) -> None:
        sheet = FakeSheet(rows=[_row("a", "TRUE")])
        store = _store(config, sheet)
        await store.list_profiles()

        await store.add_profile(
            Profile(name="Ada", major="math", gradYear="2026", building="learning Rust")
        )
        await store.list_profiles()

        append = sheet.requests[1]
        assert append.method == "POST"
        assert append.url.path.endswith(":append")
        assert append.url.params["valueInputOption"] == "RAW"
        body = json.loads(append.content)
        assert body["values"][0][0] == "Ada"
        assert body["values"][0][9] == "TRUE"
        assert len(sheet.requests) == 3

    @pytest.mark.asyncio
    async def test_http_failure_raises_store_error(self, config: AppConfig) -> None:
        store = _store(config, FakeSheet(status_code=403))

        with pytest.raises(ProfileStoreError):
            await store.list_profiles()
        with pytest.raises(ProfileStoreError):
            await store.add_profile(Profile(name="a", major="b", gradYear="c", building="d"))

    @pytest.mark.asyncio
    async def test_unconfigured_store_raises(self) -> None:
        store = ProfileStore(config=AppConfig())

        assert store.configured is False
        with pytest.raises(StoreNotConfiguredError):
            await store.list_profiles()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "raw_body",
        [
            b"<html>proxy login</html>",
            b'[["a"]]',
            b'{"values": "TRUE"}',
            b'{"values": [["ok", "cs"], "not a row"]}',
        ],
    )
    async def test_malformed_read_raises_store_error(self, config: AppConfig, raw_body: bytes) -> None:
        store = _store(config, FakeSheet(raw_body=raw_body))

        with pytest.raises(ProfileStoreError):
            await store.list_profiles()

    @pytest.mark.asyncio
    async def test_malformed_read_degrades_to_empty_directory(self, config: AppConfig) -> None:
        store = _store(config, FakeSheet(raw_body=b"<html>proxy login</html>"))

        assert await ProfileService(store=store).list_public() == []


class TestPayloadShape:
    def test_missing_values_means_empty_sheet(self) -> None:
        assert _values_from_payload({"range": "Sheet1!A2:K"}) == []

    @pytest.mark.parametrize("payload", [None, [["a"]], "values", {"values": {"0": ["a"]}}])
    def test_unexpected_shapes_rejected(self, payload) -> None:
        with pytest.raises(ValueError):
            _values_from_payload(payload)
