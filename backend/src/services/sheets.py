"""Google Sheets backed profile store."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import logging
import time
from typing import Any, Callable, List, Optional, Sequence
from urllib.parse import quote

import httpx
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request as GoogleAuthRequest
from google.oauth2 import service_account

from ..models.profile import ApprovalStatus, Profile
from .config import AppConfig, get_config

logger = logging.getLogger(__name__)

SHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"
SHEETS_API_BASE = "https://sheets.googleapis.com/v4/spreadsheets"
TOKEN_URI = "https://oauth2.googleapis.com/token"

# Column order is the contract between writer and reader (A..K)
SHEET_COLUMNS: tuple[str, ...] = (
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
PROFILE_COLUMNS = SHEET_COLUMNS[:9]
APPROVED_COLUMN = SHEET_COLUMNS.index("approvedFlag")
LAST_COLUMN = "K"

Row = List[str]


class ProfileStoreError(Exception):
    """Raised when the backing sheet cannot be read or written."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class StoreNotConfiguredError(ProfileStoreError):
    """Raised when sheet credentials are missing."""

    def __init__(self, message: str = "Google Sheets credentials are not configured"):
        super().__init__(message)


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _values_from_payload(payload: Any) -> List[Row]:
    """Extract the row list from a ``values.get`` body, rejecting any other shape."""
    if not isinstance(payload, dict):
        raise ValueError(f"Expected a JSON object, got {type(payload).__name__}")
    values = payload.get("values", [])
    if not isinstance(values, list) or not all(isinstance(row, list) for row in values):
        raise ValueError("Sheets response has a malformed 'values' field")
    return values


def _cell(row: Sequence[Any], index: int) -> str:
    if index >= len(row) or row[index] is None:
        return ""
    return str(row[index])


def row_status(row: Sequence[Any]) -> ApprovalStatus:
    return ApprovalStatus.from_sheet_value(_cell(row, APPROVED_COLUMN))


def is_approved(row: Sequence[Any]) -> bool:
    """Only rows whose flag is exactly ``TRUE`` are public."""
    return row_status(row) is ApprovalStatus.APPROVED


def row_to_profile(row: Sequence[Any]) -> Profile:
    """Read the profile columns of a row; trailing empty cells may be absent."""
    return Profile(**{column: _cell(row, i) for i, column in enumerate(PROFILE_COLUMNS)})


def profile_to_row(
    profile: Profile,
    status: ApprovalStatus = ApprovalStatus.APPROVED,
    created_at: Optional[str] = None,
) -> Row:
    row = [getattr(profile, column) for column in PROFILE_COLUMNS]
    row.append(status.sheet_value)
    row.append(created_at or _utcnow_iso())
    return row


class ServiceAccountTokenProvider:
    """Bearer tokens for a Google service account, refreshed on expiry."""

    def __init__(self, client_email: str, private_key: str):
        self._credentials = service_account.Credentials.from_service_account_info(
            {
                "client_email": client_email,
                "private_key": private_key,
                "token_uri": TOKEN_URI,
            },
            scopes=[SHEETS_SCOPE],
        )
        self._lock = asyncio.Lock()

    async def token(self) -> str:
        async with self._lock:
            if not self._credentials.valid:
                # google-auth refreshes synchronously over requests
                await asyncio.to_thread(self._credentials.refresh, GoogleAuthRequest())
            return self._credentials.token


class SheetsClient:
    """Minimal client for the Sheets v4 ``values`` endpoints."""

    def __init__(
        self,
        spreadsheet_id: str,
        token_provider: ServiceAccountTokenProvider,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.spreadsheet_id = spreadsheet_id
        self.token_provider = token_provider
        self.timeout = timeout
        self._transport = transport

    def _url(self, range_: str, suffix: str = "") -> str:
        return f"{SHEETS_API_BASE}/{self.spreadsheet_id}/values/{quote(range_)}{suffix}"

    async def _headers(self) -> dict[str, str]:
        token = await self.token_provider.token()
        return {"Authorization": f"Bearer {token}"}

    async def get_values(self, range_: str) -> List[Row]:
        headers = await self._headers()
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(self._url(range_), headers=headers)
            response.raise_for_status()
            return _values_from_payload(response.json())

    async def append_values(self, range_: str, rows: List[Row]) -> None:
        headers = await self._headers()
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(
                self._url(range_, ":append"),
                params={"valueInputOption": "RAW"},
                headers=headers,
                json={"values": rows},
            )
            response.raise_for_status()


class ProfileStore:
    """
    Reads and appends profile rows.

    Successful reads are reused for ``profile_cache_seconds``; an append
    drops the cached list so the new row shows up on the next read.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        client: Optional[SheetsClient] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or get_config()
        self._client = client
        self._clock = clock
        self._cached: Optional[List[Profile]] = None
        self._cached_at = 0.0

    @property
    def configured(self) -> bool:
        return self._client is not None or self.config.sheets_configured

    def _get_client(self) -> SheetsClient:
        if self._client is None:
            if not self.config.sheets_configured:
                raise StoreNotConfiguredError()
            try:
                provider = ServiceAccountTokenProvider(
                    self.config.google_client_email, self.config.google_private_key
                )
            except (ValueError, GoogleAuthError) as exc:
                raise ProfileStoreError(f"Invalid service account credentials: {exc}") from exc
            self._client = SheetsClient(
                self.config.google_sheet_id, provider, timeout=self.config.sheets_timeout
            )
        return self._client

    def invalidate(self) -> None:
        self._cached = None

    def _cache_fresh(self) -> bool:
        if self._cached is None:
            return False
        return self._clock() - self._cached_at < self.config.profile_cache_seconds

    async def list_profiles(self) -> List[Profile]:
        """Approved profiles in sheet order."""
        if self._cache_fresh():
            return list(self._cached)

        client = self._get_client()
        try:
            rows = await client.get_values(f"{self.config.sheet_name}!A2:{LAST_COLUMN}")
        except (httpx.HTTPError, GoogleAuthError, ValueError) as exc:
            raise ProfileStoreError(f"Failed to read profiles: {exc}") from exc

        profiles = [row_to_profile(row) for row in rows if is_approved(row)]
        logger.info("Loaded %d approved profiles from %d rows", len(profiles), len(rows))
        self._cached = profiles
        self._cached_at = self._clock()
        return list(profiles)

    async def add_profile(self, profile: Profile) -> None:
        """Append one auto-approved row stamped with the current UTC time."""
        client = self._get_client()
        row = profile_to_row(profile, ApprovalStatus.APPROVED)
        try:
            await client.append_values(f"{self.config.sheet_name}!A:{LAST_COLUMN}", [row])
        except (httpx.HTTPError, GoogleAuthError) as exc:
            raise ProfileStoreError(f"Failed to append profile: {exc}") from exc
        self.invalidate()
        logger.info("Appended profile row for %s", profile.name)


_profile_store: ProfileStore | None = None


def get_profile_store() -> ProfileStore:
    """Get or create the shared profile store."""
    global _profile_store
    if _profile_store is None:
        _profile_store = ProfileStore()
    return _profile_store


def reset_profile_store() -> None:
    global _profile_store
    _profile_store = None


__all__ = [
    "SHEET_COLUMNS",
    "ProfileStore",
    "ProfileStoreError",
    "StoreNotConfiguredError",
    "SheetsClient",
    "ServiceAccountTokenProvider",
    "get_profile_store",
    "reset_profile_store",
    "is_approved",
    "row_status",
    "row_to_profile",
    "profile_to_row",
]
