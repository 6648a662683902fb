"""Profile-related Pydantic models."""

from __future__ import annotations

from enum import Enum
import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

REQUIRED_FIELDS: tuple[str, ...] = ("name", "major", "gradYear", "building")
OPTIONAL_FIELDS: tuple[str, ...] = ("website", "photoUrl", "linkedin", "github", "twitter")
SCHEME_PATTERN = re.compile(r"^https?://")


class ApprovalStatus(str, Enum):
    """Moderation state of a stored profile row."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def sheet_value(self) -> str:
        """Value written to the approval column."""
        return {
            ApprovalStatus.PENDING: "",
            ApprovalStatus.APPROVED: "TRUE",
            ApprovalStatus.REJECTED: "FALSE",
        }[self]

    @classmethod
    def from_sheet_value(cls, value: str) -> "ApprovalStatus":
        """Only the exact literal ``TRUE`` counts as approved."""
        if value == "TRUE":
            return cls.APPROVED
        if value == "FALSE":
            return cls.REJECTED
        return cls.PENDING


class Profile(BaseModel):
    """A directory entrant as shown to visitors."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Jane Smith",
                "major": "Computer Science",
                "gradYear": "2027",
                "building": "a course planner for DU students",
                "website": "https://janesmith.dev",
                "photoUrl": "",
                "linkedin": "in/janesmith",
                "github": "@janesmith",
                "twitter": "",
            }
        }
    )

    name: str = ""
    major: str = ""
    gradYear: str = ""
    building: str = ""
    website: str = ""
    photoUrl: str = ""
    linkedin: str = ""
    github: str = ""
    twitter: str = ""

    @property
    def initials(self) -> str:
        parts = [part for part in self.name.split(" ") if part]
        return "".join(part[0] for part in parts).upper()[:2]

    @property
    def github_url(self) -> str:
        if not self.github:
            return ""
        return f"https://github.com/{self.github.replace('@', '')}"

    @property
    def twitter_url(self) -> str:
        if not self.twitter:
            return ""
        return f"https://twitter.com/{self.twitter.replace('@', '')}"

    @property
    def linkedin_url(self) -> str:
        if not self.linkedin:
            return ""
        if self.linkedin.startswith("http"):
            return self.linkedin
        return f"https://linkedin.com/in/{self.linkedin}"

    @property
    def website_label(self) -> str:
        """Website without scheme or trailing slash."""
        label = SCHEME_PATTERN.sub("", self.website)
        return label[:-1] if label.endswith("/") else label


class ProfileSubmission(BaseModel):
    """Payload posted by the join form.

    Every field is optional at the schema level so that blank or missing
    required fields are reported together by the submission service.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    name: str = ""
    major: str = ""
    gradYear: str = ""
    building: str = ""
    website: str = ""
    photoUrl: str = ""
    linkedin: str = ""
    github: str = ""
    twitter: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    def missing_fields(self) -> list[str]:
        return [field for field in REQUIRED_FIELDS if not getattr(self, field).strip()]

    def to_profile(self) -> Profile:
        return Profile(**self.model_dump())


class SubmitResponse(BaseModel):
    """Acknowledgement returned after a profile row is appended."""

    success: bool = Field(default=True)


__all__ = [
    "ApprovalStatus",
    "Profile",
    "ProfileSubmission",
    "SubmitResponse",
    "REQUIRED_FIELDS",
    "OPTIONAL_FIELDS",
]
