"""Directory listing models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from .profile import Profile


class DirectoryResult(BaseModel):
    """Filtered profiles plus the quick-filter options derived from all profiles."""

    profiles: list[Profile] = Field(default_factory=list)
    count: int = Field(0, ge=0)
    label: str = Field("builders", description="Noun matching the count")
    query: str = ""
    year: Optional[str] = None
    major: Optional[str] = None
    year_options: list[str] = Field(default_factory=list)
    major_options: list[str] = Field(default_factory=list)
