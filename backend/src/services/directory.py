"""In-memory directory search and quick-filter options."""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Optional, Sequence

from ..models.directory import DirectoryResult
from ..models.profile import Profile

SEARCHABLE_FIELDS: tuple[str, ...] = ("name", "major", "gradYear", "building")


def _normalize_selection(value: Optional[str]) -> Optional[str]:
    # A blank dropdown choice means "All"
    if value is None:
        return None
    return value.strip() or None


def matches_query(profile: Profile, query: str) -> bool:
    """Case-insensitive substring match against the searchable fields."""
    needle = query.strip().lower()
    if not needle:
        return True
    return any(needle in getattr(profile, field).lower() for field in SEARCHABLE_FIELDS)


def matches_year(profile: Profile, year: Optional[str]) -> bool:
    selected = _normalize_selection(year)
    if selected is None:
        return True
    return profile.gradYear.strip() == selected


def matches_major(profile: Profile, major: Optional[str]) -> bool:
    selected = _normalize_selection(major)
    if selected is None:
        return True
    return profile.major.strip() == selected


def filter_profiles(
    profiles: Iterable[Profile],
    query: str = "",
    year: Optional[str] = None,
    major: Optional[str] = None,
) -> list[Profile]:
    """
    Return the profiles satisfying every active filter.

    ``None`` or a blank value for year or major means the filter is not
    applied. The three
    predicates are independent, so the result does not depend on the order
    they are checked in.
    """
    return [
        profile
        for profile in profiles
        if matches_query(profile, query)
        and matches_year(profile, year)
        and matches_major(profile, major)
    ]


def year_options(profiles: Iterable[Profile]) -> list[str]:
    """Sorted distinct non-blank class years."""
    return sorted({p.gradYear.strip() for p in profiles if p.gradYear.strip()})


def major_options(profiles: Iterable[Profile]) -> list[str]:
    """Distinct non-blank majors, most frequent first, ties in first-seen order."""
    counts: Counter[str] = Counter()
    for profile in profiles:
        major = profile.major.strip()
        if major:
            counts[major] += 1
    # Counter keeps insertion order and sorted() is stable
    return sorted(counts, key=lambda major: -counts[major])


def count_label(count: int) -> str:
    return "builder" if count == 1 else "builders"


def build_directory(
    profiles: Sequence[Profile],
    query: str = "",
    year: Optional[str] = None,
    major: Optional[str] = None,
) -> DirectoryResult:
    """Filter profiles and derive the option lists in one pass over the inputs."""
    filtered = filter_profiles(profiles, query=query, year=year, major=major)
    return DirectoryResult(
        profiles=filtered,
        count=len(filtered),
        label=count_label(len(filtered)),
        query=query,
        year=_normalize_selection(year),
        major=_normalize_selection(major),
        year_options=year_options(profiles),
        major_options=major_options(profiles),
    )


__all__ = [
    "filter_profiles",
    "matches_query",
    "matches_year",
    "matches_major",
    "year_options",
    "major_options",
    "count_label",
    "build_directory",
]
