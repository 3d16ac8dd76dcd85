"""Disclosure Policy.

Derives the visible representation of a profile from its match status. The
anonymized view is built without the gated fields, so they cannot leak through
serialization or attribute access.
"""

from typing import Callable, Iterable

from researchmatch.models.profile import (
    GATED_FIELDS,
    AnonymizedProfile,
    DisclosedProfile,
    MatchedProfile,
    Profile,
)


def present(profile: Profile, is_matched: bool) -> DisclosedProfile:
    """Return the view of profile a caller with the given match status may see."""
    if is_matched:
        return MatchedProfile(**profile.model_dump())
    return AnonymizedProfile(**profile.model_dump(exclude=set(GATED_FIELDS)))


def present_all(
    profiles: Iterable[Profile], is_matched: Callable[[int], bool]
) -> list[DisclosedProfile]:
    """Present each profile, looking up its match status by id."""
    return [present(profile, is_matched(profile.id)) for profile in profiles]


def initials(name: str) -> str:
    """Avatar initials for a visible name, e.g. "Sarah M." -> "SM"."""
    return "".join(part[0] for part in name.split() if part).upper()
