"""Filter Engine.

Pure predicate evaluation over a profile collection. Safe to call on every
render: no state is read or written besides the arguments.
"""

from typing import Any, Iterable, Mapping, Optional

import structlog
from pydantic import ValidationError

from researchmatch.models.criteria import CRITERIA_DOMAINS, FilterCriteria
from researchmatch.models.profile import Profile

logger = structlog.get_logger(__name__)


class InvalidFilterValue(ValueError):
    """Raised when a filter constraint is not drawn from its enumerated domain."""

    def __init__(self, field: str, value: Any, allowed: Optional[Iterable[str]] = None):
        self.field = field
        self.value = value
        self.allowed = list(allowed) if allowed is not None else None
        message = f"Invalid filter value for {field!r}: {value!r}"
        if self.allowed is not None:
            message += f". Allowed values: {self.allowed}"
        super().__init__(message)


def build_criteria(selection: Optional[Mapping[str, Any]] = None) -> FilterCriteria:
    """Build FilterCriteria from a raw selection at the collaborator boundary.

    Args:
        selection: Mapping of constraint name (snake_case or camelCase) to
            selected value. Empty strings and None mean "unset".

    Returns:
        Validated FilterCriteria

    Raises:
        InvalidFilterValue: If a key is unknown or a value is outside its domain
    """
    if not selection:
        return FilterCriteria()

    try:
        return FilterCriteria.model_validate(dict(selection))
    except ValidationError as e:
        error = e.errors()[0]
        key = str(error["loc"][0]) if error["loc"] else "(root)"
        field = FilterCriteria.field_name_for(key)
        value = error.get("input")
        logger.warning("invalid_filter_value", field=field, value=str(value))
        raise InvalidFilterValue(field, value, CRITERIA_DOMAINS.get(field)) from e


def matches_criteria(profile: Profile, criteria: FilterCriteria) -> bool:
    """Check whether a profile satisfies every set constraint."""
    if criteria.level is not None and profile.level != criteria.level:
        return False
    if criteria.specialty is not None and profile.specialty != criteria.specialty:
        return False
    if criteria.require_publications and not profile.has_publications:
        return False
    if (
        criteria.institution_tier is not None
        and profile.institution_tier != criteria.institution_tier
    ):
        return False
    if criteria.region is not None and profile.region != criteria.region:
        return False
    return True


def filter_profiles(
    profiles: Iterable[Profile], criteria: FilterCriteria
) -> list[Profile]:
    """Return the profiles satisfying criteria, preserving input order."""
    result = [profile for profile in profiles if matches_criteria(profile, criteria)]
    logger.debug(
        "profiles_filtered",
        constraints=criteria.active_constraints(),
        matched=len(result),
    )
    return result


def has_active_filters(criteria: FilterCriteria) -> bool:
    """True when at least one constraint restricts the result."""
    return bool(criteria.active_constraints())
