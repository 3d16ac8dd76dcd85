"""Filter criteria model for browsing researcher profiles."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from researchmatch.models.profile import (
    INSTITUTION_TIERS,
    LEVELS,
    REGIONS,
    SPECIALTIES,
    check_domain,
)


# Enumerated domain for each single-valued constraint
CRITERIA_DOMAINS: dict[str, tuple[str, ...]] = {
    "level": LEVELS,
    "specialty": SPECIALTIES,
    "institution_tier": INSTITUTION_TIERS,
    "region": REGIONS,
}


class FilterCriteria(BaseModel):
    """Optional browse constraints.

    An unset constraint imposes no restriction. An empty string is treated as
    unset, matching the "All" option of a selection control. Constraints may be
    given by field name or by camelCase key (e.g. "institutionTier").
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid", frozen=True
    )

    level: Optional[str] = None
    specialty: Optional[str] = None
    institution_tier: Optional[str] = None
    region: Optional[str] = None
    require_publications: bool = False

    @field_validator("level", "specialty", "institution_tier", "region", mode="before")
    @classmethod
    def blank_is_unset(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("level", "specialty", "institution_tier", "region")
    @classmethod
    def validate_domain(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        if v is None:
            return v
        return check_domain(v, CRITERIA_DOMAINS[info.field_name], info.field_name)

    def active_constraints(self) -> dict[str, Any]:
        """Return only the constraints that restrict the result."""
        active: dict[str, Any] = {
            name: value
            for name in CRITERIA_DOMAINS
            if (value := getattr(self, name)) is not None
        }
        if self.require_publications:
            active["require_publications"] = True
        return active

    @classmethod
    def field_name_for(cls, key: str) -> str:
        """Map a camelCase key to its field name; other keys pass through."""
        for name, info in cls.model_fields.items():
            if key in (name, info.alias):
                return name
        return key
