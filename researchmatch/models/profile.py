"""Researcher profile data models and the enumerated domains they draw from."""

from typing import Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


LEVELS = ("Undergraduate", "Medical Student", "Resident", "Attending/Faculty")

SPECIALTIES = (
    "Anesthesiology",
    "Cardiology",
    "Critical Care",
    "Dermatology",
    "Emergency Medicine",
    "Endocrinology",
    "Family Medicine",
    "Gastroenterology",
    "General Surgery",
    "Geriatrics",
    "Hematology",
    "Infectious Disease",
    "Internal Medicine",
    "Nephrology",
    "Neurology",
    "Neurosurgery",
    "Obstetrics & Gynecology",
    "Oncology",
    "Ophthalmology",
    "Orthopedic Surgery",
    "Otolaryngology (ENT)",
    "Pathology",
    "Pediatrics",
    "Physical Medicine & Rehabilitation",
    "Plastic Surgery",
    "Psychiatry",
    "Pulmonology",
    "Radiology",
    "Rheumatology",
    "Urology",
    "Bioengineering",
    "Biomedical Sciences",
    "Epidemiology",
    "Genetics",
    "Immunology",
    "Neuroscience",
    "Pharmacology",
    "Public Health",
    "Unicorn Engineering",
)

INSTITUTION_TIERS = (
    "Top 5 Medical School (US)",
    "Top 10 Medical School (US)",
    "Top 20 Medical School (US)",
    "Top 50 Medical School (US)",
    "US Medical School",
    "Top 10 University (US)",
    "Top 50 University (US)",
    "US University",
    "Russell Group University (UK)",
    "Oxbridge (UK)",
    "Canadian University",
    "European University",
    "Australian University",
    "Asian University",
    "Top Research Institution (International)",
    "International University",
)

REGIONS = (
    "Northeast US",
    "Southeast US",
    "Midwest US",
    "Southwest US",
    "West Coast US",
    "Canada",
    "United Kingdom",
    "Europe",
    "Asia",
    "Australia/Oceania",
    "Latin America",
    "Middle East",
    "Africa",
)

# Fields that only a matched caller may see
GATED_FIELDS = frozenset({"full_name", "institution"})


def check_domain(value: str, allowed: tuple[str, ...], field_name: str) -> str:
    """Ensure value is one of the allowed enumerated values.

    Raises:
        ValueError: If value is not in allowed
    """
    if value not in allowed:
        raise ValueError(
            f"Invalid {field_name}: {value!r}. Must be one of {list(allowed)}"
        )
    return value


class _ProfileBase(BaseModel):
    """Fields every representation of a researcher carries."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    id: int
    display_name: str
    level: str
    year: Optional[str] = None
    specialty: str
    institution_tier: str
    region: str
    publication_count: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices(
            "publication_count", "publicationCount", "publications"
        ),
    )
    verified: bool = False
    bio: str = ""
    interests: tuple[str, ...] = ()
    skills: tuple[str, ...] = ()
    previous_projects: tuple[str, ...] = ()

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        return check_domain(v, LEVELS, "level")

    @field_validator("specialty")
    @classmethod
    def validate_specialty(cls, v: str) -> str:
        return check_domain(v, SPECIALTIES, "specialty")

    @field_validator("institution_tier")
    @classmethod
    def validate_institution_tier(cls, v: str) -> str:
        return check_domain(v, INSTITUTION_TIERS, "institution_tier")

    @field_validator("region")
    @classmethod
    def validate_region(cls, v: str) -> str:
        return check_domain(v, REGIONS, "region")

    @property
    def has_publications(self) -> bool:
        return self.publication_count > 0


class Profile(_ProfileBase):
    """A researcher profile as supplied by the read-only dataset.

    Attributes:
        id: Unique identifier, immutable
        display_name: First name or initials, always visible
        full_name: Full identity, disclosed only after a match
        level: Training level from LEVELS
        year: Training year label (e.g. "MS3", "PGY-2")
        specialty: One of SPECIALTIES
        institution_tier: One of INSTITUTION_TIERS, always visible
        institution: Exact institution name, disclosed only after a match
        region: One of REGIONS, always visible
        publication_count: Number of publications (non-negative)
        verified: Whether the profile has been verified
        bio: Free-text biography
        interests: Research interests, ordered
        skills: Skills, ordered
        previous_projects: Previous research projects, ordered
    """

    full_name: str
    institution: str


class AnonymizedProfile(_ProfileBase):
    """Profile view for callers without a match.

    Carries no full_name or institution field at all; the visible identity is
    display_name and the visible affiliation is institution_tier.
    """

    is_matched: bool = False

    @property
    def visible_name(self) -> str:
        return self.display_name

    @property
    def visible_affiliation(self) -> str:
        return self.institution_tier


class MatchedProfile(Profile):
    """Profile view for callers holding a match: every field verbatim."""

    is_matched: bool = True

    @property
    def visible_name(self) -> str:
        return self.full_name

    @property
    def visible_affiliation(self) -> str:
        return self.institution


DisclosedProfile = Union[AnonymizedProfile, MatchedProfile]
