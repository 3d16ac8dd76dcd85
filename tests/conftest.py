"""
Shared test fixtures for researcher profiles and session state.
"""

import pytest

from researchmatch.models.profile import Profile


def make_profile(**overrides) -> Profile:
    """Build a valid Profile, overriding any field by name."""
    data = {
        "id": 1,
        "display_name": "Sarah M.",
        "full_name": "Sarah Mitchell",
        "level": "Medical Student",
        "year": "MS3",
        "specialty": "Cardiology",
        "institution_tier": "Top 10 Medical School (US)",
        "institution": "Johns Hopkins School of Medicine",
        "region": "Northeast US",
        "publication_count": 0,
        "verified": True,
        "bio": "Interested in heart failure outcomes.",
        "interests": ["Heart Failure"],
        "skills": ["R"],
        "previous_projects": ["Readmission study"],
    }
    data.update(overrides)
    return Profile(**data)


@pytest.fixture
def profile_factory():
    """Expose make_profile as a fixture."""
    return make_profile


@pytest.fixture
def sample_profiles() -> list[Profile]:
    """Small catalog spanning levels, specialties, tiers, and regions."""
    return [
        make_profile(id=1, specialty="Cardiology", publication_count=0),
        make_profile(
            id=2,
            display_name="James K.",
            full_name="James Kowalski",
            level="Resident",
            specialty="Oncology",
            institution_tier="Top 20 Medical School (US)",
            institution="University of Michigan Medical School",
            region="Midwest US",
            publication_count=4,
        ),
        make_profile(
            id=3,
            display_name="Priya R.",
            full_name="Priya Raman",
            level="Undergraduate",
            specialty="Neuroscience",
            institution_tier="Top 10 University (US)",
            institution="Stanford University",
            region="West Coast US",
            publication_count=0,
            verified=False,
        ),
        make_profile(
            id=4,
            display_name="Tom H.",
            full_name="Thomas Hargreaves",
            level="Attending/Faculty",
            specialty="Cardiology",
            institution_tier="Oxbridge (UK)",
            institution="University of Oxford",
            region="United Kingdom",
            publication_count=24,
        ),
        make_profile(
            id=5,
            display_name="Ana L.",
            full_name="Ana Lima",
            level="Medical Student",
            specialty="Cardiology",
            institution_tier="International University",
            institution="Universidade de Sao Paulo",
            region="Latin America",
            publication_count=1,
        ),
    ]
