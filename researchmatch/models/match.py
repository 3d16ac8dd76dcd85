"""Match, quota, and session state models."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class Tier(str, Enum):
    """Quota policy designated by the account system."""

    FREE = "free"
    PREMIUM = "premium"


class MatchOutcome(str, Enum):
    """Result of a single match request.

    CONFIRMED_PAID means the caller owes the out-of-band per-match fee; no
    payment is executed here.
    """

    ALREADY_MATCHED = "already_matched"
    CONFIRMED_FREE = "confirmed_free"
    CONFIRMED_PAID = "confirmed_paid"


class Match(BaseModel):
    """A recorded one-way association between the user and a profile.

    Attributes:
        profile_id: Matched profile id
        outcome: How the match was settled (free or paid), kept for billing hand-off
        matched_at: UTC time the match was recorded
    """

    profile_id: int
    outcome: MatchOutcome
    matched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class QuotaState(BaseModel):
    """Monthly free-request quota."""

    tier: Tier = Tier.FREE
    free_requests_used: int = Field(default=0, ge=0)
    free_requests_limit: int = Field(default=3, gt=0)

    @property
    def is_premium(self) -> bool:
        return self.tier is Tier.PREMIUM


class EngagementTriggerState(BaseModel):
    """One-shot latch for the conversion prompt. Never reset within a session."""

    has_fired: bool = False


class SessionState(BaseModel):
    """All mutable state of one browsing session.

    Owned exclusively by the match controller; the engagement trigger holds a
    reference to the trigger latch only.
    """

    matches: dict[int, Match] = Field(default_factory=dict)
    quota: QuotaState = Field(default_factory=QuotaState)
    trigger: EngagementTriggerState = Field(default_factory=EngagementTriggerState)
