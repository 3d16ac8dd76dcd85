"""Quota & Match Controller.

Owns the match set and the monthly quota of one session and classifies each
match request as free, paid, or already matched.

State machine per profile id:
    Unmatched --request_match--> Matched   (outcome CONFIRMED_FREE or CONFIRMED_PAID)
    Matched   --request_match--> Matched   (outcome ALREADY_MATCHED, no mutation)

A request is confirmed as soon as it is made; there is no pending state
awaiting the other researcher.
"""

import threading
from typing import Iterable, Optional

from researchmatch.models.config import MarketplaceParams
from researchmatch.models.match import (
    Match,
    MatchOutcome,
    QuotaState,
    SessionState,
    Tier,
)
from researchmatch.utils.logger import get_logger


class UnknownProfileId(LookupError):
    """Raised when a request references an id outside the known profile set."""

    def __init__(self, profile_id: int):
        self.profile_id = profile_id
        super().__init__(f"Unknown profile id: {profile_id!r}")


class MatchController:
    """Holds MatchSet and QuotaState and enforces the free/premium quota.

    The membership check, insert, quota check, and increment of request_match
    run under a single lock so concurrent requests cannot overshoot the quota.
    """

    def __init__(
        self,
        state: Optional[SessionState] = None,
        known_profile_ids: Optional[Iterable[int]] = None,
        params: Optional[MarketplaceParams] = None,
        correlation_id: Optional[str] = None,
    ):
        """
        Initialize the controller.

        Args:
            state: Session state to own (a fresh one is created if None)
            known_profile_ids: Ids of the catalog; when given, requests for other
                ids raise UnknownProfileId
            params: Marketplace parameters (defaults if None)
            correlation_id: Correlation ID for logging
        """
        self.params = params or MarketplaceParams()
        if state is None:
            state = SessionState(
                quota=QuotaState(
                    free_requests_limit=self.params.quota.free_requests_limit
                )
            )
        self.state = state
        self.known_profile_ids = (
            frozenset(known_profile_ids) if known_profile_ids is not None else None
        )
        self._lock = threading.Lock()
        self.logger = get_logger(
            correlation_id=correlation_id,
            phase="matching",
            component="match_controller",
        )

    @property
    def quota(self) -> QuotaState:
        return self.state.quota

    @property
    def paid_match_fee(self) -> float:
        return self.params.quota.paid_match_fee_usd

    def is_matched(self, profile_id: int) -> bool:
        return profile_id in self.state.matches

    def matched_ids(self) -> list[int]:
        """Matched profile ids in the order they were matched."""
        return list(self.state.matches)

    def remaining_free(self) -> Optional[int]:
        """Free requests left this period, or None for premium (unlimited)."""
        quota = self.state.quota
        if quota.is_premium:
            return None
        return max(0, quota.free_requests_limit - quota.free_requests_used)

    def can_send_free_match(self) -> bool:
        """True when the next new match would not incur the paid fee."""
        quota = self.state.quota
        return quota.is_premium or quota.free_requests_used < quota.free_requests_limit

    def request_match(self, profile_id: int) -> MatchOutcome:
        """Record a match with profile_id and classify how it is settled.

        Args:
            profile_id: Id of the profile to match with

        Returns:
            ALREADY_MATCHED if a match exists (nothing changes), CONFIRMED_FREE if
            premium or within the free quota, CONFIRMED_PAID otherwise

        Raises:
            UnknownProfileId: If profile_id is outside the known profile set
        """
        if self.known_profile_ids is not None and profile_id not in self.known_profile_ids:
            self.logger.warning("unknown_profile_id", profile_id=profile_id)
            raise UnknownProfileId(profile_id)

        with self._lock:
            if profile_id in self.state.matches:
                self.logger.info("match_already_exists", profile_id=profile_id)
                return MatchOutcome.ALREADY_MATCHED

            quota = self.state.quota
            if quota.is_premium:
                outcome = MatchOutcome.CONFIRMED_FREE
            elif quota.free_requests_used < quota.free_requests_limit:
                quota.free_requests_used += 1
                outcome = MatchOutcome.CONFIRMED_FREE
            else:
                outcome = MatchOutcome.CONFIRMED_PAID

            self.state.matches[profile_id] = Match(
                profile_id=profile_id, outcome=outcome
            )

        self.logger.info(
            "match_recorded",
            profile_id=profile_id,
            outcome=outcome.value,
            tier=quota.tier.value,
            free_requests_used=quota.free_requests_used,
        )
        return outcome

    def set_tier(self, tier: Tier) -> None:
        """Apply the tier designated by the account system."""
        with self._lock:
            self.state.quota.tier = Tier(tier)
        self.logger.info("tier_changed", tier=self.state.quota.tier.value)

    def reset_quota(self) -> None:
        """Handle a billing-period boundary: free usage returns to zero.

        Matches are kept.
        """
        with self._lock:
            previous = self.state.quota.free_requests_used
            self.state.quota.free_requests_used = 0
        self.logger.info("quota_reset", previous_free_requests_used=previous)


def describe_outcome(
    outcome: MatchOutcome,
    display_name: str,
    remaining: Optional[int] = None,
    fee: float = 5.0,
    free_limit: int = 3,
) -> str:
    """User-facing feedback for a match outcome.

    Args:
        outcome: Outcome returned by request_match
        display_name: Visible name of the profile
        remaining: Free requests left after this request (None for premium)
        fee: Per-match fee charged when the free quota is spent
        free_limit: Free requests per month

    Returns:
        Message to show the user
    """
    if outcome is MatchOutcome.ALREADY_MATCHED:
        return f"You've already matched with {display_name}!"

    sent = f"Match request sent to {display_name}!"
    if outcome is MatchOutcome.CONFIRMED_PAID:
        return (
            f"{sent} This match costs ${fee:g} since you've used your "
            f"{free_limit} free matches this month. "
            "Payment will be processed upon mutual match."
        )

    message = f"{sent} They'll be notified and can accept or decline."
    if remaining:
        message += f" You have {remaining} free matches remaining this month."
    return message
