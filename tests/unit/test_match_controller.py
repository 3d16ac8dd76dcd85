"""Unit tests for the quota & match controller."""

import threading

import pytest

from researchmatch.models.config import MarketplaceParams, QuotaConfig
from researchmatch.models.match import MatchOutcome, QuotaState, SessionState, Tier
from researchmatch.services.match_controller import (
    MatchController,
    UnknownProfileId,
    describe_outcome,
)


def controller_with(used=0, limit=3, tier=Tier.FREE, known=None):
    state = SessionState(
        quota=QuotaState(tier=tier, free_requests_used=used, free_requests_limit=limit)
    )
    return MatchController(state=state, known_profile_ids=known)


class TestRequestMatch:
    """Test cases for request_match."""

    def test_first_request_is_free_and_counts(self):
        controller = controller_with()

        assert controller.request_match(1) is MatchOutcome.CONFIRMED_FREE
        assert controller.quota.free_requests_used == 1
        assert controller.is_matched(1)

    def test_second_request_same_id_is_idempotent(self):
        """Test a repeat request neither double-counts nor double-charges."""
        controller = controller_with()

        first = controller.request_match(1)
        second = controller.request_match(1)

        assert first is MatchOutcome.CONFIRMED_FREE
        assert second is MatchOutcome.ALREADY_MATCHED
        assert controller.quota.free_requests_used == 1
        assert controller.matched_ids() == [1]

    def test_quota_boundary(self):
        """Test limit 3 with 2 used: one more free, then paid."""
        controller = controller_with(used=2, limit=3)

        assert controller.request_match(10) is MatchOutcome.CONFIRMED_FREE
        assert controller.quota.free_requests_used == 3

        assert controller.request_match(11) is MatchOutcome.CONFIRMED_PAID
        assert controller.quota.free_requests_used == 3
        assert controller.is_matched(11)

    def test_paid_match_repeat_is_already_matched(self):
        controller = controller_with(used=3, limit=3)

        assert controller.request_match(5) is MatchOutcome.CONFIRMED_PAID
        assert controller.request_match(5) is MatchOutcome.ALREADY_MATCHED
        assert controller.quota.free_requests_used == 3

    @pytest.mark.parametrize("used", [3, 4, 10])
    def test_premium_bypasses_quota(self, used):
        """Test premium never consumes or is limited by the free quota."""
        controller = controller_with(used=used, limit=3, tier=Tier.PREMIUM)

        assert controller.request_match(1) is MatchOutcome.CONFIRMED_FREE
        assert controller.request_match(2) is MatchOutcome.CONFIRMED_FREE
        assert controller.quota.free_requests_used == used

    def test_match_record_keeps_outcome(self):
        controller = controller_with(used=3, limit=3)
        controller.request_match(7)

        record = controller.state.matches[7]
        assert record.profile_id == 7
        assert record.outcome is MatchOutcome.CONFIRMED_PAID
        assert record.matched_at.tzinfo is not None

    def test_unknown_profile_id_raises_without_mutation(self):
        controller = controller_with(known={1, 2, 3})

        with pytest.raises(UnknownProfileId) as exc_info:
            controller.request_match(99)

        assert exc_info.value.profile_id == 99
        assert controller.quota.free_requests_used == 0
        assert controller.matched_ids() == []

    def test_no_known_set_accepts_any_id(self):
        controller = controller_with()
        assert controller.request_match(12345) is MatchOutcome.CONFIRMED_FREE

    def test_concurrent_requests_never_overshoot_quota(self):
        """Test the check-and-increment is atomic across threads."""
        controller = controller_with(limit=3)
        outcomes = []
        lock = threading.Lock()

        def worker(profile_id):
            outcome = controller.request_match(profile_id)
            with lock:
                outcomes.append(outcome)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert controller.quota.free_requests_used == 3
        assert outcomes.count(MatchOutcome.CONFIRMED_FREE) == 3
        assert outcomes.count(MatchOutcome.CONFIRMED_PAID) == 17


class TestQuotaQueries:
    """Test cases for remaining_free and can_send_free_match."""

    def test_remaining_free(self):
        controller = controller_with(used=1, limit=3)
        assert controller.remaining_free() == 2
        assert controller.can_send_free_match()

    def test_remaining_free_never_negative(self):
        controller = controller_with(used=5, limit=3)
        assert controller.remaining_free() == 0
        assert not controller.can_send_free_match()

    def test_premium_is_unlimited(self):
        controller = controller_with(used=3, tier=Tier.PREMIUM)
        assert controller.remaining_free() is None
        assert controller.can_send_free_match()


class TestTierAndReset:
    """Test cases for externally injected tier changes and quota resets."""

    def test_set_tier_accepts_enum_or_value(self):
        controller = controller_with(used=3)
        controller.set_tier("premium")
        assert controller.quota.tier is Tier.PREMIUM
        assert controller.request_match(1) is MatchOutcome.CONFIRMED_FREE

        controller.set_tier(Tier.FREE)
        assert controller.request_match(2) is MatchOutcome.CONFIRMED_PAID

    def test_reset_quota_keeps_matches(self):
        controller = controller_with(used=3)
        controller.request_match(1)

        controller.reset_quota()

        assert controller.quota.free_requests_used == 0
        assert controller.is_matched(1)
        assert controller.request_match(1) is MatchOutcome.ALREADY_MATCHED
        assert controller.request_match(2) is MatchOutcome.CONFIRMED_FREE


def test_default_state_uses_configured_limit():
    params = MarketplaceParams(quota=QuotaConfig(free_requests_limit=1, paid_match_fee_usd=7.5))
    controller = MatchController(params=params)

    assert controller.quota.free_requests_limit == 1
    assert controller.paid_match_fee == 7.5
    assert controller.request_match(1) is MatchOutcome.CONFIRMED_FREE
    assert controller.request_match(2) is MatchOutcome.CONFIRMED_PAID


class TestDescribeOutcome:
    """Test cases for user-facing outcome messages."""

    def test_free_with_remaining(self):
        message = describe_outcome(MatchOutcome.CONFIRMED_FREE, "Sarah M.", remaining=2)
        assert message.startswith("Match request sent to Sarah M.!")
        assert "You have 2 free matches remaining this month." in message

    def test_free_last_one_omits_remaining(self):
        message = describe_outcome(MatchOutcome.CONFIRMED_FREE, "Sarah M.", remaining=0)
        assert "remaining" not in message

    def test_premium_omits_remaining(self):
        message = describe_outcome(MatchOutcome.CONFIRMED_FREE, "Sarah M.", remaining=None)
        assert "remaining" not in message
        assert "can accept or decline" in message

    def test_paid_mentions_fee(self):
        message = describe_outcome(MatchOutcome.CONFIRMED_PAID, "Tom H.", fee=5.0)
        assert "This match costs $5 since you've used your 3 free matches" in message

    def test_already_matched(self):
        message = describe_outcome(MatchOutcome.ALREADY_MATCHED, "Tom H.")
        assert message == "You've already matched with Tom H.!"
