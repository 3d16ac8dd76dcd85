"""
Marketplace Session Coordinator

Composes the filter engine, disclosure policy, match controller, and engagement
trigger for one browsing session. This is the collaborator boundary: raw filter
selections and profile ids are validated here once, and every rejected
operation leaves the session state untouched.
"""

import uuid
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence

from pydantic import BaseModel
from rich.console import Console
from rich.table import Table

from researchmatch.models.config import MarketplaceParams
from researchmatch.models.match import MatchOutcome, SessionState, Tier
from researchmatch.models.profile import DisclosedProfile, Profile
from researchmatch.services.disclosure import initials, present, present_all
from researchmatch.services.engagement_trigger import EngagementTrigger, ScrollSignal
from researchmatch.services.filter_engine import build_criteria, filter_profiles
from researchmatch.services.match_controller import (
    MatchController,
    UnknownProfileId,
    describe_outcome,
)
from researchmatch.utils.logger import get_logger
from researchmatch.utils.validator import DatasetValidator


class MatchReceipt(BaseModel):
    """Feedback for one match request, for the UI and billing hand-off."""

    profile_id: int
    outcome: MatchOutcome
    message: str
    fee_due_usd: float = 0.0
    remaining_free: Optional[int] = None


class MarketplaceSession:
    """
    One user's browsing session over a read-only profile catalog.

    Holds the catalog, the match controller (which owns all mutable session
    state), and the engagement trigger.
    """

    def __init__(
        self,
        profiles: Sequence[Profile],
        params: Optional[MarketplaceParams] = None,
        state: Optional[SessionState] = None,
        on_conversion_prompt: Optional[Callable[[], None]] = None,
        correlation_id: Optional[str] = None,
    ):
        """
        Initialize a session.

        Args:
            profiles: Catalog of profiles, in display order
            params: Marketplace parameters (defaults if None)
            state: Injected session state (fresh if None)
            on_conversion_prompt: Called once when the conversion prompt fires
            correlation_id: Correlation ID for logging (auto-generated if None)
        """
        if correlation_id is None:
            correlation_id = str(uuid.uuid4())
        self.correlation_id = correlation_id
        self.params = params or MarketplaceParams()

        self.profiles: tuple[Profile, ...] = tuple(profiles)
        self._by_id: dict[int, Profile] = {p.id: p for p in self.profiles}

        self.controller = MatchController(
            state=state,
            known_profile_ids=self._by_id.keys(),
            params=self.params,
            correlation_id=correlation_id,
        )
        self.trigger = EngagementTrigger(
            state=self.controller.state.trigger,
            config=self.params.engagement,
            on_fire=on_conversion_prompt,
            correlation_id=correlation_id,
        )
        self.logger = get_logger(
            correlation_id=correlation_id,
            phase="session",
            component="marketplace_session",
        )
        self.logger.info(
            "session_started",
            profile_count=len(self.profiles),
            tier=self.controller.quota.tier.value,
            free_requests_limit=self.controller.quota.free_requests_limit,
        )

    @classmethod
    def from_files(
        cls,
        dataset_path: Path | str,
        config_path: Path | str | None = None,
        **kwargs: Any,
    ) -> "MarketplaceSession":
        """
        Build a session from a profile dataset file and optional config file.

        Raises:
            DatasetError: If the dataset is missing or invalid
            FileNotFoundError: If config_path is given but doesn't exist
        """
        params = MarketplaceParams.load(config_path) if config_path else None
        profiles = DatasetValidator().load_profiles(Path(dataset_path))
        return cls(profiles, params=params, **kwargs)

    def get_profile(self, profile_id: int) -> Profile:
        try:
            return self._by_id[profile_id]
        except KeyError:
            self.logger.warning("unknown_profile_id", profile_id=profile_id)
            raise UnknownProfileId(profile_id) from None

    def count(self, selection: Optional[Mapping[str, Any]] = None) -> int:
        """Number of profiles matching the selection."""
        return len(filter_profiles(self.profiles, build_criteria(selection)))

    def browse(
        self,
        selection: Optional[Mapping[str, Any]] = None,
        limit: Optional[int] = None,
    ) -> list[DisclosedProfile]:
        """
        Filter the catalog and disclose each result according to match status.

        Args:
            selection: Raw filter selection (see build_criteria)
            limit: Maximum number of results (defaults to browse.preview_limit;
                0 means no cap)

        Raises:
            InvalidFilterValue: If the selection is invalid
        """
        criteria = build_criteria(selection)
        results = filter_profiles(self.profiles, criteria)

        if limit is None:
            limit = self.params.browse.preview_limit
        if limit:
            results = results[:limit]

        return present_all(results, self.controller.is_matched)

    def view_profile(self, profile_id: int) -> DisclosedProfile:
        """Detailed view of one profile."""
        profile = self.get_profile(profile_id)
        return present(profile, self.controller.is_matched(profile_id))

    def request_match(self, profile_id: int) -> MatchReceipt:
        """
        Send a match request and build user-facing feedback.

        Raises:
            UnknownProfileId: If profile_id is not in the catalog
        """
        profile = self.get_profile(profile_id)
        outcome = self.controller.request_match(profile_id)
        remaining = self.controller.remaining_free()
        fee = self.controller.paid_match_fee

        return MatchReceipt(
            profile_id=profile_id,
            outcome=outcome,
            message=describe_outcome(
                outcome,
                profile.display_name,
                remaining=remaining,
                fee=fee,
                free_limit=self.controller.quota.free_requests_limit,
            ),
            fee_due_usd=fee if outcome is MatchOutcome.CONFIRMED_PAID else 0.0,
            remaining_free=remaining,
        )

    def set_tier(self, tier: Tier) -> None:
        self.controller.set_tier(tier)

    def reset_quota(self) -> None:
        self.controller.reset_quota()

    def observe_scroll(self, signal: ScrollSignal) -> bool:
        """Feed one scroll signal to the engagement trigger.

        Raises:
            UnevaluableSignal: If the signal lacks a page height in "fraction" mode
        """
        return self.trigger.evaluate(signal)

    def render(
        self,
        profiles: Sequence[DisclosedProfile],
        console: Optional[Console] = None,
    ) -> None:
        """Print disclosed profiles as a table."""
        console = console or Console()
        table = Table(title=f"{len(profiles)} researchers")
        table.add_column("")
        table.add_column("Name")
        table.add_column("Level")
        table.add_column("Specialty")
        table.add_column("Affiliation")
        table.add_column("Region")
        table.add_column("Pubs", justify="right")
        table.add_column("Status")

        for view in profiles:
            name = view.visible_name + (" ✓" if view.verified else "")
            level = f"{view.level} • {view.year}" if view.year else view.level
            table.add_row(
                initials(view.display_name),
                name,
                level,
                view.specialty,
                view.visible_affiliation,
                view.region,
                str(view.publication_count),
                "Matched" if view.is_matched else "Locked",
            )

        console.print(table)
