"""Engagement Trigger.

A debounced one-shot latch: the conversion prompt is surfaced the first time
the scroll predicate holds, and never again in the same session. The predicate
is evaluated on each delivered signal, whatever delivers it (DOM event, timer,
heartbeat).
"""

import threading
from typing import Callable, Literal, Optional

from pydantic import BaseModel, Field

from researchmatch.models.config import EngagementConfig
from researchmatch.models.match import EngagementTriggerState
from researchmatch.utils.logger import get_logger


class UnevaluableSignal(ValueError):
    """Raised when a signal lacks what the configured mode needs."""

    pass


class ScrollSignal(BaseModel):
    """Ambient viewport signal from the hosting environment.

    Attributes:
        offset: Scroll offset from the top of the page, in pixels
        viewport_height: Visible viewport height, in pixels
        page_height: Total page height, in pixels (required by "fraction" mode)
    """

    offset: float = Field(ge=0.0)
    viewport_height: float = Field(default=0.0, ge=0.0)
    page_height: Optional[float] = Field(default=None, gt=0.0)


def threshold_crossed(
    signal: ScrollSignal,
    threshold: float,
    mode: Literal["fraction", "offset"] = "fraction",
) -> bool:
    """Evaluate the scroll predicate for one signal.

    Raises:
        UnevaluableSignal: If mode is "fraction" and the signal has no page height
    """
    if mode == "offset":
        return signal.offset > threshold
    if signal.page_height is None:
        raise UnevaluableSignal(
            "page_height is required to evaluate a 'fraction' threshold"
        )
    return signal.offset + signal.viewport_height > signal.page_height * threshold


class EngagementTrigger:
    """Fires on_fire at most once per session.

    Checking and setting the latch happen under one lock, so concurrent
    evaluations cannot both fire.
    """

    def __init__(
        self,
        state: Optional[EngagementTriggerState] = None,
        config: Optional[EngagementConfig] = None,
        on_fire: Optional[Callable[[], None]] = None,
        correlation_id: Optional[str] = None,
    ):
        self.state = state if state is not None else EngagementTriggerState()
        self.config = config or EngagementConfig()
        self.on_fire = on_fire
        self._lock = threading.Lock()
        self.logger = get_logger(
            correlation_id=correlation_id,
            phase="engagement",
            component="engagement_trigger",
        )

    @property
    def has_fired(self) -> bool:
        return self.state.has_fired

    def evaluate(self, signal: ScrollSignal) -> bool:
        """Evaluate one signal.

        Returns:
            True only on the evaluation that fired the conversion prompt

        Raises:
            UnevaluableSignal: If the signal cannot be evaluated in the
                configured mode (the latch is left untouched)
        """
        with self._lock:
            if self.state.has_fired:
                return False
            try:
                crossed = threshold_crossed(
                    signal, self.config.threshold, self.config.mode
                )
            except UnevaluableSignal:
                self.logger.warning(
                    "unevaluable_scroll_signal",
                    offset=signal.offset,
                    mode=self.config.mode,
                )
                raise
            if not crossed:
                return False
            self.state.has_fired = True

        self.logger.info(
            "conversion_prompt_fired",
            offset=signal.offset,
            page_height=signal.page_height,
            mode=self.config.mode,
        )
        if self.on_fire is not None:
            self.on_fire()
        return True
