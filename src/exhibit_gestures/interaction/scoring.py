"""Timed delivery rounds: points for each entity delivered to the right zone."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..config import ScoringConfig
from ..events import Deliver, InteractionEvent, RoundOver

logger = logging.getLogger(__name__)


class DeliveryRound:
    """Score and countdown of one round, fed with the events of each tick.

    Only successful deliveries score. Once the time is up the round ends with a
    single `RoundOver` event and ignores everything until started again.
    """

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or ScoringConfig()
        self.score = 0
        self.deliveries = 0
        self.started_at: float | None = None
        self.over = False

    @property
    def is_active(self) -> bool:
        return self.started_at is not None and not self.over

    def start(self, now: float) -> None:
        self.score = 0
        self.deliveries = 0
        self.started_at = now
        self.over = False
        logger.debug("Round started at %.3f", now)

    def time_left(self, now: float) -> float:
        if self.started_at is None:
            return self.config.round_seconds
        if self.over:
            return 0.0
        return max(self.config.round_seconds - (now - self.started_at), 0.0)

    def update(self, events: Iterable[InteractionEvent], now: float) -> RoundOver | None:
        if not self.is_active:
            return None

        for event in events:
            if isinstance(event, Deliver) and event.success:
                self.score += self.config.points_per_delivery
                self.deliveries += 1

        if self.time_left(now) > 0:
            return None

        self.over = True
        logger.debug("Round over with %d points", self.score)
        return RoundOver(score=self.score, deliveries=self.deliveries)
