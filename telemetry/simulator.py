"""Simulated vehicle telemetry."""

import logging
import random
from typing import Optional

from pydantic import BaseModel

from memory.models import Channel, ConversationTurn, agent_turn
from schemas.telemetry import TelemetryState

logger = logging.getLogger(__name__)

EMERGENCY_PACK_MESSAGE = "Emergency pack activated to reach base safely."


def clamp(value, low, high):
    return max(low, min(high, value))


class RefreshResult(BaseModel):
    """Outcome of one telemetry refresh."""
    state: TelemetryState
    drain: int
    boost: int = 0
    announcement: Optional[ConversationTurn] = None

    @property
    def emergency_fired(self) -> bool:
        return self.boost > 0


class TelemetrySimulator:
    """
    Single owner of the simulated TelemetryState.

    Each refresh drains the main battery, may draw once from the emergency
    reserve, and jitters distance, position and heading.
    """

    EMERGENCY_THRESHOLD = 5
    MAX_BOOST = 25
    MIN_DRAIN = 1
    MAX_DRAIN = 3
    DISTANCE_MIN = 30
    DISTANCE_MAX = 500
    DISTANCE_STEP = 10
    UPTIME_STEP = 5
    POSITION_JITTER = 0.0012
    HEADING_STEP = 15

    def __init__(
        self,
        initial: Optional[TelemetryState] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize simulator.

        Args:
            initial: Starting state (defaults to the stock demo values)
            rng: Random source; pass a seeded instance for reproducible runs
        """
        self._state = initial.model_copy() if initial else TelemetryState()
        self.rng = rng or random.Random()

    @property
    def state(self) -> TelemetryState:
        """Read-only copy of the current state."""
        return self._state.model_copy()

    def refresh(self) -> RefreshResult:
        """Advance the simulation by one step."""
        prev = self._state

        drain = self.rng.randint(self.MIN_DRAIN, self.MAX_DRAIN)
        battery = clamp(prev.battery_percent - drain, 0, 100)
        reserve = prev.reserve_percent
        boost = 0
        announcement = None

        # Checked once per call; the boosted battery is not re-evaluated.
        if battery <= self.EMERGENCY_THRESHOLD and reserve > 0:
            boost = min(reserve, self.MAX_BOOST)
            battery = clamp(battery + boost, 0, 100)
            reserve = max(reserve - boost, 0)
            announcement = agent_turn(EMERGENCY_PACK_MESSAGE, channel=Channel.COMMS)
            logger.warning(f"Emergency pack engaged: +{boost}% (reserve now {reserve}%)")

        distance = clamp(
            prev.distance_meters + self.rng.randint(-self.DISTANCE_STEP, self.DISTANCE_STEP),
            self.DISTANCE_MIN,
            self.DISTANCE_MAX
        )
        lat = prev.lat + self.rng.uniform(-self.POSITION_JITTER, self.POSITION_JITTER)
        lng = prev.lng + self.rng.uniform(-self.POSITION_JITTER, self.POSITION_JITTER)
        heading = (prev.heading_degrees + self.rng.uniform(-self.HEADING_STEP, self.HEADING_STEP)) % 360.0
        if heading >= 360.0:
            heading = 0.0

        self._state = TelemetryState(
            battery_percent=battery,
            reserve_percent=reserve,
            distance_meters=distance,
            uptime_minutes=prev.uptime_minutes + self.UPTIME_STEP,
            lat=lat,
            lng=lng,
            heading_degrees=heading,
        )
        logger.debug(
            f"Telemetry refreshed: battery={battery}% reserve={reserve}% "
            f"distance={distance}m heading={heading:.0f}"
        )

        return RefreshResult(
            state=self.state,
            drain=drain,
            boost=boost,
            announcement=announcement
        )
