"""Tests for the telemetry simulator."""

import random

import pytest
from memory.models import Channel, Speaker
from schemas.telemetry import TelemetryState
from telemetry.simulator import EMERGENCY_PACK_MESSAGE, TelemetrySimulator, clamp


class FixedDrainRandom(random.Random):
    """Random source whose battery drain is always ``drain``."""

    def __init__(self, drain, seed=7):
        super().__init__(seed)
        self.drain = drain

    def randint(self, a, b):
        if (a, b) == (TelemetrySimulator.MIN_DRAIN, TelemetrySimulator.MAX_DRAIN):
            return self.drain
        return super().randint(a, b)


class TestTelemetrySimulator:
    """Test telemetry refresh rules."""

    def setup_method(self):
        """Set up test fixtures."""
        self.simulator = TelemetrySimulator(rng=random.Random(42))

    def test_initial_state(self):
        """Test stock starting values."""
        state = self.simulator.state
        assert state.battery_percent == 78
        assert state.reserve_percent == 20
        assert state.distance_meters == 120
        assert state.uptime_minutes == 42

    def test_state_is_a_copy(self):
        """Test callers cannot mutate the owned state."""
        state = self.simulator.state
        state.battery_percent = 1
        assert self.simulator.state.battery_percent == 78

    def test_refresh_drains_and_ages(self):
        """Test a normal refresh step."""
        result = self.simulator.refresh()

        assert 1 <= result.drain <= 3
        assert result.state.battery_percent == 78 - result.drain
        assert result.state.uptime_minutes == 47
        assert abs(result.state.distance_meters - 120) <= 10
        assert abs(result.state.lat - 34.0522) <= TelemetrySimulator.POSITION_JITTER
        assert abs(result.state.lng - (-118.2437)) <= TelemetrySimulator.POSITION_JITTER
        assert result.announcement is None
        assert not result.emergency_fired

    def test_invariants_over_many_refreshes(self):
        """Test bounds hold and reserve only drops when the pack fires."""
        for seed in range(5):
            simulator = TelemetrySimulator(rng=random.Random(seed))
            previous = simulator.state
            for _ in range(200):
                result = simulator.refresh()
                state = result.state
                assert 0 <= state.battery_percent <= 100
                assert 0 <= state.reserve_percent <= 100
                assert 30 <= state.distance_meters <= 500
                assert 0 <= state.heading_degrees < 360
                if result.emergency_fired:
                    assert state.reserve_percent == previous.reserve_percent - result.boost
                else:
                    assert state.reserve_percent == previous.reserve_percent
                previous = state

    def test_emergency_pack_fires(self):
        """Test battery=4, reserve=20 boosts from the reserve."""
        simulator = TelemetrySimulator(
            initial=TelemetryState(battery_percent=4, reserve_percent=20),
            rng=FixedDrainRandom(drain=2)
        )

        result = simulator.refresh()

        assert result.emergency_fired
        assert result.boost == 20
        assert result.state.battery_percent == 22
        assert result.state.battery_percent > 4
        assert result.state.reserve_percent == 0

        turn = result.announcement
        assert turn.speaker == Speaker.AGENT
        assert turn.channel == Channel.COMMS
        assert turn.text == EMERGENCY_PACK_MESSAGE

    def test_emergency_boost_capped_at_25(self):
        """Test the boost never exceeds 25 points."""
        simulator = TelemetrySimulator(
            initial=TelemetryState(battery_percent=3, reserve_percent=60),
            rng=FixedDrainRandom(drain=3)
        )

        result = simulator.refresh()

        assert result.boost == 25
        assert result.state.battery_percent == 25
        assert result.state.reserve_percent == 35

    def test_emergency_checked_once_per_refresh(self):
        """Test a small reserve is spent once even if battery stays low."""
        simulator = TelemetrySimulator(
            initial=TelemetryState(battery_percent=2, reserve_percent=1),
            rng=FixedDrainRandom(drain=2)
        )

        result = simulator.refresh()

        assert result.boost == 1
        assert result.state.battery_percent == 1
        assert result.state.reserve_percent == 0

    def test_no_emergency_without_reserve(self):
        """Test an empty reserve leaves the battery draining."""
        simulator = TelemetrySimulator(
            initial=TelemetryState(battery_percent=1, reserve_percent=0),
            rng=FixedDrainRandom(drain=3)
        )

        result = simulator.refresh()

        assert not result.emergency_fired
        assert result.state.battery_percent == 0

    def test_distance_clamped(self):
        """Test distance stays inside [30, 500] at the edges."""
        low = TelemetrySimulator(initial=TelemetryState(distance_meters=30), rng=random.Random(1))
        high = TelemetrySimulator(initial=TelemetryState(distance_meters=500), rng=random.Random(1))
        for _ in range(50):
            assert low.refresh().state.distance_meters >= 30
            assert high.refresh().state.distance_meters <= 500


@pytest.mark.parametrize("value,expected", [(-5, 0), (50, 50), (120, 100)])
def test_clamp(value, expected):
    assert clamp(value, 0, 100) == expected
