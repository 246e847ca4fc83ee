"""Telemetry simulation."""

from .simulator import TelemetrySimulator, RefreshResult, EMERGENCY_PACK_MESSAGE

__all__ = ["TelemetrySimulator", "RefreshResult", "EMERGENCY_PACK_MESSAGE"]
