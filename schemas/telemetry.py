"""Telemetry and operating-mode schemas."""

from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


class OpsMode(str, Enum):
    """Operating mode selected on the console."""
    AUTOPILOT = "Autopilot"
    PERCH = "Perch"


class Route(str, Enum):
    """Autopilot route options."""
    ORBIT = "Orbit"
    GRID_SWEEP = "Grid sweep"
    PERIMETER = "Perimeter"


class TelemetryState(BaseModel):
    """Simulated vehicle state."""

    model_config = ConfigDict(populate_by_name=True)

    battery_percent: int = Field(78, ge=0, le=100, alias="battery")
    reserve_percent: int = Field(20, ge=0, le=100, alias="reserveBattery")
    distance_meters: int = Field(120, ge=30, le=500, alias="distanceMeters")
    uptime_minutes: int = Field(42, ge=0, alias="uptimeMinutes")
    lat: float = 34.0522
    lng: float = -118.2437
    heading_degrees: float = Field(0.0, ge=0.0, lt=360.0, alias="heading")
