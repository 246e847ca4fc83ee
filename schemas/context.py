"""Request context schemas for the reply step."""

from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

from .telemetry import OpsMode, Route, TelemetryState


class DeviceReport(BaseModel):
    """Position/battery reported by the operator's own device."""

    model_config = ConfigDict(populate_by_name=True)

    lat: Optional[float] = None
    lng: Optional[float] = None
    altitude_meters: Optional[float] = Field(None, alias="altitude")
    battery_percent: Optional[int] = Field(None, ge=0, le=100, alias="battery")


class HistoryMessage(BaseModel):
    """One prior turn as sent to the completion service."""
    role: Literal["user", "assistant"]
    content: str


class RequestContext(BaseModel):
    """Point-in-time snapshot built for one reply-generation call."""

    model_config = ConfigDict(populate_by_name=True)

    ops_mode: Optional[OpsMode] = Field(None, alias="opsMode")
    route: Optional[str] = None
    telemetry: Optional[TelemetryState] = None
    device: Optional[DeviceReport] = None

    @property
    def battery(self) -> Optional[int]:
        """Battery for display; the device reading wins when present."""
        if self.device and self.device.battery_percent is not None:
            return self.device.battery_percent
        if self.telemetry:
            return self.telemetry.battery_percent
        return None

    @property
    def distance(self) -> Optional[int]:
        return self.telemetry.distance_meters if self.telemetry else None

    @property
    def altitude(self) -> Optional[float]:
        return self.device.altitude_meters if self.device else None

    @property
    def heading(self) -> Optional[float]:
        return self.telemetry.heading_degrees if self.telemetry else None

    @property
    def position(self) -> Optional[tuple]:
        """(lat, lng) for display; the device fix wins when complete."""
        if self.device and self.device.lat is not None and self.device.lng is not None:
            return (self.device.lat, self.device.lng)
        if self.telemetry:
            return (self.telemetry.lat, self.telemetry.lng)
        return None

    def to_payload(self) -> Dict[str, Any]:
        """Wire representation (camelCase keys, unset fields dropped)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ReplyRequest(BaseModel):
    """Request body for the reply-generation service."""
    transcript: str
    context: Optional[RequestContext] = None
    history: List[HistoryMessage] = Field(default_factory=list)


class OpsStatus(BaseModel):
    """Operator-selected mode and route plus the latest device report."""
    ops_mode: OpsMode = OpsMode.AUTOPILOT
    route: Route = Route.ORBIT
    device: Optional[DeviceReport] = None
