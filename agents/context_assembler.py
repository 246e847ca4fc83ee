"""Builds the reply request from telemetry, ops settings and memory."""

import logging
from typing import List, Optional

from memory.store import MemoryStore
from schemas.context import DeviceReport, HistoryMessage, ReplyRequest, RequestContext
from schemas.telemetry import OpsMode
from telemetry.simulator import TelemetrySimulator

logger = logging.getLogger(__name__)


class ContextAssembler:
    """Assembles RequestContext and conversation history for the reply step."""

    HISTORY_WINDOW = 12

    def __init__(
        self,
        simulator: TelemetrySimulator,
        memory: MemoryStore,
        history_window: int = HISTORY_WINDOW
    ):
        """
        Initialize assembler.

        Args:
            simulator: Telemetry owner (read only here)
            memory: Conversation memory
            history_window: Maximum number of prior turns sent as history
        """
        self.simulator = simulator
        self.memory = memory
        self.history_window = history_window

    def build_context(
        self,
        ops_mode: Optional[OpsMode] = None,
        route: Optional[str] = None,
        device: Optional[DeviceReport] = None
    ) -> RequestContext:
        """Snapshot the current telemetry together with mode, route and device data."""
        return RequestContext(
            ops_mode=ops_mode,
            route=route,
            telemetry=self.simulator.state,
            device=device
        )

    def select_history(self) -> List[HistoryMessage]:
        """Up to ``history_window`` most recent turns, oldest first."""
        return [
            HistoryMessage(role=turn.role, content=turn.text)
            for turn in self.memory.recent(self.history_window)
        ]

    def build_request(
        self,
        transcript: str,
        ops_mode: Optional[OpsMode] = None,
        route: Optional[str] = None,
        device: Optional[DeviceReport] = None
    ) -> ReplyRequest:
        """
        Build the full reply-generation request.

        Args:
            transcript: What the operator said
            ops_mode: Current ops mode
            route: Current route
            device: Optional device-reported position/battery

        Returns:
            ReplyRequest with context and chronological history
        """
        context = self.build_context(ops_mode=ops_mode, route=route, device=device)
        history = self.select_history()
        logger.debug(f"Assembled context with {len(history)} history turns")
        return ReplyRequest(transcript=transcript, context=context, history=history)
