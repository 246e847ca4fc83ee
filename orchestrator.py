"""Main orchestrator for the FieldOps voice console."""

import logging
from typing import List, Optional

from config.settings import Settings

# Telemetry and memory
from telemetry.simulator import RefreshResult, TelemetrySimulator
from memory.models import Channel, ConversationTurn, agent_turn, user_turn
from memory.persistence import SnapshotStore, SQLiteSnapshotStore
from memory.store import MemoryStore

# LLM components
from llm.factory import create_llm_client
from llm.base_client import BaseLLMClient

# Agents
from agents.context_assembler import ContextAssembler
from agents.reply_agent import ReplyAgent

# Audio
from audio.devices import AudioDevice
from audio.capture import open_microphone
from audio.playback import PlaybackManager

# Services
from services.demo import DemoReplyService
from services.errors import FieldOpsError
from services.reply_service import LiveReplyService, ReplyService
from services.synthesis import SpeechSynthesizer
from services.transcription import TranscriptionService
from services.voice_lab import VoiceLab

from pipeline.recording_controller import RecordingController
from schemas.context import DeviceReport, OpsStatus
from schemas.responses import ReplyPayload
from schemas.telemetry import OpsMode, Route, TelemetryState

logger = logging.getLogger(__name__)

QUICK_COMMANDS = ["Transcend", "Omniscient", "Reality", "Divine"]

COMMS_CHIPS = [
    "Autopilot sweep: report anomalies and heat signatures.",
    "Hold patrol loop and confirm perimeter status.",
    "Cycle the block and return a concise mission update.",
]

COMMS_ONLINE = "Comms online. Awaiting mission directives."
SUBMIT_ACK = "Received. Executing and will advise."
CHIP_ACK = "On it. Cycling tasking and reporting back."
DEFAULT_TRANSCRIPT = '"Sweep the alley. Lock target. Hold altitude."'


class FieldOpsOrchestrator:
    """Wires settings, services and pipeline components for one console session."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        snapshots: Optional[SnapshotStore] = None,
        audio_device: Optional[AudioDevice] = None,
        simulator: Optional[TelemetrySimulator] = None,
        reply_service: Optional[ReplyService] = None,
        transcriber=None
    ):
        """
        Initialize orchestrator.

        Args:
            settings: Application settings
            snapshots: Snapshot persistence (default: SQLite at settings.db_path)
            audio_device: Sound device adapter
            simulator: Telemetry simulator
            reply_service: Reply service (default: built from settings)
            transcriber: Transcription client (default: built from settings)
        """
        self.settings = settings or Settings()
        self.ops = OpsStatus()
        self.simulator = simulator or TelemetrySimulator()
        self.comms_log: List[ConversationTurn] = [agent_turn(COMMS_ONLINE, Channel.COMMS)]

        self.snapshots = snapshots
        self._init_memory()

        self.llm_client: Optional[BaseLLMClient] = None
        self.reply_service = reply_service or self._init_reply_service()
        self.transcriber = transcriber or TranscriptionService(
            api_key=self.settings.groq_api_key,
            model=self.settings.stt_model,
            base_url=self.settings.groq_base_url,
            timeout=self.settings.request_timeout
        )

        self.audio_device = audio_device or AudioDevice(
            sample_rate=self.settings.sample_rate,
            channels=self.settings.channels
        )
        self._init_pipeline()

        self.voice_lab = VoiceLab(
            self.snapshots,
            api_key=self.settings.elevenlabs_api_key,
            base_url=self.settings.elevenlabs_base_url,
            timeout=self.settings.request_timeout
        )

    def _init_memory(self):
        """Initialize snapshot persistence and load conversation memory."""
        if self.snapshots is None:
            self.snapshots = SQLiteSnapshotStore(db_path=self.settings.db_path)
            logger.info(f"Snapshots stored in {self.settings.db_path}")

        self.memory = MemoryStore(
            self.snapshots,
            key=self.settings.memory_key,
            capacity=self.settings.memory_capacity
        )
        self.memory.load()

    def _init_llm_client(self):
        """Initialize LLM client based on settings."""
        self.llm_client = create_llm_client(
            provider=self.settings.llm_provider,
            api_key=self.settings.get_llm_api_key(),
            model=self.settings.llm_model,
            timeout=self.settings.request_timeout
        )
        logger.info(
            f"LLM client initialized: {self.llm_client.describe()}"
        )

    def _init_reply_service(self) -> ReplyService:
        """Live reply service, or the canned one in demo mode."""
        if self.settings.demo_mode:
            return DemoReplyService()

        self._init_llm_client()
        synthesizer = SpeechSynthesizer(
            api_key=self.settings.elevenlabs_api_key,
            voice_id=self.settings.elevenlabs_voice_id,
            model_id=self.settings.elevenlabs_model,
            base_url=self.settings.elevenlabs_base_url,
            timeout=self.settings.request_timeout
        )
        return LiveReplyService(ReplyAgent(self.llm_client), synthesizer)

    def _init_pipeline(self):
        """Initialize context assembly, playback and the recording controller."""
        self.assembler = ContextAssembler(
            self.simulator,
            self.memory,
            history_window=self.settings.history_window
        )
        self.playback = PlaybackManager(
            self.audio_device,
            alert_frequency=self.settings.alert_frequency,
            alert_duration=self.settings.alert_duration,
            alarm_frequency=self.settings.alarm_frequency,
            siren_frequencies=(self.settings.siren_low_frequency, self.settings.siren_high_frequency),
            siren_interval=self.settings.siren_interval,
            tone_volume=self.settings.tone_volume
        )
        self.controller = RecordingController(
            microphone_factory=lambda: open_microphone(self.audio_device),
            transcriber=self.transcriber,
            assembler=self.assembler,
            reply_service=self.reply_service,
            memory=self.memory,
            playback=self.playback,
            ops=self.ops
        )
        self.controller.set_transcript(DEFAULT_TRANSCRIPT)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def telemetry(self) -> TelemetryState:
        return self.simulator.state

    @property
    def live_transcript(self) -> str:
        return self.controller.transcript

    # ------------------------------------------------------------------
    # Text comms paths
    # ------------------------------------------------------------------

    def _append_comms(self, turn: ConversationTurn) -> ConversationTurn:
        self.comms_log.append(turn)
        self.memory.append(turn)
        return turn

    def _acknowledge(self, text: str, ack: str):
        self._append_comms(user_turn(text, Channel.COMMS))
        self._append_comms(agent_turn(ack, Channel.COMMS))
        self.controller.set_transcript(f'"{ack}"')

    def submit_text(self, text: str) -> bool:
        """
        Free-text comms submit.

        Returns:
            False if the text was blank and nothing was recorded
        """
        trimmed = (text or "").strip()
        if not trimmed:
            return False
        self._acknowledge(trimmed, SUBMIT_ACK)
        return True

    def send_comms_chip(self, text: str):
        """One of the canned comms prompts."""
        self._acknowledge(text, CHIP_ACK)

    def quick_command(self, command: str):
        """
        Issue a quick command.

        Raises:
            ValueError: Unknown command
        """
        if command not in QUICK_COMMANDS:
            raise ValueError(f"Unknown quick command: {command}")
        self._acknowledge(command, f"{command} acknowledged. Executing now.")

    # ------------------------------------------------------------------
    # Telemetry and ops status
    # ------------------------------------------------------------------

    def refresh_telemetry(self) -> RefreshResult:
        """Advance the simulator one step and record any emergency announcement."""
        result = self.simulator.refresh()
        if result.announcement is not None:
            self._append_comms(result.announcement)
        logger.debug(
            f"Telemetry refreshed: battery={result.state.battery_percent}% "
            f"reserve={result.state.reserve_percent}% distance={result.state.distance_meters}m"
        )
        return result

    def set_ops_mode(self, mode) -> OpsMode:
        self.ops.ops_mode = OpsMode(mode)
        logger.info(f"Ops mode set to {self.ops.ops_mode.value}")
        return self.ops.ops_mode

    def set_route(self, route) -> Route:
        self.ops.route = Route(route)
        logger.info(f"Route set to {self.ops.route.value}")
        return self.ops.route

    def report_device(
        self,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
        altitude: Optional[float] = None,
        battery: Optional[int] = None
    ) -> DeviceReport:
        """Record the operator device's own position/battery reading."""
        self.ops.device = DeviceReport(lat=lat, lng=lng, altitude=altitude, battery=battery)
        return self.ops.device

    # ------------------------------------------------------------------
    # Voice
    # ------------------------------------------------------------------

    def respond(self, transcript: str) -> ReplyPayload:
        """
        One composed reply for a typed transcript (no microphone).

        The user and agent turns are recorded in memory as voice turns.

        A failure is shown as the live transcript before it is raised.

        Raises:
            ServiceError: Reply generation or synthesis failed
        """
        self.memory.append(user_turn(transcript))
        request = self.assembler.build_request(
            transcript,
            ops_mode=self.ops.ops_mode,
            route=self.ops.route.value,
            device=self.ops.device
        )
        try:
            payload = self.reply_service.respond(request)
        except FieldOpsError as e:
            self.controller.set_transcript(str(e))
            raise
        self.memory.append(agent_turn(payload.reply))
        self.controller.set_transcript(payload.reply)
        return payload

    def respond_to_audio(self, audio: bytes, filename: str = "speech.wav") -> ReplyPayload:
        """
        Transcribe a recorded clip and reply to it.

        A failed transcription is shown as the live transcript and nothing
        is added to memory.

        Raises:
            TranscriptionError: No usable transcript
            ServiceError: Reply generation or synthesis failed
        """
        try:
            result = self.transcriber.transcribe(audio, filename=filename)
        except FieldOpsError as e:
            self.controller.set_transcript(str(e))
            raise
        return self.respond(result.text)

    def stop_alerts(self):
        """Silence any active alert tone."""
        self.playback.stop()

    def close(self):
        """Release audio resources."""
        self.playback.close()
        if self.controller.session is not None:
            self.controller.session.release_microphone()
