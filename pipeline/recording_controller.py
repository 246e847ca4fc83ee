"""Push-to-talk state machine: record, transcribe, reply, synthesize, play."""

import asyncio
import logging
from typing import Callable, List, Optional

from agents.context_assembler import ContextAssembler
from audio.capture import MicrophoneStream
from audio.playback import PlaybackManager, SpeechClip
from memory.models import agent_turn, user_turn
from memory.store import MemoryStore
from schemas.context import OpsStatus
from schemas.responses import AgentReply
from services.errors import FieldOpsError, MicrophoneUnavailableError
from services.reply_service import ReplyService
from .states import ControllerEvent, PipelineState, next_state

logger = logging.getLogger(__name__)

MIC_UNAVAILABLE_MESSAGE = "Mic unavailable. Check permissions."
TRANSCRIBING_MESSAGE = "Transcribing..."


class RecordingSession:
    """Resources held between "start talking" and the end of playback."""

    def __init__(self, microphone: Optional[MicrophoneStream] = None):
        self.microphone = microphone
        self.transcript: Optional[str] = None
        self.reply: Optional[AgentReply] = None
        self.clip: Optional[SpeechClip] = None

    def release_microphone(self):
        if self.microphone is not None:
            self.microphone.discard()
            self.microphone = None


class RecordingController:
    """
    Drives one voice exchange at a time through the pipeline states.

    All state changes go through dispatch() and the declared transition
    table, so a second start while a session is open and a stop with no
    session are both ignored. Blocking work (microphone, service calls)
    runs in worker threads and is awaited in sequence.
    """

    def __init__(
        self,
        microphone_factory: Callable[[], MicrophoneStream],
        transcriber,
        assembler: ContextAssembler,
        reply_service: ReplyService,
        memory: MemoryStore,
        playback: PlaybackManager,
        ops: Optional[OpsStatus] = None
    ):
        """
        Initialize controller.

        Args:
            microphone_factory: Returns an opened microphone; raises
                MicrophoneUnavailableError when none can be opened
            transcriber: Object with ``transcribe(audio: bytes)`` returning
                a TranscriptionResult
            assembler: Builds the reply request
            reply_service: Reply generation and synthesis
            memory: Conversation memory
            playback: Speech and tone playback
            ops: Shared ops mode/route/device status
        """
        self.microphone_factory = microphone_factory
        self.transcriber = transcriber
        self.assembler = assembler
        self.reply_service = reply_service
        self.memory = memory
        self.playback = playback
        self.ops = ops or OpsStatus()

        self.state = PipelineState.IDLE
        self.session: Optional[RecordingSession] = None
        self.transcript = ""
        self.last_error: Optional[str] = None

        self._state_listeners: List[Callable] = []
        self._transcript_listeners: List[Callable] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def is_busy(self) -> bool:
        return self.session is not None

    def add_state_listener(self, callback: Callable[[PipelineState, PipelineState], None]):
        """Register ``callback(old_state, new_state)``."""
        self._state_listeners.append(callback)

    def add_transcript_listener(self, callback: Callable[[str], None]):
        """Register ``callback(text)`` for live transcript changes."""
        self._transcript_listeners.append(callback)

    async def start(self) -> bool:
        """Start recording. Returns False if a session is already open."""
        return await self.dispatch(ControllerEvent.START)

    async def stop(self) -> bool:
        """
        Stop recording and run the rest of the exchange.

        While playing, stop interrupts playback instead. Returns False when
        there is nothing to stop.
        """
        return await self.dispatch(ControllerEvent.STOP)

    async def dispatch(self, event: ControllerEvent, message: Optional[str] = None) -> bool:
        """
        Apply ``event`` to the current state and run the entry action.

        Args:
            event: Controller event
            message: Error text carried by FAILED

        Returns:
            True if the transition was declared and taken
        """
        target = next_state(self.state, event)
        if target is None:
            logger.warning(f"Ignoring {event.value} in state {self.state.value}")
            return False

        previous = self.state
        self.state = target
        logger.info(f"State transition: {previous.value} -> {target.value} ({event.value})")
        for callback in self._state_listeners:
            callback(previous, target)

        await self._enter(target, event, message)
        return True

    # ------------------------------------------------------------------
    # Entry actions
    # ------------------------------------------------------------------

    async def _enter(self, state: PipelineState, event: ControllerEvent, message: Optional[str]):
        if state == PipelineState.RECORDING:
            await self._on_recording()
        elif state == PipelineState.TRANSCRIBING:
            await self._on_transcribing()
        elif state == PipelineState.GENERATING:
            await self._on_generating()
        elif state == PipelineState.SYNTHESIZING:
            await self._on_synthesizing()
        elif state == PipelineState.PLAYING:
            await self._on_playing()
        elif state == PipelineState.ERROR:
            await self._on_error(message or "Unknown error")
        elif state == PipelineState.IDLE:
            self._on_idle()

    async def _on_recording(self):
        session = RecordingSession()
        self.session = session
        self.last_error = None
        try:
            microphone = await asyncio.to_thread(self.microphone_factory)
        except MicrophoneUnavailableError:
            await self.dispatch(ControllerEvent.FAILED, MIC_UNAVAILABLE_MESSAGE)
            return
        except Exception as e:
            logger.exception(f"Unexpected microphone failure: {e}")
            await self.dispatch(ControllerEvent.FAILED, MIC_UNAVAILABLE_MESSAGE)
            return

        if self.session is not session or self.state != PipelineState.RECORDING:
            # Stopped before the microphone came up
            microphone.discard()
            return
        session.microphone = microphone

    async def _on_transcribing(self):
        session = self.session
        self.set_transcript(TRANSCRIBING_MESSAGE)
        self.playback.stop_speech()

        microphone, session.microphone = session.microphone, None
        try:
            audio = await asyncio.to_thread(microphone.stop) if microphone else b""
            result = await asyncio.to_thread(self.transcriber.transcribe, audio)
        except FieldOpsError as e:
            await self.dispatch(ControllerEvent.FAILED, str(e))
            return
        except Exception as e:
            logger.exception(f"Transcription step failed: {e}")
            await self.dispatch(ControllerEvent.FAILED, str(e) or "Transcription error")
            return

        if not result or not result.text.strip():
            await self.dispatch(ControllerEvent.FAILED, "Transcription failed")
            return

        session.transcript = result.text
        self.set_transcript(result.text)
        self.memory.append(user_turn(result.text))
        await self.dispatch(ControllerEvent.TRANSCRIBED)

    async def _on_generating(self):
        session = self.session
        request = self.assembler.build_request(
            session.transcript,
            ops_mode=self.ops.ops_mode,
            route=self.ops.route.value,
            device=self.ops.device
        )
        try:
            parsed = await asyncio.to_thread(self.reply_service.generate_reply, request)
        except FieldOpsError as e:
            await self.dispatch(ControllerEvent.FAILED, str(e))
            return
        except Exception as e:
            logger.exception(f"Reply step failed: {e}")
            await self.dispatch(ControllerEvent.FAILED, str(e) or "Reply generation failed")
            return

        session.reply = parsed.reply
        await self.dispatch(ControllerEvent.REPLIED)

    async def _on_synthesizing(self):
        session = self.session
        reply = session.reply
        self.set_transcript(reply.reply_text)
        self.memory.append(agent_turn(reply.reply_text))
        self.playback.play_sfx(reply.sfx)

        try:
            audio = await asyncio.to_thread(self.reply_service.synthesize, reply.reply_text)
            session.clip = self.playback.play_speech(audio.decode())
        except FieldOpsError as e:
            await self.dispatch(ControllerEvent.FAILED, str(e))
            return
        except Exception as e:
            logger.exception(f"Synthesis step failed: {e}")
            await self.dispatch(ControllerEvent.FAILED, str(e) or "Synthesis failed")
            return

        await self.dispatch(ControllerEvent.SYNTHESIZED)

    async def _on_playing(self):
        session = self.session
        await session.clip.wait()
        if self.session is session and self.state == PipelineState.PLAYING:
            await self.dispatch(ControllerEvent.PLAYBACK_ENDED)

    async def _on_error(self, message: str):
        logger.warning(f"Voice exchange failed: {message}")
        self.last_error = message
        self.set_transcript(message)
        if self.session is not None:
            self.session.release_microphone()
        self.session = None
        await self.dispatch(ControllerEvent.RESET)

    def _on_idle(self):
        session, self.session = self.session, None
        if session is None:
            return
        session.release_microphone()
        self.playback.stop_speech()

    def set_transcript(self, text: str):
        self.transcript = text
        for callback in self._transcript_listeners:
            callback(text)
