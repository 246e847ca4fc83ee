"""Tests for the composed and demo reply services."""

import io
from unittest.mock import Mock

import pytest
import soundfile as sf
from schemas.context import ReplyRequest, RequestContext
from schemas.responses import AgentReply, ParsedReply, ParsePath, SfxKind, SynthesizedAudio
from schemas.telemetry import OpsMode, TelemetryState
from services.demo import SAMPLE_REPLY, DemoReplyService, make_beep
from services.reply_service import LiveReplyService


class TestLiveReplyService:
    """Test generation chained into synthesis."""

    def setup_method(self):
        """Set up test fixtures."""
        self.agent = Mock()
        self.agent.generate.return_value = ParsedReply(
            reply=AgentReply(reply_text="Target tagged.", sfx=SfxKind.ALERT),
            path=ParsePath.STRICT
        )
        self.synthesizer = Mock()
        self.synthesizer.synthesize.return_value = SynthesizedAudio.from_bytes(b"mp3", media_type="audio/mpeg")
        self.service = LiveReplyService(self.agent, self.synthesizer)

    def test_respond(self):
        """Test the composed payload."""
        payload = self.service.respond(ReplyRequest(transcript="tag it"))

        assert payload.reply == "Target tagged."
        assert payload.sfx == SfxKind.ALERT
        assert payload.audio_base64 == SynthesizedAudio.from_bytes(b"mp3").audio_base64
        assert payload.media_type == "audio/mpeg"
        self.synthesizer.synthesize.assert_called_once_with("Target tagged.")

    def test_generation_failure_skips_synthesis(self):
        """Test synthesis is not attempted when generation raises."""
        self.agent.generate.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            self.service.respond(ReplyRequest(transcript="tag it"))

        self.synthesizer.synthesize.assert_not_called()


class TestDemoReplyService:
    """Test the offline sample reply."""

    def setup_method(self):
        """Set up test fixtures."""
        self.service = DemoReplyService()

    def test_sample_reply_without_context(self):
        """Test the canned reply text."""
        payload = self.service.respond(ReplyRequest(transcript="anything"))

        assert payload.reply == SAMPLE_REPLY
        assert payload.sfx == SfxKind.NONE
        assert payload.media_type == "audio/wav"

    def test_sample_reply_gets_status_line(self):
        """Test the status line is appended like a live reply."""
        context = RequestContext(ops_mode=OpsMode.AUTOPILOT, telemetry=TelemetryState())
        parsed = self.service.generate_reply(ReplyRequest(transcript="status", context=context))

        assert parsed.reply.reply_text.startswith(SAMPLE_REPLY + "\nStatus - Batt 78%")

    def test_beep(self):
        """Test the beep is a quarter-second 16 kHz mono WAV."""
        samples, sample_rate = sf.read(io.BytesIO(make_beep()))

        assert sample_rate == 16000
        assert len(samples) == 4000
        assert samples.ndim == 1
