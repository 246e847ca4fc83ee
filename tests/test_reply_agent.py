"""Tests for the LLM reply agent."""

import json
from unittest.mock import Mock

import pytest
from agents.reply_agent import ReplyAgent
from llm.base_client import BaseLLMClient, LLMResponse
from schemas.context import HistoryMessage, ReplyRequest, RequestContext
from schemas.responses import ParsePath, SfxKind
from schemas.telemetry import OpsMode, TelemetryState
from services.errors import MissingCredentialsError, ReplyGenerationError


class TestReplyAgent:
    """Test prompt assembly and reply parsing."""

    def setup_method(self):
        """Set up test fixtures."""
        self.llm = Mock(spec=BaseLLMClient)
        self.llm.get_provider_name.return_value = "groq"
        self.llm.chat.return_value = LLMResponse(content='{"reply": "Nominal ops.", "sfx": "none"}')
        self.agent = ReplyAgent(self.llm)

    def test_status_request_end_to_end(self):
        """Test the agent turn text for a status request."""
        context = RequestContext(
            ops_mode=OpsMode.AUTOPILOT,
            telemetry=TelemetryState(battery_percent=7, distance_meters=120, heading_degrees=90)
        )
        request = ReplyRequest(transcript="status", context=context)

        result = self.agent.generate(request)

        assert result.path == ParsePath.STRICT
        assert result.reply.sfx == SfxKind.NONE
        assert result.reply.reply_text == (
            "Nominal ops.\nStatus - Batt 7% | Dist 120m | Hdg 90deg | Mode Autopilot | Safe Critical"
        )

    def test_chat_called_in_json_mode(self):
        """Test the completion call parameters."""
        self.agent.generate(ReplyRequest(transcript="status"))

        kwargs = self.llm.chat.call_args.kwargs
        assert kwargs["json_mode"] is True
        assert kwargs["temperature"] == 0.4

    def test_messages_include_context_history_and_transcript(self):
        """Test message layout sent to the completion service."""
        context = RequestContext(ops_mode=OpsMode.PERCH, route="Orbit", telemetry=TelemetryState())
        request = ReplyRequest(
            transcript="report",
            context=context,
            history=[
                HistoryMessage(role="user", content="status"),
                HistoryMessage(role="assistant", content="Nominal ops."),
            ]
        )

        messages = self.agent.build_messages(request)

        assert messages[0].role == "system"
        assert "## Current context" in messages[0].content
        context_json = messages[0].content.split("## Current context\n", 1)[1]
        assert json.loads(context_json)["opsMode"] == "Perch"
        assert [(m.role, m.content) for m in messages[1:]] == [
            ("user", "status"),
            ("assistant", "Nominal ops."),
            ("user", "report"),
        ]

    def test_transcript_not_duplicated(self):
        """Test a history ending in the transcript does not repeat it."""
        request = ReplyRequest(
            transcript="status",
            history=[HistoryMessage(role="user", content="status")]
        )

        messages = self.agent.build_messages(request)

        assert [m.content for m in messages[1:]] == ["status"]

    def test_nonconforming_output_falls_back(self):
        """Test free text from the model becomes the reply."""
        self.llm.chat.return_value = LLMResponse(content="Copy, holding.")

        result = self.agent.generate(ReplyRequest(transcript="hold"))

        assert result.path == ParsePath.FALLBACK
        assert result.reply.reply_text == "Copy, holding."

    def test_service_failure_is_raised(self):
        """Test an unreachable completion service is a hard failure."""
        self.llm.chat.side_effect = ConnectionError("connection reset")

        with pytest.raises(ReplyGenerationError) as exc_info:
            self.agent.generate(ReplyRequest(transcript="status"))

        assert exc_info.value.service == "reply"

    def test_missing_credentials_propagate(self):
        """Test missing credentials are not wrapped or defaulted."""
        self.llm.chat.side_effect = MissingCredentialsError("Missing GROQ_API_KEY", service="reply")

        with pytest.raises(MissingCredentialsError):
            self.agent.generate(ReplyRequest(transcript="status"))
