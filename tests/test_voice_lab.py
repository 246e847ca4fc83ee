"""Tests for the Voice Lab."""

import json
from unittest.mock import Mock, patch

import pytest
from memory.persistence import InMemorySnapshotStore
from services.errors import MissingCredentialsError, VoiceLabError
from services.voice_lab import NEUTRAL_TRAITS_MESSAGE, PRESETS, VoiceLab, get_preset, validate_design


DESCRIPTION = "Warm, confident baritone with relaxed cadence and clear diction."
TEXT = "x" * 150


def ok_response(payload):
    response = Mock()
    response.status_code = 200
    response.json.return_value = payload
    return response


class TestDesignValidation:
    """Test request validation before any network call."""

    def test_valid(self):
        validate_design(DESCRIPTION, TEXT)
        validate_design(DESCRIPTION)

    @pytest.mark.parametrize("description", ["", "   too short          ", "x" * 1001])
    def test_description_length(self, description):
        with pytest.raises(ValueError, match="voice_description"):
            validate_design(description)

    def test_blocked_terms(self):
        with pytest.raises(ValueError) as exc_info:
            validate_design("A deep Gangster voice with slow pace and heavy energy.")
        assert str(exc_info.value) == NEUTRAL_TRAITS_MESSAGE

    @pytest.mark.parametrize("text", ["x" * 99, "x" * 1001])
    def test_text_length(self, text):
        with pytest.raises(ValueError, match="text must be between 100 and 1000"):
            validate_design(DESCRIPTION, text)


class TestVoiceLab:
    """Test design, create and history."""

    def setup_method(self):
        """Set up test fixtures."""
        self.snapshots = InMemorySnapshotStore()
        self.lab = VoiceLab(self.snapshots, api_key="xi-test")

    @patch('requests.post')
    def test_design(self, mock_post):
        """Test previews are returned."""
        mock_post.return_value = ok_response({
            "previews": [
                {"generated_voice_id": "gen1", "audio_base_64": "AAAA", "media_type": "audio/mpeg"},
                {"generated_voice_id": "gen2", "audio_base_64": "BBBB"},
            ]
        })

        previews = self.lab.design(DESCRIPTION, TEXT)

        assert [p.generated_voice_id for p in previews] == ["gen1", "gen2"]
        args, kwargs = mock_post.call_args
        assert args[0] == "https://api.elevenlabs.io/v1/text-to-voice/design"
        assert kwargs["json"] == {"voice_description": DESCRIPTION, "model_id": "eleven_ttv_v3", "text": TEXT}

    @patch('requests.post')
    def test_design_generation_controls(self, mock_post):
        """Test optional controls are sent as query parameters."""
        mock_post.return_value = ok_response({"previews": [{"generated_voice_id": "gen1", "audio_base_64": "AAAA"}]})

        self.lab.design(
            DESCRIPTION,
            output_format="mp3_22050_32",
            auto_generate_text=True,
            seed=7,
            guidance_scale=5.0,
            loudness=0.5,
            quality=0.9,
            stream_previews=False
        )

        assert mock_post.call_args.kwargs["params"] == {
            "output_format": "mp3_22050_32",
            "auto_generate_text": "true",
            "seed": "7",
            "guidance_scale": "5.0",
            "loudness": "0.5",
            "quality": "0.9",
            "stream_previews": "false",
        }

    @patch('requests.post')
    def test_design_without_controls_sends_no_params(self, mock_post):
        mock_post.return_value = ok_response({"previews": [{"generated_voice_id": "gen1", "audio_base_64": "AAAA"}]})

        self.lab.design(DESCRIPTION)

        assert mock_post.call_args.kwargs["params"] is None

    @patch('requests.post')
    def test_design_validation_skips_request(self, mock_post):
        """Test invalid input never reaches the API."""
        with pytest.raises(ValueError):
            self.lab.design("short")
        mock_post.assert_not_called()

    @patch('requests.post')
    def test_design_without_previews(self, mock_post):
        """Test an empty preview list is an error."""
        mock_post.return_value = ok_response({"previews": []})

        with pytest.raises(VoiceLabError, match="Failed to generate preview"):
            self.lab.design(DESCRIPTION)

    @patch('requests.post')
    def test_design_http_error(self, mock_post):
        """Test service errors carry the status code."""
        response = Mock()
        response.status_code = 422
        response.json.return_value = {"detail": "voice_description too vague"}
        mock_post.return_value = response

        with pytest.raises(VoiceLabError) as exc_info:
            self.lab.design(DESCRIPTION)

        assert exc_info.value.status_code == 422
        assert "too vague" in str(exc_info.value)

    @patch('requests.post')
    def test_create_records_history(self, mock_post):
        """Test a created voice is prepended and persisted."""
        mock_post.return_value = ok_response({"voice_id": "voice-1"})

        voice = self.lab.create("Ghettobird One", DESCRIPTION, "gen1")

        assert voice.voice_id == "voice-1"
        assert self.lab.history[0] == voice
        saved = json.loads(self.snapshots.load("voice-history"))
        assert saved[0]["voiceId"] == "voice-1"
        assert saved[0]["generatedVoiceId"] == "gen1"
        assert "createdAt" in saved[0]

    @patch('requests.post')
    def test_create_forwards_labels(self, mock_post):
        """Test labels and skipped previews reach the create call."""
        mock_post.return_value = ok_response({"voice_id": "voice-1"})

        self.lab.create(
            "Ghettobird One", DESCRIPTION, "gen1",
            labels={"use": "field-ops"},
            played_not_selected_voice_ids=["gen2", "gen3"]
        )

        sent = mock_post.call_args.kwargs["json"]
        assert sent["labels"] == {"use": "field-ops"}
        assert sent["played_not_selected_voice_ids"] == ["gen2", "gen3"]

    @patch('requests.post')
    def test_create_omits_unset_extras(self, mock_post):
        mock_post.return_value = ok_response({"voice_id": "voice-1"})

        self.lab.create("Ghettobird One", DESCRIPTION, "gen1")

        assert set(mock_post.call_args.kwargs["json"]) == {"voice_name", "voice_description", "generated_voice_id"}

    @patch('requests.post')
    def test_history_capped_newest_first(self, mock_post):
        """Test only the 10 most recent voices are kept."""
        for i in range(12):
            mock_post.return_value = ok_response({"voice_id": f"voice-{i}"})
            self.lab.create(f"Voice {i}", DESCRIPTION, f"gen{i}")

        assert len(self.lab.history) == 10
        assert self.lab.history[0].voice_id == "voice-11"
        assert self.lab.history[-1].voice_id == "voice-2"

        reloaded = VoiceLab(self.snapshots, api_key="xi-test")
        assert [v.voice_id for v in reloaded.history] == [v.voice_id for v in self.lab.history]

    @pytest.mark.parametrize("name,description,generated", [
        ("", DESCRIPTION, "gen1"),
        ("Voice", "  ", "gen1"),
        ("Voice", DESCRIPTION, ""),
    ])
    def test_create_requires_fields(self, name, description, generated):
        """Test blank fields are rejected."""
        with pytest.raises(ValueError, match="is required"):
            self.lab.create(name, description, generated)

    @patch('requests.post')
    def test_clear_history(self, mock_post):
        """Test clearing removes the snapshot."""
        mock_post.return_value = ok_response({"voice_id": "voice-1"})
        self.lab.create("Voice", DESCRIPTION, "gen1")

        self.lab.clear_history()

        assert self.lab.history == []
        assert self.snapshots.load("voice-history") is None

    def test_corrupt_history_ignored(self):
        """Test an unreadable history snapshot starts empty."""
        lab = VoiceLab(InMemorySnapshotStore({"voice-history": "{broken"}), api_key="xi-test")
        assert lab.history == []

    @patch.dict("os.environ", {}, clear=True)
    def test_missing_key(self):
        """Test a missing key is a hard error."""
        lab = VoiceLab(InMemorySnapshotStore())
        with pytest.raises(MissingCredentialsError):
            lab.design(DESCRIPTION)


def test_presets():
    """Test the preset catalog."""
    assert [p.name for p in PRESETS] == ["Warm & Confident", "Bright & Quick", "Calm Bilingual"]
    for preset in PRESETS:
        validate_design(preset.description, preset.text)
    assert get_preset("Bright & Quick").name == "Bright & Quick"
    assert get_preset("Unknown") is None
