"""Tests for speech and tone playback ownership."""

import asyncio

import numpy as np
import pytest
from audio.playback import PlaybackManager, SpeechClip
from audio.tones import ToneGenerator, sine_wave
from schemas.responses import SfxKind
from services.errors import PlaybackError
from fakes import FakeAudioDevice, wav_bytes


class TestToneGenerator:
    """Test tone rendering."""

    def setup_method(self):
        """Set up test fixtures."""
        self.device = FakeAudioDevice()

    def test_alert_stops_by_itself(self):
        """Test an alert renders a fixed number of frames."""
        tone = ToneGenerator(SfxKind.ALERT, self.device, (880.0,), sample_rate=22050, duration=0.25)

        total = 0
        while True:
            block = tone.render(1024)
            total += len(block)
            if len(block) < 1024:
                break

        assert total == int(0.25 * 22050)

    def test_siren_alternates(self):
        """Test the siren switches frequency every interval."""
        tone = ToneGenerator(SfxKind.SIREN, self.device, (600.0, 900.0), sample_rate=1000, interval=0.5)

        track = tone._frequency_track(1500)

        assert set(track[:500]) == {600.0}
        assert set(track[500:1000]) == {900.0}
        assert set(track[1000:1500]) == {600.0}

    def test_alarm_is_continuous(self):
        """Test an alarm keeps producing full blocks."""
        tone = ToneGenerator(SfxKind.ALARM, self.device, (660.0,))
        for _ in range(100):
            assert len(tone.render(512)) == 512

    def test_volume(self):
        """Test samples stay inside the configured amplitude."""
        tone = ToneGenerator(SfxKind.ALARM, self.device, (660.0,), volume=0.25)
        assert np.max(np.abs(tone.render(4096))) <= 0.25 + 1e-6

    def test_no_tone_for_none(self):
        """Test sfx none has no generator."""
        with pytest.raises(ValueError):
            ToneGenerator(SfxKind.NONE, self.device, (440.0,))


class TestPlaybackManager:
    """Test single ownership of clips and tones."""

    def setup_method(self):
        """Set up test fixtures."""
        self.device = FakeAudioDevice()
        self.playback = PlaybackManager(self.device)

    def test_alarm_then_siren_leaves_one_tone(self):
        """Test starting a tone replaces the previous one."""
        alarm = self.playback.play_sfx(SfxKind.ALARM)
        siren = self.playback.play_sfx(SfxKind.SIREN)

        assert self.playback.active_tone is siren
        assert not alarm.is_active
        assert len(self.device.open_outputs) == 1

    @pytest.mark.parametrize("kind", [SfxKind.ALARM, SfxKind.SIREN])
    def test_stop_leaves_no_tone(self, kind):
        """Test stop releases the active tone."""
        self.playback.play_sfx(kind)

        self.playback.stop()

        assert self.playback.active_tone is None
        assert self.device.open_outputs == []

    def test_stop_when_idle(self):
        """Test stop is safe with nothing active."""
        self.playback.stop()
        self.playback.stop()
        assert self.playback.active_tone is None

    def test_alert_self_stops(self):
        """Test an alert is no longer active once rendered."""
        self.playback.play_sfx(SfxKind.ALERT)
        assert self.playback.active_tone is None

    def test_finished_alert_releases_stream(self):
        """Test the alert's output stream is closed once it ends."""
        self.playback.play_sfx(SfxKind.ALERT)

        assert self.device.open_outputs == []
        assert self.device.outputs[0].closed

    def test_alert_stream_closed_on_loop(self):
        """Test an alert finishing under a running loop closes its stream there."""
        tone = ToneGenerator(SfxKind.ALERT, self.device, (880.0,), duration=0.01)

        async def run():
            tone.start()
            await asyncio.sleep(0)

        asyncio.run(run())

        assert not tone.is_active
        assert self.device.open_outputs == []

    def test_none_leaves_current_tone(self):
        """Test sfx none does not touch a running tone."""
        alarm = self.playback.play_sfx(SfxKind.ALARM)

        assert self.playback.play_sfx(SfxKind.NONE) is None
        assert self.playback.active_tone is alarm

    def test_tone_failure_is_not_raised(self):
        """Test a tone that cannot open is skipped."""
        playback = PlaybackManager(FakeAudioDevice(fail_output=True))
        assert playback.play_sfx(SfxKind.ALARM) is None
        assert playback.active_tone is None

    def test_new_speech_releases_previous(self):
        """Test only one speech clip is held."""
        first = self.playback.play_speech(wav_bytes())
        second = self.playback.play_speech(wav_bytes())

        assert first.released
        assert self.playback.current_clip is second
        assert not second.released

    def test_speech_and_tone_are_independent(self):
        """Test speech playback leaves the tone running."""
        alarm = self.playback.play_sfx(SfxKind.ALARM)
        self.playback.play_speech(wav_bytes())

        assert self.playback.active_tone is alarm

    def test_invalid_audio(self):
        """Test undecodable bytes raise PlaybackError and keep the old clip."""
        clip = self.playback.play_speech(wav_bytes())

        with pytest.raises(PlaybackError):
            self.playback.play_speech(b"definitely not audio")
        with pytest.raises(PlaybackError):
            self.playback.play_speech(b"")

        assert self.playback.current_clip is clip

    def test_close_releases_everything(self):
        """Test teardown releases clip and tone."""
        clip = self.playback.play_speech(wav_bytes())
        self.playback.play_sfx(SfxKind.SIREN)

        self.playback.close()

        assert clip.released
        assert self.playback.current_clip is None
        assert self.playback.active_tone is None
        assert all(stream.closed for stream in self.device.outputs)


class TestSpeechClip:
    """Test clip completion."""

    def test_wait_returns_after_playback(self):
        """Test wait() completes once the source is drained."""
        device = FakeAudioDevice()

        async def run():
            clip = SpeechClip.decode(device, wav_bytes(duration=0.2))
            clip.start()
            await asyncio.wait_for(clip.wait(), timeout=1)
            return clip

        clip = asyncio.run(run())
        assert clip.finished
        assert clip.duration == pytest.approx(0.2, abs=0.01)

    def test_wait_returns_after_release(self):
        """Test releasing a long clip unblocks waiters."""
        device = FakeAudioDevice(max_blocks=1)

        async def run():
            samples = sine_wave(440.0, 2.0).reshape(-1, 1)
            clip = SpeechClip(device, samples, 16000)
            clip.start()
            assert not clip.finished
            asyncio.get_running_loop().call_later(0.01, clip.release)
            await asyncio.wait_for(clip.wait(), timeout=1)
            return clip

        clip = asyncio.run(run())
        assert clip.released
