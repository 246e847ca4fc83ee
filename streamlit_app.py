"""FieldOps Voice Console - Streamlit dashboard."""

import os
import streamlit as st
from config.settings import Settings
from orchestrator import COMMS_CHIPS, QUICK_COMMANDS, FieldOpsOrchestrator
from schemas.responses import SynthesizedAudio
from schemas.telemetry import OpsMode, Route
from services.errors import FieldOpsError
from services.voice_lab import PRESETS, get_preset


st.set_page_config(
    page_title="GBird Field Ops",
    page_icon="🛰️",
    layout="wide"
)

# Initialize session state
if "orchestrator" not in st.session_state:
    st.session_state.orchestrator = None

if "reply_audio" not in st.session_state:
    st.session_state.reply_audio = None

if "error" not in st.session_state:
    st.session_state.error = None


def reset_session():
    """Drop the orchestrator; memory reloads from the snapshot."""
    if st.session_state.orchestrator is not None:
        st.session_state.orchestrator.close()
    st.session_state.orchestrator = None
    st.session_state.reply_audio = None
    st.session_state.error = None


def get_orchestrator(settings: Settings) -> FieldOpsOrchestrator:
    """Get or create orchestrator instance."""
    if st.session_state.orchestrator is None:
        st.session_state.orchestrator = FieldOpsOrchestrator(settings=settings)
    return st.session_state.orchestrator


# Sidebar configuration
st.sidebar.header("Configuration")

llm_provider = st.sidebar.selectbox(
    "Reply Provider",
    options=["groq", "openai", "anthropic"],
    index=0,
    help="Which LLM writes GBird's replies"
)

groq_api_key = st.sidebar.text_input(
    "Groq API Key",
    value=os.environ.get("GROQ_API_KEY", ""),
    type="password",
    help="Required for transcription and the Groq reply provider"
)

elevenlabs_api_key = st.sidebar.text_input(
    "ElevenLabs API Key",
    value=os.environ.get("ELEVENLABS_API_KEY", ""),
    type="password",
    help="Required for speech synthesis and the Voice Lab"
)

demo_mode = st.sidebar.checkbox(
    "Demo mode",
    value=False,
    help="Canned reply and beep instead of live reply services"
)

show_debug = st.sidebar.checkbox("Show debug info", value=False)

if st.sidebar.button("Restart Session", type="secondary"):
    reset_session()
    st.rerun()

settings = Settings(
    llm_provider=llm_provider,
    groq_api_key=groq_api_key if groq_api_key else None,
    elevenlabs_api_key=elevenlabs_api_key if elevenlabs_api_key else None,
    demo_mode=demo_mode,
    verbose=show_debug,
)
orchestrator = get_orchestrator(settings)


def show_reply(payload):
    audio = SynthesizedAudio(audio_base64=payload.audio_base64, media_type=payload.media_type)
    st.session_state.reply_audio = (audio.decode(), payload.media_type)
    st.session_state.error = None
    orchestrator.playback.play_sfx(payload.sfx)


# Main content
st.title("GBird Field Ops")
st.caption(f"Live transcript: {orchestrator.live_transcript}")

telemetry_col, ops_col = st.columns(2)

with telemetry_col:
    st.subheader("Telemetry")
    state = orchestrator.telemetry
    metric_cols = st.columns(4)
    metric_cols[0].metric("Battery", f"{state.battery_percent}%")
    metric_cols[1].metric("Reserve", f"{state.reserve_percent}%")
    metric_cols[2].metric("Distance", f"{state.distance_meters}m")
    metric_cols[3].metric("Uptime", f"{state.uptime_minutes}m")
    st.caption(f"Heading {state.heading_degrees:.0f}deg | {state.lat:.4f}, {state.lng:.4f}")
    if st.button("Refresh telemetry"):
        orchestrator.refresh_telemetry()
        st.rerun()

with ops_col:
    st.subheader("Ops")
    mode = st.radio(
        "Mode",
        options=[m.value for m in OpsMode],
        index=[m.value for m in OpsMode].index(orchestrator.ops.ops_mode.value),
        horizontal=True
    )
    orchestrator.set_ops_mode(mode)
    route = st.radio(
        "Route",
        options=[r.value for r in Route],
        index=[r.value for r in Route].index(orchestrator.ops.route.value),
        horizontal=True
    )
    orchestrator.set_route(route)

    command_cols = st.columns(len(QUICK_COMMANDS))
    for col, command in zip(command_cols, QUICK_COMMANDS):
        if col.button(command):
            orchestrator.quick_command(command)
            st.rerun()

st.markdown("---")

# Voice
st.subheader("Voice")
recording = st.audio_input("Hold to talk")
if recording is not None and st.button("Send voice"):
    with st.spinner("Transcribing..."):
        try:
            show_reply(orchestrator.respond_to_audio(recording.getvalue(), filename=recording.name or "speech.wav"))
        except FieldOpsError as e:
            st.session_state.error = str(e)
    st.rerun()

if prompt := st.chat_input("Type a transcript for GBird..."):
    with st.spinner("GBird is thinking..."):
        try:
            show_reply(orchestrator.respond(prompt))
        except FieldOpsError as e:
            st.session_state.error = str(e)
    st.rerun()

if st.session_state.error:
    st.error(st.session_state.error)

if st.session_state.reply_audio:
    data, media_type = st.session_state.reply_audio
    st.audio(data, format=media_type)

if st.button("Stop alerts"):
    orchestrator.stop_alerts()

st.markdown("---")

comms_col, memory_col = st.columns(2)

with comms_col:
    st.subheader("Comms")
    for turn in orchestrator.comms_log:
        st.markdown(f"**{turn.speaker.value}** `{turn.time_label}` {turn.text}")

    for chip in COMMS_CHIPS:
        if st.button(chip):
            orchestrator.send_comms_chip(chip)
            st.rerun()

    with st.form("comms", clear_on_submit=True):
        message = st.text_input("Message")
        if st.form_submit_button("Send"):
            orchestrator.submit_text(message)
            st.rerun()

with memory_col:
    st.subheader("Memory")
    turns = orchestrator.memory.latest_first()
    if not turns:
        st.caption("No memory yet.")
    for turn in turns:
        st.markdown(f"**{turn.speaker.value}** `{turn.time_label}` _{turn.channel.value}_  \n{turn.text}")

st.markdown("---")

# Voice Lab
with st.expander("Voice Lab"):
    preset_name = st.selectbox("Preset", options=[p.name for p in PRESETS])
    preset = get_preset(preset_name)
    description = st.text_area("Voice description", value=preset.description)
    sample_text = st.text_area("Sample text", value=preset.text)
    voice_name = st.text_input("Voice name", value=preset.name)

    if st.button("Generate preview"):
        try:
            st.session_state.preview = orchestrator.voice_lab.design(description, sample_text)[0]
        except (FieldOpsError, ValueError) as e:
            st.error(str(e))

    preview = st.session_state.get("preview")
    if preview is not None:
        audio = SynthesizedAudio(audio_base64=preview.audio_base_64, media_type=preview.media_type)
        st.audio(audio.decode(), format=preview.media_type)
        if st.button("Save voice"):
            try:
                voice = orchestrator.voice_lab.create(voice_name, description, preview.generated_voice_id)
                st.success(f"Saved voice {voice.voice_id}")
            except (FieldOpsError, ValueError) as e:
                st.error(str(e))

    for voice in orchestrator.voice_lab.history:
        st.caption(f"{voice.name} - {voice.voice_id} ({voice.created_at:%Y-%m-%d %H:%M})")
    if orchestrator.voice_lab.history and st.button("Clear history"):
        orchestrator.voice_lab.clear_history()
        st.rerun()

if show_debug:
    st.sidebar.info(f"Pipeline state: {orchestrator.controller.state.value}")
    if orchestrator.llm_client:
        st.sidebar.info(
            f"LLM: {orchestrator.llm_client.get_provider_name()} ({orchestrator.llm_client.get_model_name()})"
        )
    st.sidebar.info(f"Memory turns: {len(orchestrator.memory)}")

# Footer
st.sidebar.markdown("---")
st.sidebar.markdown("Built with Streamlit")
