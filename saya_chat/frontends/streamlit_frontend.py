"""
Streamlit frontend for the passcode-gated chat.

This provides a web-based keypad and chat view on top of the protocol-based
core components.
"""

import asyncio
import time
import streamlit as st
from dotenv import load_dotenv

from saya_chat.config import load_config
from saya_chat.core.application import ChatApplication
from saya_chat.core.conversation import Role
from saya_chat.core.errors import ConfigError
from saya_chat.interfaces.streamlit_interface import StreamlitUserInterface, StreamlitLogger
from saya_chat.provider.llm_client import LLMClient


def defer_to_rerun(delay: float, callback):
    """Passcode reset scheduler: the page waits out the delay on its next run."""
    st.session_state.pending_reset = (time.monotonic() + delay, callback)


def run_pending_reset():
    """Show the error state until the reset is due, then apply it and rerun."""
    deadline, callback = st.session_state.pending_reset
    time.sleep(max(0.0, deadline - time.monotonic()))
    del st.session_state.pending_reset
    callback()
    st.rerun()


def setup_sidebar(app: ChatApplication, logger: StreamlitLogger):
    """Setup the sidebar with session information."""
    st.sidebar.title("🔧 Session")
    st.sidebar.text_input("Model", value=app.config.model, disabled=True)
    st.sidebar.checkbox("Web search grounding", value=app.config.web_search, disabled=True)

    if st.sidebar.button("📊 Show Session State"):
        st.sidebar.json(app.get_state())

    logger.display_logs_sidebar()


def get_event_loop() -> asyncio.AbstractEventLoop:
    """One event loop per browser session, reused for every turn."""
    if "event_loop" not in st.session_state:
        st.session_state.event_loop = asyncio.new_event_loop()
    return st.session_state.event_loop


def initialize_app() -> ChatApplication:
    """Create the application once per browser session."""
    if "app" not in st.session_state:
        load_dotenv()
        config = load_config()
        logger = StreamlitLogger(show_debug=bool(st.query_params.get("debug")))
        provider = LLMClient(model=config.model, temperature=config.temperature, logger=logger)
        st.session_state.app = ChatApplication(config, provider, logger, scheduler=defer_to_rerun)
    return st.session_state.app


def passcode_page(app: ChatApplication, ui: StreamlitUserInterface):
    """Render the keypad until the passcode is accepted."""
    _, center, _ = st.columns([1, 2, 1])
    with center:
        ui.display_info(f"Enter the {app.gate.length}-digit passcode")
        ui.display_passcode(app.gate.masked, app.gate.error_flag)
        ui.display_keypad(
            on_digit=app.gate.append_digit,
            on_clear=app.gate.clear,
            on_backspace=app.gate.backspace
        )

    if "pending_reset" in st.session_state:
        run_pending_reset()


def chat_page(app: ChatApplication, ui: StreamlitUserInterface):
    """Render the conversation and run a submitted message on the following rerun."""
    st.title(f"{app.config.assistant_name} AI")
    ui.display_conversation(app.log.turns)

    # A submitted prompt is parked first so the input is drawn disabled for the whole turn
    pending = st.session_state.pop("pending_prompt", None)
    prompt = st.chat_input(
        f"Ask {app.config.assistant_name} anything...",
        disabled=pending is not None or app.busy
    )
    if prompt:
        st.session_state.pending_prompt = prompt
        st.rerun()
    if pending is None:
        return

    with st.chat_message("user"):
        ui.display_message(pending)
    update = ui.live_turn()

    def on_change(log):
        if log.last is not None and log.last.role is Role.ASSISTANT:
            update(log.last, app.typing)

    unsubscribe = app.log.subscribe(on_change)
    try:
        get_event_loop().run_until_complete(app.send_turn(pending))
    finally:
        unsubscribe()
    st.rerun()


def main():
    """Main Streamlit application."""
    st.set_page_config(
        page_title="Saya AI",
        page_icon="💬",
        layout="centered"
    )

    try:
        app = initialize_app()
    except ConfigError as e:
        StreamlitUserInterface().display_error(f"Invalid configuration: {e}")
        st.stop()

    ui = StreamlitUserInterface(assistant_name=app.config.assistant_name)

    if not app.authenticated:
        passcode_page(app, ui)
        return

    setup_sidebar(app, app.logger)
    chat_page(app, ui)


if __name__ == "__main__":
    main()
