"""
Streamlit implementation of ChatUserInterface and ChatLogger protocols.

This module provides Streamlit-based implementations that can be used
for web-based interfaces.
"""

import time
from typing import Any, Callable, List, Sequence
import streamlit as st

from ..core.conversation import Role, Turn
from ..core.protocols import ChatUserInterface, ChatLogger
from .formatting import sources_markdown

KEYPAD_KEYS = "1234567890"


class StreamlitUserInterface(ChatUserInterface):
    """Streamlit implementation of ChatUserInterface."""

    def __init__(self, assistant_name: str = "Saya"):
        """
        Initialize Streamlit interface.

        Args:
            assistant_name: Name used for the page header and input placeholder
        """
        self.assistant_name = assistant_name

    def display_passcode(self, masked: str, error: bool):
        """Display the masked passcode field, highlighted after a wrong code."""
        st.subheader("Enter Passcode")
        shown = masked or "&nbsp;"
        if error:
            st.markdown(f"<h2 style='color:#d33;letter-spacing:0.4em'>{shown}</h2>", unsafe_allow_html=True)
            self.display_error("Wrong passcode")
        else:
            st.markdown(f"<h2 style='letter-spacing:0.4em'>{shown}</h2>", unsafe_allow_html=True)

    def display_keypad(
        self,
        on_digit: Callable[[str], None],
        on_clear: Callable[[], None],
        on_backspace: Callable[[], None]
    ):
        """Render the on-screen keypad; button callbacks run before the next rerun."""
        rows = [KEYPAD_KEYS[i:i + 3] for i in range(0, len(KEYPAD_KEYS), 3)]
        for row in rows:
            columns = st.columns(3)
            for column, key in zip(columns, row):
                column.button(key, key=f"key_{key}", on_click=on_digit, args=(key,), use_container_width=True)
        columns = st.columns(3)
        columns[1].button("C", key="key_clear", on_click=on_clear, use_container_width=True)
        columns[2].button("X", key="key_backspace", on_click=on_backspace, use_container_width=True)

    def render_turn(self, turn: Turn, typing: bool = False):
        """Render one turn's content and sources inside the current container."""
        if typing and not turn.content:
            st.markdown("_…_")
        else:
            st.markdown(turn.content)
        sources = sources_markdown(turn.sources)
        if sources:
            st.markdown(sources)

    def display_conversation(self, turns: Sequence[Turn], typing: bool = False):
        """Render every turn as a chat message."""
        for index, turn in enumerate(turns):
            is_last = index == len(turns) - 1
            role = "user" if turn.role is Role.USER else "assistant"
            with st.chat_message(role):
                self.render_turn(turn, typing=typing and is_last)

    def live_turn(self) -> Callable[[Turn, bool], None]:
        """Open an assistant message placeholder and return an updater for it."""
        with st.chat_message("assistant"):
            placeholder = st.empty()

        def update(turn: Turn, typing: bool = False):
            with placeholder.container():
                self.render_turn(turn, typing=typing)

        return update

    def display_message(self, content: str):
        """Display a message in Streamlit chat format."""
        st.markdown(content)

    def display_error(self, error_message: str):
        """Display error message."""
        st.error(f"❌ Error: {error_message}")

    def display_info(self, info: str):
        """Display informational message."""
        st.info(f"ℹ️  {info}")


class StreamlitLogger(ChatLogger):
    """Streamlit implementation of ChatLogger."""

    def __init__(self, show_debug: bool = False):
        """
        Initialize Streamlit logger.

        Args:
            show_debug: Whether to show debug messages in the UI
        """
        self.show_debug = show_debug

        # Initialize session state for logs if not exists
        if "logs" not in st.session_state:
            st.session_state.logs = []

    def _add_log(self, level: str, message: str):
        """Add log entry to session state."""
        logs: List[dict] = st.session_state.logs
        logs.append({
            "timestamp": time.time(),
            "level": level,
            "message": message
        })

        # Keep only last 100 logs to prevent memory issues
        if len(logs) > 100:
            st.session_state.logs = logs[-100:]

    def log_debug(self, message: str):
        """Log debug message."""
        self._add_log("DEBUG", message)

    def log_info(self, message: str):
        """Log info message."""
        self._add_log("INFO", message)

    def log_error(self, message: str, exc_info: bool = False):
        """Log error message."""
        self._add_log("ERROR", message)
        # Note: exc_info parameter available but not used in streamlit implementation

    def log_warning(self, message: str):
        """Log warning message."""
        self._add_log("WARNING", message)

    def log_llm_request(self, model: str, messages: Any, tools: Any = None):
        """Log LLM request."""
        num_messages = len(messages) if hasattr(messages, '__len__') else 'unknown'
        num_tools = len(tools) if tools and hasattr(tools, '__len__') else 0
        self._add_log("LLM_REQUEST", f"LLM REQUEST: {model} - {num_messages} messages, {num_tools} tools")

    def log_llm_response(self, content: str, num_citations: int = 0, duration: float = None):
        """Log LLM response."""
        content_preview = content[:50] + "..." if content and len(content) > 50 else content or ""
        timing = f" ({duration:.2f}s)" if duration is not None else ""
        self._add_log("LLM_RESPONSE", f"LLM RESPONSE: '{content_preview}' - citations: {num_citations}{timing}")

    def display_logs_sidebar(self):
        """Display logs in Streamlit sidebar."""
        if not self.show_debug:
            return
        with st.sidebar.expander("System Logs", expanded=False):
            for log in reversed(st.session_state.logs[-20:]):  # Show last 20 logs
                timestamp = time.strftime("%H:%M:%S", time.localtime(log["timestamp"]))
                st.text(f"[{timestamp}] {log['level']}: {log['message']}")
