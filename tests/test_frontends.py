from types import SimpleNamespace

import pytest

from saya_chat.core.application import ChatApplication
from saya_chat.core.conversation import Citation
from saya_chat.frontends.console_frontend import apply_keypad_input, load_console_config
from saya_chat.interfaces import streamlit_interface
from saya_chat.interfaces.formatting import sources_markdown
from saya_chat.interfaces.streamlit_interface import StreamlitUserInterface


class RecordingUI:
    def __init__(self):
        self.errors = []

    def display_error(self, error_message):
        self.errors.append(error_message)


@pytest.fixture
def app(config, provider, logger, scheduler):
    return ChatApplication(config, provider, logger, scheduler=scheduler)


def test_keypad_line_unlocks(app):
    apply_keypad_input(app, "0001\n")
    assert app.authenticated
    assert app.session is not None


def test_keypad_editing_keys(app):
    apply_keypad_input(app, "12<<c00")
    assert app.gate.entered == ("0", "0")
    apply_keypad_input(app, "01")
    assert app.authenticated


def test_keypad_stops_at_wrong_code(app, scheduler):
    apply_keypad_input(app, "99990001")
    assert app.gate.error_flag
    assert app.gate.entered == ("9", "9", "9", "9")
    scheduler.run_all()
    assert app.gate.entered == ()


def test_sources_markdown_uses_label():
    text = sources_markdown([
        Citation(uri="https://a.example", title="Alpha"),
        Citation(uri="https://b.example"),
    ])
    assert text.splitlines() == [
        "**Sources:**",
        "- [Alpha](https://a.example)",
        "- [https://b.example](https://b.example)",
    ]


def test_sources_markdown_empty():
    assert sources_markdown([]) == ""


def console_args(**values):
    defaults = {"model": None, "temperature": None, "web_search": None}
    defaults.update(values)
    return SimpleNamespace(**defaults)


def test_bad_configuration_is_reported_through_ui(monkeypatch):
    monkeypatch.setenv("SAYA_PASSCODE", "12ab")
    ui = RecordingUI()

    with pytest.raises(SystemExit) as excinfo:
        load_console_config(console_args(), ui)

    assert excinfo.value.code == 2
    assert len(ui.errors) == 1
    assert ui.errors[0].startswith("Invalid configuration:")


def test_good_configuration_reports_nothing(monkeypatch):
    monkeypatch.setenv("SAYA_PASSCODE", "4321")
    ui = RecordingUI()

    config = load_console_config(console_args(temperature=0.2), ui)

    assert config.passcode == "4321"
    assert config.temperature == 0.2
    assert ui.errors == []


def test_streamlit_wrong_passcode_uses_error_display(monkeypatch):
    calls = []
    fake_st = SimpleNamespace(
        subheader=lambda text: calls.append(("subheader", text)),
        markdown=lambda text, **kwargs: calls.append(("markdown", text)),
        error=lambda text: calls.append(("error", text)),
    )
    monkeypatch.setattr(streamlit_interface, "st", fake_st)
    ui = StreamlitUserInterface()

    ui.display_passcode("●●●●", error=True)
    ui.display_passcode("●", error=False)

    errors = [text for kind, text in calls if kind == "error"]
    assert errors == ["❌ Error: Wrong passcode"]
