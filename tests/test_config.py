import pytest

from saya_chat.config import ChatConfig, load_config
from saya_chat.core.errors import ConfigError


def test_defaults():
    config = load_config(environ={})
    assert config.passcode == "0001"
    assert config.model == "gemini/gemini-2.5-flash"
    assert config.error_delay == 0.8
    assert config.web_search is True
    assert config.welcome == "Hello, I am Saya. How can I assist you with your studies today?"


def test_environment_values():
    config = load_config(environ={
        "SAYA_PASSCODE": "123456",
        "LITELLM_MODEL": "openai/gpt-4o-search-preview",
        "SAYA_TEMPERATURE": "0.2",
        "SAYA_ERROR_DELAY": "1.5",
        "SAYA_WEB_SEARCH": "false",
    })
    assert config.passcode == "123456"
    assert config.model == "openai/gpt-4o-search-preview"
    assert config.temperature == 0.2
    assert config.error_delay == 1.5
    assert config.web_search is False


def test_overrides_win_and_none_is_ignored():
    config = load_config(environ={"LITELLM_MODEL": "env-model"}, model="cli-model", temperature=None)
    assert config.model == "cli-model"
    assert config.temperature == 0.7


@pytest.mark.parametrize("passcode", ["", "12ab", "  ", "١٢٣٤", "０００１"])
def test_invalid_passcode(passcode):
    with pytest.raises(ConfigError):
        load_config(environ={}, passcode=passcode)


def test_invalid_temperature():
    with pytest.raises(ConfigError):
        load_config(environ={"SAYA_TEMPERATURE": "hot"})


def test_system_instruction_rendering():
    config = ChatConfig(assistant_name="Mika", creator="Ada")
    instruction = config.render_system_instruction()
    assert instruction.startswith("You are Mika, a highly advanced AI assistant created by Ada.")
    assert instruction.endswith('you must answer "Ada".')


def test_custom_welcome_message():
    assert ChatConfig(welcome_message="Hi!").welcome == "Hi!"
