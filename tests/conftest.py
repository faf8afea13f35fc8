from typing import Any, Dict, List

import pytest

from saya_chat.config import ChatConfig
from saya_chat.core.conversation import Citation, ConversationLog
from saya_chat.provider.llm_client import StreamChunk


class RecordingLogger:
    """ChatLogger that keeps every message for assertions."""

    def __init__(self):
        self.records: List[tuple] = []

    def _record(self, level, message):
        self.records.append((level, message))

    def log_debug(self, message):
        self._record("DEBUG", message)

    def log_info(self, message):
        self._record("INFO", message)

    def log_warning(self, message):
        self._record("WARNING", message)

    def log_error(self, message, exc_info=False):
        self._record("ERROR", message)

    def log_llm_request(self, model, messages, tools=None):
        self._record("LLM_REQUEST", model)

    def log_llm_response(self, response_content, num_citations=0, duration=None):
        self._record("LLM_RESPONSE", response_content)

    def levels(self):
        return [level for level, _ in self.records]


class ManualScheduler:
    """Captures scheduled callbacks so tests decide when the delay elapses."""

    def __init__(self):
        self.pending: List[tuple] = []

    def __call__(self, delay, callback):
        self.pending.append((delay, callback))

    def run_all(self):
        pending, self.pending = self.pending, []
        for _, callback in pending:
            callback()


class FakeChat:
    """ProviderChat that replays scripted streams, one script per message."""

    def __init__(self, provider):
        self.provider = provider
        self.received: List[str] = []

    async def send_message_stream(self, message):
        self.received.append(message)
        script = self.provider.scripts.pop(0)
        if isinstance(script, Exception):
            raise script
        return self._iterate(script)

    async def _iterate(self, script):
        for item in script:
            if isinstance(item, Exception):
                raise item
            self.provider.on_chunk(item)
            yield item


class FakeProvider:
    """ChatProvider recording created chats."""

    def __init__(self, scripts=None):
        self.scripts: List[Any] = list(scripts or [])
        self.chats: List[FakeChat] = []
        self.create_calls: List[Dict[str, Any]] = []
        self.chunk_hook = None

    def create_chat(self, system_instruction, web_search=True):
        self.create_calls.append({"system_instruction": system_instruction, "web_search": web_search})
        chat = FakeChat(self)
        self.chats.append(chat)
        return chat

    def on_chunk(self, chunk):
        if self.chunk_hook is not None:
            self.chunk_hook(chunk)


def chunk(text="", *uris_and_titles):
    """Build a StreamChunk from text plus (uri, title) pairs."""
    return StreamChunk(text=text, citations=[Citation(uri=uri, title=title) for uri, title in uris_and_titles])


@pytest.fixture
def logger():
    return RecordingLogger()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def log():
    return ConversationLog(welcome_message="Hello, I am Saya. How can I assist you with your studies today?")


@pytest.fixture
def config():
    return ChatConfig(passcode="0001", error_delay=0.8)
