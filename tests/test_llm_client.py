from types import SimpleNamespace

import pytest

from saya_chat.core.conversation import Citation
from saya_chat.provider import llm_client
from saya_chat.provider.llm_client import LLMClient, extract_citations, extract_text


def make_chunk(content=None, grounding=None, citations=None, annotations=None, hidden=None):
    delta = SimpleNamespace(content=content, annotations=annotations)
    attrs = {"choices": [SimpleNamespace(delta=delta)]}
    if grounding is not None:
        attrs["vertex_ai_grounding_metadata"] = grounding
    if citations is not None:
        attrs["citations"] = citations
    if hidden is not None:
        attrs["_hidden_params"] = hidden
    return SimpleNamespace(**attrs)


class FakeStream:
    def __init__(self, chunks, error=None):
        self.chunks = list(chunks)
        self.error = error
        self.closed = False

    def __aiter__(self):
        return self._gen()

    async def _gen(self):
        for item in self.chunks:
            yield item
        if self.error is not None:
            raise self.error

    async def aclose(self):
        self.closed = True


@pytest.fixture
def completions(monkeypatch):
    calls = []
    responses = []

    async def fake_acompletion(**params):
        calls.append(params)
        return responses.pop(0)

    monkeypatch.setattr(llm_client.litellm, "acompletion", fake_acompletion)
    return SimpleNamespace(calls=calls, responses=responses)


def test_extract_gemini_grounding_metadata():
    item = make_chunk(grounding=[{
        "groundingChunks": [
            {"web": {"uri": "https://a.example", "title": "A"}},
            {"web": {"uri": "https://b.example"}},
            {"retrievedContext": {"uri": "ignored"}},
        ]
    }])
    assert extract_citations(item) == [
        Citation(uri="https://a.example", title="A"),
        Citation(uri="https://b.example", title=""),
    ]


def test_extract_grounding_from_hidden_params():
    item = make_chunk(hidden={"vertex_ai_grounding_metadata": {
        "groundingChunks": [{"web": {"uri": "https://a.example", "title": "A"}}]
    }})
    assert extract_citations(item) == [Citation(uri="https://a.example", title="A")]


def test_extract_url_lists_and_annotations():
    item = make_chunk(
        citations=["https://c.example", ""],
        annotations=[
            {"type": "url_citation", "url_citation": {"url": "https://d.example", "title": "D"}},
            {"type": "file_citation", "file_citation": {"file_id": "x"}},
        ],
    )
    assert extract_citations(item) == [
        Citation(uri="https://c.example"),
        Citation(uri="https://d.example", title="D"),
    ]


def test_extract_nothing_from_plain_chunk():
    item = make_chunk(content="hi")
    assert extract_citations(item) == []
    assert extract_text(item) == "hi"
    assert extract_text(make_chunk(content=None)) == ""
    assert extract_text(SimpleNamespace(choices=[])) == ""


async def test_stream_yields_chunks_and_commits_history(completions, logger):
    completions.responses.append(FakeStream([
        make_chunk("Hello"),
        make_chunk(" world", grounding=[{"groundingChunks": [{"web": {"uri": "u", "title": "t"}}]}]),
    ]))
    chat = LLMClient("gemini/gemini-2.5-flash", 0.5, logger).create_chat("persona")

    stream = await chat.send_message_stream("hi")
    received = [item async for item in stream]

    assert [item.text for item in received] == ["Hello", " world"]
    assert received[1].citations == [Citation(uri="u", title="t")]
    assert chat.history == [
        {"role": "system", "content": "persona"},
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "Hello world"},
    ]
    params = completions.calls[0]
    assert params["stream"] is True
    assert params["temperature"] == 0.5
    assert params["tools"] == [{"googleSearch": {}}]
    assert "LLM_RESPONSE" in logger.levels()


async def test_follow_up_sends_retained_history(completions, logger):
    completions.responses.extend([FakeStream([make_chunk("one")]), FakeStream([make_chunk("two")])])
    chat = LLMClient("gemini/gemini-2.5-flash", 0.5, logger).create_chat("persona")

    for message in ["first", "second"]:
        stream = await chat.send_message_stream(message)
        async for _ in stream:
            pass

    sent = completions.calls[1]["messages"]
    assert [message["content"] for message in sent] == ["persona", "first", "one", "second"]


async def test_failed_stream_is_not_committed(completions, logger):
    completions.responses.append(FakeStream([make_chunk("partial")], error=RuntimeError("reset")))
    chat = LLMClient("gemini/gemini-2.5-flash", 0.5, logger).create_chat("persona")

    stream = await chat.send_message_stream("hi")
    with pytest.raises(RuntimeError):
        async for _ in stream:
            pass

    assert chat.history == [{"role": "system", "content": "persona"}]


def test_web_search_options_for_other_providers(logger):
    chat = LLMClient("openai/gpt-4o-search-preview", 0.0, logger).create_chat("persona")
    params = chat._completion_params([])
    assert "tools" not in params
    assert params["web_search_options"] == {"search_context_size": "medium"}


def test_web_search_disabled(logger):
    chat = LLMClient("gemini/gemini-2.5-flash", 0.0, logger).create_chat("persona", web_search=False)
    params = chat._completion_params([])
    assert "tools" not in params
    assert "web_search_options" not in params


async def test_closing_stream_early_closes_response(completions, logger):
    response = FakeStream([make_chunk("one"), make_chunk("two")])
    completions.responses.append(response)
    chat = LLMClient("gemini/gemini-2.5-flash", 0.5, logger).create_chat("persona")

    stream = await chat.send_message_stream("hi")
    first = await stream.__anext__()
    await stream.aclose()

    assert first.text == "one"
    assert response.closed
    assert chat.history == [{"role": "system", "content": "persona"}]
