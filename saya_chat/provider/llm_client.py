"""
LLM client for streaming grounded chat completions.

This module provides a provider-side conversation handle over litellm with
streaming support, web-search grounding and proper logging. The handle keeps
the conversation history itself, so callers only ever send the new message.
"""

import time
from typing import Any, AsyncIterator, Dict, List

import litellm
from pydantic import BaseModel, Field

from ..core.conversation import Citation
from ..core.protocols import ChatLogger

GOOGLE_SEARCH_PREFIXES = ("gemini/", "vertex_ai/", "vertex_ai_beta/")


class StreamChunk(BaseModel):
    """One unit of an incremental response: a text delta plus co-arriving citations."""

    text: str = ""
    citations: List[Citation] = Field(default_factory=list)


def _get(obj: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` from either a mapping or an attribute-style object."""
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _grounding_metadata(chunk: Any) -> List[Any]:
    """Collect Gemini grounding metadata blocks attached to a chunk."""
    blocks = _get(chunk, "vertex_ai_grounding_metadata")
    if blocks is None:
        hidden = _get(chunk, "_hidden_params") or {}
        blocks = _get(hidden, "vertex_ai_grounding_metadata")
    if blocks is None:
        return []
    if isinstance(blocks, dict):
        return [blocks]
    return list(blocks)


def extract_citations(chunk: Any) -> List[Citation]:
    """
    Normalize the grounding references carried by one streamed chunk.

    Handles Gemini grounding metadata (``groundingChunks[].web``), plain
    ``citations`` url lists and ``url_citation`` annotations on the delta.
    References without a uri are skipped. Duplicates are kept here; the
    conversation log deduplicates per turn.

    Args:
        chunk: A litellm streaming chunk

    Returns:
        Citations in arrival order
    """
    citations: List[Citation] = []

    for block in _grounding_metadata(chunk):
        for grounding_chunk in _get(block, "groundingChunks") or []:
            web = _get(grounding_chunk, "web")
            uri = _get(web, "uri")
            if uri:
                citations.append(Citation(uri=uri, title=_get(web, "title") or ""))

    for url in _get(chunk, "citations") or []:
        if isinstance(url, str) and url:
            citations.append(Citation(uri=url))

    choices = _get(chunk, "choices") or []
    delta = _get(choices[0], "delta") if choices else None
    for annotation in _get(delta, "annotations") or []:
        if _get(annotation, "type") != "url_citation":
            continue
        url_citation = _get(annotation, "url_citation")
        uri = _get(url_citation, "url")
        if uri:
            citations.append(Citation(uri=uri, title=_get(url_citation, "title") or ""))

    return citations


def extract_text(chunk: Any) -> str:
    """Return the text delta of a streamed chunk, or an empty string."""
    choices = _get(chunk, "choices") or []
    if not choices:
        return ""
    delta = _get(choices[0], "delta")
    return _get(delta, "content") or ""


class LLMChat:
    """Provider-side conversation handle with streaming support."""

    def __init__(
        self,
        client: "LLMClient",
        system_instruction: str,
        web_search: bool = True
    ):
        """
        Initialize the conversation handle.

        Args:
            client: Client holding model settings and the logger
            system_instruction: Persona instruction sent as the system message
            web_search: Whether web-search grounding is enabled
        """
        self.client = client
        self.web_search = web_search
        self.history: List[Dict[str, Any]] = [{"role": "system", "content": system_instruction}]

    def _completion_params(self, messages: List[Dict[str, Any]]) -> Dict[str, Any]:
        completion_params = {
            "model": self.client.model,
            "messages": messages,
            "temperature": self.client.temperature,
            "stream": True,
        }

        # Gemini grounds through its search tool; other providers take web_search_options
        if self.web_search:
            if self.client.model.startswith(GOOGLE_SEARCH_PREFIXES):
                completion_params["tools"] = [{"googleSearch": {}}]
            else:
                completion_params["web_search_options"] = {"search_context_size": "medium"}

        return completion_params

    async def send_message_stream(self, message: str) -> AsyncIterator[StreamChunk]:
        """
        Start a streaming response for ``message``.

        Awaiting this method performs the request handshake; the returned
        iterator yields one StreamChunk per provider chunk. The exchange is
        committed to the history only once the stream finishes cleanly.

        Args:
            message: The new user message

        Returns:
            Async iterator of StreamChunk
        """
        messages = self.history + [{"role": "user", "content": message}]
        params = self._completion_params(messages)

        start_time = time.time()
        self.client.logger.log_llm_request(self.client.model, messages, params.get("tools"))
        response = await litellm.acompletion(**params)

        return self._iterate(response, message, start_time)

    async def _iterate(self, response: Any, message: str, start_time: float) -> AsyncIterator[StreamChunk]:
        complete_content = ""
        seen_uris = set()

        try:
            async for chunk in response:
                text = extract_text(chunk)
                citations = extract_citations(chunk)
                complete_content += text
                seen_uris.update(citation.uri for citation in citations)
                yield StreamChunk(text=text, citations=citations)
        except GeneratorExit:
            # Closed early by the caller: drop the response and leave history untouched
            close = getattr(response, "aclose", None)
            if close is not None:
                await close()
            raise

        self.history.append({"role": "user", "content": message})
        self.history.append({"role": "assistant", "content": complete_content})

        duration = time.time() - start_time
        self.client.logger.log_llm_response(complete_content, len(seen_uris), duration)


class LLMClient:
    """Frontend-agnostic provider that creates grounded streaming chats."""

    def __init__(
        self,
        model: str,
        temperature: float,
        logger: ChatLogger
    ):
        """
        Initialize the LLM client.

        Args:
            model: LLM model to use
            temperature: Temperature for LLM responses
            logger: Logger for recording LLM interactions
        """
        self.model = model
        self.temperature = temperature
        self.logger = logger

    def create_chat(self, system_instruction: str, web_search: bool = True) -> LLMChat:
        """Create a new conversation handle with a fixed persona and toolset."""
        self.logger.log_info(f"Creating chat with model: {self.model}")
        return LLMChat(self, system_instruction, web_search=web_search)
