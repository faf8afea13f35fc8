"""
Provider package - litellm-backed generation provider for the chat session.
"""

from .llm_client import LLMClient, LLMChat, StreamChunk, extract_citations

__all__ = [
    'LLMClient',
    'LLMChat',
    'StreamChunk',
    'extract_citations',
]
