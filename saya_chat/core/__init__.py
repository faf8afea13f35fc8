"""
Core session state engine for the chat application.

This module provides the protocol interfaces together with the passcode
gate, conversation log and chat session that implement the
frontend-agnostic chat behaviour.
"""

from .protocols import ChatUserInterface, ChatLogger, ChatProvider, ProviderChat
from .errors import ConversationStateError, ConfigError
from .passcode_gate import PasscodeGate, GateState
from .conversation import Citation, ConversationLog, GroundingDeduper, Role, Turn
from .chat_session import ChatSession, FAILURE_MESSAGE

__all__ = [
    'ChatUserInterface',
    'ChatLogger',
    'ChatProvider',
    'ProviderChat',
    'ConversationStateError',
    'ConfigError',
    'PasscodeGate',
    'GateState',
    'Citation',
    'ConversationLog',
    'GroundingDeduper',
    'Role',
    'Turn',
    'ChatSession',
    'FAILURE_MESSAGE',
]
