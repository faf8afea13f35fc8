"""Exceptions raised by the session state engine."""


class ConversationStateError(RuntimeError):
    """Raised when the conversation log is mutated without an open assistant turn."""


class ConfigError(ValueError):
    """Raised when the chat configuration is invalid."""
