"""
Protocol interfaces for the chat session system.

These protocols define the contracts that frontend, logging and provider
implementations must follow so the session state engine stays
frontend-agnostic and provider-agnostic.
"""

from typing import Protocol, Dict, Any, List, AsyncIterator, Sequence


class ChatUserInterface(Protocol):
    """Protocol defining the interface for user interactions."""

    def display_passcode(self, masked: str, error: bool) -> None:
        """
        Display the passcode entry field.

        Args:
            masked: One mask character per entered digit
            error: Whether the last full-length code was wrong
        """
        ...

    def display_conversation(self, turns: Sequence[Any], typing: bool = False) -> None:
        """
        Render the conversation log.

        Args:
            turns: Ordered turns, each with role, content and sources
            typing: Whether to show the typing indicator
        """
        ...

    def display_message(self, content: str) -> None:
        """
        Display a message.

        Args:
            content: The message content to display
        """
        ...

    def display_error(self, error: str) -> None:
        """
        Display an error message.

        Args:
            error: Error message to display
        """
        ...

    def display_info(self, info: str) -> None:
        """
        Display informational message.

        Args:
            info: Information message to display
        """
        ...


class ChatLogger(Protocol):
    """Protocol defining the interface for logging."""

    def log_debug(self, message: str) -> None:
        """
        Log debug message.

        Args:
            message: Debug message to log
        """
        ...

    def log_info(self, message: str) -> None:
        """
        Log info message.

        Args:
            message: Info message to log
        """
        ...

    def log_warning(self, message: str) -> None:
        """
        Log warning message.

        Args:
            message: Warning message to log
        """
        ...

    def log_error(self, message: str, exc_info: bool = False) -> None:
        """
        Log error message.

        Args:
            message: Error message to log
            exc_info: Whether to include exception information
        """
        ...

    def log_llm_request(self, model: str, messages: List[Dict], tools: List[Dict] = None) -> None:
        """
        Log LLM request details.

        Args:
            model: LLM model being used
            messages: Messages sent to the LLM
            tools: Available tools (optional)
        """
        ...

    def log_llm_response(self, response_content: str, num_citations: int = 0, duration: float = None) -> None:
        """
        Log LLM response details.

        Args:
            response_content: Content of the LLM response
            num_citations: Number of distinct grounding citations received
            duration: Response duration in seconds (optional)
        """
        ...


class ProviderChat(Protocol):
    """
    An open conversation context held by the generation provider.

    The handle retains prior-turn context itself: callers send only the new
    user text and must never resend earlier turns.
    """

    async def send_message_stream(self, message: str) -> AsyncIterator[Any]:
        """
        Open a streaming response for one user message.

        Awaiting this call is the stream handshake; the returned async
        iterator yields chunks carrying ``text`` and ``citations``.

        Args:
            message: The new user message

        Returns:
            Async iterator of stream chunks
        """
        ...


class ChatProvider(Protocol):
    """Protocol defining the generation provider collaborator."""

    def create_chat(self, system_instruction: str, web_search: bool = True) -> ProviderChat:
        """
        Create a new conversation context.

        Args:
            system_instruction: Fixed persona instruction for the whole conversation
            web_search: Whether web-search grounding is enabled

        Returns:
            A provider chat handle
        """
        ...
