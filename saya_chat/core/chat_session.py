"""
Chat session driving one streamed turn at a time against the provider.

The session owns the provider chat handle for the life of the process. A
turn appends the user message, opens an assistant turn, and applies each
stream chunk's text and citations to the conversation log as one atomic
update. Provider failures end the turn with a fixed apology message and
leave the session usable.
"""

import time
from typing import Any, Dict, Optional

from .conversation import ConversationLog, Role, Turn
from .protocols import ChatLogger, ChatProvider, ProviderChat

FAILURE_MESSAGE = "Sorry, I encountered an error. Please try again."


class ChatSession:
    """Exclusive, single-turn-at-a-time driver of a provider conversation."""

    def __init__(
        self,
        provider: ChatProvider,
        log: ConversationLog,
        logger: ChatLogger,
        system_instruction: str,
        web_search: bool = True,
        failure_message: str = FAILURE_MESSAGE
    ):
        """
        Initialize the chat session.

        Args:
            provider: Provider used to create the conversation handle
            log: Conversation log this session appends to
            logger: Logger for session events
            system_instruction: Persona instruction fixed at handle creation
            web_search: Whether web-search grounding is enabled
            failure_message: Text that replaces a turn whose stream failed
        """
        self.provider = provider
        self.log = log
        self.logger = logger
        self.system_instruction = system_instruction
        self.web_search = web_search
        self.failure_message = failure_message

        self._handle: Optional[ProviderChat] = None
        self._busy = False
        self._turns_completed = 0
        self._turns_failed = 0

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def initialized(self) -> bool:
        return self._handle is not None

    def initialize(self) -> None:
        """Create the provider handle. Only the first call has any effect."""
        if self._handle is not None:
            self.logger.log_warning("Chat session already initialized; ignoring")
            return
        self._handle = self.provider.create_chat(self.system_instruction, web_search=self.web_search)
        self.logger.log_info(f"Chat session initialized (web search: {self.web_search})")

    async def send_turn(self, user_text: str) -> bool:
        """
        Run one user turn to completion or failure.

        Args:
            user_text: The user's message

        Returns:
            True if the turn was accepted, False if it was rejected without any state change
        """
        if self._handle is None:
            self.logger.log_debug("Rejected turn: session not initialized")
            return False
        if self._busy:
            self.logger.log_debug("Rejected turn: another turn is in flight")
            return False
        if not user_text or not user_text.strip():
            self.logger.log_debug("Rejected turn: blank input")
            return False

        self._busy = True
        start_time = time.time()
        stream = None
        try:
            self.log.append(Turn(Role.USER, user_text))
            self.log.open_assistant_turn()
            try:
                # Only the new text is sent; the handle keeps prior context.
                stream = await self._handle.send_message_stream(user_text)
                async for chunk in stream:
                    self.log.apply_chunk(chunk.text or "", chunk.citations or ())
            except Exception as e:
                self._turns_failed += 1
                self.logger.log_error(f"Error sending message: {e}", exc_info=True)
                self.log.fail_current_turn(self.failure_message)
            else:
                self._turns_completed += 1
                self.log.close_current_turn()
                self.logger.log_debug(f"Turn completed in {time.time() - start_time:.2f}s")
        finally:
            try:
                await self._finish_interrupted(stream)
            finally:
                self._busy = False
        return True

    async def _finish_interrupted(self, stream: Any) -> None:
        """End a turn abandoned by a non-Exception interrupt the same way as a failure."""
        if self.log.current is None:
            return
        self._turns_failed += 1
        self.logger.log_warning("Turn interrupted before the stream finished")
        try:
            self.log.fail_current_turn(self.failure_message)
        finally:
            close = getattr(stream, "aclose", None)
            if close is not None:
                try:
                    await close()
                except Exception as e:
                    self.logger.log_error(f"Error closing interrupted stream: {e}")

    def get_session_state(self) -> Dict[str, Any]:
        """Get current session state for debugging/monitoring."""
        return {
            "initialized": self.initialized,
            "busy": self._busy,
            "web_search": self.web_search,
            "num_turns": len(self.log),
            "turns_completed": self._turns_completed,
            "turns_failed": self._turns_failed,
        }
