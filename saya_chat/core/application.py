"""
Application wiring: passcode gate, conversation log and the lazily created chat session.
"""

from typing import Any, Dict, Optional

from ..config import ChatConfig
from .chat_session import ChatSession
from .conversation import ConversationLog
from .passcode_gate import PasscodeGate, Scheduler
from .protocols import ChatLogger, ChatProvider


class ChatApplication:
    """Owns the session state engine for one process."""

    def __init__(
        self,
        config: ChatConfig,
        provider: ChatProvider,
        logger: ChatLogger,
        scheduler: Scheduler = None
    ):
        """
        Initialize the application.

        Args:
            config: Validated chat configuration
            provider: Generation provider, used once authentication succeeds
            logger: Logger implementation
            scheduler: Optional scheduler for the passcode error reset
        """
        self.config = config
        self.provider = provider
        self.logger = logger

        self.gate = PasscodeGate(config.passcode, error_delay=config.error_delay, scheduler=scheduler)
        self.log = ConversationLog(welcome_message=config.welcome)
        self._session: Optional[ChatSession] = None

        self.gate.on_authenticated(self._start_session)
        self.logger.log_info("Chat application initialized")

    @property
    def session(self) -> Optional[ChatSession]:
        return self._session

    @property
    def authenticated(self) -> bool:
        return self.gate.authenticated

    @property
    def busy(self) -> bool:
        return self._session is not None and self._session.busy

    @property
    def typing(self) -> bool:
        """True while a turn is in flight and no assistant text has arrived yet."""
        current = self.log.current
        return self.busy and current is not None and not current.content

    def _start_session(self) -> None:
        self.logger.log_info("Passcode accepted; starting chat session")
        self._session = ChatSession(
            provider=self.provider,
            log=self.log,
            logger=self.logger,
            system_instruction=self.config.render_system_instruction(),
            web_search=self.config.web_search,
            failure_message=self.config.failure_message
        )
        self._session.initialize()

    async def send_turn(self, user_text: str) -> bool:
        """Forward a user message to the session; rejected before authentication."""
        if self._session is None:
            self.logger.log_debug("Rejected turn: not authenticated")
            return False
        return await self._session.send_turn(user_text)

    def get_state(self) -> Dict[str, Any]:
        """Get current application state for debugging/monitoring."""
        state = {
            "gate": self.gate.state.value,
            "model": self.config.model,
            "num_turns": len(self.log),
        }
        if self._session is not None:
            state["session"] = self._session.get_session_state()
        return state
