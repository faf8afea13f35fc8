"""
Numeric passcode gate guarding access to the chat session.

The gate collects digits up to the secret's length. A full-length match
authenticates permanently; a mismatch raises a transient error state that
clears itself, together with the entered digits, after a fixed delay.
"""

import asyncio
import threading
from enum import Enum
from typing import Callable, List, Tuple

from .errors import ConfigError

Scheduler = Callable[[float, Callable[[], None]], None]

MASK_CHAR = "●"
DIGITS = "0123456789"


def schedule_later(delay: float, callback: Callable[[], None]) -> None:
    """Run ``callback`` after ``delay`` seconds on the running loop, or on a timer thread."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
    else:
        loop.call_later(delay, callback)


class GateState(str, Enum):
    ENTERING = "entering"
    LOCKED_ERROR = "locked_error"
    AUTHENTICATED = "authenticated"


class PasscodeGate:
    """Fixed-length numeric passcode state machine."""

    def __init__(self, secret: str, error_delay: float = 0.8, scheduler: Scheduler = None):
        """
        Initialize the gate.

        Args:
            secret: Passcode digits; its length fixes the entry length
            error_delay: Seconds the error state stays visible before reset
            scheduler: Callable ``(delay, callback)`` used to run the reset
        """
        if not secret or not all(c in DIGITS for c in secret):
            raise ConfigError("Passcode must be a non-empty string of digits")
        if error_delay < 0:
            raise ConfigError("Error delay must not be negative")

        self._secret = tuple(secret)
        self.error_delay = error_delay
        self._scheduler = scheduler or schedule_later

        self._entered: List[str] = []
        self._authenticated = False
        self._error_flag = False
        self._auth_callbacks: List[Callable[[], None]] = []

    @property
    def length(self) -> int:
        return len(self._secret)

    @property
    def entered(self) -> Tuple[str, ...]:
        return tuple(self._entered)

    @property
    def authenticated(self) -> bool:
        return self._authenticated

    @property
    def error_flag(self) -> bool:
        return self._error_flag

    @property
    def masked(self) -> str:
        return MASK_CHAR * len(self._entered)

    @property
    def state(self) -> GateState:
        if self._authenticated:
            return GateState.AUTHENTICATED
        if self._error_flag:
            return GateState.LOCKED_ERROR
        return GateState.ENTERING

    def on_authenticated(self, callback: Callable[[], None]) -> None:
        """Register a callback fired once on authentication (immediately if already authenticated)."""
        if self._authenticated:
            callback()
        else:
            self._auth_callbacks.append(callback)

    def append_digit(self, digit: str) -> None:
        """Append one digit; ignored when full, authenticated, or not a digit."""
        if self._authenticated or len(self._entered) >= self.length:
            return
        if not isinstance(digit, str) or len(digit) != 1 or digit not in DIGITS:
            return

        self._entered.append(digit)
        if len(self._entered) == self.length:
            self._evaluate()

    def backspace(self) -> None:
        if self._authenticated or not self._entered:
            return
        self._entered.pop()

    def clear(self) -> None:
        if self._authenticated:
            return
        self._entered = []
        self._error_flag = False

    def _evaluate(self) -> None:
        if tuple(self._entered) == self._secret:
            self._authenticated = True
            callbacks, self._auth_callbacks = self._auth_callbacks, []
            for callback in callbacks:
                callback()
        else:
            self._error_flag = True
            # The reset is never cancelled, even if the user clears or retypes meanwhile.
            self._scheduler(self.error_delay, self._reset_after_error)

    def _reset_after_error(self) -> None:
        if self._authenticated:
            return
        self._entered = []
        self._error_flag = False
