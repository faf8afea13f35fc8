"""
Append-only conversation log with per-turn citation deduplication.

Turns follow a two-phase lifecycle: at most one assistant turn is open
(mutable) at a time, and every earlier turn is closed the moment a newer
turn is appended. Observers are notified after each atomic mutation.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict

from .errors import ConversationStateError

logger = logging.getLogger(__name__)

Observer = Callable[["ConversationLog"], None]


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Citation(BaseModel):
    """A grounding reference surfaced by the provider."""

    model_config = ConfigDict(frozen=True)

    uri: str
    title: str = ""

    @property
    def label(self) -> str:
        return self.title or self.uri


class Turn:
    """One message in the conversation log. Mutated only through ConversationLog."""

    def __init__(self, role: Role, content: str = "", sources: Iterable[Citation] = (), closed: bool = True):
        self.role = Role(role)
        self._content = content
        self._sources: List[Citation] = list(sources)
        self._closed = closed

    @property
    def content(self) -> str:
        return self._content

    @property
    def sources(self) -> Tuple[Citation, ...]:
        return tuple(self._sources)

    @property
    def closed(self) -> bool:
        return self._closed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role.value,
            "content": self._content,
            "sources": [source.model_dump() for source in self._sources],
            "closed": self._closed,
        }

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"Turn({self.role.value}, {state}, {len(self._content)} chars, {len(self._sources)} sources)"


class GroundingDeduper:
    """Tracks the citation uris already seen for one turn."""

    def __init__(self):
        self._seen: Set[str] = set()

    def add(self, citation: Citation) -> bool:
        """Record ``citation``; True only on the first sighting of its uri."""
        if not citation.uri or citation.uri in self._seen:
            return False
        self._seen.add(citation.uri)
        return True

    def __contains__(self, uri: str) -> bool:
        return uri in self._seen

    def __len__(self) -> int:
        return len(self._seen)


class ConversationLog:
    """Ordered, append-only sequence of turns with a single open assistant turn."""

    def __init__(self, welcome_message: Optional[str] = None):
        self._turns: List[Turn] = []
        self._current: Optional[int] = None
        self._deduper = GroundingDeduper()
        self._observers: List[Observer] = []
        if welcome_message:
            self._turns.append(Turn(Role.ASSISTANT, welcome_message))

    # Read API

    @property
    def turns(self) -> Tuple[Turn, ...]:
        return tuple(self._turns)

    @property
    def last(self) -> Optional[Turn]:
        return self._turns[-1] if self._turns else None

    @property
    def current(self) -> Optional[Turn]:
        """The open assistant turn, if any."""
        return self._turns[self._current] if self._current is not None else None

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(tuple(self._turns))

    def to_dicts(self) -> List[Dict[str, Any]]:
        return [turn.to_dict() for turn in self._turns]

    # Observers

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register a read-only observer; returns a callable that unsubscribes it."""
        self._observers.append(observer)

        def unsubscribe():
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _notify(self) -> None:
        for observer in list(self._observers):
            try:
                observer(self)
            except Exception:
                logger.exception("Conversation observer %r failed", observer)

    # Mutations

    def append(self, turn: Turn) -> None:
        """Append a turn, freezing whatever turn was open before it."""
        self._close_current()
        self._turns.append(turn)
        if turn.role is Role.ASSISTANT and not turn.closed:
            self._current = len(self._turns) - 1
            self._deduper = GroundingDeduper()
            # Sources given up front still go through dedup.
            initial, turn._sources = turn._sources, []
            self._merge_sources(initial)
        else:
            turn._closed = True
        self._notify()

    def open_assistant_turn(self) -> Turn:
        turn = Turn(Role.ASSISTANT, closed=False)
        self.append(turn)
        return turn

    def append_content(self, delta: str) -> None:
        self._require_open()
        if self._append_content(delta):
            self._notify()

    def merge_sources(self, citations: Iterable[Citation]) -> None:
        self._require_open()
        if self._merge_sources(citations):
            self._notify()

    def apply_chunk(self, delta: str, citations: Iterable[Citation] = ()) -> None:
        """Apply one stream chunk's text and citations as a single observable update."""
        self._require_open()
        changed = self._append_content(delta)
        changed = self._merge_sources(citations) or changed
        if changed:
            self._notify()

    def fail_current_turn(self, message: str) -> None:
        """Replace the open turn's partial content with ``message`` and close it."""
        turn = self._require_open()
        turn._content = message
        self._close_current()
        self._notify()

    def close_current_turn(self) -> None:
        """Close the open turn; closing with nothing open changes nothing."""
        if self._close_current():
            self._notify()

    def _require_open(self) -> Turn:
        turn = self.current
        if turn is None:
            raise ConversationStateError("No open assistant turn")
        return turn

    def _append_content(self, delta: str) -> bool:
        if not delta:
            return False
        self._turns[self._current]._content += delta
        return True

    def _merge_sources(self, citations: Iterable[Citation]) -> bool:
        turn = self._turns[self._current]
        added = False
        for citation in citations or ():
            if self._deduper.add(citation):
                turn._sources.append(citation)
                added = True
        return added

    def _close_current(self) -> bool:
        if self._current is None:
            return False
        self._turns[self._current]._closed = True
        self._current = None
        return True
