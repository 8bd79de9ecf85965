"""
FinNova - Conversation Memory
===============================
Per-conversation state kept for the lifetime of the server process.

``ConversationMemory``
    Append-only transcript of ``Turn`` objects plus a rolling natural
    language summary.  The summary is *replaced* (never merged) by the
    dialogue router after every generation-path turn.

``SessionStore``
    Maps a conversation id to its own ``ConversationMemory`` and an
    ``asyncio.Lock``.  The router holds the lock for a whole exchange, so
    turns of one conversation never interleave and different
    conversations never share memory.  Nothing is persisted, and the
    least recently used idle conversations are dropped beyond
    ``MAX_SESSIONS``.
"""

from __future__ import annotations

import asyncio
from collections import OrderedDict
from dataclasses import dataclass, field

from finnova.config.prompt_templates import TRANSCRIPT_LINE_TEMPLATE
from finnova.config.settings import settings
from finnova.src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Turn:
    """One user message and the assistant reply to it."""

    user_text: str
    ai_text: str


class ConversationMemory:
    """Ordered transcript + rolling summary of a single conversation."""

    __slots__ = ("_turns", "_summary")

    def __init__(self) -> None:
        self._turns: list[Turn] = []
        self._summary: str = ""


    def append_turn(self, turn: Turn) -> None:
        self._turns.append(turn)


    def get_transcript(self) -> tuple[Turn, ...]:
        """Return a read-only snapshot of the transcript, oldest first."""
        return tuple(self._turns)


    def get_summary(self) -> str:
        return self._summary


    def set_summary(self, summary: str) -> None:
        self._summary = summary


    def __len__(self) -> int:
        return len(self._turns)


def render_transcript(turns: tuple[Turn, ...] | list[Turn]) -> str:
    """Render turns as alternating ``user:`` / ``assistant:`` lines in order."""
    return "\n".join(TRANSCRIPT_LINE_TEMPLATE.format(user=t.user_text, assistant=t.ai_text) for t in turns)


@dataclass(slots=True)
class Session:
    memory: ConversationMemory = field(default_factory=ConversationMemory)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class SessionStore:
    """
    In-process registry of conversations keyed by session id.

    The store is bounded: once it holds more than *max_sessions*
    conversations, the least recently used ones are forgotten.  A session
    whose lock is held (an exchange in flight or queued) is never evicted,
    so the store may briefly exceed the bound under load.

    Parameters
    ----------
    max_sessions
        Upper bound on kept conversations.  Defaults to ``settings.MAX_SESSIONS``.
    """

    __slots__ = ("_sessions", "_max_sessions")

    def __init__(self, max_sessions: int | None = None) -> None:
        self._sessions: OrderedDict[str, Session] = OrderedDict()
        self._max_sessions: int = max_sessions if max_sessions is not None else settings.MAX_SESSIONS
        if self._max_sessions < 1:
            raise ValueError(f"max_sessions must be ≥ 1, got {self._max_sessions}")


    def get(self, session_id: str) -> Session:
        """Return the session for *session_id*, creating it on first use."""
        session = self._sessions.get(session_id)
        if session is None:
            session = Session()
            self._sessions[session_id] = session
            logger.info("[MEMORY] New session: %s", session_id)
            self._evict()
        else:
            self._sessions.move_to_end(session_id)
        return session


    def clear(self, session_id: str) -> bool:
        """Forget a conversation.  Returns True if it existed."""
        removed = self._sessions.pop(session_id, None) is not None
        if removed:
            logger.info("[MEMORY] Session cleared: %s", session_id)
        return removed


    def _evict(self) -> None:
        """Drop least recently used idle sessions until the bound holds."""
        overflow = len(self._sessions) - self._max_sessions
        if overflow <= 0:
            return

        # Oldest first; the newest entry is the session being handed out
        candidates = [sid for sid, s in list(self._sessions.items())[:-1] if not s.lock.locked()]
        for session_id in candidates[:overflow]:
            del self._sessions[session_id]
            logger.info("[MEMORY] Session evicted (least recently used): %s", session_id)

        if len(self._sessions) > self._max_sessions:
            logger.warning("[MEMORY] %d sessions kept (bound %d); the rest are busy.", len(self._sessions), self._max_sessions)


    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions


    def __len__(self) -> int:
        return len(self._sessions)
