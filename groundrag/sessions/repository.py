"""
Session Repository
===================

Chat sessions live behind an explicit repository interface so the
retrieval core never touches them. The HTTP layer reads recent history
from a session, calls the pipeline, and appends the exchange.

Backends:
    - JsonSessionRepository: whole collection in one JSON file,
      rewritten on every mutation (guarded by a lock)
    - InMemorySessionRepository: same behavior without a file (tests)
"""

from __future__ import annotations

import logging
import re
import threading
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from groundrag.schemas.answer import AnswerResult
from groundrag.schemas.session import Session, SessionMessage, SessionSummary
from groundrag.utils import load_json, save_json

logger = logging.getLogger("groundrag.sessions.repository")

_TITLE_STRIP_RE = re.compile(r"[^\w\s]")
TITLE_MAX_CHARS = 40


def now_ms() -> int:
    return int(time.time() * 1000)


def title_from_question(question: str) -> str:
    """Session title derived from its first question."""
    clean = _TITLE_STRIP_RE.sub("", question.replace("\n", " ")).strip()
    if len(clean) <= TITLE_MAX_CHARS:
        return clean
    return clean[:TITLE_MAX_CHARS] + "..."


class SessionRepository(ABC):
    """
    Storage interface for chat sessions.

    Args:
        welcome_message: First AI message of every new session.
    """

    def __init__(self, welcome_message: str = ""):
        self.welcome_message = welcome_message
        self._lock = threading.RLock()

    # ── Storage hooks ──────────────────────────────────────────

    @abstractmethod
    def _read_all(self) -> list[Session]:
        ...

    @abstractmethod
    def _write_all(self, sessions: list[Session]) -> None:
        ...

    # ── Public interface ───────────────────────────────────────

    def create(self) -> Session:
        with self._lock:
            sessions = self._read_all()
            now = now_ms()
            # Millisecond ids can collide when two sessions are created in the same tick
            existing = {s.id for s in sessions}
            stamp = now
            while f"sess_{stamp}" in existing:
                stamp += 1
            session = Session(
                id=f"sess_{stamp}",
                title=f"Chat {len(sessions) + 1}",
                created_at=now,
                updated_at=now,
                messages=[SessionMessage(sender="ai", text=self.welcome_message, at=now)],
            )
            sessions.append(session)
            self._write_all(sessions)
            return session

    def get(self, session_id: str) -> Optional[Session]:
        with self._lock:
            return next((s for s in self._read_all() if s.id == session_id), None)

    def list(self) -> list[SessionSummary]:
        """Session summaries, most recently updated first."""
        with self._lock:
            sessions = self._read_all()
        summaries = [
            SessionSummary(
                id=s.id,
                title=s.title,
                updated_at=s.updated_at,
                last_message=s.messages[-1].text if s.messages else "",
            )
            for s in sessions
        ]
        return sorted(summaries, key=lambda s: s.updated_at, reverse=True)

    def delete(self, session_id: str) -> bool:
        with self._lock:
            sessions = self._read_all()
            remaining = [s for s in sessions if s.id != session_id]
            if len(remaining) == len(sessions):
                return False
            self._write_all(remaining)
            return True

    def append(self, session_id: str, messages: list[SessionMessage]) -> Optional[Session]:
        """Append messages to a session and bump its timestamp."""
        with self._lock:
            sessions = self._read_all()
            session = next((s for s in sessions if s.id == session_id), None)
            if session is None:
                return None
            session.messages.extend(messages)
            session.updated_at = max(m.at for m in messages) if messages else now_ms()
            self._write_all(sessions)
            return session

    def append_exchange(
        self, session_id: str, question: str, result: AnswerResult
    ) -> Optional[Session]:
        """
        Record one question and its answer.

        A session still holding only its welcome message is retitled
        after the question.
        """
        with self._lock:
            session = self.get(session_id)
            if session is None:
                return None
            now = now_ms()
            messages = [
                SessionMessage(sender="user", text=question, at=now),
                SessionMessage(
                    sender="ai",
                    text=result.answer,
                    raw_text=result.raw_answer,
                    used_generator=result.used_generator,
                    at=now,
                ),
            ]
            if len(session.messages) == 1:
                self.rename(session_id, title_from_question(question))
            return self.append(session_id, messages)

    def rename(self, session_id: str, title: str) -> None:
        with self._lock:
            sessions = self._read_all()
            for s in sessions:
                if s.id == session_id:
                    s.title = title
            self._write_all(sessions)


class InMemorySessionRepository(SessionRepository):
    """Process-local repository."""

    def __init__(self, welcome_message: str = ""):
        super().__init__(welcome_message)
        self._sessions: list[Session] = []

    def _read_all(self) -> list[Session]:
        return [s.model_copy(deep=True) for s in self._sessions]

    def _write_all(self, sessions: list[Session]) -> None:
        self._sessions = [s.model_copy(deep=True) for s in sessions]


class JsonSessionRepository(SessionRepository):
    """
    Repository persisted to a single JSON file.

    The file holds a list of sessions in camelCase form. It is created
    empty on first use.
    """

    def __init__(self, path: str | Path, welcome_message: str = ""):
        super().__init__(welcome_message)
        self.path = Path(path)
        if not self.path.exists():
            save_json([], self.path)

    def _read_all(self) -> list[Session]:
        data = load_json(self.path)
        return [Session.model_validate(item) for item in data]

    def _write_all(self, sessions: list[Session]) -> None:
        save_json(
            [s.model_dump(by_alias=True, exclude_none=True) for s in sessions],
            self.path,
        )
