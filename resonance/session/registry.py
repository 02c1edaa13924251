from __future__ import annotations

import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from threading import Lock
from typing import AsyncIterator

from resonance.session.engine import SessionEngine


@dataclass
class ConnectionContext:
    """
    Everything that lives exactly as long as one connection.
    """
    connection_id: str
    identity: str
    engine: SessionEngine
    history: list[dict] = field(default_factory=list)
    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)

    def append_exchange(self, user_text: str, assistant_text: str) -> None:
        self.history.append({"role": "user", "content": user_text})
        self.history.append({"role": "assistant", "content": assistant_text})
        self.updated_at = time.time()


class SessionRegistry:
    def __init__(self):
        self._lock = Lock()
        self._sessions: dict[str, ConnectionContext] = {}

    def register(self, context: ConnectionContext) -> None:
        with self._lock:
            if context.connection_id in self._sessions:
                raise RuntimeError(f"connection {context.connection_id} already registered")
            self._sessions[context.connection_id] = context

    def unregister(self, connection_id: str) -> ConnectionContext | None:
        with self._lock:
            return self._sessions.pop(connection_id, None)

    def touch(self, connection_id: str) -> None:
        with self._lock:
            if connection_id in self._sessions:
                self._sessions[connection_id].updated_at = time.time()

    def get(self, connection_id: str) -> ConnectionContext | None:
        with self._lock:
            return self._sessions.get(connection_id)

    def active_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    @asynccontextmanager
    async def scoped(self, context: ConnectionContext) -> AsyncIterator[ConnectionContext]:
        """Register for the body of the block; always unregister and close on exit."""
        self.register(context)
        try:
            yield context
        finally:
            self.unregister(context.connection_id)
            context.engine.close()
            context.history.clear()


session_registry = SessionRegistry()
