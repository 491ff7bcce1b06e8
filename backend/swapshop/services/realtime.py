"""
In-process realtime channel: connected users and their WebSockets.

emit() is thread-safe and fire-and-forget so dispatcher threads can push events onto the
server's event loop. Nothing here is part of any transactional guarantee.
"""
import asyncio
import logging
import threading
from concurrent.futures import Future
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class RealtimeHub:
    def __init__(self):
        self._connections: dict[str, set[WebSocket]] = {}
        self._lock = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None

    def bind_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    async def connect(self, user_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        with self._lock:
            self._connections.setdefault(user_id, set()).add(websocket)
        logger.info("Realtime: user %s connected (%s sockets)", user_id, self.connection_count(user_id))

    def disconnect(self, user_id: str, websocket: WebSocket) -> None:
        with self._lock:
            sockets = self._connections.get(user_id)
            if sockets is None:
                return
            sockets.discard(websocket)
            if not sockets:
                del self._connections[user_id]
        logger.info("Realtime: user %s disconnected", user_id)

    def connection_count(self, user_id: str) -> int:
        with self._lock:
            return len(self._connections.get(user_id, ()))

    def is_online(self, user_id: str) -> bool:
        return self.connection_count(user_id) > 0

    def emit(self, user_id: str, event: str, data: dict[str, Any]) -> int:
        """Queue {event, data} to every socket of user_id. Returns number of sockets targeted."""
        with self._lock:
            sockets = list(self._connections.get(user_id, ()))
        if not sockets or self._loop is None or self._loop.is_closed():
            return 0
        message = {"event": event, "data": data}
        for ws in sockets:
            fut = asyncio.run_coroutine_threadsafe(ws.send_json(message), self._loop)
            fut.add_done_callback(self._log_send_failure)
        return len(sockets)

    @staticmethod
    def _log_send_failure(fut: Future) -> None:
        exc = fut.exception() if not fut.cancelled() else None
        if exc is not None:
            logger.debug("Realtime send failed: %s", exc)

    async def close(self) -> None:
        with self._lock:
            sockets = [ws for group in self._connections.values() for ws in group]
            self._connections.clear()
        for ws in sockets:
            try:
                await ws.close()
            except Exception as e:
                logger.debug("Realtime close failed: %s", e)
