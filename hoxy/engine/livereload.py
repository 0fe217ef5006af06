"""
Live-reload channel.
Keeps the set of connected browser clients and pushes a reload signal to all of
them whenever anything under the served root changes.

All access to the client set happens on the server's event loop (accept,
disconnect and the watch task), so it is not locked.
"""

import asyncio
import logging
from pathlib import Path
from typing import Protocol

from watchfiles import awatch

from hoxy.config import RELOAD_MESSAGE, WATCH_DEBOUNCE_MS

logger = logging.getLogger(__name__)

RELOAD_SCRIPT = b"""<script>
  (function () {
    var ws = new WebSocket((location.protocol === "https:" ? "wss://" : "ws://") + location.host);
    ws.onmessage = function () { location.reload(); };
  })();
</script>"""

# Client states
CONNECTING = "connecting"
OPEN = "open"
CLOSED = "closed"


class TextConnection(Protocol):
    """The part of a WebSocket connection the channel needs."""

    async def send_text(self, data: str) -> None: ...


class LiveReloadClient:
    """
    One upgraded connection. Hashed by identity so it can live in a set
    (framework WebSocket objects are mappings and unhashable).
    """

    def __init__(self, connection: TextConnection):
        self.connection = connection
        self.state = CONNECTING

    async def send(self, message: str) -> None:
        await self.connection.send_text(message)

    def __repr__(self) -> str:
        return f"LiveReloadClient(state={self.state!r})"


class LiveReloadChannel:
    """
    Client lifecycle: Connecting -> Open (registered) -> Closed (unregistered).
    A closed client is never reopened; a reconnect is a new client.
    """

    def __init__(self, message: str = RELOAD_MESSAGE):
        self.message = message
        self._clients: set[LiveReloadClient] = set()

    @property
    def clients(self) -> frozenset[LiveReloadClient]:
        return frozenset(self._clients)

    def __len__(self) -> int:
        return len(self._clients)

    def register(self, connection: TextConnection) -> LiveReloadClient:
        """Call once the upgrade has been accepted."""
        client = LiveReloadClient(connection)
        client.state = OPEN
        self._clients.add(client)
        logger.debug("Live-reload client connected (%d open)", len(self._clients))
        return client

    def unregister(self, client: LiveReloadClient) -> None:
        client.state = CLOSED
        if client in self._clients:
            self._clients.discard(client)
            logger.debug("Live-reload client disconnected (%d open)", len(self._clients))

    async def _deliver(self, client: LiveReloadClient) -> None:
        try:
            await client.send(self.message)
        except Exception as e:
            # A dead socket must not hold up the others; drop it.
            logger.debug("Live-reload delivery failed, dropping client: %s", e)
            self.unregister(client)

    async def broadcast(self) -> int:
        """
        Send the reload signal to every client open right now.
        Returns how many clients it was addressed to.
        """
        recipients = [c for c in self._clients if c.state == OPEN]
        if recipients:
            await asyncio.gather(*(self._deliver(c) for c in recipients))
        return len(recipients)

    async def watch(
        self,
        root: Path,
        stop_event: asyncio.Event | None = None,
        debounce_ms: int = WATCH_DEBOUNCE_MS,
    ) -> None:
        """
        Broadcast once per batch of filesystem changes under root (recursive).
        Runs until stop_event is set or the task is cancelled.
        """
        logger.info("Watching %s for changes", root)
        async for changes in awatch(root, stop_event=stop_event, debounce=debounce_ms, recursive=True):
            logger.debug("%d filesystem change(s) detected", len(changes))
            try:
                await self.broadcast()
            except Exception:
                logger.exception("Live-reload broadcast failed")
