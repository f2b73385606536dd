"""Unix socket event listener for cc-focus.

Hook scripts connect to a per-user socket, write one or more newline-delimited
JSON events, and disconnect. Each connection is served by its own asyncio task
that buffers partial reads, splits complete lines, and hands each decoded
event to the session tracker in the order the bytes arrived. A final line
without a trailing newline is processed when the peer closes.
"""

import asyncio
import logging
from pathlib import Path
from typing import Callable, List, Optional, Set

from .constants import MAX_MESSAGE_BYTES, READ_CHUNK_SIZE
from .errors import MalformedMessageError, SocketBindError
from .models import HookEvent, decode_event

logger = logging.getLogger(__name__)

EventHandler = Callable[[HookEvent], None]

# Any local peer may connect
SOCKET_MODE = 0o777


class MessageBuffer:
    """Per-connection framing buffer for newline-delimited messages."""

    def __init__(self, max_message_bytes: Optional[int] = MAX_MESSAGE_BYTES) -> None:
        """Initialize the buffer.

        Args:
            max_message_bytes: Longest accepted message; None disables the limit
        """
        self.max_message_bytes = max_message_bytes
        self._buffer = bytearray()
        # Set while skipping the rest of an over-long line
        self._discarding = False

    def __len__(self) -> int:
        return len(self._buffer)

    def feed(self, data: bytes) -> List[bytes]:
        """Append received bytes and return every complete message.

        Blank lines are skipped. Any trailing partial line stays buffered.

        Args:
            data: Bytes from one read

        Returns:
            Complete messages in receive order, without newline terminators
        """
        self._buffer.extend(data)
        messages: List[bytes] = []

        while True:
            newline = self._buffer.find(b"\n")
            if newline < 0:
                break
            line = bytes(self._buffer[:newline])
            del self._buffer[: newline + 1]

            if self._discarding:
                self._discarding = False
                continue
            if self._too_long(len(line)):
                logger.warning(f"Discarding {len(line)}-byte message over size limit")
                continue
            if line.strip():
                messages.append(line)

        if self._too_long(len(self._buffer)):
            logger.warning(
                f"Discarding partial message over size limit ({len(self._buffer)} bytes buffered)"
            )
            self._buffer.clear()
            self._discarding = True

        return messages

    def flush(self) -> Optional[bytes]:
        """Take whatever is left at end of connection.

        Returns:
            The unterminated final message, or None if nothing usable is left
        """
        data = bytes(self._buffer)
        self._buffer.clear()
        if self._discarding:
            self._discarding = False
            return None
        return data if data.strip() else None

    def _too_long(self, size: int) -> bool:
        return self.max_message_bytes is not None and size > self.max_message_bytes


class EventServer:
    """Accepts hook connections on a Unix socket and dispatches events."""

    def __init__(
        self,
        socket_path: Path,
        on_event: EventHandler,
        max_message_bytes: Optional[int] = MAX_MESSAGE_BYTES,
    ) -> None:
        """Initialize the listener.

        Args:
            socket_path: Filesystem path to bind
            on_event: Called synchronously with each decoded event
            max_message_bytes: Per-message size limit (None for unlimited)
        """
        self.socket_path = socket_path
        self.on_event = on_event
        self.max_message_bytes = max_message_bytes
        self.server: Optional[asyncio.Server] = None
        self._client_tasks: Set[asyncio.Task] = set()

    @property
    def is_serving(self) -> bool:
        return self.server is not None and self.server.is_serving()

    async def start(self) -> None:
        """Bind the socket and start accepting connections.

        Raises:
            SocketBindError: Stale socket could not be removed, or bind failed
        """
        try:
            self.socket_path.parent.mkdir(parents=True, exist_ok=True)
            # Remove stale socket left by a previous instance
            if self.socket_path.exists() or self.socket_path.is_symlink():
                self.socket_path.unlink()
            self.server = await asyncio.start_unix_server(
                self._handle_client, path=str(self.socket_path)
            )
            self.socket_path.chmod(SOCKET_MODE)
        except OSError as e:
            if self.server is not None:
                self.server.close()
                self.server = None
            raise SocketBindError(str(self.socket_path), e.strerror or str(e)) from e

        logger.info(f"Event server listening on {self.socket_path}")

    async def stop(self) -> None:
        """Stop accepting, drop open connections, and remove the socket file."""
        if self.server:
            self.server.close()

        for task in list(self._client_tasks):
            task.cancel()
        if self._client_tasks:
            await asyncio.gather(*self._client_tasks, return_exceptions=True)

        if self.server:
            await self.server.wait_closed()
            self.server = None

        try:
            self.socket_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove socket {self.socket_path}: {e}")

        logger.info("Event server stopped")

    async def _handle_client(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        """Read one connection to EOF, dispatching complete messages.

        Args:
            reader: Stream reader for the connection
            writer: Stream writer (used only to close the connection)
        """
        task = asyncio.current_task()
        if task is not None:
            self._client_tasks.add(task)
        buffer = MessageBuffer(self.max_message_bytes)
        logger.debug("Hook client connected")

        try:
            while True:
                try:
                    data = await reader.read(READ_CHUNK_SIZE)
                except OSError as e:
                    logger.warning(f"Read error on hook connection: {e}")
                    break
                if not data:
                    break
                for message in buffer.feed(data):
                    self._dispatch(message)

            final = buffer.flush()
            if final is not None:
                self._dispatch(final)
        finally:
            if task is not None:
                self._client_tasks.discard(task)
            writer.close()
            try:
                await writer.wait_closed()
            except OSError:
                pass
            logger.debug("Hook client disconnected")

    def _dispatch(self, message: bytes) -> None:
        """Decode one message and pass it to the event handler."""
        try:
            event = decode_event(message)
        except MalformedMessageError as e:
            logger.warning(f"Dropping message: {e.message}")
            return

        try:
            self.on_event(event)
        except Exception as e:
            logger.error(f"Error handling {event.event_type} event: {e}", exc_info=True)
