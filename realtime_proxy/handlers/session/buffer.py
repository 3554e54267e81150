"""Ordered queue of client frames held while the upstream is not ready.

Frames are opaque (``str`` or ``bytes``) and leave the queue strictly in
arrival order. A frame is removed only after its send succeeded, so a drain
interrupted by a dropped upstream keeps the failed frame at the head.

The queue has no size cap; a single slow upstream handshake is bounded by the
client's own send rate.
"""

from __future__ import annotations

import collections
import logging
from collections.abc import Awaitable, Callable

from ...errors import UpstreamError

logger = logging.getLogger(__name__)

Payload = str | bytes
SendFn = Callable[[Payload], Awaitable[None]]
AvailableFn = Callable[[], bool]


class PendingMessageBuffer:
    """FIFO buffer owned by exactly one relay session."""

    def __init__(self) -> None:
        self._items: collections.deque[Payload] = collections.deque()

    def __len__(self) -> int:
        return len(self._items)

    def enqueue(self, payload: Payload) -> int:
        """Append a frame to the tail and return the new depth."""
        self._items.append(payload)
        return len(self._items)

    def peek(self) -> Payload | None:
        return self._items[0] if self._items else None

    def snapshot(self) -> list[Payload]:
        return list(self._items)

    def clear(self) -> int:
        """Discard every queued frame and return how many were dropped."""
        dropped = len(self._items)
        self._items.clear()
        return dropped

    async def drain_into(self, send: SendFn, *, is_available: AvailableFn | None = None) -> int:
        """Send queued frames head first until empty or the link goes away.

        Frames enqueued while the drain is awaiting a send are picked up by the
        same drain, so nothing can overtake an earlier frame.

        Returns:
            Number of frames transmitted.
        """
        sent = 0
        while self._items:
            if is_available is not None and not is_available():
                break
            payload = self._items[0]
            try:
                await send(payload)
            except UpstreamError as exc:
                logger.info("buffer: drain stopped after %s frames (%s); %s kept", sent, exc.kind, len(self._items))
                break
            if self._items:
                self._items.popleft()
            sent += 1
        return sent


__all__ = ["PendingMessageBuffer", "Payload"]
