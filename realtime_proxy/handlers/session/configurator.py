"""One-shot ``session.update`` sender for each upstream connection instance."""

from __future__ import annotations

import logging
from collections.abc import Callable

from ...upstream import UpstreamConnector
from ...messages import encode_session_update

logger = logging.getLogger(__name__)


class SessionConfigurator:
    """Tracks whether the current upstream connection has been configured.

    ``configure`` sends at most one initialization message per connector
    generation. ``configured`` only becomes true once the upstream answers
    with ``session.updated``.
    """

    def __init__(self, encode: Callable[[], str] = encode_session_update) -> None:
        self._encode = encode
        self._sent_generation: int | None = None
        self.configured = False

    @property
    def sent_generation(self) -> int | None:
        return self._sent_generation

    async def configure(self, connector: UpstreamConnector) -> bool:
        """Send the initialization message if this connection has not had it.

        Returns:
            True if a message was sent by this call.
        """
        if not connector.is_open:
            return False
        if self._sent_generation == connector.generation:
            return False
        # claimed before the await so an interleaved call cannot send twice
        self._sent_generation = connector.generation
        self.configured = False
        await connector.send(self._encode())
        logger.info("configurator: session.update sent generation=%s", connector.generation)
        return True

    def acknowledge(self) -> bool:
        """Record the upstream's ``session.updated``; False if nothing was sent."""
        if self._sent_generation is None:
            return False
        was_configured = self.configured
        self.configured = True
        if not was_configured:
            logger.info("configurator: session configured generation=%s", self._sent_generation)
        return True

    def reset(self) -> None:
        self.configured = False


__all__ = ["SessionConfigurator"]
