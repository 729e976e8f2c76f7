"""Cooperative cancellation for in-flight downloads.

A :class:`CancellationToken` is handed to the downloader by whoever started the
import (for example a "cancel import" button). Cancelling it aborts the request or
body stream at its next suspension point and removes any partially written file.
"""

from __future__ import annotations

import asyncio


class CancellationToken:
    """Asyncio-aware cancellation flag.

    The token must be cancelled from the event loop that runs the download. Other
    threads should go through ``loop.call_soon_threadsafe(token.cancel)``.

    Examples:
        >>> token = CancellationToken()
        >>> token.is_cancelled()
        False
        >>> token.cancel()
        >>> token.is_cancelled()
        True
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        """Signal that cancellation has been requested."""
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        """Block until :meth:`cancel` is called."""
        await self._event.wait()
