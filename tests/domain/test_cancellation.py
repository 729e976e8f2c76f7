from __future__ import annotations

import asyncio

from gedsimport.domain.cancellation import CancellationToken


def test_token_starts_uncancelled() -> None:
    assert CancellationToken().is_cancelled() is False


def test_cancel_is_idempotent() -> None:
    token = CancellationToken()

    token.cancel()
    token.cancel()

    assert token.is_cancelled() is True


def test_wait_returns_once_cancelled() -> None:
    async def scenario() -> bool:
        token = CancellationToken()
        waiter = asyncio.ensure_future(token.wait())
        await asyncio.sleep(0)
        assert not waiter.done()
        token.cancel()
        await asyncio.wait_for(waiter, timeout=1)
        return token.is_cancelled()

    assert asyncio.run(scenario()) is True
