"""Bounded polling for asynchronous page side effects."""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

T = TypeVar("T")


async def wait_until(
    probe: Callable[[], Awaitable[Optional[T]]],
    timeout: float,
    interval: float,
) -> Optional[T]:
    """Call *probe* until it returns a truthy value or *timeout* seconds pass.

    The probe always runs at least once, and once more when the deadline is
    reached. Returns the first truthy result, or None when the deadline passes.
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + max(timeout, 0.0)
    interval = max(interval, 0.0)

    while True:
        result = await probe()
        if result:
            return result
        remaining = deadline - loop.time()
        if remaining <= 0:
            return None
        await asyncio.sleep(min(interval, remaining))
