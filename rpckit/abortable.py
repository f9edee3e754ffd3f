"""Waiting on work that a termination event can cut short."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable
from typing import Any, Optional, TypeVar

T = TypeVar("T")


async def _race(term: asyncio.Event, awaitable: Awaitable[Any]) -> tuple[bool, Any]:
    if term.is_set():
        if inspect.iscoroutine(awaitable):
            awaitable.close()
        return False, None

    work = asyncio.ensure_future(awaitable)
    stop = asyncio.ensure_future(term.wait())
    try:
        done, _ = await asyncio.wait({work, stop}, return_when=asyncio.FIRST_COMPLETED)
        if work in done:
            return True, work.result()
        return False, None
    finally:
        for task in (work, stop):
            if not task.done():
                task.cancel()
        await asyncio.gather(work, stop, return_exceptions=True)


async def abortable(term: asyncio.Event, awaitable: Awaitable[T]) -> Optional[T]:
    """Await ``awaitable`` unless ``term`` is set first; then return None."""
    _, value = await _race(term, awaitable)
    return value


async def abortable_sleep(term: asyncio.Event, seconds: float) -> bool:
    """Sleep for ``seconds``; return True if the full time passed, False if aborted."""
    completed, _ = await _race(term, asyncio.sleep(seconds))
    return completed