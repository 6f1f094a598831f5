"""Side effects (email, AI tagging, attachment linking) that must never fail the primary operation."""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from qadesk.core.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_best_effort(
    awaitable: Awaitable[T],
    description: str,
    default: T | None = None,
    timeout: float | None = None,
) -> T | None:
    """
    Await a side effect with a bounded timeout.

    Any failure (including the timeout) is logged and ``default`` is returned,
    so the caller's result and status code are unaffected.
    """
    limit = settings.side_effect_timeout_seconds if timeout is None else timeout
    try:
        return await asyncio.wait_for(awaitable, timeout=limit)
    except asyncio.TimeoutError:
        logger.warning("%s timed out after %.1fs", description, limit)
    except Exception as e:
        logger.error("%s failed: %s", description, e)
    return default
