"""Small helpers shared by the async pipeline stages."""

from __future__ import annotations

import asyncio
from functools import partial
from typing import Any, Callable, TypeVar

T = TypeVar("T")


async def run_blocking(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a blocking collaborator call (HTTP via urllib) in the default executor.

    In-flight calls are bounded by the default executor's worker count.
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(func, *args, **kwargs))


def one_line(text: str) -> str:
    """Collapse all whitespace runs, including newlines, to single spaces."""
    return " ".join(text.split())


__all__ = ["one_line", "run_blocking"]
