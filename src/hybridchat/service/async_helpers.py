"""Running coroutines from synchronous code.

Flask routes are synchronous while the services are async. All coroutines
are run on one long-lived event loop in a daemon thread so that async HTTP
clients created once at startup stay bound to the same loop.
"""

import asyncio
import logging
import threading
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)

_loop: asyncio.AbstractEventLoop | None = None
_lock = threading.Lock()


def _get_loop() -> asyncio.AbstractEventLoop:
    global _loop
    with _lock:
        if _loop is None or _loop.is_closed():
            _loop = asyncio.new_event_loop()
            thread = threading.Thread(
                target=_loop.run_forever, name="hybridchat-async", daemon=True
            )
            thread.start()
            logger.debug("Background event loop started")
        return _loop


def run_async(coro: Coroutine[Any, Any, Any]) -> Any:
    """Run an async coroutine to completion and return its result.

    This is useful for calling async functions from synchronous Flask routes.
    Exceptions raised by the coroutine propagate to the caller.

    Note:
        For CLI commands, prefer using asyncio.run() directly.
    """
    future = asyncio.run_coroutine_threadsafe(coro, _get_loop())
    return future.result()
