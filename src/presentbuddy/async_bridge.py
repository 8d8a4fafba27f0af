"""Event loop thread shared by the hotkey listener and the shutdown path.

Orchestrator coroutines must all run on one loop. Hotkey callbacks and
signal handlers are synchronous, so they hand coroutines to this loop and
get a concurrent.futures.Future back.
"""

import asyncio
import atexit
from concurrent.futures import Future
import logging
import threading
from typing import Any, Coroutine

logger = logging.getLogger(__name__)


class AsyncBridge:
    """An asyncio loop running forever in a daemon thread."""

    def __init__(self):
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._ready = threading.Event()
        self._lock = threading.Lock()

    def _serve(self):
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        self._ready.set()
        try:
            loop.run_forever()
        finally:
            tasks = asyncio.all_tasks(loop)
            for task in tasks:
                task.cancel()
            if tasks:
                loop.run_until_complete(asyncio.gather(*tasks, return_exceptions=True))
            loop.close()
            self._loop = None

    def start(self) -> None:
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._ready.clear()
            self._thread = threading.Thread(target=self._serve, name="presentbuddy-loop", daemon=True)
            self._thread.start()
            if not self._ready.wait(timeout=5.0):
                raise RuntimeError("Event loop thread did not start")

    def stop(self) -> None:
        with self._lock:
            if self._loop is not None:
                self._loop.call_soon_threadsafe(self._loop.stop)
            if self._thread is not None:
                self._thread.join(timeout=5.0)
                self._thread = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and self._loop is not None

    def submit(self, coro: Coroutine[Any, Any, Any]) -> Future:
        if self._loop is None:
            raise RuntimeError("AsyncBridge not started")
        return asyncio.run_coroutine_threadsafe(coro, self._loop)

    def run_sync(self, coro: Coroutine[Any, Any, Any], timeout: float | None = None) -> Any:
        """Block the calling thread for the result; the coroutine survives a timeout."""
        return self.submit(coro).result(timeout=timeout)


_bridge: AsyncBridge | None = None
_bridge_lock = threading.Lock()


def get_async_bridge() -> AsyncBridge:
    """Process-wide bridge, started on first use."""
    global _bridge
    with _bridge_lock:
        if _bridge is None:
            _bridge = AsyncBridge()
            atexit.register(_bridge.stop)
        _bridge.start()
        return _bridge
