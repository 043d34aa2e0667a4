"""In-process event fan-out.

Emitting never blocks the caller and never fails because of a subscriber:
coroutine handlers are scheduled as tasks on the running loop, plain callables
are invoked inline, and handler errors are logged.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import asyncio
from collections import defaultdict
from collections.abc import Callable
import inspect
from typing import Any

from loguru import logger

Handler = Callable[[Any], Any]


class EventSink(ABC):
    """Anything that accepts named events."""

    @abstractmethod
    def emit(self, name: str, payload: Any) -> None:
        """Deliver *payload* to listeners of *name* without waiting for them."""


class EventBus(EventSink):
    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = defaultdict(list)
        self._once: set[tuple[str, int]] = set()
        self._pending: set[asyncio.Task] = set()

    def subscribe(self, name: str, handler: Handler) -> None:
        self._handlers[name].append(handler)

    def unsubscribe(self, name: str, handler: Handler) -> None:
        handlers = self._handlers.get(name, [])
        if handler in handlers:
            handlers.remove(handler)
        self._once.discard((name, id(handler)))

    def once(self, name: str, handler: Handler) -> None:
        """Subscribe *handler* for the next *name* event only."""
        self.subscribe(name, handler)
        self._once.add((name, id(handler)))

    def listener_count(self, name: str) -> int:
        return len(self._handlers.get(name, []))

    def emit(self, name: str, payload: Any) -> None:
        for handler in list(self._handlers.get(name, [])):
            if (name, id(handler)) in self._once:
                self.unsubscribe(name, handler)
            self._dispatch(name, handler, payload)

    async def drain(self) -> None:
        """Wait for every scheduled coroutine handler to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _dispatch(self, name: str, handler: Handler, payload: Any) -> None:
        try:
            result = handler(payload)
        except Exception as exc:
            logger.error("[EventBus] Handler for '{}' failed: {}", name, exc)
            return

        if not inspect.isawaitable(result):
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # no running loop: the awaitable cannot be delivered
            logger.warning("[EventBus] No running loop for '{}' handler", name)
            if inspect.iscoroutine(result):
                result.close()
            return

        task = asyncio.ensure_future(result, loop=loop)
        self._pending.add(task)
        task.add_done_callback(lambda t: self._on_done(name, t))

    def _on_done(self, name: str, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("[EventBus] Async handler for '{}' failed: {}", name, exc)
