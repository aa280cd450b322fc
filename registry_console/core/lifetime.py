"""Task scopes tying in-flight requests to a component's lifetime.

A form owns one scope. Every request it starts runs as a task of that
scope; disposing the form closes the scope, which cancels whatever is still
pending. The awaiting side then sees ScopeClosedError instead of a result,
so nothing mutates a component after it was torn down.
"""

import asyncio
import logging
from typing import Any, Awaitable, Coroutine, Set, TypeVar

from registry_console.core.exceptions import ScopeClosedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TaskScope:
    def __init__(self, name: str = "component"):
        self.name = name
        self._tasks: Set["asyncio.Task[Any]"] = set()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        return sum(1 for task in self._tasks if not task.done())

    def spawn(self, coro: Coroutine[Any, Any, T]) -> "asyncio.Task[T]":
        """Start ``coro`` as a task owned by this scope."""
        if self._closed:
            coro.close()
            raise ScopeClosedError(f"{self.name} is disposed")
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def run(self, coro: Coroutine[Any, Any, T]) -> T:
        """Run ``coro`` in this scope and return its result.

        Raises:
            ScopeClosedError: If the scope was closed before or while the
                work was running.
        """
        task = self.spawn(coro)
        return await self.wait(task)

    async def wait(self, awaitable: Awaitable[T]) -> T:
        try:
            return await awaitable
        except asyncio.CancelledError:
            if self._closed:
                raise ScopeClosedError(f"{self.name} was disposed while a request was in flight") from None
            raise

    def close(self) -> None:
        """Cancel pending tasks. Idempotent."""
        if self._closed:
            return
        self._closed = True
        cancelled = 0
        for task in list(self._tasks):
            if not task.done():
                task.cancel()
                cancelled += 1
        if cancelled:
            logger.debug(f"Cancelled {cancelled} in-flight request(s) of {self.name}")
