import asyncio
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Optional, Tuple, TypeVar

from stockwatch.utils.logger import logger

T = TypeVar("T")

# Finnhub allows roughly 5 requests per second.
DEFAULT_DELAY_SECONDS = 0.2


class RequestThrottle:
    """
    Single-lane FIFO queue for outbound provider calls.

    Tasks run one at a time in submission order, with a fixed pause after each
    one. A failing task only rejects its own future; the drain loop logs the
    failure and moves on to the next task.
    """

    def __init__(self, delay: float = DEFAULT_DELAY_SECONDS):
        self.delay = delay
        self._queue: Deque[Tuple[Callable[[], Awaitable[Any]], asyncio.Future]] = deque()
        self._draining = False
        self._drain_task: Optional[asyncio.Task] = None

    @property
    def is_draining(self) -> bool:
        return self._draining

    @property
    def pending(self) -> int:
        """Number of tasks queued but not yet started."""
        return len(self._queue)

    def submit(self, task: Callable[[], Awaitable[T]]) -> "asyncio.Future[T]":
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        self._queue.append((task, future))
        if not self._draining:
            self._draining = True
            self._drain_task = loop.create_task(self._drain())
        return future

    async def wait_idle(self) -> None:
        """Wait until the queue has been drained."""
        while self._draining and self._drain_task is not None:
            await asyncio.shield(self._drain_task)

    async def _drain(self) -> None:
        logger.debug("Request queue draining started.")
        try:
            while self._queue:
                task, future = self._queue.popleft()
                await self._run(task, future)
                await asyncio.sleep(self.delay)
        finally:
            self._draining = False
            logger.debug("Request queue empty, drain loop idle.")

    async def _run(self, task: Callable[[], Awaitable[Any]], future: asyncio.Future) -> bool:
        try:
            result = await task()
        except Exception as e:
            logger.error(f"❌ Error processing API request: {e}", exc_info=True)
            if not future.done():
                future.set_exception(e)
            return False
        if not future.done():
            future.set_result(result)
        return True
