"""
Progress channel: typed import progress events for subscribers.

Producers call ``publish(event)``. Consumers either register a callback
with ``subscribe`` or, on a buffered channel, iterate it asynchronously:

    channel = ProgressChannel(buffered=True)
    task = asyncio.create_task(service.import_products(progress=channel))
    task.add_done_callback(lambda _: channel.close())
    async for event in channel:
        ...

The import service never closes a channel it was handed.
"""
import asyncio
import logging
from typing import Callable, List

from shopify_import.schemas.shopify_import import ImportProgress

logger = logging.getLogger("progress")

_CLOSED = object()


class ProgressChannel:
    """Fan-out of ImportProgress events to callbacks and one async reader."""

    def __init__(self, buffered: bool = False) -> None:
        self._subscribers: List[Callable[[ImportProgress], None]] = []
        self._queue: asyncio.Queue | None = asyncio.Queue() if buffered else None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, callback: Callable[[ImportProgress], None]) -> None:
        self._subscribers.append(callback)

    def publish(self, event: ImportProgress) -> None:
        if self._closed:
            logger.info("progress event dropped on closed channel stage=%s", event.stage)
            return
        for callback in self._subscribers:
            try:
                callback(event)
            except Exception as exc:
                # subscriber failures never reach the producer
                logger.warning("progress subscriber failed stage=%s detail=%s", event.stage, exc)
        if self._queue is not None:
            self._queue.put_nowait(event)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._queue is not None:
            self._queue.put_nowait(_CLOSED)

    def __aiter__(self):
        if self._queue is None:
            raise TypeError("unbuffered ProgressChannel cannot be iterated")
        return self

    async def __anext__(self) -> ImportProgress:
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item


class ScaledProgress:
    """
    Re-maps per-track progress into a window of the overall run.

    ``ScaledProgress(channel, start=50, span=50)`` turns current/total of
    the products track into an overall_progress between 50 and 100.
    """

    def __init__(self, parent, start: int, span: int) -> None:
        self._parent = parent
        self._start = start
        self._span = span

    def publish(self, event: ImportProgress) -> None:
        fraction = (event.current or 0) / (event.total or 1)
        overall = self._start + round(fraction * self._span)
        self._parent.publish(
            event.model_copy(update={"overall_progress": min(100, max(0, overall))})
        )
