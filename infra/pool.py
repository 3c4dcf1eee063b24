"""
Bounded work pool for remote operations.

Admission control for everything the runner dispatches against WebPageTest:
- At most `capacity` units run at once
- Extra submissions queue in arrival order (FIFO)
- A finishing unit hands its slot to the head of the queue
- Failures go to the submitting caller only; the pool keeps draining

All bookkeeping runs on the event loop thread without awaiting, so the
check/decrement/restore step of an admission is never interleaved with
another admission.

Usage:
    pool = WorkPool(capacity=10)

    future = pool.submit(lambda: client.run_test(url, runs=10))
    test_id = await future
"""

import asyncio
import logging
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Set

logger = logging.getLogger(__name__)

Work = Callable[[], Awaitable[Any]]


class WorkPool:
    """
    Fixed-capacity pool for asynchronous units of work.

    The pool never blocks the submitter: `submit()` returns a future right
    away and the unit runs once a slot is free. There is no cancellation;
    an admitted unit runs until its coroutine settles, and only then is the
    slot reclaimed.

    A capacity of 0 is accepted but nothing will ever run. Callers awaiting
    those futures wait forever.
    """

    def __init__(self, capacity: int):
        if capacity < 0:
            raise ValueError(f"Pool capacity must be >= 0, got {capacity}")

        self._capacity = capacity
        self._available = capacity
        self._queue: Deque[Callable[[], Awaitable[None]]] = deque()

        # Event loop only keeps weak references to tasks
        self._tasks: Set[asyncio.Task] = set()

        if capacity == 0:
            logger.warning("WorkPool created with capacity 0: submitted work will never run")

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def available(self) -> int:
        return self._available

    @property
    def running(self) -> int:
        return self._capacity - self._available

    @property
    def pending(self) -> int:
        return len(self._queue)

    def submit(self, work: Work) -> asyncio.Future:
        """
        Queue a unit of work and return a future for its outcome.

        Args:
            work: Zero-argument callable returning an awaitable

        Returns:
            Future resolved with the work's result, or carrying the
            exception it raised
        """
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        async def unit():
            try:
                result = await work()
            except asyncio.CancelledError:
                future.cancel()
                raise
            except Exception as e:
                if not future.done():
                    future.set_exception(e)
            else:
                if not future.done():
                    future.set_result(result)

        self._queue.append(unit)
        self._advance()
        return future

    def _advance(self):
        if not self._queue:
            return

        unit = self._queue.popleft()

        if self._available > 0:
            self._available -= 1
            task = asyncio.ensure_future(unit())
            self._tasks.add(task)
            task.add_done_callback(self._release)
        else:
            self._queue.appendleft(unit)

    def _release(self, task: asyncio.Task):
        self._tasks.discard(task)
        self._available += 1
        self._advance()

    def __repr__(self) -> str:
        return (
            f"WorkPool(capacity={self._capacity}, running={self.running}, "
            f"pending={self.pending})"
        )


async def gather_settled(futures) -> list:
    """
    Wait for every future and return results with exceptions in place.

    Equivalent of an all-settled wait: one failing unit does not abort
    the others.
    """
    return list(await asyncio.gather(*futures, return_exceptions=True))

