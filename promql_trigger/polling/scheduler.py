"""
Poll Scheduler

A single loop that fires every registered reader once per trigger.

Responsibility:
    Owns the list of readers and the cadence they are ticked at.
    Handles shutdown through an explicit stop signal.

Design Pattern:
    Flag + event based shutdown, as in a consumer loop. The cadence comes
    from an injectable async iterator (the trigger), so tests can drive
    rounds without a wall clock.

Concurrency:
    Readers tick sequentially by default, in registration order. With
    ``max_concurrency > 1`` readers of one round run in parallel, bounded
    by a semaphore; each reader's own tick stays sequential, and the next
    round starts only when the current one is finished, so one query is
    never polled twice at the same time.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable, Sequence

from promql_trigger.core.config.constants import DEFAULT_INTERVAL_SECONDS
from promql_trigger.core.logging import get_logger
from promql_trigger.polling.models import TickOutcome
from promql_trigger.polling.reader import Reader

logger = get_logger(__name__)

Trigger = AsyncIterator[object]
OutcomeCallback = Callable[[Reader, TickOutcome], None]


async def interval_trigger(interval: float, stop_event: asyncio.Event) -> AsyncIterator[float]:
    """
    Yield once per ``interval`` seconds until ``stop_event`` is set.

    The first round fires after one full interval. Waiting on the event
    instead of sleeping lets ``stop()`` interrupt the wait.
    """
    loop = asyncio.get_running_loop()
    next_fire = loop.time() + interval
    while not stop_event.is_set():
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=max(0.0, next_fire - loop.time()))
            return
        except asyncio.TimeoutError:
            pass
        yield loop.time()
        # Rounds longer than the interval skip missed fire times
        next_fire = max(next_fire + interval, loop.time())


class PollScheduler:
    """
    Drives all readers from one trigger.

    Attributes:
        readers: Readers in tick order
        interval: Seconds between rounds for the default trigger
        max_concurrency: Readers allowed to tick at once within a round
        rounds: Number of completed rounds
    """

    def __init__(
        self,
        readers: Sequence[Reader],
        interval: float = DEFAULT_INTERVAL_SECONDS,
        trigger: Trigger | None = None,
        max_concurrency: int = 1,
        on_outcome: OutcomeCallback | None = None,
    ):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")

        self.readers = list(readers)
        self.interval = interval
        self.max_concurrency = max_concurrency
        self.rounds = 0
        self._trigger = trigger
        self._on_outcome = on_outcome
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._running = False
        self._shutdown_event = asyncio.Event()

    @property
    def is_running(self) -> bool:
        return self._running

    async def run(self) -> None:
        """
        Tick all readers on every trigger until stopped or the trigger ends.

        Error Handling:
            An unexpected exception from a reader is logged and the
            remaining readers still tick; the loop keeps running.
        """
        self._running = True
        self._shutdown_event.clear()
        trigger = self._trigger or interval_trigger(self.interval, self._shutdown_event)

        logger.info(
            "Poll scheduler started",
            readers=len(self.readers),
            interval=self.interval,
            max_concurrency=self.max_concurrency,
        )

        try:
            async for _ in trigger:
                if not self._running or self._shutdown_event.is_set():
                    break
                await self.tick_all()
        except asyncio.CancelledError:
            logger.info("Poll scheduler cancelled")
            raise
        finally:
            self._running = False
            logger.info("Poll scheduler stopped", rounds=self.rounds)

    def stop(self) -> None:
        """Signal the loop to stop after the current round completes."""
        self._running = False
        self._shutdown_event.set()
        logger.info("Poll scheduler stop requested")

    async def tick_all(self) -> list[TickOutcome | None]:
        """
        Run one round over all readers.

        Returns:
            One entry per reader, in reader order; ``None`` where the
            reader raised unexpectedly
        """
        if self.max_concurrency == 1:
            outcomes = [await self._tick_one(reader) for reader in self.readers]
        else:
            outcomes = list(await asyncio.gather(*(self._tick_bounded(r) for r in self.readers)))

        self.rounds += 1
        return outcomes

    async def _tick_bounded(self, reader: Reader) -> TickOutcome | None:
        async with self._semaphore:
            return await self._tick_one(reader)

    async def _tick_one(self, reader: Reader) -> TickOutcome | None:
        try:
            outcome = await reader.tick()
        except Exception as e:
            logger.error(
                "Reader tick failed unexpectedly",
                path=reader.path,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            return None

        if self._on_outcome is not None:
            self._on_outcome(reader, outcome)
        return outcome
