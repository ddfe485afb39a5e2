# src/filestages/core/channel.py
"""Channels connecting one stage's output to the next stage's input.

A channel is the only object two stages share. It carries records in push
order and owns the end-of-stream signal for its edge:

- push(record): producer side. Suspends until the consumer takes the record.
  This rendezvous is the backpressure mechanism - a slow consumer throttles a
  fast producer without any extra buffering.
- end(): producer side. Idempotent. Waits for pending pushes to be taken,
  then marks the channel ENDED.
- close(): consumer side. Idempotent early close. Pending pushes are
  discarded (their push() returns False) and the channel is ENDED at once.
- on_end(listener) / wait_ended(): observe the transition to ENDED.

State machine (guarded, every transition idempotent):

    OPEN --end()--> END_REQUESTED --flushed--> ENDED
    OPEN --end() with nothing pending--------> ENDED
    OPEN / END_REQUESTED --close()-----------> ENDED

The end event fires exactly once no matter how end() and close() race, so
listeners registered by stages run exactly once per channel.

Scheduling is asyncio cooperative: a channel must be used from a single
event loop and is not thread-safe.
"""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass

from filestages.contracts.enums import ChannelState
from filestages.contracts.errors import ChannelClosedError

type EndListener = Callable[[Channel], None]


@dataclass(eq=False)
class _PendingPush[T]:
    """A pushed record waiting for the consumer to take it."""

    record: T
    accepted: asyncio.Future[bool]


class Channel[T]:
    """Ordered rendezvous conduit between one producer and one consumer.

    Usage:
        channel: Channel[str] = Channel("substitute->envsub")

        # producer
        if await channel.push("text"):
            ...
        await channel.end()

        # consumer
        async for record in channel:
            ...

        # consumer giving up early
        channel.close()

    Invariants:
        - Records are delivered in push order
        - The end event fires at most once, after every pushed record was
          either delivered or discarded by close()
        - Nothing can be pushed once end() or close() has been called
    """

    def __init__(self, name: str = "channel") -> None:
        self.name = name
        self._state = ChannelState.OPEN
        self._closed_by_consumer = False
        self._pending: deque[_PendingPush[T]] = deque()
        self._waiters: list[asyncio.Future[None]] = []
        self._listeners: list[EndListener] = []
        self._ended_event = asyncio.Event()

        self._pushed = 0
        self._delivered = 0

    def __repr__(self) -> str:
        return f"<Channel {self.name!r} state={self._state.value} pending={len(self._pending)}>"

    # --- State ---

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def ended(self) -> bool:
        """True once the end event has fired (normal end or consumer close)."""
        return self._state is ChannelState.ENDED

    @property
    def closed(self) -> bool:
        """True if the consumer closed the channel early."""
        return self._closed_by_consumer

    @property
    def pushed(self) -> int:
        """Number of records handed to push()."""
        return self._pushed

    @property
    def delivered(self) -> int:
        """Number of records taken by the consumer."""
        return self._delivered

    # --- Producer side ---

    async def push(self, record: T) -> bool:
        """Hand a record to the consumer.

        Suspends until the consumer takes the record.

        Args:
            record: Record to deliver

        Returns:
            True if the consumer took the record, False if the consumer
            closed the channel while the push was pending.

        Raises:
            ChannelClosedError: If end() or close() was already called
        """
        if self._state is not ChannelState.OPEN:
            raise ChannelClosedError(self.name, self._state.value)

        entry = _PendingPush(record, asyncio.get_running_loop().create_future())
        self._pending.append(entry)
        self._pushed += 1
        self._wake()

        try:
            return await entry.accepted
        except asyncio.CancelledError:
            # A cancelled producer withdraws its record
            if entry in self._pending:
                self._pending.remove(entry)
                self._wake()
            raise

    async def end(self) -> None:
        """Signal that no more records will be pushed.

        Idempotent. Returns once the channel is ENDED, i.e. after every
        pending push was taken by the consumer or discarded by close().
        """
        if self._state is ChannelState.OPEN:
            self._state = ChannelState.END_REQUESTED
            self._wake()

        while self._pending and self._state is not ChannelState.ENDED:
            await self._wait_for_change()

        self._finish()

    # --- Consumer side ---

    def close(self) -> None:
        """Close the channel from the consumer side.

        Idempotent. Pending pushes resolve to False and the end event fires
        immediately, telling the producer to stop.
        """
        if self._state is ChannelState.ENDED:
            return

        self._closed_by_consumer = True
        while self._pending:
            entry = self._pending.popleft()
            if not entry.accepted.done():
                entry.accepted.set_result(False)
        self._finish()

    def __aiter__(self) -> Channel[T]:
        return self

    async def __anext__(self) -> T:
        while not self._pending:
            if self._state is ChannelState.ENDED:
                raise StopAsyncIteration
            if self._state is ChannelState.END_REQUESTED:
                # Everything pushed has been taken; complete the end ourselves
                self._finish()
                raise StopAsyncIteration
            await self._wait_for_change()

        entry = self._pending.popleft()
        self._delivered += 1
        if not entry.accepted.done():
            entry.accepted.set_result(True)
        self._wake()
        return entry.record

    # --- End observation ---

    def on_end(self, listener: EndListener) -> None:
        """Register a listener called with this channel once it ends.

        Listeners are synchronous and run exactly once. Registering on an
        already-ended channel calls the listener immediately.
        """
        if self._state is ChannelState.ENDED:
            listener(self)
            return
        self._listeners.append(listener)

    async def wait_ended(self) -> None:
        """Wait until the channel has ended."""
        await self._ended_event.wait()

    # --- Internals ---

    def _finish(self) -> None:
        if self._state is ChannelState.ENDED:
            return

        self._state = ChannelState.ENDED
        self._ended_event.set()
        self._wake()

        listeners, self._listeners = self._listeners, []
        for listener in listeners:
            listener(self)

    def _wake(self) -> None:
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)

    async def _wait_for_change(self) -> None:
        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            await waiter
        finally:
            if waiter in self._waiters:
                self._waiters.remove(waiter)


async def collect[T](channel: Channel[T]) -> list[T]:
    """Drain a channel into a list.

    Acts as a terminal consumer: takes every record until the channel ends.
    Useful for tests and for hosts that want buffered output.
    """
    return [record async for record in channel]
