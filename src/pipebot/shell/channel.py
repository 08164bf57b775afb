"""Hand-off channels between pipeline stages.

A channel is an unbounded FIFO with any number of sender handles and one
receiver. It closes once every sender handle has been dropped; a receiver
then drains whatever is buffered and sees end-of-stream. No marker item is
ever placed in the queue.
"""

from __future__ import annotations

import logging
from collections import deque
from threading import Condition
from typing import Deque, Generic, Iterator, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ChannelClosed(Exception):
    """Raised by ``Receiver.recv`` once the channel is closed and empty."""
    pass


class _Channel(Generic[T]):
    """Shared state behind a sender/receiver pair."""

    def __init__(self):
        self._items: Deque[T] = deque()
        self._cond = Condition()
        self._senders = 0

    def attach(self) -> None:
        with self._cond:
            self._senders += 1

    def detach(self) -> None:
        with self._cond:
            self._senders -= 1
            if self._senders == 0:
                self._cond.notify_all()

    def put(self, item: T) -> None:
        with self._cond:
            self._items.append(item)
            self._cond.notify()

    def take(self) -> T:
        with self._cond:
            while not self._items:
                if self._senders == 0:
                    raise ChannelClosed()
                self._cond.wait()
            return self._items.popleft()

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._senders == 0


class Sender(Generic[T]):
    """Producer handle. Each clone keeps the channel open until dropped."""

    def __init__(self, channel: _Channel[T]):
        self._channel = channel
        self._dropped = False
        channel.attach()

    def send(self, item: T) -> None:
        """Queue an item for the receiver.

        Args:
            item: Item to send

        Raises:
            RuntimeError: If this handle was already dropped
        """
        if self._dropped:
            raise RuntimeError("send on a dropped sender")
        self._channel.put(item)

    def clone(self) -> Sender[T]:
        """Create another handle to the same channel."""
        if self._dropped:
            raise RuntimeError("clone of a dropped sender")
        return Sender(self._channel)

    def drop(self) -> None:
        """Release this handle. Dropping twice is a no-op."""
        if not self._dropped:
            self._dropped = True
            self._channel.detach()

    def __enter__(self) -> Sender[T]:
        return self

    def __exit__(self, *exc_info) -> None:
        self.drop()


class Receiver(Generic[T]):
    """Consumer handle. Iterating blocks until the channel closes."""

    def __init__(self, channel: _Channel[T]):
        self._channel = channel

    def recv(self) -> T:
        """Block until an item arrives.

        Returns:
            Next item in FIFO order

        Raises:
            ChannelClosed: If no sender remains and nothing is buffered
        """
        return self._channel.take()

    @property
    def closed(self) -> bool:
        """True once every sender has been dropped."""
        return self._channel.closed

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self._channel.take()
            except ChannelClosed:
                return


def channel() -> Tuple[Sender[T], Receiver[T]]:
    """Create a channel and return its first sender and its receiver."""
    state: _Channel[T] = _Channel()
    return Sender(state), Receiver(state)


def closed_receiver() -> Receiver[T]:
    """Return a receiver whose channel is already closed and empty."""
    sender, receiver = channel()
    sender.drop()
    return receiver
