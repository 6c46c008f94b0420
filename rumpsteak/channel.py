"""Unbounded asynchronous channels and bidirectional channel pairs."""

from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass
from typing import Any

__all__ = [
    "ChannelClosed",
    "Nil",
    "UnboundedSender",
    "UnboundedReceiver",
    "unbounded",
    "Bidirectional",
]


class ChannelClosed(Exception):
    """A message was sent on a closed channel."""

    def __init__(self) -> None:
        super().__init__("send failed because channel is closed")


@dataclass(frozen=True)
class Nil:
    """A route that carries nothing, for roles that never talk to each other."""

    @classmethod
    def pair(cls) -> tuple[Nil, Nil]:
        return cls(), cls()


class _Shared:
    def __init__(self) -> None:
        self.items: deque[Any] = deque()
        self.closed = False
        self.event = asyncio.Event()


class UnboundedSender:
    """The sending half of an unbounded channel."""

    def __init__(self, shared: _Shared) -> None:
        self._shared = shared

    async def send(self, item: Any) -> None:
        if self._shared.closed:
            raise ChannelClosed()
        self._shared.items.append(item)
        self._shared.event.set()

    def close(self) -> None:
        self._shared.closed = True
        self._shared.event.set()


class UnboundedReceiver:
    """The receiving half of an unbounded channel."""

    def __init__(self, shared: _Shared) -> None:
        self._shared = shared

    async def receive(self) -> Any:
        """The next item, or None once the channel is closed and drained."""
        shared = self._shared
        while not shared.items:
            if shared.closed:
                return None
            shared.event.clear()
            await shared.event.wait()
        return shared.items.popleft()

    def __aiter__(self) -> UnboundedReceiver:
        return self

    async def __anext__(self) -> Any:
        item = await self.receive()
        if item is None:
            raise StopAsyncIteration
        return item


def unbounded() -> tuple[UnboundedSender, UnboundedReceiver]:
    shared = _Shared()
    return UnboundedSender(shared), UnboundedReceiver(shared)


class Bidirectional:
    """A sender to a peer together with a receiver from the same peer."""

    def __init__(self, sender: Any, receiver: Any) -> None:
        self.sender = sender
        self.receiver = receiver

    @classmethod
    def pair(cls) -> tuple[Bidirectional, Bidirectional]:
        left_sender, right_receiver = unbounded()
        right_sender, left_receiver = unbounded()
        return cls(left_sender, left_receiver), cls(right_sender, right_receiver)

    async def send(self, item: Any) -> None:
        await self.sender.send(item)

    async def receive(self) -> Any:
        return await self.receiver.receive()

    def close(self) -> None:
        self.sender.close()