"""Binary and three-party sessions built from one-shot channels."""

from __future__ import annotations

import asyncio
import enum
from typing import Any, Awaitable, Callable, Sequence

from .fsm import Action

__all__ = [
    "Side",
    "End",
    "Send",
    "Receive",
    "new_session",
    "SessionPair",
    "session2",
    "session3",
]


class Side(enum.Enum):
    """Which of the two sessions of a pair acts next."""

    LEFT = "left"
    RIGHT = "right"


class _Oneshot:
    def __init__(self) -> None:
        self.event = asyncio.Event()
        self.value: Any = None


class _Endpoint:
    def __init__(self) -> None:
        self._used = False

    def _take(self) -> None:
        if self._used:
            raise RuntimeError("session endpoint was already used")
        self._used = True


class End(_Endpoint):
    """A finished session."""


class Send(_Endpoint):
    def __init__(self, channel: _Oneshot, rest: tuple[Action, ...]) -> None:
        super().__init__()
        self._channel = channel
        self._rest = rest

    def send(self, value: Any) -> _Endpoint:
        self._take()
        this, other = new_session(self._rest)
        self._channel.value = (value, other)
        self._channel.event.set()
        return this


class Receive(_Endpoint):
    def __init__(self, channel: _Oneshot) -> None:
        super().__init__()
        self._channel = channel

    async def receive(self) -> tuple[Any, _Endpoint]:
        self._take()
        await self._channel.event.wait()
        return self._channel.value


def new_session(protocol: Sequence[Action]) -> tuple[_Endpoint, _Endpoint]:
    """An endpoint following `protocol` and its dual."""
    protocol = tuple(protocol)
    if not protocol:
        return End(), End()
    channel = _Oneshot()
    rest = protocol[1:]
    if protocol[0] is Action.OUTPUT:
        return Send(channel, rest), Receive(channel)
    return Receive(channel), Send(channel, tuple(action.dual() for action in rest))


class SessionPair:
    """Two sessions used in the interleaving fixed by a queue of sides."""

    def __init__(self, left: _Endpoint, right: _Endpoint, queue: Sequence[Side]) -> None:
        self.left = left
        self.right = right
        self.queue = tuple(queue)

    def _next(self, kind: type) -> tuple[Side, Any]:
        if not self.queue:
            raise RuntimeError("the session pair has finished")
        side = self.queue[0]
        endpoint = self.left if side is Side.LEFT else self.right
        if not isinstance(endpoint, kind):
            raise TypeError(f"the {side.value} session cannot {kind.__name__.lower()} now")
        return side, endpoint

    def _advance(self, side: Side, endpoint: _Endpoint) -> SessionPair:
        if side is Side.LEFT:
            return SessionPair(endpoint, self.right, self.queue[1:])
        return SessionPair(self.left, endpoint, self.queue[1:])

    def is_end(self) -> bool:
        return not self.queue and isinstance(self.left, End) and isinstance(self.right, End)

    def send(self, value: Any) -> SessionPair:
        side, endpoint = self._next(Send)
        return self._advance(side, endpoint.send(value))

    async def receive(self) -> tuple[Any, SessionPair]:
        side, endpoint = self._next(Receive)
        value, rest = await endpoint.receive()
        return value, self._advance(side, rest)


async def session2(
    protocol: Sequence[Action], f: Callable[[_Endpoint, _Endpoint], Awaitable[Any]]
) -> Any:
    """Run `f` on both endpoints of a binary session."""
    this, other = new_session(protocol)
    return await f(this, other)


async def session3(
    protocols: Sequence[Sequence[Action]],
    queues: Sequence[Sequence[Side]],
    f1: Callable[[SessionPair], Awaitable[SessionPair]],
    f2: Callable[[SessionPair], Awaitable[SessionPair]],
    f3: Callable[[SessionPair], Awaitable[SessionPair]],
) -> list[SessionPair]:
    """Run three parties concurrently; protocols are 1-2, 1-3 and 2-3 from the first's view."""
    p1, p2, p3 = protocols
    q1, q2, q3 = queues
    s1, s2, s3 = new_session(p1), new_session(p2), new_session(p3)
    results = await asyncio.gather(
        f1(SessionPair(s1[0], s2[0], q1)),
        f2(SessionPair(s1[1], s3[0], q2)),
        f3(SessionPair(s2[1], s3[1], q3)),
    )
    for result in results:
        if not result.is_end():
            raise RuntimeError("a party did not finish its sessions")
    return list(results)