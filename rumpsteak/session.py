"""Multiparty session types checked at run time over asynchronous routes."""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import combinations
from typing import Any, Awaitable, Callable

from .channel import Bidirectional

__all__ = [
    "ReceiveError",
    "EmptyStreamError",
    "UnexpectedTypeError",
    "Role",
    "connect",
    "End",
    "Send",
    "Receive",
    "Select",
    "Branch",
    "Ended",
    "Sending",
    "Receiving",
    "Selecting",
    "Branching",
    "session",
    "try_session",
]


class ReceiveError(Exception):
    """A message could not be received."""


class EmptyStreamError(ReceiveError):
    def __init__(self) -> None:
        super().__init__("receiver stream is empty")


class UnexpectedTypeError(ReceiveError):
    def __init__(self) -> None:
        super().__init__("received message with an unexpected type")


class Role:
    """A participant, holding one route to each peer it talks to."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._routes: dict[str, Any] = {}

    def __repr__(self) -> str:
        return f"Role({self.name!r})"

    def add_route(self, peer: Any, channel: Any) -> None:
        self._routes[peer_name(peer)] = channel

    def route(self, peer: Any) -> Any:
        name = peer_name(peer)
        try:
            return self._routes[name]
        except KeyError:
            raise KeyError(f"role {self.name!r} has no route to {name!r}") from None


def peer_name(peer: Any) -> str:
    return peer.name if isinstance(peer, Role) else peer


def connect(*args: str) -> tuple[Role, ...]:
    """Create roles with the given names, joined pairwise by bidirectional channels."""
    roles = tuple(Role(name) for name in args)
    for left, right in combinations(roles, 2):
        left_channel, right_channel = Bidirectional.pair()
        left.add_route(right, left_channel)
        right.add_route(left, right_channel)
    return roles


class _SessionType:
    """Base of session type descriptions."""


@dataclass(frozen=True, eq=False)
class End(_SessionType):
    pass


@dataclass(frozen=True, eq=False)
class Send(_SessionType):
    peer: Any
    label: type
    next: Any


@dataclass(frozen=True, eq=False)
class Receive(_SessionType):
    peer: Any
    label: type
    next: Any


@dataclass(frozen=True, eq=False)
class Select(_SessionType):
    peer: Any
    choices: dict = field(default_factory=dict)


@dataclass(frozen=True, eq=False)
class Branch(_SessionType):
    peer: Any
    choices: dict = field(default_factory=dict)


def resolve(session_type: Any) -> _SessionType:
    """A session type, calling a zero-argument factory used for recursion."""
    if not isinstance(session_type, _SessionType) and callable(session_type):
        session_type = session_type()
    if not isinstance(session_type, _SessionType):
        raise TypeError(f"not a session type: {session_type!r}")
    return session_type


class _State:
    def __init__(self, role: Role, session_type: _SessionType) -> None:
        self._role = role
        self._type = session_type
        self._used = False

    def _take(self) -> _SessionType:
        if self._used:
            raise RuntimeError("session state was already used")
        self._used = True
        return self._type


class Ended(_State):
    """A terminated protocol."""


class Sending(_State):
    async def send(self, label: Any) -> _State:
        session_type = self._take()
        if not isinstance(label, session_type.label):
            raise TypeError(f"expected a {session_type.label.__name__} label")
        await self._role.route(session_type.peer).send(label)
        return _from_state(self._role, session_type.next)


class Receiving(_State):
    async def receive(self) -> tuple[Any, _State]:
        session_type = self._take()
        message = await self._role.route(session_type.peer).receive()
        if message is None:
            raise EmptyStreamError()
        if not isinstance(message, session_type.label):
            raise UnexpectedTypeError()
        return message, _from_state(self._role, session_type.next)


class Selecting(_State):
    async def select(self, label: Any) -> _State:
        session_type = self._take()
        for cls, continuation in session_type.choices.items():
            if isinstance(label, cls):
                await self._role.route(session_type.peer).send(label)
                return _from_state(self._role, continuation)
        raise TypeError(f"{type(label).__name__} is not one of the choices")


class Branching(_State):
    async def branch(self) -> tuple[Any, _State]:
        session_type = self._take()
        message = await self._role.route(session_type.peer).receive()
        if message is None:
            raise EmptyStreamError()
        for cls, continuation in session_type.choices.items():
            if isinstance(message, cls):
                return message, _from_state(self._role, continuation)
        raise UnexpectedTypeError()


_STATES = {End: Ended, Send: Sending, Receive: Receiving, Select: Selecting, Branch: Branching}


def _from_state(role: Role, session_type: Any) -> _State:
    session_type = resolve(session_type)
    return _STATES[type(session_type)](role, session_type)


async def try_session(
    role: Role, session_type: Any, f: Callable[[_State], Awaitable[tuple[Any, Ended]]]
) -> Any:
    """Run `f` on the initial state; it must return its output and the final state."""
    result = await f(_from_state(role, session_type))
    output, end = result
    if not isinstance(end, Ended):
        raise TypeError("session did not run to its end")
    return output


async def session(
    role: Role, session_type: Any, f: Callable[[_State], Awaitable[tuple[Any, Ended]]]
) -> Any:
    """Like try_session, for sessions whose function raises nothing of its own."""
    return await try_session(role, session_type, f)