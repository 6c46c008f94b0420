"""Local session types recovered from state machines."""

from __future__ import annotations

from dataclasses import dataclass

from .fsm import Fsm, Transition

__all__ = ["Local", "End", "Recursion", "Variable", "Transitions", "from_fsm"]


class Local:
    """A local session type."""


@dataclass(frozen=True)
class End(Local):
    """The terminated protocol."""

    def __str__(self) -> str:
        return "end"


@dataclass(frozen=True)
class Recursion(Local):
    """A jump back to the enclosing binder of `variable`."""

    variable: int

    def __str__(self) -> str:
        return f"X{self.variable}"


@dataclass(frozen=True)
class Variable(Local):
    """A recursion binder for `variable` around `body`."""

    variable: int
    body: Local

    def __str__(self) -> str:
        return f"rec X{self.variable} . {self.body}"


@dataclass(frozen=True)
class Transitions(Local):
    """A choice between one or more transitions and their continuations."""

    transitions: tuple[tuple[Transition, Local], ...]

    def __post_init__(self) -> None:
        transitions = tuple(tuple(pair) for pair in self.transitions)
        if not transitions:
            raise ValueError("a choice needs at least one transition")
        object.__setattr__(self, "transitions", transitions)

    def __str__(self) -> str:
        branches = [f"{transition}; {continuation}" for transition, continuation in self.transitions]
        if len(branches) == 1:
            return branches[0]
        return "[" + ", ".join(branches) + "]"


class _Builder:
    def __init__(self, fsm: Fsm) -> None:
        size = fsm.size()[0]
        self._fsm = fsm
        self._seen = [False] * size
        self._looped: list[int | None] = [None] * size
        self._variables = 0

    def _variable(self, state: int) -> int:
        variable = self._looped[state]
        if variable is None:
            variable = self._variables
            self._looped[state] = variable
            self._variables += 1
        return variable

    def build(self, state: int) -> Local:
        if self._seen[state]:
            return Recursion(self._variable(state))

        outgoing = list(self._fsm.transitions_from(state))
        if not outgoing:
            return End()

        self._seen[state] = True
        body = Transitions(
            tuple((transition, self.build(target)) for target, transition in outgoing)
        )
        self._seen[state] = False

        variable = self._looped[state]
        if variable is not None:
            self._looped[state] = None
            return Variable(variable, body)
        return body


def from_fsm(fsm: Fsm) -> Local:
    """Build the local type of a state machine, starting from state 0."""
    if fsm.size()[0] == 0:
        raise ValueError("a local type needs a state machine with at least one state")
    return _Builder(fsm).build(0)