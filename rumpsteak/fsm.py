"""Communicating finite state machines and the values that label their transitions."""

from __future__ import annotations

import enum
import sys
from dataclasses import dataclass, field
from typing import Any, Iterator

__all__ = [
    "Nil",
    "Action",
    "Associativity",
    "UnaryOp",
    "BinaryOp",
    "Expression",
    "Name",
    "Boolean",
    "Number",
    "Unary",
    "Binary",
    "NamedParameter",
    "Parameters",
    "Message",
    "Transition",
    "AddTransitionError",
    "SelfCommunicationError",
    "MultipleRolesError",
    "MultipleActionsError",
    "Fsm",
    "Normalizer",
]


@dataclass(frozen=True)
class Nil:
    """A role that carries no information; it displays as nothing."""

    def __str__(self) -> str:
        return ""


class Action(enum.Enum):
    """Whether a transition receives or sends."""

    INPUT = "?"
    OUTPUT = "!"

    def dual(self) -> Action:
        return Action.OUTPUT if self is Action.INPUT else Action.INPUT

    def __str__(self) -> str:
        return self.value


class Associativity(enum.Enum):
    LEFT = "left"
    RIGHT = "right"


class UnaryOp(enum.Enum):
    NOT = "!"
    MINUS = "-"

    def precedence(self) -> int:
        return 2

    def associativity(self) -> Associativity:
        return Associativity.RIGHT

    def __str__(self) -> str:
        return self.value


class BinaryOp(enum.Enum):
    LAND = "&&"
    LOR = "||"
    EQUAL = "="
    NOT_EQUAL = "<>"
    LESS = "<"
    GREATER = ">"
    LESS_EQUAL = "<="
    GREATER_EQUAL = ">="
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    AND = "&"
    XOR = "^"
    OR = "|"

    def precedence(self) -> int:
        return _BINARY_PRECEDENCE[self]

    def associativity(self) -> Associativity:
        return Associativity.LEFT

    def __str__(self) -> str:
        return self.value


_BINARY_PRECEDENCE = {
    BinaryOp.LAND: 11,
    BinaryOp.LOR: 12,
    BinaryOp.EQUAL: 7,
    BinaryOp.NOT_EQUAL: 7,
    BinaryOp.LESS: 6,
    BinaryOp.GREATER: 6,
    BinaryOp.LESS_EQUAL: 6,
    BinaryOp.GREATER_EQUAL: 6,
    BinaryOp.ADD: 4,
    BinaryOp.SUBTRACT: 4,
    BinaryOp.MULTIPLY: 3,
    BinaryOp.DIVIDE: 3,
    BinaryOp.AND: 8,
    BinaryOp.XOR: 9,
    BinaryOp.OR: 10,
}


def _bracketed(op, associativity: Associativity, precedence: int, text: str) -> str:
    if op.precedence() > precedence or (
        op.precedence() == precedence and op.associativity() is associativity
    ):
        return f"({text})"
    return text


class Expression:
    """A refinement expression; displayed with the fewest brackets needed."""

    def _format(self, associativity: Associativity, precedence: int) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self._format(Associativity.LEFT, sys.maxsize)


@dataclass(frozen=True)
class Name(Expression):
    name: Any

    def _format(self, associativity: Associativity, precedence: int) -> str:
        return str(self.name)


@dataclass(frozen=True)
class Boolean(Expression):
    value: bool

    def _format(self, associativity: Associativity, precedence: int) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class Number(Expression):
    value: int

    def _format(self, associativity: Associativity, precedence: int) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Unary(Expression):
    op: UnaryOp
    operand: Expression

    def _format(self, associativity: Associativity, precedence: int) -> str:
        inner = self.operand._format(Associativity.LEFT, self.op.precedence())
        return _bracketed(self.op, associativity, precedence, f"{self.op}{inner}")


@dataclass(frozen=True)
class Binary(Expression):
    op: BinaryOp
    left: Expression
    right: Expression

    def _format(self, associativity: Associativity, precedence: int) -> str:
        own = self.op.precedence()
        left = self.left._format(Associativity.RIGHT, own)
        right = self.right._format(Associativity.LEFT, own)
        return _bracketed(self.op, associativity, precedence, f"{left} {self.op} {right}")


@dataclass(frozen=True)
class NamedParameter:
    name: Any
    sort: Any
    refinement: Any = None

    def __str__(self) -> str:
        text = f"{self.name}: {self.sort}"
        if self.refinement is not None:
            text += f"{{{self.refinement}}}"
        return text


@dataclass(frozen=True)
class Parameters:
    """The parameters of a message: plain sorts or named parameters."""

    values: tuple = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))

    def is_empty(self) -> bool:
        return not self.values

    def __str__(self) -> str:
        return ", ".join(str(value) for value in self.values)


@dataclass(frozen=True)
class Message:
    label: Any
    parameters: Parameters = field(default_factory=Parameters)
    assignments: tuple = ()

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "assignments", tuple(tuple(pair) for pair in self.assignments)
        )

    @classmethod
    def from_label(cls, label: Any) -> Message:
        return cls(label)

    def __str__(self) -> str:
        text = str(self.label)
        if not self.parameters.is_empty():
            text += f"({self.parameters})"
        if self.assignments:
            inner = ", ".join(f"{name}: {value}" for name, value in self.assignments)
            text += f"[{inner}]"
        return text


@dataclass(frozen=True)
class Transition:
    role: Any
    action: Action
    message: Message

    def __str__(self) -> str:
        return f"{self.role}{self.action}{self.message}"


class AddTransitionError(Exception):
    """A transition cannot be added to a state machine."""


class SelfCommunicationError(AddTransitionError):
    def __init__(self) -> None:
        super().__init__("cannot perform self-communication")


class MultipleRolesError(AddTransitionError):
    def __init__(self) -> None:
        super().__init__("cannot communicate with different roles from the same state")


class MultipleActionsError(AddTransitionError):
    def __init__(self) -> None:
        super().__init__("cannot both send and receive from the same state")


@dataclass(frozen=True)
class _Choices:
    role: Any
    action: Action


class Fsm:
    """A state machine for one role; states are numbered from zero in creation order."""

    def __init__(self, role: Any) -> None:
        self.role = role
        self._states: list[_Choices | None] = []
        self._edges: list[tuple[int, int, Message]] = []
        self._outgoing: list[list[int]] = []

    def __repr__(self) -> str:
        states, transitions = self.size()
        return f"Fsm(role={self.role!r}, states={states}, transitions={transitions})"

    def size(self) -> tuple[int, int]:
        return len(self._states), len(self._edges)

    def states(self) -> range:
        return range(len(self._states))

    def _transition(self, source: int, message: Message) -> Transition:
        choices = self._states[source]
        assert choices is not None
        return Transition(choices.role, choices.action, message)

    def transitions(self) -> Iterator[tuple[int, int, Transition]]:
        """Every transition, in the order it was added."""
        for source, target, message in self._edges:
            yield source, target, self._transition(source, message)

    def transitions_from(self, state: int) -> Iterator[tuple[int, Transition]]:
        """Transitions leaving a state, the most recently added first."""
        self._check_state(state)
        for edge in reversed(self._outgoing[state]):
            _, target, message = self._edges[edge]
            yield target, self._transition(state, message)

    def add_state(self) -> int:
        self._states.append(None)
        self._outgoing.append([])
        return len(self._states) - 1

    def _check_state(self, state: int) -> None:
        if not 0 <= state < len(self._states):
            raise IndexError(f"state {state} does not exist")

    def add_transition(self, source: int, target: int, transition: Transition) -> None:
        self._check_state(source)
        self._check_state(target)
        if transition.role == self.role:
            raise SelfCommunicationError()

        choices = _Choices(transition.role, transition.action)
        expected = self._states[source]
        if expected is None:
            self._states[source] = choices
        else:
            if choices.role != expected.role:
                raise MultipleRolesError()
            if choices.action != expected.action:
                raise MultipleActionsError()

        self._outgoing[source].append(len(self._edges))
        self._edges.append((source, target, transition.message))

    def _with(self, role: Any, states: list[_Choices | None]) -> Fsm:
        fsm = Fsm(role)
        fsm._states = states
        fsm._edges = list(self._edges)
        fsm._outgoing = [list(edges) for edges in self._outgoing]
        return fsm

    def to_binary(self) -> Fsm:
        """Erase the peer roles; every transition must involve the same peer."""
        peer = None
        states: list[_Choices | None] = []
        for choices in self._states:
            if choices is None:
                states.append(None)
                continue
            if peer is None:
                peer = (choices.role,)
            elif peer[0] != choices.role:
                raise ValueError(
                    f"expected every transition to involve {peer[0]!r}, found {choices.role!r}"
                )
            states.append(_Choices(Nil(), choices.action))
        return self._with(Nil(), states)

    def dual(self, role: Any) -> Fsm:
        """The machine of the peer `role`, with every action reversed."""
        states: list[_Choices | None] = []
        for choices in self._states:
            if choices is None:
                states.append(None)
                continue
            if choices.role != role:
                raise ValueError(f"expected peer {role!r}, found {choices.role!r}")
            states.append(_Choices(self.role, choices.action.dual()))
        return self._with(role, states)


class Normalizer:
    """Renames roles and labels to integers, consistently across machines."""

    def __init__(self) -> None:
        self._roles: dict[Any, int] = {}
        self._labels: dict[Any, int] = {}

    @staticmethod
    def _index(table: dict[Any, int], key: Any) -> int:
        return table.setdefault(key, len(table))

    def normalize(self, fsm: Fsm) -> Fsm:
        output = Fsm(self._index(self._roles, fsm.role))
        output._states = [
            None
            if choices is None
            else _Choices(self._index(self._roles, choices.role), choices.action)
            for choices in fsm._states
        ]
        output._edges = [
            (source, target, Message.from_label(self._index(self._labels, message.label)))
            for source, target, message in fsm._edges
        ]
        output._outgoing = [list(edges) for edges in fsm._outgoing]
        return output