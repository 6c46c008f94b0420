"""Conversion of session types into communicating state machines."""

from __future__ import annotations

from typing import Any

from .fsm import Action, Fsm, Message, Transition
from .session import Branch, End, Receive, Select, Send, peer_name, resolve

__all__ = ["Serializer", "serialize"]


class Serializer:
    """Builds a state machine, giving each distinct session type object one state."""

    def __init__(self, role: Any) -> None:
        self.fsm = Fsm(peer_name(role))
        self._history: dict[int, int] = {}
        self._previous: tuple[int, Transition] | None = None

    def _add_state(self, session_type: Any) -> int | None:
        key = id(session_type)
        known = key in self._history
        state = self._history[key] if known else self.fsm.add_state()
        self._history[key] = state
        if self._previous is not None:
            source, transition = self._previous
            self._previous = None
            self.fsm.add_transition(source, state, transition)
        return None if known else state

    def _choice(self, state: int, peer: Any, action: Action, label: type, next_type: Any) -> None:
        message = Message.from_label(label.__name__)
        self._previous = (state, Transition(peer_name(peer), action, message))
        self.serialize(next_type)

    def serialize(self, session_type: Any) -> None:
        session_type = resolve(session_type)
        state = self._add_state(session_type)
        if state is None or isinstance(session_type, End):
            return
        if isinstance(session_type, (Send, Receive)):
            action = Action.OUTPUT if isinstance(session_type, Send) else Action.INPUT
            self._choice(state, session_type.peer, action, session_type.label, session_type.next)
        elif isinstance(session_type, (Select, Branch)):
            action = Action.OUTPUT if isinstance(session_type, Select) else Action.INPUT
            for label, next_type in session_type.choices.items():
                self._choice(state, session_type.peer, action, label, next_type)


def serialize(session_type: Any, role: Any) -> Fsm:
    """The state machine of `session_type` as followed by `role`."""
    serializer = Serializer(role)
    serializer.serialize(session_type)
    return serializer.fsm