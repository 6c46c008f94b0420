"""Asynchronous subtyping of communicating state machines."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from .fsm import Action, Fsm, Transition
from .prefix import Prefix, Snapshot

__all__ = ["is_subtype"]


class _Quantifier(enum.Enum):
    ALL = "all"
    ANY = "any"


_QUANTIFIERS = {
    (Action.OUTPUT, Action.OUTPUT): ((_Quantifier.ALL, _Quantifier.ANY), False),
    (Action.OUTPUT, Action.INPUT): ((_Quantifier.ALL, _Quantifier.ALL), False),
    (Action.INPUT, Action.OUTPUT): ((_Quantifier.ANY, _Quantifier.ANY), False),
    (Action.INPUT, Action.INPUT): ((_Quantifier.ANY, _Quantifier.ALL), True),
}


@dataclass(frozen=True)
class _Previous:
    visits: int
    snapshots: tuple[Snapshot, Snapshot] | None = None


def _reduce(left: Prefix, right: Prefix) -> bool:
    """Cancel matching transitions; False if the prefixes can never match."""
    while True:
        head, other = left.first(), right.first()
        if head is None or other is None:
            return True

        if head == other:
            left.remove_first()
            right.remove_first()
            continue

        if head.action is Action.INPUT:
            def reject(candidate: Transition) -> bool:
                return candidate.role == head.role or candidate.action is Action.OUTPUT
        else:
            def reject(candidate: Transition) -> bool:
                return candidate.role == head.role and candidate.action is Action.OUTPUT

        candidates = right.iter_full()
        _, first = next(candidates)
        if reject(first):
            return False

        match = None
        for index, candidate in candidates:
            if candidate == head:
                match = index
                break
            if reject(candidate):
                return False

        if match is None:
            return True

        left.remove_first()
        right.remove(match)


class _Visitor:
    def __init__(self, left: Fsm, right: Fsm, visits: int) -> None:
        self._fsms = (left, right)
        columns = right.size()[0]
        self._history = [[_Previous(visits) for _ in range(columns)] for _ in range(left.size()[0])]
        self._prefixes = (Prefix(), Prefix())

    def _unroll(self, transitions, quantifiers, swap: bool) -> bool:
        prefixes = self._prefixes
        if swap:
            prefixes, transitions, quantifiers = prefixes[::-1], transitions[::-1], quantifiers[::-1]

        outer_prefix, inner_prefix = prefixes
        outer_transitions, inner_transitions = transitions
        outer_quantifier, inner_quantifier = quantifiers

        outer_snapshot = outer_prefix.snapshot()
        inner_snapshot = inner_prefix.snapshot()

        for outer_state, outer_transition in outer_transitions:
            outer_prefix.revert(outer_snapshot)
            outer_prefix.push(outer_transition)
            pushed = outer_prefix.snapshot()

            output = inner_quantifier is _Quantifier.ALL
            for inner_state, inner_transition in inner_transitions:
                outer_prefix.revert(pushed)
                inner_prefix.revert(inner_snapshot)
                inner_prefix.push(inner_transition)

                states = (inner_state, outer_state) if swap else (outer_state, inner_state)
                output = self.visit(states)
                if output == (inner_quantifier is _Quantifier.ANY):
                    break

            if output == (outer_quantifier is _Quantifier.ANY):
                return output

        return outer_quantifier is _Quantifier.ALL

    def visit(self, states: tuple[int, int]) -> bool:
        left_state, right_state = states
        previous = self._history[left_state][right_state]
        if previous.visits == 0:
            return False

        if not _reduce(*self._prefixes):
            return False

        if previous.snapshots is not None and not any(
            prefix.is_modified(snapshot)
            for prefix, snapshot in zip(self._prefixes, previous.snapshots)
        ):
            return True

        left, right = (
            list(fsm.transitions_from(state)) for fsm, state in zip(self._fsms, states)
        )
        if not left and not right:
            return all(prefix.is_empty() for prefix in self._prefixes)
        if not left or not right:
            return False

        snapshots = (self._prefixes[0].snapshot(), self._prefixes[1].snapshot())
        self._history[left_state][right_state] = _Previous(previous.visits - 1, snapshots)
        try:
            quantifiers, swap = _QUANTIFIERS[(left[0][1].action, right[0][1].action)]
            return self._unroll((left, right), quantifiers, swap)
        finally:
            self._history[left_state][right_state] = previous


def is_subtype(left: Fsm, right: Fsm, visits: int) -> bool:
    """Whether `left` is an asynchronous subtype of `right`, visiting each state pair at most `visits` times."""
    if left.role != right.role:
        raise ValueError("FSMs are for different roles")
    if left.size()[0] == 0 or right.size()[0] == 0:
        raise ValueError("subtyping needs state machines with at least one state")
    return _Visitor(left, right, visits).visit((0, 0))