"""Sequences of pending transitions with cheap snapshots and rollback."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from .fsm import Transition

__all__ = ["Snapshot", "Prefix"]


@dataclass(frozen=True)
class Snapshot:
    """A point a prefix can be reverted to."""

    size: int
    start: int
    removed: int


@dataclass
class _Entry:
    removed: bool
    transition: Transition


class Prefix:
    """Pending transitions; entries can be removed from the front or from the middle."""

    def __init__(self) -> None:
        self._entries: list[_Entry] = []
        self._start = 0
        self._removed: list[int] = []

    def is_empty(self) -> bool:
        return self._start >= len(self._entries)

    def first(self) -> Transition | None:
        if self._start < len(self._entries):
            entry = self._entries[self._start]
            if entry.removed:
                raise ValueError("the first entry of a prefix cannot be removed")
            return entry.transition
        return None

    def push(self, transition: Transition) -> None:
        self._entries.append(_Entry(False, transition))

    def remove_first(self) -> None:
        if self._start >= len(self._entries) or self._entries[self._start].removed:
            raise ValueError("the prefix has no first transition to remove")
        self._start += 1
        while self._start < len(self._entries) and self._entries[self._start].removed:
            self._start += 1

    def remove(self, index: int) -> None:
        if index == self._start:
            self.remove_first()
            return
        entry = self._entries[index]
        if entry.removed:
            raise ValueError(f"transition {index} was already removed")
        entry.removed = True
        self._removed.append(index)

    def snapshot(self) -> Snapshot:
        return Snapshot(len(self._entries), self._start, len(self._removed))

    def _check(self, snapshot: Snapshot) -> None:
        if not (
            snapshot.removed <= len(self._removed)
            and snapshot.size <= len(self._entries)
            and snapshot.start <= self._start
        ):
            raise ValueError("snapshot does not belong to the current history of this prefix")

    def is_modified(self, snapshot: Snapshot) -> bool:
        self._check(snapshot)
        return self._entries[self._start:] != self._entries[: snapshot.size][snapshot.start:]

    def revert(self, snapshot: Snapshot) -> None:
        self._check(snapshot)
        for index in self._removed[snapshot.removed:]:
            self._entries[index].removed = False
        del self._removed[snapshot.removed:]
        del self._entries[snapshot.size:]
        self._start = snapshot.start

    def iter_full(self) -> Iterator[tuple[int, Transition]]:
        """Live transitions with their positions."""
        for index in range(self._start, len(self._entries)):
            entry = self._entries[index]
            if not entry.removed:
                yield index, entry.transition

    def __iter__(self) -> Iterator[Transition]:
        return (transition for _, transition in self.iter_full())

    def __str__(self) -> str:
        text = " . ".join(str(transition) for transition in self)
        return text or "empty"