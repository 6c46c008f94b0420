"""Rendering of state machines in the Petrify state graph format."""

from __future__ import annotations

from .fsm import Fsm

__all__ = ["to_petrify"]


def to_petrify(fsm: Fsm) -> str:
    """Render a non-empty state machine as a Petrify state graph."""
    if fsm.size()[0] == 0:
        raise ValueError("a Petrify state graph needs at least one state")

    lines = [".outputs", ".state graph"]
    lines.extend(
        f"s{source} {transition.role} {transition.action} {transition.message.label} s{target}"
        for source, target, transition in fsm.transitions()
    )
    lines.append(".marking s0")
    lines.append(".end")
    return "\n".join(lines)