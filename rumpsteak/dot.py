"""Rendering of state machines in Graphviz DOT format."""

from __future__ import annotations

from .fsm import Fsm

__all__ = ["to_dot"]


def to_dot(fsm: Fsm) -> str:
    """Render a state machine as a DOT digraph named after its role."""
    states, transitions = fsm.size()
    parts = [f'digraph "{fsm.role}" {{']
    if states > 0:
        parts.append("\n")
    parts.extend(f"    {state};\n" for state in fsm.states())
    if transitions > 0:
        parts.append("\n")
    parts.extend(
        f'    {source} -> {target} [label="{transition}"];\n'
        for source, target, transition in fsm.transitions()
    )
    parts.append("}")
    return "".join(parts)