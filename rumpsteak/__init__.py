"""Multiparty session types over asyncio, communicating state machines and asynchronous subtyping."""

__version__ = "0.1.0"

__all__ = [
    "channel",
    "dot",
    "fsm",
    "local",
    "oneshot",
    "petrify",
    "prefix",
    "serialize",
    "session",
    "subtype",
]