# rumpsteak

Multiparty session types for asyncio. The package also includes tools that
treat protocols as communicating finite state machines.

## Modules

- `rumpsteak.session` describes each role's protocol with the `Send`,
  `Receive`, `Select`, `Branch` and `End` types. `connect(*names)` creates
  `Role` objects that are joined pairwise by bidirectional channels.
  `try_session(role, session_type, f)` and `session(role, session_type, f)` run
  a protocol: each step returns the next state. These errors are raised:
  - `TypeError` when a step sends a label of the wrong class.
  - `UnexpectedTypeError` when a message of the wrong class arrives.
  - `EmptyStreamError` when the channel is closed and drained.
  - `RuntimeError` when a state is used twice.

  To describe recursion, use a zero-argument callable that returns a session
  type in place of a session type.
- `rumpsteak.channel` provides:
  - unbounded asyncio channels, created with `unbounded()`;
  - `UnboundedSender` and `UnboundedReceiver`;
  - `Bidirectional` channel pairs, created with `Bidirectional.pair()`;
  - `Nil`, a placeholder for a route that is never used.

  Sending on a closed channel raises `ChannelClosed`.
- `rumpsteak.fsm` defines `Fsm`. Its states are numbered from 0, and it
  supports `add_state` and `add_transition`. These errors are raised when a
  transition is not allowed:
  - `SelfCommunicationError`
  - `MultipleRolesError`
  - `MultipleActionsError`

  `Fsm.dual(role)` builds the peer's machine. `Fsm.to_binary()` erases the peer
  roles. `Normalizer().normalize(fsm)` renames roles and labels to integers.
  The module also defines refinement `Expression` values (`Name`, `Boolean`,
  `Number`, `Unary`, `Binary`). These print with the fewest brackets needed.
- `rumpsteak.dot.to_dot(fsm)` renders a machine as a Graphviz DOT digraph.
- `rumpsteak.petrify.to_petrify(fsm)` renders a machine as a Petrify state graph.
- `rumpsteak.local.from_fsm(fsm)` rebuilds a local type (`End`, `Recursion`,
  `Variable`, `Transitions`) from a machine. It prints as, for example,
  `rec X0 . S!Ready; X0`.
- `rumpsteak.serialize.serialize(session_type, role)` turns a session type into
  an `Fsm`. Each distinct session type object becomes one state.
- `rumpsteak.subtype.is_subtype(left, right, visits)` is a bounded check for
  asynchronous subtyping. It tests whether `left` is a subtype of `right`.
  `visits` limits how many times the check may visit each pair of states.
  `rumpsteak.prefix.Prefix` holds the pending transitions that the check uses.
- `rumpsteak.oneshot` builds binary sessions from one-shot channels:
  - `new_session`, `Send` and `Receive` make the sessions.
  - `SessionPair` lets one party interleave two sessions. The order is fixed
    by a queue of `Side` values.
  - `session2` runs both ends of a binary session.
  - `session3` runs three parties concurrently.

## Installation

```
pip install rumpsteak
```

## Example: a two-party session

```python
import asyncio

from rumpsteak.session import End, Receive, Send, connect, try_session


class Value:
    def __init__(self, n):
        self.n = n


async def main():
    a, b = connect("A", "B")

    async def run_a(s):
        s = await s.send(Value(1))
        return None, s

    async def run_b(s):
        value, s = await s.receive()
        return value.n, s

    _, received = await asyncio.gather(
        try_session(a, Send("B", Value, End()), run_a),
        try_session(b, Receive("A", Value, End()), run_b),
    )
    print(received)  # 1


asyncio.run(main())
```

## Example: state machines

```python
from rumpsteak.dot import to_dot
from rumpsteak.fsm import Action, Fsm, Message, Transition
from rumpsteak.subtype import is_subtype

fsm = Fsm("C")
s0, s1 = fsm.add_state(), fsm.add_state()
fsm.add_transition(s0, s1, Transition("S", Action.OUTPUT, Message.from_label("Request")))
print(to_dot(fsm))
print(is_subtype(fsm, fsm, 10))  # True
```

## What it does not do

The package is a library only:

- It has no command-line programs.
- It can write DOT, but it cannot read DOT files into state machines.
- It does not generate protocol code from DOT descriptions.

## Running the tests

```
pip install -e ".[test]"
pytest
```