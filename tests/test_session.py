import asyncio
from dataclasses import dataclass

import pytest

from rumpsteak.channel import Bidirectional, unbounded
from rumpsteak.session import (
    Branch,
    EmptyStreamError,
    End,
    Receive,
    Role,
    Select,
    Send,
    UnexpectedTypeError,
    connect,
    session,
    try_session,
)


@dataclass
class Add:
    value: int


@dataclass
class Sum:
    value: int


ADDER_A = Send("B", Add, Receive("B", Add, Send("C", Add, Receive("C", Sum, End()))))
ADDER_B = Receive("A", Add, Send("A", Add, Send("C", Add, Receive("C", Sum, End()))))
ADDER_C = Receive("A", Add, Receive("B", Add, Send("A", Sum, Send("B", Sum, End()))))


async def adder_a(role):
    async def body(s):
        x = 2
        s = await s.send(Add(x))
        y, s = await s.receive()
        s = await s.send(Add(y.value))
        z, s = await s.receive()
        return z.value, s

    return await try_session(role, ADDER_A, body)


async def adder_b(role):
    async def body(s):
        y, s = await s.receive()
        s = await s.send(Add(3))
        s = await s.send(Add(y.value))
        z, s = await s.receive()
        return z.value, s

    return await try_session(role, ADDER_B, body)


async def adder_c(role):
    async def body(s):
        x, s = await s.receive()
        y, s = await s.receive()
        z = x.value + y.value
        s = await s.send(Sum(z))
        return None, await s.send(Sum(z))

    return await try_session(role, ADDER_C, body)


@pytest.mark.asyncio
async def test_three_adder():
    a, b, c = connect("A", "B", "C")
    za, zb, _ = await asyncio.gather(adder_a(a), adder_b(b), adder_c(c))
    assert (za, zb) == (5, 5)


@dataclass
class Value:
    value: int


RING_A = Send("B", Value, Receive("C", Value, End()))
RING_B = Receive("A", Value, Send("C", Value, End()))
RING_B_OPTIMIZED = Send("C", Value, Receive("A", Value, End()))
RING_C = Receive("B", Value, Send("A", Value, End()))
RING_C_OPTIMIZED = Send("A", Value, Receive("B", Value, End()))


def ring_roles():
    a, b, c = Role("A"), Role("B"), Role("C")
    for sender_role, receiver_role in [(a, b), (b, c), (c, a)]:
        sender, receiver = unbounded()
        sender_role.add_route(receiver_role, sender)
        receiver_role.add_route(sender_role, receiver)
    return a, b, c


def ring_party(session_type, x, send_first):
    async def run(role):
        async def body(s):
            if send_first:
                s = await s.send(Value(x))
                y, s = await s.receive()
            else:
                y, s = await s.receive()
                s = await s.send(Value(x))
            return x + y.value, s

        return await try_session(role, session_type, body)

    return run


@pytest.mark.asyncio
@pytest.mark.parametrize("b_type,b_first", [(RING_B, False), (RING_B_OPTIMIZED, True)])
@pytest.mark.parametrize("c_type,c_first", [(RING_C, False), (RING_C_OPTIMIZED, True)])
async def test_ring(b_type, b_first, c_type, c_first):
    a, b, c = ring_roles()
    output = await asyncio.gather(
        ring_party(RING_A, 1, True)(a),
        ring_party(b_type, 2, b_first)(b),
        ring_party(c_type, 3, c_first)(c),
    )
    assert tuple(output) == (4, 3, 5)


class Ready:
    pass


@dataclass
class Copy:
    value: int


SOURCE = Receive("K", Ready, Send("K", Copy, Receive("K", Ready, Send("K", Copy, End()))))
SINK = Send("K", Ready, Receive("K", Copy, Send("K", Ready, Receive("K", Copy, End()))))
KERNEL = Send("S", Ready, Receive("S", Copy, Receive("T", Ready, Send("T", Copy,
         Send("S", Ready, Receive("S", Copy, Receive("T", Ready, Send("T", Copy, End()))))))))
KERNEL_OPTIMIZED = Send("S", Ready, Send("S", Ready, Receive("S", Copy, Receive("T", Ready,
                   Send("T", Copy, Receive("S", Copy, Receive("T", Ready, Send("T", Copy, End()))))))))


async def source(role, values):
    async def body(s):
        for value in values:
            _, s = await s.receive()
            s = await s.send(Copy(value))
        return None, s

    return await try_session(role, SOURCE, body)


async def sink(role):
    async def body(s):
        out = []
        for _ in range(2):
            s = await s.send(Ready())
            copy, s = await s.receive()
            out.append(copy.value)
        return tuple(out), s

    return await try_session(role, SINK, body)


async def kernel(role):
    async def body(s):
        for _ in range(2):
            s = await s.send(Ready())
            copy, s = await s.receive()
            _, s = await s.receive()
            s = await s.send(Copy(copy.value))
        return None, s

    return await try_session(role, KERNEL, body)


async def kernel_optimized(role):
    async def body(s):
        s = await s.send(Ready())
        s = await s.send(Ready())
        for _ in range(2):
            copy, s = await s.receive()
            _, s = await s.receive()
            s = await s.send(Copy(copy.value))
        return None, s

    return await try_session(role, KERNEL_OPTIMIZED, body)


def buffering_roles():
    s, k, t = Role("S"), Role("K"), Role("T")
    for left, right in [(s, k), (k, t)]:
        lc, rc = Bidirectional.pair()
        left.add_route(right, lc)
        right.add_route(left, rc)
    return s, k, t


@pytest.mark.asyncio
@pytest.mark.parametrize("kernel_fn", [kernel, kernel_optimized])
async def test_double_buffering(kernel_fn):
    s, k, t = buffering_roles()
    _, _, output = await asyncio.gather(source(s, (1, 2)), kernel_fn(k), sink(t))
    assert output == (1, 2)


class Yes:
    pass


class No:
    pass


@pytest.mark.asyncio
async def test_select_and_branch():
    a, b = connect("A", "B")
    chooser = Select("B", {Yes: End(), No: Send("B", Add, End())})
    brancher = Branch("A", {Yes: End(), No: Receive("A", Add, End())})

    async def choose(s):
        s = await s.select(No())
        return None, await s.send(Add(4))

    async def branch(s):
        label, s = await s.branch()
        value, s = await s.receive()
        return (type(label), value.value), s

    _, result = await asyncio.gather(
        session(a, chooser, choose), session(b, brancher, branch)
    )
    assert result == (No, 4)


@pytest.mark.asyncio
async def test_unexpected_type():
    a, b = connect("A", "B")
    await a.route("B").send(Sum(1))

    async def body(s):
        await s.receive()

    with pytest.raises(UnexpectedTypeError):
        await try_session(b, Receive("A", Add, End()), body)


@pytest.mark.asyncio
async def test_empty_stream():
    a, b = connect("A", "B")
    a.route(b).close()

    async def body(s):
        await s.receive()

    with pytest.raises(EmptyStreamError):
        await try_session(b, Receive("A", Add, End()), body)


@pytest.mark.asyncio
async def test_state_cannot_be_reused():
    a, _ = connect("A", "B")

    async def body(s):
        await s.send(Add(1))
        await s.send(Add(2))

    with pytest.raises(RuntimeError):
        await try_session(a, Send("B", Add, End()), body)


def test_missing_route():
    with pytest.raises(KeyError):
        Role("A").route("B")