import pytest

from rumpsteak.fsm import Action, Fsm, Message, Transition
from rumpsteak.subtype import is_subtype

OUT, IN = Action.OUTPUT, Action.INPUT


def _machine(role, edges):
    fsm = Fsm(role)
    count = 1 + max((max(source, target) for source, target, *_ in edges), default=0)
    for _ in range(count):
        fsm.add_state()
    for source, target, peer, action, label in edges:
        fsm.add_transition(source, target, Transition(peer, action, Message.from_label(label)))
    return fsm


def _client():
    return _machine(
        "C",
        [
            (0, 1, "S", OUT, "HighQuality"),
            (0, 1, "S", OUT, "LowQuality"),
            (1, 0, "S", IN, "Success"),
            (1, 0, "S", IN, "Failure"),
        ],
    )


def _client_optimized():
    return _machine(
        "C",
        [
            (0, 1, "S", OUT, "HighQuality"),
            (1, 0, "S", IN, "Success"),
            (1, 2, "S", IN, "Failure"),
            (2, 0, "S", OUT, "LowQuality"),
        ],
    )


def _ring_b():
    return _machine("B", [(0, 1, "A", IN, "Value"), (1, 2, "C", OUT, "Value")])


def _ring_b_optimized():
    return _machine("B", [(0, 1, "C", OUT, "Value"), (1, 2, "A", IN, "Value")])


def test_video_streaming_optimized_is_not_subtype():
    assert not is_subtype(_client_optimized(), _client(), 10)


def test_recursive_machine_is_subtype_of_itself():
    assert is_subtype(_client(), _client(), 10)


def test_sending_early_is_subtype():
    assert is_subtype(_ring_b_optimized(), _ring_b(), 10)


def test_receiving_late_is_not_subtype():
    assert not is_subtype(_ring_b(), _ring_b_optimized(), 10)


def test_identical_chain_is_subtype():
    assert is_subtype(_ring_b(), _ring_b(), 1)


def test_no_visits_is_not_subtype():
    assert not is_subtype(_ring_b(), _ring_b(), 0)


def test_different_label_is_not_subtype():
    left = _machine("A", [(0, 1, "B", OUT, "X")])
    right = _machine("A", [(0, 1, "B", OUT, "Y")])
    assert not is_subtype(left, right, 5)


def test_fewer_outputs_is_subtype():
    left = _machine("A", [(0, 1, "B", OUT, "X")])
    right = _machine("A", [(0, 1, "B", OUT, "X"), (0, 1, "B", OUT, "Y")])
    assert is_subtype(left, right, 5)
    assert not is_subtype(right, left, 5)


def test_end_against_send_is_not_subtype():
    left = _machine("A", [])
    right = _machine("A", [(0, 1, "B", OUT, "X")])
    assert not is_subtype(left, right, 5)
    assert is_subtype(left, left, 5)


def test_different_roles_rejected():
    with pytest.raises(ValueError):
        is_subtype(_machine("A", []), _machine("B", []), 1)


def test_empty_machine_rejected():
    with pytest.raises(ValueError):
        is_subtype(Fsm("A"), _machine("A", []), 1)