import pytest

from rumpsteak.fsm import Action, Fsm, Message, Parameters, Transition
from rumpsteak.petrify import to_petrify


def test_single_transition():
    fsm = Fsm("A")
    s0, s1 = fsm.add_state(), fsm.add_state()
    fsm.add_transition(s0, s1, Transition("B", Action.OUTPUT, Message.from_label("Hello")))
    expected = ".outputs\n.state graph\ns0 B ! Hello s1\n.marking s0\n.end"
    assert to_petrify(fsm) == expected


def test_empty_fsm_rejected():
    with pytest.raises(ValueError):
        to_petrify(Fsm("A"))


def test_only_label_is_written():
    fsm = Fsm("A")
    s0 = fsm.add_state()
    message = Message("Value", Parameters(["int"]))
    fsm.add_transition(s0, s0, Transition("B", Action.INPUT, message))
    lines = to_petrify(fsm).split("\n")
    assert lines[2].split() == ["s0", "B", "?", "Value", "s0"]


def test_header_and_footer_without_transitions():
    fsm = Fsm("A")
    fsm.add_state()
    lines = to_petrify(fsm).split("\n")
    assert lines[:2] == [".outputs", ".state graph"]
    assert lines[-2:] == [".marking s0", ".end"]
    assert len(lines) == 4