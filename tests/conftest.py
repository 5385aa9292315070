import matplotlib

matplotlib.use("Agg")

import pytest

from automata_editor import EMPTY_SYMBOL, Automaton, State, Transition


def build(transitions, start="q0", finals=(), names=(), alphabet=(), name="test"):
    """Automaton from (source, symbol, target) triples.

    States are created in order of first mention, ``names`` first.
    """
    order = list(names)
    for src, _, dst in transitions:
        for s in (src, dst):
            if s not in order:
                order.append(s)
    if start is not None and start not in order:
        order.insert(0, start)
    states = {s: State(s, is_start=(s == start), is_final=(s in finals)) for s in order}
    for src, sym, dst in transitions:
        states[src].out.append(Transition(src, dst, sym))
    return Automaton(states.values(), name=name, alphabet=alphabet)


@pytest.fixture
def single_state():
    return build([], finals={"q0"}, alphabet={"a"})


@pytest.fixture
def epsilon_loop():
    return build([("q0", EMPTY_SYMBOL, "q0"), ("q0", "a", "q1")], finals={"q1"})


@pytest.fixture
def branching_nfa():
    return build([("q0", "a", "q1"), ("q0", "a", "q2")], finals={"q1"})


@pytest.fixture
def ends_with_ab():
    # (a|b)*ab
    return build(
        [("q0", "a", "q0"), ("q0", "b", "q0"), ("q0", "a", "q1"), ("q1", "b", "q2")],
        finals={"q2"},
    )


@pytest.fixture
def epsilon_chain():
    # a* then b*, joined by an empty transition
    return build(
        [
            ("q0", "a", "q0"),
            ("q0", EMPTY_SYMBOL, "q1"),
            ("q1", "b", "q1"),
            ("q1", EMPTY_SYMBOL, "q2"),
        ],
        finals={"q2"},
    )


@pytest.fixture
def make_automaton():
    return build
