import logging
import re
from collections import deque
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from automata_editor.automaton import (
    Automaton,
    MachineKind,
    State,
    Transition,
    alphabet,
    contains_final,
    find_start,
)
from automata_editor.exceptions import ConversionTooLarge, MalformedAutomaton

logger = logging.getLogger(__name__)

TRAP_LABEL = "{}"
DEFAULT_MAX_STATES = 10000

_NUMBERED_NAME = re.compile(r"^([^\W\d_]+)(\d+)$")


def _lookup(name: str, automaton: Automaton) -> State:
    state = automaton.states.get(name)
    if state is None:
        raise MalformedAutomaton(f"unknown state {name!r}")
    return state


def epsilon_closure(state_set: Iterable[str], automaton: Automaton) -> FrozenSet[str]:
    """Return the states reachable from ``state_set`` through empty transitions.

    The argument is left untouched; a new frozenset is returned.
    """
    stack = list(state_set)
    closure = set(stack)

    while stack:
        s = stack.pop()
        for t in _lookup(s, automaton).out:
            if t.is_empty and t.target not in closure:
                closure.add(t.target)
                stack.append(t.target)

    return frozenset(closure)


def move(state_set: Iterable[str], symbol: str, automaton: Automaton) -> Set[str]:
    result = set()

    for s in state_set:
        for t in _lookup(s, automaton).out:
            if t.symbol == symbol:
                result.add(t.target)

    return result


def state_sort_key(name: str) -> Tuple:
    # q2 < q10; names without a numeric suffix compare as plain strings
    m = _NUMBERED_NAME.match(name)
    if m:
        return (m.group(1), 0, int(m.group(2)), name)
    return (name, 1, 0, name)


def state_set_label(state_set: Iterable[str]) -> str:
    """Canonical label of a set of states, e.g. ``{q0,q3,q5}``."""
    return "{" + ",".join(sorted(state_set, key=state_sort_key)) + "}"


def nfa_to_dfa(
    nfa: Automaton,
    name_suffix: str = "__DFA",
    max_states: Optional[int] = DEFAULT_MAX_STATES,
) -> Automaton:
    """Subset construction with a single absorbing trap state.

    Every composite state is named by the canonical label of the set of
    ``nfa`` states it stands for. The result is total over the alphabet of
    ``nfa`` and shares no objects with it.
    """
    nfa.validate()
    symbols = sorted(alphabet(nfa))
    start = epsilon_closure({find_start(nfa)}, nfa)

    if nfa.kind is not MachineKind.FINITE:
        logger.warning(
            "%s is a %s machine; edge payloads are dropped during conversion",
            nfa.name,
            nfa.kind.value,
        )

    start_label = state_set_label(start)
    dfa_states: Dict[str, State] = {
        start_label: State(start_label, is_start=True, is_final=contains_final(start, nfa))
    }
    seen: Dict[str, FrozenSet[str]] = {start_label: start}
    queue = deque([start])
    send_to_trap: List[Tuple[str, str]] = []

    while queue:
        S = queue.popleft()
        S_label = state_set_label(S)

        for a in symbols:
            T = epsilon_closure(move(S, a, nfa), nfa)

            if not T:
                send_to_trap.append((S_label, a))
                continue

            T_label = state_set_label(T)
            known = seen.get(T_label)
            if known is None:
                if max_states is not None and len(dfa_states) >= max_states:
                    raise ConversionTooLarge(max_states)
                seen[T_label] = T
                dfa_states[T_label] = State(T_label, is_final=contains_final(T, nfa))
                queue.append(T)
                logger.debug("discovered %s via %s --%s-->", T_label, S_label, a)
            elif known != T:
                raise MalformedAutomaton(f"state names make the label {T_label} ambiguous")

            dfa_states[S_label].out.append(Transition(S_label, T_label, a))

    if send_to_trap:
        if max_states is not None and len(dfa_states) >= max_states:
            raise ConversionTooLarge(max_states)
        trap = State(TRAP_LABEL)
        dfa_states[TRAP_LABEL] = trap
        for a in symbols:
            trap.out.append(Transition(TRAP_LABEL, TRAP_LABEL, a))
        for label, a in send_to_trap:
            dfa_states[label].out.append(Transition(label, TRAP_LABEL, a))

    logger.info(
        "converted %s: %d states -> %d states%s",
        nfa.name,
        len(nfa),
        len(dfa_states),
        " (with trap)" if send_to_trap else "",
    )

    return Automaton(
        states=dfa_states.values(),
        name=f"{nfa.name}{name_suffix}",
        kind=MachineKind.FINITE,
        alphabet=symbols,
    )


to_deterministic = nfa_to_dfa
