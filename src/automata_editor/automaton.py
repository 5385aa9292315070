import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Set, Union

from automata_editor.exceptions import (
    DuplicateState,
    MalformedAutomaton,
    NoStartState,
    UnknownState,
)

logger = logging.getLogger(__name__)

EMPTY_SYMBOL = "ε"
EPSILON_SYMBOLS = {"", "ε", "eps", "epsilon"}


def normalize_symbol(symbol: str) -> str:
    return EMPTY_SYMBOL if symbol in EPSILON_SYMBOLS else symbol


class MachineKind(Enum):
    FINITE = "finite"
    PUSHDOWN = "pushdown"
    TURING = "turing"


class Move(Enum):
    LEFT = "L"
    RIGHT = "R"


@dataclass(frozen=True)
class PushdownPayload:
    pop: str = EMPTY_SYMBOL
    push: str = EMPTY_SYMBOL


@dataclass(frozen=True)
class TuringPayload:
    write: str
    move: Move = Move.RIGHT


Payload = Union[PushdownPayload, TuringPayload]

PAYLOAD_TYPES = {
    MachineKind.FINITE: (),
    MachineKind.PUSHDOWN: (PushdownPayload,),
    MachineKind.TURING: (TuringPayload,),
}


@dataclass
class Transition:
    source: str
    target: str
    symbol: str = EMPTY_SYMBOL
    # stack or tape data; ignored by closure, simulation and conversion
    payload: Optional[Payload] = None

    @property
    def is_empty(self) -> bool:
        return self.symbol == EMPTY_SYMBOL


@dataclass
class State:
    name: str
    is_start: bool = False
    is_final: bool = False
    out: List[Transition] = field(default_factory=list)


class Automaton:
    def __init__(
        self,
        states: Iterable[State] = (),
        name: str = "automaton",
        kind: MachineKind = MachineKind.FINITE,
        alphabet: Iterable[str] = (),
    ):
        self.name = name
        self.kind = kind
        self.declared_alphabet = {
            normalize_symbol(s) for s in alphabet if normalize_symbol(s) != EMPTY_SYMBOL
        }
        self.states: Dict[str, State] = {}
        for state in states:
            if state.name in self.states:
                raise DuplicateState(f"duplicate state {state.name!r}")
            self.states[state.name] = state

    def __repr__(self) -> str:
        return f"Automaton(name={self.name!r}, kind={self.kind.value}, states={list(self.states)})"

    def __len__(self) -> int:
        return len(self.states)

    def __iter__(self) -> Iterator[str]:
        return iter(self.states)

    def __contains__(self, name) -> bool:
        return name in self.states

    def __getitem__(self, name: str) -> State:
        return self.state(name)

    def state(self, name: str) -> State:
        try:
            return self.states[name]
        except KeyError:
            raise UnknownState(f"no state named {name!r}") from None

    def out(self, name: str) -> List[Transition]:
        return self.state(name).out

    def transitions(self) -> Iterator[Transition]:
        for state in self.states.values():
            yield from state.out

    def validate(self) -> None:
        """Check the structural invariants the algorithms rely on.

        Raises MalformedAutomaton on the first violation found.
        """
        starts = []
        allowed = PAYLOAD_TYPES[self.kind]
        for key, state in self.states.items():
            if not key:
                raise MalformedAutomaton("state with an empty name")
            if key != state.name:
                raise MalformedAutomaton(
                    f"state stored under {key!r} is named {state.name!r}"
                )
            if state.is_start:
                starts.append(key)
            for t in state.out:
                if t.source != key:
                    raise MalformedAutomaton(
                        f"transition {t.source}->{t.target} is listed under {key!r}"
                    )
                if t.target not in self.states:
                    raise MalformedAutomaton(
                        f"transition {key}->{t.target} points to a missing state"
                    )
                if not t.symbol:
                    raise MalformedAutomaton(
                        f"transition {key}->{t.target} has an empty symbol"
                    )
                if t.payload is not None and not isinstance(t.payload, allowed):
                    raise MalformedAutomaton(
                        f"{type(t.payload).__name__} on {key}->{t.target} "
                        f"does not fit a {self.kind.value} machine"
                    )
        if len(starts) > 1:
            raise MalformedAutomaton(f"multiple start states: {', '.join(starts)}")

    def copy(self) -> "Automaton":
        return Automaton(
            states=[
                State(
                    name=s.name,
                    is_start=s.is_start,
                    is_final=s.is_final,
                    out=[Transition(t.source, t.target, t.symbol, t.payload) for t in s.out],
                )
                for s in self.states.values()
            ],
            name=self.name,
            kind=self.kind,
            alphabet=set(self.declared_alphabet),
        )

    def transition_table(self) -> Dict[str, Dict[str, Set[str]]]:
        table: Dict[str, Dict[str, Set[str]]] = {name: {} for name in self.states}
        for t in self.transitions():
            table[t.source].setdefault(t.symbol, set()).add(t.target)
        return table

    def is_deterministic(self) -> bool:
        for sym_map in self.transition_table().values():
            for sym, dests in sym_map.items():
                if sym == EMPTY_SYMBOL or len(dests) > 1:
                    return False
        return True

    def get_stats(self) -> Dict:
        all_transitions = list(self.transitions())
        return {
            "states": len(self.states),
            "alphabet_size": len(alphabet(self)),
            "accept_states": sum(1 for s in self.states.values() if s.is_final),
            "total_transitions": len(all_transitions),
            "epsilon_transitions": sum(1 for t in all_transitions if t.is_empty),
            "is_dfa": self.is_deterministic(),
        }

    # editing operations

    def find_unused_name(self, prefix: str = "q") -> str:
        i = 0
        while f"{prefix}{i}" in self.states:
            i += 1
        return f"{prefix}{i}"

    def add_state(self, name: Optional[str] = None, is_final: bool = False) -> State:
        if name is None:
            name = self.find_unused_name()
        if not name:
            raise ValueError("state name must be non-empty")
        if name in self.states:
            raise DuplicateState(f"{name} already exists")
        state = State(name=name, is_start=not self.states, is_final=is_final)
        self.states[name] = state
        logger.debug("added state %s to %s", name, self.name)
        return state

    def remove_state(self, name: str) -> None:
        removed = self.state(name)
        del self.states[name]
        for state in self.states.values():
            state.out = [t for t in state.out if t.target != name]
        if removed.is_start and self.states:
            self.set_start(next(iter(self.states)))
        logger.debug("removed state %s from %s", name, self.name)

    def rename_state(self, old: str, new: str) -> None:
        state = self.state(old)
        if old == new:
            return
        if not new:
            raise ValueError("state name must be non-empty")
        if new in self.states:
            raise DuplicateState(f"{new} already exists")
        state.name = new
        self.states = {(new if k == old else k): v for k, v in self.states.items()}
        for t in self.transitions():
            if t.source == old:
                t.source = new
            if t.target == old:
                t.target = new

    def set_start(self, name: str) -> None:
        target = self.state(name)
        for state in self.states.values():
            state.is_start = False
        target.is_start = True

    def toggle_final(self, name: str) -> bool:
        state = self.state(name)
        state.is_final = not state.is_final
        return state.is_final

    def add_transition(
        self,
        source: str,
        target: str,
        symbol: str = EMPTY_SYMBOL,
        payload: Optional[Payload] = None,
    ) -> Transition:
        state = self.state(source)
        self.state(target)
        if payload is not None and not isinstance(payload, PAYLOAD_TYPES[self.kind]):
            raise ValueError(
                f"{type(payload).__name__} does not fit a {self.kind.value} machine"
            )
        transition = Transition(source, target, normalize_symbol(symbol), payload)
        state.out.append(transition)
        return transition

    def _index_of(self, transition: Transition) -> int:
        out = self.state(transition.source).out
        for i, t in enumerate(out):
            if t == transition:
                return i
        raise ValueError(
            f"no transition {transition.source} --{transition.symbol}--> {transition.target}"
        )

    def remove_transition(self, transition: Transition) -> None:
        i = self._index_of(transition)
        del self.states[transition.source].out[i]

    def relabel_transition(
        self,
        transition: Transition,
        symbol: str,
        payload: Optional[Payload] = None,
    ) -> Transition:
        if payload is not None and not isinstance(payload, PAYLOAD_TYPES[self.kind]):
            raise ValueError(
                f"{type(payload).__name__} does not fit a {self.kind.value} machine"
            )
        existing = self.states[transition.source].out[self._index_of(transition)]
        existing.symbol = normalize_symbol(symbol)
        existing.payload = payload
        return existing


def alphabet(automaton: Automaton) -> Set[str]:
    """Distinct non-empty input symbols: those on edges plus declared ones."""
    symbols = set(automaton.declared_alphabet)
    for t in automaton.transitions():
        if not t.is_empty:
            symbols.add(t.symbol)
    return symbols


def find_start(automaton: Automaton) -> str:
    starts = [name for name, state in automaton.states.items() if state.is_start]
    if not starts:
        raise NoStartState(f"{automaton.name!r} has no start state")
    if len(starts) > 1:
        raise MalformedAutomaton(f"multiple start states: {', '.join(starts)}")
    return starts[0]


def contains_final(state_set: Iterable[str], automaton: Automaton) -> bool:
    for name in state_set:
        state = automaton.states.get(name)
        if state is None:
            raise MalformedAutomaton(f"unknown state {name!r}")
        if state.is_final:
            return True
    return False
