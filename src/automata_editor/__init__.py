"""Finite automata model: editing, simulation and subset construction."""

from automata_editor.automaton import (
    EMPTY_SYMBOL,
    EPSILON_SYMBOLS,
    Automaton,
    MachineKind,
    Move,
    PushdownPayload,
    State,
    Transition,
    TuringPayload,
    alphabet,
    contains_final,
    find_start,
)
from automata_editor.conversion import (
    DEFAULT_MAX_STATES,
    TRAP_LABEL,
    epsilon_closure,
    move,
    nfa_to_dfa,
    state_set_label,
    to_deterministic,
)
from automata_editor.exceptions import (
    AutomatonError,
    AutomatonFormatError,
    ConversionTooLarge,
    DuplicateState,
    InvalidInput,
    MalformedAutomaton,
    NoStartState,
    UnknownState,
)
from automata_editor.simulation import accepts, trace

__version__ = "0.1.0"

__all__ = [
    "EMPTY_SYMBOL",
    "EPSILON_SYMBOLS",
    "DEFAULT_MAX_STATES",
    "TRAP_LABEL",
    "Automaton",
    "MachineKind",
    "Move",
    "PushdownPayload",
    "State",
    "Transition",
    "TuringPayload",
    "alphabet",
    "contains_final",
    "find_start",
    "epsilon_closure",
    "move",
    "nfa_to_dfa",
    "state_set_label",
    "to_deterministic",
    "accepts",
    "trace",
    "AutomatonError",
    "AutomatonFormatError",
    "ConversionTooLarge",
    "DuplicateState",
    "InvalidInput",
    "MalformedAutomaton",
    "NoStartState",
    "UnknownState",
]
