import logging
from typing import FrozenSet, Iterable, List

from automata_editor.automaton import (
    EMPTY_SYMBOL,
    Automaton,
    contains_final,
    find_start,
)
from automata_editor.conversion import epsilon_closure, move
from automata_editor.exceptions import InvalidInput

logger = logging.getLogger(__name__)


def step(current: Iterable[str], symbol: str, automaton: Automaton) -> FrozenSet[str]:
    return epsilon_closure(move(current, symbol, automaton), automaton)


def trace(automaton: Automaton, input_symbols: Iterable[str]) -> List[FrozenSet[str]]:
    """Sets of current states while reading ``input_symbols``.

    The first entry is the closure of the start state. Reading stops after
    the first empty set, since no state can be reached from it. An empty
    automaton yields an empty trace.
    """
    if not automaton.states:
        return []

    symbols = list(input_symbols)
    if EMPTY_SYMBOL in symbols:
        raise InvalidInput(f"{EMPTY_SYMBOL!r} is reserved for empty transitions")

    automaton.validate()
    current = epsilon_closure({find_start(automaton)}, automaton)
    visited = [current]

    for c in symbols:
        current = step(current, c, automaton)
        visited.append(current)
        if not current:
            logger.debug("%s: no state left after %r", automaton.name, c)
            break

    return visited


def accepts(automaton: Automaton, input_symbols: Iterable[str]) -> bool:
    """Run the input through every path at once and report acceptance.

    A string is read one character at a time; any other iterable is read one
    item (symbol) at a time.
    """
    visited = trace(automaton, input_symbols)
    if not visited:
        return False
    return contains_final(visited[-1], automaton)
