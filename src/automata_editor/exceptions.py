"""Errors raised by the automaton model and its algorithms."""


class AutomatonError(Exception):
    """Base exception for all automata-editor errors."""

    pass


class MalformedAutomaton(AutomatonError):
    """Raised when a structural invariant of an automaton is violated."""

    pass


class NoStartState(AutomatonError):
    """Raised when an automaton has no designated start state."""

    pass


class ConversionTooLarge(AutomatonError):
    """Raised when subset construction exceeds the composite-state ceiling."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"subset construction exceeded {limit} states")


class UnknownState(AutomatonError, KeyError):
    """Raised when an editing operation names a state that does not exist."""

    def __str__(self) -> str:
        return Exception.__str__(self)


class DuplicateState(AutomatonError, ValueError):
    """Raised when a state name is already taken."""

    pass


class InvalidInput(AutomatonError, ValueError):
    """Raised when simulated input contains the reserved empty symbol."""

    pass


class AutomatonFormatError(AutomatonError, ValueError):
    """Raised when a JSON or XML document does not describe an automaton."""

    def __init__(self, message: str, path: str = None) -> None:
        self.path = path
        super().__init__(message)

    def __str__(self) -> str:
        if self.path:
            return f"{self.path}: {super().__str__()}"
        return super().__str__()
