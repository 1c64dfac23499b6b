"""
Opaque integer handles returned by FuzzyEngine at creation time.

Each handle carries the token of the engine that created it plus an index
into that engine's flat storage. Handles are immutable and hashable, so they
can be used as dict keys by callers.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Handle:
    """
    Base handle.

    Attributes:
        engine (int): Token of the owning FuzzyEngine.
        index (int): Position in the owning engine's storage list.
    """

    engine: int
    index: int

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.index})"


class InputId(Handle):
    pass


class OutputId(Handle):
    pass


class InputSetId(Handle):
    pass


class OutputSetId(Handle):
    pass


class RuleId(Handle):
    pass


class RuleSetId(Handle):
    pass
