"""
Flat records stored by FuzzyEngine.

Every record refers to others by plain list index, never by object
reference. Only `Input.value`, `Output.value`, `InputSet.degree`,
`OutputSet.firing_strength` and the per-call tracking fields mutate, and
only from within `FuzzyEngine.set_input()` / `FuzzyEngine.evaluate()`.
"""

from dataclasses import dataclass, field
from typing import Callable, List

MembershipFunction = Callable[[float], float]


@dataclass
class Input:
    min: float
    max: float
    value: float = 0.0


@dataclass
class Output:
    """
    An output variable.

    Attributes:
        min (float): Lower bound of the defuzzification interval.
        max (float): Upper bound of the defuzzification interval.
        value (float): Last crisp value. Kept across evaluations that do not
            touch this output.
        touched (List[int]): Output set indices fired during the most recent
            evaluation, in first-touch order.
    """

    min: float
    max: float
    value: float = 0.0
    touched: List[int] = field(default_factory=list)


@dataclass
class InputSet:
    input: int
    fn: MembershipFunction
    degree: float = 0.0


@dataclass
class OutputSet:
    output: int
    fn: MembershipFunction
    firing_strength: float = 0.0


@dataclass
class Rule:
    antecedents: List[int]
    consequent: int
    # Raw min over antecedent degrees from the last evaluation that ran this rule.
    firing: float = 0.0


@dataclass
class RuleSet:
    rules: List[int]
