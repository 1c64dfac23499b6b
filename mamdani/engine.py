"""
Orchestrates the Mamdani fuzzy inference engine.

FuzzyEngine owns every catalogue (inputs, outputs, input sets, output sets,
rules and rule sets) as flat lists. Callers only ever hold the opaque handles
returned by the `add_*` methods. Per tick the caller writes inputs with
`set_input()`, runs `evaluate()` on one rule set and reads results with
`get_output()`.

The engine is not thread-safe. State mutates in place and is not scoped to
any caller, so an instance shared between several agents must be driven
strictly one agent at a time, with outputs read back before the next agent's
inputs are written.
"""

import itertools
import logging
from typing import List, Sequence, Type, TypeVar

from mamdani.defuzzifier import INTEGRAL_STEPS, Defuzzifier
from mamdani.errors import UnknownHandleError
from mamdani.fuzzifier import Fuzzifier
from mamdani.handles import (
    Handle,
    InputId,
    InputSetId,
    OutputId,
    OutputSetId,
    RuleId,
    RuleSetId,
)
from mamdani.model import (
    Input,
    InputSet,
    MembershipFunction,
    Output,
    OutputSet,
    Rule,
    RuleSet,
)
from mamdani.rule_engine import RuleEngine

engine_log = logging.getLogger("engine")

H = TypeVar("H", bound=Handle)

_engine_tokens = itertools.count(1)


class FuzzyEngine:
    """
    The Mamdani fuzzy inference engine.

    Attributes:
        fuzzifier (Fuzzifier): Refreshes input set degrees.
        rule_engine (RuleEngine): Computes output set firing strengths.
        defuzzifier (Defuzzifier): Computes crisp output values.
    """

    def __init__(self, integral_steps: int = INTEGRAL_STEPS):
        """
        Initializes an empty engine.

        Args:
            integral_steps (int): Uniform integration steps used when
                defuzzifying each output. Defaults to 40.
        """
        self._token = next(_engine_tokens)

        self._inputs: List[Input] = []
        self._outputs: List[Output] = []
        self._input_sets: List[InputSet] = []
        self._output_sets: List[OutputSet] = []
        self._rules: List[Rule] = []
        self._rule_sets: List[RuleSet] = []

        self.fuzzifier = Fuzzifier()
        self.rule_engine = RuleEngine()
        self.defuzzifier = Defuzzifier(integral_steps)
        engine_log.info("Fuzzy engine #%d initialized.", self._token)

    # ------------------------------------------------------------
    # Handles
    # ------------------------------------------------------------
    def _new_handle(self, kind: Type[H], store: list) -> H:
        return kind(self._token, len(store) - 1)

    def _resolve(self, handle: Handle, kind: Type[Handle], store: list) -> int:
        if type(handle) is not kind:
            raise UnknownHandleError(
                f"Expected {kind.__name__}, got {type(handle).__name__}: {handle!r}"
            )
        if handle.engine != self._token:
            raise UnknownHandleError(f"{handle!r} belongs to another engine")
        if not 0 <= handle.index < len(store):
            raise UnknownHandleError(f"{handle!r} is out of range")
        return handle.index

    # ------------------------------------------------------------
    # Variable registry
    # ------------------------------------------------------------
    def add_input(self, min: float, max: float) -> InputId:
        self._inputs.append(Input(float(min), float(max)))
        return self._new_handle(InputId, self._inputs)

    def add_output(self, min: float, max: float) -> OutputId:
        self._outputs.append(Output(float(min), float(max)))
        return self._new_handle(OutputId, self._outputs)

    def set_input(self, input_id: InputId, value: float) -> None:
        """Stores a raw input value. Values outside [min, max] are kept as is."""
        self._inputs[self._resolve(input_id, InputId, self._inputs)].value = float(value)

    def get_input(self, input_id: InputId) -> float:
        return self._inputs[self._resolve(input_id, InputId, self._inputs)].value

    def get_output(self, output_id: OutputId) -> float:
        """
        Returns the last defuzzified value of an output.

        The value is 0.0 until an evaluation first touches the output, and it
        is carried over unchanged by evaluations that do not touch it. It may
        be NaN or ±inf after a zero-area evaluation.
        """
        return self._outputs[self._resolve(output_id, OutputId, self._outputs)].value

    # ------------------------------------------------------------
    # Membership catalogue
    # ------------------------------------------------------------
    def add_input_set(self, input_id: InputId, fn: MembershipFunction) -> InputSetId:
        index = self._resolve(input_id, InputId, self._inputs)
        if not callable(fn):
            raise TypeError(f"Membership function must be callable, got {fn!r}")
        self._input_sets.append(InputSet(index, fn))
        return self._new_handle(InputSetId, self._input_sets)

    def add_output_set(self, output_id: OutputId, fn: MembershipFunction) -> OutputSetId:
        index = self._resolve(output_id, OutputId, self._outputs)
        if not callable(fn):
            raise TypeError(f"Membership function must be callable, got {fn!r}")
        self._output_sets.append(OutputSet(index, fn))
        return self._new_handle(OutputSetId, self._output_sets)

    # ------------------------------------------------------------
    # Rule store
    # ------------------------------------------------------------
    def add_rule(self, antecedents: Sequence[InputSetId], consequent: OutputSetId) -> RuleId:
        """
        Adds a rule `IF a1 AND a2 AND ... THEN consequent`.

        An empty antecedent list is accepted; such a rule always fires with
        strength 1.0.
        """
        input_sets = [
            self._resolve(a, InputSetId, self._input_sets) for a in antecedents
        ]
        output_set = self._resolve(consequent, OutputSetId, self._output_sets)
        self._rules.append(Rule(input_sets, output_set))
        return self._new_handle(RuleId, self._rules)

    def add_rule_set(self, rules: Sequence[RuleId]) -> RuleSetId:
        """Adds an ordered rule set. A rule may belong to any number of rule sets."""
        indices = [self._resolve(r, RuleId, self._rules) for r in rules]
        self._rule_sets.append(RuleSet(indices))
        return self._new_handle(RuleSetId, self._rule_sets)

    # ------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------
    def evaluate(self, rule_set_id: RuleSetId) -> None:
        """
        Runs one full inference cycle on a rule set.

        1) Fuzzify the input sets the rule set references.
        2) Fire the rules (min over antecedents, max per output set).
        3) Defuzzify every output the rule set touched.

        Outputs the rule set does not touch keep their previous value.
        """
        rule_set = self._rule_sets[self._resolve(rule_set_id, RuleSetId, self._rule_sets)]
        engine_log.debug("--- Evaluate rule set %d (%d rules) ---", rule_set_id.index, len(rule_set.rules))

        # 1) Fuzzification
        dirty = self.fuzzifier.collect_dirty_input_sets(rule_set, self._rules)
        self.fuzzifier.fuzzify(dirty, self._input_sets, self._inputs)

        # 2) Rule evaluation
        touched = self.rule_engine.evaluate(
            rule_set, self._rules, self._input_sets, self._output_sets, self._outputs
        )

        # 3) Defuzzification
        for index in touched:
            output = self._outputs[index]
            output.value = self.defuzzifier.defuzzify(output, self._output_sets)
            engine_log.debug("Output %d = %.4f", index, output.value)

    # ------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------
    def input_set_degree(self, input_set_id: InputSetId) -> float:
        """Membership degree recorded by the last evaluation that refreshed this set."""
        return self._input_sets[self._resolve(input_set_id, InputSetId, self._input_sets)].degree

    def output_set_strength(self, output_set_id: OutputSetId) -> float:
        """Aggregated firing strength of an output set from the last evaluation touching it."""
        index = self._resolve(output_set_id, OutputSetId, self._output_sets)
        return self._output_sets[index].firing_strength

    def rule_firing(self, rule_id: RuleId) -> float:
        """Firing strength (min of antecedent degrees) from the last evaluation running the rule."""
        return self._rules[self._resolve(rule_id, RuleId, self._rules)].firing

    def touched_output_sets(self, output_id: OutputId) -> List[OutputSetId]:
        """Output sets fired for this output by the most recent evaluation."""
        output = self._outputs[self._resolve(output_id, OutputId, self._outputs)]
        return [OutputSetId(self._token, i) for i in output.touched]

    def envelope(self, output_id: OutputId, x: float) -> float:
        """Aggregated output membership at `x` as of the most recent evaluation."""
        output = self._outputs[self._resolve(output_id, OutputId, self._outputs)]
        return self.defuzzifier.envelope(output, self._output_sets, x)

    def input_set_function(self, input_set_id: InputSetId) -> MembershipFunction:
        return self._input_sets[self._resolve(input_set_id, InputSetId, self._input_sets)].fn

    def output_set_function(self, output_set_id: OutputSetId) -> MembershipFunction:
        return self._output_sets[self._resolve(output_set_id, OutputSetId, self._output_sets)].fn

    def output_range(self, output_id: OutputId) -> tuple:
        output = self._outputs[self._resolve(output_id, OutputId, self._outputs)]
        return output.min, output.max

    def input_range(self, input_id: InputId) -> tuple:
        inp = self._inputs[self._resolve(input_id, InputId, self._inputs)]
        return inp.min, inp.max

    def rule_antecedents(self, rule_id: RuleId) -> List[InputSetId]:
        rule = self._rules[self._resolve(rule_id, RuleId, self._rules)]
        return [InputSetId(self._token, i) for i in rule.antecedents]

    def rule_consequent(self, rule_id: RuleId) -> OutputSetId:
        rule = self._rules[self._resolve(rule_id, RuleId, self._rules)]
        return OutputSetId(self._token, rule.consequent)

    def rule_set_rules(self, rule_set_id: RuleSetId) -> List[RuleId]:
        rule_set = self._rule_sets[self._resolve(rule_set_id, RuleSetId, self._rule_sets)]
        return [RuleId(self._token, i) for i in rule_set.rules]
