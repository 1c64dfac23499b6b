"""
Fuzzifies crisp input values into input set membership degrees.

Only the input sets referenced by the active rule set are evaluated, and each
of them at most once per call, however many rules share it. Input sets not
referenced keep their stale degree from an earlier evaluation.
"""

import logging
from typing import List

from mamdani.model import Input, InputSet, Rule, RuleSet

fuzzifier_log = logging.getLogger("fuzzifier")


class Fuzzifier:
    """Computes membership degrees for the input sets a rule set depends on."""

    def collect_dirty_input_sets(self, rule_set: RuleSet, rules: List[Rule]) -> List[int]:
        """
        Collects the input sets referenced by any rule of a rule set.

        Args:
            rule_set (RuleSet): The rule set about to be evaluated.
            rules (List[Rule]): The engine's rule storage.

        Returns:
            List[int]: Sorted, deduplicated input set indices.
        """
        dirty = {
            input_set
            for rule in rule_set.rules
            for input_set in rules[rule].antecedents
        }
        return sorted(dirty)

    def fuzzify(
        self, dirty: List[int], input_sets: List[InputSet], inputs: List[Input]
    ) -> None:
        """
        Writes `degree = f(input.value)` into every dirty input set.

        Args:
            dirty (List[int]): Input set indices to refresh.
            input_sets (List[InputSet]): The engine's input set storage.
            inputs (List[Input]): The engine's input variable storage.
        """
        for index in dirty:
            input_set = input_sets[index]
            input_set.degree = float(input_set.fn(inputs[input_set.input].value))

        if fuzzifier_log.isEnabledFor(logging.DEBUG):
            formatted = {i: f"{input_sets[i].degree:.3f}" for i in dirty}
            fuzzifier_log.debug("Fuzzified %d input sets -> %s", len(dirty), formatted)
