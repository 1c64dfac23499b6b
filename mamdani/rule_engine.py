"""
Evaluates a rule set to determine output set firing strengths.

For each rule the firing strength is the fuzzy AND (min) of its antecedent
degrees. Rules sharing a consequent output set are combined with fuzzy OR
(max). Every output set fired in the call is recorded on its output variable
so that the defuzzifier only integrates what this call touched.
"""

import logging
from typing import List

from mamdani.model import InputSet, Output, OutputSet, Rule, RuleSet

rule_engine_log = logging.getLogger("rule_engine")
WZ_log = logging.getLogger("WZ_engine")


class RuleEngine:
    """Mamdani min/max rule evaluation over the engine's flat storage."""

    def evaluate(
        self,
        rule_set: RuleSet,
        rules: List[Rule],
        input_sets: List[InputSet],
        output_sets: List[OutputSet],
        outputs: List[Output],
    ) -> List[int]:
        """
        Fires every rule of a rule set, in order.

        The accumulated strength of an output set starts at 0.0 the first time
        a rule of this call targets it, then folds in each further rule with
        max. Output sets not targeted in this call are left alone.

        Args:
            rule_set (RuleSet): The active rule set.
            rules (List[Rule]): The engine's rule storage.
            input_sets (List[InputSet]): Input sets, already fuzzified.
            output_sets (List[OutputSet]): The engine's output set storage.
            outputs (List[Output]): The engine's output variable storage.

        Returns:
            List[int]: Indices of outputs touched by this call, in first-touch
            order.
        """
        for output in outputs:
            output.touched.clear()

        touched_outputs: List[int] = []

        for rule_index in rule_set.rules:
            rule = rules[rule_index]

            # Firing strength is the fuzzy AND (min) of the antecedent degrees.
            firing = 1.0
            for input_set in rule.antecedents:
                firing = min(firing, input_sets[input_set].degree)
            rule.firing = firing

            output_set = output_sets[rule.consequent]
            output = outputs[output_set.output]
            if rule.consequent not in output.touched:
                output_set.firing_strength = 0.0
                output.touched.append(rule.consequent)
                if output_set.output not in touched_outputs:
                    touched_outputs.append(output_set.output)
            output_set.firing_strength = max(output_set.firing_strength, firing)

            WZ_log.debug(
                "Rule# %d antecedents=%s W=%.3f -> output_set=%d W_acc=%.3f",
                rule_index,
                rule.antecedents,
                firing,
                rule.consequent,
                output_set.firing_strength,
            )

        rule_engine_log.debug(
            "Evaluated %d rules, touched outputs %s",
            len(rule_set.rules),
            touched_outputs,
        )
        return touched_outputs
