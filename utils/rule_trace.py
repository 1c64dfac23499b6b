# rule_trace.py

from typing import Any, Dict, List

import matplotlib.pyplot as plt

from mamdani.config_loader import FuzzySystem


def _names(system: FuzzySystem):
    """Reverse lookups from handles back to configured names."""
    input_sets = {
        sid: f"{var}.{name}" for var, sets in system.input_sets.items() for name, sid in sets.items()
    }
    output_sets = {
        sid: f"{var}.{name}" for var, sets in system.output_sets.items() for name, sid in sets.items()
    }
    rules = {rid: name for name, rid in system.rules.items()}
    return input_sets, output_sets, rules


def trace_rule_firing(system: FuzzySystem, rule_set: str) -> List[Dict[str, Any]]:
    """
    Reports what each rule of a rule set did in the most recent evaluation.

    Read the trace right after `system.evaluate(rule_set)`; a later
    evaluation overwrites the recorded degrees.

    Args:
        system: The configured fuzzy system.
        rule_set: Name of the rule set that was evaluated.

    Returns:
        One dict per rule, in rule-set order, with the rule name, antecedent
        degrees, firing strength, consequent and its aggregated strength.
    """
    engine = system.engine
    input_names, output_names, rule_names = _names(system)

    traces = []
    for rule_id in engine.rule_set_rules(system.rule_sets[rule_set]):
        consequent = engine.rule_consequent(rule_id)
        traces.append(
            {
                "rule": rule_names.get(rule_id, repr(rule_id)),
                "antecedents": {
                    input_names[a]: engine.input_set_degree(a)
                    for a in engine.rule_antecedents(rule_id)
                },
                "firing_strength": engine.rule_firing(rule_id),
                "consequent": output_names[consequent],
                "consequent_strength": engine.output_set_strength(consequent),
            }
        )
    return traces


def plot_rule_contributions(trace_data, title="Rule Contributions", show=True):
    labels = [t["rule"] for t in trace_data]
    ws = [t["firing_strength"] for t in trace_data]

    fig, ax1 = plt.subplots(figsize=(12, 6))

    bars = ax1.bar(range(len(labels)), ws, color="blue", alpha=0.7)

    ax1.set_ylabel("Firing Strength")
    ax1.set_ylim(0.0, 1.1)
    ax1.set_xticks(range(len(labels)))
    ax1.set_xticklabels(labels, rotation=45, ha="right")

    # Annotate W values on top of bars
    for bar in bars:
        height = bar.get_height()
        if height > 0:
            ax1.text(
                bar.get_x() + bar.get_width() / 2,
                height + 0.01,
                f"{height:.2f}",
                ha="center",
                va="bottom",
                fontsize=8,
                color="black",
            )

    ax1.set_title(title)
    fig.tight_layout()
    if show:
        plt.show()
    return fig
