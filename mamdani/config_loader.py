"""
Builds a FuzzyEngine from a configuration dictionary.

The dictionary is normally loaded from a TOML file with `tomllib`. Layout::

    [engine]
    INTEGRAL_STEPS = 40

    [inputs.distance]
    range = [0.0, 50.0]
    [inputs.distance.sets]
    near   = { shape = "left_shoulder", params = [1.5, 5.0] }
    medium = [4.0, 10.0, 20.0, 25.0]            # trapezoid
    far    = { shape = "right_shoulder", params = [20.0, 35.0] }

    [outputs.speed]
    range = [0.0, 1.0]
    [outputs.speed.sets]
    stop = { shape = "left_shoulder", params = [0.0, 0.05] }

    [rules]
    stop_near = { if = ["distance.near"], then = "speed.stop" }

    [rule_groups]
    braking = ["stop_near"]

    [rule_sets]
    normal = ["braking"]

Rule set entries may name individual rules or rule groups. Groups let several
rule sets share most of their rules while swapping a few.
"""

import logging
import tomllib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple

from mamdani.defuzzifier import INTEGRAL_STEPS
from mamdani.engine import FuzzyEngine
from mamdani.errors import ConfigError
from mamdani.handles import (
    InputId,
    InputSetId,
    OutputId,
    OutputSetId,
    RuleId,
    RuleSetId,
)
from mamdani.membership import shape_from_config

config_log = logging.getLogger("config")


@dataclass
class FuzzySystem:
    """
    A configured engine plus name lookups for every handle it created.

    Attributes:
        engine (FuzzyEngine): The engine owning all catalogues.
        inputs (Dict[str, InputId]): Input variables by name.
        outputs (Dict[str, OutputId]): Output variables by name.
        input_sets (Dict[str, Dict[str, InputSetId]]): Input sets by variable, then set name.
        output_sets (Dict[str, Dict[str, OutputSetId]]): Output sets by variable, then set name.
        rules (Dict[str, RuleId]): Rules by name.
        rule_sets (Dict[str, RuleSetId]): Rule sets by name.
    """

    engine: FuzzyEngine
    inputs: Dict[str, InputId] = field(default_factory=dict)
    outputs: Dict[str, OutputId] = field(default_factory=dict)
    input_sets: Dict[str, Dict[str, InputSetId]] = field(default_factory=dict)
    output_sets: Dict[str, Dict[str, OutputSetId]] = field(default_factory=dict)
    rules: Dict[str, RuleId] = field(default_factory=dict)
    rule_sets: Dict[str, RuleSetId] = field(default_factory=dict)

    def set_inputs(self, values: Mapping[str, float]) -> None:
        for name, value in values.items():
            if name not in self.inputs:
                raise KeyError(f"No input variable named '{name}'")
            self.engine.set_input(self.inputs[name], value)

    def evaluate(self, rule_set: str) -> None:
        if rule_set not in self.rule_sets:
            raise KeyError(f"No rule set named '{rule_set}'")
        self.engine.evaluate(self.rule_sets[rule_set])

    def get_output(self, name: str) -> float:
        return self.engine.get_output(self.outputs[name])

    def output_values(self) -> Dict[str, float]:
        return {name: self.engine.get_output(oid) for name, oid in self.outputs.items()}


def _split_ref(ref: str) -> Tuple[str, str]:
    if not isinstance(ref, str) or ref.count(".") != 1:
        raise ConfigError(f"Set reference must look like 'variable.set', got {ref!r}")
    variable, set_name = ref.split(".")
    return variable, set_name


def _range(name: str, section: Mapping[str, Any]) -> Tuple[float, float]:
    try:
        lo, hi = (float(v) for v in section["range"])
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"Variable '{name}' needs range = [min, max]") from e
    if not lo < hi:
        raise ConfigError(f"Variable '{name}' has an empty range [{lo}, {hi}]")
    return lo, hi


def _expand_rule_set(
    name: str, entries: List[str], rules: Mapping[str, RuleId], groups: Mapping[str, List[str]]
) -> List[RuleId]:
    expanded: List[RuleId] = []
    for entry in entries:
        if entry in rules:
            expanded.append(rules[entry])
        elif entry in groups:
            for rule_name in groups[entry]:
                if rule_name not in rules:
                    raise ConfigError(f"Rule group '{entry}' names unknown rule '{rule_name}'")
                expanded.append(rules[rule_name])
        else:
            raise ConfigError(f"Rule set '{name}' names unknown rule or group '{entry}'")
    return expanded


def build_fuzzy_system(cfg: Mapping[str, Any]) -> FuzzySystem:
    """
    Builds a FuzzySystem from a decoded configuration.

    Args:
        cfg (Mapping[str, Any]): The configuration dictionary.

    Returns:
        FuzzySystem: The engine with all variables, sets, rules and rule sets.

    Raises:
        ConfigError: If the configuration is malformed or inconsistent.
    """
    try:
        steps = int(cfg.get("engine", {}).get("INTEGRAL_STEPS", INTEGRAL_STEPS))
        system = FuzzySystem(FuzzyEngine(integral_steps=steps))
    except (TypeError, ValueError) as e:
        raise ConfigError(str(e)) from e
    engine = system.engine

    for name, section in cfg.get("inputs", {}).items():
        system.inputs[name] = engine.add_input(*_range(name, section))
        system.input_sets[name] = {
            set_name: engine.add_input_set(system.inputs[name], shape_from_config(params))
            for set_name, params in section.get("sets", {}).items()
        }

    for name, section in cfg.get("outputs", {}).items():
        system.outputs[name] = engine.add_output(*_range(name, section))
        system.output_sets[name] = {
            set_name: engine.add_output_set(system.outputs[name], shape_from_config(params))
            for set_name, params in section.get("sets", {}).items()
        }

    for name, rule in cfg.get("rules", {}).items():
        if "if" not in rule or "then" not in rule:
            raise ConfigError(f"Rule '{name}' needs both 'if' and 'then'")
        antecedents = []
        for ref in rule["if"]:
            variable, set_name = _split_ref(ref)
            try:
                antecedents.append(system.input_sets[variable][set_name])
            except KeyError as e:
                raise ConfigError(f"Rule '{name}' names unknown input set '{ref}'") from e
        variable, set_name = _split_ref(rule["then"])
        try:
            consequent = system.output_sets[variable][set_name]
        except KeyError as e:
            raise ConfigError(f"Rule '{name}' names unknown output set '{rule['then']}'") from e
        system.rules[name] = engine.add_rule(antecedents, consequent)

    groups = cfg.get("rule_groups", {})
    for name, entries in cfg.get("rule_sets", {}).items():
        rule_ids = _expand_rule_set(name, entries, system.rules, groups)
        system.rule_sets[name] = engine.add_rule_set(rule_ids)

    config_log.info(
        "Fuzzy system built: %d inputs, %d outputs, %d rules, %d rule sets.",
        len(system.inputs),
        len(system.outputs),
        len(system.rules),
        len(system.rule_sets),
    )
    return system


def load_fuzzy_system(path: str) -> FuzzySystem:
    """Loads a TOML file and builds the FuzzySystem it describes."""
    with open(path, "rb") as f:
        cfg = tomllib.load(f)
    config_log.info("Configuration file '%s' loaded.", path)
    return build_fuzzy_system(cfg)
