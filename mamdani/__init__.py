"""Mamdani fuzzy inference engine."""

from mamdani.config_loader import FuzzySystem, build_fuzzy_system, load_fuzzy_system
from mamdani.engine import FuzzyEngine
from mamdani.errors import ConfigError, FuzzyError, UnknownHandleError
from mamdani.handles import InputId, InputSetId, OutputId, OutputSetId, RuleId, RuleSetId

__all__ = [
    "ConfigError",
    "FuzzyEngine",
    "FuzzyError",
    "FuzzySystem",
    "InputId",
    "InputSetId",
    "OutputId",
    "OutputSetId",
    "RuleId",
    "RuleSetId",
    "UnknownHandleError",
    "build_fuzzy_system",
    "load_fuzzy_system",
]
