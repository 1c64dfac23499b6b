"""
Exception types raised by the fuzzy inference engine and its config loader.

The evaluator itself never raises on numeric degeneracies (an empty envelope
yields NaN/inf); exceptions are reserved for programming and configuration
mistakes.
"""


class FuzzyError(Exception):
    """Base class for all errors raised by the mamdani package."""


class UnknownHandleError(FuzzyError, KeyError):
    """A handle does not belong to this engine, has the wrong kind, or is out of range."""


class ConfigError(FuzzyError, ValueError):
    """A fuzzy system configuration is malformed or references unknown names."""
