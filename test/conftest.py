# test/conftest.py
from pathlib import Path
from types import SimpleNamespace

import matplotlib

matplotlib.use("Agg")

import pytest

from mamdani.config_loader import load_fuzzy_system
from mamdani.engine import FuzzyEngine

PROJECT_DIR = Path(__file__).resolve().parents[1]
CAR_FUZZY_PATH = PROJECT_DIR / "vehicle" / "car_fuzzy.toml"
SCENARIO_PATH = PROJECT_DIR / "simulation" / "scenario.toml"


@pytest.fixture
def literal_engine():
    """
    Two inputs, one output with two sets and two rules:

        i1 in [0, 4]: is1 = x/4,     is3 = (4 - x)/4
        i2 in [0, 2]: is2 = x/2,     is4 = (2 - x)/2
        o1 in [0, 1]: os1 = x,       os2 = 1 - x
        r1: is1 AND is2 -> os1
        r2: is3 AND is4 -> os2

    A second output o2 in [0, 2] is registered but never targeted.
    """
    engine = FuzzyEngine()
    i1 = engine.add_input(0.0, 4.0)
    i2 = engine.add_input(0.0, 2.0)
    o1 = engine.add_output(0.0, 1.0)
    o2 = engine.add_output(0.0, 2.0)

    is1 = engine.add_input_set(i1, lambda x: x / 4.0)
    is2 = engine.add_input_set(i2, lambda x: x / 2.0)
    is3 = engine.add_input_set(i1, lambda x: (4.0 - x) / 4.0)
    is4 = engine.add_input_set(i2, lambda x: (2.0 - x) / 2.0)

    os1 = engine.add_output_set(o1, lambda x: x)
    os2 = engine.add_output_set(o1, lambda x: 1.0 - x)

    r1 = engine.add_rule([is1, is2], os1)
    r2 = engine.add_rule([is3, is4], os2)
    rs = engine.add_rule_set([r1, r2])

    return SimpleNamespace(
        engine=engine,
        i1=i1, i2=i2, o1=o1, o2=o2,
        is1=is1, is2=is2, is3=is3, is4=is4,
        os1=os1, os2=os2,
        r1=r1, r2=r2, rs=rs,
    )


@pytest.fixture
def car_system():
    return load_fuzzy_system(str(CAR_FUZZY_PATH))
