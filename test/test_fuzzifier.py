# test/test_fuzzifier.py
import pytest

from mamdani.fuzzifier import Fuzzifier
from mamdani.model import Input, InputSet, Rule, RuleSet


@pytest.fixture
def storage():
    inputs = [Input(0.0, 4.0, value=1.0), Input(0.0, 2.0, value=2.0)]
    input_sets = [
        InputSet(0, lambda x: x / 4.0),
        InputSet(1, lambda x: x / 2.0),
        InputSet(0, lambda x: (4.0 - x) / 4.0),
    ]
    rules = [Rule([2, 0], 0), Rule([0, 1], 0), Rule([], 0)]
    return inputs, input_sets, rules


def test_dirty_sets_are_sorted_and_deduplicated(storage):
    _, _, rules = storage
    dirty = Fuzzifier().collect_dirty_input_sets(RuleSet([0, 1]), rules)
    assert dirty == [0, 1, 2]


def test_dirty_sets_only_cover_the_rule_set(storage):
    _, _, rules = storage
    fuzzifier = Fuzzifier()
    assert fuzzifier.collect_dirty_input_sets(RuleSet([1]), rules) == [0, 1]
    assert fuzzifier.collect_dirty_input_sets(RuleSet([2]), rules) == []
    assert fuzzifier.collect_dirty_input_sets(RuleSet([]), rules) == []


def test_fuzzify_writes_degrees(storage):
    inputs, input_sets, _ = storage
    Fuzzifier().fuzzify([0, 1, 2], input_sets, inputs)
    assert input_sets[0].degree == pytest.approx(0.25)
    assert input_sets[1].degree == pytest.approx(1.0)
    assert input_sets[2].degree == pytest.approx(0.75)


def test_fuzzify_leaves_clean_sets_stale(storage):
    inputs, input_sets, _ = storage
    input_sets[2].degree = 0.42
    Fuzzifier().fuzzify([0], input_sets, inputs)
    assert input_sets[0].degree == pytest.approx(0.25)
    assert input_sets[1].degree == 0.0
    assert input_sets[2].degree == 0.42


def test_each_dirty_set_evaluated_once(storage):
    inputs, input_sets, rules = storage
    calls = []

    def counting(x):
        calls.append(x)
        return 0.5

    input_sets[0].fn = counting
    fuzzifier = Fuzzifier()
    dirty = fuzzifier.collect_dirty_input_sets(RuleSet([0, 1, 0]), rules)
    fuzzifier.fuzzify(dirty, input_sets, inputs)
    assert calls == [1.0]
