import numpy as np
import pytest
import utils

from vcdomlem.conditions import RuleSemantics
from vcdomlem.information_table import InformationTable, MissingValueType
from vcdomlem.unions import (Union, UnionRuleDecisionsProvider, Unions,
                             UnionType)


@pytest.fixture
def bus_table() -> InformationTable:
    return utils.create_bus_information_table()


def test_unions_order(bus_table: InformationTable):
    unions = Unions(bus_table)

    assert [u.limiting_decision for u in unions.upward_unions] == [2, 1]
    assert [u.limiting_decision for u in unions.downward_unions] == [0, 1]
    assert all(u.union_type == UnionType.AT_LEAST for u in unions.upward_unions)
    assert all(u.rule_semantics == RuleSemantics.AT_MOST for u in unions.downward_unions)
    assert repr(unions.upward_unions[0]) == "Union(state >= 2)"


def test_approximations(bus_table: InformationTable):
    union = Union(UnionType.AT_LEAST, 2, bus_table)

    assert union.objects == frozenset(range(7))
    assert union.complementary_objects == frozenset(range(7, 17))
    assert union.lower_approximation(0.0) == frozenset({0, 1, 2, 3})
    assert union.upper_approximation(0.0) == frozenset(range(9))
    assert union.boundary(0.0) == frozenset({4, 5, 6, 7, 8})
    assert union.positive_region(0.0) == frozenset({0, 1, 2, 3})


def test_epsilon_consistencies(bus_table: InformationTable):
    union = Union(UnionType.AT_LEAST, 2, bus_table)

    # e is dominated by h, f by h and i, g by i
    assert union.get_epsilon_consistency(0) == 0.0
    assert union.get_epsilon_consistency(4) == pytest.approx(0.1)
    assert union.get_epsilon_consistency(5) == pytest.approx(0.2)
    assert union.get_epsilon_consistency(6) == pytest.approx(0.1)
    assert union.lower_approximation(0.1) == frozenset({0, 1, 2, 3, 4, 6})
    assert union.lower_approximation(0.2) == union.objects


def test_downward_union(bus_table: InformationTable):
    union = Union(UnionType.AT_MOST, 1, bus_table)

    assert union.objects == frozenset(range(7, 17))
    # h and i dominate e, f and g
    assert union.lower_approximation(0.0) == frozenset(range(9, 17))
    assert union.upper_approximation(0.0) == frozenset(range(4, 17))


def test_neutral_objects(bus_table: InformationTable):
    union = Union(UnionType.AT_LEAST, 2, bus_table, neutral_objects=[7])

    assert union.neutral_objects == frozenset({7})
    assert 7 not in union.complementary_objects
    assert union.get_epsilon_consistency(4) == 0.0
    assert union.get_epsilon_consistency(5) == pytest.approx(1 / 9)
    assert 7 not in union.upper_approximation(0.0)


def test_invalid_union(bus_table: InformationTable):
    with pytest.raises(ValueError):
        Union(UnionType.AT_LEAST, 5, bus_table)
    with pytest.raises(TypeError):
        Union(UnionType.AT_LEAST, None, bus_table)


def test_rule_decisions_provider(bus_table: InformationTable):
    unions = Unions(bus_table)
    provider = UnionRuleDecisionsProvider()

    decisions = provider.get_rule_decisions(unions.upward_unions[0])
    assert len(decisions) == 1 and len(decisions[0]) == 1
    assert str(decisions[0][0]) == "state >= 2"
    assert str(provider.get_rule_decisions(unions.downward_unions[0])[0][0]) == (
        "state <= 0"
    )


def test_approximations_with_missing_values():
    table = utils.create_table(
        {"a": [np.nan, 4.0, 1.0], "b": [4.0, 4.0, 1.0]},
        [1, 2, 1],
        missing_value_type=MissingValueType.MV15,
    )
    at_most = Union(UnionType.AT_MOST, 1, table)
    at_least = Union(UnionType.AT_LEAST, 2, table)

    # object 1 belongs to the negative cone of object 0, missing "a" of 0 does not
    # restrict it
    assert at_most.get_epsilon_consistency(0) == 1.0
    assert at_most.lower_approximation(0.0) == frozenset({2})
    assert at_most.upper_approximation(0.0) == frozenset({0, 2})
    # object 0 is outside the positive cone of object 1
    assert at_least.lower_approximation(0.0) == frozenset({1})
    assert at_least.positive_region(0.0) == frozenset({1})
