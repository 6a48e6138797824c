import numpy as np
import pandas as pd
import pytest
import utils

from vcdomlem.exceptions import InvalidSizeError, InvalidValueError
from vcdomlem.information_table import (AttributePreferenceType,
                                        InformationTable, MissingValueType)


def test_bus_table():
    table: InformationTable = utils.create_bus_information_table()

    assert table.number_of_objects == 17
    assert len(table) == 17
    assert table.number_of_attributes == 3
    assert [a.name for a in table.active_condition_attributes] == [
        "symptom1",
        "symptom2",
    ]
    assert table.decision_attribute.name == "state"
    assert table.decision_attribute.is_decision
    assert table.get_field(0, 0) == 40.0
    assert table.get_decision(16) == 0
    assert table.ordered_decision_values() == [0, 1, 2]


def test_default_preference_types():
    table = utils.create_table(
        {"numeric": [1, 2, 3], "nominal": ["x", "y", "x"]}, [0, 1, 1]
    )

    assert table.get_attribute(0).preference_type == AttributePreferenceType.GAIN
    assert table.get_attribute(1).preference_type == AttributePreferenceType.NONE
    assert not table.get_attribute(1).is_criterion


def test_cost_decision_is_ordered_descending():
    table = utils.create_table(
        {"a": [1, 2, 3]}, [3, 1, 2], decision_preference_type="cost"
    )

    assert table.ordered_decision_values() == [3, 2, 1]
    assert table.decision_ranks.tolist() == [0, 2, 1]


def test_dominance_cones():
    table = utils.create_table(
        {"a": [1, 2, 2], "b": [3, 1, 2]}, [0, 1, 1], preference_types={"b": "cost"}
    )
    positive: np.ndarray = table.positive_cones
    negative: np.ndarray = table.negative_cones

    # [x, y]: y belongs to the cone of x
    assert positive[0, 1] and negative[1, 0]
    assert not positive[1, 0] and not negative[0, 1]
    assert positive[2, 1] and negative[1, 2]
    assert not positive[1, 2]
    assert np.all(np.diag(positive)) and np.all(np.diag(negative))
    assert np.array_equal(positive, negative.T)


def test_dominance_cones_with_missing_values():
    columns: dict = {"a": [1.0, np.nan, 3.0]}
    mv2 = utils.create_table(columns, [0, 1, 2])
    mv15 = utils.create_table(
        columns, [0, 1, 2], missing_value_type=MissingValueType.MV15
    )

    assert mv2.positive_cones[1, 2] and mv2.positive_cones[2, 1]
    assert mv2.negative_cones[1, 0] and mv2.negative_cones[0, 1]
    # missing evaluation of the origin does not restrict its cones
    assert mv15.positive_cones[1, 0] and mv15.positive_cones[1, 2]
    assert mv15.negative_cones[1, 0] and mv15.negative_cones[1, 2]
    # object with missing evaluation is outside cones of other objects
    assert not mv15.positive_cones[0, 1]
    assert not mv15.negative_cones[2, 1]
    assert mv2.get_field(1, 0) is None


def test_invalid_tables():
    with pytest.raises(TypeError):
        InformationTable(None, pd.Series([1]))
    with pytest.raises(InvalidSizeError):
        InformationTable(pd.DataFrame({"a": [1, 2]}), pd.Series([1]))
    with pytest.raises(InvalidValueError):
        InformationTable(pd.DataFrame({"a": [1, 2]}), pd.Series([1, None]))
    with pytest.raises(InvalidValueError):
        InformationTable(
            pd.DataFrame({"a": [1, 2]}), pd.Series([1, 2]), preference_types={"b": "gain"}
        )


def test_inactive_attributes():
    table = utils.create_table(
        {"a": [1, 2], "b": [2, 1]}, [0, 1], inactive_attributes=["b"]
    )

    assert [a.name for a in table.active_condition_attributes] == ["a"]
    assert table.positive_cones[0, 1]


def test_hash_depends_on_contents():
    table_1 = utils.create_table({"a": [1, 2]}, [0, 1])
    table_2 = utils.create_table({"a": [1, 2]}, [0, 1])
    table_3 = utils.create_table({"a": [1, 3]}, [0, 1])

    assert table_1.hash == table_2.hash
    assert table_1.hash != table_3.hash
    assert len(table_1.hash) == 64
