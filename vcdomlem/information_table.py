"""Minimal information table consumed by the rule induction engine.

The table wraps a pandas DataFrame with condition attributes and a Series with
the decision attribute. Every condition column is an evaluation attribute with
a preference type: numerical columns are treated as gain-type criteria and
non-numerical columns as attributes without preference, unless specified
otherwise.
"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

import numpy as np
import pandas as pd

from vcdomlem import _helpers
from vcdomlem.exceptions import InvalidSizeError, InvalidValueError


class AttributeType(Enum):
    CONDITION = "condition"
    DECISION = "decision"


class AttributePreferenceType(Enum):
    GAIN = "gain"
    COST = "cost"
    NONE = "none"


class MissingValueType(Enum):
    """Semantics of missing evaluations.

    MV2: missing evaluation is equal to any other evaluation.
    MV15: missing evaluation of the origin of a dominance cone is equal to any
        other evaluation, but an object with a missing evaluation does not
        belong to the cone of an object with a known evaluation.
    """

    MV2 = "mv2"
    MV15 = "mv1.5"


@dataclass(frozen=True)
class EvaluationAttributeWithContext:
    index: int
    name: str
    attribute_type: AttributeType
    preference_type: AttributePreferenceType
    active: bool = True

    @property
    def is_decision(self) -> bool:
        return self.attribute_type == AttributeType.DECISION

    @property
    def is_criterion(self) -> bool:
        return self.preference_type != AttributePreferenceType.NONE


PreferenceTypeLike = Union[AttributePreferenceType, str]


class InformationTable:
    """Table of objects described by condition attributes and a decision.

    Args:
        X (pd.DataFrame): condition attributes
        y (pd.Series): decision attribute
        preference_types (Optional[dict[str, PreferenceTypeLike]], optional):
            preference types of condition attributes given by column name.
            Columns that are not listed get GAIN (numerical columns) or NONE
            (nominal columns). Defaults to None.
        decision_preference_type (PreferenceTypeLike, optional): preference type
            of the decision. Defaults to AttributePreferenceType.GAIN.
        missing_value_type (MissingValueType, optional): semantics of missing
            values. Defaults to MissingValueType.MV2.
        inactive_attributes (Optional[list[str]], optional): names of condition
            attributes that should not be used in rules. Defaults to None.
    """

    def __init__(
        self,
        X: pd.DataFrame,
        y: pd.Series,
        preference_types: Optional[dict[str, PreferenceTypeLike]] = None,
        decision_preference_type: PreferenceTypeLike = AttributePreferenceType.GAIN,
        missing_value_type: MissingValueType = MissingValueType.MV2,
        inactive_attributes: Optional[list[str]] = None,
    ):
        _helpers.not_none(X, "Condition attributes data frame is null.")
        _helpers.not_none(y, "Decision attribute series is null.")
        if X.shape[0] != y.shape[0]:
            raise InvalidSizeError(
                f"Number of objects in X ({X.shape[0]}) and y ({y.shape[0]}) differ."
            )
        if y.isna().any():
            raise InvalidValueError("Decision attribute contains missing values.")
        self.X: pd.DataFrame = X.reset_index(drop=True)
        self.y: pd.Series = y.reset_index(drop=True)
        self.missing_value_type: MissingValueType = MissingValueType(
            missing_value_type
        )
        preference_types = preference_types if preference_types is not None else {}
        inactive_attributes = (
            set(inactive_attributes) if inactive_attributes is not None else set()
        )
        unknown_columns: set = (
            set(preference_types.keys()) | inactive_attributes
        ) - set(self.X.columns)
        if len(unknown_columns) > 0:
            raise InvalidValueError(f"Unknown attributes: {sorted(unknown_columns)}")

        nominal_indexes: set[int] = set(_helpers.get_nominal_indexes(self.X))
        self.attributes: list[EvaluationAttributeWithContext] = []
        for index, column_name in enumerate(self.X.columns):
            default_type = (
                AttributePreferenceType.NONE
                if index in nominal_indexes
                else AttributePreferenceType.GAIN
            )
            self.attributes.append(
                EvaluationAttributeWithContext(
                    index=index,
                    name=str(column_name),
                    attribute_type=AttributeType.CONDITION,
                    preference_type=AttributePreferenceType(
                        preference_types.get(column_name, default_type)
                    ),
                    active=column_name not in inactive_attributes,
                )
            )
        self.attributes.append(
            EvaluationAttributeWithContext(
                index=len(self.attributes),
                name=str(y.name) if y.name is not None else "decision",
                attribute_type=AttributeType.DECISION,
                preference_type=AttributePreferenceType(decision_preference_type),
            )
        )

        self._columns: list[np.ndarray] = [
            self.X.iloc[:, index].to_numpy() for index in range(self.X.shape[1])
        ] + [self.y.to_numpy()]
        self._missing_masks: list[np.ndarray] = [
            self.X.iloc[:, index].isna().to_numpy()
            for index in range(self.X.shape[1])
        ] + [np.zeros(self.y.shape[0], dtype=bool)]
        self._positive_cones: Optional[np.ndarray] = None
        self._negative_cones: Optional[np.ndarray] = None
        self._decision_ranks: Optional[np.ndarray] = None
        self._hash: Optional[str] = None

    @property
    def number_of_objects(self) -> int:
        return self.X.shape[0]

    @property
    def number_of_attributes(self) -> int:
        return len(self.attributes)

    @property
    def decision_attribute(self) -> EvaluationAttributeWithContext:
        return self.attributes[-1]

    @property
    def active_condition_attributes(self) -> list[EvaluationAttributeWithContext]:
        return [
            attribute
            for attribute in self.attributes
            if attribute.attribute_type == AttributeType.CONDITION and attribute.active
        ]

    @property
    def decisions(self) -> np.ndarray:
        return self._columns[-1]

    def get_attribute(self, attribute_index: int) -> EvaluationAttributeWithContext:
        return self.attributes[attribute_index]

    def get_column(self, attribute_index: int) -> np.ndarray:
        return self._columns[attribute_index]

    def get_missing_mask(self, attribute_index: int) -> np.ndarray:
        return self._missing_masks[attribute_index]

    def get_field(self, object_index: int, attribute_index: int) -> Any:
        """Returns evaluation of the object on the attribute, None if it is missing"""
        if object_index < 0 or object_index >= self.number_of_objects:
            raise IndexError(f"Object index {object_index} out of range.")
        if self._missing_masks[attribute_index][object_index]:
            return None
        return _helpers.to_python_scalar(self._columns[attribute_index][object_index])

    def get_decision(self, object_index: int) -> Any:
        return self.get_field(object_index, self.decision_attribute.index)

    def ordered_decision_values(self) -> list[Any]:
        """Returns distinct decisions ordered from the worst to the best one

        Raises:
            InvalidValueError: when decision attribute has no preference type

        Returns:
            list[Any]: ordered decisions
        """
        preference_type = self.decision_attribute.preference_type
        if preference_type == AttributePreferenceType.NONE:
            raise InvalidValueError(
                "Decision classes can be ordered only for gain or cost decision."
            )
        values: list[Any] = [
            _helpers.to_python_scalar(value) for value in np.unique(self.decisions)
        ]
        values.sort(reverse=preference_type == AttributePreferenceType.COST)
        return values

    @property
    def decision_ranks(self) -> np.ndarray:
        """Position of the decision of each object in ordered decision values"""
        if self._decision_ranks is None:
            ranks: dict[Any, int] = {
                value: rank for rank, value in enumerate(self.ordered_decision_values())
            }
            self._decision_ranks = np.array(
                [ranks[_helpers.to_python_scalar(value)] for value in self.decisions],
                dtype=int,
            )
        return self._decision_ranks

    @property
    def positive_cones(self) -> np.ndarray:
        """Positive dominance cones. Element [x, y] is True when object y is at
        least as good as object x on every active condition attribute."""
        if self._positive_cones is None:
            self._positive_cones = self._calculate_cones(at_least=True)
        return self._positive_cones

    @property
    def negative_cones(self) -> np.ndarray:
        """Negative dominance cones. Element [x, y] is True when object y is at
        most as good as object x on every active condition attribute."""
        if self._negative_cones is None:
            self._negative_cones = self._calculate_cones(at_least=False)
        return self._negative_cones

    def _calculate_cones(self, at_least: bool) -> np.ndarray:
        # rows are origins of the cones, columns are compared objects
        n: int = self.number_of_objects
        cones: np.ndarray = np.ones((n, n), dtype=bool)
        for attribute in self.active_condition_attributes:
            column: np.ndarray = self._columns[attribute.index]
            missing: np.ndarray = self._missing_masks[attribute.index]
            if missing.any():
                if missing.all():
                    continue
                # any known value works here, relation on missing is overridden below
                column = np.where(missing, column[~missing][0], column)
            origin: np.ndarray = column[:, np.newaxis]
            other: np.ndarray = column[np.newaxis, :]
            with np.errstate(invalid="ignore"):
                if attribute.preference_type == AttributePreferenceType.NONE:
                    relation = other == origin
                elif (attribute.preference_type == AttributePreferenceType.GAIN) == (
                    at_least
                ):
                    relation = other >= origin
                else:
                    relation = other <= origin
            relation = np.asarray(relation, dtype=bool)
            if missing.any():
                origin_missing: np.ndarray = missing[:, np.newaxis]
                other_missing: np.ndarray = missing[np.newaxis, :]
                if self.missing_value_type == MissingValueType.MV2:
                    relation = relation | origin_missing | other_missing
                else:
                    relation = (relation & ~other_missing) | origin_missing
            cones &= relation
        return cones

    @property
    def hash(self) -> str:
        """SHA-256 hash of the table contents"""
        if self._hash is None:
            df: pd.DataFrame = pd.concat([self.X, self.y], axis=1)
            hashed_rows: np.ndarray = pd.util.hash_pandas_object(
                df, index=False
            ).to_numpy()
            self._hash = hashlib.sha256(hashed_rows.tobytes()).hexdigest().upper()
        return self._hash

    def __len__(self) -> int:
        return self.number_of_objects
