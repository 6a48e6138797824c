"""Unions of ordered decision classes and their variable consistency
approximations.

Upward union "at least v" contains objects whose decision is at least as good as
v, downward union "at most v" contains objects whose decision is at most as good
as v. Approximations of both are defined by object-level epsilon consistency:
the fraction of objects from the complement of the union that belong to the
dominance cone of an object.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional

import numpy as np

from vcdomlem import _helpers
from vcdomlem.conditions import (Condition, RuleSemantics,
                                 construct_decision_condition)
from vcdomlem.information_table import InformationTable


class UnionType(Enum):
    AT_LEAST = "at_least"
    AT_MOST = "at_most"

    @property
    def opposite(self) -> UnionType:
        if self == UnionType.AT_LEAST:
            return UnionType.AT_MOST
        return UnionType.AT_LEAST


def _get_cones(information_table: InformationTable, union_type: UnionType) -> np.ndarray:
    """Positive cones describe upward unions, negative cones downward ones"""
    if union_type == UnionType.AT_LEAST:
        return information_table.positive_cones
    return information_table.negative_cones


def _calculate_epsilon_consistencies(
    cones: np.ndarray, negative_mask: np.ndarray
) -> np.ndarray:
    """Epsilon consistency of every object of the table, given dominance cones
    (one per row) and a mask of negative objects."""
    negative_count: int = int(np.count_nonzero(negative_mask))
    if negative_count == 0:
        return np.zeros(cones.shape[0], dtype=float)
    in_cone: np.ndarray = (cones & negative_mask[np.newaxis, :]).sum(axis=1)
    return in_cone / negative_count


class Union:
    """Union of ordered decision classes.

    Args:
        union_type (UnionType): AT_LEAST (upward) or AT_MOST (downward) union
        limiting_decision (Any): the worst (for upward unions) or the best (for
            downward unions) decision belonging to the union
        information_table (InformationTable): learning data
        neutral_objects (Optional[list[int]], optional): objects that are neither
            positive nor negative for this union. Defaults to None.
    """

    def __init__(
        self,
        union_type: UnionType,
        limiting_decision: Any,
        information_table: InformationTable,
        neutral_objects: Optional[list[int]] = None,
    ):
        self.union_type: UnionType = _helpers.not_none(union_type, "Union type is null.")
        self.limiting_decision: Any = _helpers.to_python_scalar(
            _helpers.not_none(limiting_decision, "Limiting decision is null.")
        )
        self.information_table: InformationTable = _helpers.not_none(
            information_table, "Information table is null."
        )
        ordered_decisions: list[Any] = information_table.ordered_decision_values()
        if self.limiting_decision not in ordered_decisions:
            raise ValueError(
                f"Limiting decision {self.limiting_decision} does not occur in "
                "the information table."
            )
        limiting_rank: int = ordered_decisions.index(self.limiting_decision)
        ranks: np.ndarray = information_table.decision_ranks
        n: int = information_table.number_of_objects

        self.neutral_mask: np.ndarray = np.zeros(n, dtype=bool)
        if neutral_objects is not None and len(neutral_objects) > 0:
            self.neutral_mask[list(neutral_objects)] = True
        if union_type == UnionType.AT_LEAST:
            members: np.ndarray = ranks >= limiting_rank
        else:
            members = ranks <= limiting_rank
        self.objects_mask: np.ndarray = members & ~self.neutral_mask
        self.complementary_objects_mask: np.ndarray = ~members & ~self.neutral_mask

        self._epsilon_consistencies: Optional[np.ndarray] = None
        self._complement_epsilon_consistencies: Optional[np.ndarray] = None

    @property
    def objects(self) -> frozenset[int]:
        return frozenset(np.flatnonzero(self.objects_mask).tolist())

    @property
    def neutral_objects(self) -> frozenset[int]:
        return frozenset(np.flatnonzero(self.neutral_mask).tolist())

    @property
    def complementary_objects(self) -> frozenset[int]:
        return frozenset(np.flatnonzero(self.complementary_objects_mask).tolist())

    @property
    def rule_semantics(self) -> RuleSemantics:
        if self.union_type == UnionType.AT_LEAST:
            return RuleSemantics.AT_LEAST
        return RuleSemantics.AT_MOST

    @property
    def epsilon_consistencies(self) -> np.ndarray:
        """Epsilon consistency of every object of the table with respect to this
        union. Only values of union members are meaningful."""
        if self._epsilon_consistencies is None:
            self._epsilon_consistencies = _calculate_epsilon_consistencies(
                _get_cones(self.information_table, self.union_type),
                self.complementary_objects_mask,
            )
        return self._epsilon_consistencies

    def get_epsilon_consistency(self, object_index: int) -> float:
        return float(self.epsilon_consistencies[object_index])

    def lower_approximation_mask(self, consistency_threshold: float) -> np.ndarray:
        return self.objects_mask & (
            self.epsilon_consistencies <= consistency_threshold
        )

    def upper_approximation_mask(self, consistency_threshold: float) -> np.ndarray:
        """Complement of the lower approximation of the complementary union"""
        if self._complement_epsilon_consistencies is None:
            self._complement_epsilon_consistencies = _calculate_epsilon_consistencies(
                _get_cones(self.information_table, self.union_type.opposite),
                self.objects_mask,
            )
        complement_lower: np.ndarray = self.complementary_objects_mask & (
            self._complement_epsilon_consistencies <= consistency_threshold
        )
        return ~complement_lower & ~self.neutral_mask

    def boundary_mask(self, consistency_threshold: float) -> np.ndarray:
        return self.upper_approximation_mask(
            consistency_threshold
        ) & ~self.lower_approximation_mask(consistency_threshold)

    def positive_region_mask(self, consistency_threshold: float) -> np.ndarray:
        """Objects belonging to dominance cones of the lower approximation objects"""
        lower: np.ndarray = self.lower_approximation_mask(consistency_threshold)
        cones: np.ndarray = _get_cones(self.information_table, self.union_type)
        return cones[lower, :].any(axis=0)

    def lower_approximation(self, consistency_threshold: float) -> frozenset[int]:
        return _mask_to_indices(self.lower_approximation_mask(consistency_threshold))

    def upper_approximation(self, consistency_threshold: float) -> frozenset[int]:
        return _mask_to_indices(self.upper_approximation_mask(consistency_threshold))

    def boundary(self, consistency_threshold: float) -> frozenset[int]:
        return _mask_to_indices(self.boundary_mask(consistency_threshold))

    def positive_region(self, consistency_threshold: float) -> frozenset[int]:
        return _mask_to_indices(self.positive_region_mask(consistency_threshold))

    def __repr__(self) -> str:
        symbol: str = ">=" if self.union_type == UnionType.AT_LEAST else "<="
        return f"Union({self.information_table.decision_attribute.name} {symbol} {self.limiting_decision})"


def _mask_to_indices(mask: np.ndarray) -> frozenset[int]:
    return frozenset(np.flatnonzero(mask).tolist())


class Unions:
    """All meaningful upward and downward unions of decision classes of the table.
    Both lists start with the most restrictive union, e.g. for decisions 0 < 1 < 2
    upward unions are [>= 2, >= 1] and downward unions are [<= 0, <= 1].
    """

    def __init__(self, information_table: InformationTable):
        self.information_table: InformationTable = _helpers.not_none(
            information_table, "Information table is null."
        )
        decisions: list[Any] = information_table.ordered_decision_values()
        self.upward_unions: list[Union] = [
            Union(UnionType.AT_LEAST, decision, information_table)
            for decision in reversed(decisions[1:])
        ]
        self.downward_unions: list[Union] = [
            Union(UnionType.AT_MOST, decision, information_table)
            for decision in decisions[:-1]
        ]


class UnionRuleDecisionsProvider:
    """Provides decisions of rules induced for unions"""

    def get_rule_decisions(self, union: Union) -> list[list[Condition]]:
        """Decisions of a rule describing given union, as an alternative of
        conjunctions of conditions on the decision attribute"""
        _helpers.not_none(union, "Union is null.")
        return [
            [
                construct_decision_condition(
                    union.information_table.decision_attribute,
                    union.rule_semantics,
                    union.limiting_decision,
                )
            ]
        ]
