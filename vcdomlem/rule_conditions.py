"""Contains RuleConditions - a premise of a decision rule under construction, and
RuleCoverageInformation - a snapshot of objects covered by such premise.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

import numpy as np
from decision_rules.core.coverage import Coverage

from vcdomlem import _helpers
from vcdomlem.cache import ConditionsCoverageCache
from vcdomlem.conditions import (Condition, RuleSemantics, RuleType,
                                 TernaryLogicValue)
from vcdomlem.exceptions import InvalidValueError
from vcdomlem.information_table import InformationTable


class AllowedNegativeObjectsType(Enum):
    """Which negative objects may be covered by an induced certain rule"""

    POSITIVE_REGION = "positive_region"
    POSITIVE_AND_BOUNDARY_REGIONS = "positive_and_boundary_regions"
    ANY_REGION = "any_region"
    APPROXIMATION = "approximation"


def _indices_to_mask(indices: Iterable[int], size: int) -> np.ndarray:
    mask: np.ndarray = np.zeros(size, dtype=bool)
    indices = list(indices)
    if len(indices) > 0:
        mask[indices] = True
    return mask


@dataclass(frozen=True)
class RuleCoverageInformation:
    """Objects covered by rule conditions together with everything needed to
    calculate characteristics of a rule built from them.
    """

    indices_of_positive_objects: frozenset[int]
    indices_of_neutral_objects: frozenset[int]
    indices_of_covered_objects: tuple[int, ...]
    decisions_of_covered_objects: dict[int, Any]
    all_objects_count: int

    def __post_init__(self):
        _helpers.not_none(
            self.indices_of_positive_objects, "Indices of positive objects are null."
        )
        _helpers.not_none(
            self.indices_of_neutral_objects, "Indices of neutral objects are null."
        )
        _helpers.not_none(
            self.indices_of_covered_objects, "Indices of covered objects are null."
        )
        _helpers.not_none(
            self.decisions_of_covered_objects, "Decisions of covered objects are null."
        )
        if self.all_objects_count < 0:
            raise ValueError("Number of all objects cannot be negative.")

    @property
    def support(self) -> int:
        return sum(
            1
            for index in self.indices_of_covered_objects
            if index in self.indices_of_positive_objects
        )

    @property
    def negative_coverage(self) -> int:
        return len(self.indices_of_covered_not_supporting_objects)

    @property
    def indices_of_covered_not_supporting_objects(self) -> list[int]:
        """Covered objects that are neither positive nor neutral"""
        return [
            index
            for index in self.indices_of_covered_objects
            if index not in self.indices_of_positive_objects
            and index not in self.indices_of_neutral_objects
        ]

    @property
    def coverage(self) -> Coverage:
        """Contingency counts of the rule as used by decision_rules quality measures"""
        P: int = len(self.indices_of_positive_objects)
        N: int = (
            self.all_objects_count - P - len(self.indices_of_neutral_objects)
        )
        return Coverage(p=self.support, n=self.negative_coverage, P=P, N=N)


class RuleConditions:
    """Mutable premise of a decision rule under construction.

    Args:
        learning_information_table (InformationTable): learning data
        indices_of_positive_objects (Iterable[int]): objects supporting the decision
            of induced rule (e.g. objects belonging to a union)
        indices_of_approximation_objects (Iterable[int]): objects whose coverage is
            the goal of induction (e.g. lower approximation of a union)
        indices_of_objects_that_can_be_covered (Iterable[int]): objects that may be
            covered by induced rule
        indices_of_neutral_objects (Optional[Iterable[int]], optional): objects that
            are neither positive nor negative. Defaults to None meaning no such objects.
        rule_type (RuleType, optional): type of induced rule.
            Defaults to RuleType.CERTAIN.
        rule_semantics (RuleSemantics, optional): semantics of induced rule.
            Defaults to RuleSemantics.AT_LEAST.
        coverage_cache (Optional[ConditionsCoverageCache], optional): cache of
            conditions coverage shared between rule conditions built for the same
            table. Defaults to None meaning a private cache.
    """

    def __init__(
        self,
        learning_information_table: InformationTable,
        indices_of_positive_objects: Iterable[int],
        indices_of_approximation_objects: Iterable[int],
        indices_of_objects_that_can_be_covered: Iterable[int],
        indices_of_neutral_objects: Optional[Iterable[int]] = None,
        rule_type: RuleType = RuleType.CERTAIN,
        rule_semantics: RuleSemantics = RuleSemantics.AT_LEAST,
        coverage_cache: Optional[ConditionsCoverageCache] = None,
    ):
        self.learning_information_table: InformationTable = _helpers.not_none(
            learning_information_table, "Learning information table is null."
        )
        self.indices_of_positive_objects: frozenset[int] = frozenset(
            _helpers.not_none(
                indices_of_positive_objects, "Indices of positive objects are null."
            )
        )
        self.indices_of_approximation_objects: frozenset[int] = frozenset(
            _helpers.not_none(
                indices_of_approximation_objects,
                "Indices of approximation objects are null.",
            )
        )
        self.indices_of_objects_that_can_be_covered: frozenset[int] = frozenset(
            _helpers.not_none(
                indices_of_objects_that_can_be_covered,
                "Indices of objects that can be covered are null.",
            )
        )
        self.indices_of_neutral_objects: frozenset[int] = (
            frozenset(indices_of_neutral_objects)
            if indices_of_neutral_objects is not None
            else frozenset()
        )
        self.rule_type: RuleType = _helpers.not_none(rule_type, "Rule type is null.")
        self.rule_semantics: RuleSemantics = _helpers.not_none(
            rule_semantics, "Rule semantics is null."
        )
        self.cache: ConditionsCoverageCache = (
            coverage_cache
            if coverage_cache is not None
            else ConditionsCoverageCache(learning_information_table)
        )

        n: int = learning_information_table.number_of_objects
        self.positive_mask: np.ndarray = _indices_to_mask(
            self.indices_of_positive_objects, n
        )
        self.approximation_mask: np.ndarray = _indices_to_mask(
            self.indices_of_approximation_objects, n
        )
        self.can_be_covered_mask: np.ndarray = _indices_to_mask(
            self.indices_of_objects_that_can_be_covered, n
        )
        self.neutral_mask: np.ndarray = _indices_to_mask(
            self.indices_of_neutral_objects, n
        )

        self._conditions: list[Condition] = []
        # attribute index -> positions of conditions concerning that attribute
        self._attribute_positions: dict[int, list[int]] = {}
        self._covered_mask: np.ndarray = np.ones(n, dtype=bool)

    @property
    def conditions(self) -> list[Condition]:
        return list(self._conditions)

    @property
    def covered_mask(self) -> np.ndarray:
        return self._covered_mask.copy()

    def size(self) -> int:
        return len(self._conditions)

    def __len__(self) -> int:
        return len(self._conditions)

    def add_condition(self, condition: Condition) -> int:
        """Appends condition at the end of these rule conditions

        Args:
            condition (Condition): added condition

        Raises:
            TypeError: when condition is None

        Returns:
            int: position of added condition
        """
        _helpers.not_none(condition, "Added condition is null.")
        self._conditions.append(condition)
        position: int = len(self._conditions) - 1
        self._attribute_positions.setdefault(condition.attribute.index, []).append(
            position
        )
        self._covered_mask = self._covered_mask & self._get_condition_mask(condition)
        return position

    def remove_condition(self, position: int):
        """Removes condition, shifting positions of all subsequent conditions down
        by one.

        Args:
            position (int): position of removed condition

        Raises:
            IndexError: when there is no condition at given position
        """
        self._check_position(position)
        removed_condition: Condition = self._conditions.pop(position)
        attribute_index: int = removed_condition.attribute.index
        self._attribute_positions[attribute_index].remove(position)
        if len(self._attribute_positions[attribute_index]) == 0:
            del self._attribute_positions[attribute_index]
        for positions in self._attribute_positions.values():
            positions[:] = [p - 1 if p > position else p for p in positions]
        self._covered_mask = self._calculate_covered_mask(self._conditions)

    def replace_condition(self, position: int, condition: Condition):
        """Replaces condition at given position with a condition on the same
        attribute

        Raises:
            IndexError: when there is no condition at given position
            InvalidValueError: when the new condition concerns another attribute
        """
        self._check_position(position)
        _helpers.not_none(condition, "Replacing condition is null.")
        if condition.attribute.index != self._conditions[position].attribute.index:
            raise InvalidValueError(
                "Condition can be replaced only by a condition on the same attribute."
            )
        self._conditions[position] = condition
        self._covered_mask = self._calculate_covered_mask(self._conditions)

    def get_condition(self, position: int) -> Condition:
        self._check_position(position)
        return self._conditions[position]

    def get_condition_index(self, condition: Condition) -> int:
        """Returns position of the condition or -1 when it is absent"""
        _helpers.not_none(condition, "Condition is null.")
        try:
            return self._conditions.index(condition)
        except ValueError:
            return -1

    def contains_condition(self, condition: Condition) -> bool:
        return condition in self._conditions

    def contains_condition_for_attribute(self, attribute_index: int) -> bool:
        return len(self._attribute_positions.get(attribute_index, [])) > 0

    def get_condition_indices_for_attribute(self, attribute_index: int) -> list[int]:
        return list(self._attribute_positions.get(attribute_index, []))

    def covers(self, object_index: int) -> bool:
        return bool(self._covered_mask[object_index])

    def covered_mask_with_condition(self, condition: Condition) -> np.ndarray:
        _helpers.not_none(condition, "Condition is null.")
        return self._covered_mask & self._get_condition_mask(condition)

    def covered_mask_without_condition(self, position: int) -> np.ndarray:
        self._check_position(position)
        return self._calculate_covered_mask(
            [c for i, c in enumerate(self._conditions) if i != position]
        )

    def covered_mask_with_replaced_condition(
        self, position: int, condition: Condition
    ) -> np.ndarray:
        _helpers.not_none(condition, "Replacing condition is null.")
        return self.covered_mask_without_condition(position) & self._get_condition_mask(
            condition
        )

    def get_indices_of_covered_objects(self) -> list[int]:
        return np.flatnonzero(self._covered_mask).tolist()

    def get_indices_of_covered_objects_with_condition(
        self, condition: Condition
    ) -> list[int]:
        return np.flatnonzero(self.covered_mask_with_condition(condition)).tolist()

    def get_indices_of_covered_objects_without_condition(
        self, position: int
    ) -> list[int]:
        return np.flatnonzero(self.covered_mask_without_condition(position)).tolist()

    def get_rule_coverage_information(self) -> RuleCoverageInformation:
        table: InformationTable = self.learning_information_table
        covered: list[int] = np.flatnonzero(
            self._calculate_covered_mask(self._conditions)
        ).tolist()
        return RuleCoverageInformation(
            indices_of_positive_objects=self.indices_of_positive_objects,
            indices_of_neutral_objects=self.indices_of_neutral_objects,
            indices_of_covered_objects=tuple(covered),
            decisions_of_covered_objects={
                index: table.get_decision(index) for index in covered
            },
            all_objects_count=table.number_of_objects,
        )

    def is_at_least_as_general_as(self, other: RuleConditions) -> bool:
        """Checks whether every condition of these rule conditions is implied by some
        condition of the other ones, so they cover at least the objects covered by
        the other rule conditions.
        """
        for condition in self._conditions:
            if not any(
                other_condition.is_at_most_as_general_as(condition)
                == TernaryLogicValue.TRUE
                for other_condition in other._conditions
            ):
                return False
        return True

    def is_at_most_as_general_as(self, other: RuleConditions) -> bool:
        return other.is_at_least_as_general_as(self)

    def _check_position(self, position: int):
        if position < 0 or position >= len(self._conditions):
            raise IndexError(
                f"Condition position {position} is out of range "
                f"[0, {len(self._conditions)})"
            )

    def _get_condition_mask(self, condition: Condition) -> np.ndarray:
        return self.cache.get_or_calculate(condition)

    def _calculate_covered_mask(self, conditions: list[Condition]) -> np.ndarray:
        covered_mask: np.ndarray = np.ones(
            self.learning_information_table.number_of_objects, dtype=bool
        )
        for condition in conditions:
            covered_mask &= self._get_condition_mask(condition)
        return covered_mask

    def __str__(self) -> str:
        return " & ".join(f"({condition})" for condition in self._conditions)
