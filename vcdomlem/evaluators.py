"""Evaluators of rule conditions used to grow, prune and compare premises of
induced rules.

Each evaluator is a strategy object tagged with a :class:`MeasureType`. The
direction of threshold checks and comparisons depends only on that tag and is
implemented once in :func:`satisfies_threshold` and :func:`confront`.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, TypeAlias

import numpy as np
from decision_rules.core.coverage import Coverage

from vcdomlem.conditions import Condition
from vcdomlem.rule_conditions import RuleConditions

QualityMeasure: TypeAlias = Callable[[Coverage], float]


class MeasureType(Enum):
    GAIN = "gain"
    COST = "cost"


class MonotonicityType(Enum):
    IMPROVES_WITH_NUMBER_OF_COVERED_OBJECTS = "improves"
    DETERIORATES_WITH_NUMBER_OF_COVERED_OBJECTS = "deteriorates"


def satisfies_threshold(
    measure_type: MeasureType, value: float, threshold: float
) -> bool:
    """Checks whether value of a measure is at least as good as the threshold

    Args:
        measure_type (MeasureType): GAIN (the more the better) or COST (the less
            the better)
        value (float): value of the measure
        threshold (float): threshold

    Returns:
        bool: value >= threshold for GAIN type, value <= threshold for COST type
    """
    if measure_type == MeasureType.GAIN:
        return value >= threshold
    return value <= threshold


def confront(measure_type: MeasureType, value_a: float, value_b: float) -> float:
    """Compares two values of a measure. Positive result means that the first
    value is better, negative that the second one is better and zero that both are
    equally good."""
    if measure_type == MeasureType.GAIN:
        return value_a - value_b
    return value_b - value_a


class RuleConditionsEvaluator(ABC):
    """Base class of all evaluators. Subclasses only calculate the value of the
    measure for a given mask of covered objects."""

    measure_type: MeasureType = None
    monotonicity_type: MonotonicityType = None

    @abstractmethod
    def _evaluate_covered_mask(
        self, rule_conditions: RuleConditions, covered_mask: np.ndarray
    ) -> float:
        pass

    def evaluate(self, rule_conditions: RuleConditions) -> float:
        return self._evaluate_covered_mask(
            rule_conditions, rule_conditions.covered_mask
        )

    def evaluate_with_condition(
        self, rule_conditions: RuleConditions, condition: Condition
    ) -> float:
        return self._evaluate_covered_mask(
            rule_conditions, rule_conditions.covered_mask_with_condition(condition)
        )

    def evaluate_without_condition(
        self, rule_conditions: RuleConditions, condition_index: int
    ) -> float:
        return self._evaluate_covered_mask(
            rule_conditions,
            rule_conditions.covered_mask_without_condition(condition_index),
        )

    def evaluate_with_replaced_condition(
        self, rule_conditions: RuleConditions, condition_index: int, condition: Condition
    ) -> float:
        return self._evaluate_covered_mask(
            rule_conditions,
            rule_conditions.covered_mask_with_replaced_condition(
                condition_index, condition
            ),
        )

    def evaluation_satisfies_threshold(
        self, rule_conditions: RuleConditions, threshold: float
    ) -> bool:
        return satisfies_threshold(
            self.measure_type, self.evaluate(rule_conditions), threshold
        )

    def evaluation_satisfies_threshold_with_condition(
        self, rule_conditions: RuleConditions, threshold: float, condition: Condition
    ) -> bool:
        return satisfies_threshold(
            self.measure_type,
            self.evaluate_with_condition(rule_conditions, condition),
            threshold,
        )

    def evaluation_satisfies_threshold_without_condition(
        self, rule_conditions: RuleConditions, threshold: float, condition_index: int
    ) -> bool:
        return satisfies_threshold(
            self.measure_type,
            self.evaluate_without_condition(rule_conditions, condition_index),
            threshold,
        )

    def evaluation_satisfies_threshold_with_replaced_condition(
        self,
        rule_conditions: RuleConditions,
        threshold: float,
        condition_index: int,
        condition: Condition,
    ) -> bool:
        return satisfies_threshold(
            self.measure_type,
            self.evaluate_with_replaced_condition(
                rule_conditions, condition_index, condition
            ),
            threshold,
        )

    def confront(
        self, rule_conditions_a: RuleConditions, rule_conditions_b: RuleConditions
    ) -> float:
        return confront(
            self.measure_type,
            self.evaluate(rule_conditions_a),
            self.evaluate(rule_conditions_b),
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


def _count_negative_objects(
    rule_conditions: RuleConditions, covered_mask: np.ndarray
) -> int:
    return int(
        np.count_nonzero(
            covered_mask & ~rule_conditions.positive_mask & ~rule_conditions.neutral_mask
        )
    )


def _count_all_negative_objects(rule_conditions: RuleConditions) -> int:
    return (
        rule_conditions.learning_information_table.number_of_objects
        - len(rule_conditions.indices_of_positive_objects)
        - len(rule_conditions.indices_of_neutral_objects)
    )


class EpsilonConsistencyMeasure(RuleConditionsEvaluator):
    """Ratio of covered negative objects to all negative objects. Negative objects
    are those that are neither positive nor neutral."""

    measure_type = MeasureType.COST
    monotonicity_type = MonotonicityType.DETERIORATES_WITH_NUMBER_OF_COVERED_OBJECTS

    def _evaluate_covered_mask(
        self, rule_conditions: RuleConditions, covered_mask: np.ndarray
    ) -> float:
        negative_covered: int = _count_negative_objects(rule_conditions, covered_mask)
        if negative_covered == 0:
            return 0.0
        all_negative: int = _count_all_negative_objects(rule_conditions)
        if all_negative == 0:
            return 0.0
        return negative_covered / all_negative

    @staticmethod
    def evaluate_object(
        negative_objects_in_cone: int, negative_objects_count: int
    ) -> float:
        """Epsilon consistency of an object of a union, given number of negative
        objects in its dominance cone and the size of the complement of the union."""
        if negative_objects_in_cone == 0 or negative_objects_count == 0:
            return 0.0
        return negative_objects_in_cone / negative_objects_count


class SupportMeasure(RuleConditionsEvaluator):
    """Number of covered positive objects"""

    measure_type = MeasureType.GAIN
    monotonicity_type = MonotonicityType.IMPROVES_WITH_NUMBER_OF_COVERED_OBJECTS

    def _evaluate_covered_mask(
        self, rule_conditions: RuleConditions, covered_mask: np.ndarray
    ) -> float:
        return float(np.count_nonzero(covered_mask & rule_conditions.positive_mask))


class CoverageInApproximationMeasure(RuleConditionsEvaluator):
    """Number of covered objects belonging to the approximation"""

    measure_type = MeasureType.GAIN
    monotonicity_type = MonotonicityType.IMPROVES_WITH_NUMBER_OF_COVERED_OBJECTS

    def _evaluate_covered_mask(
        self, rule_conditions: RuleConditions, covered_mask: np.ndarray
    ) -> float:
        return float(
            np.count_nonzero(covered_mask & rule_conditions.approximation_mask)
        )


class CoverageOutsideApproximationMeasure(RuleConditionsEvaluator):
    """Number of covered objects that are neither in the approximation nor
    neutral"""

    measure_type = MeasureType.COST
    monotonicity_type = MonotonicityType.DETERIORATES_WITH_NUMBER_OF_COVERED_OBJECTS

    def _evaluate_covered_mask(
        self, rule_conditions: RuleConditions, covered_mask: np.ndarray
    ) -> float:
        return float(
            np.count_nonzero(
                covered_mask
                & ~rule_conditions.approximation_mask
                & ~rule_conditions.neutral_mask
            )
        )


class RelativeCoverageOutsideApproximationMeasure(CoverageOutsideApproximationMeasure):
    """Coverage outside approximation divided by the number of negative objects"""

    def _evaluate_covered_mask(
        self, rule_conditions: RuleConditions, covered_mask: np.ndarray
    ) -> float:
        covered_outside: float = super()._evaluate_covered_mask(
            rule_conditions, covered_mask
        )
        if covered_outside == 0:
            return 0.0
        all_negative: int = _count_all_negative_objects(rule_conditions)
        if all_negative == 0:
            return 0.0
        return covered_outside / all_negative


class CoverageQualityMeasure(RuleConditionsEvaluator):
    """Adapts quality measures from `decision-rules <https://github.com/ruleminer/decision-rules>`_
    package (e.g. :code:`decision_rules.measures.c2`) to rule conditions. The measure
    is calculated on the contingency counts of the covered objects.

    Args:
        measure (QualityMeasure): function calculating quality from a Coverage
    """

    measure_type = MeasureType.GAIN

    def __init__(self, measure: QualityMeasure):
        if measure is None:
            raise TypeError("Quality measure is null.")
        self.measure: QualityMeasure = measure

    def _evaluate_covered_mask(
        self, rule_conditions: RuleConditions, covered_mask: np.ndarray
    ) -> float:
        P: int = len(rule_conditions.indices_of_positive_objects)
        coverage = Coverage(
            p=int(np.count_nonzero(covered_mask & rule_conditions.positive_mask)),
            n=_count_negative_objects(rule_conditions, covered_mask),
            P=P,
            N=_count_all_negative_objects(rule_conditions),
        )
        return float(self.measure(coverage))

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"{getattr(self.measure, '__name__', repr(self.measure))})"
        )
