"""Generators of elementary conditions added to rule conditions being grown.

Candidate conditions are built from evaluations of the considered objects and
compared lexicographically by a list of condition addition evaluators.
"""
from __future__ import annotations

from enum import Enum
from typing import Any
from typing import Optional

import numpy as np

from vcdomlem import _helpers
from vcdomlem.conditions import MISSING_EVALUATION
from vcdomlem.conditions import Condition
from vcdomlem.conditions import RuleSemantics
from vcdomlem.conditions import RuleType
from vcdomlem.conditions import construct_condition
from vcdomlem.evaluators import MonotonicityType
from vcdomlem.evaluators import RuleConditionsEvaluator
from vcdomlem.evaluators import confront
from vcdomlem.exceptions import ElementaryConditionNotFoundError
from vcdomlem.exceptions import InvalidValueError
from vcdomlem.induction._base import ConditionGenerator
from vcdomlem.information_table import AttributePreferenceType
from vcdomlem.information_table import EvaluationAttributeWithContext
from vcdomlem.information_table import InformationTable
from vcdomlem.information_table import MissingValueType
from vcdomlem.rule_conditions import RuleConditions


class ComparisonResult(Enum):
    CANDIDATE_IS_BETTER = "better"
    CANDIDATE_IS_EQUAL = "equal"
    CANDIDATE_IS_WORSE_WRT_FIRST_EVALUATORS = "worse_first"
    CANDIDATE_IS_WORSE_WRT_SECOND_EVALUATORS = "worse_second"


class _EvaluatedCondition:
    """Condition with its evaluations, calculated lazily one evaluator at a time"""

    def __init__(
        self,
        condition: Condition,
        rule_conditions: RuleConditions,
        evaluators: list[RuleConditionsEvaluator],
    ):
        self.condition: Condition = condition
        self._rule_conditions: RuleConditions = rule_conditions
        self._evaluators: list[RuleConditionsEvaluator] = evaluators
        self._evaluations: list[float] = []

    def get_evaluation(self, evaluator_index: int) -> float:
        while len(self._evaluations) <= evaluator_index:
            evaluator = self._evaluators[len(self._evaluations)]
            self._evaluations.append(
                evaluator.evaluate_with_condition(self._rule_conditions, self.condition)
            )
        return self._evaluations[evaluator_index]


class _ConditionGeneratorWithEvaluators(ConditionGenerator):

    def __init__(self, condition_addition_evaluators: list[RuleConditionsEvaluator]):
        _helpers.not_none(
            condition_addition_evaluators, "Condition addition evaluators are null."
        )
        if len(condition_addition_evaluators) == 0:
            raise InvalidValueError("List of condition addition evaluators is empty.")
        for i, evaluator in enumerate(condition_addition_evaluators):
            _helpers.not_none(evaluator, f"Condition addition evaluator is null at index {i}.")
        self.condition_addition_evaluators: list[RuleConditionsEvaluator] = list(
            condition_addition_evaluators
        )
        self._first_evaluators_count: int = len(self.condition_addition_evaluators)

    def _compare(
        self,
        candidate: _EvaluatedCondition,
        best: Optional[_EvaluatedCondition],
        used_evaluators_count: int,
    ) -> ComparisonResult:
        if best is None:
            return ComparisonResult.CANDIDATE_IS_BETTER
        for i in range(used_evaluators_count):
            difference: float = confront(
                self.condition_addition_evaluators[i].measure_type,
                candidate.get_evaluation(i),
                best.get_evaluation(i),
            )
            if difference > 0:
                return ComparisonResult.CANDIDATE_IS_BETTER
            if difference < 0:
                if i < self._first_evaluators_count:
                    return ComparisonResult.CANDIDATE_IS_WORSE_WRT_FIRST_EVALUATORS
                return ComparisonResult.CANDIDATE_IS_WORSE_WRT_SECOND_EVALUATORS
        return ComparisonResult.CANDIDATE_IS_EQUAL

    def _test_candidate(
        self,
        rule_conditions: RuleConditions,
        attribute: EvaluationAttributeWithContext,
        limiting_evaluation: Any,
        best: Optional[_EvaluatedCondition],
    ) -> tuple[ComparisonResult, Optional[_EvaluatedCondition]]:
        """Compares candidate condition with the best one found so far.

        Returns:
            tuple[ComparisonResult, Optional[_EvaluatedCondition]]: result of the
            comparison and the (possibly updated) best condition
        """
        candidate = _EvaluatedCondition(
            construct_condition(
                rule_conditions.rule_type,
                rule_conditions.rule_semantics,
                attribute,
                limiting_evaluation,
            ),
            rule_conditions,
            self.condition_addition_evaluators,
        )
        result: ComparisonResult = self._compare(
            candidate, best, len(self.condition_addition_evaluators)
        )
        if result == ComparisonResult.CANDIDATE_IS_BETTER:
            return result, candidate
        return result, best

    @staticmethod
    def _check_arguments(considered_objects: list[int], rule_conditions: RuleConditions):
        _helpers.not_none(considered_objects, "List of considered objects is null.")
        _helpers.not_none(rule_conditions, "Rule conditions are null.")

    @staticmethod
    def _should_test_missing_evaluation(
        rule_conditions: RuleConditions,
        considered_objects: list[int],
        attribute_index: int,
    ) -> bool:
        """Whether a condition with missing limiting evaluation can restrict the
        coverage. It happens only for possible rules under MV1.5 semantics, when
        some considered object has a missing evaluation."""
        table: InformationTable = rule_conditions.learning_information_table
        if (
            rule_conditions.rule_type != RuleType.POSSIBLE
            or table.missing_value_type != MissingValueType.MV15
        ):
            return False
        missing: np.ndarray = table.get_missing_mask(attribute_index)
        return bool(missing[considered_objects].any())

    @staticmethod
    def _known_evaluations(
        information_table: InformationTable,
        considered_objects: list[int],
        attribute_index: int,
    ) -> list[Any]:
        """Known evaluations of considered objects, in the order of the objects"""
        missing: np.ndarray = information_table.get_missing_mask(attribute_index)
        column: np.ndarray = information_table.get_column(attribute_index)
        return [
            _helpers.to_python_scalar(column[i])
            for i in considered_objects
            if not missing[i]
        ]


class StandardConditionGenerator(_ConditionGeneratorWithEvaluators):
    """Checks every distinct evaluation of considered objects on every active
    condition attribute. Attributes already present in rule conditions are
    considered too, but only with conditions that restrict current coverage.

    Args:
        condition_addition_evaluators (list[RuleConditionsEvaluator]): evaluators
            compared lexicographically
    """

    def get_best_condition(
        self, considered_objects: list[int], rule_conditions: RuleConditions
    ) -> Condition:
        self._check_arguments(considered_objects, rule_conditions)
        table: InformationTable = rule_conditions.learning_information_table
        covered_count: int = int(np.count_nonzero(rule_conditions.covered_mask))
        best: Optional[_EvaluatedCondition] = None

        for attribute in table.active_condition_attributes:
            attribute_used: bool = rule_conditions.contains_condition_for_attribute(
                attribute.index
            )
            evaluations: list[Any] = self._known_evaluations(
                table, considered_objects, attribute.index
            )
            if self._should_test_missing_evaluation(
                rule_conditions, considered_objects, attribute.index
            ):
                evaluations.append(MISSING_EVALUATION)
            tested: set = set()
            for evaluation in evaluations:
                if evaluation in tested:
                    continue
                tested.add(evaluation)
                condition: Condition = construct_condition(
                    rule_conditions.rule_type,
                    rule_conditions.rule_semantics,
                    attribute,
                    evaluation,
                )
                if rule_conditions.contains_condition(condition):
                    continue
                if attribute_used and (
                    np.count_nonzero(rule_conditions.covered_mask_with_condition(condition))
                    >= covered_count
                ):
                    continue
                _, best = self._test_candidate(
                    rule_conditions, attribute, evaluation, best
                )

        if best is None:
            raise ElementaryConditionNotFoundError(
                "Could not find any new elementary condition to be added to "
                f"rule conditions: {rule_conditions}"
            )
        return best.condition


class _LimitingEvaluationInterval:
    """Range of limiting evaluations that can still improve the best condition"""

    def __init__(self, sufficient_evaluation: Any, compare_to_multiplier: int):
        self.sufficient_evaluation: Any = sufficient_evaluation
        self.insufficient_evaluation: Any = None
        self.compare_to_multiplier: int = compare_to_multiplier

    def _compare(self, evaluation_a: Any, evaluation_b: Any) -> int:
        return ((evaluation_a > evaluation_b) - (evaluation_a < evaluation_b)) * (
            self.compare_to_multiplier
        )

    def includes(self, evaluation: Any) -> bool:
        raise NotImplementedError()

    def is_more_extreme(self, candidate: Any, extreme: Any) -> bool:
        raise NotImplementedError()

    def update(self, comparison_result: ComparisonResult, evaluation: Any):
        if comparison_result in (
            ComparisonResult.CANDIDATE_IS_BETTER,
            ComparisonResult.CANDIDATE_IS_EQUAL,
        ):
            self.sufficient_evaluation = evaluation
        elif comparison_result == ComparisonResult.CANDIDATE_IS_WORSE_WRT_FIRST_EVALUATORS:
            self.insufficient_evaluation = evaluation


class _RestrictingInterval(_LimitingEvaluationInterval):
    """Starts from the most restrictive evaluation and moves towards less
    restrictive ones"""

    def includes(self, evaluation: Any) -> bool:
        return (
            self.insufficient_evaluation is None
            or self._compare(evaluation, self.insufficient_evaluation) > 0
        ) and self._compare(evaluation, self.sufficient_evaluation) < 0

    def is_more_extreme(self, candidate: Any, extreme: Any) -> bool:
        return self._compare(candidate, extreme) > 0


class _GeneralizingInterval(_LimitingEvaluationInterval):
    """Starts from the least restrictive evaluation and moves towards more
    restrictive ones"""

    def includes(self, evaluation: Any) -> bool:
        return self._compare(evaluation, self.sufficient_evaluation) > 0 and (
            self.insufficient_evaluation is None
            or self._compare(evaluation, self.insufficient_evaluation) < 0
        )

    def is_more_extreme(self, candidate: Any, extreme: Any) -> bool:
        return self._compare(candidate, extreme) < 0


class M4OptimizedConditionGenerator(_ConditionGeneratorWithEvaluators):
    """Condition generator exploiting monotonicity of evaluators with respect to
    the number of covered objects. For a criterion, the most extreme limiting
    evaluation is tested first and then only evaluations from the interval that
    can still improve the best condition are tested. Attributes already present
    in rule conditions are skipped.

    Args:
        condition_addition_evaluators (list[RuleConditionsEvaluator]): monotonic
            evaluators; monotonicity type may change at most once along the list

    Raises:
        InvalidValueError: when an evaluator is not monotonic or monotonicity type
            changes more than once
    """

    def __init__(self, condition_addition_evaluators: list[RuleConditionsEvaluator]):
        super().__init__(condition_addition_evaluators)
        for evaluator in self.condition_addition_evaluators:
            if evaluator.monotonicity_type is None:
                raise InvalidValueError(
                    f"Evaluator {evaluator!r} has no monotonicity type."
                )
        switches_count: int = 0
        self.contains_evaluators_of_different_monotonicity_type: bool = False
        for i in range(1, len(self.condition_addition_evaluators)):
            if (
                self.condition_addition_evaluators[i].monotonicity_type
                != self.condition_addition_evaluators[i - 1].monotonicity_type
            ):
                self.contains_evaluators_of_different_monotonicity_type = True
                self._first_evaluators_count = i
                switches_count += 1
        if switches_count > 1:
            raise InvalidValueError(
                "More than one switch of monotonicity type occurred when iterating "
                "over condition addition evaluators."
            )

    def get_best_condition(
        self, considered_objects: list[int], rule_conditions: RuleConditions
    ) -> Condition:
        self._check_arguments(considered_objects, rule_conditions)
        table: InformationTable = rule_conditions.learning_information_table
        best: Optional[_EvaluatedCondition] = None

        for attribute in table.active_condition_attributes:
            if rule_conditions.contains_condition_for_attribute(attribute.index):
                continue
            evaluations: list[Any] = self._known_evaluations(
                table, considered_objects, attribute.index
            )
            if self._should_test_missing_evaluation(
                rule_conditions, considered_objects, attribute.index
            ):
                _, best = self._test_candidate(
                    rule_conditions, attribute, MISSING_EVALUATION, best
                )
            if attribute.preference_type != AttributePreferenceType.NONE:
                best = self._search_criterion(
                    rule_conditions, attribute, evaluations, best
                )
            else:
                for evaluation in dict.fromkeys(evaluations):
                    _, best = self._test_candidate(
                        rule_conditions, attribute, evaluation, best
                    )

        if best is None:
            raise ElementaryConditionNotFoundError(
                "Could not find any new elementary condition to be added to "
                f"rule conditions: {rule_conditions}"
            )
        return best.condition

    def _search_criterion(
        self,
        rule_conditions: RuleConditions,
        attribute: EvaluationAttributeWithContext,
        evaluations: list[Any],
        best: Optional[_EvaluatedCondition],
    ) -> Optional[_EvaluatedCondition]:
        if len(evaluations) == 0:
            return best
        compare_to_multiplier: int = (
            1 if attribute.preference_type == AttributePreferenceType.GAIN else -1
        ) * (1 if rule_conditions.rule_semantics == RuleSemantics.AT_LEAST else -1)
        if (
            self.condition_addition_evaluators[0].monotonicity_type
            == MonotonicityType.IMPROVES_WITH_NUMBER_OF_COVERED_OBJECTS
        ):
            interval_class = _GeneralizingInterval
        else:
            interval_class = _RestrictingInterval

        interval: _LimitingEvaluationInterval = interval_class(
            evaluations[0], compare_to_multiplier
        )
        extreme: Any = evaluations[0]
        for evaluation in evaluations[1:]:
            if interval.is_more_extreme(evaluation, extreme):
                extreme = evaluation
        interval.sufficient_evaluation = extreme

        candidate = _EvaluatedCondition(
            construct_condition(
                rule_conditions.rule_type, rule_conditions.rule_semantics, attribute, extreme
            ),
            rule_conditions,
            self.condition_addition_evaluators,
        )
        result: ComparisonResult = self._compare(
            candidate, best, self._first_evaluators_count
        )
        check_less_extreme: bool = self.contains_evaluators_of_different_monotonicity_type
        if result == ComparisonResult.CANDIDATE_IS_BETTER:
            best = candidate
        elif result == ComparisonResult.CANDIDATE_IS_EQUAL:
            if (
                self._compare(candidate, best, len(self.condition_addition_evaluators))
                == ComparisonResult.CANDIDATE_IS_BETTER
            ):
                best = candidate
        elif result == ComparisonResult.CANDIDATE_IS_WORSE_WRT_FIRST_EVALUATORS:
            # best condition cannot be improved using this attribute
            check_less_extreme = False

        if check_less_extreme:
            for evaluation in evaluations:
                if interval.includes(evaluation):
                    result, best = self._test_candidate(
                        rule_conditions, attribute, evaluation, best
                    )
                    interval.update(result, evaluation)
        return best
