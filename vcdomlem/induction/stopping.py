from __future__ import annotations

import numpy as np

from vcdomlem import _helpers
from vcdomlem.conditions import Condition
from vcdomlem.evaluators import RuleConditionsEvaluator
from vcdomlem.induction._base import StoppingConditionChecker
from vcdomlem.rule_conditions import RuleConditions


class EvaluationAndCoverageStoppingConditionChecker(StoppingConditionChecker):
    """Stops growing rule conditions when their evaluation satisfies the threshold
    and they cover only objects that are allowed to be covered.

    Args:
        evaluator (RuleConditionsEvaluator): evaluator of rule conditions, e.g.
            epsilon consistency measure
        threshold (float): threshold of the evaluation
    """

    def __init__(self, evaluator: RuleConditionsEvaluator, threshold: float):
        self.evaluator: RuleConditionsEvaluator = _helpers.not_none(
            evaluator, "Evaluator is null."
        )
        self.threshold: float = threshold

    def is_satisfied(self, rule_conditions: RuleConditions) -> bool:
        return self.evaluator.evaluation_satisfies_threshold(
            rule_conditions, self.threshold
        ) and self._covers_only_allowed_objects(
            rule_conditions, rule_conditions.covered_mask
        )

    def is_satisfied_without_condition(
        self, rule_conditions: RuleConditions, condition_index: int
    ) -> bool:
        return self.evaluator.evaluation_satisfies_threshold_without_condition(
            rule_conditions, self.threshold, condition_index
        ) and self._covers_only_allowed_objects(
            rule_conditions,
            rule_conditions.covered_mask_without_condition(condition_index),
        )

    def is_satisfied_when_replacing_condition(
        self, rule_conditions: RuleConditions, condition_index: int, condition: Condition
    ) -> bool:
        return self.evaluator.evaluation_satisfies_threshold_with_replaced_condition(
            rule_conditions, self.threshold, condition_index, condition
        ) and self._covers_only_allowed_objects(
            rule_conditions,
            rule_conditions.covered_mask_with_replaced_condition(
                condition_index, condition
            ),
        )

    def copy_with_new_threshold(
        self, threshold: float
    ) -> EvaluationAndCoverageStoppingConditionChecker:
        return EvaluationAndCoverageStoppingConditionChecker(self.evaluator, threshold)

    @staticmethod
    def _covers_only_allowed_objects(
        rule_conditions: RuleConditions, covered_mask: np.ndarray
    ) -> bool:
        return not np.any(covered_mask & ~rule_conditions.can_be_covered_mask)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(evaluator={self.evaluator!r}, "
            f"threshold={self.threshold})"
        )
