"""Generalizers relaxing limiting evaluations of conditions of already pruned rule
conditions, so that induced rules cover more objects while still satisfying the
stopping condition.
"""
from __future__ import annotations

from typing import Any
from typing import Optional

from vcdomlem import _helpers
from vcdomlem.conditions import ComparisonDirection
from vcdomlem.conditions import Condition
from vcdomlem.conditions import ConditionRelation
from vcdomlem.induction._base import RuleConditionsGeneralizer
from vcdomlem.induction._base import StoppingConditionChecker
from vcdomlem.information_table import MissingValueType
from vcdomlem.rule_conditions import RuleConditions


class OptimizingRuleConditionsGeneralizer(RuleConditionsGeneralizer):
    """Replaces the limiting evaluation of each condition with the most general
    evaluation of an approximation object for which the stopping condition is still
    satisfied.

    Candidate evaluations of "at least" and "at most" conditions are tested from
    the least to the most general one, and the search ends at the first candidate
    violating the stopping condition, as rule conditions only get worse when they
    cover more objects. Conditions with "equal" relation can be generalized only
    when their limiting evaluation is missing (MV1.5 semantics, possible rules):
    "c = ?" is satisfied only by objects with missing evaluation, while "c = v" is
    satisfied by them and by objects evaluated as v.

    Args:
        stopping_condition_checker (StoppingConditionChecker): checker that has to
            stay satisfied after each replacement
    """

    def __init__(self, stopping_condition_checker: StoppingConditionChecker):
        self.stopping_condition_checker: StoppingConditionChecker = _helpers.not_none(
            stopping_condition_checker, "Stopping condition checker is null."
        )

    def generalize(self, rule_conditions: RuleConditions) -> RuleConditions:
        _helpers.not_none(rule_conditions, "Generalized rule conditions are null.")
        for position in range(rule_conditions.size()):
            condition: Condition = rule_conditions.get_condition(position)
            generalized: Optional[Condition] = self._find_most_general_condition(
                rule_conditions, position, condition
            )
            if generalized is not None:
                rule_conditions.replace_condition(position, generalized)
        return rule_conditions

    def _find_most_general_condition(
        self, rule_conditions: RuleConditions, position: int, condition: Condition
    ) -> Optional[Condition]:
        ordered: bool = condition.relation != ConditionRelation.EQUAL
        most_general: Optional[Condition] = None
        for evaluation in self._get_candidate_evaluations(rule_conditions, condition):
            candidate = Condition(
                attribute=condition.attribute,
                limiting_evaluation=evaluation,
                relation=condition.relation,
                direction=condition.direction,
            )
            if not self.stopping_condition_checker.is_satisfied_when_replacing_condition(
                rule_conditions, position, candidate
            ):
                if ordered:
                    break
                continue
            most_general = candidate
            if not ordered:
                break
        return most_general

    @staticmethod
    def _get_candidate_evaluations(
        rule_conditions: RuleConditions, condition: Condition
    ) -> list[Any]:
        """Known evaluations of approximation objects making the condition more
        general, from the least to the most general one"""
        table = rule_conditions.learning_information_table
        if condition.has_missing_limiting_evaluation:
            if (
                table.missing_value_type != MissingValueType.MV15
                or condition.direction != ComparisonDirection.OBJECT_VS_THRESHOLD
            ):
                return []
        elif condition.relation == ConditionRelation.EQUAL:
            return []

        # first occurrence order keeps nominal candidates deterministic
        evaluations: list[Any] = list(
            dict.fromkeys(
                table.get_field(object_index, condition.attribute_index)
                for object_index in sorted(rule_conditions.indices_of_approximation_objects)
            )
        )
        evaluations = [evaluation for evaluation in evaluations if evaluation is not None]
        if condition.relation == ConditionRelation.EQUAL:
            return evaluations

        at_least: bool = condition.relation == ConditionRelation.AT_LEAST
        if not condition.has_missing_limiting_evaluation:
            threshold: Any = condition.limiting_evaluation
            evaluations = [
                evaluation
                for evaluation in evaluations
                if (evaluation < threshold if at_least else evaluation > threshold)
            ]
        return sorted(evaluations, reverse=at_least)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}"
            f"(stopping_condition_checker={self.stopping_condition_checker!r})"
        )


class DummyRuleConditionsGeneralizer(RuleConditionsGeneralizer):
    """Leaves rule conditions unchanged. Accepts a stopping condition checker only
    to be interchangeable with other generalizer factories."""

    def __init__(
        self, stopping_condition_checker: Optional[StoppingConditionChecker] = None
    ):
        self.stopping_condition_checker: Optional[
            StoppingConditionChecker
        ] = stopping_condition_checker

    def generalize(self, rule_conditions: RuleConditions) -> RuleConditions:
        return _helpers.not_none(rule_conditions, "Generalized rule conditions are null.")
