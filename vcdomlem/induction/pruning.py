"""Pruners removing redundant elementary conditions from rule conditions and
redundant rule conditions from a list, together with rule minimality checkers.
"""
from __future__ import annotations

from functools import cmp_to_key

import numpy as np

from vcdomlem import _helpers
from vcdomlem.evaluators import RuleConditionsEvaluator, confront
from vcdomlem.exceptions import InvalidValueError
from vcdomlem.induction._base import (RuleConditionsPruner,
                                      RuleConditionsSetPruner,
                                      RuleMinimalityChecker,
                                      StoppingConditionChecker)
from vcdomlem.rule_conditions import RuleConditions


class AttributeOrderRuleConditionsPruner(RuleConditionsPruner):
    """Visits attributes in ascending index order and removes each condition whose
    removal keeps the stopping condition satisfied.

    Args:
        stopping_condition_checker (StoppingConditionChecker): checker that has to
            stay satisfied after each removal
    """

    def __init__(self, stopping_condition_checker: StoppingConditionChecker):
        self.stopping_condition_checker: StoppingConditionChecker = _helpers.not_none(
            stopping_condition_checker, "Stopping condition checker is null."
        )

    def prune(self, rule_conditions: RuleConditions) -> RuleConditions:
        _helpers.not_none(rule_conditions, "Pruned rule conditions are null.")
        if rule_conditions.size() <= 1:
            return rule_conditions
        attribute_indices: list[int] = sorted(
            {condition.attribute_index for condition in rule_conditions.conditions}
        )
        for attribute_index in attribute_indices:
            # positions change after every removal
            positions: list[int] = rule_conditions.get_condition_indices_for_attribute(
                attribute_index
            )
            while len(positions) > 0:
                position: int = positions.pop()
                if self.stopping_condition_checker.is_satisfied_without_condition(
                    rule_conditions, position
                ):
                    rule_conditions.remove_condition(position)
                    positions = [p for p in positions if p < position]
        return rule_conditions


class FIFORuleConditionsPruner(RuleConditionsPruner):
    """Removes conditions in the order they were added (oldest first), as long as
    the stopping condition stays satisfied.

    Args:
        stopping_condition_checker (StoppingConditionChecker): checker that has to
            stay satisfied after each removal
    """

    def __init__(self, stopping_condition_checker: StoppingConditionChecker):
        self.stopping_condition_checker: StoppingConditionChecker = _helpers.not_none(
            stopping_condition_checker, "Stopping condition checker is null."
        )

    def prune(self, rule_conditions: RuleConditions) -> RuleConditions:
        _helpers.not_none(rule_conditions, "Pruned rule conditions are null.")
        if rule_conditions.size() <= 1:
            return rule_conditions
        position: int = 0
        while position < rule_conditions.size():
            if self.stopping_condition_checker.is_satisfied_without_condition(
                rule_conditions, position
            ):
                rule_conditions.remove_condition(position)
            else:
                position += 1
        return rule_conditions


class DummyRuleConditionsPruner(RuleConditionsPruner):

    def prune(self, rule_conditions: RuleConditions) -> RuleConditions:
        return _helpers.not_none(rule_conditions, "Pruned rule conditions are null.")


def _check_evaluators(evaluators: list[RuleConditionsEvaluator], name: str):
    _helpers.not_none(evaluators, f"{name} are null.")
    if len(evaluators) == 0:
        raise InvalidValueError(f"List of {name.lower()} is empty.")
    for i, evaluator in enumerate(evaluators):
        _helpers.not_none(evaluator, f"Evaluator is null at index {i}.")


class EvaluationsAndOrderRuleConditionsSetPruner(RuleConditionsSetPruner):
    """Removes redundant rule conditions from a list. Rule conditions are visited
    from the worst to the best one according to lexicographically compared
    evaluators (among equally evaluated ones, the most recently induced go first).
    Rule conditions are removed when the remaining ones still cover all objects
    that have to stay covered. The order of kept rule conditions is preserved.

    Args:
        rule_conditions_evaluators (list[RuleConditionsEvaluator]): evaluators
    """

    def __init__(self, rule_conditions_evaluators: list[RuleConditionsEvaluator]):
        _check_evaluators(rule_conditions_evaluators, "Rule conditions evaluators")
        self.rule_conditions_evaluators: list[RuleConditionsEvaluator] = list(
            rule_conditions_evaluators
        )

    def prune(
        self,
        rule_conditions_list: list[RuleConditions],
        indices_of_objects_to_keep_covered: set[int],
    ) -> list[RuleConditions]:
        _helpers.not_none(rule_conditions_list, "List of rule conditions is null.")
        _helpers.not_none(
            indices_of_objects_to_keep_covered,
            "Indices of objects to keep covered are null.",
        )
        if len(rule_conditions_list) == 0:
            return []
        evaluations: list[list[float]] = [
            [evaluator.evaluate(rule_conditions) for evaluator in self.rule_conditions_evaluators]
            for rule_conditions in rule_conditions_list
        ]

        def compare(position_a: int, position_b: int) -> int:
            # negative when rule conditions at position_a should be visited first
            for i, evaluator in enumerate(self.rule_conditions_evaluators):
                difference: float = confront(
                    evaluator.measure_type,
                    evaluations[position_a][i],
                    evaluations[position_b][i],
                )
                if difference != 0:
                    return -1 if difference < 0 else 1
            return position_b - position_a

        n: int = rule_conditions_list[0].learning_information_table.number_of_objects
        to_keep_covered: np.ndarray = np.zeros(n, dtype=bool)
        if len(indices_of_objects_to_keep_covered) > 0:
            to_keep_covered[list(indices_of_objects_to_keep_covered)] = True
        covered_masks: list[np.ndarray] = [
            rule_conditions.covered_mask for rule_conditions in rule_conditions_list
        ]

        kept: list[bool] = [True] * len(rule_conditions_list)
        for position in sorted(range(len(rule_conditions_list)), key=cmp_to_key(compare)):
            covered_by_others: np.ndarray = np.zeros(n, dtype=bool)
            for other_position, covered_mask in enumerate(covered_masks):
                if other_position != position and kept[other_position]:
                    covered_by_others |= covered_mask
            if not np.any(to_keep_covered & ~covered_by_others):
                kept[position] = False
        return [
            rule_conditions
            for rule_conditions, keep in zip(rule_conditions_list, kept)
            if keep
        ]


class DummyRuleConditionsSetPruner(RuleConditionsSetPruner):

    def prune(
        self,
        rule_conditions_list: list[RuleConditions],
        indices_of_objects_to_keep_covered: set[int],
    ) -> list[RuleConditions]:
        return _helpers.not_none(rule_conditions_list, "List of rule conditions is null.")


class SingleEvaluationRuleMinimalityChecker(RuleMinimalityChecker):
    """Rejects rule conditions for which an already accepted rule conditions
    object, describing the same positive objects with the same semantics, has an
    at least as general premise and is not worse according to the evaluator.

    Args:
        rule_conditions_evaluator (RuleConditionsEvaluator): evaluator
    """

    def __init__(self, rule_conditions_evaluator: RuleConditionsEvaluator):
        self.rule_conditions_evaluator: RuleConditionsEvaluator = _helpers.not_none(
            rule_conditions_evaluator, "Rule conditions evaluator is null."
        )

    def check(
        self, accepted_rule_conditions: list[RuleConditions], candidate: RuleConditions
    ) -> bool:
        _helpers.not_none(accepted_rule_conditions, "Accepted rule conditions are null.")
        _helpers.not_none(candidate, "Checked rule conditions are null.")
        for accepted in accepted_rule_conditions:
            if (
                accepted.rule_semantics == candidate.rule_semantics
                and accepted.indices_of_positive_objects
                == candidate.indices_of_positive_objects
                and accepted.is_at_least_as_general_as(candidate)
                and self.rule_conditions_evaluator.confront(accepted, candidate) >= 0
            ):
                return False
        return True


class DummyRuleMinimalityChecker(RuleMinimalityChecker):

    def check(
        self, accepted_rule_conditions: list[RuleConditions], candidate: RuleConditions
    ) -> bool:
        return True
