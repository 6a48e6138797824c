"""Classification of objects with decision rules induced for unions of ordered
decision classes.

An object covered by "at least" rules belongs at least to the best class
suggested by them, and an object covered by "at most" rules belongs at most to
the worst class suggested by them. When both kinds of rules cover the object
and the limits differ, the class in the middle between them is assigned.
Objects not covered by any rule get the default decision.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from vcdomlem import _helpers
from vcdomlem.conditions import RuleSemantics
from vcdomlem.exceptions import InvalidValueError
from vcdomlem.information_table import InformationTable
from vcdomlem.rules import RuleSet


@dataclass(frozen=True)
class SimpleClassificationResult:
    decision: Any
    indices_of_covering_rules: tuple[int, ...] = ()

    @property
    def is_default(self) -> bool:
        return len(self.indices_of_covering_rules) == 0


class SimpleRuleClassifier:
    """Assigns a single decision class to each object using "at least" and
    "at most" rules.

    Args:
        rule_set (RuleSet): rules used for classification
        ordered_decisions (list[Any]): decision classes ordered from the worst to
            the best one, e.g. from
            :meth:`InformationTable.ordered_decision_values`
        default_decision (Any): decision of objects not covered by any rule

    Raises:
        InvalidValueError: when the list of decisions is empty or the default
            decision is not one of them
    """

    def __init__(
        self, rule_set: RuleSet, ordered_decisions: list[Any], default_decision: Any
    ):
        self.rule_set: RuleSet = _helpers.not_none(rule_set, "Rule set is null.")
        self.ordered_decisions: list[Any] = list(
            _helpers.not_none(ordered_decisions, "Ordered decisions are null.")
        )
        if len(self.ordered_decisions) == 0:
            raise InvalidValueError("List of ordered decisions is empty.")
        self._ranks: dict[Any, int] = {
            decision: rank for rank, decision in enumerate(self.ordered_decisions)
        }
        default_decision = _helpers.to_python_scalar(default_decision)
        if default_decision not in self._ranks:
            raise InvalidValueError(
                f"Default decision {default_decision} is not one of decision classes."
            )
        self.default_decision: Any = default_decision

    def classify(
        self, object_index: int, information_table: InformationTable
    ) -> SimpleClassificationResult:
        covering: list[int] = [
            i
            for i, rule in enumerate(self.rule_set)
            if rule.covers(object_index, information_table)
        ]
        lower_rank, upper_rank = self._get_limits(covering)
        return SimpleClassificationResult(
            decision=self._resolve(lower_rank, upper_rank),
            indices_of_covering_rules=tuple(covering),
        )

    def classify_all(
        self, information_table: InformationTable
    ) -> list[SimpleClassificationResult]:
        _helpers.not_none(information_table, "Information table is null.")
        n: int = information_table.number_of_objects
        covered_masks: list[np.ndarray] = [
            rule.covered_mask(information_table) for rule in self.rule_set
        ]
        results: list[SimpleClassificationResult] = []
        for object_index in range(n):
            covering: list[int] = [
                i for i, mask in enumerate(covered_masks) if mask[object_index]
            ]
            lower_rank, upper_rank = self._get_limits(covering)
            results.append(
                SimpleClassificationResult(
                    decision=self._resolve(lower_rank, upper_rank),
                    indices_of_covering_rules=tuple(covering),
                )
            )
        return results

    def predict(self, information_table: InformationTable) -> np.ndarray:
        return np.array(
            [result.decision for result in self.classify_all(information_table)]
        )

    def _get_limits(self, indices_of_rules: list[int]) -> tuple[int, int]:
        """Ranks of the best "at least" and the worst "at most" decisions, -1 when
        there is no such decision"""
        lower_rank: int = -1
        upper_rank: int = -1
        for index in indices_of_rules:
            rule = self.rule_set.get_rule(index)
            if rule.rule_semantics == RuleSemantics.EQUAL:
                continue
            rank: int = self._get_rank(rule.decision.limiting_evaluation)
            if rule.rule_semantics == RuleSemantics.AT_LEAST:
                lower_rank = max(lower_rank, rank)
            elif upper_rank == -1 or rank < upper_rank:
                upper_rank = rank
        return lower_rank, upper_rank

    def _get_rank(self, decision: Any) -> int:
        try:
            return self._ranks[decision]
        except KeyError as error:
            raise InvalidValueError(
                f"Rule decision {decision} is not one of decision classes."
            ) from error

    def _resolve(self, lower_rank: int, upper_rank: int) -> Any:
        if lower_rank == -1 and upper_rank == -1:
            return self.default_decision
        if upper_rank == -1:
            return self.ordered_decisions[lower_rank]
        if lower_rank == -1:
            return self.ordered_decisions[upper_rank]
        # limits may be inverted, e.g. "at least 2" and "at most 1"
        return self.ordered_decisions[(lower_rank + upper_rank) // 2]
