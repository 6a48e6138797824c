"""Decision rules and rule sets.

A rule consists of a premise (conjunction of conditions on condition attributes)
and decisions, being an alternative of conjunctions of conditions on the decision
attribute, e.g. "(symptom1 >= 31.0) => (state >= 2)".
"""
from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Optional

import numpy as np

from vcdomlem import _helpers
from vcdomlem.characteristics import (ComputableRuleCharacteristics,
                                      RuleCharacteristic, RuleCharacteristics)
from vcdomlem.conditions import Condition, RuleSemantics, RuleType
from vcdomlem.exceptions import InvalidSizeError, InvalidValueError
from vcdomlem.filters import AcceptingRuleFilter, RuleFilter
from vcdomlem.information_table import InformationTable
from vcdomlem.rule_conditions import RuleCoverageInformation

DEFAULT_CONDITION_SEPARATOR: str = " & "


class ConditionConnectiveType(Enum):
    AND = "and"
    OR = "or"


@dataclass(frozen=True)
class Rule:
    """Decision rule.

    Args:
        rule_type (RuleType): CERTAIN, POSSIBLE or APPROXIMATE
        rule_semantics (RuleSemantics): AT_LEAST, AT_MOST or EQUAL
        conditions (tuple[Condition, ...]): conditions of the premise
        decisions (tuple[tuple[Condition, ...], ...]): alternative of conjunctions
            of decision conditions
        condition_separator (Optional[str], optional): separator of conditions used
            by str(). Defaults to None meaning " & ".
    """

    rule_type: RuleType
    rule_semantics: RuleSemantics
    conditions: tuple[Condition, ...]
    decisions: tuple[tuple[Condition, ...], ...]
    condition_separator: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        _helpers.not_none(self.rule_type, "Rule type is null.")
        _helpers.not_none(self.rule_semantics, "Rule semantics is null.")
        _helpers.not_none(self.conditions, "Rule conditions are null.")
        _helpers.not_none(self.decisions, "Rule decisions are null.")
        conditions: tuple[Condition, ...] = tuple(self.conditions)
        decisions: tuple[tuple[Condition, ...], ...] = tuple(
            tuple(alternative) for alternative in self.decisions
        )
        for condition in conditions:
            _helpers.not_none(condition, "Rule condition is null.")
        if len(decisions) == 0 or any(len(alternative) == 0 for alternative in decisions):
            raise InvalidValueError("Rule has to have at least one decision.")
        for alternative in decisions:
            for decision in alternative:
                _helpers.not_none(decision, "Rule decision is null.")
        object.__setattr__(self, "conditions", conditions)
        object.__setattr__(self, "decisions", decisions)

    @staticmethod
    def of_decision(
        rule_type: RuleType,
        conditions: Iterable[Condition],
        decision: Condition,
        condition_separator: Optional[str] = None,
    ) -> Rule:
        """Creates rule with a single decision, semantics of the rule is taken from
        the decision"""
        _helpers.not_none(decision, "Rule decision is null.")
        return Rule(
            rule_type=rule_type,
            rule_semantics=decision.rule_semantics,
            conditions=tuple(conditions),
            decisions=((decision,),),
            condition_separator=condition_separator,
        )

    @staticmethod
    def of_decisions(
        rule_type: RuleType,
        rule_semantics: RuleSemantics,
        conditions: Iterable[Condition],
        decisions: Iterable[Condition],
        connective: ConditionConnectiveType,
        condition_separator: Optional[str] = None,
    ) -> Rule:
        """Creates rule with decisions joined by given connective"""
        decisions = list(_helpers.not_none(decisions, "Rule decisions are null."))
        if connective == ConditionConnectiveType.AND:
            grouped: tuple = (tuple(decisions),)
        else:
            grouped = tuple((decision,) for decision in decisions)
        return Rule(
            rule_type=rule_type,
            rule_semantics=rule_semantics,
            conditions=tuple(conditions),
            decisions=grouped,
            condition_separator=condition_separator,
        )

    @property
    def decision(self) -> Condition:
        """The first decision of the rule"""
        return self.decisions[0][0]

    def covers(self, object_index: int, information_table: InformationTable) -> bool:
        return all(
            condition.satisfied_by_object(object_index, information_table)
            for condition in self.conditions
        )

    def decisions_matched_by(
        self, object_index: int, information_table: InformationTable
    ) -> bool:
        """Checks whether the object satisfies any conjunction of decisions"""
        return any(
            all(
                decision.satisfied_by_object(object_index, information_table)
                for decision in alternative
            )
            for alternative in self.decisions
        )

    def supported_by(self, object_index: int, information_table: InformationTable) -> bool:
        return self.covers(object_index, information_table) and self.decisions_matched_by(
            object_index, information_table
        )

    def covered_mask(self, information_table: InformationTable) -> np.ndarray:
        mask: np.ndarray = np.ones(information_table.number_of_objects, dtype=bool)
        for condition in self.conditions:
            mask &= condition.covered_mask(information_table)
        return mask

    def get_coverage_information(
        self,
        information_table: InformationTable,
        indices_of_neutral_objects: Optional[Iterable[int]] = None,
    ) -> RuleCoverageInformation:
        """Calculates coverage information of this rule in given table. Positive
        objects are those matching decisions of the rule."""
        _helpers.not_none(information_table, "Information table is null.")
        positive: list[int] = [
            i
            for i in range(information_table.number_of_objects)
            if self.decisions_matched_by(i, information_table)
        ]
        covered: list[int] = np.flatnonzero(self.covered_mask(information_table)).tolist()
        return RuleCoverageInformation(
            indices_of_positive_objects=frozenset(positive),
            indices_of_neutral_objects=(
                frozenset(indices_of_neutral_objects)
                if indices_of_neutral_objects is not None
                else frozenset()
            ),
            indices_of_covered_objects=tuple(covered),
            decisions_of_covered_objects={
                i: information_table.get_decision(i) for i in covered
            },
            all_objects_count=information_table.number_of_objects,
        )

    def __str__(self) -> str:
        separator: str = (
            self.condition_separator
            if self.condition_separator is not None
            else DEFAULT_CONDITION_SEPARATOR
        )
        premise: str = separator.join(f"({condition})" for condition in self.conditions)
        if len(self.decisions) == 1:
            conclusion: str = separator.join(
                f"({decision})" for decision in self.decisions[0]
            )
        else:
            conclusion = " OR ".join(
                "(" + separator.join(f"({decision})" for decision in alternative) + ")"
                for alternative in self.decisions
            )
        if premise == "":
            return f"=> {conclusion}"
        return f"{premise} => {conclusion}"


class RuleSet:
    """Ordered, immutable collection of rules.

    Args:
        rules (list[Rule]): rules
        accelerate_by_read_only_params (bool, optional): when True the given list is
            used directly instead of being copied, so the caller must not modify it
            afterwards. Defaults to False.
    """

    def __init__(self, rules: list[Rule], accelerate_by_read_only_params: bool = False):
        _helpers.not_none(rules, "Rules are null.")
        self._rules: list[Rule] = (
            rules if accelerate_by_read_only_params else list(rules)
        )
        self.learning_information_table_hash: Optional[str] = None

    @property
    def rules(self) -> tuple[Rule, ...]:
        return tuple(self._rules)

    def get_rule(self, index: int) -> Rule:
        self._check_index(index)
        return self._rules[index]

    def size(self) -> int:
        return len(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    @staticmethod
    def join(rule_set_1: RuleSet, rule_set_2: RuleSet) -> RuleSet:
        _helpers.not_none(rule_set_1, "First rule set is null.")
        _helpers.not_none(rule_set_2, "Second rule set is null.")
        return RuleSet(list(rule_set_1._rules) + list(rule_set_2._rules), True)

    def serialize(self, line_separator: str = os.linesep) -> str:
        """Text representation of the rule set, one rule per line

        Args:
            line_separator (str, optional): terminates every line.
                Defaults to os.linesep.

        Returns:
            str: serialized rule set
        """
        return "".join(
            f"{self._serialize_rule(i)}{line_separator}" for i in range(len(self._rules))
        )

    @property
    def hash(self) -> str:
        """SHA-256 hash (upper case hex) of the serialized rule set"""
        return hashlib.sha256(self.serialize("\n").encode("utf-8")).hexdigest().upper()

    def _serialize_rule(self, index: int) -> str:
        return str(self._rules[index])

    def _check_index(self, index: int):
        if index < 0 or index >= len(self._rules):
            raise IndexError(
                f"Rule index {index} is out of range [0, {len(self._rules)})"
            )

    def __str__(self) -> str:
        return self.serialize("\n")


_SERIALIZED_CHARACTERISTICS: list[RuleCharacteristic] = [
    RuleCharacteristic.SUPPORT,
    RuleCharacteristic.STRENGTH,
    RuleCharacteristic.COVERAGE_FACTOR,
    RuleCharacteristic.CONFIDENCE,
    RuleCharacteristic.EPSILON,
]


class RuleSetWithCharacteristics(RuleSet):
    """Rule set storing characteristics of every rule.

    Args:
        rules (list[Rule]): rules
        rule_characteristics (list[RuleCharacteristics]): characteristics of rules,
            one per rule
        accelerate_by_read_only_params (bool, optional): see :class:`RuleSet`.
            Defaults to False.

    Raises:
        InvalidSizeError: when numbers of rules and characteristics differ
    """

    def __init__(
        self,
        rules: list[Rule],
        rule_characteristics: list[RuleCharacteristics],
        accelerate_by_read_only_params: bool = False,
    ):
        super().__init__(rules, accelerate_by_read_only_params)
        _helpers.not_none(rule_characteristics, "Rule characteristics are null.")
        if len(rules) != len(rule_characteristics):
            raise InvalidSizeError(
                f"Number of rules ({len(rules)}) and rule characteristics "
                f"({len(rule_characteristics)}) differ."
            )
        self._rule_characteristics: list[Optional[RuleCharacteristics]] = (
            rule_characteristics
            if accelerate_by_read_only_params
            else list(rule_characteristics)
        )

    def get_rule_characteristics(self, index: int) -> RuleCharacteristics:
        self._check_index(index)
        return self._rule_characteristics[index]

    @staticmethod
    def join(
        rule_set_1: RuleSetWithCharacteristics, rule_set_2: RuleSetWithCharacteristics
    ) -> RuleSetWithCharacteristics:
        _helpers.not_none(rule_set_1, "First rule set is null.")
        _helpers.not_none(rule_set_2, "Second rule set is null.")
        return RuleSetWithCharacteristics(
            list(rule_set_1._rules) + list(rule_set_2._rules),
            [rule_set_1.get_rule_characteristics(i) for i in range(len(rule_set_1))]
            + [rule_set_2.get_rule_characteristics(i) for i in range(len(rule_set_2))],
            True,
        )

    def filter(self, rule_filter: RuleFilter) -> RuleSetWithCharacteristics:
        """Keeps rules accepted by the filter, preserving their order. For an
        :class:`AcceptingRuleFilter` this very rule set is returned."""
        _helpers.not_none(rule_filter, "Rule filter is null.")
        if isinstance(rule_filter, AcceptingRuleFilter):
            return self
        accepted: list[int] = [
            i
            for i in range(len(self._rules))
            if rule_filter.accepts(self._rules[i], self.get_rule_characteristics(i))
        ]
        return self._select(accepted)

    def _select(self, indices: list[int]) -> RuleSetWithCharacteristics:
        selected = RuleSetWithCharacteristics(
            [self._rules[i] for i in indices],
            [self._rule_characteristics[i] for i in indices],
            True,
        )
        selected.learning_information_table_hash = self.learning_information_table_hash
        return selected

    def _serialize_rule(self, index: int) -> str:
        characteristics: RuleCharacteristics = self.get_rule_characteristics(index)
        values: list[str] = []
        for characteristic in _SERIALIZED_CHARACTERISTICS:
            if characteristics.is_set(characteristic):
                value: str = _helpers.format_number(characteristics.get(characteristic))
            else:
                value = "?"
            values.append(f"{characteristic.value}={value}")
        return f"{self._rules[index]} [{', '.join(values)}]"


class RuleSetWithComputableCharacteristics(RuleSetWithCharacteristics):
    """Rule set whose characteristics are calculated on demand from coverage
    information of rules.

    Args:
        rules (list[Rule]): rules
        rule_coverage_informations (list[RuleCoverageInformation]): coverage
            information of rules, one per rule
        accelerate_by_read_only_params (bool, optional): see :class:`RuleSet`.
            Defaults to False.

    Raises:
        InvalidSizeError: when numbers of rules and coverage informations differ
    """

    def __init__(
        self,
        rules: list[Rule],
        rule_coverage_informations: list[RuleCoverageInformation],
        accelerate_by_read_only_params: bool = False,
    ):
        _helpers.not_none(rules, "Rules are null.")
        _helpers.not_none(
            rule_coverage_informations, "Rule coverage informations are null."
        )
        if len(rules) != len(rule_coverage_informations):
            raise InvalidSizeError(
                f"Number of rules ({len(rules)}) and rule coverage informations "
                f"({len(rule_coverage_informations)}) differ."
            )
        super().__init__(rules, [None] * len(rules), accelerate_by_read_only_params)
        self._rule_coverage_informations: list[RuleCoverageInformation] = (
            rule_coverage_informations
            if accelerate_by_read_only_params
            else list(rule_coverage_informations)
        )

    def get_rule_coverage_information(self, index: int) -> RuleCoverageInformation:
        self._check_index(index)
        return self._rule_coverage_informations[index]

    def get_rule_characteristics(self, index: int) -> ComputableRuleCharacteristics:
        self._check_index(index)
        if self._rule_characteristics[index] is None:
            self._rule_characteristics[index] = ComputableRuleCharacteristics(
                self._rule_coverage_informations[index],
                number_of_conditions=len(self._rules[index].conditions),
            )
        return self._rule_characteristics[index]

    def calculate_all_characteristics(self):
        for index in range(len(self._rules)):
            self.get_rule_characteristics(index).calculate_all_characteristics()

    @staticmethod
    def join(
        rule_set_1: RuleSetWithComputableCharacteristics,
        rule_set_2: RuleSetWithComputableCharacteristics,
    ) -> RuleSetWithComputableCharacteristics:
        _helpers.not_none(rule_set_1, "First rule set is null.")
        _helpers.not_none(rule_set_2, "Second rule set is null.")
        return RuleSetWithComputableCharacteristics(
            list(rule_set_1._rules) + list(rule_set_2._rules),
            list(rule_set_1._rule_coverage_informations)
            + list(rule_set_2._rule_coverage_informations),
            True,
        )

    def _select(self, indices: list[int]) -> RuleSetWithComputableCharacteristics:
        selected = RuleSetWithComputableCharacteristics(
            [self._rules[i] for i in indices],
            [self._rule_coverage_informations[i] for i in indices],
            True,
        )
        # reuse already calculated characteristics
        selected._rule_characteristics = [self._rule_characteristics[i] for i in indices]
        selected.learning_information_table_hash = self.learning_information_table_hash
        return selected
