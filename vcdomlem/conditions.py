"""Elementary conditions building premises and decisions of decision rules.

A condition is a closed variant described by an attribute, a limiting evaluation,
a relation (at least, at most, equal) and a comparison direction. The direction
matters only for objects with missing evaluations:

* threshold-vs-object conditions (used in certain rules) compare the limiting
  evaluation with the evaluation of an object,
* object-vs-threshold conditions (used in possible rules) compare the evaluation
  of an object with the limiting evaluation.

Under MV1.5 semantics, a possible rule may also contain a condition whose limiting
evaluation is missing (rendered as "?"). Such a condition is satisfied only by
objects with a missing evaluation.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

import numpy as np

from vcdomlem import _helpers
from vcdomlem.exceptions import InvalidValueError
from vcdomlem.information_table import (AttributePreferenceType,
                                        EvaluationAttributeWithContext,
                                        InformationTable, MissingValueType)


class RuleType(Enum):
    CERTAIN = "certain"
    POSSIBLE = "possible"
    APPROXIMATE = "approximate"


class RuleSemantics(Enum):
    AT_LEAST = "at_least"
    AT_MOST = "at_most"
    EQUAL = "equal"


class TernaryLogicValue(Enum):
    TRUE = "true"
    FALSE = "false"
    UNCOMPARABLE = "uncomparable"


class ConditionRelation(Enum):
    AT_LEAST = ">="
    AT_MOST = "<="
    EQUAL = "="

    @property
    def symbol(self) -> str:
        return self.value


class ComparisonDirection(Enum):
    THRESHOLD_VS_OBJECT = "threshold_vs_object"
    OBJECT_VS_THRESHOLD = "object_vs_threshold"


class _MissingEvaluation(Enum):
    MISSING = "?"

    def __str__(self) -> str:
        return self.value


MISSING_EVALUATION = _MissingEvaluation.MISSING


@dataclass(frozen=True, eq=False)
class Condition:
    """Condition of the form "attribute <relation> limiting_evaluation".

    Args:
        attribute (EvaluationAttributeWithContext): attribute of the condition
        limiting_evaluation (Any): threshold of the condition
        relation (ConditionRelation): relation between object's evaluation and
            the threshold
        direction (ComparisonDirection, optional): comparison direction.
            Defaults to ComparisonDirection.THRESHOLD_VS_OBJECT.
    """

    attribute: EvaluationAttributeWithContext
    limiting_evaluation: Any
    relation: ConditionRelation
    direction: ComparisonDirection = ComparisonDirection.THRESHOLD_VS_OBJECT

    def __post_init__(self):
        _helpers.not_none(self.attribute, "Condition's attribute is null.")
        _helpers.not_none(
            self.limiting_evaluation, "Condition's limiting evaluation is null."
        )
        _helpers.not_none(self.relation, "Condition's relation is null.")
        _helpers.not_none(self.direction, "Condition's direction is null.")
        # keep plain python values so rules render as "symptom1 >= 31.0"
        object.__setattr__(
            self,
            "limiting_evaluation",
            _helpers.to_python_scalar(self.limiting_evaluation),
        )

    @property
    def attribute_index(self) -> int:
        return self.attribute.index

    @property
    def relation_symbol(self) -> str:
        return self.relation.symbol

    @property
    def has_missing_limiting_evaluation(self) -> bool:
        return self.limiting_evaluation is MISSING_EVALUATION

    @property
    def is_decomposable(self) -> bool:
        """Whether the limiting evaluation is a pair of evaluations"""
        return isinstance(self.limiting_evaluation, tuple)

    @property
    def rule_semantics(self) -> RuleSemantics:
        """Semantics of a rule with this condition as its decision

        Raises:
            InvalidValueError: when condition is not defined for decision attribute
        """
        if not self.attribute.is_decision:
            raise InvalidValueError(
                f"Rule semantics is defined only for conditions on decision "
                f'attribute, "{self.attribute.name}" is not one.'
            )
        preference_type = self.attribute.preference_type
        if (
            self.relation == ConditionRelation.EQUAL
            or preference_type == AttributePreferenceType.NONE
        ):
            return RuleSemantics.EQUAL
        at_least: bool = self.relation == ConditionRelation.AT_LEAST
        if preference_type == AttributePreferenceType.COST:
            at_least = not at_least
        return RuleSemantics.AT_LEAST if at_least else RuleSemantics.AT_MOST

    def satisfied_by(
        self,
        evaluation: Any,
        missing_value_type: MissingValueType = MissingValueType.MV2,
    ) -> bool:
        if self.has_missing_limiting_evaluation:
            return _helpers.is_missing(evaluation) or self._known_value_satisfies_missing(
                missing_value_type
            )
        if _helpers.is_missing(evaluation):
            return self._missing_value_satisfies(missing_value_type)
        evaluation = _helpers.to_python_scalar(evaluation)
        if self.relation == ConditionRelation.AT_LEAST:
            return evaluation >= self.limiting_evaluation
        if self.relation == ConditionRelation.AT_MOST:
            return evaluation <= self.limiting_evaluation
        return evaluation == self.limiting_evaluation

    def satisfied_by_object(
        self, object_index: int, information_table: InformationTable
    ) -> bool:
        return self.satisfied_by(
            information_table.get_field(object_index, self.attribute.index),
            information_table.missing_value_type,
        )

    def covered_mask(self, information_table: InformationTable) -> np.ndarray:
        """Vectorized version of satisfied_by_object for all objects of the table"""
        missing: np.ndarray = information_table.get_missing_mask(self.attribute.index)
        if self.has_missing_limiting_evaluation:
            if self._known_value_satisfies_missing(information_table.missing_value_type):
                return np.ones(missing.shape[0], dtype=bool)
            return missing.copy()
        column: np.ndarray = information_table.get_column(self.attribute.index)
        if missing.any():
            column = np.where(missing, self.limiting_evaluation, column)
        with np.errstate(invalid="ignore"):
            if self.relation == ConditionRelation.AT_LEAST:
                mask = column >= self.limiting_evaluation
            elif self.relation == ConditionRelation.AT_MOST:
                mask = column <= self.limiting_evaluation
            else:
                mask = column == self.limiting_evaluation
        mask = np.asarray(mask, dtype=bool)
        if missing.any():
            mask = np.where(
                missing,
                self._missing_value_satisfies(information_table.missing_value_type),
                mask,
            )
        return mask

    def _missing_value_satisfies(self, missing_value_type: MissingValueType) -> bool:
        if missing_value_type == MissingValueType.MV2:
            return True
        return self.direction == ComparisonDirection.OBJECT_VS_THRESHOLD

    def _known_value_satisfies_missing(self, missing_value_type: MissingValueType) -> bool:
        if missing_value_type == MissingValueType.MV2:
            return True
        return self.direction == ComparisonDirection.THRESHOLD_VS_OBJECT

    def is_at_most_as_general_as(self, other: Condition) -> TernaryLogicValue:
        """Checks whether this condition is satisfied by at most the evaluations
        satisfying the other condition.

        Args:
            other (Condition): compared condition

        Returns:
            TernaryLogicValue: UNCOMPARABLE for conditions of different kinds or
            defined for different attributes, TRUE or FALSE otherwise
        """
        if (
            not isinstance(other, Condition)
            or other.attribute.index != self.attribute.index
            or other.relation != self.relation
            or other.direction != self.direction
        ):
            return TernaryLogicValue.UNCOMPARABLE
        if self.has_missing_limiting_evaluation or other.has_missing_limiting_evaluation:
            return self._compare_generality_with_missing(other)
        try:
            satisfied: bool = other.satisfied_by(self.limiting_evaluation)
        except TypeError:
            return TernaryLogicValue.UNCOMPARABLE
        return TernaryLogicValue.TRUE if satisfied else TernaryLogicValue.FALSE

    def _compare_generality_with_missing(self, other: Condition) -> TernaryLogicValue:
        if self.has_missing_limiting_evaluation and other.has_missing_limiting_evaluation:
            return TernaryLogicValue.TRUE
        # object-vs-threshold condition with missing threshold covers only objects
        # with missing evaluations, threshold-vs-object one covers every object
        narrowest: bool = self.direction == ComparisonDirection.OBJECT_VS_THRESHOLD
        if self.has_missing_limiting_evaluation == narrowest:
            return TernaryLogicValue.TRUE
        return TernaryLogicValue.FALSE

    def duplicate(self) -> Condition:
        return Condition(
            attribute=self.attribute,
            limiting_evaluation=self.limiting_evaluation,
            relation=self.relation,
            direction=self.direction,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Condition):
            return False
        return (
            self.attribute.index == other.attribute.index
            and self.relation == other.relation
            and self.direction == other.direction
            and self.limiting_evaluation == other.limiting_evaluation
        )

    def __hash__(self) -> int:
        return hash(
            (self.attribute.index, self.relation, self.direction, self.limiting_evaluation)
        )

    def __str__(self) -> str:
        return f"{self.attribute.name} {self.relation.symbol} {self.limiting_evaluation}"


def construct_condition(
    rule_type: RuleType,
    rule_semantics: RuleSemantics,
    attribute: EvaluationAttributeWithContext,
    limiting_evaluation: Any,
) -> Condition:
    """Builds condition that can be added to premise of a rule of given type and
    semantics.

    Args:
        rule_type (RuleType): CERTAIN or POSSIBLE
        rule_semantics (RuleSemantics): semantics of the induced rule
        attribute (EvaluationAttributeWithContext): condition attribute
        limiting_evaluation (Any): threshold

    Raises:
        InvalidValueError: for APPROXIMATE rule type

    Returns:
        Condition: constructed condition
    """
    if rule_type == RuleType.CERTAIN:
        direction = ComparisonDirection.THRESHOLD_VS_OBJECT
    elif rule_type == RuleType.POSSIBLE:
        direction = ComparisonDirection.OBJECT_VS_THRESHOLD
    else:
        raise InvalidValueError(
            f"Conditions can be constructed only for certain or possible rules, "
            f"got: {rule_type}"
        )
    return Condition(
        attribute=attribute,
        limiting_evaluation=limiting_evaluation,
        relation=_get_relation(rule_semantics, attribute.preference_type),
        direction=direction,
    )


def construct_decision_condition(
    attribute: EvaluationAttributeWithContext,
    rule_semantics: RuleSemantics,
    limiting_decision: Any,
) -> Condition:
    if not attribute.is_decision:
        raise InvalidValueError(
            f'Attribute "{attribute.name}" is not a decision attribute.'
        )
    return Condition(
        attribute=attribute,
        limiting_evaluation=limiting_decision,
        relation=_get_relation(rule_semantics, attribute.preference_type),
        direction=ComparisonDirection.THRESHOLD_VS_OBJECT,
    )


def _get_relation(
    rule_semantics: RuleSemantics, preference_type: AttributePreferenceType
) -> ConditionRelation:
    if (
        rule_semantics == RuleSemantics.EQUAL
        or preference_type == AttributePreferenceType.NONE
    ):
        return ConditionRelation.EQUAL
    at_least: bool = rule_semantics == RuleSemantics.AT_LEAST
    if preference_type == AttributePreferenceType.COST:
        at_least = not at_least
    return ConditionRelation.AT_LEAST if at_least else ConditionRelation.AT_MOST
