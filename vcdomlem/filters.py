"""Filters selecting rules by their characteristics.

Filters can be built from text, e.g. ``"support>=10"`` or, for composite filters,
``"support>=10&confidence>0.8"``.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Union

from vcdomlem import _helpers
from vcdomlem.characteristics import RuleCharacteristic, RuleCharacteristics
from vcdomlem.exceptions import InvalidValueError

if TYPE_CHECKING:
    from vcdomlem.rules import Rule

CharacteristicCalculationMethod = Callable[[RuleCharacteristics], Any]


class Relation(Enum):
    GT = ">"
    GE = ">="
    EQ = "="
    LE = "<="
    LT = "<"

    @property
    def symbol(self) -> str:
        return self.value

    def holds(self, value: Any, threshold: Any) -> bool:
        if self == Relation.GT:
            return value > threshold
        if self == Relation.GE:
            return value >= threshold
        if self == Relation.EQ:
            return value == threshold
        if self == Relation.LE:
            return value <= threshold
        return value < threshold

    @staticmethod
    def of(symbol: str) -> Relation:
        _helpers.not_none(symbol, "Relation symbol is null.")
        for relation in Relation:
            if relation.value == symbol.strip():
                return relation
        raise InvalidValueError(f'Unknown relation: "{symbol}"')


# two-character symbols have to be checked before their one-character prefixes
_PARSED_RELATIONS: list[Relation] = [
    Relation.GE,
    Relation.LE,
    Relation.GT,
    Relation.LT,
    Relation.EQ,
]


class RuleFilter(ABC):

    @abstractmethod
    def accepts(self, rule: Rule, rule_characteristics: RuleCharacteristics) -> bool:
        pass


class AcceptingRuleFilter(RuleFilter):
    """Accepts every rule"""

    def accepts(self, rule: Rule, rule_characteristics: RuleCharacteristics) -> bool:
        return True


def _parse_threshold(threshold: str) -> Union[int, float]:
    try:
        value: float = float(threshold)
    except ValueError as error:
        raise InvalidValueError(f'Invalid threshold: "{threshold}"') from error
    if value.is_integer():
        return int(value)
    return value


class RuleCharacteristicsFilter(RuleFilter):
    """Accepts rules whose characteristic is in given relation with the threshold.

    Args:
        calculation_method (CharacteristicCalculationMethod): reads value of the
            characteristic from rule characteristics
        characteristic_name (str): name of the characteristic
        relation (Relation): relation between value and threshold
        threshold (Union[int, float]): threshold
    """

    def __init__(
        self,
        calculation_method: CharacteristicCalculationMethod,
        characteristic_name: str,
        relation: Relation,
        threshold: Union[int, float],
    ):
        self.calculation_method: CharacteristicCalculationMethod = _helpers.not_none(
            calculation_method, "Calculation method is null."
        )
        self.characteristic_name: str = _helpers.not_none(
            characteristic_name, "Characteristic name is null."
        )
        self.relation: Relation = _helpers.not_none(relation, "Relation is null.")
        self.threshold: Union[int, float] = _helpers.not_none(
            threshold, "Threshold is null."
        )

    @staticmethod
    def of(text: str) -> RuleCharacteristicsFilter:
        """Parses filter like "support>=10"

        Raises:
            InvalidValueError: when text does not contain any relation or contains
                unknown characteristic or invalid threshold
        """
        _helpers.not_none(text, "Filter text is null.")
        for relation in _PARSED_RELATIONS:
            if relation.symbol in text:
                name, threshold = text.split(relation.symbol, 1)
                return RuleCharacteristicsFilter.of_parts(name, relation.symbol, threshold)
        raise InvalidValueError(f'Filter "{text}" does not contain any relation.')

    @staticmethod
    def of_parts(
        characteristic_name: str, relation_symbol: str, threshold: str
    ) -> RuleCharacteristicsFilter:
        characteristic: RuleCharacteristic = RuleCharacteristic.of(characteristic_name)
        return RuleCharacteristicsFilter(
            characteristic.get_value,
            characteristic.value,
            Relation.of(relation_symbol),
            _parse_threshold(_helpers.not_none(threshold, "Threshold is null.").strip()),
        )

    def accepts(self, rule: Rule, rule_characteristics: RuleCharacteristics) -> bool:
        _helpers.not_none(rule_characteristics, "Rule characteristics are null.")
        return self.relation.holds(
            self.calculation_method(rule_characteristics), self.threshold
        )

    def __str__(self) -> str:
        return (
            f"{self.characteristic_name}{self.relation.symbol}"
            f"{_helpers.format_number(self.threshold)}"
        )


class CompositeRuleCharacteristicsFilter(RuleFilter):
    """Conjunction of rule characteristics filters. An empty composite filter
    accepts every rule."""

    SEPARATOR: str = "&"

    def __init__(self, filters: list[RuleCharacteristicsFilter]):
        self.filters: list[RuleCharacteristicsFilter] = list(
            _helpers.not_none(filters, "Filters are null.")
        )

    @staticmethod
    def of(text: str) -> CompositeRuleCharacteristicsFilter:
        _helpers.not_none(text, "Filter text is null.")
        if text.strip() == "":
            return CompositeRuleCharacteristicsFilter([])
        return CompositeRuleCharacteristicsFilter(
            [
                RuleCharacteristicsFilter.of(part.strip())
                for part in text.split(CompositeRuleCharacteristicsFilter.SEPARATOR)
            ]
        )

    def accepts(self, rule: Rule, rule_characteristics: RuleCharacteristics) -> bool:
        return all(
            rule_filter.accepts(rule, rule_characteristics)
            for rule_filter in self.filters
        )

    def __str__(self) -> str:
        return self.SEPARATOR.join(str(rule_filter) for rule_filter in self.filters)


class ConfidenceRuleFilter(RuleFilter):
    """Accepts rules whose confidence is greater than (strict) or at least equal
    to the threshold.

    Raises:
        InvalidValueError: when threshold is outside of [0, 1]
    """

    def __init__(self, confidence_threshold: float, strict: bool = False):
        if confidence_threshold is None or not 0.0 <= confidence_threshold <= 1.0:
            raise InvalidValueError(
                f"Confidence threshold {confidence_threshold} is outside of [0, 1]."
            )
        self.confidence_threshold: float = confidence_threshold
        self.strict: bool = strict

    def accepts(self, rule: Rule, rule_characteristics: RuleCharacteristics) -> bool:
        _helpers.not_none(rule_characteristics, "Rule characteristics are null.")
        confidence: float = rule_characteristics.confidence
        if self.strict:
            return confidence > self.confidence_threshold
        return confidence >= self.confidence_threshold
