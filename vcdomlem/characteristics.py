"""Characteristics of decision rules: support, strength, confidence, coverage and
Bayesian confirmation measures.

Characteristics of a rule are calculated from the contingency counts of the rule:

* a - number of covered positive objects (support),
* b - number of not covered positive objects,
* c - number of covered negative objects (negative coverage),
* d - number of not covered negative objects,

where negative objects are those that are neither positive nor neutral.
Whenever a characteristic is undefined (zero denominator), it is NaN (or an
infinity in case of the L measure).
"""
from __future__ import annotations

import math
from enum import Enum
from typing import Any, Callable, Optional

import numpy as np

from vcdomlem import _helpers
from vcdomlem.exceptions import InvalidValueError, UnknownValueError
from vcdomlem.rule_conditions import RuleCoverageInformation


class RuleCharacteristic(Enum):
    SUPPORT = "support"
    STRENGTH = "strength"
    CONFIDENCE = "confidence"
    COVERAGE_FACTOR = "coverage-factor"
    COVERAGE = "coverage"
    NEGATIVE_COVERAGE = "negative-coverage"
    EPSILON = "epsilon"
    EPSILON_PRIME = "epsilon'"
    F_CONFIRMATION = "F"
    A_CONFIRMATION = "A"
    Z_CONFIRMATION = "Z"
    L_CONFIRMATION = "L"
    C1_CONFIRMATION = "c1"
    S_CONFIRMATION = "S"
    LENGTH = "length"

    @property
    def attribute_name(self) -> str:
        """Name of the attribute of RuleCharacteristics holding this characteristic"""
        return self.name.lower()

    def get_value(self, characteristics: RuleCharacteristics) -> Any:
        """Reads this characteristic from given characteristics

        Raises:
            TypeError: when characteristics are None
            UnknownValueError: when characteristic is not known
        """
        _helpers.not_none(characteristics, "Rule characteristics are null.")
        return getattr(characteristics, self.attribute_name)

    @staticmethod
    def of(name: str) -> RuleCharacteristic:
        """Finds characteristic by its name, ignoring case

        Raises:
            InvalidValueError: when there is no characteristic with given name
        """
        _helpers.not_none(name, "Name of rule characteristic is null.")
        normalized_name: str = name.strip().lower()
        for characteristic in RuleCharacteristic:
            if characteristic.value.lower() == normalized_name:
                return characteristic
        raise InvalidValueError(f'Unknown rule characteristic: "{name}"')


_UNBOUNDED = (None, None)

# allowed range of each characteristic, None means no limit
_RANGES: dict[RuleCharacteristic, tuple[Optional[float], Optional[float]]] = {
    RuleCharacteristic.SUPPORT: (0, None),
    RuleCharacteristic.STRENGTH: (0.0, 1.0),
    RuleCharacteristic.CONFIDENCE: (0.0, 1.0),
    RuleCharacteristic.COVERAGE_FACTOR: (0.0, 1.0),
    RuleCharacteristic.COVERAGE: (0, None),
    RuleCharacteristic.NEGATIVE_COVERAGE: (0, None),
    RuleCharacteristic.EPSILON: (0.0, None),
    RuleCharacteristic.EPSILON_PRIME: (0.0, 1.0),
    RuleCharacteristic.F_CONFIRMATION: (-1.0, 1.0),
    RuleCharacteristic.A_CONFIRMATION: (-1.0, 1.0),
    RuleCharacteristic.Z_CONFIRMATION: (-1.0, 1.0),
    RuleCharacteristic.L_CONFIRMATION: _UNBOUNDED,
    RuleCharacteristic.C1_CONFIRMATION: (-1.0, 1.0),
    RuleCharacteristic.S_CONFIRMATION: (-1.0, 1.0),
    RuleCharacteristic.LENGTH: (0, None),
}


class _CharacteristicField:
    """Descriptor exposing a single characteristic as a validated attribute"""

    def __init__(self, characteristic: RuleCharacteristic):
        self.characteristic: RuleCharacteristic = characteristic

    def __get__(self, instance: Optional[RuleCharacteristics], owner=None):
        if instance is None:
            return self
        return instance.get(self.characteristic)

    def __set__(self, instance: RuleCharacteristics, value: Any):
        instance.set(self.characteristic, value)


class RuleCharacteristics:
    """Characteristics of a single decision rule. Each characteristic is either
    known or unknown; reading an unknown characteristic raises
    :class:`UnknownValueError`.

    Example:
    >>> characteristics = RuleCharacteristics()
    >>> characteristics.support = 10
    >>> characteristics.coverage = 12
    >>> characteristics.confidence
    0.8333333333333334
    """

    support = _CharacteristicField(RuleCharacteristic.SUPPORT)
    strength = _CharacteristicField(RuleCharacteristic.STRENGTH)
    confidence = _CharacteristicField(RuleCharacteristic.CONFIDENCE)
    coverage_factor = _CharacteristicField(RuleCharacteristic.COVERAGE_FACTOR)
    coverage = _CharacteristicField(RuleCharacteristic.COVERAGE)
    negative_coverage = _CharacteristicField(RuleCharacteristic.NEGATIVE_COVERAGE)
    epsilon = _CharacteristicField(RuleCharacteristic.EPSILON)
    epsilon_prime = _CharacteristicField(RuleCharacteristic.EPSILON_PRIME)
    f_confirmation = _CharacteristicField(RuleCharacteristic.F_CONFIRMATION)
    a_confirmation = _CharacteristicField(RuleCharacteristic.A_CONFIRMATION)
    z_confirmation = _CharacteristicField(RuleCharacteristic.Z_CONFIRMATION)
    l_confirmation = _CharacteristicField(RuleCharacteristic.L_CONFIRMATION)
    c1_confirmation = _CharacteristicField(RuleCharacteristic.C1_CONFIRMATION)
    s_confirmation = _CharacteristicField(RuleCharacteristic.S_CONFIRMATION)
    length = _CharacteristicField(RuleCharacteristic.LENGTH)

    def __init__(self):
        self._values: dict[RuleCharacteristic, Any] = {}

    def get(self, characteristic: RuleCharacteristic) -> Any:
        if characteristic in self._values:
            return self._values[characteristic]
        value: Any = self._calculate(characteristic)
        if value is None:
            raise UnknownValueError(f"Value of {characteristic.value} is unknown.")
        return value

    def set(self, characteristic: RuleCharacteristic, value: Any):
        """Sets characteristic after checking its range. NaN is accepted as an
        undefined value.

        Raises:
            TypeError: when value is None
            InvalidValueError: when value is outside of allowed range
        """
        _helpers.not_none(value, f"Value of {characteristic.value} is null.")
        if isinstance(value, np.generic):
            value = value.item()
        if not (isinstance(value, float) and math.isnan(value)):
            lower, upper = _RANGES[characteristic]
            if (lower is not None and value < lower) or (
                upper is not None and value > upper
            ):
                raise InvalidValueError(
                    f"Value {value} of {characteristic.value} is outside of "
                    f"[{lower if lower is not None else '-inf'}, "
                    f"{upper if upper is not None else 'inf'}]."
                )
        self._values[characteristic] = value

    def is_set(self, characteristic: RuleCharacteristic) -> bool:
        try:
            self.get(characteristic)
        except UnknownValueError:
            return False
        return True

    def _calculate(self, characteristic: RuleCharacteristic) -> Any:
        """Derives value of a characteristic that was not set, None if impossible"""
        if characteristic == RuleCharacteristic.CONFIDENCE and all(
            c in self._values
            for c in (RuleCharacteristic.SUPPORT, RuleCharacteristic.COVERAGE)
        ):
            with np.errstate(divide="ignore", invalid="ignore"):
                return float(
                    np.float64(self._values[RuleCharacteristic.SUPPORT])
                    / np.float64(self._values[RuleCharacteristic.COVERAGE])
                )
        return None

    def __repr__(self) -> str:
        values: str = ", ".join(
            f"{characteristic.value}={value}"
            for characteristic, value in self._values.items()
        )
        return f"{self.__class__.__name__}({values})"


class ComputableRuleCharacteristics(RuleCharacteristics):
    """Characteristics calculated lazily from coverage information of a rule.
    Once calculated, a characteristic is cached.

    Args:
        rule_coverage_information (RuleCoverageInformation): objects covered by the
            rule together with its positive and neutral objects
        number_of_conditions (Optional[int], optional): length of the rule premise.
            Defaults to None meaning that length is unknown.
    """

    def __init__(
        self,
        rule_coverage_information: RuleCoverageInformation,
        number_of_conditions: Optional[int] = None,
    ):
        super().__init__()
        self.rule_coverage_information: RuleCoverageInformation = _helpers.not_none(
            rule_coverage_information, "Rule coverage information is null."
        )
        self.number_of_conditions: Optional[int] = number_of_conditions

        info: RuleCoverageInformation = rule_coverage_information
        self._positive_count: int = len(info.indices_of_positive_objects)
        self._negative_count: int = (
            info.all_objects_count
            - self._positive_count
            - len(info.indices_of_neutral_objects)
        )
        self._a: int = info.support
        self._c: int = info.negative_coverage
        self._b: int = self._positive_count - self._a
        self._d: int = self._negative_count - self._c

        self._calculators: dict[RuleCharacteristic, Callable[[], Any]] = {
            RuleCharacteristic.SUPPORT: lambda: self._a,
            RuleCharacteristic.STRENGTH: lambda: self._divide(
                self._a, info.all_objects_count
            ),
            RuleCharacteristic.CONFIDENCE: lambda: self._divide(
                self._a, self._a + self._c
            ),
            RuleCharacteristic.COVERAGE_FACTOR: lambda: self._divide(
                self._a, self._positive_count
            ),
            RuleCharacteristic.COVERAGE: lambda: len(info.indices_of_covered_objects),
            RuleCharacteristic.NEGATIVE_COVERAGE: lambda: self._c,
            RuleCharacteristic.EPSILON: lambda: self._divide(
                self._c, self._positive_count
            ),
            RuleCharacteristic.EPSILON_PRIME: lambda: self._divide(
                self._c, self._negative_count
            ),
            RuleCharacteristic.F_CONFIRMATION: self._calculate_f,
            RuleCharacteristic.A_CONFIRMATION: self._calculate_a,
            RuleCharacteristic.Z_CONFIRMATION: self._calculate_z,
            RuleCharacteristic.L_CONFIRMATION: self._calculate_l,
            RuleCharacteristic.C1_CONFIRMATION: self._calculate_c1,
            RuleCharacteristic.S_CONFIRMATION: self._calculate_s,
            RuleCharacteristic.LENGTH: lambda: self.number_of_conditions,
        }

    def calculate_all_characteristics(self):
        """Calculates and caches all characteristics that can be calculated"""
        for characteristic in RuleCharacteristic:
            self.is_set(characteristic)

    def _calculate(self, characteristic: RuleCharacteristic) -> Any:
        value: Any = self._calculators[characteristic]()
        if value is not None:
            # computed values are always within range, no need to validate
            self._values[characteristic] = value
        return value

    @staticmethod
    def _divide(numerator: float, denominator: float) -> float:
        with np.errstate(divide="ignore", invalid="ignore"):
            return float(np.float64(numerator) / np.float64(denominator))

    @property
    def _difference(self) -> int:
        return self._a * self._d - self._b * self._c

    def _calculate_f(self) -> float:
        a, b, c, d = self._a, self._b, self._c, self._d
        return self._divide(self._difference, a * d + b * c + 2 * a * c)

    def _calculate_z(self) -> float:
        a, b, c, d = self._a, self._b, self._c, self._d
        if self._difference >= 0:
            return self._divide(self._difference, (a + c) * (c + d))
        return self._divide(self._difference, (a + c) * (a + b))

    def _calculate_a(self) -> float:
        a, b, c, d = self._a, self._b, self._c, self._d
        if self._difference >= 0:
            return self._divide(self._difference, (a + b) * (b + d))
        return self._divide(self._difference, (a + b) * (a + c))

    def _calculate_l(self) -> float:
        a, b, c, d = self._a, self._b, self._c, self._d
        with np.errstate(divide="ignore", invalid="ignore"):
            return float(np.log(self._divide(a * (c + d), c * (a + b))))

    def _calculate_s(self) -> float:
        a, b, c, d = self._a, self._b, self._c, self._d
        return self._divide(a, a + c) - self._divide(b, b + d)

    def _calculate_c1(self) -> float:
        alpha: float = 0.5
        beta: float = 0.5
        if self._difference >= 0:
            if self._c == 0:
                return alpha + beta * self._calculate_a()
            return alpha * self._calculate_z()
        if self._a > 0:
            return alpha * self._calculate_z()
        return -alpha + beta * self._calculate_a()
